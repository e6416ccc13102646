"""Rendering of notification titles and bodies."""

import typing as t
from abc import ABC, abstractmethod
from datetime import datetime

from django.utils.formats import date_format
from django.utils.timezone import localtime
from django.utils.translation import gettext as _
from django.utils.translation import ngettext

from notifications.enums import NotificationType
from notifications.models import Notification


class NotificationTemplate(ABC):
    """Renders one notification type for the in-app and email channels."""

    @abstractmethod
    def get_title(self, notification: Notification) -> str:
        pass

    @abstractmethod
    def get_body(self, notification: Notification) -> str:
        pass

    def get_email_subject(self, notification: Notification) -> str:
        """Defaults to the in-app title."""
        return self.get_title(notification)

    def get_email_body(self, notification: Notification) -> str:
        body = self.get_body(notification)
        if url := notification.context.get("frontend_url"):
            body = f"{body}\n\n{url}"
        return body

    @staticmethod
    def ctx(notification: Notification) -> dict[str, t.Any]:
        return notification.context


class TicketPurchasedTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Your tickets for %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        return ngettext(
            "Your order %(order)s with %(count)d ticket is confirmed. Total: %(amount)s %(currency)s.",
            "Your order %(order)s with %(count)d tickets is confirmed. Total: %(amount)s %(currency)s.",
            ctx["quantity"],
        ) % {
            "order": ctx["order_number"],
            "count": ctx["quantity"],
            "amount": ctx["total_amount"],
            "currency": ctx["currency"],
        }


class TicketRefundedTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Refund processed for %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        return _("We refunded %(amount)s %(currency)s for order %(order)s.") % {
            "amount": ctx["amount"],
            "currency": ctx["currency"],
            "order": ctx["order_number"],
        }


class TicketCancelledTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Ticket cancelled for %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        body = _("Your ticket for %(event)s has been cancelled.") % {"event": ctx["event_title"]}
        if reason := ctx.get("reason"):
            body = f"{body} {_('Reason')}: {reason}"
        return body


class TicketNoShowTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Marked as no-show for %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        return _(
            "The organizer marked your ticket for %(event)s as a no-show and released your seat. "
            "Contact the organizer if this is a mistake."
        ) % {"event": self.ctx(notification)["event_title"]}


class TicketRestoredTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Your ticket for %(event)s was restored") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        return _("Your ticket for %(event)s is confirmed again.") % {"event": self.ctx(notification)["event_title"]}


class WaitlistPromotedTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("You've Been Promoted!")

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        return ngettext(
            "A spot opened up for %(event)s and you got it: %(count)d %(tier)s ticket is now confirmed.",
            "Spots opened up for %(event)s and you got them: %(count)d %(tier)s tickets are now confirmed.",
            ctx["quantity"],
        ) % {"event": ctx["event_title"], "count": ctx["quantity"], "tier": ctx["tier_name"]}

    def get_email_subject(self, notification: Notification) -> str:
        return _("You're in: %(event)s") % {"event": self.ctx(notification)["event_title"]}


class WaitlistPromotionOrganizerTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Waitlist User Promoted")

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        body = _("%(user)s was promoted from the %(tier)s waitlist of %(event)s") % {
            "user": ctx["promoted_user_name"],
            "tier": ctx["tier_name"],
            "event": ctx["event_title"],
        }
        if replaced := ctx.get("replaced_attendee_name"):
            body = f"{body} " + _("(replacing %(name)s)") % {"name": replaced}
        return f"{body}."


class WaitlistRejectedTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Waitlist update for %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        body = _("Your request for %(tier)s tickets was not approved.") % {"tier": ctx["tier_name"]}
        if notes := ctx.get("notes"):
            body = f"{body} {notes}"
        return body


class EventReminderTemplate(NotificationTemplate):
    def get_title(self, notification: Notification) -> str:
        return _("Reminder: %(event)s") % {"event": self.ctx(notification)["event_title"]}

    def get_body(self, notification: Notification) -> str:
        ctx = self.ctx(notification)
        if message := ctx.get("message"):
            return str(message)
        start = datetime.fromisoformat(ctx["start_date"])
        return _("Don't forget about %(event)s! It starts on %(date)s.") % {
            "event": ctx["event_title"],
            "date": date_format(localtime(start), "DATETIME_FORMAT"),
        }


_TEMPLATES: dict[NotificationType, NotificationTemplate] = {
    NotificationType.TICKET_PURCHASED: TicketPurchasedTemplate(),
    NotificationType.TICKET_REFUNDED: TicketRefundedTemplate(),
    NotificationType.TICKET_CANCELLED: TicketCancelledTemplate(),
    NotificationType.TICKET_NO_SHOW: TicketNoShowTemplate(),
    NotificationType.TICKET_RESTORED: TicketRestoredTemplate(),
    NotificationType.WAITLIST_PROMOTED: WaitlistPromotedTemplate(),
    NotificationType.WAITLIST_PROMOTION_ORGANIZER: WaitlistPromotionOrganizerTemplate(),
    NotificationType.WAITLIST_REJECTED: WaitlistRejectedTemplate(),
    NotificationType.EVENT_REMINDER: EventReminderTemplate(),
}


def get_template(notification_type: NotificationType | str) -> NotificationTemplate:
    """Get the template for a notification type.

    Raises:
        ValueError: If no template is registered
    """
    template = _TEMPLATES.get(NotificationType(notification_type))
    if not template:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template
