"""Helpers that request ticketing notifications.

Every helper defers the request until the surrounding transaction commits, so a rolled-back
booking or no-show never notifies anyone. Delivery is best effort: failures are logged and
never reach the caller.
"""

import typing as t
from collections.abc import Iterable

import structlog
from django.conf import settings
from django.db import transaction

from accounts.models import EventifyUser
from events.models import Event, Payment, Ticket, WaitlistEntry
from notifications.enums import NotificationType
from notifications.signals import notification_requested

logger = structlog.get_logger(__name__)


def event_url(event: Event) -> str:
    return f"{settings.FRONTEND_BASE_URL}/events/{event.id}"


def _base_context(event: Event) -> dict[str, t.Any]:
    return {"event_id": str(event.id), "event_title": event.title, "frontend_url": event_url(event)}


def _send(notification_type: NotificationType, user: EventifyUser, context: dict[str, t.Any]) -> None:
    try:
        notification_requested.send(
            sender=_send,
            notification_type=notification_type,
            user=user,
            context=context,
        )
    except Exception:
        logger.exception("notification_send_failed", notification_type=notification_type, user_id=str(user.id))


def request_notification(notification_type: NotificationType, user: EventifyUser, context: dict[str, t.Any]) -> None:
    """Send the notification once the current transaction commits."""
    transaction.on_commit(lambda: _send(notification_type, user, context))


def notify_ticket_purchased(payment: Payment, tickets: Iterable[Ticket]) -> None:
    tickets = list(tickets)
    context = {
        **_base_context(payment.event),
        "order_number": payment.order_number,
        "quantity": len(tickets),
        "ticket_ids": [str(ticket.id) for ticket in tickets],
        "total_amount": str(payment.amount),
        "currency": payment.currency,
    }
    if tickets and tickets[0].tier is not None:
        context["tier_name"] = tickets[0].tier.name
    request_notification(NotificationType.TICKET_PURCHASED, payment.user, context)


def notify_ticket_refunded(payment: Payment, ticket_count: int) -> None:
    context = {
        **_base_context(payment.event),
        "order_number": payment.order_number,
        "refund_id": payment.refund_id,
        "amount": str(payment.amount),
        "currency": payment.currency,
        "ticket_count": ticket_count,
    }
    request_notification(NotificationType.TICKET_REFUNDED, payment.user, context)


def notify_ticket_cancelled(ticket: Ticket, reason: str = "") -> None:
    context = {**_base_context(ticket.event), "ticket_id": str(ticket.id)}
    if reason:
        context["reason"] = reason
    request_notification(NotificationType.TICKET_CANCELLED, ticket.user, context)


def notify_ticket_no_show(ticket: Ticket) -> None:
    context = {**_base_context(ticket.event), "ticket_id": str(ticket.id)}
    request_notification(NotificationType.TICKET_NO_SHOW, ticket.user, context)


def notify_ticket_restored(ticket: Ticket) -> None:
    context = {**_base_context(ticket.event), "ticket_id": str(ticket.id)}
    request_notification(NotificationType.TICKET_RESTORED, ticket.user, context)


def notify_waitlist_promoted(
    entry: WaitlistEntry, tickets: Iterable[Ticket], replaced_ticket: Ticket | None = None
) -> None:
    """Tell the promoted user, and the organizer, about a waitlist promotion."""
    tickets = list(tickets)
    base = {**_base_context(entry.event), "waitlist_entry_id": str(entry.id), "tier_name": entry.tier.name}

    request_notification(
        NotificationType.WAITLIST_PROMOTED,
        entry.user,
        {**base, "ticket_ids": [str(ticket.id) for ticket in tickets], "quantity": len(tickets)},
    )

    organizer_context = {**base, "promoted_user_name": entry.user.display_name}
    if replaced_ticket is not None:
        organizer_context["replaced_attendee_name"] = replaced_ticket.attendee_name or replaced_ticket.user.display_name
    request_notification(NotificationType.WAITLIST_PROMOTION_ORGANIZER, entry.event.organizer, organizer_context)


def notify_waitlist_rejected(entry: WaitlistEntry) -> None:
    context = {**_base_context(entry.event), "waitlist_entry_id": str(entry.id), "tier_name": entry.tier.name}
    if entry.notes:
        context["notes"] = entry.notes
    request_notification(NotificationType.WAITLIST_REJECTED, entry.user, context)


def notify_event_reminder(event: Event, users: Iterable[EventifyUser], message: str = "") -> None:
    context = {**_base_context(event), "start_date": event.start_date.isoformat()}
    if message:
        context["message"] = message
    for user in users:
        request_notification(NotificationType.EVENT_REMINDER, user, context)
