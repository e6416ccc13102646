"""Context schemas for notifications.

Each notification type has a TypedDict describing the context it is rendered from.
Required keys are checked at runtime when the notification is created.
"""

import typing as t

from notifications.enums import NotificationType


class BaseNotificationContext(t.TypedDict, total=False):
    """Base context for all notifications."""

    frontend_url: str
    event_id: t.Required[str]
    event_title: t.Required[str]


class TicketPurchasedContext(BaseNotificationContext):
    order_number: t.Required[str]
    quantity: t.Required[int]
    ticket_ids: t.Required[list[str]]
    total_amount: t.Required[str]
    currency: t.Required[str]
    tier_name: str


class TicketRefundedContext(BaseNotificationContext):
    order_number: t.Required[str]
    refund_id: t.Required[str]
    amount: t.Required[str]
    currency: t.Required[str]
    ticket_count: int


class TicketCancelledContext(BaseNotificationContext):
    ticket_id: t.Required[str]
    reason: str


class TicketNoShowContext(BaseNotificationContext):
    ticket_id: t.Required[str]


class TicketRestoredContext(BaseNotificationContext):
    ticket_id: t.Required[str]


class WaitlistPromotedContext(BaseNotificationContext):
    waitlist_entry_id: t.Required[str]
    tier_name: t.Required[str]
    ticket_ids: t.Required[list[str]]
    quantity: t.Required[int]


class WaitlistPromotionOrganizerContext(BaseNotificationContext):
    waitlist_entry_id: t.Required[str]
    tier_name: t.Required[str]
    promoted_user_name: t.Required[str]
    replaced_attendee_name: str


class WaitlistRejectedContext(BaseNotificationContext):
    waitlist_entry_id: t.Required[str]
    tier_name: t.Required[str]
    notes: str


class EventReminderContext(BaseNotificationContext):
    start_date: t.Required[str]
    message: str


NOTIFICATION_CONTEXT_SCHEMAS: dict[NotificationType, type[BaseNotificationContext]] = {
    NotificationType.TICKET_PURCHASED: TicketPurchasedContext,
    NotificationType.TICKET_REFUNDED: TicketRefundedContext,
    NotificationType.TICKET_CANCELLED: TicketCancelledContext,
    NotificationType.TICKET_NO_SHOW: TicketNoShowContext,
    NotificationType.TICKET_RESTORED: TicketRestoredContext,
    NotificationType.WAITLIST_PROMOTED: WaitlistPromotedContext,
    NotificationType.WAITLIST_PROMOTION_ORGANIZER: WaitlistPromotionOrganizerContext,
    NotificationType.WAITLIST_REJECTED: WaitlistRejectedContext,
    NotificationType.EVENT_REMINDER: EventReminderContext,
}


def validate_notification_context(notification_type: NotificationType, context: dict[str, t.Any]) -> None:
    """Validate that context matches expected schema for notification type.

    Raises:
        ValueError: If context is invalid or notification type has no schema
    """
    schema = NOTIFICATION_CONTEXT_SCHEMAS.get(notification_type)
    if schema is None:
        raise ValueError(f"No schema defined for notification type: {notification_type}")

    required_keys: set[str] = set(getattr(schema, "__required_keys__", set()))
    missing_keys = required_keys - context.keys()

    if missing_keys:
        raise ValueError(f"Missing required context keys for {notification_type}: {sorted(missing_keys)}")
