"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types in the system."""

    # Ticket notifications
    TICKET_PURCHASED = "ticket_purchased", "Ticket purchased"
    TICKET_REFUNDED = "ticket_refunded", "Ticket refunded"
    TICKET_CANCELLED = "ticket_cancelled", "Ticket cancelled"
    TICKET_NO_SHOW = "ticket_no_show", "Ticket marked as no-show"
    TICKET_RESTORED = "ticket_restored", "Ticket restored"

    # Waitlist notifications
    WAITLIST_PROMOTED = "waitlist_promoted", "Promoted from waitlist"
    WAITLIST_PROMOTION_ORGANIZER = "waitlist_promotion_organizer", "Waitlist promotion (organizer)"
    WAITLIST_REJECTED = "waitlist_rejected", "Waitlist request rejected"

    # Event notifications
    EVENT_REMINDER = "event_reminder", "Event reminder"


class DeliveryChannel(TextChoices):
    """Available delivery channels."""

    IN_APP = "in_app", "In-app"
    EMAIL = "email", "Email"


class DeliveryStatus(TextChoices):
    """Delivery status for notification channels."""

    PENDING = "pending", "Pending"
    SENT = "sent", "Sent"
    FAILED = "failed", "Failed"
    SKIPPED = "skipped", "Skipped"
