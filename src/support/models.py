import typing as t

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import EventifyUser


class SupportTicketQuerySet(models.QuerySet["SupportTicket"]):
    def full(self) -> "SupportTicketQuerySet":
        return self.select_related("user", "assigned_to").prefetch_related("replies__user")


class SupportTicket(TimeStampedModel):
    class Category(models.TextChoices):
        GENERAL = "general", "General"
        PAYMENT = "payment", "Payment"
        TICKETS = "tickets", "Tickets"
        ACCOUNT = "account", "Account"
        TECHNICAL = "technical", "Technical"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        IN_PROGRESS = "in_progress", "In progress"
        RESOLVED = "resolved", "Resolved"
        CLOSED = "closed", "Closed"

    FINAL_STATUSES: t.ClassVar[tuple[str, ...]] = (Status.RESOLVED, Status.CLOSED)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="support_tickets")
    subject = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.GENERAL, db_index=True)
    priority = models.CharField(max_length=20, choices=Priority.choices, default=Priority.MEDIUM)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN, db_index=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_support_tickets",
    )
    resolution = models.TextField(blank=True, default="")
    resolved_at = models.DateTimeField(null=True, blank=True)

    objects = SupportTicketQuerySet.as_manager()

    class Meta(TimeStampedModel.Meta):
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.subject} ({self.status})"

    def is_visible_to(self, user: "EventifyUser") -> bool:
        """The author and admins only."""
        return self.user_id == user.pk or user.is_admin


class SupportTicketReply(TimeStampedModel):
    ticket = models.ForeignKey(SupportTicket, on_delete=models.CASCADE, related_name="replies")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="support_replies")
    message = models.TextField()
    is_admin_reply = models.BooleanField(default=False)

    class Meta(TimeStampedModel.Meta):
        ordering = ["created_at"]
        verbose_name_plural = "support ticket replies"

    def __str__(self) -> str:
        return f"Reply to {self.ticket_id} by {self.user_id}"
