from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel

from .event import Event
from .ticket import Ticket, TicketTier


class WaitlistEntryQuerySet(models.QuerySet["WaitlistEntry"]):
    def pending(self) -> "WaitlistEntryQuerySet":
        return self.filter(status=WaitlistEntry.Status.PENDING)

    def fifo(self) -> "WaitlistEntryQuerySet":
        """First come, first served."""
        return self.order_by("requested_at", "id")


class WaitlistEntry(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="waitlist_entries")
    tier = models.ForeignKey(TicketTier, on_delete=models.CASCADE, related_name="waitlist_entries")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="waitlist_entries")
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    requested_at = models.DateTimeField(default=timezone.now, db_index=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    ticket = models.ForeignKey(Ticket, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")

    objects = WaitlistEntryQuerySet.as_manager()

    class Meta:
        ordering = ["requested_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user", "tier"], name="unique_waitlist_entry_per_tier"),
        ]
        indexes = [
            models.Index(fields=["event", "tier", "status", "requested_at"], name="waitlist_queue_order"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} waiting for {self.tier_id} ({self.status})"
