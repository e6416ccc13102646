import typing as t

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from common.models import TimeStampedModel
from events.provenance import ProvenanceRecord, dump_record, parse_records, validate_provenance

from .event import Event
from .mixins import LedgerCountersMixin


class TicketTierQuerySet(models.QuerySet["TicketTier"]):
    def active(self) -> "TicketTierQuerySet":
        return self.filter(is_active=True)


class TicketTier(LedgerCountersMixin, TimeStampedModel):
    LEDGER_FIELDS = ("available",)

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_tiers")
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    quantity = models.PositiveIntegerField(default=settings.DEFAULT_TIER_QUANTITY)
    available = models.PositiveIntegerField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    objects = TicketTierQuerySet.as_manager()

    class Meta:
        ordering = ["price", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(available__lte=F("quantity")),
                name="tier_available_within_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event.title} - {self.name}"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """A new tier starts with its whole allocation available."""
        if self._state.adding and self.available is None:
            self.available = self.quantity
        super().save(*args, **kwargs)

    @property
    def sold(self) -> int:
        return self.quantity - self.available


class TicketQuerySet(models.QuerySet["Ticket"]):
    def holding_capacity(self) -> "TicketQuerySet":
        """Tickets that occupy a seat in the ledger."""
        return self.filter(status__in=Ticket.HOLDING_STATUSES)

    def full(self) -> "TicketQuerySet":
        return self.select_related("event", "tier", "user", "payment")


class Ticket(TimeStampedModel):
    class TicketStatus(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED_NO_SHOW = "CANCELLED_NO_SHOW", "Cancelled (no-show)"
        CANCELLED_MANUAL = "CANCELLED_MANUAL", "Cancelled"
        REFUNDED = "REFUNDED", "Refunded"

    HOLDING_STATUSES: t.ClassVar[tuple[str, ...]] = (TicketStatus.PENDING, TicketStatus.CONFIRMED)
    CANCELLED_STATUSES: t.ClassVar[tuple[str, ...]] = (
        TicketStatus.CANCELLED_NO_SHOW,
        TicketStatus.CANCELLED_MANUAL,
    )

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tickets")
    tier = models.ForeignKey(
        TicketTier, on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    payment = models.ForeignKey(
        "Payment", on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    status = models.CharField(
        max_length=20, choices=TicketStatus.choices, default=TicketStatus.PENDING, db_index=True
    )
    ticket_type = models.CharField(max_length=150, default="General")
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    order_number = models.CharField(max_length=40, db_index=True)
    attendee_name = models.CharField(max_length=255, blank=True, default="")
    attendee_email = models.EmailField(blank=True, default="")
    promo_code = models.CharField(max_length=50, blank=True, default="")
    discount = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    provenance = models.JSONField(default=list, blank=True, validators=[validate_provenance])

    objects = TicketQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "tier", "status"], name="ticket_event_tier_status"),
        ]

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"

    @property
    def qr_code(self) -> str:
        """The QR code encodes the ticket id itself."""
        return str(self.id)

    @property
    def holds_capacity(self) -> bool:
        return self.status in self.HOLDING_STATUSES

    @property
    def is_no_show(self) -> bool:
        return self.status == self.TicketStatus.CANCELLED_NO_SHOW

    def provenance_records(self) -> list[ProvenanceRecord]:
        return parse_records(self.provenance)

    def add_provenance(self, record: ProvenanceRecord) -> None:
        self.provenance = [*self.provenance, dump_record(record)]


class Payment(TimeStampedModel):
    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        REFUNDED = "REFUNDED", "Refunded"

    class PaymentMethod(models.TextChoices):
        CARD = "card", "Card"
        WAITLIST_PROMOTION = "waitlist_promotion", "Waitlist promotion"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="payments")
    ticket = models.ForeignKey(Ticket, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    stripe_payment_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    method = models.CharField(max_length=30, choices=PaymentMethod.choices, default=PaymentMethod.CARD)
    status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )
    order_number = models.CharField(max_length=40, unique=True)
    quantity = models.PositiveIntegerField(default=1)
    refund_id = models.CharField(max_length=255, blank=True, default="")
    refunded_at = models.DateTimeField(null=True, blank=True)
    refund_reason = models.CharField(max_length=255, blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.order_number} {self.amount} {self.currency} ({self.status})"
