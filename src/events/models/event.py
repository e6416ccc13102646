import typing as t
from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel

from .mixins import LedgerCountersMixin

if t.TYPE_CHECKING:
    from accounts.models import EventifyUser


class EventQuerySet(models.QuerySet["Event"]):
    def public(self) -> "EventQuerySet":
        """Events visible to everyone."""
        return self.filter(status__in=[Event.EventStatus.PUBLISHED, Event.EventStatus.LIVE])

    def managed_by(self, user: "EventifyUser") -> "EventQuerySet":
        """Events the user may manage: all of them for admins, their own for organizers."""
        if user.is_admin:
            return self.all()
        return self.filter(organizer=user)

    def expired_live(self, now: datetime | None = None) -> "EventQuerySet":
        """LIVE events whose end date has passed."""
        return self.filter(status=Event.EventStatus.LIVE, end_date__lt=now or timezone.now())


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db)

    def public(self) -> EventQuerySet:
        return self.get_queryset().public()

    def managed_by(self, user: "EventifyUser") -> EventQuerySet:
        return self.get_queryset().managed_by(user)


class Event(LedgerCountersMixin, TimeStampedModel):
    class EventStatus(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"
        LIVE = "LIVE", "Live"
        ENDED = "ENDED", "Ended"
        CANCELLED = "CANCELLED", "Cancelled"

    LEDGER_FIELDS = ("current_bookings",)

    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events"
    )
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField(db_index=True)
    max_attendees = models.PositiveIntegerField(default=100)
    current_bookings = models.PositiveIntegerField(default=0)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    status = models.CharField(max_length=20, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)

    objects = EventManager()

    class Meta:
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_bookings__lte=F("max_attendees")),
                name="event_bookings_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """An event cannot end before it starts."""
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": ["The event cannot end before it starts."]})

    @property
    def spots_left(self) -> int:
        return max(self.max_attendees - self.current_bookings, 0)

    @property
    def is_full(self) -> bool:
        return self.current_bookings >= self.max_attendees

    def computed_status(self, now: datetime | None = None) -> str:
        """Status as seen by clients.

        A LIVE event whose end date has passed is reported as ENDED even before the
        periodic sweep has persisted it.
        """
        if self.status == self.EventStatus.LIVE and self.end_date < (now or timezone.now()):
            return self.EventStatus.ENDED
        return self.status

    def can_be_managed_by(self, user: "EventifyUser") -> bool:
        return user.is_authenticated and (user.is_admin or self.organizer_id == user.pk)
