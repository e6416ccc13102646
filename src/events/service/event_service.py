"""Event lifecycle: create, update, publish, cancel, attendee reminders and the end-of-event sweep."""

import typing as t
from datetime import datetime

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import CapacityExceededError, InvalidStateTransitionError, UnauthorizedError
from events.models import Event, Ticket
from events.service.access import assert_can_manage
from notifications.service.notification_helpers import notify_event_reminder

logger = structlog.get_logger(__name__)

_EDITABLE_FIELDS = ("title", "description", "location", "start_date", "end_date", "price", "currency")


def create_event(organizer: EventifyUser, **data: t.Any) -> Event:
    """Create a DRAFT event owned by ``organizer``.

    Raises:
        UnauthorizedError: The user is neither an organizer nor an admin.
    """
    if not organizer.is_organizer:
        raise UnauthorizedError(_("Only organizers can create events."))
    event = Event.objects.create(organizer=organizer, status=Event.EventStatus.DRAFT, **data)
    logger.info("event_created", event_id=str(event.id), organizer_id=str(organizer.id))
    return event


@transaction.atomic
def update_event(event: Event, actor: EventifyUser, **changes: t.Any) -> Event:
    """Update event details.

    Raises:
        CapacityExceededError: ``max_attendees`` would drop below the current bookings.
    """
    assert_can_manage(event, actor)

    max_attendees = changes.pop("max_attendees", None)
    if max_attendees is not None and max_attendees != event.max_attendees:
        updated = Event.objects.filter(pk=event.pk, current_bookings__lte=max_attendees).update(
            max_attendees=max_attendees
        )
        event.refresh_from_db(fields=["max_attendees", "current_bookings"])
        if not updated:
            raise CapacityExceededError(
                _("Capacity cannot be lower than the %(count)d seats already booked.")
                % {"count": event.current_bookings}
            )

    fields = [field for field in _EDITABLE_FIELDS if field in changes]
    for field in fields:
        setattr(event, field, changes[field])
    if fields:
        event.save(update_fields=[*fields, "updated_at"])

    logger.info("event_updated", event_id=str(event.id), fields=fields)
    return event


def publish_event(event: Event, actor: EventifyUser) -> Event:
    """Open the event for booking.

    Raises:
        InvalidStateTransitionError: The event is cancelled, ended, or past its end date.
    """
    assert_can_manage(event, actor)
    if event.status not in (Event.EventStatus.DRAFT, Event.EventStatus.PUBLISHED):
        raise InvalidStateTransitionError(
            _("A %(status)s event cannot be published.") % {"status": event.get_status_display().lower()}
        )
    if event.end_date < timezone.now():
        raise InvalidStateTransitionError(_("The event has already ended."))

    event.status = Event.EventStatus.LIVE
    event.save(update_fields=["status", "updated_at"])
    logger.info("event_published", event_id=str(event.id))
    return event


def cancel_event(event: Event, actor: EventifyUser) -> Event:
    """Raises InvalidStateTransitionError for ended or already cancelled events."""
    assert_can_manage(event, actor)
    if event.status in (Event.EventStatus.ENDED, Event.EventStatus.CANCELLED):
        raise InvalidStateTransitionError(
            _("A %(status)s event cannot be cancelled.") % {"status": event.get_status_display().lower()}
        )
    event.status = Event.EventStatus.CANCELLED
    event.save(update_fields=["status", "updated_at"])
    logger.info("event_cancelled", event_id=str(event.id))
    return event


def close_expired_events(now: datetime | None = None) -> int:
    """Move LIVE events past their end date to ENDED. Safe to run repeatedly."""
    count = Event.objects.expired_live(now).update(status=Event.EventStatus.ENDED, updated_at=timezone.now())
    logger.info("expired_events_closed", count=count)
    return count


def send_reminder(event: Event, actor: EventifyUser, message: str = "") -> int:
    """Remind every attendee holding a confirmed ticket. Returns how many users were notified.

    Raises:
        UnauthorizedError: The actor cannot manage the event.
        InvalidStateTransitionError: The event was cancelled or has ended.
    """
    assert_can_manage(event, actor)
    if event.computed_status() in (Event.EventStatus.CANCELLED, Event.EventStatus.ENDED):
        raise InvalidStateTransitionError(_("Reminders cannot be sent for cancelled or ended events."))

    users = list(
        EventifyUser.objects.filter(tickets__event=event, tickets__status=Ticket.TicketStatus.CONFIRMED).distinct()
    )
    notify_event_reminder(event, users, message)
    logger.info("event_reminder_sent", event_id=str(event.id), actor_id=str(actor.id), recipients=len(users))
    return len(users)
