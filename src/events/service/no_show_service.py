"""No-show workflow: free the seat, hand it to the waitlist, or restore the ticket."""

import typing as t

import structlog
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import AlreadyCancelledError, CapacityExceededError, InvalidStateTransitionError
from events.models import Event, Ticket, WaitlistEntry
from events.provenance import NoShowRecord, RestoreRecord
from events.service import inventory_ledger, waitlist_service
from events.service.access import assert_can_manage
from notifications.service.notification_helpers import notify_ticket_no_show, notify_ticket_restored

logger = structlog.get_logger(__name__)


class NoShowResult(t.NamedTuple):
    ticket: Ticket
    promoted_entry: WaitlistEntry | None = None
    promoted_ticket: Ticket | None = None


@transaction.atomic
def mark_no_show(ticket: Ticket, actor: EventifyUser) -> NoShowResult:
    """Cancel a ticket as a no-show and promote the next waitlisted user into the seat.

    With a pending waitlist entry for the ticket's tier the counters end where they started;
    without one, or when the tier was withdrawn from sale, the seat goes back to the tier and
    the event and the waitlist is left untouched.

    Raises:
        UnauthorizedError: The actor cannot manage the event.
        AlreadyCancelledError: The ticket is already cancelled.
        AlreadyReleasedError: The ticket was refunded.
    """
    locked = inventory_ledger.lock_ticket(ticket)
    assert_can_manage(locked.event, actor)
    if locked.status in Ticket.CANCELLED_STATUSES:
        raise AlreadyCancelledError()

    released = inventory_ledger.release_ticket(
        locked,
        status=Ticket.TicketStatus.CANCELLED_NO_SHOW,
        record=NoShowRecord(marked_by=actor.id, marked_at=timezone.now()),
    )
    logger.info("ticket_marked_no_show", ticket_id=str(released.id), actor_id=str(actor.id))
    notify_ticket_no_show(released)

    if released.tier is None:
        return NoShowResult(ticket=released)
    if not released.tier.is_active:
        logger.info(
            "no_show_promotion_skipped_inactive_tier", ticket_id=str(released.id), tier_id=str(released.tier_id)
        )
        return NoShowResult(ticket=released)

    entry = waitlist_service.next_pending(released.event, released.tier)
    if entry is None:
        logger.info("no_show_seat_released", ticket_id=str(released.id), tier_id=str(released.tier_id))
        return NoShowResult(ticket=released)

    promoted = waitlist_service.promote(entry, seats=1, actor=actor, replaced_ticket=released)
    return NoShowResult(ticket=released, promoted_entry=entry, promoted_ticket=promoted[0])


@transaction.atomic
def restore_ticket(ticket: Ticket, actor: EventifyUser) -> Ticket:
    """Bring a no-show ticket back while the event still has room.

    Raises:
        UnauthorizedError: The actor cannot manage the event.
        InvalidStateTransitionError: The ticket is not a no-show.
        CapacityExceededError: The event is at capacity; the ticket stays cancelled.
        TierSoldOutError: The ticket's tier has no seats left.
    """
    locked = inventory_ledger.lock_ticket(ticket)
    assert_can_manage(locked.event, actor)
    if locked.status != Ticket.TicketStatus.CANCELLED_NO_SHOW:
        raise InvalidStateTransitionError(_("Only no-show tickets can be restored."))

    if not Event.objects.filter(pk=locked.event_id, current_bookings__lt=F("max_attendees")).exists():
        raise CapacityExceededError(_("Cannot restore ticket: the event is at full capacity."))

    inventory_ledger.reserve(locked.event, locked.tier, 1)
    locked.status = Ticket.TicketStatus.CONFIRMED
    locked.add_provenance(RestoreRecord(restored_by=actor.id, restored_at=timezone.now()))
    locked.save(update_fields=["status", "provenance", "updated_at"])

    logger.info("ticket_restored", ticket_id=str(locked.id), actor_id=str(actor.id))
    notify_ticket_restored(locked)
    return locked
