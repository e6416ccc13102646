"""Inventory ledger.

The only code allowed to mutate ``Event.current_bookings`` and ``TicketTier.available``.
Every mutation is a conditional UPDATE: the precondition is part of the WHERE clause, so the
database re-checks it under the row lock and two concurrent callers can never both succeed
against the same pre-image. A zero row count means the precondition failed.
"""

from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F
from django.utils.translation import gettext as _

from events.exceptions import (
    AlreadyReleasedError,
    CapacityExceededError,
    NotFoundError,
    TierSoldOutError,
)
from events.models import Event, Ticket, TicketTier
from events.provenance import ProvenanceRecord

logger = structlog.get_logger(__name__)

RELEASED_STATUSES: tuple[str, ...] = (
    Ticket.TicketStatus.CANCELLED_NO_SHOW,
    Ticket.TicketStatus.CANCELLED_MANUAL,
    Ticket.TicketStatus.REFUNDED,
)


def _assert_quantity(quantity: int) -> None:
    if quantity < 1:
        raise ValueError(f"Quantity must be positive, got {quantity}.")


def _assert_tier_belongs_to_event(event: Event, tier: TicketTier | None) -> None:
    if tier is not None and tier.event_id != event.pk:
        raise NotFoundError(_("Ticket tier not found for this event."))


def _tier_unavailable(tier: TicketTier) -> TierSoldOutError | NotFoundError:
    current = TicketTier.objects.filter(pk=tier.pk).values("is_active", "available", "name").first()
    if current is None:
        return NotFoundError(_("Ticket tier not found."))
    if not current["is_active"]:
        return TierSoldOutError(_("The %(tier)s tier is no longer on sale.") % {"tier": current["name"]})
    return TierSoldOutError(
        _("Only %(available)d tickets available for the %(tier)s tier.")
        % {"available": current["available"], "tier": current["name"]}
    )


def _capacity_exceeded(event: Event) -> CapacityExceededError | NotFoundError:
    current = Event.objects.filter(pk=event.pk).values("max_attendees", "current_bookings").first()
    if current is None:
        return NotFoundError(_("Event not found."))
    spots = max(current["max_attendees"] - current["current_bookings"], 0)
    return CapacityExceededError(_("Only %(spots)d spots left for this event.") % {"spots": spots})


def _refresh(event: Event, tier: TicketTier | None) -> None:
    event.refresh_from_db(fields=["current_bookings"])
    if tier is not None:
        tier.refresh_from_db(fields=["available"])


def check_availability(event: Event, tier: TicketTier | None, quantity: int) -> None:
    """Read-only pre-check with Reserve semantics. Nothing is held.

    Used before taking a payment; the booking transaction re-validates atomically.

    Raises:
        TierSoldOutError: The tier is inactive or has fewer than ``quantity`` tickets left.
        CapacityExceededError: The event cannot take ``quantity`` more attendees.
    """
    _assert_quantity(quantity)
    _assert_tier_belongs_to_event(event, tier)
    if tier is not None and not TicketTier.objects.filter(pk=tier.pk, is_active=True, available__gte=quantity).exists():
        raise _tier_unavailable(tier)
    if not Event.objects.filter(pk=event.pk, current_bookings__lte=F("max_attendees") - quantity).exists():
        raise _capacity_exceeded(event)


@transaction.atomic
def reserve(event: Event, tier: TicketTier | None, quantity: int) -> None:
    """Take ``quantity`` seats from the tier and the event.

    The tier is checked first, then the event; if the event is full the tier decrement is
    rolled back with the surrounding savepoint, so no partial reservation survives.
    Without a tier only the event counter moves (general admission).

    Raises:
        TierSoldOutError: The tier is inactive or has fewer than ``quantity`` tickets left.
        CapacityExceededError: ``current_bookings + quantity`` would exceed ``max_attendees``.
    """
    _assert_quantity(quantity)
    _assert_tier_belongs_to_event(event, tier)

    if tier is not None:
        updated = TicketTier.objects.filter(pk=tier.pk, is_active=True, available__gte=quantity).update(
            available=F("available") - quantity
        )
        if not updated:
            logger.info("ledger_reserve_rejected", reason="tier", event_id=str(event.pk), tier_id=str(tier.pk))
            raise _tier_unavailable(tier)

    updated = Event.objects.filter(pk=event.pk, current_bookings__lte=F("max_attendees") - quantity).update(
        current_bookings=F("current_bookings") + quantity
    )
    if not updated:
        logger.info("ledger_reserve_rejected", reason="event", event_id=str(event.pk), quantity=quantity)
        raise _capacity_exceeded(event)

    _refresh(event, tier)
    logger.info(
        "ledger_reserved",
        event_id=str(event.pk),
        tier_id=str(tier.pk) if tier else None,
        quantity=quantity,
        current_bookings=event.current_bookings,
        tier_available=tier.available if tier else None,
    )


@transaction.atomic
def release(event: Event, tier: TicketTier | None, quantity: int) -> None:
    """Give ``quantity`` seats back to the tier and the event.

    Refuses to push ``available`` above the tier's allocation or ``current_bookings`` below
    zero: either would mean the seat was already given back.

    Raises:
        AlreadyReleasedError: The counters have nothing left to release.
    """
    _assert_quantity(quantity)
    _assert_tier_belongs_to_event(event, tier)

    if tier is not None:
        updated = TicketTier.objects.filter(pk=tier.pk, available__lte=F("quantity") - quantity).update(
            available=F("available") + quantity
        )
        if not updated:
            logger.error("ledger_release_rejected", reason="tier", event_id=str(event.pk), tier_id=str(tier.pk))
            raise AlreadyReleasedError(_("All tickets of this tier are already available."))

    updated = Event.objects.filter(pk=event.pk, current_bookings__gte=quantity).update(
        current_bookings=F("current_bookings") - quantity
    )
    if not updated:
        logger.error("ledger_release_rejected", reason="event", event_id=str(event.pk), quantity=quantity)
        raise AlreadyReleasedError(_("The event has no bookings left to release."))

    _refresh(event, tier)
    logger.info(
        "ledger_released",
        event_id=str(event.pk),
        tier_id=str(tier.pk) if tier else None,
        quantity=quantity,
        current_bookings=event.current_bookings,
        tier_available=tier.available if tier else None,
    )


def lock_ticket(ticket: Ticket | UUID) -> Ticket:
    """Re-read a ticket under a row lock, with its event and tier."""
    pk = ticket.pk if isinstance(ticket, Ticket) else ticket
    try:
        return Ticket.objects.select_for_update(of=("self",)).select_related("event", "tier", "user").get(pk=pk)
    except Ticket.DoesNotExist as e:
        raise NotFoundError(_("Ticket not found.")) from e


@transaction.atomic
def release_ticket(ticket: Ticket, *, status: str, record: ProvenanceRecord) -> Ticket:
    """Move a seat-holding ticket into a released state and give its seat back.

    This is the single path by which tickets return capacity. The ticket row is locked so two
    concurrent releases of the same ticket serialise and the second one fails.

    Args:
        ticket: The ticket to release.
        status: One of the released statuses.
        record: Provenance stamped on the ticket.

    Returns:
        The locked, updated ticket.

    Raises:
        AlreadyReleasedError: The ticket is cancelled or refunded already.
    """
    if status not in RELEASED_STATUSES:
        raise ValueError(f"{status} is not a released ticket status.")

    locked = lock_ticket(ticket)
    if not locked.holds_capacity:
        raise AlreadyReleasedError(
            _("The ticket is already %(status)s.") % {"status": locked.get_status_display().lower()}
        )

    release(locked.event, locked.tier, 1)
    locked.status = status
    locked.add_provenance(record)
    locked.save(update_fields=["status", "provenance", "updated_at"])
    logger.info("ticket_released", ticket_id=str(locked.pk), status=status, record_kind=record.kind)
    return locked
