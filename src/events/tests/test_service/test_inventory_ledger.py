"""Tests for the inventory ledger: Reserve, Release and ticket release."""

import random

import pytest
from django.utils import timezone

from accounts.models import EventifyUser
from events.exceptions import AlreadyReleasedError, CapacityExceededError, NotFoundError, TierSoldOutError
from events.models import Event, Ticket, TicketTier
from events.provenance import CancellationRecord, NoShowRecord
from events.service import inventory_ledger

pytestmark = pytest.mark.django_db


class TestReserve:
    def test_reserve_moves_both_counters(self, event: Event, tier: TicketTier) -> None:
        inventory_ledger.reserve(event, tier, 3)

        event.refresh_from_db()
        tier.refresh_from_db()
        assert event.current_bookings == 3
        assert tier.available == 47

    def test_reserve_more_than_available_fails_and_leaves_tier_untouched(self, event: Event) -> None:
        """Tier with quantity=10 and available=2 cannot take 3."""
        tier = TicketTier.objects.create(event=event, name="Early Bird", quantity=10)
        TicketTier.objects.filter(pk=tier.pk).update(available=2)
        tier.refresh_from_db()

        with pytest.raises(TierSoldOutError) as exc_info:
            inventory_ledger.reserve(event, tier, 3)

        assert "Only 2 tickets available" in exc_info.value.message
        tier.refresh_from_db()
        event.refresh_from_db()
        assert tier.available == 2
        assert event.current_bookings == 0

    def test_full_event_rejects_reservation_even_with_tier_availability(self, event: Event, tier: TicketTier) -> None:
        Event.objects.filter(pk=event.pk).update(current_bookings=100)

        with pytest.raises(CapacityExceededError):
            inventory_ledger.reserve(event, tier, 1)

        tier.refresh_from_db()
        event.refresh_from_db()
        assert tier.available == 50, "the tier decrement must be rolled back"
        assert event.current_bookings == 100

    def test_inactive_tier_cannot_be_reserved(self, event: Event, tier: TicketTier) -> None:
        TicketTier.objects.filter(pk=tier.pk).update(is_active=False)

        with pytest.raises(TierSoldOutError) as exc_info:
            inventory_ledger.reserve(event, tier, 1)

        assert "no longer on sale" in exc_info.value.message

    def test_stale_instances_cannot_both_take_the_last_ticket(self, event: Event) -> None:
        """Two callers that both read available=1: exactly one reservation succeeds."""
        tier = TicketTier.objects.create(event=event, name="Last Seat", quantity=1)
        first_view = TicketTier.objects.get(pk=tier.pk)
        second_view = TicketTier.objects.get(pk=tier.pk)
        assert first_view.available == second_view.available == 1

        inventory_ledger.reserve(event, first_view, 1)
        with pytest.raises(TierSoldOutError):
            inventory_ledger.reserve(event, second_view, 1)

        tier.refresh_from_db()
        event.refresh_from_db()
        assert tier.available == 0
        assert event.current_bookings == 1

    def test_general_admission_only_moves_event_counter(self, event: Event) -> None:
        inventory_ledger.reserve(event, None, 2)

        event.refresh_from_db()
        assert event.current_bookings == 2

    def test_tier_of_another_event_is_rejected(self, event: Event, organizer: EventifyUser) -> None:
        other = Event.objects.create(
            organizer=organizer, title="Other", start_date=event.start_date, end_date=event.end_date
        )
        foreign_tier = TicketTier.objects.create(event=other, name="Foreign", quantity=5)

        with pytest.raises(NotFoundError):
            inventory_ledger.reserve(event, foreign_tier, 1)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_a_programming_error(
        self, event: Event, tier: TicketTier, quantity: int
    ) -> None:
        with pytest.raises(ValueError):
            inventory_ledger.reserve(event, tier, quantity)


class TestRelease:
    def test_release_is_the_inverse_of_reserve(self, event: Event, tier: TicketTier) -> None:
        inventory_ledger.reserve(event, tier, 4)
        inventory_ledger.release(event, tier, 4)

        event.refresh_from_db()
        tier.refresh_from_db()
        assert event.current_bookings == 0
        assert tier.available == 50

    def test_release_beyond_allocation_is_rejected(self, event: Event, tier: TicketTier) -> None:
        inventory_ledger.reserve(event, tier, 1)

        with pytest.raises(AlreadyReleasedError):
            inventory_ledger.release(event, tier, 2)

        tier.refresh_from_db()
        assert tier.available == 49

    def test_release_below_zero_bookings_is_rejected(self, event: Event) -> None:
        with pytest.raises(AlreadyReleasedError):
            inventory_ledger.release(event, None, 1)


class TestCounterInvariants:
    def test_random_sequences_keep_counters_in_bounds(self, event: Event) -> None:
        """Whatever the sequence of reserves and releases, both counters stay within bounds."""
        Event.objects.filter(pk=event.pk).update(max_attendees=12)
        event.refresh_from_db()
        tier = TicketTier.objects.create(event=event, name="Fuzz", quantity=8)
        rng = random.Random(1234)
        held = 0

        for _ in range(200):
            quantity = rng.randint(1, 4)
            if rng.random() < 0.6:
                try:
                    inventory_ledger.reserve(event, tier, quantity)
                    held += quantity
                except (TierSoldOutError, CapacityExceededError):
                    pass
            else:
                try:
                    inventory_ledger.release(event, tier, quantity)
                    held -= quantity
                except AlreadyReleasedError:
                    pass

            tier.refresh_from_db()
            event.refresh_from_db()
            assert 0 <= tier.available <= tier.quantity
            assert 0 <= event.current_bookings <= event.max_attendees
            assert tier.quantity - tier.available == held == event.current_bookings


class TestCheckAvailability:
    def test_does_not_hold_anything(self, event: Event, tier: TicketTier) -> None:
        inventory_ledger.check_availability(event, tier, 50)

        tier.refresh_from_db()
        assert tier.available == 50

    def test_reports_sold_out(self, event: Event, tier: TicketTier) -> None:
        with pytest.raises(TierSoldOutError):
            inventory_ledger.check_availability(event, tier, 51)


class TestReleaseTicket:
    def test_release_ticket_frees_seat_and_stamps_provenance(
        self, ticket: Ticket, event: Event, tier: TicketTier, organizer: EventifyUser
    ) -> None:
        record = NoShowRecord(marked_by=organizer.id, marked_at=timezone.now())

        released = inventory_ledger.release_ticket(ticket, status=Ticket.TicketStatus.CANCELLED_NO_SHOW, record=record)

        assert released.status == Ticket.TicketStatus.CANCELLED_NO_SHOW
        assert released.provenance_records() == [record]
        event.refresh_from_db()
        tier.refresh_from_db()
        assert event.current_bookings == 0
        assert tier.available == 50

    def test_releasing_the_same_ticket_twice_fails(
        self, ticket: Ticket, event: Event, tier: TicketTier, attendee: EventifyUser
    ) -> None:
        def record() -> CancellationRecord:
            return CancellationRecord(cancelled_by=attendee.id, cancelled_at=timezone.now())

        inventory_ledger.release_ticket(ticket, status=Ticket.TicketStatus.CANCELLED_MANUAL, record=record())

        with pytest.raises(AlreadyReleasedError):
            inventory_ledger.release_ticket(ticket, status=Ticket.TicketStatus.CANCELLED_MANUAL, record=record())

        tier.refresh_from_db()
        event.refresh_from_db()
        assert tier.available == 50, "availability must not be incremented twice"
        assert event.current_bookings == 0

    def test_confirmed_is_not_a_released_status(self, ticket: Ticket, attendee: EventifyUser) -> None:
        with pytest.raises(ValueError):
            inventory_ledger.release_ticket(
                ticket,
                status=Ticket.TicketStatus.CONFIRMED,
                record=CancellationRecord(cancelled_by=attendee.id, cancelled_at=timezone.now()),
            )
