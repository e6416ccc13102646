import typing as t
from unittest.mock import patch

import pytest

from accounts.models import EventifyUser
from events.exceptions import (
    AlreadyCancelledError,
    AlreadyCheckedInError,
    InvalidStateTransitionError,
    UnauthorizedError,
)
from events.models import Event, Ticket, TicketTier
from events.provenance import CancellationRecord
from events.service import no_show_service, ticket_service
from events.tests.factories import Booker

pytestmark = pytest.mark.django_db


class TestCancelTicket:
    def test_attendee_cancels_and_seat_returns(
        self, ticket: Ticket, event: Event, tier: TicketTier, attendee: EventifyUser
    ) -> None:
        cancelled = ticket_service.cancel_ticket(ticket, attendee, reason="Can't make it")

        assert cancelled.status == Ticket.TicketStatus.CANCELLED_MANUAL
        (record,) = cancelled.provenance_records()
        assert isinstance(record, CancellationRecord)
        assert record.reason == "Can't make it"
        event.refresh_from_db()
        tier.refresh_from_db()
        assert event.current_bookings == 0
        assert tier.available == 50

    def test_organizer_can_cancel(self, ticket: Ticket, organizer: EventifyUser) -> None:
        assert ticket_service.cancel_ticket(ticket, organizer).status == Ticket.TicketStatus.CANCELLED_MANUAL

    def test_stranger_cannot_cancel(self, ticket: Ticket, other_attendee: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            ticket_service.cancel_ticket(ticket, other_attendee)

    def test_cancel_twice_fails(self, ticket: Ticket, attendee: EventifyUser) -> None:
        ticket_service.cancel_ticket(ticket, attendee)

        with pytest.raises(AlreadyCancelledError):
            ticket_service.cancel_ticket(ticket, attendee)

    def test_attendee_is_notified_only_when_someone_else_cancels(
        self,
        book: Booker,
        attendee: EventifyUser,
        organizer: EventifyUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        own, by_organizer = book(attendee, quantity=2)

        with patch("notifications.service.notification_helpers.notification_requested.send") as send:
            with django_capture_on_commit_callbacks(execute=True):
                ticket_service.cancel_ticket(own, attendee)
                ticket_service.cancel_ticket(by_organizer, organizer, reason="Duplicate booking")

        send.assert_called_once()
        assert send.call_args.kwargs["notification_type"] == "ticket_cancelled"
        assert send.call_args.kwargs["context"]["reason"] == "Duplicate booking"


class TestCheckIn:
    def test_check_in_confirmed_ticket(self, ticket: Ticket, organizer: EventifyUser) -> None:
        checked = ticket_service.check_in_ticket(ticket, organizer)

        assert checked.checked_in
        assert checked.checked_in_at is not None

    def test_second_check_in_fails(self, ticket: Ticket, organizer: EventifyUser) -> None:
        ticket_service.check_in_ticket(ticket, organizer)

        with pytest.raises(AlreadyCheckedInError):
            ticket_service.check_in_ticket(ticket, organizer)

    def test_no_show_ticket_cannot_check_in(self, ticket: Ticket, organizer: EventifyUser) -> None:
        no_show_service.mark_no_show(ticket, organizer)

        with pytest.raises(InvalidStateTransitionError):
            ticket_service.check_in_ticket(ticket, organizer)

    def test_attendee_cannot_check_themselves_in(self, ticket: Ticket, attendee: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            ticket_service.check_in_ticket(ticket, attendee)


class TestListing:
    def test_list_for_event_filters_by_status(
        self, book: Booker, event: Event, organizer: EventifyUser, attendee: EventifyUser
    ) -> None:
        first, second = book(attendee, quantity=2)
        no_show_service.mark_no_show(first, organizer)

        no_shows = ticket_service.list_for_event(event, organizer, status=Ticket.TicketStatus.CANCELLED_NO_SHOW)

        assert list(no_shows) == [first]
        assert set(ticket_service.list_for_event(event, organizer)) == {first, second}

    def test_list_for_event_requires_manager(self, event: Event, attendee: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            ticket_service.list_for_event(event, attendee)

    def test_list_for_user_only_returns_own_tickets(
        self, ticket: Ticket, attendee: EventifyUser, other_attendee: EventifyUser
    ) -> None:
        assert list(ticket_service.list_for_user(attendee)) == [ticket]
        assert not ticket_service.list_for_user(other_attendee).exists()
