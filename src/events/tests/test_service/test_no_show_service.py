"""Tests for the no-show workflow and ticket restore."""

import typing as t
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from accounts.models import EventifyUser
from events.exceptions import (
    AlreadyCancelledError,
    AlreadyReleasedError,
    CapacityExceededError,
    InvalidStateTransitionError,
    UnauthorizedError,
)
from events.models import Event, Payment, Ticket, TicketTier, WaitlistEntry
from events.provenance import NoShowRecord, PromotionRecord, RestoreRecord
from events.service import no_show_service, refund_service, ticket_service
from events.tests.factories import Booker

pytestmark = pytest.mark.django_db


def counters(event: Event, tier: TicketTier) -> tuple[int, int]:
    event.refresh_from_db()
    tier.refresh_from_db()
    return event.current_bookings, tier.available


class TestMarkNoShowWithoutWaitlist:
    def test_frees_exactly_one_seat(
        self, ticket: Ticket, event: Event, tier: TicketTier, organizer: EventifyUser
    ) -> None:
        bookings_before, available_before = counters(event, tier)

        result = no_show_service.mark_no_show(ticket, organizer)

        assert result.promoted_entry is None
        assert result.promoted_ticket is None
        assert result.ticket.status == Ticket.TicketStatus.CANCELLED_NO_SHOW
        assert counters(event, tier) == (bookings_before - 1, available_before + 1)

    def test_stamps_no_show_provenance(self, ticket: Ticket, organizer: EventifyUser) -> None:
        no_show_service.mark_no_show(ticket, organizer)

        ticket.refresh_from_db()
        (record,) = ticket.provenance_records()
        assert isinstance(record, NoShowRecord)
        assert record.marked_by == organizer.id
        assert ticket.is_no_show

    def test_admin_may_mark_any_event(self, ticket: Ticket, platform_admin: EventifyUser) -> None:
        result = no_show_service.mark_no_show(ticket, platform_admin)

        assert result.ticket.status == Ticket.TicketStatus.CANCELLED_NO_SHOW

    def test_other_organizer_is_rejected(self, ticket: Ticket, other_organizer: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            no_show_service.mark_no_show(ticket, other_organizer)

        ticket.refresh_from_db()
        assert ticket.status == Ticket.TicketStatus.CONFIRMED

    def test_attendee_cannot_mark_own_ticket(self, ticket: Ticket, attendee: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            no_show_service.mark_no_show(ticket, attendee)

    def test_already_cancelled_ticket_is_rejected(
        self, ticket: Ticket, event: Event, tier: TicketTier, organizer: EventifyUser
    ) -> None:
        no_show_service.mark_no_show(ticket, organizer)
        after_first = counters(event, tier)

        with pytest.raises(AlreadyCancelledError):
            no_show_service.mark_no_show(ticket, organizer)

        assert counters(event, tier) == after_first

    def test_refunded_ticket_is_already_released(
        self, ticket: Ticket, organizer: EventifyUser, mock_stripe_refund: t.Any
    ) -> None:
        payment = Payment.objects.get(pk=ticket.payment_id)
        refund_service.refund_payment(payment, "changed plans")

        with pytest.raises(AlreadyReleasedError):
            no_show_service.mark_no_show(ticket, organizer)


class TestMarkNoShowWithWaitlist:
    def test_promotes_the_oldest_pending_entry(
        self,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        organizer: EventifyUser,
        user_factory: t.Any,
    ) -> None:
        """T is a no-show while W (t0) and W2 (t1 > t0) wait: W gets the seat, W2 keeps waiting."""
        first_in_line = user_factory()
        second_in_line = user_factory()
        t0 = timezone.now() - timedelta(hours=2)
        # created out of order so the queue cannot rely on insertion order
        w2 = WaitlistEntry.objects.create(
            event=event, tier=tier, user=second_in_line, requested_at=t0 + timedelta(minutes=30)
        )
        w = WaitlistEntry.objects.create(event=event, tier=tier, user=first_in_line, requested_at=t0)
        before = counters(event, tier)

        result = no_show_service.mark_no_show(ticket, organizer)

        ticket.refresh_from_db()
        w.refresh_from_db()
        w2.refresh_from_db()
        assert ticket.status == Ticket.TicketStatus.CANCELLED_NO_SHOW
        assert result.promoted_entry is not None and result.promoted_entry.pk == w.pk
        assert result.promoted_ticket is not None
        assert result.promoted_ticket.user == first_in_line
        assert result.promoted_ticket.status == Ticket.TicketStatus.CONFIRMED
        assert w.status == WaitlistEntry.Status.APPROVED
        assert w.ticket_id == result.promoted_ticket.id
        assert str(result.promoted_ticket.id) in w.notes
        assert w2.status == WaitlistEntry.Status.PENDING
        assert counters(event, tier) == before
        assert not Ticket.objects.filter(user=second_in_line).exists()

    def test_promoted_ticket_inherits_price_and_records_provenance(
        self,
        ticket: Ticket,
        waitlist_entry: WaitlistEntry,
        organizer: EventifyUser,
    ) -> None:
        result = no_show_service.mark_no_show(ticket, organizer)

        promoted = result.promoted_ticket
        assert promoted is not None
        assert promoted.price == ticket.price
        assert promoted.ticket_type == ticket.ticket_type
        assert promoted.currency == ticket.currency
        (record,) = promoted.provenance_records()
        assert isinstance(record, PromotionRecord)
        assert record.waitlist_entry_id == waitlist_entry.id
        assert record.replaced_ticket_id == ticket.id
        assert record.promoted_by == organizer.id

    def test_promotion_payment_is_not_a_charge(
        self, ticket: Ticket, waitlist_entry: WaitlistEntry, organizer: EventifyUser
    ) -> None:
        result = no_show_service.mark_no_show(ticket, organizer)

        assert result.promoted_ticket is not None
        payment = Payment.objects.get(pk=result.promoted_ticket.payment_id)
        assert payment.method == Payment.PaymentMethod.WAITLIST_PROMOTION
        assert payment.status == Payment.PaymentStatus.COMPLETED
        assert payment.stripe_payment_id is None
        assert payment.user == waitlist_entry.user
        assert payment.metadata["replaced_ticket_id"] == str(ticket.id)

    def test_entries_of_other_tiers_are_not_promoted(
        self,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        vip_tier: TicketTier,
        organizer: EventifyUser,
        other_attendee: EventifyUser,
    ) -> None:
        vip_entry = WaitlistEntry.objects.create(event=event, tier=vip_tier, user=other_attendee)
        before = counters(event, tier)

        result = no_show_service.mark_no_show(ticket, organizer)

        assert result.promoted_entry is None
        vip_entry.refresh_from_db()
        assert vip_entry.status == WaitlistEntry.Status.PENDING
        assert counters(event, tier) == (before[0] - 1, before[1] + 1)

    def test_withdrawn_tier_frees_the_seat_without_promoting(
        self,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        organizer: EventifyUser,
        waitlist_entry: WaitlistEntry,
    ) -> None:
        TicketTier.objects.filter(pk=tier.pk).update(is_active=False)
        before = counters(event, tier)

        result = no_show_service.mark_no_show(ticket, organizer)

        assert result.ticket.status == Ticket.TicketStatus.CANCELLED_NO_SHOW
        assert result.promoted_entry is None
        waitlist_entry.refresh_from_db()
        assert waitlist_entry.status == WaitlistEntry.Status.PENDING
        assert counters(event, tier) == (before[0] - 1, before[1] + 1)
        assert Ticket.objects.filter(user=waitlist_entry.user).count() == 0

    def test_decided_entries_are_skipped(
        self,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        organizer: EventifyUser,
        user_factory: t.Any,
    ) -> None:
        early = timezone.now() - timedelta(days=1)
        WaitlistEntry.objects.create(
            event=event, tier=tier, user=user_factory(), requested_at=early, status=WaitlistEntry.Status.REJECTED
        )
        pending = WaitlistEntry.objects.create(event=event, tier=tier, user=user_factory())

        result = no_show_service.mark_no_show(ticket, organizer)

        assert result.promoted_entry is not None
        assert result.promoted_entry.pk == pending.pk

    def test_notifications_go_out_after_commit(
        self,
        ticket: Ticket,
        waitlist_entry: WaitlistEntry,
        organizer: EventifyUser,
        attendee: EventifyUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        with patch("notifications.service.notification_helpers.notification_requested.send") as send:
            with django_capture_on_commit_callbacks(execute=True):
                no_show_service.mark_no_show(ticket, organizer)

        sent = [(call.kwargs["notification_type"], call.kwargs["user"]) for call in send.call_args_list]
        assert sent == [
            ("ticket_no_show", attendee),
            ("waitlist_promoted", waitlist_entry.user),
            ("waitlist_promotion_organizer", organizer),
        ]

    def test_notification_failure_does_not_undo_the_promotion(
        self,
        ticket: Ticket,
        waitlist_entry: WaitlistEntry,
        organizer: EventifyUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        with patch(
            "notifications.service.notification_helpers.notification_requested.send",
            side_effect=RuntimeError("mail server on fire"),
        ):
            with django_capture_on_commit_callbacks(execute=True):
                result = no_show_service.mark_no_show(ticket, organizer)

        waitlist_entry.refresh_from_db()
        assert waitlist_entry.status == WaitlistEntry.Status.APPROVED
        assert result.promoted_ticket is not None
        assert Ticket.objects.filter(pk=result.promoted_ticket.pk).exists()

    def test_sequential_no_shows_drain_the_queue_in_order(
        self,
        book: Booker,
        event: Event,
        tier: TicketTier,
        organizer: EventifyUser,
        user_factory: t.Any,
    ) -> None:
        holders = [book(user_factory())[0] for _ in range(3)]
        now = timezone.now()
        waiting = [
            WaitlistEntry.objects.create(
                event=event, tier=tier, user=user_factory(), requested_at=now - timedelta(minutes=10 - i)
            )
            for i in range(2)
        ]
        before = counters(event, tier)

        results = [no_show_service.mark_no_show(holder, organizer) for holder in holders]

        assert [r.promoted_entry.pk if r.promoted_entry else None for r in results] == [
            waiting[0].pk,
            waiting[1].pk,
            None,
        ]
        assert counters(event, tier) == (before[0] - 1, before[1] + 1)


class TestRestoreTicket:
    def test_restore_reconfirms_and_reserves(
        self, ticket: Ticket, event: Event, tier: TicketTier, organizer: EventifyUser
    ) -> None:
        no_show_service.mark_no_show(ticket, organizer)
        after_no_show = counters(event, tier)

        restored = no_show_service.restore_ticket(ticket, organizer)

        assert restored.status == Ticket.TicketStatus.CONFIRMED
        assert counters(event, tier) == (after_no_show[0] + 1, after_no_show[1] - 1)
        kinds = [type(record) for record in restored.provenance_records()]
        assert kinds == [NoShowRecord, RestoreRecord]

    def test_restore_fails_when_event_is_full(
        self,
        book: Booker,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        organizer: EventifyUser,
        user_factory: t.Any,
    ) -> None:
        """The freed seat was sold to someone else in the meantime."""
        Event.objects.filter(pk=event.pk).update(max_attendees=1)
        no_show_service.mark_no_show(ticket, organizer)
        book(user_factory())
        before = counters(event, tier)
        assert event.current_bookings == event.max_attendees

        with pytest.raises(CapacityExceededError):
            no_show_service.restore_ticket(ticket, organizer)

        ticket.refresh_from_db()
        assert ticket.status == Ticket.TicketStatus.CANCELLED_NO_SHOW
        assert counters(event, tier) == before

    def test_plain_cancellation_cannot_be_restored(
        self, ticket: Ticket, attendee: EventifyUser, organizer: EventifyUser
    ) -> None:
        ticket_service.cancel_ticket(ticket, attendee)

        with pytest.raises(InvalidStateTransitionError):
            no_show_service.restore_ticket(ticket, organizer)

    def test_confirmed_ticket_cannot_be_restored(self, ticket: Ticket, organizer: EventifyUser) -> None:
        with pytest.raises(InvalidStateTransitionError):
            no_show_service.restore_ticket(ticket, organizer)

    def test_other_organizer_cannot_restore(
        self, ticket: Ticket, organizer: EventifyUser, other_organizer: EventifyUser
    ) -> None:
        no_show_service.mark_no_show(ticket, organizer)

        with pytest.raises(UnauthorizedError):
            no_show_service.restore_ticket(ticket, other_organizer)
