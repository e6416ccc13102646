import typing as t
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from accounts.models import EventifyUser
from events.models import Event, Ticket, TicketTier, WaitlistEntry
from events.service import booking_service
from events.tests.factories import Booker, captured, stripe_intent


@pytest.fixture
def event(organizer: EventifyUser, next_week: datetime) -> Event:
    """A live event with room for 100 attendees."""
    return Event.objects.create(
        organizer=organizer,
        title="Summer Jazz Night",
        description="Live jazz by the river.",
        location="Riverside Park",
        start_date=next_week,
        end_date=next_week + timedelta(hours=4),
        max_attendees=100,
        price=Decimal("25.00"),
        status=Event.EventStatus.LIVE,
    )


@pytest.fixture
def draft_event(organizer: EventifyUser, next_week: datetime) -> Event:
    return Event.objects.create(
        organizer=organizer,
        title="Draft Gala",
        start_date=next_week,
        end_date=next_week + timedelta(hours=2),
        max_attendees=50,
    )


@pytest.fixture
def tier(event: Event) -> TicketTier:
    """A tier with 50 tickets at 25.00."""
    return TicketTier.objects.create(event=event, name="General Admission", price=Decimal("25.00"), quantity=50)


@pytest.fixture
def vip_tier(event: Event) -> TicketTier:
    return TicketTier.objects.create(event=event, name="VIP", price=Decimal("80.00"), quantity=5)


@pytest.fixture
def book(event: Event, tier: TicketTier) -> Booker:
    """Book tickets through the booking transaction with an already captured payment."""

    default_event = event

    def _book(
        user: EventifyUser, tier: TicketTier | None = tier, quantity: int = 1, event: Event | None = None
    ) -> list[Ticket]:
        target = event or (tier.event if tier is not None else default_event)
        price = tier.price if tier is not None else target.price
        result = booking_service.confirm_booking(
            event=target,
            tier=tier,
            quantity=quantity,
            user=user,
            payment=captured(amount=price * quantity),
        )
        return result.tickets

    return _book


@pytest.fixture
def ticket(book: Booker, attendee: EventifyUser) -> Ticket:
    """A confirmed ticket of the default tier held by the attendee."""
    return book(attendee)[0]


@pytest.fixture
def waitlist_entry(event: Event, tier: TicketTier, other_attendee: EventifyUser) -> WaitlistEntry:
    return WaitlistEntry.objects.create(event=event, tier=tier, user=other_attendee)


@pytest.fixture
def mock_stripe_retrieve(event: Event, tier: TicketTier, attendee: EventifyUser) -> t.Iterator[MagicMock]:
    """PaymentIntent.retrieve reports a succeeded 25.00 USD payment for one ticket of the default tier."""
    metadata = booking_service.intent_metadata(event, tier, 1, attendee, "", None)
    with patch("events.service.payment_gateway.stripe.PaymentIntent.retrieve") as mock:
        mock.return_value = stripe_intent(metadata=metadata)
        yield mock


@pytest.fixture
def mock_stripe_refund() -> t.Iterator[MagicMock]:
    with patch("events.service.payment_gateway.stripe.Refund.create") as mock:
        refund = MagicMock()
        refund.id = "re_test_123"
        refund.amount = 2500
        refund.currency = "usd"
        refund.status = "succeeded"
        mock.return_value = refund
        yield mock
