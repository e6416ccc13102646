import typing as t
from decimal import Decimal

import pytest

from accounts.models import EventifyUser
from events.exceptions import InvalidStateTransitionError, UnauthorizedError
from events.models import Event, TicketTier
from events.service import ticket_tier_service
from events.tests.factories import Booker

pytestmark = pytest.mark.django_db


class TestCreateTier:
    def test_whole_allocation_starts_available(self, event: Event, organizer: EventifyUser) -> None:
        tier = ticket_tier_service.create_tier(event, organizer, name="Balcony", price=Decimal("40"), quantity=20)

        assert tier.available == 20
        assert tier.sold == 0
        assert tier.currency == event.currency

    def test_default_quantity(self, event: Event, organizer: EventifyUser, settings: t.Any) -> None:
        settings.DEFAULT_TIER_QUANTITY = 75

        tier = ticket_tier_service.create_tier(event, organizer, name="Standing")

        assert tier.quantity == 75
        assert tier.available == 75

    def test_other_organizer_cannot_add_tiers(self, event: Event, other_organizer: EventifyUser) -> None:
        with pytest.raises(UnauthorizedError):
            ticket_tier_service.create_tier(event, other_organizer, name="Sneaky")


class TestUpdateTier:
    def test_raising_quantity_adds_availability(
        self, book: Booker, tier: TicketTier, organizer: EventifyUser, attendee: EventifyUser
    ) -> None:
        book(attendee, quantity=5)

        updated = ticket_tier_service.update_tier(tier, organizer, quantity=60)

        assert updated.quantity == 60
        assert updated.available == 55
        assert updated.sold == 5

    def test_quantity_cannot_drop_below_sold(
        self, book: Booker, tier: TicketTier, organizer: EventifyUser, attendee: EventifyUser
    ) -> None:
        book(attendee, quantity=5)

        with pytest.raises(InvalidStateTransitionError):
            ticket_tier_service.update_tier(tier, organizer, quantity=4)

        tier.refresh_from_db()
        assert (tier.quantity, tier.available) == (50, 45)

    def test_quantity_can_drop_to_sold(
        self, book: Booker, tier: TicketTier, organizer: EventifyUser, attendee: EventifyUser
    ) -> None:
        book(attendee, quantity=5)

        updated = ticket_tier_service.update_tier(tier, organizer, quantity=5)

        assert (updated.quantity, updated.available) == (5, 0)

    def test_plain_fields(self, tier: TicketTier, organizer: EventifyUser) -> None:
        updated = ticket_tier_service.update_tier(tier, organizer, name="GA", price=Decimal("30.00"))

        tier.refresh_from_db()
        assert updated.name == tier.name == "GA"
        assert tier.price == Decimal("30.00")
        assert tier.available == 50

    def test_stale_instance_does_not_overwrite_counters(
        self, book: Booker, tier: TicketTier, organizer: EventifyUser, attendee: EventifyUser
    ) -> None:
        stale = TicketTier.objects.get(pk=tier.pk)
        book(attendee, quantity=3)

        ticket_tier_service.update_tier(stale, organizer, description="Near the stage")

        tier.refresh_from_db()
        assert tier.available == 47


class TestSoftDeleteTier:
    def test_tier_goes_off_sale(self, tier: TicketTier, organizer: EventifyUser) -> None:
        ticket_tier_service.soft_delete_tier(tier, organizer)

        tier.refresh_from_db()
        assert not tier.is_active
        assert TicketTier.objects.filter(pk=tier.pk).exists()
        assert not TicketTier.objects.active().filter(pk=tier.pk).exists()
