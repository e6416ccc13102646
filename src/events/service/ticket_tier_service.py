"""Ticket tier management for organizers."""

import typing as t
from decimal import Decimal

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import InvalidStateTransitionError
from events.models import Event, TicketTier
from events.service.access import assert_can_manage

logger = structlog.get_logger(__name__)

_EDITABLE_FIELDS = ("name", "description", "price", "currency", "is_active")


def create_tier(
    event: Event,
    actor: EventifyUser,
    *,
    name: str,
    price: Decimal = Decimal(0),
    description: str = "",
    currency: str | None = None,
    quantity: int | None = None,
    is_active: bool = True,
) -> TicketTier:
    """Add a tier; its whole allocation starts available."""
    assert_can_manage(event, actor)
    tier = TicketTier.objects.create(
        event=event,
        name=name,
        description=description,
        price=price,
        currency=currency or event.currency,
        quantity=quantity if quantity is not None else settings.DEFAULT_TIER_QUANTITY,
        is_active=is_active,
    )
    logger.info("ticket_tier_created", tier_id=str(tier.id), event_id=str(event.id), quantity=tier.quantity)
    return tier


@transaction.atomic
def update_tier(tier: TicketTier, actor: EventifyUser, **changes: t.Any) -> TicketTier:
    """Update a tier. A new quantity shifts ``available`` by the same amount.

    Raises:
        InvalidStateTransitionError: The new quantity is below the tickets already sold.
    """
    assert_can_manage(tier.event, actor)

    quantity = changes.pop("quantity", None)
    if quantity is not None and quantity != tier.quantity:
        delta = quantity - tier.quantity
        updated = TicketTier.objects.filter(
            pk=tier.pk, quantity=tier.quantity, available__gte=max(-delta, 0)
        ).update(quantity=F("quantity") + delta, available=F("available") + delta)
        if not updated:
            tier.refresh_from_db(fields=["quantity", "available"])
            raise InvalidStateTransitionError(
                _("Quantity cannot be lower than the %(sold)d tickets already sold.") % {"sold": tier.sold}
            )
        tier.refresh_from_db(fields=["quantity", "available"])

    fields = [field for field in _EDITABLE_FIELDS if field in changes]
    for field in fields:
        setattr(tier, field, changes[field])
    if fields:
        tier.save(update_fields=[*fields, "updated_at"])

    logger.info("ticket_tier_updated", tier_id=str(tier.id), fields=fields, quantity=tier.quantity)
    return tier


def soft_delete_tier(tier: TicketTier, actor: EventifyUser) -> None:
    """Take the tier off sale. Existing tickets keep it."""
    assert_can_manage(tier.event, actor)
    tier.is_active = False
    tier.save(update_fields=["is_active", "updated_at"])
    logger.info("ticket_tier_deactivated", tier_id=str(tier.id))
