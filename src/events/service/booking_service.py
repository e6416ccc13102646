"""The booking transaction: verified payment in, confirmed tickets out."""

import secrets
import string
import typing as t
from decimal import ROUND_HALF_UP, Decimal

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import AlreadyBookedError, EventifyError, PaymentMismatchError
from events.models import Event, Payment, Ticket, TicketTier
from events.service import inventory_ledger, payment_gateway
from events.service.payment_gateway import CapturedPayment, PaymentIntentResult
from notifications.service.notification_helpers import notify_ticket_purchased

logger = structlog.get_logger(__name__)

_ORDER_ALPHABET = string.digits + string.ascii_uppercase


class Attendee(t.NamedTuple):
    name: str = ""
    email: str = ""


class BookingResult(t.NamedTuple):
    payment: Payment
    tickets: list[Ticket]


def generate_order_number() -> str:
    """ORD-<epoch milliseconds>-<9 random base36 characters>, unique among payments."""
    while True:
        millis = int(timezone.now().timestamp() * 1000)
        suffix = "".join(secrets.choice(_ORDER_ALPHABET) for _ in range(9))
        order_number = f"ORD-{millis}-{suffix}"
        if not Payment.objects.filter(order_number=order_number).exists():
            return order_number


def compute_amount(
    event: Event,
    tier: TicketTier | None,
    quantity: int,
    amount: Decimal | None = None,
    discount: Decimal | None = None,
) -> Decimal:
    """Explicit amount, else tier price times quantity, else event price times quantity.

    ``discount`` is a percentage taken off the total.
    """
    if amount:
        total = Decimal(amount)
    elif tier is not None:
        total = Decimal(tier.price) * quantity
    else:
        total = Decimal(event.price) * quantity
    if discount:
        total = total * (Decimal(100) - Decimal(discount)) / Decimal(100)
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def create_payment_intent(
    *,
    event: Event,
    tier: TicketTier | None,
    quantity: int,
    user: EventifyUser,
    amount: Decimal | None = None,
    promo_code: str = "",
    discount: Decimal | None = None,
) -> PaymentIntentResult:
    """Check availability and open a payment intent for the order.

    Nothing is reserved here; the booking transaction re-validates after capture.
    """
    inventory_ledger.check_availability(event, tier, quantity)
    total = compute_amount(event, tier, quantity, amount, discount if promo_code else None)
    currency = tier.currency if tier is not None else event.currency
    metadata = intent_metadata(event, tier, quantity, user, promo_code, discount if promo_code else None)
    return payment_gateway.create_intent(total, currency, metadata)


@transaction.atomic
def confirm_booking(
    *,
    event: Event,
    tier: TicketTier | None,
    quantity: int,
    user: EventifyUser,
    payment: CapturedPayment,
    attendees: t.Sequence[Attendee] = (),
    promo_code: str = "",
    discount: Decimal | None = None,
) -> BookingResult:
    """Reserve seats and record the tickets and payment of one order, all or nothing.

    Each ticket is priced at its share of the amount actually paid.

    Raises:
        AlreadyBookedError: The payment reference was already used.
        TierSoldOutError: The tier cannot cover ``quantity``.
        CapacityExceededError: The event cannot take ``quantity`` more attendees.
    """
    if Payment.objects.filter(stripe_payment_id=payment.reference).exists():
        raise AlreadyBookedError()

    inventory_ledger.reserve(event, tier, quantity)

    order_number = generate_order_number()
    price = (payment.amount / quantity).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    tickets = []
    for index in range(quantity):
        attendee = attendees[index] if index < len(attendees) else Attendee()
        tickets.append(
            Ticket.objects.create(
                event=event,
                user=user,
                tier=tier,
                status=Ticket.TicketStatus.CONFIRMED,
                ticket_type=tier.name if tier is not None else "General",
                price=price,
                currency=payment.currency,
                order_number=order_number,
                attendee_name=attendee.name or user.display_name,
                attendee_email=attendee.email or user.email,
                promo_code=promo_code,
                discount=discount or Decimal(0),
            )
        )

    try:
        with transaction.atomic():
            record = Payment.objects.create(
                user=user,
                event=event,
                ticket=tickets[0],
                amount=payment.amount,
                currency=payment.currency,
                stripe_payment_id=payment.reference,
                method=Payment.PaymentMethod.CARD,
                status=Payment.PaymentStatus.COMPLETED,
                order_number=order_number,
                quantity=quantity,
                metadata={
                    "ticket_ids": [str(ticket.id) for ticket in tickets],
                    "promo_code": promo_code,
                    "discount": str(discount or 0),
                    "quantity": quantity,
                },
            )
    except IntegrityError as e:
        raise AlreadyBookedError() from e

    Ticket.objects.filter(pk__in=[ticket.pk for ticket in tickets]).update(payment=record)
    for ticket in tickets:
        ticket.payment = record

    logger.info(
        "booking_confirmed",
        order_number=order_number,
        event_id=str(event.id),
        tier_id=str(tier.id) if tier else None,
        quantity=quantity,
        payment_reference=payment.reference,
    )
    notify_ticket_purchased(record, tickets)
    return BookingResult(payment=record, tickets=tickets)


def intent_metadata(
    event: Event, tier: TicketTier | None, quantity: int, user: EventifyUser, promo_code: str, discount: Decimal | None
) -> dict[str, str]:
    """What an intent records about its order; the booking is checked against it after capture."""
    return {
        "event_id": str(event.id),
        "ticket_tier_id": str(tier.id) if tier else "",
        "user_id": str(user.id),
        "quantity": str(quantity),
        "promo_code": promo_code,
        "discount": str(discount or 0),
    }


def assert_payment_matches(
    captured: CapturedPayment, *, event: Event, tier: TicketTier | None, quantity: int, user: EventifyUser
) -> None:
    """Raise PaymentMismatchError unless the captured intent was opened for this exact order."""
    expected = intent_metadata(event, tier, quantity, user, "", None)
    keys = ("event_id", "ticket_tier_id", "user_id", "quantity")
    mismatched = [key for key in keys if captured.metadata.get(key) != expected[key]]
    if mismatched:
        logger.warning(
            "payment_order_mismatch",
            payment_reference=captured.reference,
            mismatched=mismatched,
            event_id=expected["event_id"],
            tier_id=expected["ticket_tier_id"] or None,
            quantity=quantity,
        )
        raise PaymentMismatchError()


def book_with_payment(
    *,
    event: Event,
    tier: TicketTier | None,
    quantity: int,
    user: EventifyUser,
    payment_reference: str,
    attendees: t.Sequence[Attendee] = (),
) -> BookingResult:
    """Verify the capture with the gateway, then run the booking transaction.

    The order must be the one the intent was opened for; its promo code and discount are
    taken from the intent. A failed booking after a successful capture is not refunded
    automatically; it is logged with the payment reference for reconciliation.

    Raises:
        AlreadyBookedError: The payment reference was already used.
        PaymentNotCompletedError: The intent is unknown or has not succeeded.
        PaymentMismatchError: The intent was opened for another event, tier, quantity or user.
    """
    if Payment.objects.filter(stripe_payment_id=payment_reference).exists():
        raise AlreadyBookedError(_("This payment has already been used for a booking."))

    captured = payment_gateway.verify_capture(payment_reference)
    assert_payment_matches(captured, event=event, tier=tier, quantity=quantity, user=user)
    discount = Decimal(captured.metadata.get("discount") or 0)
    try:
        return confirm_booking(
            event=event,
            tier=tier,
            quantity=quantity,
            user=user,
            payment=captured,
            attendees=attendees,
            promo_code=captured.metadata.get("promo_code", ""),
            discount=discount or None,
        )
    except EventifyError as e:
        logger.error(
            "booking_failed_after_capture",
            payment_reference=payment_reference,
            amount=str(captured.amount),
            currency=captured.currency,
            event_id=str(event.id),
            error_kind=e.kind,
            error=e.message,
        )
        raise
