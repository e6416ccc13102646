"""Narrow capture/refund capability over Stripe.

Nothing outside this module talks to the Stripe SDK. Stripe failures are turned into
``UpstreamFailureError`` so callers only deal with domain errors.
"""

import typing as t
from decimal import ROUND_HALF_UP, Decimal

import stripe
import structlog
from django.conf import settings
from django.utils.translation import gettext as _

from events.exceptions import PaymentNotCompletedError, UpstreamFailureError

logger = structlog.get_logger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY
stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES


class PaymentIntentResult(t.NamedTuple):
    reference: str
    client_secret: str
    amount: Decimal
    currency: str


class CapturedPayment(t.NamedTuple):
    """A payment the gateway confirmed as captured."""

    reference: str
    amount: Decimal
    currency: str
    metadata: dict[str, t.Any]


class RefundResult(t.NamedTuple):
    refund_id: str
    amount: Decimal
    currency: str
    status: str


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal amount to the smallest currency unit (cents)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(value: int) -> Decimal:
    return (Decimal(value) / 100).quantize(Decimal("0.01"))


def map_refund_reason(reason: str | None) -> str:
    """Map a free-text refund reason onto the reasons Stripe accepts."""
    if not reason:
        return "requested_by_customer"
    lowered = reason.lower()
    if "fraud" in lowered or "unauthorized" in lowered:
        return "fraudulent"
    if "duplicate" in lowered or "double" in lowered:
        return "duplicate"
    return "requested_by_customer"


def create_intent(amount: Decimal, currency: str, metadata: dict[str, str]) -> PaymentIntentResult:
    """Create a PaymentIntent the client confirms with the returned secret.

    Raises:
        UpstreamFailureError: Stripe rejected the request or was unreachable.
    """
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency.lower(),
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
        )
    except stripe.StripeError as e:
        logger.error("stripe_intent_create_failed", error=str(e), amount=str(amount), currency=currency)
        raise UpstreamFailureError(_("Failed to create payment intent.")) from e

    logger.info("stripe_intent_created", payment_intent_id=intent.id, amount=intent.amount, currency=intent.currency)
    return PaymentIntentResult(
        reference=intent.id,
        client_secret=t.cast(str, intent.client_secret),
        amount=from_minor_units(intent.amount),
        currency=intent.currency.upper(),
    )


def verify_capture(reference: str) -> CapturedPayment:
    """Confirm with Stripe that the payment behind ``reference`` succeeded.

    Raises:
        PaymentNotCompletedError: Unknown reference, or the intent has not succeeded.
        UpstreamFailureError: Stripe could not be reached.
    """
    try:
        intent = stripe.PaymentIntent.retrieve(reference)
    except stripe.InvalidRequestError as e:
        logger.warning("stripe_intent_invalid", payment_intent_id=reference, error=str(e))
        raise PaymentNotCompletedError(_("Invalid payment intent.")) from e
    except stripe.StripeError as e:
        logger.error("stripe_intent_retrieve_failed", payment_intent_id=reference, error=str(e))
        raise UpstreamFailureError(_("Could not verify the payment.")) from e

    if intent.status != "succeeded":
        logger.info("stripe_intent_not_succeeded", payment_intent_id=reference, status=intent.status)
        raise PaymentNotCompletedError(
            _("Payment not completed. Status: %(status)s") % {"status": intent.status}
        )

    return CapturedPayment(
        reference=intent.id,
        amount=from_minor_units(intent.amount),
        currency=intent.currency.upper(),
        metadata=dict(intent.metadata or {}),
    )


def refund(reference: str, reason: str | None, metadata: dict[str, str]) -> RefundResult:
    """Refund a captured payment in full.

    Raises:
        UpstreamFailureError: Stripe did not confirm the refund. Nothing must be recorded.
    """
    stripe_reason = map_refund_reason(reason)
    try:
        result = stripe.Refund.create(
            payment_intent=reference,
            reason=stripe_reason,  # type: ignore[arg-type]
            metadata={**metadata, "original_reason": reason or "Customer request", "mapped_reason": stripe_reason},
        )
    except stripe.StripeError as e:
        logger.error("stripe_refund_failed", payment_intent_id=reference, error=str(e))
        raise UpstreamFailureError(_("Failed to process Stripe refund.")) from e

    logger.info("stripe_refund_created", payment_intent_id=reference, refund_id=result.id, reason=stripe_reason)
    return RefundResult(
        refund_id=result.id,
        amount=from_minor_units(result.amount),
        currency=result.currency.upper(),
        status=t.cast(str, result.status),
    )
