"""Refunds: give the money back through the gateway, then release every seat of the order."""

import typing as t
from decimal import Decimal
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import AlreadyReleasedError, NotFoundError
from events.models import Payment, Ticket
from events.provenance import RefundRecord
from events.service import inventory_ledger, payment_gateway
from notifications.service.notification_helpers import notify_ticket_refunded

logger = structlog.get_logger(__name__)

MANUAL_REFUND_ID = "manual_refund"


class RefundOutcome(t.NamedTuple):
    payment: Payment
    refund_id: str
    amount: Decimal
    currency: str
    status: str
    released_tickets: list[Ticket]


def find_refundable_payment(
    user: EventifyUser, *, ticket_id: UUID | None = None, payment_id: str | None = None
) -> Payment:
    """Find the user's payment by one of its tickets, its id or its Stripe reference.

    Raises:
        NotFoundError: No such payment belongs to the user.
    """
    qs = Payment.objects.filter(user=user).select_related("event", "user")
    if ticket_id is not None:
        payment = qs.filter(Q(tickets__id=ticket_id) | Q(ticket_id=ticket_id)).distinct().first()
    elif payment_id:
        lookup = Q(stripe_payment_id=payment_id)
        try:
            lookup |= Q(pk=UUID(payment_id))
        except ValueError:
            pass
        payment = qs.filter(lookup).first()
    else:
        raise ValueError("Either ticket_id or payment_id is required.")

    if payment is None:
        raise NotFoundError(_("Payment not found."))
    return payment


def refund_payment(payment: Payment, reason: str | None = None) -> RefundOutcome:
    """Refund a completed payment and release every ticket it still holds.

    Card payments are refunded through the gateway first; if the gateway fails nothing is
    recorded. Waitlist promotions were never charged and are refunded locally.

    Raises:
        AlreadyReleasedError: The payment or its tickets were already refunded.
        UpstreamFailureError: The gateway did not confirm the refund.
    """
    if payment.status == Payment.PaymentStatus.REFUNDED:
        raise AlreadyReleasedError(_("Payment already refunded."))
    if not payment.tickets.holding_capacity().exists():
        raise AlreadyReleasedError(_("Ticket already refunded."))

    if payment.stripe_payment_id:
        result = payment_gateway.refund(
            payment.stripe_payment_id,
            reason,
            metadata={"user_id": str(payment.user_id), "payment_id": str(payment.id)},
        )
        refund_id, amount, currency, status = result.refund_id, result.amount, result.currency, result.status
    else:
        refund_id, amount, currency, status = MANUAL_REFUND_ID, payment.amount, payment.currency, "processed"

    with transaction.atomic():
        locked = Payment.objects.select_for_update().get(pk=payment.pk)
        if locked.status == Payment.PaymentStatus.REFUNDED:
            raise AlreadyReleasedError(_("Payment already refunded."))

        now = timezone.now()
        locked.status = Payment.PaymentStatus.REFUNDED
        locked.refund_id = refund_id
        locked.refunded_at = now
        locked.refund_reason = reason or "requested_by_customer"
        locked.save(update_fields=["status", "refund_id", "refunded_at", "refund_reason", "updated_at"])

        record = RefundRecord(refund_id=refund_id, refunded_at=now, reason=reason or "")
        released = [
            inventory_ledger.release_ticket(ticket, status=Ticket.TicketStatus.REFUNDED, record=record)
            for ticket in locked.tickets.holding_capacity()
        ]
        notify_ticket_refunded(locked, len(released))

    logger.info(
        "payment_refunded",
        payment_id=str(locked.id),
        refund_id=refund_id,
        ticket_count=len(released),
        method=locked.method,
    )
    return RefundOutcome(
        payment=locked, refund_id=refund_id, amount=amount, currency=currency, status=status, released_tickets=released
    )
