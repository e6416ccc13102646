from uuid import UUID

from django.db.models import QuerySet
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import EventifyJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import CheckoutThrottle, UserDefaultThrottle
from events import models, schema
from events.service import booking_service, refund_service
from events.service.booking_service import Attendee

from .lookups import get_or_not_found


@api_controller("/payments", auth=EventifyJWTAuth(), tags=["Payments"], throttle=CheckoutThrottle())
class CheckoutController(UserAwareController):
    """Card checkout, refunds and payment history."""

    def get_event_and_tier(
        self, event_id: UUID, tier_id: UUID | None
    ) -> tuple[models.Event, models.TicketTier | None]:
        event = get_or_not_found(models.Event.objects.all(), _("Event not found."), pk=event_id)
        tier = None
        if tier_id is not None:
            tier = get_or_not_found(
                models.TicketTier.objects.active(), _("Ticket tier not found."), pk=tier_id, event=event
            )
        return event, tier

    @route.post(
        "/create-intent",
        url_name="create_payment_intent",
        response={200: schema.PaymentIntentResponseSchema, 404: ErrorResponse, 409: ErrorResponse, 502: ErrorResponse},
    )
    def create_payment_intent(self, payload: schema.PaymentIntentCreateSchema) -> dict[str, object]:
        """Open a payment intent for an order. Availability is checked but nothing is held."""
        event, tier = self.get_event_and_tier(payload.event_id, payload.ticket_tier_id)
        intent = booking_service.create_payment_intent(
            event=event,
            tier=tier,
            quantity=payload.quantity,
            user=self.user(),
            amount=payload.amount,
            promo_code=payload.promo_code,
            discount=payload.discount,
        )
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.reference,
            "amount": intent.amount,
            "currency": intent.currency,
        }

    @route.post(
        "/confirm",
        url_name="confirm_payment",
        response={
            200: schema.BookingResponseSchema,
            400: ErrorResponse,
            404: ErrorResponse,
            409: ErrorResponse,
            502: ErrorResponse,
        },
    )
    def confirm_payment(self, payload: schema.ConfirmPaymentSchema) -> dict[str, object]:
        """Turn a succeeded payment intent into confirmed tickets.

        Each payment intent can be used for one order only, and only for the order it was opened for.
        """
        event, tier = self.get_event_and_tier(payload.event_id, payload.ticket_tier_id)
        result = booking_service.book_with_payment(
            event=event,
            tier=tier,
            quantity=payload.quantity,
            user=self.user(),
            payment_reference=payload.payment_intent_id,
            attendees=[Attendee(name=a.name, email=a.email or "") for a in payload.attendees],
        )
        return {"order_number": result.payment.order_number, "payment": result.payment, "tickets": result.tickets}

    @route.post(
        "/refund",
        url_name="refund_payment",
        response={200: schema.RefundResponseSchema, 404: ErrorResponse, 409: ErrorResponse, 502: ErrorResponse},
    )
    def refund(self, payload: schema.RefundRequestSchema) -> dict[str, object]:
        """Refund one of your orders, by ticket or by payment. All of its tickets are released."""
        payment = refund_service.find_refundable_payment(
            self.user(), ticket_id=payload.ticket_id, payment_id=payload.payment_id
        )
        outcome = refund_service.refund_payment(payment, payload.reason)
        return {
            "payment_id": outcome.payment.id,
            "refund_id": outcome.refund_id,
            "amount": outcome.amount,
            "currency": outcome.currency,
            "status": outcome.status,
            "tickets_released": len(outcome.released_tickets),
        }

    @route.get(
        "/history",
        url_name="payment_history",
        response=PaginatedResponseSchema[schema.PaymentSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def payment_history(self) -> QuerySet[models.Payment]:
        """Your payments, newest first."""
        return (
            models.Payment.objects.filter(user=self.user())
            .select_related("event")
            .prefetch_related("tickets")
            .order_by("-created_at")
        )
