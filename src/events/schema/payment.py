"""Checkout, payment and refund schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr, Field, model_validator

from common.schema import StrippedString
from events.models import Payment

from .event import MinimalEventSchema
from .ticket import TicketSchema


class AttendeeSchema(Schema):
    name: StrippedString = Field("", max_length=255)
    email: EmailStr | None = None


class PaymentIntentCreateSchema(Schema):
    event_id: UUID
    ticket_tier_id: UUID | None = None
    quantity: int = Field(1, ge=1)
    promo_code: StrippedString = Field("", max_length=50)
    discount: Decimal = Field(Decimal(0), ge=0, le=100)
    amount: Decimal | None = Field(None, gt=0)


class PaymentIntentResponseSchema(Schema):
    client_secret: str
    payment_intent_id: str
    amount: Decimal
    currency: str


class ConfirmPaymentSchema(Schema):
    payment_intent_id: str = Field(..., min_length=1)
    event_id: UUID
    ticket_tier_id: UUID | None = None
    quantity: int = Field(1, ge=1)
    attendees: list[AttendeeSchema] = Field(default_factory=list)


class PaymentSchema(ModelSchema):
    event: MinimalEventSchema
    ticket_ids: list[UUID]

    class Meta:
        model = Payment
        fields = [
            "id",
            "amount",
            "currency",
            "method",
            "status",
            "order_number",
            "quantity",
            "stripe_payment_id",
            "refund_id",
            "refunded_at",
            "refund_reason",
            "created_at",
        ]

    @staticmethod
    def resolve_ticket_ids(obj: Payment) -> list[UUID]:
        return [ticket.id for ticket in obj.tickets.all()]


class BookingResponseSchema(Schema):
    order_number: str
    payment: PaymentSchema
    tickets: list[TicketSchema]


class RefundRequestSchema(Schema):
    ticket_id: UUID | None = None
    payment_id: str | None = None
    reason: StrippedString | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def ticket_or_payment(self) -> "RefundRequestSchema":
        if not self.ticket_id and not self.payment_id:
            raise ValueError("Either ticket_id or payment_id is required.")
        return self


class RefundResponseSchema(Schema):
    payment_id: UUID
    refund_id: str
    amount: Decimal
    currency: str
    status: str
    tickets_released: int
