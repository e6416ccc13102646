"""Ticket and ticket tier schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from accounts.schema import MinimalUserSchema
from common.schema import StrippedString
from events.models import Payment, Ticket, TicketTier
from events.provenance import ProvenanceRecord

from .event import CurrencyCode, MinimalEventSchema


class TicketTierSchema(ModelSchema):
    event_id: UUID
    sold: int

    class Meta:
        model = TicketTier
        fields = ["id", "name", "description", "price", "currency", "quantity", "available", "is_active"]


class TicketTierCreateSchema(Schema):
    name: StrippedString = Field(..., min_length=1, max_length=150)
    description: StrippedString = ""
    price: Decimal = Field(Decimal(0), ge=0, max_digits=10, decimal_places=2)
    currency: CurrencyCode | None = None
    quantity: int | None = Field(None, ge=0)
    is_active: bool = True


class TicketTierUpdateSchema(Schema):
    name: StrippedString | None = Field(None, min_length=1, max_length=150)
    description: StrippedString | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    currency: CurrencyCode | None = None
    quantity: int | None = Field(None, ge=0)
    is_active: bool | None = None


class MinimalPaymentSchema(ModelSchema):
    class Meta:
        model = Payment
        fields = ["id", "status", "method", "order_number"]


class TicketSchema(ModelSchema):
    """A ticket as its attendee sees it. ``qr_code`` is the ticket id."""

    event: MinimalEventSchema
    tier: TicketTierSchema | None = None
    payment: MinimalPaymentSchema | None = None
    qr_code: str
    provenance: list[ProvenanceRecord]

    class Meta:
        model = Ticket
        fields = [
            "id",
            "status",
            "ticket_type",
            "price",
            "currency",
            "order_number",
            "attendee_name",
            "attendee_email",
            "promo_code",
            "discount",
            "checked_in",
            "checked_in_at",
            "created_at",
        ]

    @staticmethod
    def resolve_provenance(obj: Ticket) -> list[ProvenanceRecord]:
        return obj.provenance_records()


class AdminTicketSchema(TicketSchema):
    user: MinimalUserSchema


class NoShowResponseSchema(Schema):
    ticket: AdminTicketSchema
    promoted_ticket: AdminTicketSchema | None = None
    promoted_waitlist_entry_id: UUID | None = None


class CancelTicketSchema(Schema):
    reason: StrippedString = Field("", max_length=255)


class CheckInRequestSchema(Schema):
    ticket_id: UUID
