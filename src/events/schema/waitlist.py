"""Waitlist schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from accounts.schema import MinimalUserSchema
from common.schema import StrippedString
from events.models import WaitlistEntry

from .event import MinimalEventSchema


class WaitlistEntrySchema(ModelSchema):
    event: MinimalEventSchema
    user: MinimalUserSchema
    tier_id: UUID
    tier_name: str
    ticket_id: UUID | None = None

    class Meta:
        model = WaitlistEntry
        fields = ["id", "quantity", "notes", "status", "requested_at", "decided_at"]

    @staticmethod
    def resolve_tier_name(obj: WaitlistEntry) -> str:
        return obj.tier.name


class WaitlistJoinSchema(Schema):
    tier_id: UUID
    quantity: int = Field(1, ge=1)
    notes: StrippedString = ""


class WaitlistStatusUpdateSchema(Schema):
    status: t.Literal["approved", "rejected"]
    notes: StrippedString | None = None
