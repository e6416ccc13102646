"""Typed provenance records attached to tickets.

Every state change that is not a plain purchase leaves one record on the ticket. Records are
stored as a JSON list and validated on the way in and out.
"""

import typing as t
from datetime import datetime
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class NoShowRecord(_Record):
    kind: t.Literal["no_show"] = "no_show"
    marked_by: UUID
    marked_at: datetime


class RestoreRecord(_Record):
    kind: t.Literal["restore"] = "restore"
    restored_by: UUID
    restored_at: datetime


class PromotionRecord(_Record):
    """The ticket was issued from a waitlist entry.

    replaced_ticket_id is set when a no-show freed the seat; promoted_by is the organizer
    for manual approvals.
    """

    kind: t.Literal["promotion"] = "promotion"
    waitlist_entry_id: UUID
    replaced_ticket_id: UUID | None = None
    promoted_by: UUID | None = None
    promoted_at: datetime


class CancellationRecord(_Record):
    kind: t.Literal["cancellation"] = "cancellation"
    cancelled_by: UUID
    cancelled_at: datetime
    reason: str = ""


class RefundRecord(_Record):
    kind: t.Literal["refund"] = "refund"
    refund_id: str
    refunded_at: datetime
    reason: str = ""


ProvenanceRecord = t.Annotated[
    NoShowRecord | RestoreRecord | PromotionRecord | CancellationRecord | RefundRecord,
    Field(discriminator="kind"),
]

_records_adapter: TypeAdapter[list[ProvenanceRecord]] = TypeAdapter(list[ProvenanceRecord])


def parse_records(raw: list[dict[str, t.Any]]) -> list[ProvenanceRecord]:
    """Load stored provenance into typed records."""
    return _records_adapter.validate_python(raw)


def dump_record(record: ProvenanceRecord) -> dict[str, t.Any]:
    return record.model_dump(mode="json")


def validate_provenance(value: list[dict[str, t.Any]]) -> None:
    """Model field validator."""
    try:
        _records_adapter.validate_python(value)
    except PydanticValidationError as e:
        raise DjangoValidationError(str(e)) from e
