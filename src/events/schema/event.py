"""Event schemas."""

import typing as t
from decimal import Decimal

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from accounts.schema import MinimalUserSchema
from common.schema import StrippedString
from events.models import Event

CurrencyCode = t.Annotated[str, Field(min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")]


class MinimalEventSchema(ModelSchema):
    status: str

    class Meta:
        model = Event
        fields = ["id", "title", "start_date", "end_date"]

    @staticmethod
    def resolve_status(obj: Event) -> str:
        return obj.computed_status()


class EventSchema(ModelSchema):
    """Public representation of an event. ``status`` reports ENDED once a live event is over."""

    organizer: MinimalUserSchema
    status: str
    spots_left: int
    is_full: bool

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "location",
            "start_date",
            "end_date",
            "max_attendees",
            "current_bookings",
            "price",
            "currency",
            "created_at",
        ]

    @staticmethod
    def resolve_status(obj: Event) -> str:
        return obj.computed_status()


class _EventDatesMixin(Schema):
    @model_validator(mode="after")
    def end_after_start(self) -> t.Self:
        start, end = getattr(self, "start_date", None), getattr(self, "end_date", None)
        if start and end and end < start:
            raise ValueError("The event cannot end before it starts.")
        return self


class EventCreateSchema(_EventDatesMixin):
    title: StrippedString = Field(..., min_length=1, max_length=255)
    description: StrippedString = ""
    location: StrippedString = Field("", max_length=255)
    start_date: AwareDatetime
    end_date: AwareDatetime
    max_attendees: int = Field(100, ge=1)
    price: Decimal = Field(Decimal(0), ge=0, max_digits=10, decimal_places=2)
    currency: CurrencyCode = "USD"


class EventUpdateSchema(_EventDatesMixin):
    title: StrippedString | None = Field(None, min_length=1, max_length=255)
    description: StrippedString | None = None
    location: StrippedString | None = Field(None, max_length=255)
    start_date: AwareDatetime | None = None
    end_date: AwareDatetime | None = None
    max_attendees: int | None = Field(None, ge=1)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    currency: CurrencyCode | None = None
