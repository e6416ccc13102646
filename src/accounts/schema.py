"""Schema for accounts module."""

import typing as t

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, model_validator

from common.schema import StrippedString

from .models import EventifyUser


class EventifyUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = EventifyUser
        fields = ["email", "first_name", "last_name", "role", "is_active"]


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = EventifyUser
        fields = ["id", "first_name", "last_name", "email"]


class RegisterUserSchema(Schema):
    email: EmailStr
    password1: str = Field(..., min_length=8)
    password2: str
    first_name: StrippedString = ""
    last_name: StrippedString = ""
    role: t.Literal["ATTENDEE", "ORGANIZER"] = "ATTENDEE"

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterUserSchema":
        """Both passwords must be equal."""
        if self.password1 != self.password2:
            raise ValueError("Passwords do not match.")
        return self
