"""Support ticket schemas."""

from uuid import UUID

from ninja import FilterSchema, ModelSchema, Schema
from pydantic import Field

from accounts.schema import MinimalUserSchema
from common.schema import StrippedString
from support.models import SupportTicket, SupportTicketReply


class SupportTicketCreateSchema(Schema):
    subject: StrippedString = Field(..., min_length=1, max_length=255)
    description: StrippedString = Field(..., min_length=1)
    category: SupportTicket.Category = SupportTicket.Category.GENERAL
    priority: SupportTicket.Priority = SupportTicket.Priority.MEDIUM


class SupportTicketUpdateSchema(Schema):
    status: SupportTicket.Status | None = None
    priority: SupportTicket.Priority | None = None
    assigned_to_id: UUID | None = None
    resolution: StrippedString | None = None


class SupportTicketFilterSchema(FilterSchema):
    status: SupportTicket.Status | None = None
    category: SupportTicket.Category | None = None


class SupportReplyCreateSchema(Schema):
    message: StrippedString = Field(..., min_length=1)


class SupportReplySchema(ModelSchema):
    user: MinimalUserSchema

    class Meta:
        model = SupportTicketReply
        fields = ["id", "message", "is_admin_reply", "created_at"]


class SupportTicketSchema(ModelSchema):
    user: MinimalUserSchema
    assigned_to: MinimalUserSchema | None = None

    class Meta:
        model = SupportTicket
        fields = [
            "id",
            "subject",
            "description",
            "category",
            "priority",
            "status",
            "resolution",
            "resolved_at",
            "created_at",
            "updated_at",
        ]


class SupportTicketDetailSchema(SupportTicketSchema):
    replies: list[SupportReplySchema]

    @staticmethod
    def resolve_replies(obj: SupportTicket) -> list[SupportTicketReply]:
        return list(obj.replies.all())
