from django.db.models import Q
from ninja import FilterSchema
from pydantic import AwareDatetime, Field

from .enums import NotificationType


class NotificationFilterSchema(FilterSchema):
    unread_only: bool = False
    notification_type: NotificationType | None = None
    since: AwareDatetime | None = Field(None, json_schema_extra={"q": "created_at__gte"})

    def filter_unread_only(self, unread_only: bool) -> Q:
        """Unread notifications only."""
        if unread_only:
            return Q(read_at__isnull=True)
        return Q()
