from uuid import UUID

from django.db.models import QuerySet
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.authentication import EventifyJWTAuth
from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.lookups import get_or_not_found
from events.service import waitlist_service

from .base import EventAdminBaseController


@api_controller("/event-admin/{event_id}", auth=EventifyJWTAuth(), tags=["Event Admin"], throttle=WriteThrottle())
class EventAdminWaitlistController(EventAdminBaseController):
    """Event waitlist management endpoints."""

    @route.get(
        "/waitlist",
        url_name="list_waitlist",
        response=PaginatedResponseSchema[schema.WaitlistEntrySchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["user__email", "user__first_name", "user__last_name", "notes"])
    def list_waitlist(self, event_id: UUID) -> QuerySet[models.WaitlistEntry]:
        """All waitlist entries of the event, in queue order per tier."""
        return waitlist_service.list_for_event(self.get_one(event_id), self.user())

    @route.post(
        "/waitlist/{entry_id}/status",
        url_name="update_waitlist_status",
        response={200: schema.WaitlistEntrySchema, 409: ErrorResponse},
    )
    def update_waitlist_status(
        self, event_id: UUID, entry_id: UUID, payload: schema.WaitlistStatusUpdateSchema
    ) -> models.WaitlistEntry:
        """Approve or reject a pending entry.

        Approving issues confirmed tickets for the entry's quantity right away and fails when the
        tier or the event has no room left.
        """
        event = self.get_one(event_id)
        entry = get_or_not_found(
            models.WaitlistEntry.objects.all(), _("Waitlist entry not found."), pk=entry_id, event=event
        )
        return waitlist_service.update_status(entry, payload.status, self.user(), notes=payload.notes)
