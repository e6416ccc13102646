from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.authentication import EventifyJWTAuth
from common.schema import ErrorResponse, ValidationErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import event_service

from .base import EventAdminBaseController


@api_controller("/event-admin", auth=EventifyJWTAuth(), tags=["Event Admin"], throttle=WriteThrottle())
class EventAdminCoreController(EventAdminBaseController):
    """Event lifecycle endpoints for organizers."""

    @route.get(
        "/events",
        url_name="list_managed_events",
        response=PaginatedResponseSchema[schema.EventSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["title", "location"])
    def list_managed_events(self) -> QuerySet[models.Event]:
        """Events the user organizes, in any status. Admins see all events."""
        return models.Event.objects.managed_by(self.user()).select_related("organizer").order_by("-start_date")

    @route.post(
        "/events",
        url_name="create_event",
        response={201: schema.EventSchema, 400: ValidationErrorResponse, 403: ErrorResponse},
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create a draft event. Publish it to open bookings."""
        return 201, event_service.create_event(self.user(), **payload.model_dump())

    @route.get("/events/{event_id}", url_name="get_managed_event", response=schema.EventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        return self.get_one(event_id)

    @route.put(
        "/events/{event_id}",
        url_name="update_event",
        response={200: schema.EventSchema, 400: ValidationErrorResponse, 409: ErrorResponse},
    )
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> models.Event:
        """Update event details. Capacity cannot drop below the seats already booked."""
        event = self.get_one(event_id)
        return event_service.update_event(event, self.user(), **payload.model_dump(exclude_unset=True))

    @route.post(
        "/events/{event_id}/publish",
        url_name="publish_event",
        response={200: schema.EventSchema, 409: ErrorResponse},
    )
    def publish_event(self, event_id: UUID) -> models.Event:
        """Make the event live. Refused once the event has ended."""
        return event_service.publish_event(self.get_one(event_id), self.user())

    @route.post(
        "/events/{event_id}/cancel",
        url_name="cancel_event",
        response={200: schema.EventSchema, 409: ErrorResponse},
    )
    def cancel_event(self, event_id: UUID) -> models.Event:
        return event_service.cancel_event(self.get_one(event_id), self.user())
