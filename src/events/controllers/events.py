from uuid import UUID

from django.db.models import QuerySet
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.authentication import EventifyJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import WriteThrottle
from events import models, schema
from events.exceptions import NotFoundError
from events.service import waitlist_service

from .lookups import get_or_not_found


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    """Public event discovery and waitlist sign-up."""

    def get_one(self, event_id: UUID) -> models.Event:
        """Public events, plus non-public ones the user manages."""
        event = get_or_not_found(
            models.Event.objects.select_related("organizer"), _("Event not found."), pk=event_id
        )
        if event.status not in (models.Event.EventStatus.PUBLISHED, models.Event.EventStatus.LIVE):
            if not event.can_be_managed_by(self.maybe_user()):  # type: ignore[arg-type]
                raise NotFoundError(_("Event not found."))
        return event

    @route.get("", url_name="list_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["title", "description", "location"])
    def list_events(self) -> QuerySet[models.Event]:
        """Browse published and live events, soonest first."""
        return models.Event.objects.public().select_related("organizer").order_by("start_date")

    @route.get("/{event_id}", url_name="get_event", response={200: schema.EventSchema, 404: ErrorResponse})
    def get_event(self, event_id: UUID) -> models.Event:
        return self.get_one(event_id)

    @route.get(
        "/{event_id}/ticket-tiers",
        url_name="list_event_tiers",
        response={200: list[schema.TicketTierSchema], 404: ErrorResponse},
    )
    def list_ticket_tiers(self, event_id: UUID) -> QuerySet[models.TicketTier]:
        """Tiers currently on sale, with remaining availability."""
        event = self.get_one(event_id)
        return models.TicketTier.objects.active().filter(event=event)

    @route.post(
        "/{event_id}/waitlist",
        url_name="join_waitlist",
        auth=EventifyJWTAuth(),
        response={201: schema.WaitlistEntrySchema, 404: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def join_waitlist(
        self, event_id: UUID, payload: schema.WaitlistJoinSchema
    ) -> tuple[int, models.WaitlistEntry]:
        """Join the FIFO waitlist of a tier. One entry per user and tier."""
        event = self.get_one(event_id)
        tier = get_or_not_found(models.TicketTier.objects.all(), _("Ticket tier not found."), pk=payload.tier_id)
        entry = waitlist_service.join(event, tier, self.user(), quantity=payload.quantity, notes=payload.notes)
        return 201, entry

    @route.delete(
        "/{event_id}/waitlist/{entry_id}",
        url_name="leave_waitlist",
        auth=EventifyJWTAuth(),
        response={204: None, 403: ErrorResponse, 404: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def leave_waitlist(self, event_id: UUID, entry_id: UUID) -> tuple[int, None]:
        """Withdraw a waitlist entry. Owners and admins only."""
        entry = get_or_not_found(
            models.WaitlistEntry.objects.all(), _("Waitlist entry not found."), pk=entry_id, event_id=event_id
        )
        waitlist_service.remove(entry, self.user())
        return 204, None
