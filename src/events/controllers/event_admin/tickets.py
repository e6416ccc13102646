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
from events.service import no_show_service, ticket_service, ticket_tier_service

from .base import EventAdminBaseController


@api_controller("/event-admin/{event_id}", auth=EventifyJWTAuth(), tags=["Event Admin"], throttle=WriteThrottle())
class EventAdminTicketsController(EventAdminBaseController):
    """Ticket tier and ticket management endpoints."""

    def get_tier(self, event: models.Event, tier_id: UUID) -> models.TicketTier:
        return get_or_not_found(models.TicketTier.objects.all(), _("Ticket tier not found."), pk=tier_id, event=event)

    # ---- Ticket Tiers ----

    @route.get(
        "/ticket-tiers",
        url_name="list_ticket_tiers",
        response=list[schema.TicketTierSchema],
        throttle=UserDefaultThrottle(),
    )
    def list_ticket_tiers(self, event_id: UUID) -> QuerySet[models.TicketTier]:
        """All tiers of the event, including inactive ones."""
        return models.TicketTier.objects.filter(event=self.get_one(event_id))

    @route.post(
        "/ticket-tiers",
        url_name="create_ticket_tier",
        response={201: schema.TicketTierSchema, 403: ErrorResponse},
    )
    def create_ticket_tier(
        self, event_id: UUID, payload: schema.TicketTierCreateSchema
    ) -> tuple[int, models.TicketTier]:
        """Create a tier. Without a quantity it gets the default allocation."""
        event = self.get_one(event_id)
        return 201, ticket_tier_service.create_tier(event, self.user(), **payload.model_dump())

    @route.put(
        "/ticket-tiers/{tier_id}",
        url_name="update_ticket_tier",
        response={200: schema.TicketTierSchema, 409: ErrorResponse},
    )
    def update_ticket_tier(
        self, event_id: UUID, tier_id: UUID, payload: schema.TicketTierUpdateSchema
    ) -> models.TicketTier:
        """Update a tier. Changing the quantity moves the available count by the same amount."""
        tier = self.get_tier(self.get_one(event_id), tier_id)
        return ticket_tier_service.update_tier(tier, self.user(), **payload.model_dump(exclude_unset=True))

    @route.delete("/ticket-tiers/{tier_id}", url_name="delete_ticket_tier", response={204: None})
    def delete_ticket_tier(self, event_id: UUID, tier_id: UUID) -> tuple[int, None]:
        """Take a tier off sale. Sold tickets are kept."""
        tier = self.get_tier(self.get_one(event_id), tier_id)
        ticket_tier_service.soft_delete_tier(tier, self.user())
        return 204, None

    # ---- Tickets ----

    @route.get(
        "/tickets",
        url_name="list_event_tickets",
        response=PaginatedResponseSchema[schema.AdminTicketSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["attendee_name", "attendee_email", "order_number", "user__email"])
    def list_tickets(self, event_id: UUID, status: models.Ticket.TicketStatus | None = None) -> QuerySet[models.Ticket]:
        """Tickets of the event, newest first. Filter by lifecycle status."""
        return ticket_service.list_for_event(self.get_one(event_id), self.user(), status=status)

    @route.post(
        "/tickets/{ticket_id}/no-show",
        url_name="mark_no_show",
        response={200: schema.NoShowResponseSchema, 403: ErrorResponse, 409: ErrorResponse},
    )
    def mark_no_show(self, event_id: UUID, ticket_id: UUID) -> dict[str, object]:
        """Cancel the ticket as a no-show.

        The freed seat goes to the oldest pending waitlist entry of the ticket's tier if there is one;
        otherwise it returns to the tier and the event.
        """
        ticket = self.get_ticket(self.get_one(event_id), ticket_id)
        result = no_show_service.mark_no_show(ticket, self.user())
        return {
            "ticket": result.ticket,
            "promoted_ticket": result.promoted_ticket,
            "promoted_waitlist_entry_id": result.promoted_entry.id if result.promoted_entry else None,
        }

    @route.post(
        "/tickets/{ticket_id}/restore",
        url_name="restore_ticket",
        response={200: schema.AdminTicketSchema, 409: ErrorResponse},
    )
    def restore_ticket(self, event_id: UUID, ticket_id: UUID) -> models.Ticket:
        """Undo a no-show while the event still has room."""
        ticket = self.get_ticket(self.get_one(event_id), ticket_id)
        return no_show_service.restore_ticket(ticket, self.user())

    @route.post(
        "/tickets/{ticket_id}/cancel",
        url_name="cancel_event_ticket",
        response={200: schema.AdminTicketSchema, 409: ErrorResponse},
    )
    def cancel_ticket(self, event_id: UUID, ticket_id: UUID, payload: schema.CancelTicketSchema) -> models.Ticket:
        ticket = self.get_ticket(self.get_one(event_id), ticket_id)
        return ticket_service.cancel_ticket(ticket, self.user(), reason=payload.reason)

    @route.post(
        "/check-in",
        url_name="check_in_ticket",
        response={200: schema.AdminTicketSchema, 404: ErrorResponse, 409: ErrorResponse},
    )
    def check_in(self, event_id: UUID, payload: schema.CheckInRequestSchema) -> models.Ticket:
        """Check in the ticket behind a scanned QR code."""
        ticket = self.get_ticket(self.get_one(event_id), payload.ticket_id)
        return ticket_service.check_in_ticket(ticket, self.user())
