from uuid import UUID

from django.db.models import QuerySet
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import EventifyJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import ticket_service, waitlist_service

from .lookups import get_or_not_found


@api_controller("/me", auth=EventifyJWTAuth(), tags=["My Tickets"], throttle=UserDefaultThrottle())
class MyTicketsController(UserAwareController):
    """The authenticated user's tickets and waitlist entries."""

    @route.get("/tickets", url_name="my_tickets", response=PaginatedResponseSchema[schema.TicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_tickets(self) -> QuerySet[models.Ticket]:
        return ticket_service.list_for_user(self.user())

    @route.get("/tickets/{ticket_id}", url_name="my_ticket", response={200: schema.TicketSchema, 404: ErrorResponse})
    def get_ticket(self, ticket_id: UUID) -> models.Ticket:
        """A single ticket. Its QR code is the ticket id."""
        return get_or_not_found(ticket_service.list_for_user(self.user()), _("Ticket not found."), pk=ticket_id)

    @route.post(
        "/tickets/{ticket_id}/cancel",
        url_name="cancel_my_ticket",
        response={200: schema.TicketSchema, 404: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def cancel_ticket(self, ticket_id: UUID, payload: schema.CancelTicketSchema) -> models.Ticket:
        """Give up a ticket without a refund. The seat goes back on sale."""
        ticket = get_or_not_found(ticket_service.list_for_user(self.user()), _("Ticket not found."), pk=ticket_id)
        return ticket_service.cancel_ticket(ticket, self.user(), reason=payload.reason)

    @route.get("/waitlist", url_name="my_waitlist", response=PaginatedResponseSchema[schema.WaitlistEntrySchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_waitlist(self) -> QuerySet[models.WaitlistEntry]:
        return waitlist_service.list_for_user(self.user())
