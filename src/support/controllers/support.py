from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import EventifyJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from support import schema
from support.models import SupportTicket, SupportTicketReply
from support.service import support_service


@api_controller("/support-tickets", auth=EventifyJWTAuth(), tags=["Support"], throttle=UserDefaultThrottle())
class SupportTicketController(UserAwareController):
    """Support requests from users and their answers."""

    @route.post(
        "",
        url_name="create_support_ticket",
        response={201: schema.SupportTicketSchema},
        throttle=WriteThrottle(),
    )
    def create_ticket(self, payload: schema.SupportTicketCreateSchema) -> tuple[int, SupportTicket]:
        return 201, support_service.create_ticket(self.user(), **payload.model_dump())

    @route.get("", url_name="my_support_tickets", response=PaginatedResponseSchema[schema.SupportTicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def my_tickets(
        self,
        params: schema.SupportTicketFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[SupportTicket]:
        """Your support tickets, newest first."""
        return params.filter(support_service.list_for_user(self.user()).select_related("user", "assigned_to"))

    @route.get("/all", url_name="all_support_tickets", response=PaginatedResponseSchema[schema.SupportTicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=50)
    def all_tickets(
        self,
        params: schema.SupportTicketFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[SupportTicket]:
        """Every support ticket. Admins only."""
        return params.filter(support_service.list_all(self.user()))

    @route.get(
        "/{ticket_id}",
        url_name="get_support_ticket",
        response={200: schema.SupportTicketDetailSchema, 403: ErrorResponse, 404: ErrorResponse},
    )
    def get_ticket(self, ticket_id: UUID) -> SupportTicket:
        return support_service.get_ticket(ticket_id, self.user())

    @route.patch(
        "/{ticket_id}",
        url_name="update_support_ticket",
        response={200: schema.SupportTicketSchema, 403: ErrorResponse, 404: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def update_ticket(self, ticket_id: UUID, payload: schema.SupportTicketUpdateSchema) -> SupportTicket:
        """Triage a ticket. Admins only."""
        ticket = support_service.get_ticket(ticket_id, self.user())
        return support_service.update_ticket(ticket, self.user(), **payload.model_dump(exclude_unset=True))

    @route.post(
        "/{ticket_id}/replies",
        url_name="add_support_reply",
        response={201: schema.SupportReplySchema, 403: ErrorResponse, 404: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def add_reply(self, ticket_id: UUID, payload: schema.SupportReplyCreateSchema) -> tuple[int, SupportTicketReply]:
        ticket = support_service.get_ticket(ticket_id, self.user())
        return 201, support_service.add_reply(ticket, self.user(), payload.message)

    @route.get(
        "/{ticket_id}/replies",
        url_name="list_support_replies",
        response={200: list[schema.SupportReplySchema], 403: ErrorResponse, 404: ErrorResponse},
    )
    def list_replies(self, ticket_id: UUID) -> QuerySet[SupportTicketReply]:
        """Replies in the order they were written."""
        return support_service.list_replies(support_service.get_ticket(ticket_id, self.user()))
