from uuid import UUID

from django.utils.translation import gettext as _

from common.controllers import UserAwareController
from events import models
from events.controllers.lookups import get_or_not_found
from events.service.access import assert_can_manage


class EventAdminBaseController(UserAwareController):
    """Base controller for event admin endpoints.

    Subclasses should be decorated with @api_controller to register routes.
    """

    def get_one(self, event_id: UUID) -> models.Event:
        """The event, if the user may manage it."""
        event = get_or_not_found(models.Event.objects.select_related("organizer"), _("Event not found."), pk=event_id)
        assert_can_manage(event, self.user())
        return event

    def get_ticket(self, event: models.Event, ticket_id: UUID) -> models.Ticket:
        return get_or_not_found(models.Ticket.objects.full(), _("Ticket not found."), pk=ticket_id, event=event)
