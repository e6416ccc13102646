"""Authorization checks shared by the ticketing services."""

from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import UnauthorizedError
from events.models import Event


def assert_can_manage(event: Event, actor: EventifyUser) -> None:
    """Only the event's organizer or an administrator may manage it.

    Raises:
        UnauthorizedError: The actor is neither.
    """
    if not event.can_be_managed_by(actor):
        raise UnauthorizedError(_("Only the organizer of this event or an admin can do this."))
