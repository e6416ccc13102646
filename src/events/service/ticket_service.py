"""Ticket operations outside the booking and no-show workflows."""

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import (
    AlreadyCancelledError,
    AlreadyCheckedInError,
    InvalidStateTransitionError,
    UnauthorizedError,
)
from events.models import Event, Ticket
from events.provenance import CancellationRecord
from events.service import inventory_ledger
from events.service.access import assert_can_manage
from notifications.service.notification_helpers import notify_ticket_cancelled

logger = structlog.get_logger(__name__)


@transaction.atomic
def cancel_ticket(ticket: Ticket, actor: EventifyUser, reason: str = "") -> Ticket:
    """Cancel a ticket and give its seat back. Cancelled tickets cannot be restored.

    Raises:
        UnauthorizedError: The actor is not the attendee, the organizer or an admin.
        AlreadyCancelledError: The ticket is already cancelled.
        AlreadyReleasedError: The ticket was refunded.
    """
    locked = inventory_ledger.lock_ticket(ticket)
    if locked.user_id != actor.pk and not locked.event.can_be_managed_by(actor):
        raise UnauthorizedError(_("You cannot cancel this ticket."))
    if locked.status in Ticket.CANCELLED_STATUSES:
        raise AlreadyCancelledError()

    released = inventory_ledger.release_ticket(
        locked,
        status=Ticket.TicketStatus.CANCELLED_MANUAL,
        record=CancellationRecord(cancelled_by=actor.id, cancelled_at=timezone.now(), reason=reason),
    )
    logger.info("ticket_cancelled", ticket_id=str(released.id), actor_id=str(actor.id))
    if released.user_id != actor.pk:
        notify_ticket_cancelled(released, reason)
    return released


@transaction.atomic
def check_in_ticket(ticket: Ticket, actor: EventifyUser) -> Ticket:
    """Check in a confirmed ticket at the door.

    Raises:
        UnauthorizedError: The actor cannot manage the event.
        InvalidStateTransitionError: The ticket is not confirmed.
        AlreadyCheckedInError: The ticket was checked in before.
    """
    locked = inventory_ledger.lock_ticket(ticket)
    assert_can_manage(locked.event, actor)
    if locked.status != Ticket.TicketStatus.CONFIRMED:
        raise InvalidStateTransitionError(
            _("Only confirmed tickets can be checked in. This ticket is %(status)s.")
            % {"status": locked.get_status_display().lower()}
        )
    if locked.checked_in:
        raise AlreadyCheckedInError()

    locked.checked_in = True
    locked.checked_in_at = timezone.now()
    locked.save(update_fields=["checked_in", "checked_in_at", "updated_at"])
    logger.info("ticket_checked_in", ticket_id=str(locked.id), actor_id=str(actor.id))
    return locked


def list_for_user(user: EventifyUser) -> QuerySet[Ticket]:
    return Ticket.objects.full().filter(user=user).order_by("-created_at")


def list_for_event(event: Event, actor: EventifyUser, status: str | None = None) -> QuerySet[Ticket]:
    assert_can_manage(event, actor)
    qs = Ticket.objects.full().filter(event=event)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")
