"""Support tickets: users open them, admins triage and answer them."""

import typing as t
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import NotFoundError, UnauthorizedError
from support.models import SupportTicket, SupportTicketReply

logger = structlog.get_logger(__name__)


def _assert_admin(actor: EventifyUser) -> None:
    if not actor.is_admin:
        raise UnauthorizedError(_("Only admins can manage support tickets."))


def create_ticket(
    user: EventifyUser,
    *,
    subject: str,
    description: str,
    category: str = SupportTicket.Category.GENERAL,
    priority: str = SupportTicket.Priority.MEDIUM,
) -> SupportTicket:
    ticket = SupportTicket.objects.create(
        user=user, subject=subject, description=description, category=category, priority=priority
    )
    logger.info("support_ticket_created", ticket_id=str(ticket.id), category=category, priority=priority)
    return ticket


def list_for_user(user: EventifyUser) -> QuerySet[SupportTicket]:
    return SupportTicket.objects.filter(user=user)


def list_all(actor: EventifyUser) -> QuerySet[SupportTicket]:
    """Every ticket, for admins.

    Raises:
        UnauthorizedError: The actor is not an admin.
    """
    _assert_admin(actor)
    return SupportTicket.objects.select_related("user", "assigned_to")


def get_ticket(ticket_id: UUID, actor: EventifyUser) -> SupportTicket:
    """A ticket with its replies, if the actor wrote it or is an admin.

    Raises:
        NotFoundError: No such ticket.
        UnauthorizedError: Someone else's ticket.
    """
    try:
        ticket = SupportTicket.objects.full().get(pk=ticket_id)
    except SupportTicket.DoesNotExist as e:
        raise NotFoundError(_("Support ticket not found.")) from e
    if not ticket.is_visible_to(actor):
        raise UnauthorizedError(_("You are not allowed to view this support ticket."))
    return ticket


@transaction.atomic
def update_ticket(ticket: SupportTicket, actor: EventifyUser, **changes: t.Any) -> SupportTicket:
    """Admin triage: status, priority, assignee and resolution.

    Moving to resolved or closed stamps ``resolved_at``; reopening clears it.

    Raises:
        UnauthorizedError: The actor is not an admin.
        NotFoundError: The assignee does not exist.
    """
    _assert_admin(actor)
    ticket = SupportTicket.objects.select_for_update().get(pk=ticket.pk)

    if (assignee_id := changes.pop("assigned_to_id", None)) is not None:
        try:
            ticket.assigned_to = EventifyUser.objects.get(pk=assignee_id)
        except EventifyUser.DoesNotExist as e:
            raise NotFoundError(_("Assignee not found.")) from e
    for field in ("status", "priority", "resolution"):
        if changes.get(field) is not None:
            setattr(ticket, field, changes[field])

    if ticket.status in SupportTicket.FINAL_STATUSES:
        ticket.resolved_at = ticket.resolved_at or timezone.now()
    else:
        ticket.resolved_at = None
    ticket.save()
    logger.info("support_ticket_updated", ticket_id=str(ticket.id), status=ticket.status, actor_id=str(actor.id))
    return ticket


@transaction.atomic
def add_reply(ticket: SupportTicket, actor: EventifyUser, message: str) -> SupportTicketReply:
    """Answer a ticket. An admin's first answer to an open ticket takes it in progress and assigns it.

    Raises:
        UnauthorizedError: Someone else's ticket.
    """
    if not ticket.is_visible_to(actor):
        raise UnauthorizedError(_("You are not allowed to reply to this support ticket."))

    reply = SupportTicketReply.objects.create(ticket=ticket, user=actor, message=message, is_admin_reply=actor.is_admin)
    if actor.is_admin and ticket.status == SupportTicket.Status.OPEN:
        SupportTicket.objects.filter(pk=ticket.pk, status=SupportTicket.Status.OPEN).update(
            status=SupportTicket.Status.IN_PROGRESS, assigned_to=actor, updated_at=timezone.now()
        )
        ticket.refresh_from_db()
    logger.info("support_reply_added", ticket_id=str(ticket.id), admin_reply=reply.is_admin_reply)
    return reply


def list_replies(ticket: SupportTicket) -> QuerySet[SupportTicketReply]:
    return ticket.replies.select_related("user").order_by("created_at")
