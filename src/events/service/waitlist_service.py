"""Per-tier FIFO waitlist and the promotion routine.

Promotion is shared by the no-show workflow and manual approval: an entry becomes approved
only by being converted into confirmed tickets.
"""

from decimal import Decimal

import structlog
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import EventifyUser
from events.exceptions import AlreadyWaitlistedError, InvalidStateTransitionError, NotFoundError, UnauthorizedError
from events.models import Event, Payment, Ticket, TicketTier, WaitlistEntry
from events.provenance import PromotionRecord
from events.service import inventory_ledger
from events.service.access import assert_can_manage
from events.service.booking_service import generate_order_number
from notifications.service.notification_helpers import notify_waitlist_promoted, notify_waitlist_rejected

logger = structlog.get_logger(__name__)


def join(event: Event, tier: TicketTier, user: EventifyUser, quantity: int = 1, notes: str = "") -> WaitlistEntry:
    """Queue the user for the tier.

    Raises:
        NotFoundError: The tier is inactive or belongs to another event.
        AlreadyWaitlistedError: The user already has an entry for this tier.
    """
    if tier.event_id != event.pk or not tier.is_active:
        raise NotFoundError(_("Ticket tier not found."))
    if WaitlistEntry.objects.filter(event=event, user=user, tier=tier).exists():
        raise AlreadyWaitlistedError()

    try:
        with transaction.atomic():
            entry = WaitlistEntry.objects.create(
                event=event, tier=tier, user=user, quantity=quantity, notes=notes, requested_at=timezone.now()
            )
    except IntegrityError as e:
        raise AlreadyWaitlistedError() from e

    logger.info("waitlist_joined", entry_id=str(entry.id), event_id=str(event.id), tier_id=str(tier.id))
    return entry


def next_pending(event: Event, tier: TicketTier) -> WaitlistEntry | None:
    """Oldest pending entry of the tier, locked. The only way entries leave the queue."""
    return (
        WaitlistEntry.objects.select_for_update(of=("self",))
        .select_related("event", "event__organizer", "tier", "user")
        .filter(event=event, tier=tier)
        .pending()
        .fifo()
        .first()
    )


@transaction.atomic
def promote(
    entry: WaitlistEntry,
    *,
    seats: int,
    actor: EventifyUser | None = None,
    replaced_ticket: Ticket | None = None,
) -> list[Ticket]:
    """Turn a pending entry into ``seats`` confirmed tickets.

    Reserves the seats, issues the tickets and a waitlist-promotion payment (no charge), and
    approves the entry. A replaced ticket's price, type and currency carry over.

    Raises:
        TierSoldOutError: The tier cannot cover ``seats``.
        CapacityExceededError: The event cannot take ``seats`` more attendees.
    """
    event, tier = entry.event, entry.tier
    inventory_ledger.reserve(event, tier, seats)

    if replaced_ticket is not None:
        price, currency, ticket_type = replaced_ticket.price, replaced_ticket.currency, replaced_ticket.ticket_type
    else:
        price, currency, ticket_type = tier.price, tier.currency, tier.name

    now = timezone.now()
    record = PromotionRecord(
        waitlist_entry_id=entry.id,
        replaced_ticket_id=replaced_ticket.id if replaced_ticket else None,
        promoted_by=actor.id if actor else None,
        promoted_at=now,
    )
    order_number = generate_order_number()
    tickets = []
    for _seat in range(seats):
        ticket = Ticket(
            event=event,
            user=entry.user,
            tier=tier,
            status=Ticket.TicketStatus.CONFIRMED,
            ticket_type=ticket_type,
            price=price,
            currency=currency,
            order_number=order_number,
            attendee_name=entry.user.display_name,
            attendee_email=entry.user.email,
        )
        ticket.add_provenance(record)
        ticket.save()
        tickets.append(ticket)

    payment = Payment.objects.create(
        user=entry.user,
        event=event,
        ticket=tickets[0],
        amount=Decimal(price) * seats,
        currency=currency,
        method=Payment.PaymentMethod.WAITLIST_PROMOTION,
        status=Payment.PaymentStatus.COMPLETED,
        order_number=order_number,
        quantity=seats,
        metadata={
            "waitlist_entry_id": str(entry.id),
            "ticket_ids": [str(ticket.id) for ticket in tickets],
            "replaced_ticket_id": str(replaced_ticket.id) if replaced_ticket else None,
        },
    )
    Ticket.objects.filter(pk__in=[ticket.pk for ticket in tickets]).update(payment=payment)
    for ticket in tickets:
        ticket.payment = payment

    note = _("Promoted to ticket %(ticket)s.") % {"ticket": tickets[0].id}
    entry.status = WaitlistEntry.Status.APPROVED
    entry.ticket = tickets[0]
    entry.decided_at = now
    entry.notes = f"{entry.notes}\n{note}".strip()
    entry.save(update_fields=["status", "ticket", "decided_at", "notes", "updated_at"])

    logger.info(
        "waitlist_entry_promoted",
        entry_id=str(entry.id),
        event_id=str(event.id),
        tier_id=str(tier.id),
        seats=seats,
        ticket_ids=[str(ticket.id) for ticket in tickets],
        replaced_ticket_id=str(replaced_ticket.id) if replaced_ticket else None,
    )
    notify_waitlist_promoted(entry, tickets, replaced_ticket)
    return tickets


def _lock_entry(entry: WaitlistEntry) -> WaitlistEntry:
    try:
        return (
            WaitlistEntry.objects.select_for_update(of=("self",))
            .select_related("event", "event__organizer", "tier", "user")
            .get(pk=entry.pk)
        )
    except WaitlistEntry.DoesNotExist as e:
        raise NotFoundError(_("Waitlist entry not found.")) from e


@transaction.atomic
def update_status(entry: WaitlistEntry, status: str, actor: EventifyUser, notes: str | None = None) -> WaitlistEntry:
    """Approve or reject a pending entry.

    Approving promotes the entry for its full quantity; without room it fails and the
    entry stays pending.

    Raises:
        UnauthorizedError: The actor cannot manage the event.
        InvalidStateTransitionError: The entry was already decided, or ``status`` is pending.
    """
    locked = _lock_entry(entry)
    assert_can_manage(locked.event, actor)

    if locked.status != WaitlistEntry.Status.PENDING:
        raise InvalidStateTransitionError(
            _("The waitlist entry is already %(status)s.") % {"status": locked.get_status_display().lower()}
        )
    if notes is not None:
        locked.notes = notes

    if status == WaitlistEntry.Status.APPROVED:
        promote(locked, seats=locked.quantity, actor=actor)
    elif status == WaitlistEntry.Status.REJECTED:
        locked.status = WaitlistEntry.Status.REJECTED
        locked.decided_at = timezone.now()
        locked.save(update_fields=["status", "notes", "decided_at", "updated_at"])
        logger.info("waitlist_entry_rejected", entry_id=str(locked.id), actor_id=str(actor.id))
        notify_waitlist_rejected(locked)
    else:
        raise InvalidStateTransitionError(_("A waitlist entry can only be approved or rejected."))
    return locked


def remove(entry: WaitlistEntry, actor: EventifyUser) -> None:
    """The owner or an admin may always withdraw an entry.

    Raises:
        UnauthorizedError: The actor is neither.
    """
    if entry.user_id != actor.pk and not actor.is_admin:
        raise UnauthorizedError(_("You can only remove your own waitlist entries."))
    logger.info("waitlist_entry_removed", entry_id=str(entry.id), actor_id=str(actor.id))
    entry.delete()


def list_for_event(event: Event, actor: EventifyUser) -> QuerySet[WaitlistEntry]:
    """All entries of the event in queue order."""
    assert_can_manage(event, actor)
    return (
        WaitlistEntry.objects.filter(event=event)
        .select_related("tier", "user")
        .order_by("tier", "requested_at", "id")
    )


def list_for_user(user: EventifyUser) -> QuerySet[WaitlistEntry]:
    return WaitlistEntry.objects.filter(user=user).select_related("event", "tier").order_by("-requested_at")
