from .event import Event
from .ticket import Payment, Ticket, TicketTier
from .waitlist import WaitlistEntry

__all__ = [
    "Event",
    "Payment",
    "Ticket",
    "TicketTier",
    "WaitlistEntry",
]
