# src/events/admin/__init__.py
"""Events admin module.

Django autodiscover imports this module, which registers the admin classes
through the @admin.register decorators in the submodules.
"""

from events.admin.event import EventAdmin, WaitlistEntryAdmin
from events.admin.ticket import PaymentAdmin, TicketAdmin, TicketTierAdmin

__all__ = [
    "EventAdmin",
    "PaymentAdmin",
    "TicketAdmin",
    "TicketTierAdmin",
    "WaitlistEntryAdmin",
]
