"""Event admin controllers package.

Endpoints for organizers and admins, split by resource.
"""

from .core import EventAdminCoreController
from .tickets import EventAdminTicketsController
from .waitlist import EventAdminWaitlistController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminCoreController,
    EventAdminTicketsController,
    EventAdminWaitlistController,
]

__all__ = [
    "EventAdminCoreController",
    "EventAdminTicketsController",
    "EventAdminWaitlistController",
    "EVENT_ADMIN_CONTROLLERS",
]
