import typing as t

import pytest

from accounts.models import EventifyUser
from notifications.enums import NotificationType
from notifications.models import Notification


@pytest.fixture
def no_show_context() -> dict[str, t.Any]:
    return {
        "event_id": "7b0c4b1e-3f55-4a0e-9d0e-5d2c2f1f4a10",
        "event_title": "Summer Jazz Night",
        "ticket_id": "0f7a3c2d-1b9e-4c1a-8e57-2d6b8a9c4e21",
        "frontend_url": "http://localhost:3000/events/7b0c4b1e-3f55-4a0e-9d0e-5d2c2f1f4a10",
    }


@pytest.fixture
def notification(attendee: EventifyUser, no_show_context: dict[str, t.Any]) -> Notification:
    return Notification.objects.create(
        notification_type=NotificationType.TICKET_NO_SHOW,
        user=attendee,
        context=no_show_context,
        title="Marked as no-show for Summer Jazz Night",
    )
