"""Core notification dispatcher service."""

import typing as t

import structlog

from accounts.models import EventifyUser
from notifications.enums import DeliveryChannel, NotificationType
from notifications.models import Notification

logger = structlog.get_logger(__name__)


def create_notification(
    notification_type: NotificationType | str,
    user: EventifyUser,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record.

    Args:
        notification_type: Type of notification
        user: User to notify
        context: Notification context data

    Returns:
        Created Notification instance

    Raises:
        ValueError: If context validation fails
    """
    from notifications.context_schemas import validate_notification_context

    if isinstance(notification_type, str):
        notification_type = NotificationType(notification_type)

    validate_notification_context(notification_type, context)

    # title/body are rendered by the dispatch task
    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
        link=context.get("frontend_url", ""),
    )

    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        notification_type=notification_type,
        user_id=str(user.id),
    )

    return notification


def determine_delivery_channels(user: EventifyUser, notification_type: str) -> list[str]:
    """In-app always; email when the user has an address."""
    channels: list[str] = [DeliveryChannel.IN_APP]
    if user.email:
        channels.append(DeliveryChannel.EMAIL)

    logger.debug(
        "determined_delivery_channels",
        user_id=str(user.id),
        notification_type=notification_type,
        channels=channels,
    )
    return channels
