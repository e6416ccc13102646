"""Signal handlers for notification system."""

import typing as t

import structlog
from django.dispatch import receiver

from notifications.service.dispatcher import create_notification
from notifications.signals import notification_requested

logger = structlog.get_logger(__name__)


def _sender_name(sender: t.Any) -> str:
    return sender.__name__ if hasattr(sender, "__name__") else str(sender)


@receiver(notification_requested)
def handle_notification_request(sender: t.Any, **kwargs: t.Any) -> None:
    """Create the notification record and hand it to the dispatch task.

    This handler never raises: a failed notification must not fail the booking,
    no-show or refund that requested it. Errors are logged and swallowed.
    """
    notification_type = kwargs.get("notification_type")
    user = kwargs.get("user")
    context = kwargs.get("context", {})

    if not notification_type or not user:
        logger.error(
            "invalid_notification_request",
            notification_type=notification_type,
            sender=_sender_name(sender),
        )
        return

    try:
        notification = create_notification(notification_type=notification_type, user=user, context=context)

        from notifications.tasks import dispatch_notification

        dispatch_notification.delay(str(notification.id))

        logger.info(
            "notification_request_handled",
            notification_id=str(notification.id),
            notification_type=notification_type,
            user_id=str(user.id),
            sender=_sender_name(sender),
        )
    except Exception as e:
        logger.exception(
            "notification_request_failed",
            notification_type=notification_type,
            user_id=str(user.id),
            sender=_sender_name(sender),
            error=str(e),
            error_type=type(e).__name__,
        )
