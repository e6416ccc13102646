"""Email notification channel implementation."""

import structlog
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone

from notifications.enums import DeliveryChannel, DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.base import NotificationChannel
from notifications.service.templates import get_template

logger = structlog.get_logger(__name__)


def to_safe_email_address(email: str) -> str:
    """Redirect outgoing mail to the catch-all address outside of live mode."""
    if settings.EMAIL_LIVE_MODE or not settings.EMAIL_CATCHALL_ADDRESS:
        return email
    local, _, domain = settings.EMAIL_CATCHALL_ADDRESS.partition("@")
    return f"{local}+{email.replace('@', '_at_')}@{domain}"


class EmailChannel(NotificationChannel):
    """Email notification channel."""

    def get_channel_name(self) -> str:
        return DeliveryChannel.EMAIL

    def can_deliver(self, notification: Notification) -> bool:
        if not notification.user.email:
            logger.warning(
                "user_missing_email",
                notification_id=str(notification.id),
                user_id=str(notification.user_id),
            )
            return False
        return True

    def deliver(self, notification: Notification, delivery: NotificationDelivery) -> bool:
        """Send the email and record the outcome on the delivery.

        Transport errors propagate so the task can decide whether to retry.
        """
        delivery.attempted_at = timezone.now()
        delivery.retry_count += 1
        delivery.save(update_fields=["attempted_at", "retry_count", "updated_at"])

        template = get_template(notification.notification_type)
        recipient = to_safe_email_address(notification.user.email)
        message = EmailMultiAlternatives(
            subject=template.get_email_subject(notification),
            body=template.get_email_body(notification),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[recipient],
        )
        message.send(fail_silently=False)

        delivery.status = DeliveryStatus.SENT
        delivery.delivered_at = timezone.now()
        delivery.save(update_fields=["status", "delivered_at", "updated_at"])

        logger.info(
            "email_notification_sent",
            notification_id=str(notification.id),
            notification_type=notification.notification_type,
            user_id=str(notification.user_id),
        )
        return True
