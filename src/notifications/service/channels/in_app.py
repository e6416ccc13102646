"""In-app notification channel implementation."""

import structlog
from django.utils import timezone

from notifications.enums import DeliveryChannel, DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.base import NotificationChannel

logger = structlog.get_logger(__name__)


class InAppChannel(NotificationChannel):
    """In-app notification channel.

    The notification record itself is the in-app notification, so delivery only
    marks the record as sent.
    """

    def get_channel_name(self) -> str:
        return DeliveryChannel.IN_APP

    def can_deliver(self, notification: Notification) -> bool:
        return True

    def deliver(self, notification: Notification, delivery: NotificationDelivery) -> bool:
        now = timezone.now()
        delivery.status = DeliveryStatus.SENT
        delivery.attempted_at = now
        delivery.delivered_at = now
        delivery.save(update_fields=["status", "attempted_at", "delivered_at", "updated_at"])

        logger.info(
            "in_app_notification_delivered",
            notification_id=str(notification.id),
            notification_type=notification.notification_type,
            user_id=str(notification.user_id),
        )
        return True
