"""Celery tasks for notification dispatch and maintenance."""

import typing as t
from datetime import timedelta

import structlog
from celery import group, shared_task
from django.conf import settings
from django.utils import timezone

from notifications.enums import DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.registry import get_channel_instance
from notifications.service.dispatcher import determine_delivery_channels
from notifications.service.templates import get_template

logger = structlog.get_logger(__name__)

MAX_DELIVERY_ATTEMPTS = 3


@shared_task(bind=True, max_retries=3)
def dispatch_notification(self: t.Any, notification_id: str) -> dict[str, t.Any]:
    """Render a notification and fan it out to its delivery channels.

    1. Render title/body from the notification type's template
    2. Determine delivery channels
    3. Create NotificationDelivery records
    4. Dispatch one delivery task per channel
    """
    notification = Notification.objects.select_related("user").get(pk=notification_id)

    try:
        template = get_template(notification.notification_type)
        notification.title = template.get_title(notification)
        notification.body = template.get_body(notification)
        notification.save(update_fields=["title", "body", "updated_at"])
    except (KeyError, ValueError) as e:
        # channels fall back to the raw context
        logger.error(
            "notification_render_failed",
            notification_id=notification_id,
            notification_type=notification.notification_type,
            error=str(e),
        )

    channels = determine_delivery_channels(notification.user, notification.notification_type)

    deliveries = []
    for channel in channels:
        delivery, created = NotificationDelivery.objects.get_or_create(
            notification=notification,
            channel=channel,
            defaults={"status": DeliveryStatus.PENDING},
        )
        if created:
            deliveries.append(delivery)

    if deliveries:
        group(deliver_to_channel.si(str(delivery.id)) for delivery in deliveries).apply_async()

    logger.info(
        "notification_dispatched",
        notification_id=notification_id,
        notification_type=notification.notification_type,
        user_id=str(notification.user_id),
        channels=channels,
        delivery_count=len(deliveries),
    )

    return {"notification_id": notification_id, "channels": channels, "deliveries_created": len(deliveries)}


@shared_task(bind=True, max_retries=MAX_DELIVERY_ATTEMPTS)
def deliver_to_channel(self: t.Any, delivery_id: str) -> dict[str, t.Any]:
    """Deliver a notification through one channel, retrying transient failures."""
    delivery = NotificationDelivery.objects.select_related("notification", "notification__user").get(pk=delivery_id)
    channel = get_channel_instance(delivery.channel)

    if not channel.can_deliver(delivery.notification):
        delivery.status = DeliveryStatus.SKIPPED
        delivery.save(update_fields=["status", "updated_at"])
        logger.info("delivery_skipped", delivery_id=delivery_id, channel=delivery.channel)
        return {"status": "skipped"}

    try:
        channel.deliver(delivery.notification, delivery)
    except Exception as e:
        delivery.refresh_from_db()
        logger.error(
            "delivery_exception",
            delivery_id=delivery_id,
            channel=delivery.channel,
            error=str(e),
            retry_count=delivery.retry_count,
        )

        if channel.should_retry(e) and delivery.retry_count < MAX_DELIVERY_ATTEMPTS:
            countdown = 2**delivery.retry_count * 60
            logger.info("retrying_delivery", delivery_id=delivery_id, countdown=countdown)
            raise self.retry(exc=e, countdown=countdown)

        delivery.status = DeliveryStatus.FAILED
        delivery.error_message = str(e)
        delivery.save(update_fields=["status", "error_message", "updated_at"])
        raise

    return {"status": "sent", "channel": delivery.channel}


@shared_task
def cleanup_old_notifications() -> dict[str, t.Any]:
    """Delete notifications older than NOTIFICATION_RETENTION_DAYS.

    Runs daily via Celery beat.
    """
    retention_days = settings.NOTIFICATION_RETENTION_DAYS
    cutoff = timezone.now() - timedelta(days=retention_days)

    deleted_count, _ = Notification.objects.filter(created_at__lt=cutoff).delete()

    logger.info("notifications_cleaned_up", retention_days=retention_days, deleted_count=deleted_count)
    return {"deleted_count": deleted_count, "retention_days": retention_days}
