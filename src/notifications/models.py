"""Models for the notification system."""

from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel
from notifications.enums import DeliveryChannel, DeliveryStatus, NotificationType


class Notification(TimeStampedModel):
    """Core notification record - channel agnostic.

    Everything needed to render the notification lives in the context JSON field.
    The record itself is the in-app notification.
    """

    notification_type = models.CharField(
        max_length=50,
        db_index=True,
        choices=NotificationType.choices,
    )
    title = models.CharField(max_length=255, blank=True, default="", help_text="Rendered notification title")
    body = models.TextField(blank=True, default="", help_text="Rendered notification body")
    link = models.CharField(max_length=500, blank=True, default="", help_text="Frontend deep link")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications", db_index=True
    )
    context = models.JSONField(default=dict, blank=True, help_text="Structured context data")
    read_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta(TimeStampedModel.Meta):
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read_at"], name="notification_user_unread"),
            models.Index(fields=["user", "created_at"], name="notification_user_timeline"),
        ]

    def __str__(self) -> str:
        return f"{self.notification_type} for user {self.user_id} at {self.created_at}"

    def mark_read(self) -> None:
        """Mark notification as read."""
        if not self.read_at:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at", "updated_at"])

    def mark_unread(self) -> None:
        """Mark notification as unread."""
        if self.read_at:
            self.read_at = None
            self.save(update_fields=["read_at", "updated_at"])

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


class NotificationDelivery(TimeStampedModel):
    """Tracks the delivery attempt of one notification on one channel."""

    notification = models.ForeignKey(Notification, on_delete=models.CASCADE, related_name="deliveries")
    channel = models.CharField(max_length=20, choices=DeliveryChannel.choices, db_index=True)
    status = models.CharField(
        max_length=20, choices=DeliveryStatus.choices, default=DeliveryStatus.PENDING, db_index=True
    )
    attempted_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True, default="")
    retry_count = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [models.UniqueConstraint(fields=["notification", "channel"], name="unique_notification_channel")]

    def __str__(self) -> str:
        return f"{self.notification.notification_type} via {self.channel} - {self.status}"
