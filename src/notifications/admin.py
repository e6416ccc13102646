"""Django admin for notification models."""

from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from notifications.models import Notification, NotificationDelivery


class NotificationDeliveryInline(TabularInline):  # type: ignore[misc]
    model = NotificationDelivery
    extra = 0
    can_delete = False
    readonly_fields = ["channel", "status", "attempted_at", "delivered_at", "error_message", "retry_count"]


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["id", "notification_type", "user", "title", "read_at", "created_at"]
    list_filter = ["notification_type", "read_at", "created_at"]
    search_fields = ["user__email", "user__username", "title", "body"]
    readonly_fields = ["id", "created_at", "updated_at", "notification_type", "context"]
    date_hierarchy = "created_at"
    inlines = [NotificationDeliveryInline]


@admin.register(NotificationDelivery)
class NotificationDeliveryAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["notification", "channel", "status", "retry_count", "attempted_at", "delivered_at"]
    list_filter = ["channel", "status"]
    readonly_fields = ["id", "created_at", "updated_at"]
