# src/events/admin/base.py
"""Base admin components: link mixins and inlines."""

import typing as t

from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import TabularInline

from events import models


class UserLinkMixin:
    """Mixin to add a link to a user."""

    def user_link(self, obj: t.Any) -> str:
        user = getattr(obj, "user", getattr(obj, "organizer", None))
        url = reverse("admin:accounts_eventifyuser_change", args=[user.id])  # type: ignore[union-attr]
        return format_html('<a href="{}">{}</a>', url, user.username)  # type: ignore[union-attr]

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str | None:
        if not getattr(obj, "event", None):
            return None
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class TicketTierInline(TabularInline):  # type: ignore[misc]
    model = models.TicketTier
    extra = 0
    fields = ("name", "price", "currency", "quantity", "available", "is_active")
    readonly_fields = ("available",)


class TicketInline(TabularInline):  # type: ignore[misc]
    model = models.Ticket
    extra = 0
    fields = ("order_number", "user", "tier", "status", "checked_in")
    readonly_fields = ("order_number", "user", "tier", "status", "checked_in")
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


class WaitlistEntryInline(TabularInline):  # type: ignore[misc]
    model = models.WaitlistEntry
    extra = 0
    fields = ("user", "tier", "quantity", "status", "requested_at")
    readonly_fields = ("user", "tier", "quantity", "status", "requested_at")
    can_delete = False

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False
