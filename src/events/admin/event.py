# src/events/admin/event.py
"""Admin classes for Event and WaitlistEntry."""

from django.contrib import admin
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import (
    EventLinkMixin,
    TicketInline,
    TicketTierInline,
    UserLinkMixin,
    WaitlistEntryInline,
)


@admin.register(models.Event)
class EventAdmin(ModelAdmin, UserLinkMixin):  # type: ignore[misc]
    """Admin model for Events.

    Booking counters are read-only: they only move through the inventory ledger.
    """

    list_display = [
        "title",
        "user_link",
        "status",
        "start_date",
        "end_date",
        "bookings_display",
    ]
    list_filter = ["status", "start_date"]
    search_fields = ["title", "location", "organizer__username", "organizer__email"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["current_bookings", "created_at", "updated_at"]
    date_hierarchy = "start_date"
    inlines = [TicketTierInline, TicketInline, WaitlistEntryInline]

    fieldsets = [
        ("Details", {"fields": ("organizer", "title", "description", "location")}),
        (
            "Configuration",
            {
                "fields": (
                    "status",
                    ("start_date", "end_date"),
                    ("max_attendees", "current_bookings"),
                    ("price", "currency"),
                )
            },
        ),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    ]

    @admin.display(description="Bookings")
    def bookings_display(self, obj: models.Event) -> str:
        return f"{obj.current_bookings} / {obj.max_attendees}"


@admin.register(models.WaitlistEntry)
class WaitlistEntryAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    list_display = ["user_link", "event_link", "tier", "quantity", "status", "requested_at", "decided_at"]
    list_filter = ["status", "requested_at"]
    search_fields = ["user__username", "user__email", "event__title", "tier__name"]
    autocomplete_fields = ["user", "event", "tier"]
    readonly_fields = ["requested_at", "decided_at", "ticket"]
    ordering = ["requested_at"]
