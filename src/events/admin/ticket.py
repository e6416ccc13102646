# src/events/admin/ticket.py
"""Admin classes for Ticket, TicketTier, and Payment models."""

import typing as t

from django.contrib import admin
from django.utils.safestring import mark_safe
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import EventLinkMixin, UserLinkMixin


@admin.register(models.TicketTier)
class TicketTierAdmin(ModelAdmin, EventLinkMixin):  # type: ignore[misc]
    """Admin view for TicketTier."""

    list_display = ["__str__", "name", "event_link", "price", "quantity", "available", "is_active"]
    list_filter = ["is_active", "event"]
    search_fields = ["name", "event__title", "description"]
    autocomplete_fields = ["event"]
    readonly_fields = ["available"]


@admin.register(models.Ticket)
class TicketAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    list_display = [
        "order_number",
        "event_link",
        "user_link",
        "tier_name",
        "status",
        "checked_in",
        "checked_in_at",
    ]
    list_filter = ["status", "checked_in", "event__title"]
    search_fields = ["order_number", "event__title", "user__username", "attendee_email"]
    autocomplete_fields = ["event", "user", "tier"]
    readonly_fields = ["id", "status", "payment", "provenance", "checked_in_at", "created_at"]
    date_hierarchy = "created_at"

    @admin.display(description="Tier")
    def tier_name(self, obj: models.Ticket) -> str:
        return obj.tier.name if obj.tier else "-"


@admin.register(models.Payment)
class PaymentAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    """Admin for Payment model with financial tracking."""

    list_display = [
        "order_number",
        "user_link",
        "event_link",
        "amount_display",
        "method",
        "status_display",
        "stripe_payment_id",
        "created_at",
    ]
    list_filter = ["status", "method", "currency", "created_at"]
    search_fields = ["order_number", "user__username", "user__email", "event__title", "stripe_payment_id"]
    readonly_fields = [
        "id",
        "user",
        "event",
        "ticket",
        "stripe_payment_id",
        "refund_id",
        "refunded_at",
        "metadata",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    @admin.display(description="Amount")
    def amount_display(self, obj: models.Payment) -> str:
        return f"{obj.amount} {obj.currency}"

    @admin.display(description="Status")
    def status_display(self, obj: models.Payment) -> str:
        colors: dict[t.Any, str] = {
            models.Payment.PaymentStatus.PENDING: "orange",
            models.Payment.PaymentStatus.COMPLETED: "green",
            models.Payment.PaymentStatus.REFUNDED: "blue",
        }
        color = colors.get(obj.status, "gray")
        return mark_safe(f'<span style="color: {color};">{obj.get_status_display()}</span>')
