from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from support.models import SupportTicket, SupportTicketReply


class SupportTicketReplyInline(TabularInline):  # type: ignore[misc]
    model = SupportTicketReply
    extra = 0
    fields = ["user", "message", "is_admin_reply", "created_at"]
    readonly_fields = ["user", "is_admin_reply", "created_at"]


@admin.register(SupportTicket)
class SupportTicketAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["subject", "user", "category", "priority", "status", "assigned_to", "created_at"]
    list_filter = ["status", "category", "priority"]
    search_fields = ["subject", "description", "user__email"]
    autocomplete_fields = ["user", "assigned_to"]
    readonly_fields = ["id", "resolved_at", "created_at", "updated_at"]
    date_hierarchy = "created_at"
    inlines = [SupportTicketReplyInline]
