"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import EventifyUser


@admin.register(EventifyUser)
class EventifyUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[misc]
    list_display = ["username", "email", "first_name", "last_name", "role", "is_staff", "is_active"]
    list_filter = ["role", "is_staff", "is_superuser", "is_active"]
    search_fields = ["username", "email", "first_name", "last_name"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Eventify", {"fields": ("role", "phone_number")}),
    )
