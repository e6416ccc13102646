import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class EventifyUserQueryset(models.QuerySet["EventifyUser"]):
    """Queryset for EventifyUser."""

    def organizers(self) -> "EventifyUserQueryset":
        """Users allowed to run events."""
        return self.filter(role__in=[EventifyUser.Role.ORGANIZER, EventifyUser.Role.ADMIN])


class EventifyUserManager(UserManager["EventifyUser"]):
    def get_queryset(self) -> EventifyUserQueryset:
        """Get queryset for EventifyUser."""
        return EventifyUserQueryset(self.model)

    def create_superuser(
        self, username: str, email: str | None = None, password: str | None = None, **extra_fields: t.Any
    ) -> "EventifyUser":
        """Superusers are administrators of the platform."""
        extra_fields.setdefault("role", EventifyUser.Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class EventifyUser(AbstractUser):
    class Role(models.TextChoices):
        ATTENDEE = "ATTENDEE", "Attendee"
        ORGANIZER = "ORGANIZER", "Organizer"
        ADMIN = "ADMIN", "Admin"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.ATTENDEE, db_index=True)
    phone_number = models.CharField(max_length=20, blank=True, help_text="Phone number")

    objects = EventifyUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def is_admin(self) -> bool:
        """Admins may act on any event."""
        return self.is_superuser or self.role == self.Role.ADMIN

    @property
    def is_organizer(self) -> bool:
        """Organizers (and admins) may create events."""
        return self.is_admin or self.role == self.Role.ORGANIZER

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's full name, or a name derived from the username as a fallback."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
