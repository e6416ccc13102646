import pytest

from accounts.models import EventifyUser

pytestmark = pytest.mark.django_db


def test_roles(attendee: EventifyUser, organizer: EventifyUser, platform_admin: EventifyUser) -> None:
    assert (attendee.is_organizer, attendee.is_admin) == (False, False)
    assert (organizer.is_organizer, organizer.is_admin) == (True, False)
    assert (platform_admin.is_organizer, platform_admin.is_admin) == (True, True)


def test_superuser_is_admin() -> None:
    user = EventifyUser.objects.create_superuser("root@eventify.test", "root@eventify.test", "password")

    assert user.is_admin


def test_display_name_falls_back_to_username() -> None:
    user = EventifyUser.objects.create_user(username="jane_doe@example.com", first_name="", last_name="")

    assert user.display_name == "Jane Doe"


def test_display_name_prefers_full_name(attendee: EventifyUser) -> None:
    assert attendee.display_name == f"{attendee.first_name} {attendee.last_name}"
