"""Project-wide fixtures: users, API clients and test-mode switches."""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import EventifyUser
from eventify.celery import app as celery_app


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits of the throttles to allow testing."""
    for throttle in ("AuthThrottle", "CheckoutThrottle", "WriteThrottle", "UserDefaultThrottle"):
        monkeypatch.setattr(f"common.throttling.{throttle}.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> t.Iterator[None]:
    """Run Celery tasks synchronously so their side effects can be asserted."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    previous = celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True
    yield
    celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates = previous


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle counters live in the cache; start every test from a clean slate."""
    cache.clear()


class EventifyUserFactory:
    """Factory for creating EventifyUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> EventifyUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return EventifyUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> EventifyUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> EventifyUserFactory:
    return EventifyUserFactory()


@pytest.fixture
def organizer(user_factory: EventifyUserFactory) -> EventifyUser:
    return user_factory(role=EventifyUser.Role.ORGANIZER)


@pytest.fixture
def other_organizer(user_factory: EventifyUserFactory) -> EventifyUser:
    return user_factory(role=EventifyUser.Role.ORGANIZER)


@pytest.fixture
def platform_admin(user_factory: EventifyUserFactory) -> EventifyUser:
    """An administrator who may act on any event."""
    return user_factory(role=EventifyUser.Role.ADMIN)


@pytest.fixture
def attendee(user_factory: EventifyUserFactory) -> EventifyUser:
    return user_factory()


@pytest.fixture
def other_attendee(user_factory: EventifyUserFactory) -> EventifyUser:
    return user_factory()


def client_for(user: EventifyUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def organizer_client(organizer: EventifyUser) -> Client:
    """API client for the organizer of the default event."""
    return client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: EventifyUser) -> Client:
    return client_for(other_organizer)


@pytest.fixture
def platform_admin_client(platform_admin: EventifyUser) -> Client:
    return client_for(platform_admin)


@pytest.fixture
def attendee_client(attendee: EventifyUser) -> Client:
    return client_for(attendee)


@pytest.fixture
def other_attendee_client(other_attendee: EventifyUser) -> Client:
    return client_for(other_attendee)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
