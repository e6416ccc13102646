import typing as t

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import EventifyUser

pytestmark = pytest.mark.django_db


def register(payload: dict[str, t.Any]) -> t.Any:
    return Client().post(reverse("api:register-account"), data=orjson.dumps(payload), content_type="application/json")


class TestRegister:
    def test_register_attendee(self) -> None:
        response = register(
            {
                "email": "ada@example.com",
                "password1": "correct-horse-battery",
                "password2": "correct-horse-battery",
                "first_name": " Ada ",
                "last_name": "Lovelace",
            }
        )

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "ATTENDEE"
        assert data["display_name"] == "Ada Lovelace"
        user = EventifyUser.objects.get(email="ada@example.com")
        assert user.username == "ada@example.com"
        assert user.check_password("correct-horse-battery")

    def test_register_organizer(self) -> None:
        response = register(
            {
                "email": "grace@example.com",
                "password1": "correct-horse-battery",
                "password2": "correct-horse-battery",
                "role": "ORGANIZER",
            }
        )

        assert response.status_code == 201
        assert EventifyUser.objects.get(email="grace@example.com").is_organizer

    def test_admin_cannot_self_register(self) -> None:
        response = register(
            {
                "email": "mallory@example.com",
                "password1": "correct-horse-battery",
                "password2": "correct-horse-battery",
                "role": "ADMIN",
            }
        )

        assert response.status_code == 422
        assert not EventifyUser.objects.filter(email="mallory@example.com").exists()

    def test_passwords_must_match(self) -> None:
        response = register(
            {"email": "ada@example.com", "password1": "correct-horse-battery", "password2": "correct-horse-batt"}
        )

        assert response.status_code == 422

    def test_duplicate_email(self, attendee: EventifyUser) -> None:
        response = register(
            {"email": attendee.username, "password1": "correct-horse-battery", "password2": "correct-horse-battery"}
        )

        assert response.status_code == 400

    def test_common_password_is_rejected(self) -> None:
        response = register({"email": "ada@example.com", "password1": "password123", "password2": "password123"})

        assert response.status_code == 400
        assert "errors" in response.json()
        assert not EventifyUser.objects.exists()


class TestMe:
    def test_me(self, organizer: EventifyUser, organizer_client: Client) -> None:
        response = organizer_client.get(reverse("api:me"))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(organizer.id)
        assert data["role"] == "ORGANIZER"

    def test_me_requires_token(self) -> None:
        assert Client().get(reverse("api:me")).status_code == 401

    def test_token_pair_login(self, attendee: EventifyUser) -> None:
        response = Client().post(
            reverse("api:token_obtain_pair"),
            data=orjson.dumps({"username": attendee.username, "password": "password"}),
            content_type="application/json",
        )

        assert response.status_code == 200
        access = response.json()["access"]
        me = Client(HTTP_AUTHORIZATION=f"Bearer {access}").get(reverse("api:me"))  # type: ignore[arg-type]
        assert me.json()["email"] == attendee.email

    def test_refresh_token_for_user(self, attendee: EventifyUser) -> None:
        refresh = RefreshToken.for_user(attendee)

        response = Client().post(
            reverse("api:token_refresh"),
            data=orjson.dumps({"refresh": str(refresh)}),
            content_type="application/json",
        )

        assert response.status_code == 200
        assert "access" in response.json()
