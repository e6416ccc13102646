"""Tests for the card checkout, refund and payment history endpoints."""

import typing as t
from unittest.mock import MagicMock, patch

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import EventifyUser
from events.models import Event, Payment, Ticket, TicketTier
from events.tests.factories import stripe_intent

pytestmark = pytest.mark.django_db


def post_json(client: Client, url_name: str, payload: dict[str, object]) -> t.Any:
    return client.post(reverse(url_name), data=orjson.dumps(payload), content_type="application/json")


class TestCreatePaymentIntent:
    def test_returns_client_secret(self, event: Event, tier: TicketTier, attendee_client: Client) -> None:
        with patch("events.service.payment_gateway.stripe.PaymentIntent.create") as create:
            create.return_value = stripe_intent(intent_id="pi_new", status="requires_payment_method", amount=5000)
            response = post_json(
                attendee_client,
                "api:create_payment_intent",
                {"event_id": event.id, "ticket_tier_id": tier.id, "quantity": 2},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["payment_intent_id"] == "pi_new"
        assert data["client_secret"] == "pi_new_secret_abc"
        assert data["currency"] == "USD"

    def test_sold_out_tier_conflicts(self, event: Event, vip_tier: TicketTier, attendee_client: Client) -> None:
        with patch("events.service.payment_gateway.stripe.PaymentIntent.create") as create:
            response = post_json(
                attendee_client,
                "api:create_payment_intent",
                {"event_id": event.id, "ticket_tier_id": vip_tier.id, "quantity": 6},
            )

        assert response.status_code == 409
        assert response.json()["kind"] == "TierSoldOut"
        create.assert_not_called()

    def test_requires_authentication(self, event: Event) -> None:
        response = post_json(Client(), "api:create_payment_intent", {"event_id": event.id})

        assert response.status_code == 401


class TestConfirmPayment:
    def test_books_tickets(
        self,
        event: Event,
        tier: TicketTier,
        attendee: EventifyUser,
        attendee_client: Client,
        mock_stripe_retrieve: MagicMock,
    ) -> None:
        payload = {
            "payment_intent_id": "pi_test_123",
            "event_id": event.id,
            "ticket_tier_id": tier.id,
            "quantity": 1,
            "attendees": [{"name": "Ada Lovelace", "email": "ada@example.com"}],
        }

        response = post_json(attendee_client, "api:confirm_payment", payload)

        assert response.status_code == 200
        data = response.json()
        assert data["order_number"].startswith("ORD-")
        assert data["payment"]["stripe_payment_id"] == "pi_test_123"
        (ticket,) = data["tickets"]
        assert ticket["status"] == "CONFIRMED"
        assert ticket["qr_code"] == ticket["id"]
        assert ticket["attendee_name"] == "Ada Lovelace"
        assert Ticket.objects.filter(user=attendee).count() == 1
        tier.refresh_from_db()
        assert tier.available == 49

    def test_payment_intent_is_single_use(
        self, event: Event, tier: TicketTier, attendee_client: Client, mock_stripe_retrieve: MagicMock
    ) -> None:
        payload = {"payment_intent_id": "pi_test_123", "event_id": event.id, "ticket_tier_id": tier.id}
        post_json(attendee_client, "api:confirm_payment", payload)

        response = post_json(attendee_client, "api:confirm_payment", payload)

        assert response.status_code == 409
        assert response.json()["kind"] == "AlreadyBooked"
        assert Ticket.objects.count() == 1

    def test_unfinished_payment_is_a_bad_request(
        self, event: Event, tier: TicketTier, attendee_client: Client
    ) -> None:
        with patch("events.service.payment_gateway.stripe.PaymentIntent.retrieve") as retrieve:
            retrieve.return_value = stripe_intent(status="processing")
            response = post_json(
                attendee_client,
                "api:confirm_payment",
                {"payment_intent_id": "pi_test_123", "event_id": event.id, "ticket_tier_id": tier.id},
            )

        assert response.status_code == 400
        assert response.json()["kind"] == "PaymentNotCompleted"
        assert not Ticket.objects.exists()

    def test_intent_opened_for_another_tier_is_refused(
        self,
        event: Event,
        vip_tier: TicketTier,
        attendee_client: Client,
        mock_stripe_retrieve: MagicMock,
    ) -> None:
        response = post_json(
            attendee_client,
            "api:confirm_payment",
            {"payment_intent_id": "pi_test_123", "event_id": event.id, "ticket_tier_id": vip_tier.id, "quantity": 5},
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "PaymentMismatch"
        assert not Ticket.objects.exists()
        vip_tier.refresh_from_db()
        assert vip_tier.available == 5


class TestRefund:
    def test_refund_by_ticket(
        self, ticket: Ticket, event: Event, attendee_client: Client, mock_stripe_refund: MagicMock
    ) -> None:
        response = post_json(
            attendee_client, "api:refund_payment", {"ticket_id": ticket.id, "reason": "Plans changed"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["refund_id"] == "re_test_123"
        assert data["tickets_released"] == 1
        assert data["payment_id"] == str(ticket.payment_id)
        event.refresh_from_db()
        assert event.current_bookings == 0

    def test_refund_twice_conflicts(
        self, ticket: Ticket, attendee_client: Client, mock_stripe_refund: MagicMock
    ) -> None:
        post_json(attendee_client, "api:refund_payment", {"ticket_id": ticket.id})

        response = post_json(attendee_client, "api:refund_payment", {"ticket_id": ticket.id})

        assert response.status_code == 409
        assert response.json()["kind"] == "AlreadyReleased"

    def test_someone_elses_order_is_not_found(
        self, ticket: Ticket, other_attendee_client: Client, mock_stripe_refund: MagicMock
    ) -> None:
        response = post_json(other_attendee_client, "api:refund_payment", {"ticket_id": ticket.id})

        assert response.status_code == 404
        mock_stripe_refund.assert_not_called()

    def test_identifier_is_required(self, attendee_client: Client) -> None:
        response = post_json(attendee_client, "api:refund_payment", {"reason": "No id"})

        assert response.status_code == 422


class TestPaymentHistory:
    def test_lists_own_payments(self, ticket: Ticket, attendee_client: Client, other_attendee_client: Client) -> None:
        response = attendee_client.get(reverse("api:payment_history"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["ticket_ids"] == [str(ticket.id)]
        assert data["results"][0]["status"] == Payment.PaymentStatus.COMPLETED

        assert other_attendee_client.get(reverse("api:payment_history")).json()["count"] == 0
