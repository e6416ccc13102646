import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from events.models import Event, Ticket, TicketTier, WaitlistEntry

pytestmark = pytest.mark.django_db


class TestMyTickets:
    def test_lists_own_tickets(self, ticket: Ticket, attendee_client: Client, other_attendee_client: Client) -> None:
        response = attendee_client.get(reverse("api:my_tickets"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(ticket.id)
        assert data["results"][0]["event"]["title"] == "Summer Jazz Night"
        assert other_attendee_client.get(reverse("api:my_tickets")).json()["count"] == 0

    def test_single_ticket_carries_qr_code(self, ticket: Ticket, attendee_client: Client) -> None:
        response = attendee_client.get(reverse("api:my_ticket", kwargs={"ticket_id": ticket.id}))

        assert response.status_code == 200
        assert response.json()["qr_code"] == str(ticket.id)
        assert response.json()["payment"]["status"] == "COMPLETED"

    def test_someone_elses_ticket_is_not_found(self, ticket: Ticket, other_attendee_client: Client) -> None:
        response = other_attendee_client.get(reverse("api:my_ticket", kwargs={"ticket_id": ticket.id}))

        assert response.status_code == 404
        assert response.json()["kind"] == "NotFound"

    def test_requires_authentication(self) -> None:
        assert Client().get(reverse("api:my_tickets")).status_code == 401


class TestCancelMyTicket:
    def test_cancel_returns_the_seat(
        self, ticket: Ticket, event: Event, tier: TicketTier, attendee_client: Client
    ) -> None:
        url = reverse("api:cancel_my_ticket", kwargs={"ticket_id": ticket.id})

        response = attendee_client.post(url, data=orjson.dumps({"reason": "Sick"}), content_type="application/json")

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED_MANUAL"
        (record,) = response.json()["provenance"]
        assert record["kind"] == "cancellation"
        assert record["reason"] == "Sick"
        assert record["cancelled_by"] == str(ticket.user_id)
        event.refresh_from_db()
        tier.refresh_from_db()
        assert event.current_bookings == 0
        assert tier.available == 50

    def test_cancel_twice_conflicts(self, ticket: Ticket, attendee_client: Client) -> None:
        url = reverse("api:cancel_my_ticket", kwargs={"ticket_id": ticket.id})
        attendee_client.post(url, data=orjson.dumps({}), content_type="application/json")

        response = attendee_client.post(url, data=orjson.dumps({}), content_type="application/json")

        assert response.status_code == 409
        assert response.json()["kind"] == "AlreadyCancelled"


class TestMyWaitlist:
    def test_lists_own_entries(
        self, waitlist_entry: WaitlistEntry, other_attendee_client: Client, attendee_client: Client
    ) -> None:
        response = other_attendee_client.get(reverse("api:my_waitlist"))

        assert response.status_code == 200
        assert [row["id"] for row in response.json()["results"]] == [str(waitlist_entry.id)]
        assert attendee_client.get(reverse("api:my_waitlist")).json()["count"] == 0
