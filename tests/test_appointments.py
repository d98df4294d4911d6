from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import auth_headers, register

from nursecare.domain.appointments import service as appointment_service


@pytest.fixture
def people(client):
    nurse = register(client, "nurse@example.com", "Nora", "Nurse")
    seeker = register(client, "seeker@example.com", "Sam", "Seeker", role="client")
    return {
        "nurse": nurse["user"],
        "nurse_headers": auth_headers(nurse["access_token"]),
        "seeker": seeker["user"],
        "seeker_headers": auth_headers(seeker["access_token"]),
    }


@pytest.fixture
def dodo(monkeypatch):
    dodo_client = MagicMock()
    dodo_client.checkout_sessions.create = AsyncMock(
        return_value=SimpleNamespace(checkout_url="https://checkout.test/s_1", session_id="s_1")
    )
    dodo_client.payments.retrieve = AsyncMock()
    monkeypatch.setattr(appointment_service, "get_dodo_client", lambda: dodo_client)
    monkeypatch.setattr(appointment_service, "DODO_ADHOC_PRODUCT_ID", "prod_adhoc")
    return dodo_client


def book(client, people, days_ahead=3, start="10:00", end="12:30", hourly_rate=40.0):
    response = client.post(
        "/appointments",
        json={
            "nurse_id": people["nurse"]["id"],
            "title": "Wound care",
            "appointment_date": (date.today() + timedelta(days=days_ahead)).isoformat(),
            "start_time": start,
            "end_time": end,
            "hourly_rate": hourly_rate,
        },
        headers=people["seeker_headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_booking_prices_the_visit_and_notifies_nurse(client, people):
    appointment = book(client, people)
    assert appointment["status"] == "pending"
    assert appointment["payment_status"] == "unpaid"
    assert appointment["duration_minutes"] == 150
    assert appointment["total_cost"] == 100.0
    assert appointment["nurse_name"] == "Nora Nurse"
    assert appointment["client_name"] == "Sam Seeker"

    notifications = client.get("/notifications", headers=people["nurse_headers"]).json()["notifications"]
    assert notifications[0]["type"] == "appointment_requested"


def test_booking_validation(client, people):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    past = client.post(
        "/appointments",
        json={"nurse_id": people["nurse"]["id"], "appointment_date": yesterday, "start_time": "10:00", "end_time": "11:00"},
        headers=people["seeker_headers"],
    )
    assert past.status_code == 400

    unknown = client.post(
        "/appointments",
        json={"nurse_id": 999, "appointment_date": date.today().isoformat(), "start_time": "10:00", "end_time": "11:00"},
        headers=people["seeker_headers"],
    )
    assert unknown.status_code == 404


def test_views_and_visibility(client, people):
    appointment = book(client, people)
    upcoming = client.get("/appointments", params={"view": "upcoming"}, headers=people["nurse_headers"]).json()
    assert [a["id"] for a in upcoming] == [appointment["id"]]
    assert client.get("/appointments", params={"view": "past"}, headers=people["nurse_headers"]).json() == []

    client.patch(f"/appointments/{appointment['id']}", json={"status": "cancelled"}, headers=people["seeker_headers"])
    assert client.get("/appointments", params={"view": "upcoming"}, headers=people["seeker_headers"]).json() == []

    stranger = register(client, "stranger@example.com")
    response = client.get(f"/appointments/{appointment['id']}", headers=auth_headers(stranger["access_token"]))
    assert response.status_code == 404


def test_checkout_uses_adhoc_amount_in_cents(client, people, dodo):
    appointment = book(client, people)

    response = client.post(f"/appointments/{appointment['id']}/checkout", headers=people["seeker_headers"])
    assert response.status_code == 200, response.text
    assert response.json() == {
        "checkout_url": "https://checkout.test/s_1",
        "session_id": "s_1",
        "appointment_id": appointment["id"],
        "amount": 100.0,
    }

    kwargs = dodo.checkout_sessions.create.await_args.kwargs
    assert kwargs["product_cart"] == [{"product_id": "prod_adhoc", "quantity": 1, "amount": 10000}]
    assert kwargs["metadata"]["appointment_id"] == str(appointment["id"])
    assert kwargs["customer"]["email"] == "seeker@example.com"


def test_checkout_refuses_zero_amount(client, people, dodo):
    appointment = book(client, people, hourly_rate=None)
    assert appointment["total_cost"] is None

    response = client.post(f"/appointments/{appointment['id']}/checkout", headers=people["seeker_headers"])
    assert response.status_code == 400
    dodo.checkout_sessions.create.assert_not_awaited()


def test_checkout_provider_failure(client, people, dodo):
    appointment = book(client, people)
    dodo.checkout_sessions.create.side_effect = RuntimeError("boom")
    response = client.post(f"/appointments/{appointment['id']}/checkout", headers=people["seeker_headers"])
    assert response.status_code == 502


def test_verified_payment_confirms_appointment(client, people, dodo):
    appointment = book(client, people)
    dodo.payments.retrieve.return_value = SimpleNamespace(
        status="succeeded", metadata={"appointment_id": str(appointment["id"])}
    )

    response = client.post(
        f"/appointments/{appointment['id']}/verify-payment",
        json={"payment_id": "pay_1"},
        headers=people["seeker_headers"],
    )
    assert response.status_code == 200
    assert response.json() == {"appointment_id": appointment["id"], "payment_status": "paid", "status": "confirmed"}

    again = client.post(f"/appointments/{appointment['id']}/checkout", headers=people["seeker_headers"])
    assert again.status_code == 400


def test_payment_for_another_appointment_is_rejected(client, people, dodo):
    appointment = book(client, people)
    dodo.payments.retrieve.return_value = SimpleNamespace(status="succeeded", metadata={"appointment_id": "9999"})
    response = client.post(
        f"/appointments/{appointment['id']}/verify-payment",
        json={"payment_id": "pay_2"},
        headers=people["seeker_headers"],
    )
    assert response.status_code == 400
