import os
from datetime import date, timedelta
from unittest.mock import AsyncMock

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RESEND_API_KEY"] = "re_test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from nursecare.database import Base, engine, get_db
from nursecare.main import app

PASSWORD = "Passw0rd123"


def override_get_db():
    sess = Session(bind=engine)
    try:
        yield sess
    finally:
        sess.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    sess = Session(bind=engine)
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture(autouse=True)
def email_mocks(monkeypatch):
    """Every outgoing email helper replaced with an AsyncMock"""
    mocks = {
        "notification": AsyncMock(return_value={"id": "email_1"}),
        "client_invitation": AsyncMock(return_value={"id": "email_2"}),
        "staff_invitation": AsyncMock(return_value={"id": "email_3"}),
        "invoice": AsyncMock(return_value={"id": "email_4"}),
    }
    monkeypatch.setattr(
        "nursecare.services.notification_service.send_notification_email", mocks["notification"]
    )
    monkeypatch.setattr(
        "nursecare.domain.invitations.service.send_client_invitation_email", mocks["client_invitation"]
    )
    monkeypatch.setattr(
        "nursecare.domain.invitations.service.send_staff_invitation_email", mocks["staff_invitation"]
    )
    monkeypatch.setattr("nursecare.domain.invoices.service.send_invoice_email", mocks["invoice"])
    return mocks


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, email: str, first_name: str = "Test", last_name: str = "User", role: str = "nurse"):
    response = client.post(
        "/auth/register",
        json={
            "email": email,
            "password": PASSWORD,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def owner(client):
    """Registered user who owns an organization"""
    data = register(client, "owner@example.com", "Olivia", "Owner")
    headers = auth_headers(data["access_token"])
    org = client.post("/organizations", json={"name": "Sunrise Care"}, headers=headers)
    assert org.status_code == 200, org.text
    return {"user": data["user"], "headers": headers, "organization": org.json()}


def create_staff(client, headers, first_name="Nina", last_name="Nurse", **extra):
    response = client.post(
        "/staff",
        json={"first_name": first_name, "last_name": last_name, **extra},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def create_client_record(client, headers, first_name="Carl", last_name="Client", **extra):
    response = client.post(
        "/clients",
        json={"first_name": first_name, "last_name": last_name, **extra},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def create_shift(client, headers, staff_id, client_id=None, shift_date=None, start="09:00", end="17:00", **extra):
    response = client.post(
        "/shifts",
        json={
            "staff_member_id": staff_id,
            "client_id": client_id,
            "shift_date": (shift_date or date.today() + timedelta(days=1)).isoformat(),
            "start_time": start,
            "end_time": end,
            **extra,
        },
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def onboard_staff(client, owner, email="staff@example.com", first_name="Sam", last_name="Staff"):
    """Invite a staff member and complete onboarding; returns the onboarding result and headers"""
    sent = client.post(
        "/invitations/staff",
        json={"email": email, "first_name": first_name, "last_name": last_name, "job_title": "RN"},
        headers=owner["headers"],
    )
    assert sent.status_code == 200, sent.text
    token = sent.json()["onboarding_url"].split("token=")[1]

    done = client.post(
        "/invitations/staff/complete",
        json={"token": token, "password": PASSWORD, "staff_data": {"hourly_rate": 32}},
    )
    assert done.status_code == 200, done.text
    result = done.json()
    result["headers"] = auth_headers(result["access_token"])
    return result
