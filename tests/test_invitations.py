from datetime import datetime, timedelta

from conftest import PASSWORD, onboard_staff

from nursecare.email_service import EmailDeliveryError
from nursecare.models import Client, StaffMember, User, UserRole
from nursecare.models_invitation import ClientInvitation, StaffInvitation


def send_client_invitation(client, owner, email="carla@example.com"):
    response = client.post(
        "/invitations/clients",
        json={"email": email, "first_name": "Carla", "last_name": "Client"},
        headers=owner["headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return body, body["onboarding_url"].split("token=")[1]


def test_client_invitation_expires_in_seven_days(client, owner, email_mocks):
    body, token = send_client_invitation(client, owner)
    assert body["success"] is True
    assert body["invitation"]["status"] == "pending"
    assert body["invitation"]["invited_by_name"] == "Olivia Owner"

    expires = datetime.fromisoformat(body["invitation"]["expires_at"])
    assert timedelta(days=6, hours=23) < expires - datetime.utcnow() <= timedelta(days=7)
    email_mocks["client_invitation"].assert_awaited_once()

    validation = client.get("/invitations/clients/validate", params={"token": token})
    assert validation.status_code == 200
    assert validation.json()["valid"] is True
    assert validation.json()["organization_name"] == "Sunrise Care"


def test_client_invitation_email_failure_keeps_nothing(client, owner, email_mocks, db):
    email_mocks["client_invitation"].side_effect = EmailDeliveryError("provider down")
    response = client.post("/invitations/clients", json={"email": "x@example.com"}, headers=owner["headers"])
    assert response.status_code == 502
    assert db.query(ClientInvitation).count() == 0


def test_client_onboarding_creates_client_and_accepts(client, owner, db):
    _, token = send_client_invitation(client, owner)

    response = client.post(
        "/invitations/clients/complete",
        json={"token": token, "client_data": {"phone": "07700 900123", "allergies": "None"}},
    )
    assert response.status_code == 200
    client_id = response.json()["client_id"]

    record = db.query(Client).filter(Client.id == client_id).one()
    assert record.first_name == "Carla"
    assert record.email == "carla@example.com"
    assert record.invitation_id is not None
    assert db.query(ClientInvitation).one().status == "accepted"

    # A used invitation is rejected
    again = client.get("/invitations/clients/validate", params={"token": token})
    assert again.status_code == 400
    assert again.json()["detail"] == {"valid": False, "error": "This invitation has already been used"}

    second = client.post("/invitations/clients/complete", json={"token": token, "client_data": {}})
    assert second.status_code == 400

    # The accepted token no longer grants write access to the record
    profile = client.post(
        "/invitations/clients/update-profile", json={"token": token, "updates": {"city": "York"}}
    )
    assert profile.status_code == 400
    assert profile.json()["detail"]["error"] == "This invitation has already been used"
    db.expire_all()
    assert db.query(Client).filter(Client.id == client_id).one().city is None


def test_profile_update_requires_pending_unexpired_token(client, owner, db):
    _, token = send_client_invitation(client, owner)
    invitation = db.query(ClientInvitation).one()
    db.add(
        Client(
            organization_id=invitation.organization_id,
            invitation_id=invitation.id,
            first_name="Carla",
            last_name="Client",
        )
    )
    db.commit()

    updated = client.post("/invitations/clients/update-profile", json={"token": token, "updates": {"city": "York"}})
    assert updated.status_code == 200
    db.expire_all()
    assert db.query(ClientInvitation).one().status == "accepted"

    invitation = db.query(ClientInvitation).one()
    invitation.status = "pending"
    invitation.expires_at = datetime.utcnow() - timedelta(days=30)
    db.commit()
    expired = client.post("/invitations/clients/update-profile", json={"token": token, "updates": {"city": "Evil"}})
    assert expired.status_code == 400
    assert expired.json()["detail"]["error"] == "This invitation has expired"
    db.expire_all()
    assert db.query(Client).one().city == "York"


def test_expired_client_invitation_rejected(client, owner, db):
    _, token = send_client_invitation(client, owner)
    invitation = db.query(ClientInvitation).one()
    invitation.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.get("/invitations/clients/validate", params={"token": token})
    assert response.status_code == 400
    assert response.json()["detail"] == {"valid": False, "error": "This invitation has expired"}

    complete = client.post("/invitations/clients/complete", json={"token": token, "client_data": {}})
    assert complete.status_code == 400
    assert db.query(Client).count() == 0


def test_unknown_token(client):
    response = client.get("/invitations/clients/validate", params={"token": "nope"})
    assert response.status_code == 404
    assert response.json()["detail"]["valid"] is False


def test_staff_onboarding_creates_account(client, owner, db):
    result = onboard_staff(client, owner)

    user = db.query(User).filter(User.id == result["user_id"]).one()
    assert user.role == "nurse"
    staff = db.query(StaffMember).filter(StaffMember.id == result["staff_member_id"]).one()
    assert staff.user_id == user.id
    assert staff.job_title == "RN"
    assert staff.hourly_rate == 32
    role = db.query(UserRole).filter(UserRole.user_id == user.id).one()
    assert role.role == "staff_nurse"
    assert db.query(StaffInvitation).one().status == "accepted"

    me = client.get("/auth/me", headers=result["headers"]).json()
    assert me["organization_id"] == owner["organization"]["id"]


def test_expired_staff_invitation_is_marked_expired(client, owner, db):
    sent = client.post(
        "/invitations/staff",
        json={"email": "late@example.com", "first_name": "L", "last_name": "Ate", "job_title": "HCA"},
        headers=owner["headers"],
    )
    token = sent.json()["onboarding_url"].split("token=")[1]
    invitation = db.query(StaffInvitation).one()
    invitation.expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    response = client.post(
        "/invitations/staff/complete", json={"token": token, "password": PASSWORD, "staff_data": {}}
    )
    assert response.status_code == 400
    db.expire_all()
    assert db.query(StaffInvitation).one().status == "expired"
    assert db.query(User).filter(User.email == "late@example.com").count() == 0


def test_staff_onboarding_rejects_weak_password_and_existing_email(client, owner):
    sent = client.post(
        "/invitations/staff",
        json={"email": "owner@example.com", "first_name": "O", "last_name": "O", "job_title": "RN"},
        headers=owner["headers"],
    )
    token = sent.json()["onboarding_url"].split("token=")[1]

    weak = client.post("/invitations/staff/complete", json={"token": token, "password": "abc", "staff_data": {}})
    assert weak.status_code == 400

    taken = client.post(
        "/invitations/staff/complete", json={"token": token, "password": PASSWORD, "staff_data": {}}
    )
    assert taken.status_code == 409


def test_pending_invitations_listed(client, owner):
    send_client_invitation(client, owner)
    listing = client.get("/invitations", headers=owner["headers"]).json()
    assert len(listing["client_invitations"]) == 1
    assert listing["staff_invitations"] == []
