from datetime import date, timedelta

from conftest import create_client_record, create_shift, create_staff, onboard_staff


def test_create_shift_is_scheduled_and_pending(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers)

    shift = create_shift(client, headers, staff["id"], carl["id"], start="9:00", end="17:00", break_minutes=30)
    assert shift["status"] == "scheduled"
    assert shift["confirmation_status"] == "pending"
    assert shift["start_time"] == "09:00"
    assert shift["hours"] == 7.5
    assert shift["staff_name"] == "Nina Nurse"
    assert shift["client_name"] == "Carl Client"


def test_create_shift_rejects_unknown_staff_and_bad_times(client, owner):
    headers = owner["headers"]
    response = client.post(
        "/shifts",
        json={"staff_member_id": 999, "shift_date": "2025-01-01", "start_time": "09:00", "end_time": "17:00"},
        headers=headers,
    )
    assert response.status_code == 404

    staff = create_staff(client, headers)
    response = client.post(
        "/shifts",
        json={"staff_member_id": staff["id"], "shift_date": "2025-01-01", "start_time": "9am", "end_time": "17:00"},
        headers=headers,
    )
    assert response.status_code == 422


def test_shift_assignment_notifies_linked_staff(client, owner, email_mocks):
    staff = onboard_staff(client, owner)
    create_shift(client, owner["headers"], staff["staff_member_id"])

    notifications = client.get("/notifications", headers=staff["headers"]).json()
    assert notifications["unread_count"] == 1
    assert notifications["notifications"][0]["type"] == "shift_assigned"
    email_mocks["notification"].assert_awaited_once()


def test_staff_confirms_pending_shift(client, owner):
    staff = onboard_staff(client, owner)
    shift = create_shift(client, owner["headers"], staff["staff_member_id"])

    pending = client.get("/shifts/my-pending", headers=staff["headers"]).json()
    assert [s["id"] for s in pending] == [shift["id"]]

    confirmed = client.post(f"/shifts/{shift['id']}/confirm", headers=staff["headers"])
    assert confirmed.status_code == 200
    body = confirmed.json()
    assert body["confirmation_status"] == "accepted"
    assert body["confirmed_by"] == staff["user_id"]
    assert body["confirmed_at"] is not None

    assert client.get("/shifts/my-pending", headers=staff["headers"]).json() == []


def test_staff_declines_shift_with_reason(client, owner):
    staff = onboard_staff(client, owner)
    shift = create_shift(client, owner["headers"], staff["staff_member_id"])

    declined = client.post(
        f"/shifts/{shift['id']}/decline", json={"reason": "Family emergency"}, headers=staff["headers"]
    )
    assert declined.status_code == 200
    assert declined.json()["confirmation_status"] == "declined"
    assert declined.json()["decline_reason"] == "Family emergency"

    owner_notifications = client.get("/notifications", headers=owner["headers"]).json()
    assert owner_notifications["notifications"][0]["type"] == "shift_declined"
    assert "Family emergency" in owner_notifications["notifications"][0]["message"]


def test_cancelled_shift_cannot_be_confirmed(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    shift = create_shift(client, headers, staff["id"])

    cancelled = client.delete(f"/shifts/{shift['id']}", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    assert client.post(f"/shifts/{shift['id']}/confirm", headers=headers).status_code == 400


def test_list_and_calendar_are_ordered(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    day = date(2025, 6, 10)
    late = create_shift(client, headers, staff["id"], shift_date=day, start="14:00", end="18:00")
    early = create_shift(client, headers, staff["id"], shift_date=day, start="08:00", end="12:00")
    before = create_shift(client, headers, staff["id"], shift_date=day - timedelta(days=1))

    shifts = client.get("/shifts", headers=headers).json()
    assert [s["id"] for s in shifts] == [before["id"], early["id"], late["id"]]

    calendar = client.get(
        "/shifts/calendar", params={"start_date": "2025-06-10", "end_date": "2025-06-10"}, headers=headers
    ).json()
    assert [s["id"] for s in calendar] == [early["id"], late["id"]]


def test_update_shift(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    shift = create_shift(client, headers, staff["id"])

    updated = client.patch(
        f"/shifts/{shift['id']}", json={"end_time": "15:00", "status": "completed"}, headers=headers
    )
    assert updated.status_code == 200
    assert updated.json()["end_time"] == "15:00"
    assert updated.json()["status"] == "completed"
    assert updated.json()["hours"] == 6.0


def test_client_schedule_week_stats(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers)
    today = date.today()
    create_shift(client, headers, staff["id"], carl["id"], shift_date=today, start="09:00", end="17:00", break_minutes=30)

    schedule = client.get(f"/shifts/clients/{carl['id']}/schedule", headers=headers).json()
    assert len(schedule["today"]) == 1
    assert len(schedule["upcoming"]) == 1
    assert schedule["weekStats"] == {"count": 1, "totalHours": 7.5}


def test_swap_request_approval_reassigns_shift(client, owner):
    headers = owner["headers"]
    staff = onboard_staff(client, owner)
    cover = create_staff(client, headers, "Cora", "Cover")
    shift = create_shift(client, headers, staff["staff_member_id"])
    client.post(f"/shifts/{shift['id']}/confirm", headers=staff["headers"])

    request = client.post(
        "/shift-swaps",
        json={"original_shift_id": shift["id"], "covering_staff_id": cover["id"], "request_reason": "Doctor visit"},
        headers=staff["headers"],
    )
    assert request.status_code == 200
    body = request.json()
    assert body["status"] == "pending"
    assert body["requesting_staff_id"] == staff["staff_member_id"]

    listing = client.get("/shift-swaps", headers=headers).json()
    assert listing["counts"] == {"pending": 1, "approved": 0, "rejected": 0}

    approved = client.post(f"/shift-swaps/{body['id']}/approve", headers=headers)
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"

    moved = client.get(f"/shifts/{shift['id']}", headers=headers).json()
    assert moved["staff_member_id"] == cover["id"]
    assert moved["confirmation_status"] == "pending"

    # Decided requests cannot be decided again
    assert client.post(f"/shift-swaps/{body['id']}/reject", headers=headers).status_code == 409

    types = [n["type"] for n in client.get("/notifications", headers=staff["headers"]).json()["notifications"]]
    assert "swap_decided" in types


def test_swap_request_requires_reason_and_different_staff(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    shift = create_shift(client, headers, staff["id"])

    blank = client.post(
        "/shift-swaps", json={"original_shift_id": shift["id"], "request_reason": "  "}, headers=headers
    )
    assert blank.status_code == 422

    same = client.post(
        "/shift-swaps",
        json={"original_shift_id": shift["id"], "covering_staff_id": staff["id"], "request_reason": "x"},
        headers=headers,
    )
    assert same.status_code == 400


def test_decline_without_reason_clears_earlier_reason(client, owner):
    staff = onboard_staff(client, owner)
    shift = create_shift(client, owner["headers"], staff["staff_member_id"])
    url = f"/shifts/{shift['id']}"

    client.post(f"{url}/decline", json={"reason": "Sick"}, headers=staff["headers"])
    confirmed = client.post(f"{url}/confirm", headers=staff["headers"]).json()
    assert confirmed["decline_reason"] is None

    declined = client.post(f"{url}/decline", json={}, headers=staff["headers"])
    assert declined.status_code == 200
    assert declined.json()["confirmation_status"] == "declined"
    assert declined.json()["decline_reason"] is None


def test_only_assignee_or_owner_answers_a_shift(client, owner):
    alice = onboard_staff(client, owner, email="alice@example.com")
    bob = onboard_staff(client, owner, email="bob@example.com")
    shift = create_shift(client, owner["headers"], alice["staff_member_id"])

    assert client.post(f"/shifts/{shift['id']}/confirm", headers=bob["headers"]).status_code == 403
    assert client.post(f"/shifts/{shift['id']}/decline", json={}, headers=bob["headers"]).status_code == 403
    assert client.get(f"/shifts/{shift['id']}", headers=owner["headers"]).json()["confirmation_status"] == "pending"

    by_owner = client.post(f"/shifts/{shift['id']}/confirm", headers=owner["headers"])
    assert by_owner.status_code == 200
    assert by_owner.json()["confirmed_by"] == owner["user"]["id"]


def test_staff_cannot_decide_swap_requests(client, owner):
    alice = onboard_staff(client, owner, email="alice@example.com")
    bob = onboard_staff(client, owner, email="bob@example.com")
    shift = create_shift(client, owner["headers"], alice["staff_member_id"])

    request = client.post(
        "/shift-swaps",
        json={"original_shift_id": shift["id"], "covering_staff_id": bob["staff_member_id"], "request_reason": "Mine now"},
        headers=bob["headers"],
    ).json()

    assert client.post(f"/shift-swaps/{request['id']}/approve", headers=bob["headers"]).status_code == 403
    assert client.post(f"/shift-swaps/{request['id']}/reject", headers=bob["headers"]).status_code == 403
    moved = client.get(f"/shifts/{shift['id']}", headers=owner["headers"]).json()
    assert moved["staff_member_id"] == alice["staff_member_id"]

    assert client.post(f"/shift-swaps/{request['id']}/reject", headers=owner["headers"]).json()["status"] == "rejected"
