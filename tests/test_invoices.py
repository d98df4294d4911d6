from datetime import date, datetime, timedelta
from types import SimpleNamespace

from conftest import create_client_record, create_shift, create_staff, onboard_staff

from nursecare.domain.invoices.service import calculate_invoice_stats
from nursecare.email_service import EmailDeliveryError

PERIOD = {"billing_period_start": "2025-03-01", "billing_period_end": "2025-03-31"}


def completed_shift(client, headers, staff_id, client_id, day, start="09:00", end="17:00", **extra):
    shift = create_shift(client, headers, staff_id, client_id, shift_date=day, start=start, end=end, **extra)
    response = client.patch(f"/shifts/{shift['id']}", json={"status": "completed"}, headers=headers)
    assert response.status_code == 200
    return shift


def test_invoice_totals_from_completed_shifts(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers)
    for day in (3, 4, 5):
        completed_shift(client, headers, staff["id"], carl["id"], date(2025, 3, day))

    response = client.post("/invoices/generate", json={"client_id": carl["id"], **PERIOD}, headers=headers)
    assert response.status_code == 200, response.text
    invoice = response.json()

    assert invoice["total_hours"] == 24
    assert invoice["total_amount"] == 720
    assert invoice["status"] == "pending"
    assert invoice["invoice_number"].startswith("INV-")
    assert invoice["due_date"] == (date.today() + timedelta(days=30)).isoformat()
    assert invoice["line_items_count"] == 3
    assert [item["description"] for item in invoice["line_items"]] == [
        "Shift - Mar 3, 2025",
        "Shift - Mar 4, 2025",
        "Shift - Mar 5, 2025",
    ]
    assert all(item["rate"] == 30 and item["amount"] == 240 for item in invoice["line_items"])
    assert sum(item["amount"] for item in invoice["line_items"]) == invoice["total_amount"]


def test_invoice_ignores_breaks_and_handles_overnight(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers)
    completed_shift(client, headers, staff["id"], carl["id"], date(2025, 3, 10), break_minutes=30)
    completed_shift(client, headers, staff["id"], carl["id"], date(2025, 3, 11), start="22:00", end="06:00")

    invoice = client.post("/invoices/generate", json={"client_id": carl["id"], **PERIOD}, headers=headers).json()
    assert invoice["total_hours"] == 16
    assert invoice["total_amount"] == 480


def test_only_completed_shifts_in_period_are_billed(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers)
    create_shift(client, headers, staff["id"], carl["id"], shift_date=date(2025, 3, 12))  # still scheduled
    completed_shift(client, headers, staff["id"], carl["id"], date(2025, 4, 2))  # outside period

    response = client.post("/invoices/generate", json={"client_id": carl["id"], **PERIOD}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "No completed shifts found for this period"
    assert client.get("/invoices", headers=headers).json()["invoices"] == []


def test_invoice_rejects_unknown_client_and_reversed_period(client, owner):
    headers = owner["headers"]
    assert client.post("/invoices/generate", json={"client_id": 42, **PERIOD}, headers=headers).status_code == 404

    reversed_period = {"client_id": 1, "billing_period_start": "2025-03-31", "billing_period_end": "2025-03-01"}
    assert client.post("/invoices/generate", json=reversed_period, headers=headers).status_code == 422


def test_mark_paid_and_send(client, owner, email_mocks):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers, email="carl@example.com")
    completed_shift(client, headers, staff["id"], carl["id"], date(2025, 3, 3))
    invoice = client.post("/invoices/generate", json={"client_id": carl["id"], **PERIOD}, headers=headers).json()

    sent = client.post(f"/invoices/{invoice['id']}/send", headers=headers)
    assert sent.status_code == 200
    assert sent.json()["status"] == "sent"
    assert sent.json()["sent_at"] is not None
    email_mocks["invoice"].assert_awaited_once()
    assert email_mocks["invoice"].await_args.kwargs["to"] == "carl@example.com"

    paid = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=headers)
    assert paid.json()["status"] == "paid"
    assert paid.json()["paid_at"] is not None

    assert client.patch(
        f"/invoices/{invoice['id']}/status", json={"status": "lost"}, headers=headers
    ).status_code == 422


def test_send_failures(client, owner, email_mocks):
    headers = owner["headers"]
    staff = create_staff(client, headers)
    no_email = create_client_record(client, headers)
    completed_shift(client, headers, staff["id"], no_email["id"], date(2025, 3, 3))
    invoice = client.post(
        "/invoices/generate", json={"client_id": no_email["id"], **PERIOD}, headers=headers
    ).json()
    assert client.post(f"/invoices/{invoice['id']}/send", headers=headers).status_code == 400

    client.patch(f"/clients/{no_email['id']}", json={"email": "late@example.com"}, headers=headers)
    email_mocks["invoice"].side_effect = EmailDeliveryError("provider down")
    response = client.post(f"/invoices/{invoice['id']}/send", headers=headers)
    assert response.status_code == 502
    assert client.get(f"/invoices/{invoice['id']}", headers=headers).json()["status"] == "pending"


def test_invoice_stats():
    now = datetime(2025, 3, 15, 12, 0)
    invoices = [
        SimpleNamespace(status="pending", total_amount=100.0, due_date=date(2025, 3, 1), created_at=now),
        SimpleNamespace(status="sent", total_amount=50.0, due_date=date(2025, 4, 1), created_at=now),
        SimpleNamespace(status="paid", total_amount=200.0, due_date=None, created_at=datetime(2025, 3, 2)),
        SimpleNamespace(status="paid", total_amount=999.0, due_date=None, created_at=datetime(2025, 2, 20)),
    ]
    stats = calculate_invoice_stats(invoices, now=now)
    assert stats.pendingCount == 2
    assert stats.pendingAmount == 150.0
    assert stats.paidThisMonth == 200.0
    assert stats.overdueCount == 1


def test_invoice_changes_are_owner_only(client, owner):
    headers = owner["headers"]
    nurse = onboard_staff(client, owner)
    staff = create_staff(client, headers)
    carl = create_client_record(client, headers, email="carl@example.com")
    completed_shift(client, headers, staff["id"], carl["id"], date(2025, 3, 3))

    generate = {"client_id": carl["id"], **PERIOD}
    assert client.post("/invoices/generate", json=generate, headers=nurse["headers"]).status_code == 403
    invoice = client.post("/invoices/generate", json=generate, headers=headers).json()

    assert client.patch(
        f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=nurse["headers"]
    ).status_code == 403
    assert client.post(f"/invoices/{invoice['id']}/send", headers=nurse["headers"]).status_code == 403
    # Reading stays open to members
    assert client.get(f"/invoices/{invoice['id']}", headers=nurse["headers"]).json()["status"] == "pending"
