import csv
import io
from datetime import date

from conftest import create_client_record, create_shift, create_staff

from nursecare.routes.reports import REPORT_HEADERS

RANGE = {"startDate": "2025-03-01", "endDate": "2025-03-31"}


def read_csv(response):
    return list(csv.reader(io.StringIO(response.text)))


def test_timesheet_report(client, owner):
    headers = owner["headers"]
    rated = create_staff(client, headers, hourly_rate=25)
    unrated = create_staff(client, headers, "Una", "Rated")
    carl = create_client_record(client, headers)
    create_shift(client, headers, rated["id"], carl["id"], shift_date=date(2025, 3, 4), break_minutes=60)
    create_shift(client, headers, unrated["id"], shift_date=date(2025, 3, 5), start="08:00", end="12:00")
    create_shift(client, headers, rated["id"], shift_date=date(2025, 4, 1))

    response = client.post("/reports/generate", json={"reportType": "timesheet", **RANGE}, headers=headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == (
        'attachment; filename="timesheet-report-2025-03-01-to-2025-03-31.csv"'
    )

    rows = read_csv(response)
    assert rows[0] == REPORT_HEADERS["timesheet"]
    assert rows[1] == [
        "Nina Nurse", "Carl Client", "2025-03-04", "09:00", "17:00", "7.00", "25.00", "175.00", "scheduled",
    ]
    # Staff without a rate fall back to the default
    assert rows[2][0] == "Una Rated"
    assert rows[2][6:8] == ["30.00", "120.00"]
    assert len(rows) == 3


def test_care_plan_and_financial_reports_have_headers(client, owner):
    headers = owner["headers"]
    carl = create_client_record(client, headers)
    client.post(
        "/care-plans",
        json={"client_id": carl["id"], "title": "Nutrition", "start_date": "2025-03-10", "goals": ["Eat", "Drink"]},
        headers=headers,
    )

    care = read_csv(client.post("/reports/generate", json={"reportType": "care-plan", **RANGE}, headers=headers))
    assert care == [REPORT_HEADERS["care-plan"], ["Carl Client", "Nutrition", "2025-03-10", "", "active", "2"]]

    financial = read_csv(client.post("/reports/generate", json={"reportType": "financial", **RANGE}, headers=headers))
    assert financial == [REPORT_HEADERS["financial"]]

    visits = read_csv(client.post("/reports/generate", json={"reportType": "visits", **RANGE}, headers=headers))
    assert visits == [REPORT_HEADERS["visits"]]


def test_report_validation(client, owner):
    headers = owner["headers"]
    unknown = client.post("/reports/generate", json={"reportType": "payroll", **RANGE}, headers=headers)
    assert unknown.status_code == 400

    backwards = client.post(
        "/reports/generate",
        json={"reportType": "timesheet", "startDate": "2025-03-31", "endDate": "2025-03-01"},
        headers=headers,
    )
    assert backwards.status_code == 422
