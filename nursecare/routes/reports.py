import csv
import io
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, model_validator
from sqlalchemy.orm import Session, joinedload

from ..auth import get_current_organization
from ..config import DEFAULT_HOURLY_RATE
from ..database import get_db
from ..models import Organization, StaffMember
from ..models_appointment import Appointment
from ..models_care import CarePlan
from ..models_invoice import Invoice
from ..models_shift import StaffShift
from ..shared.time_utils import shift_hours

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

REPORT_HEADERS = {
    "timesheet": [
        "Staff Name", "Client Name", "Date", "Start Time", "End Time",
        "Hours", "Rate", "Total", "Status",
    ],
    "care-plan": ["Client Name", "Plan Title", "Start Date", "Review Date", "Status", "Goals Count"],
    "financial": [
        "Invoice Number", "Client Name", "Period Start", "Period End",
        "Total Hours", "Total Amount", "Status", "Due Date",
    ],
    "visits": [
        "Client Name", "Staff Name", "Date", "Start Time", "End Time",
        "Status", "Duration", "Cost",
    ],
}


class ReportRequest(BaseModel):
    reportType: str
    startDate: date
    endDate: date

    @model_validator(mode="after")
    def check_range(self):
        if self.endDate < self.startDate:
            raise ValueError("endDate must be on or after startDate")
        return self


def _money(value) -> str:
    return f"{float(value or 0):.2f}"


def timesheet_rows(db: Session, organization_id: int, start: date, end: date) -> list[list]:
    shifts = (
        db.query(StaffShift)
        .options(joinedload(StaffShift.staff_member), joinedload(StaffShift.client))
        .filter(
            StaffShift.organization_id == organization_id,
            StaffShift.shift_date >= start,
            StaffShift.shift_date <= end,
        )
        .order_by(StaffShift.shift_date, StaffShift.start_time)
        .all()
    )
    rows = []
    for shift in shifts:
        hours = shift_hours(shift.start_time, shift.end_time, shift.break_minutes)
        staff = shift.staff_member
        rate = staff.hourly_rate if staff and staff.hourly_rate is not None else DEFAULT_HOURLY_RATE
        rows.append([
            staff.full_name if staff else "",
            shift.client.full_name if shift.client else "",
            shift.shift_date.isoformat(),
            shift.start_time,
            shift.end_time,
            f"{hours:.2f}",
            _money(rate),
            _money(hours * rate),
            shift.status,
        ])
    return rows


def care_plan_rows(db: Session, organization_id: int, start: date, end: date) -> list[list]:
    plans = (
        db.query(CarePlan)
        .options(joinedload(CarePlan.client))
        .filter(
            CarePlan.organization_id == organization_id,
            CarePlan.start_date >= start,
            CarePlan.start_date <= end,
        )
        .order_by(CarePlan.start_date)
        .all()
    )
    return [
        [
            plan.client.full_name if plan.client else "",
            plan.title,
            plan.start_date.isoformat(),
            plan.review_date.isoformat() if plan.review_date else "",
            plan.status,
            len(plan.goals or []),
        ]
        for plan in plans
    ]


def financial_rows(db: Session, organization_id: int, start: date, end: date) -> list[list]:
    invoices = (
        db.query(Invoice)
        .options(joinedload(Invoice.client))
        .filter(
            Invoice.organization_id == organization_id,
            Invoice.billing_period_start >= start,
            Invoice.billing_period_start <= end,
        )
        .order_by(Invoice.billing_period_start, Invoice.id)
        .all()
    )
    return [
        [
            invoice.invoice_number,
            invoice.client.full_name if invoice.client else "",
            invoice.billing_period_start.isoformat(),
            invoice.billing_period_end.isoformat(),
            f"{float(invoice.total_hours or 0):.2f}",
            _money(invoice.total_amount),
            invoice.status,
            invoice.due_date.isoformat() if invoice.due_date else "",
        ]
        for invoice in invoices
    ]


def visit_rows(db: Session, organization: Organization, start: date, end: date) -> list[list]:
    """Appointments delivered by the owner or any linked staff account"""
    nurse_ids = {organization.owner_id}
    nurse_ids.update(
        user_id
        for (user_id,) in db.query(StaffMember.user_id).filter(
            StaffMember.organization_id == organization.id,
            StaffMember.user_id.isnot(None),
        )
    )
    appointments = (
        db.query(Appointment)
        .options(joinedload(Appointment.client), joinedload(Appointment.nurse))
        .filter(
            Appointment.nurse_id.in_(nurse_ids),
            Appointment.appointment_date >= start,
            Appointment.appointment_date <= end,
        )
        .order_by(Appointment.appointment_date, Appointment.start_time)
        .all()
    )
    return [
        [
            appt.client.full_name if appt.client else "",
            appt.nurse.full_name if appt.nurse else "",
            appt.appointment_date.isoformat(),
            appt.start_time,
            appt.end_time,
            appt.status,
            appt.duration_minutes or 0,
            _money(appt.total_cost),
        ]
        for appt in appointments
    ]


@router.post("/generate")
async def generate_report(
    data: ReportRequest,
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db),
):
    """Export a CSV report for the organization over a date range"""
    if data.reportType not in REPORT_HEADERS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown report type. Use one of: {', '.join(REPORT_HEADERS)}",
        )

    if data.reportType == "timesheet":
        rows = timesheet_rows(db, organization.id, data.startDate, data.endDate)
    elif data.reportType == "care-plan":
        rows = care_plan_rows(db, organization.id, data.startDate, data.endDate)
    elif data.reportType == "financial":
        rows = financial_rows(db, organization.id, data.startDate, data.endDate)
    else:
        rows = visit_rows(db, organization, data.startDate, data.endDate)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(REPORT_HEADERS[data.reportType])
    writer.writerows(rows)
    buffer.seek(0)

    filename = f"{data.reportType}-report-{data.startDate.isoformat()}-to-{data.endDate.isoformat()}.csv"
    logger.info(f"📊 Generated {data.reportType} report for organization {organization.id} ({len(rows)} rows)")

    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
