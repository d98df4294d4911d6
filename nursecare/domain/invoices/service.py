"""Invoice service - Invoice generation from completed shifts, stats and delivery"""

import logging
import time
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import DEFAULT_HOURLY_RATE, INVOICE_DUE_DAYS
from ...email_service import EmailDeliveryError, send_invoice_email
from ...models import Client, Organization, User
from ...models_invoice import Invoice, InvoiceLineItem
from ...services.realtime import publish_change
from ...shared.time_utils import format_shift_date, shift_hours, start_of_month
from ..shifts.repository import ShiftRepository
from .repository import InvoiceRepository
from .schemas import (
    InvoiceDetailResponse,
    InvoiceGenerate,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStats,
    LineItemResponse,
)

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("pending", "sent")


def generate_invoice_number(db: Session) -> str:
    """INV-<epoch milliseconds>, bumped until unused"""
    candidate = int(time.time() * 1000)
    while InvoiceRepository.invoice_number_exists(db, f"INV-{candidate}"):
        candidate += 1
    return f"INV-{candidate}"


def to_invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        public_id=invoice.public_id,
        organization_id=invoice.organization_id,
        client_id=invoice.client_id,
        client_name=invoice.client.full_name if invoice.client else None,
        invoice_number=invoice.invoice_number,
        billing_period_start=invoice.billing_period_start,
        billing_period_end=invoice.billing_period_end,
        total_hours=invoice.total_hours,
        total_amount=invoice.total_amount,
        currency=invoice.currency,
        status=invoice.status,
        due_date=invoice.due_date,
        sent_at=invoice.sent_at,
        paid_at=invoice.paid_at,
        created_at=invoice.created_at,
        line_items_count=len(invoice.line_items),
    )


def to_invoice_detail(invoice: Invoice) -> InvoiceDetailResponse:
    return InvoiceDetailResponse(
        **to_invoice_response(invoice).model_dump(),
        line_items=[LineItemResponse.model_validate(item) for item in invoice.line_items],
    )


def calculate_invoice_stats(invoices: list[Invoice], now: Optional[datetime] = None) -> InvoiceStats:
    now = now or datetime.utcnow()
    month_start = start_of_month(now)
    today = now.date()

    open_invoices = [i for i in invoices if i.status in OPEN_STATUSES]
    paid_this_month = [
        i for i in invoices if i.status == "paid" and i.created_at is not None and i.created_at >= month_start
    ]
    overdue = [i for i in open_invoices if i.due_date is not None and i.due_date < today]

    return InvoiceStats(
        pendingCount=len(open_invoices),
        pendingAmount=round(sum(i.total_amount or 0 for i in open_invoices), 2),
        paidThisMonth=round(sum(i.total_amount or 0 for i in paid_this_month), 2),
        overdueCount=len(overdue),
    )


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()
        self.shifts = ShiftRepository()

    def get_invoices(self, organization: Organization, status: Optional[str] = None) -> InvoiceListResponse:
        invoices = self.repo.get_invoices(self.db, organization.id, status)
        all_invoices = invoices if status is None else self.repo.get_invoices(self.db, organization.id)
        return InvoiceListResponse(
            invoices=[to_invoice_response(i) for i in invoices],
            stats=calculate_invoice_stats(all_invoices),
        )

    def get_invoice(self, invoice_id: int, organization: Organization) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, organization.id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def generate_invoice(self, data: InvoiceGenerate, organization: Organization, user: User) -> Invoice:
        """
        Bill a client's completed shifts in the period at the default hourly rate.

        Shift hours run from start to end time (overnight aware) without deducting
        breaks. The invoice and its line items are written in one transaction, so
        total_amount always equals the sum of the line item amounts.
        """
        client = (
            self.db.query(Client)
            .filter(Client.id == data.client_id, Client.organization_id == organization.id)
            .first()
        )
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")

        shifts = self.shifts.get_completed_for_client(
            self.db, organization.id, client.id, data.billing_period_start, data.billing_period_end
        )
        if not shifts:
            raise HTTPException(status_code=400, detail="No completed shifts found for this period")

        rate = DEFAULT_HOURLY_RATE
        line_items = []
        for shift in shifts:
            hours = shift_hours(shift.start_time, shift.end_time)
            line_items.append(
                InvoiceLineItem(
                    staff_shift_id=shift.id,
                    description=f"Shift - {format_shift_date(shift.shift_date)}",
                    quantity=hours,
                    rate=rate,
                    amount=hours * rate,
                )
            )

        invoice = Invoice(
            organization_id=organization.id,
            client_id=client.id,
            invoice_number=generate_invoice_number(self.db),
            billing_period_start=data.billing_period_start,
            billing_period_end=data.billing_period_end,
            total_hours=sum(item.quantity for item in line_items),
            total_amount=sum(item.amount for item in line_items),
            status="pending",
            due_date=date.today() + timedelta(days=INVOICE_DUE_DAYS),
            created_by=user.id,
            line_items=line_items,
        )

        try:
            self.db.add(invoice)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to generate invoice for client {client.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate invoice") from e

        self.db.refresh(invoice)
        publish_change("invoices", "INSERT", invoice.id, organization_id=organization.id)
        logger.info(
            f"🧾 Invoice {invoice.invoice_number} generated: {len(line_items)} shifts, "
            f"{invoice.total_hours}h, {invoice.total_amount:.2f}"
        )
        return invoice

    def update_status(self, invoice_id: int, status: str, organization: Organization) -> Invoice:
        invoice = self.get_invoice(invoice_id, organization)
        invoice.status = status
        if status == "paid" and invoice.paid_at is None:
            invoice.paid_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(invoice)
        publish_change("invoices", "UPDATE", invoice.id, organization_id=organization.id)
        return invoice

    async def send_invoice(self, invoice_id: int, organization: Organization) -> Invoice:
        """Email the invoice to the client, then mark it sent"""
        invoice = self.get_invoice(invoice_id, organization)
        client = invoice.client
        if not client or not client.email:
            raise HTTPException(status_code=400, detail="Client has no email address")

        try:
            await send_invoice_email(
                to=client.email,
                client_name=client.full_name,
                organization_name=organization.name,
                invoice_number=invoice.invoice_number,
                amount=invoice.total_amount,
                total_hours=invoice.total_hours,
                due_date=invoice.due_date.isoformat() if invoice.due_date else "",
                currency=invoice.currency or "USD",
            )
        except EmailDeliveryError as e:
            logger.error(f"❌ Failed to send invoice {invoice.invoice_number}: {e}")
            raise HTTPException(status_code=502, detail="Failed to send invoice email") from e

        invoice.status = "sent"
        invoice.sent_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(invoice)
        publish_change("invoices", "UPDATE", invoice.id, organization_id=organization.id)
        logger.info(f"📧 Invoice {invoice.invoice_number} sent to {client.email}")
        return invoice
