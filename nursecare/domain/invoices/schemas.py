"""Invoice domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, model_validator

InvoiceStatus = Literal["pending", "sent", "paid", "overdue", "cancelled"]


class InvoiceGenerate(BaseModel):
    client_id: int
    billing_period_start: date
    billing_period_end: date

    @model_validator(mode="after")
    def check_period(self):
        if self.billing_period_end < self.billing_period_start:
            raise ValueError("billing_period_end must not be before billing_period_start")
        return self


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class LineItemResponse(BaseModel):
    id: int
    staff_shift_id: Optional[int] = None
    description: str
    quantity: float
    rate: float
    amount: float

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    public_id: Optional[str] = None
    organization_id: int
    client_id: int
    client_name: Optional[str] = None
    invoice_number: str
    billing_period_start: date
    billing_period_end: date
    total_hours: float
    total_amount: float
    currency: Optional[str] = "USD"
    status: str
    due_date: Optional[date] = None
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    line_items_count: int = 0


class InvoiceDetailResponse(InvoiceResponse):
    line_items: list[LineItemResponse] = []


class InvoiceStats(BaseModel):
    pendingCount: int
    pendingAmount: float
    paidThisMonth: float
    overdueCount: int


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse]
    stats: InvoiceStats
