"""
Invoice Models for client billing from completed shifts
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .models import generate_public_id


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # Public UUID for secure public access (prevents enumeration)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    billing_period_start = Column(Date, nullable=False)
    billing_period_end = Column(Date, nullable=False)

    total_hours = Column(Float, nullable=False, default=0)
    total_amount = Column(Float, nullable=False, default=0)
    currency = Column(String(10), default="USD")

    status = Column(String(50), default="pending")  # pending, sent, paid, overdue, cancelled
    due_date = Column(Date, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.id",
    )


class InvoiceLineItem(Base):
    """One billed shift on an invoice"""

    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    staff_shift_id = Column(Integer, ForeignKey("staff_shifts.id"), nullable=True)
    description = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)  # hours
    rate = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice", back_populates="line_items")
