"""
Appointment booking between care seekers and nurses
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .models import generate_public_id


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # care seeker
    nurse_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    service_type = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)

    status = Column(String(20), default="pending", nullable=False)  # pending, confirmed, completed, cancelled
    cancellation_reason = Column(Text, nullable=True)

    # Pricing and Dodo Payments checkout
    hourly_rate = Column(Float, nullable=True)
    total_cost = Column(Float, nullable=True)
    payment_status = Column(String(20), default="unpaid", nullable=False)  # unpaid, pending, paid, failed
    payment_session_id = Column(String(255), nullable=True)
    payment_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("User", foreign_keys=[client_id])
    nurse = relationship("User", foreign_keys=[nurse_id])
