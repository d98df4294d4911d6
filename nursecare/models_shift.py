"""
Staff shift scheduling models: shifts and shift swap requests
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class StaffShift(Base):
    """A scheduled staff-to-client work assignment"""

    __tablename__ = "staff_shifts"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    staff_member_id = Column(Integer, ForeignKey("staff_members.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)

    shift_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)  # HH:MM
    end_time = Column(String(8), nullable=False)  # HH:MM, may be earlier than start (overnight)
    break_minutes = Column(Integer, default=0, nullable=False)
    shift_type = Column(String(50), nullable=True)  # day, night, live_in, visit
    notes = Column(Text, nullable=True)

    status = Column(String(50), default="scheduled", nullable=False)  # scheduled, completed, cancelled
    confirmation_status = Column(String(20), default="pending", nullable=False)  # pending, accepted, declined
    confirmed_at = Column(DateTime, nullable=True)
    confirmed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    decline_reason = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    staff_member = relationship("StaffMember", back_populates="shifts")
    client = relationship("Client", back_populates="shifts")
    swap_requests = relationship("ShiftSwapRequest", back_populates="original_shift")


class ShiftSwapRequest(Base):
    __tablename__ = "shift_swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    original_shift_id = Column(Integer, ForeignKey("staff_shifts.id"), nullable=False, index=True)
    requesting_staff_id = Column(Integer, ForeignKey("staff_members.id"), nullable=False)
    covering_staff_id = Column(Integer, ForeignKey("staff_members.id"), nullable=True)
    request_reason = Column(Text, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, approved, rejected
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    original_shift = relationship("StaffShift", back_populates="swap_requests")
    requesting_staff = relationship("StaffMember", foreign_keys=[requesting_staff_id])
    covering_staff = relationship("StaffMember", foreign_keys=[covering_staff_id])
