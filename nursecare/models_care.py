"""
Client record models: notes, reminders, care plans and care logs
"""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class ClientNote(Base):
    __tablename__ = "client_notes"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    # general, medical, incident, communication, care_update, assessment, complaint, safeguarding
    note_type = Column(String(50), default="general", nullable=False)
    is_confidential = Column(Boolean, default=False, nullable=False)
    attachments = Column(JSON, nullable=True)  # list of R2 keys
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    author = relationship("User")


class ClientReminder(Base):
    __tablename__ = "client_reminders"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    reminder_date = Column(Date, nullable=False)
    reminder_time = Column(String(8), nullable=True)
    # follow_up, medication_review, care_review, appointment, assessment, other
    reminder_type = Column(String(50), default="follow_up", nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, completed, cancelled, snoozed
    priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    snoozed_until = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CarePlan(Base):
    __tablename__ = "care_plans"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, draft, archived
    start_date = Column(Date, nullable=False)
    review_date = Column(Date, nullable=True)
    goals = Column(JSON, nullable=False, default=list)
    interventions = Column(JSON, nullable=False, default=list)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")


class CareLog(Base):
    __tablename__ = "care_logs"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    staff_member_id = Column(Integer, ForeignKey("staff_members.id"), nullable=True)
    category = Column(String(50), default="General", nullable=False)  # General, Medication, Incident, ...
    content = Column(Text, nullable=False)
    log_date = Column(Date, nullable=False)
    log_time = Column(String(8), nullable=False)
    attachments = Column(JSON, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client")
    staff_member = relationship("StaffMember")
