"""
Onboarding invitations for clients and staff
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class ClientInvitation(Base):
    __tablename__ = "client_invitations"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, expired
    expires_at = Column(DateTime, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    invited_by_name = Column(String(255), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    organization = relationship("Organization")


class StaffInvitation(Base):
    __tablename__ = "staff_invitations"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    job_title = Column(String(100), nullable=False)
    token = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, expired
    expires_at = Column(DateTime, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    invited_by_name = Column(String(255), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    organization = relationship("Organization")
