import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), default="nurse", nullable=False)  # nurse, client, admin
    avatar_key = Column(String(500), nullable=True)  # R2 key in profile-images
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owned_organizations = relationship("Organization", back_populates="owner")
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.email


class Organization(Base):
    """Nurse organization (agency) - the tenant that owns staff, clients, shifts and invoices"""

    __tablename__ = "nurse_organizations"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    registration_number = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="owned_organizations")
    staff_members = relationship("StaffMember", back_populates="organization")
    clients = relationship("Client", back_populates="organization")


class UserRole(Base):
    """Membership of a user in an organization (owner, staff_nurse)"""

    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    role = Column(String(50), nullable=False)  # owner, staff_nurse
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="roles")
    organization = relationship("Organization")


class StaffMember(Base):
    __tablename__ = "staff_members"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    job_title = Column(String(100), nullable=True)
    employment_type = Column(String(50), nullable=True)  # full_time, part_time, contract, bank
    hourly_rate = Column(Float, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    # Professional registration
    license_number = Column(String(100), nullable=True)
    license_expiry = Column(Date, nullable=True)
    insurance_provider = Column(String(255), nullable=True)
    insurance_expiry = Column(Date, nullable=True)
    background_check_date = Column(Date, nullable=True)
    specializations = Column(JSON, nullable=True)  # list of strings
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="staff_members")
    user = relationship("User")
    shifts = relationship("StaffShift", back_populates="staff_member")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("nurse_organizations.id"), nullable=False, index=True)
    invitation_id = Column(Integer, ForeignKey("client_invitations.id"), nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    # Medical / care information
    medical_conditions = Column(Text, nullable=True)
    allergies = Column(Text, nullable=True)
    medications = Column(Text, nullable=True)
    care_requirements = Column(Text, nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_phone = Column(String(50), nullable=True)
    status = Column(String(50), default="active", nullable=False)  # active, inactive, discharged
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="clients")
    shifts = relationship("StaffShift", back_populates="client")
    invoices = relationship("Invoice", back_populates="client")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
