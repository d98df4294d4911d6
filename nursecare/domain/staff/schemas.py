"""Staff domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone


class StaffBase(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    employment_type: Optional[str] = None
    hourly_rate: Optional[float] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    start_date: Optional[date] = None
    license_number: Optional[str] = None
    license_expiry: Optional[date] = None
    insurance_provider: Optional[str] = None
    insurance_expiry: Optional[date] = None
    background_check_date: Optional[date] = None
    specializations: Optional[list[str]] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone", "emergency_contact_phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("hourly_rate")
    @classmethod
    def check_rate(cls, v):
        if v is not None and v < 0:
            raise ValueError("Hourly rate cannot be negative")
        return v


class StaffCreate(StaffBase):
    first_name: str
    last_name: str


class StaffUpdate(StaffBase):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: Optional[bool] = None


class StaffResponse(StaffBase):
    id: int
    organization_id: int
    user_id: Optional[int] = None
    first_name: str
    last_name: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
