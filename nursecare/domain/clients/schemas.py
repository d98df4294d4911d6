"""Client domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone


class ClientFields(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    medical_conditions: Optional[str] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None
    care_requirements: Optional[str] = None
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


class ClientCreate(ClientFields):
    """Schema for creating a new client"""

    first_name: str
    last_name: str
    status: Optional[str] = "active"


class ClientUpdate(ClientFields):
    """Schema for updating an existing client"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[str] = None


class ClientResponse(ClientFields):
    """Schema for client response"""

    id: int
    organization_id: int
    invitation_id: Optional[int] = None
    first_name: str
    last_name: str
    status: str
    created_at: Optional[datetime] = None
    shift_count: int = 0

    class Config:
        from_attributes = True
