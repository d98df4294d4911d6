"""Invitation schemas - client and staff onboarding"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email
from ..clients.schemas import ClientUpdate
from ..staff.schemas import StaffBase


class ClientInvitationCreate(BaseModel):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class StaffInvitationCreate(BaseModel):
    email: str
    first_name: str
    last_name: str
    job_title: str
    redirect_base_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("first_name", "last_name", "job_title")
    @classmethod
    def required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()


class InvitationResponse(BaseModel):
    id: int
    organization_id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None
    status: str
    expires_at: datetime
    invited_by_name: Optional[str] = None
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvitationSent(BaseModel):
    success: bool = True
    invitation: InvitationResponse
    onboarding_url: str


class InvitationValidation(BaseModel):
    valid: bool
    invitation: InvitationResponse
    organization_name: Optional[str] = None


class ClientOnboardingData(ClientUpdate):
    """Profile details a client fills in from the invitation link"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ClientOnboardingComplete(BaseModel):
    token: str
    client_data: ClientOnboardingData


class ClientProfileUpdate(BaseModel):
    token: str
    updates: ClientOnboardingData


class StaffOnboardingData(StaffBase):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class StaffOnboardingComplete(BaseModel):
    token: str
    password: str
    staff_data: StaffOnboardingData


class OnboardingResult(BaseModel):
    success: bool = True
    client_id: Optional[int] = None
    staff_member_id: Optional[int] = None
    user_id: Optional[int] = None
    access_token: Optional[str] = None
    token_type: Optional[str] = None
