import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import find_user_organization, get_current_organization, get_current_user, get_owned_organization
from ..database import get_db
from ..models import Organization, User, UserRole
from ..services.realtime import publish_change
from ..shared.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["Organizations"])


class OrganizationCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    registration_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Organization name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class OrganizationUpdate(OrganizationCreate):
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Organization name cannot be empty")
        return v.strip() if v else v


class OrganizationResponse(BaseModel):
    id: int
    public_id: Optional[str] = None
    owner_id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    registration_number: Optional[str] = None
    created_at: Optional[datetime] = None
    role: Optional[str] = None

    class Config:
        from_attributes = True


def with_role(organization: Organization, user: User) -> OrganizationResponse:
    role = "owner" if organization.owner_id == user.id else "staff_nurse"
    return OrganizationResponse.model_validate(organization).model_copy(update={"role": role})


@router.post("", response_model=OrganizationResponse)
async def create_organization(
    data: OrganizationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an organization owned by the caller"""
    if find_user_organization(db, current_user):
        raise HTTPException(status_code=409, detail="You already belong to an organization")

    organization = Organization(owner_id=current_user.id, **data.model_dump())
    db.add(organization)
    db.flush()
    db.add(UserRole(user_id=current_user.id, organization_id=organization.id, role="owner"))
    db.commit()
    db.refresh(organization)

    logger.info(f"🏥 Organization {organization.id} created by user {current_user.id}")
    publish_change("nurse_organizations", "INSERT", organization.id, organization_id=organization.id)
    return with_role(organization, current_user)


@router.get("/current", response_model=OrganizationResponse)
async def get_organization(
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
):
    """The organization the caller owns, or else the one they are a member of"""
    return with_role(organization, current_user)


@router.patch("/current", response_model=OrganizationResponse)
async def update_organization(
    data: OrganizationUpdate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_owned_organization),
    db: Session = Depends(get_db),
):
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(organization, key, value)
    db.commit()
    db.refresh(organization)

    publish_change("nurse_organizations", "UPDATE", organization.id, organization_id=organization.id)
    return with_role(organization, current_user)
