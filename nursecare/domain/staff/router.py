"""Staff router - FastAPI endpoints for staff members"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_organization
from ...database import get_db
from ...models import Organization
from .schemas import StaffCreate, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


@router.get("", response_model=list[StaffResponse])
async def list_staff(
    organization: Organization = Depends(get_current_organization),
    service: StaffService = Depends(get_staff_service),
):
    return service.get_staff(organization)


@router.post("", response_model=StaffResponse)
async def create_staff(
    data: StaffCreate,
    organization: Organization = Depends(get_current_organization),
    service: StaffService = Depends(get_staff_service),
):
    return service.create_staff(data, organization)


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff_member(
    staff_id: int,
    organization: Organization = Depends(get_current_organization),
    service: StaffService = Depends(get_staff_service),
):
    return service.get_staff_member(staff_id, organization)


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    data: StaffUpdate,
    organization: Organization = Depends(get_current_organization),
    service: StaffService = Depends(get_staff_service),
):
    return service.update_staff(staff_id, data, organization)


@router.delete("/{staff_id}")
async def remove_staff(
    staff_id: int,
    organization: Organization = Depends(get_current_organization),
    service: StaffService = Depends(get_staff_service),
):
    """Deactivate a staff member (soft delete)"""
    return service.remove_staff(staff_id, organization)
