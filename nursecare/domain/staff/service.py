"""Staff service - Business logic for staff members"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Organization, StaffMember
from ...services.realtime import publish_change
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()

    def get_staff(self, organization: Organization) -> list[StaffMember]:
        """Active staff only; removed staff stay in the table with is_active False"""
        return self.repo.get_active_staff(self.db, organization.id)

    def get_staff_member(self, staff_id: int, organization: Organization) -> StaffMember:
        staff = self.repo.get_staff_by_id(self.db, staff_id, organization.id)
        if not staff:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return staff

    def create_staff(self, data: StaffCreate, organization: Organization) -> StaffMember:
        logger.info(f"📥 Creating staff member for organization {organization.id}")
        staff = self.repo.create_staff(self.db, organization.id, **data.model_dump())
        publish_change("staff_members", "INSERT", staff.id, organization_id=organization.id)
        return staff

    def update_staff(self, staff_id: int, data: StaffUpdate, organization: Organization) -> StaffMember:
        staff = self.get_staff_member(staff_id, organization)
        staff = self.repo.update_staff(self.db, staff, **data.model_dump(exclude_unset=True))
        publish_change("staff_members", "UPDATE", staff.id, organization_id=organization.id)
        return staff

    def remove_staff(self, staff_id: int, organization: Organization) -> dict:
        """Soft delete: the row is kept so historic shifts and invoices still resolve"""
        staff = self.get_staff_member(staff_id, organization)
        self.repo.update_staff(self.db, staff, is_active=False)
        publish_change("staff_members", "UPDATE", staff.id, organization_id=organization.id)
        logger.info(f"🗑️ Staff member {staff.id} deactivated")
        return {"message": "Staff member removed"}
