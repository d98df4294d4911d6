"""Staff repository - Database operations for staff members"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import StaffMember


class StaffRepository:
    """Repository for staff member database operations"""

    @staticmethod
    def get_active_staff(db: Session, organization_id: int) -> list[StaffMember]:
        return (
            db.query(StaffMember)
            .filter(StaffMember.organization_id == organization_id, StaffMember.is_active.is_(True))
            .order_by(StaffMember.created_at.desc(), StaffMember.id.desc())
            .all()
        )

    @staticmethod
    def get_staff_by_id(db: Session, staff_id: int, organization_id: int) -> Optional[StaffMember]:
        return (
            db.query(StaffMember)
            .filter(StaffMember.id == staff_id, StaffMember.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def create_staff(db: Session, organization_id: int, **staff_data) -> StaffMember:
        staff = StaffMember(organization_id=organization_id, **staff_data)
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def update_staff(db: Session, staff: StaffMember, **updates) -> StaffMember:
        for key, value in updates.items():
            if value is not None and hasattr(staff, key):
                setattr(staff, key, value)
        db.commit()
        db.refresh(staff)
        return staff
