"""Shift repository - Database operations for shifts and swap requests"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_shift import ShiftSwapRequest, StaffShift


class ShiftRepository:
    """Repository for shift database operations"""

    @staticmethod
    def get_shifts(
        db: Session,
        organization_id: int,
        staff_member_id: Optional[int] = None,
        client_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[StaffShift]:
        query = (
            db.query(StaffShift)
            .options(joinedload(StaffShift.staff_member), joinedload(StaffShift.client))
            .filter(StaffShift.organization_id == organization_id)
        )
        if staff_member_id is not None:
            query = query.filter(StaffShift.staff_member_id == staff_member_id)
        if client_id is not None:
            query = query.filter(StaffShift.client_id == client_id)
        if start_date is not None:
            query = query.filter(StaffShift.shift_date >= start_date)
        if end_date is not None:
            query = query.filter(StaffShift.shift_date <= end_date)
        if status is not None:
            query = query.filter(StaffShift.status == status)

        return query.order_by(StaffShift.shift_date, StaffShift.start_time).all()

    @staticmethod
    def get_pending_for_staff(db: Session, staff_member_id: int) -> list[StaffShift]:
        return (
            db.query(StaffShift)
            .options(joinedload(StaffShift.client))
            .filter(
                StaffShift.staff_member_id == staff_member_id,
                StaffShift.confirmation_status == "pending",
                StaffShift.status != "cancelled",
            )
            .order_by(StaffShift.shift_date, StaffShift.start_time)
            .all()
        )

    @staticmethod
    def get_completed_for_client(
        db: Session, organization_id: int, client_id: int, start_date: date, end_date: date
    ) -> list[StaffShift]:
        """Completed shifts of a client inside a billing period"""
        return (
            db.query(StaffShift)
            .filter(
                StaffShift.organization_id == organization_id,
                StaffShift.client_id == client_id,
                StaffShift.status == "completed",
                StaffShift.shift_date >= start_date,
                StaffShift.shift_date <= end_date,
            )
            .order_by(StaffShift.shift_date, StaffShift.start_time)
            .all()
        )

    @staticmethod
    def get_shift_by_id(db: Session, shift_id: int, organization_id: int) -> Optional[StaffShift]:
        return (
            db.query(StaffShift)
            .filter(StaffShift.id == shift_id, StaffShift.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def create_shift(db: Session, **shift_data) -> StaffShift:
        shift = StaffShift(**shift_data)
        db.add(shift)
        db.commit()
        db.refresh(shift)
        return shift

    @staticmethod
    def update_shift(db: Session, shift: StaffShift, **updates) -> StaffShift:
        for key, value in updates.items():
            if value is not None and hasattr(shift, key):
                setattr(shift, key, value)
        db.commit()
        db.refresh(shift)
        return shift


class SwapRequestRepository:
    """Repository for shift swap request database operations"""

    @staticmethod
    def get_requests(db: Session, organization_id: int, status: Optional[str] = None) -> list[ShiftSwapRequest]:
        query = (
            db.query(ShiftSwapRequest)
            .options(
                joinedload(ShiftSwapRequest.original_shift).joinedload(StaffShift.client),
                joinedload(ShiftSwapRequest.requesting_staff),
                joinedload(ShiftSwapRequest.covering_staff),
            )
            .filter(ShiftSwapRequest.organization_id == organization_id)
        )
        if status:
            query = query.filter(ShiftSwapRequest.status == status)
        return query.order_by(ShiftSwapRequest.created_at.desc(), ShiftSwapRequest.id.desc()).all()

    @staticmethod
    def get_request_by_id(db: Session, request_id: int, organization_id: int) -> Optional[ShiftSwapRequest]:
        return (
            db.query(ShiftSwapRequest)
            .filter(ShiftSwapRequest.id == request_id, ShiftSwapRequest.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def create_request(db: Session, **request_data) -> ShiftSwapRequest:
        request = ShiftSwapRequest(**request_data)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request
