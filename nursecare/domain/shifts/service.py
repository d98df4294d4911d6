"""Shift service - Scheduling, confirmation and swap request logic"""

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_user_staff_member
from ...models import Client, Organization, StaffMember, User
from ...models_shift import ShiftSwapRequest, StaffShift
from ...services.notification_service import (
    notify_organization_owner,
    notify_user,
    send_notification,
)
from ...services.realtime import publish_change
from ...shared.time_utils import shift_hours, week_bounds
from .repository import ShiftRepository, SwapRequestRepository
from .schemas import (
    ClientScheduleResponse,
    ShiftCreate,
    ShiftResponse,
    ShiftUpdate,
    SwapRequestCreate,
    SwapRequestList,
    SwapRequestResponse,
    WeekStats,
)

logger = logging.getLogger(__name__)


def to_shift_response(shift: StaffShift) -> ShiftResponse:
    return ShiftResponse(
        id=shift.id,
        organization_id=shift.organization_id,
        staff_member_id=shift.staff_member_id,
        client_id=shift.client_id,
        appointment_id=shift.appointment_id,
        shift_date=shift.shift_date,
        start_time=shift.start_time,
        end_time=shift.end_time,
        break_minutes=shift.break_minutes or 0,
        shift_type=shift.shift_type,
        notes=shift.notes,
        status=shift.status,
        confirmation_status=shift.confirmation_status,
        confirmed_at=shift.confirmed_at,
        confirmed_by=shift.confirmed_by,
        decline_reason=shift.decline_reason,
        created_at=shift.created_at,
        staff_name=shift.staff_member.full_name if shift.staff_member else None,
        client_name=shift.client.full_name if shift.client else None,
        hours=shift_hours(shift.start_time, shift.end_time, shift.break_minutes or 0),
    )


class ShiftService:
    """Service layer for shift scheduling"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ShiftRepository()

    def _check_staff(self, staff_member_id: int, organization: Organization) -> StaffMember:
        staff = (
            self.db.query(StaffMember)
            .filter(StaffMember.id == staff_member_id, StaffMember.organization_id == organization.id)
            .first()
        )
        if not staff or not staff.is_active:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return staff

    def _check_client(self, client_id: int, organization: Organization) -> Client:
        client = (
            self.db.query(Client)
            .filter(Client.id == client_id, Client.organization_id == organization.id)
            .first()
        )
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def get_shifts(self, organization: Organization, **filters) -> list[ShiftResponse]:
        """Shifts ordered by date then start time"""
        shifts = self.repo.get_shifts(self.db, organization.id, **filters)
        return [to_shift_response(s) for s in shifts]

    def get_shift(self, shift_id: int, organization: Organization) -> StaffShift:
        shift = self.repo.get_shift_by_id(self.db, shift_id, organization.id)
        if not shift:
            raise HTTPException(status_code=404, detail="Shift not found")
        return shift

    async def create_shift(self, data: ShiftCreate, organization: Organization, user: User) -> StaffShift:
        staff = self._check_staff(data.staff_member_id, organization)
        if data.client_id is not None:
            self._check_client(data.client_id, organization)

        shift = self.repo.create_shift(
            self.db,
            organization_id=organization.id,
            status="scheduled",
            confirmation_status="pending",
            created_by=user.id,
            **data.model_dump(),
        )
        logger.info(f"📅 Shift {shift.id} created for staff member {staff.id}")
        publish_change("staff_shifts", "INSERT", shift.id, organization_id=organization.id)

        await send_notification(
            self.db,
            staff.user_id,
            "shift_assigned",
            "New shift assigned",
            message=f"You have a new shift on {shift.shift_date} from {shift.start_time} to {shift.end_time}.",
            link=f"/staff/shifts/{shift.id}",
            email=True,
            data={"shift_id": shift.id},
        )
        return shift

    def update_shift(self, shift_id: int, data: ShiftUpdate, organization: Organization) -> StaffShift:
        shift = self.get_shift(shift_id, organization)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("staff_member_id") is not None:
            self._check_staff(updates["staff_member_id"], organization)
        if updates.get("client_id") is not None:
            self._check_client(updates["client_id"], organization)

        shift = self.repo.update_shift(self.db, shift, **updates)
        publish_change("staff_shifts", "UPDATE", shift.id, organization_id=organization.id)
        return shift

    def cancel_shift(self, shift_id: int, organization: Organization) -> StaffShift:
        """Shifts are never deleted; cancelling keeps the row for history and billing"""
        shift = self.get_shift(shift_id, organization)
        shift = self.repo.update_shift(self.db, shift, status="cancelled")
        publish_change("staff_shifts", "UPDATE", shift.id, organization_id=organization.id)
        logger.info(f"🗑️ Shift {shift.id} cancelled")
        return shift

    def _check_assignee(self, shift: StaffShift, organization: Organization, user: User) -> None:
        """Only the assigned staff member or the organization owner answers a shift"""
        if organization.owner_id == user.id:
            return
        staff = get_user_staff_member(self.db, user)
        if not staff or staff.id != shift.staff_member_id:
            raise HTTPException(status_code=403, detail="This shift is not assigned to you")

    def confirm_shift(self, shift_id: int, organization: Organization, user: User) -> StaffShift:
        shift = self.get_shift(shift_id, organization)
        self._check_assignee(shift, organization, user)
        if shift.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot confirm a cancelled shift")

        shift.confirmation_status = "accepted"
        shift.confirmed_at = datetime.utcnow()
        shift.confirmed_by = user.id
        shift.decline_reason = None
        self.db.commit()
        self.db.refresh(shift)
        publish_change("staff_shifts", "UPDATE", shift.id, organization_id=organization.id)
        logger.info(f"✅ Shift {shift.id} accepted by user {user.id}")
        return shift

    def decline_shift(
        self, shift_id: int, organization: Organization, user: User, reason: Optional[str] = None
    ) -> StaffShift:
        shift = self.get_shift(shift_id, organization)
        self._check_assignee(shift, organization, user)
        if shift.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot decline a cancelled shift")

        shift.confirmation_status = "declined"
        shift.confirmed_at = datetime.utcnow()
        shift.confirmed_by = user.id
        # A decline without a reason must not keep an earlier one
        shift.decline_reason = reason or None
        self.db.commit()
        self.db.refresh(shift)
        publish_change("staff_shifts", "UPDATE", shift.id, organization_id=organization.id)
        logger.info(f"❌ Shift {shift.id} declined by user {user.id}")

        staff_name = shift.staff_member.full_name if shift.staff_member else "A staff member"
        notify_organization_owner(
            self.db,
            organization.id,
            "shift_declined",
            "Shift declined",
            message=f"{staff_name} declined the shift on {shift.shift_date}"
            + (f": {reason}" if reason else "."),
            link=f"/shifts/{shift.id}",
            priority="high",
            data={"shift_id": shift.id},
        )
        return shift

    def get_my_pending_shifts(self, user: User) -> list[ShiftResponse]:
        """Shifts awaiting the caller's accept/decline; empty when the caller is not staff"""
        staff = get_user_staff_member(self.db, user)
        if not staff:
            return []
        return [to_shift_response(s) for s in self.repo.get_pending_for_staff(self.db, staff.id)]

    def get_client_schedule(self, client_id: int, organization: Organization) -> ClientScheduleResponse:
        self._check_client(client_id, organization)
        shifts = [
            s
            for s in self.repo.get_shifts(self.db, organization.id, client_id=client_id)
            if s.status != "cancelled"
        ]

        today = date.today()
        next_week = today + timedelta(days=7)
        week_start, week_end = week_bounds(today)

        upcoming = [s for s in shifts if today <= s.shift_date <= next_week]
        todays = [s for s in shifts if s.shift_date == today]
        this_week = [s for s in shifts if week_start <= s.shift_date <= week_end]
        total_hours = sum(shift_hours(s.start_time, s.end_time, s.break_minutes or 0) for s in this_week)

        return ClientScheduleResponse(
            shifts=[to_shift_response(s) for s in shifts],
            upcoming=[to_shift_response(s) for s in upcoming],
            today=[to_shift_response(s) for s in todays],
            weekStats=WeekStats(count=len(this_week), totalHours=round(total_hours, 1)),
        )


class SwapRequestService:
    """Service layer for shift swap requests"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SwapRequestRepository()
        self.shifts = ShiftRepository()

    @staticmethod
    def to_response(request: ShiftSwapRequest) -> SwapRequestResponse:
        shift = request.original_shift
        return SwapRequestResponse(
            id=request.id,
            original_shift_id=request.original_shift_id,
            requesting_staff_id=request.requesting_staff_id,
            covering_staff_id=request.covering_staff_id,
            request_reason=request.request_reason,
            status=request.status,
            approved_by=request.approved_by,
            approved_at=request.approved_at,
            created_at=request.created_at,
            shift_date=shift.shift_date if shift else None,
            start_time=shift.start_time if shift else None,
            end_time=shift.end_time if shift else None,
            requesting_staff_name=request.requesting_staff.full_name if request.requesting_staff else None,
            covering_staff_name=request.covering_staff.full_name if request.covering_staff else None,
            client_name=shift.client.full_name if shift and shift.client else None,
        )

    def get_requests(self, organization: Organization, status: Optional[str] = None) -> SwapRequestList:
        requests = self.repo.get_requests(self.db, organization.id, status)
        counts = Counter(r.status for r in requests)
        return SwapRequestList(
            requests=[self.to_response(r) for r in requests],
            counts={s: counts.get(s, 0) for s in ("pending", "approved", "rejected")},
        )

    def _get_request(self, request_id: int, organization: Organization) -> ShiftSwapRequest:
        request = self.repo.get_request_by_id(self.db, request_id, organization.id)
        if not request:
            raise HTTPException(status_code=404, detail="Swap request not found")
        return request

    def create_request(self, data: SwapRequestCreate, organization: Organization) -> ShiftSwapRequest:
        shift = self.shifts.get_shift_by_id(self.db, data.original_shift_id, organization.id)
        if not shift:
            raise HTTPException(status_code=404, detail="Shift not found")
        if shift.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot swap a cancelled shift")

        if data.covering_staff_id is not None:
            covering = (
                self.db.query(StaffMember)
                .filter(
                    StaffMember.id == data.covering_staff_id,
                    StaffMember.organization_id == organization.id,
                    StaffMember.is_active.is_(True),
                )
                .first()
            )
            if not covering:
                raise HTTPException(status_code=404, detail="Covering staff member not found")
            if covering.id == shift.staff_member_id:
                raise HTTPException(status_code=400, detail="Covering staff must differ from the assigned staff")

        request = self.repo.create_request(
            self.db,
            organization_id=organization.id,
            original_shift_id=shift.id,
            requesting_staff_id=shift.staff_member_id,
            covering_staff_id=data.covering_staff_id,
            request_reason=data.request_reason,
            status="pending",
        )
        publish_change("shift_swap_requests", "INSERT", request.id, organization_id=organization.id)

        notify_organization_owner(
            self.db,
            organization.id,
            "swap_requested",
            "Shift swap requested",
            message=f"A swap was requested for the shift on {shift.shift_date}: {data.request_reason}",
            link="/shifts/swaps",
            data={"swap_request_id": request.id, "shift_id": shift.id},
        )
        return request

    def approve_request(self, request_id: int, organization: Organization, user: User) -> ShiftSwapRequest:
        request = self._get_request(request_id, organization)
        if request.status != "pending":
            raise HTTPException(status_code=409, detail=f"Swap request already {request.status}")

        request.status = "approved"
        request.approved_by = user.id
        request.approved_at = datetime.utcnow()

        # Hand the shift to the covering staff; they confirm it afresh
        shift = request.original_shift
        if request.covering_staff_id is not None and shift is not None:
            shift.staff_member_id = request.covering_staff_id
            shift.confirmation_status = "pending"
            shift.confirmed_at = None
            shift.confirmed_by = None
            shift.decline_reason = None

        self.db.commit()
        self.db.refresh(request)
        publish_change("shift_swap_requests", "UPDATE", request.id, organization_id=organization.id)
        if shift is not None:
            publish_change("staff_shifts", "UPDATE", shift.id, organization_id=organization.id)

        self._notify_decision(request)
        if request.covering_staff is not None:
            notify_user(
                self.db,
                request.covering_staff.user_id,
                "shift_assigned",
                "New shift assigned",
                message=f"You are covering the shift on {shift.shift_date} from {shift.start_time} to {shift.end_time}.",
                link=f"/staff/shifts/{shift.id}",
                data={"shift_id": shift.id},
            )
        logger.info(f"✅ Swap request {request.id} approved by user {user.id}")
        return request

    def reject_request(self, request_id: int, organization: Organization, user: User) -> ShiftSwapRequest:
        request = self._get_request(request_id, organization)
        if request.status != "pending":
            raise HTTPException(status_code=409, detail=f"Swap request already {request.status}")

        request.status = "rejected"
        request.approved_by = user.id
        request.approved_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(request)
        publish_change("shift_swap_requests", "UPDATE", request.id, organization_id=organization.id)

        self._notify_decision(request)
        logger.info(f"❌ Swap request {request.id} rejected by user {user.id}")
        return request

    def _notify_decision(self, request: ShiftSwapRequest) -> None:
        requester = request.requesting_staff
        if requester is None:
            return
        notify_user(
            self.db,
            requester.user_id,
            "swap_decided",
            f"Swap request {request.status}",
            message=f"Your swap request for shift #{request.original_shift_id} was {request.status}.",
            link="/staff/shifts",
            data={"swap_request_id": request.id},
        )
