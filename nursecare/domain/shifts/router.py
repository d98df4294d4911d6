"""Shift router - FastAPI endpoints for shift scheduling and swap requests"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organization, get_current_user, get_owned_organization
from ...database import get_db
from ...models import Organization, User
from .schemas import (
    ClientScheduleResponse,
    ShiftCreate,
    ShiftDecline,
    ShiftResponse,
    ShiftUpdate,
    SwapRequestCreate,
    SwapRequestList,
    SwapRequestResponse,
)
from .service import ShiftService, SwapRequestService, to_shift_response

router = APIRouter(prefix="/shifts", tags=["Shifts"])
swap_router = APIRouter(prefix="/shift-swaps", tags=["Shifts"])


def get_shift_service(db: Session = Depends(get_db)) -> ShiftService:
    """Dependency injection for ShiftService"""
    return ShiftService(db)


def get_swap_service(db: Session = Depends(get_db)) -> SwapRequestService:
    return SwapRequestService(db)


@router.get("", response_model=list[ShiftResponse])
async def list_shifts(
    staff_member_id: Optional[int] = Query(None),
    client_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    """Organization shifts ordered by date and start time"""
    return service.get_shifts(
        organization,
        staff_member_id=staff_member_id,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )


@router.get("/calendar", response_model=list[ShiftResponse])
async def shift_calendar(
    start_date: date = Query(...),
    end_date: date = Query(...),
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    """Shifts between two dates (inclusive) for the calendar view"""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    return service.get_shifts(organization, start_date=start_date, end_date=end_date)


@router.get("/my-pending", response_model=list[ShiftResponse])
async def my_pending_shifts(
    current_user: User = Depends(get_current_user),
    service: ShiftService = Depends(get_shift_service),
):
    """Shifts assigned to the caller that still need an accept or decline"""
    return service.get_my_pending_shifts(current_user)


@router.get("/clients/{client_id}/schedule", response_model=ClientScheduleResponse)
async def client_schedule(
    client_id: int,
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    return service.get_client_schedule(client_id, organization)


@router.post("", response_model=ShiftResponse)
async def create_shift(
    data: ShiftCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    shift = await service.create_shift(data, organization, current_user)
    return to_shift_response(shift)


@router.get("/{shift_id}", response_model=ShiftResponse)
async def get_shift(
    shift_id: int,
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    return to_shift_response(service.get_shift(shift_id, organization))


@router.patch("/{shift_id}", response_model=ShiftResponse)
async def update_shift(
    shift_id: int,
    data: ShiftUpdate,
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    return to_shift_response(service.update_shift(shift_id, data, organization))


@router.delete("/{shift_id}", response_model=ShiftResponse)
async def cancel_shift(
    shift_id: int,
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    """Cancel a shift (status becomes cancelled, the row is kept)"""
    return to_shift_response(service.cancel_shift(shift_id, organization))


@router.post("/{shift_id}/confirm", response_model=ShiftResponse)
async def confirm_shift(
    shift_id: int,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    return to_shift_response(service.confirm_shift(shift_id, organization, current_user))


@router.post("/{shift_id}/decline", response_model=ShiftResponse)
async def decline_shift(
    shift_id: int,
    data: Optional[ShiftDecline] = None,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: ShiftService = Depends(get_shift_service),
):
    reason = data.reason if data else None
    return to_shift_response(service.decline_shift(shift_id, organization, current_user, reason))


# ============================================================================
# SHIFT SWAP REQUESTS
# ============================================================================


@swap_router.get("", response_model=SwapRequestList)
async def list_swap_requests(
    status: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: SwapRequestService = Depends(get_swap_service),
):
    return service.get_requests(organization, status)


@swap_router.post("", response_model=SwapRequestResponse)
async def create_swap_request(
    data: SwapRequestCreate,
    organization: Organization = Depends(get_current_organization),
    service: SwapRequestService = Depends(get_swap_service),
):
    return service.to_response(service.create_request(data, organization))


@swap_router.post("/{request_id}/approve", response_model=SwapRequestResponse)
async def approve_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_owned_organization),
    service: SwapRequestService = Depends(get_swap_service),
):
    return service.to_response(service.approve_request(request_id, organization, current_user))


@swap_router.post("/{request_id}/reject", response_model=SwapRequestResponse)
async def reject_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_owned_organization),
    service: SwapRequestService = Depends(get_swap_service),
):
    return service.to_response(service.reject_request(request_id, organization, current_user))
