"""Shift domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_time_string

ShiftStatus = Literal["scheduled", "completed", "cancelled"]
ConfirmationStatus = Literal["pending", "accepted", "declined"]


class ShiftCreate(BaseModel):
    staff_member_id: int
    client_id: Optional[int] = None
    appointment_id: Optional[int] = None
    shift_date: date
    start_time: str
    end_time: str
    break_minutes: int = 0
    shift_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)

    @field_validator("break_minutes")
    @classmethod
    def check_break(cls, v):
        if v is None:
            return 0
        if v < 0:
            raise ValueError("Break minutes cannot be negative")
        return v


class ShiftUpdate(BaseModel):
    staff_member_id: Optional[int] = None
    client_id: Optional[int] = None
    shift_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    break_minutes: Optional[int] = None
    shift_type: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[ShiftStatus] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)

    @field_validator("break_minutes")
    @classmethod
    def check_break(cls, v):
        if v is not None and v < 0:
            raise ValueError("Break minutes cannot be negative")
        return v


class ShiftDecline(BaseModel):
    reason: Optional[str] = None


class ShiftResponse(BaseModel):
    id: int
    organization_id: int
    staff_member_id: int
    client_id: Optional[int] = None
    appointment_id: Optional[int] = None
    shift_date: date
    start_time: str
    end_time: str
    break_minutes: int
    shift_type: Optional[str] = None
    notes: Optional[str] = None
    status: str
    confirmation_status: ConfirmationStatus
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[int] = None
    decline_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    staff_name: Optional[str] = None
    client_name: Optional[str] = None
    hours: float = 0


class WeekStats(BaseModel):
    count: int
    totalHours: float


class ClientScheduleResponse(BaseModel):
    shifts: list[ShiftResponse]
    upcoming: list[ShiftResponse]
    today: list[ShiftResponse]
    weekStats: WeekStats


class SwapRequestCreate(BaseModel):
    original_shift_id: int
    covering_staff_id: Optional[int] = None
    request_reason: str

    @field_validator("request_reason")
    @classmethod
    def check_reason(cls, v):
        if not v or not v.strip():
            raise ValueError("A reason is required for a swap request")
        return v.strip()


class SwapRequestResponse(BaseModel):
    id: int
    original_shift_id: int
    requesting_staff_id: int
    covering_staff_id: Optional[int] = None
    request_reason: str
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    shift_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    requesting_staff_name: Optional[str] = None
    covering_staff_name: Optional[str] = None
    client_name: Optional[str] = None


class SwapRequestList(BaseModel):
    requests: list[SwapRequestResponse]
    counts: dict[str, int]
