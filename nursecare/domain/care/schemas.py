"""Care record schemas - notes, reminders, care plans and care logs"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_time_string

NoteType = Literal[
    "general",
    "medical",
    "incident",
    "communication",
    "care_update",
    "assessment",
    "complaint",
    "safeguarding",
]
ReminderType = Literal["follow_up", "medication_review", "care_review", "appointment", "assessment", "other"]
ReminderStatus = Literal["pending", "completed", "cancelled", "snoozed"]
Priority = Literal["low", "medium", "high", "urgent"]
CarePlanStatus = Literal["active", "draft", "archived"]


# ============================================================================
# NOTES
# ============================================================================


class NoteCreate(BaseModel):
    title: Optional[str] = None
    content: str
    note_type: NoteType = "general"
    is_confidential: bool = False
    attachments: Optional[list[str]] = None


class NoteUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    note_type: Optional[NoteType] = None
    is_confidential: Optional[bool] = None
    attachments: Optional[list[str]] = None


class NoteResponse(BaseModel):
    id: int
    client_id: int
    title: Optional[str] = None
    content: str
    note_type: str
    is_confidential: bool
    attachments: Optional[list[str]] = None
    created_by: Optional[int] = None
    author_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# REMINDERS
# ============================================================================


class ReminderCreate(BaseModel):
    title: str
    description: Optional[str] = None
    reminder_date: date
    reminder_time: Optional[str] = None
    reminder_type: ReminderType = "follow_up"
    priority: Priority = "medium"
    assigned_to: Optional[int] = None

    @field_validator("reminder_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class ReminderUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    reminder_date: Optional[date] = None
    reminder_time: Optional[str] = None
    reminder_type: Optional[ReminderType] = None
    priority: Optional[Priority] = None
    status: Optional[ReminderStatus] = None
    assigned_to: Optional[int] = None

    @field_validator("reminder_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class ReminderSnooze(BaseModel):
    snoozed_until: datetime


class ReminderResponse(BaseModel):
    id: int
    client_id: int
    title: str
    description: Optional[str] = None
    reminder_date: date
    reminder_time: Optional[str] = None
    reminder_type: str
    status: str
    priority: str
    assigned_to: Optional[int] = None
    completed_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# CARE PLANS
# ============================================================================


def _drop_blank(items: Optional[list[str]]) -> list[str]:
    return [item.strip() for item in items or [] if item and item.strip()]


class CarePlanCreate(BaseModel):
    client_id: int
    title: str
    description: Optional[str] = None
    status: CarePlanStatus = "active"
    start_date: date
    review_date: Optional[date] = None
    goals: list[str] = []
    interventions: list[str] = []

    @field_validator("goals", "interventions")
    @classmethod
    def drop_blank(cls, v):
        return _drop_blank(v)


class CarePlanUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[CarePlanStatus] = None
    start_date: Optional[date] = None
    review_date: Optional[date] = None
    goals: Optional[list[str]] = None
    interventions: Optional[list[str]] = None

    @field_validator("goals", "interventions")
    @classmethod
    def drop_blank(cls, v):
        return None if v is None else _drop_blank(v)


class CarePlanResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: str
    start_date: date
    review_date: Optional[date] = None
    goals: list[str]
    interventions: list[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CarePlanStats(BaseModel):
    activeCount: int
    reviewNeededCount: int
    archivedCount: int


class CarePlanListResponse(BaseModel):
    care_plans: list[CarePlanResponse]
    stats: CarePlanStats


# ============================================================================
# CARE LOGS
# ============================================================================


class CareLogCreate(BaseModel):
    client_id: int
    staff_member_id: Optional[int] = None
    category: str = "General"
    content: str
    log_date: Optional[date] = None
    log_time: Optional[str] = None
    attachments: Optional[list[str]] = None

    @field_validator("log_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)

    @field_validator("category")
    @classmethod
    def default_category(cls, v):
        return v.strip() if v and v.strip() else "General"


class CareLogResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    staff_member_id: Optional[int] = None
    staff_name: Optional[str] = None
    category: str
    content: str
    log_date: date
    log_time: str
    attachments: Optional[list[str]] = None
    created_at: Optional[datetime] = None


class CareLogStats(BaseModel):
    weeklyLogs: int
    clientsLogged: int
    incidents: int


class CareLogListResponse(BaseModel):
    logs: list[CareLogResponse]
    stats: CareLogStats
