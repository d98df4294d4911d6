"""Care record router - notes, reminders, care plans and care logs"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organization, get_current_user
from ...database import get_db
from ...models import Organization, User
from .schemas import (
    CareLogCreate,
    CareLogListResponse,
    CareLogResponse,
    CarePlanCreate,
    CarePlanListResponse,
    CarePlanResponse,
    CarePlanUpdate,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    ReminderCreate,
    ReminderResponse,
    ReminderSnooze,
    ReminderUpdate,
)
from .service import CareService, to_care_log_response, to_care_plan_response, to_note_response

router = APIRouter(tags=["Care Records"])


def get_care_service(db: Session = Depends(get_db)) -> CareService:
    """Dependency injection for CareService"""
    return CareService(db)


# ============================================================================
# NOTES
# ============================================================================


@router.get("/clients/{client_id}/notes", response_model=list[NoteResponse])
async def list_notes(
    client_id: int,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.get_notes(client_id, organization)


@router.post("/clients/{client_id}/notes", response_model=NoteResponse)
async def create_note(
    client_id: int,
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_note_response(service.create_note(client_id, data, organization, current_user))


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_note_response(service.update_note(note_id, data, organization))


@router.delete("/notes/{note_id}")
async def delete_note(
    note_id: int,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.delete_note(note_id, organization)


# ============================================================================
# REMINDERS
# ============================================================================


@router.get("/reminders/pending", response_model=list[ReminderResponse])
async def list_pending_reminders(
    client_id: Optional[int] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    """Reminders still to be actioned, ordered by reminder date"""
    return service.get_pending_reminders(organization, client_id)


@router.get("/clients/{client_id}/reminders", response_model=list[ReminderResponse])
async def list_reminders(
    client_id: int,
    status: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.get_reminders(organization, client_id, status)


@router.post("/clients/{client_id}/reminders", response_model=ReminderResponse)
async def create_reminder(
    client_id: int,
    data: ReminderCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.create_reminder(client_id, data, organization, current_user)


@router.patch("/reminders/{reminder_id}", response_model=ReminderResponse)
async def update_reminder(
    reminder_id: int,
    data: ReminderUpdate,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.update_reminder(reminder_id, data, organization)


@router.post("/reminders/{reminder_id}/complete", response_model=ReminderResponse)
async def complete_reminder(
    reminder_id: int,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.complete_reminder(reminder_id, organization)


@router.post("/reminders/{reminder_id}/snooze", response_model=ReminderResponse)
async def snooze_reminder(
    reminder_id: int,
    data: ReminderSnooze,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.snooze_reminder(reminder_id, data.snoozed_until, organization)


@router.delete("/reminders/{reminder_id}")
async def delete_reminder(
    reminder_id: int,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.delete_reminder(reminder_id, organization)


# ============================================================================
# CARE PLANS
# ============================================================================


@router.get("/care-plans", response_model=CarePlanListResponse)
async def list_care_plans(
    client_id: Optional[int] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.get_care_plans(organization, client_id)


@router.post("/care-plans", response_model=CarePlanResponse)
async def create_care_plan(
    data: CarePlanCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_care_plan_response(service.create_care_plan(data, organization, current_user))


@router.get("/care-plans/{plan_id}", response_model=CarePlanResponse)
async def get_care_plan(
    plan_id: int,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_care_plan_response(service.get_care_plan(plan_id, organization))


@router.patch("/care-plans/{plan_id}", response_model=CarePlanResponse)
async def update_care_plan(
    plan_id: int,
    data: CarePlanUpdate,
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_care_plan_response(service.update_care_plan(plan_id, data, organization))


# ============================================================================
# CARE LOGS
# ============================================================================


@router.get("/care-logs", response_model=CareLogListResponse)
async def list_care_logs(
    client_id: Optional[int] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return service.get_care_logs(organization, client_id)


@router.post("/care-logs", response_model=CareLogResponse)
async def create_care_log(
    data: CareLogCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: CareService = Depends(get_care_service),
):
    return to_care_log_response(service.create_care_log(data, organization, current_user))
