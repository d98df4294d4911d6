"""Care record service - Business logic for notes, reminders, care plans and care logs"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_user_staff_member
from ...models import Client, Organization, StaffMember, User
from ...models_care import CareLog, CarePlan, ClientNote, ClientReminder
from ...security_utils import sanitize_html
from ...services.realtime import publish_change
from .repository import CareRepository
from .schemas import (
    CareLogCreate,
    CareLogListResponse,
    CareLogResponse,
    CareLogStats,
    CarePlanCreate,
    CarePlanListResponse,
    CarePlanResponse,
    CarePlanStats,
    CarePlanUpdate,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    ReminderCreate,
    ReminderUpdate,
)

logger = logging.getLogger(__name__)


def to_note_response(note: ClientNote) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        client_id=note.client_id,
        title=note.title,
        content=note.content,
        note_type=note.note_type,
        is_confidential=note.is_confidential,
        attachments=note.attachments,
        created_by=note.created_by,
        author_name=note.author.full_name if note.author else None,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def to_care_plan_response(plan: CarePlan) -> CarePlanResponse:
    return CarePlanResponse(
        id=plan.id,
        client_id=plan.client_id,
        client_name=plan.client.full_name if plan.client else None,
        title=plan.title,
        description=plan.description,
        status=plan.status,
        start_date=plan.start_date,
        review_date=plan.review_date,
        goals=plan.goals or [],
        interventions=plan.interventions or [],
        created_at=plan.created_at,
        updated_at=plan.updated_at,
    )


def to_care_log_response(log: CareLog) -> CareLogResponse:
    return CareLogResponse(
        id=log.id,
        client_id=log.client_id,
        client_name=log.client.full_name if log.client else None,
        staff_member_id=log.staff_member_id,
        staff_name=log.staff_member.full_name if log.staff_member else None,
        category=log.category,
        content=log.content,
        log_date=log.log_date,
        log_time=log.log_time,
        attachments=log.attachments,
        created_at=log.created_at,
    )


def calculate_care_plan_stats(plans: list[CarePlan], today: Optional[date] = None) -> CarePlanStats:
    today = today or date.today()
    active = [p for p in plans if p.status == "active"]
    return CarePlanStats(
        activeCount=len(active),
        reviewNeededCount=len([p for p in active if p.review_date is not None and p.review_date <= today]),
        archivedCount=len([p for p in plans if p.status == "archived"]),
    )


def calculate_care_log_stats(logs: list[CareLog]) -> CareLogStats:
    return CareLogStats(
        weeklyLogs=len(logs),
        clientsLogged=len({log.client_id for log in logs}),
        incidents=len([log for log in logs if (log.category or "").lower() == "incident"]),
    )


class CareService:
    """Service layer for client records"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CareRepository()

    def _check_client(self, client_id: int, organization: Organization) -> Client:
        client = (
            self.db.query(Client)
            .filter(Client.id == client_id, Client.organization_id == organization.id)
            .first()
        )
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def get_notes(self, client_id: int, organization: Organization) -> list[NoteResponse]:
        """Client notes, newest first"""
        self._check_client(client_id, organization)
        return [to_note_response(n) for n in self.repo.get_notes(self.db, organization.id, client_id)]

    def create_note(self, client_id: int, data: NoteCreate, organization: Organization, user: User) -> ClientNote:
        self._check_client(client_id, organization)
        note = ClientNote(
            organization_id=organization.id,
            client_id=client_id,
            title=data.title,
            content=sanitize_html(data.content),
            note_type=data.note_type,
            is_confidential=data.is_confidential,
            attachments=data.attachments,
            created_by=user.id,
        )
        note = self.repo.save(self.db, note)
        publish_change("client_notes", "INSERT", note.id, organization_id=organization.id, client_id=client_id)
        return note

    def _get_note(self, note_id: int, organization: Organization) -> ClientNote:
        note = self.repo.get_note(self.db, note_id, organization.id)
        if not note:
            raise HTTPException(status_code=404, detail="Note not found")
        return note

    def update_note(self, note_id: int, data: NoteUpdate, organization: Organization) -> ClientNote:
        note = self._get_note(note_id, organization)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("content") is not None:
            updates["content"] = sanitize_html(updates["content"])
        note = self.repo.update(self.db, note, **updates)
        publish_change("client_notes", "UPDATE", note.id, organization_id=organization.id)
        return note

    def delete_note(self, note_id: int, organization: Organization) -> dict:
        note = self._get_note(note_id, organization)
        self.repo.delete(self.db, note)
        publish_change("client_notes", "DELETE", note_id, organization_id=organization.id)
        return {"message": "Note deleted"}

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def get_reminders(
        self, organization: Organization, client_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[ClientReminder]:
        """Reminders ordered by reminder date"""
        if client_id is not None:
            self._check_client(client_id, organization)
        return self.repo.get_reminders(self.db, organization.id, client_id, status)

    def get_pending_reminders(self, organization: Organization, client_id: Optional[int] = None) -> list[ClientReminder]:
        return self.get_reminders(organization, client_id, status="pending")

    def _get_reminder(self, reminder_id: int, organization: Organization) -> ClientReminder:
        reminder = self.repo.get_reminder(self.db, reminder_id, organization.id)
        if not reminder:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return reminder

    def create_reminder(
        self, client_id: int, data: ReminderCreate, organization: Organization, user: User
    ) -> ClientReminder:
        self._check_client(client_id, organization)
        reminder = ClientReminder(
            organization_id=organization.id,
            client_id=client_id,
            status="pending",
            created_by=user.id,
            **data.model_dump(),
        )
        reminder = self.repo.save(self.db, reminder)
        publish_change("client_reminders", "INSERT", reminder.id, organization_id=organization.id)
        return reminder

    def update_reminder(self, reminder_id: int, data: ReminderUpdate, organization: Organization) -> ClientReminder:
        reminder = self._get_reminder(reminder_id, organization)
        updates = data.model_dump(exclude_unset=True)
        status = updates.get("status")
        if status == "completed" and reminder.completed_at is None:
            updates["completed_at"] = datetime.utcnow()
        elif status is not None and status != "completed":
            reminder.completed_at = None
        reminder = self.repo.update(self.db, reminder, **updates)
        publish_change("client_reminders", "UPDATE", reminder.id, organization_id=organization.id)
        return reminder

    def complete_reminder(self, reminder_id: int, organization: Organization) -> ClientReminder:
        reminder = self._get_reminder(reminder_id, organization)
        reminder = self.repo.update(self.db, reminder, status="completed", completed_at=datetime.utcnow())
        publish_change("client_reminders", "UPDATE", reminder.id, organization_id=organization.id)
        logger.info(f"✅ Reminder {reminder.id} completed")
        return reminder

    def snooze_reminder(self, reminder_id: int, until: datetime, organization: Organization) -> ClientReminder:
        reminder = self._get_reminder(reminder_id, organization)
        if reminder.status == "completed":
            raise HTTPException(status_code=400, detail="Cannot snooze a completed reminder")
        reminder = self.repo.update(self.db, reminder, status="snoozed", snoozed_until=until)
        publish_change("client_reminders", "UPDATE", reminder.id, organization_id=organization.id)
        return reminder

    def delete_reminder(self, reminder_id: int, organization: Organization) -> dict:
        reminder = self._get_reminder(reminder_id, organization)
        self.repo.delete(self.db, reminder)
        publish_change("client_reminders", "DELETE", reminder_id, organization_id=organization.id)
        return {"message": "Reminder deleted"}

    # ------------------------------------------------------------------
    # Care plans
    # ------------------------------------------------------------------

    def get_care_plans(self, organization: Organization, client_id: Optional[int] = None) -> CarePlanListResponse:
        plans = self.repo.get_care_plans(self.db, organization.id, client_id)
        return CarePlanListResponse(
            care_plans=[to_care_plan_response(p) for p in plans],
            stats=calculate_care_plan_stats(plans),
        )

    def get_care_plan(self, plan_id: int, organization: Organization) -> CarePlan:
        plan = self.repo.get_care_plan(self.db, plan_id, organization.id)
        if not plan:
            raise HTTPException(status_code=404, detail="Care plan not found")
        return plan

    def create_care_plan(self, data: CarePlanCreate, organization: Organization, user: User) -> CarePlan:
        self._check_client(data.client_id, organization)
        plan = CarePlan(organization_id=organization.id, created_by=user.id, **data.model_dump())
        plan = self.repo.save(self.db, plan)
        publish_change("care_plans", "INSERT", plan.id, organization_id=organization.id)
        return plan

    def update_care_plan(self, plan_id: int, data: CarePlanUpdate, organization: Organization) -> CarePlan:
        plan = self.get_care_plan(plan_id, organization)
        plan = self.repo.update(self.db, plan, **data.model_dump(exclude_unset=True))
        publish_change("care_plans", "UPDATE", plan.id, organization_id=organization.id)
        return plan

    # ------------------------------------------------------------------
    # Care logs
    # ------------------------------------------------------------------

    def get_care_logs(self, organization: Organization, client_id: Optional[int] = None) -> CareLogListResponse:
        """Latest 50 logs plus stats over the last 7 days"""
        logs = self.repo.get_care_logs(self.db, organization.id, client_id)
        week_ago = date.today() - timedelta(days=7)
        recent = self.repo.get_care_logs_since(self.db, organization.id, week_ago)
        return CareLogListResponse(
            logs=[to_care_log_response(log) for log in logs],
            stats=calculate_care_log_stats(recent),
        )

    def create_care_log(self, data: CareLogCreate, organization: Organization, user: User) -> CareLog:
        self._check_client(data.client_id, organization)

        staff_member_id = data.staff_member_id
        if staff_member_id is not None:
            staff = (
                self.db.query(StaffMember)
                .filter(StaffMember.id == staff_member_id, StaffMember.organization_id == organization.id)
                .first()
            )
            if not staff:
                raise HTTPException(status_code=404, detail="Staff member not found")
        else:
            own = get_user_staff_member(self.db, user)
            staff_member_id = own.id if own else None

        now = datetime.now()
        log = CareLog(
            organization_id=organization.id,
            client_id=data.client_id,
            staff_member_id=staff_member_id,
            category=data.category,
            content=sanitize_html(data.content),
            log_date=data.log_date or now.date(),
            log_time=data.log_time or now.strftime("%H:%M"),
            attachments=data.attachments,
            created_by=user.id,
        )
        log = self.repo.save(self.db, log)
        publish_change("care_logs", "INSERT", log.id, organization_id=organization.id)
        return log
