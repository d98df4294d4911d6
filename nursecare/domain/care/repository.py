"""Care record repository - Database operations for notes, reminders, care plans and logs"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_care import CareLog, CarePlan, ClientNote, ClientReminder

# Care log list size shown on the dashboard
CARE_LOG_LIMIT = 50


class CareRepository:
    """Repository for client record database operations"""

    @staticmethod
    def save(db: Session, record):
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def update(db: Session, record, **updates):
        for key, value in updates.items():
            if value is not None and hasattr(record, key):
                setattr(record, key, value)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def delete(db: Session, record) -> None:
        db.delete(record)
        db.commit()

    # Notes

    @staticmethod
    def get_notes(db: Session, organization_id: int, client_id: int) -> list[ClientNote]:
        return (
            db.query(ClientNote)
            .options(joinedload(ClientNote.author))
            .filter(ClientNote.organization_id == organization_id, ClientNote.client_id == client_id)
            .order_by(ClientNote.created_at.desc(), ClientNote.id.desc())
            .all()
        )

    @staticmethod
    def get_note(db: Session, note_id: int, organization_id: int) -> Optional[ClientNote]:
        return (
            db.query(ClientNote)
            .filter(ClientNote.id == note_id, ClientNote.organization_id == organization_id)
            .first()
        )

    # Reminders

    @staticmethod
    def get_reminders(
        db: Session,
        organization_id: int,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[ClientReminder]:
        query = db.query(ClientReminder).filter(ClientReminder.organization_id == organization_id)
        if client_id is not None:
            query = query.filter(ClientReminder.client_id == client_id)
        if status is not None:
            query = query.filter(ClientReminder.status == status)
        return query.order_by(ClientReminder.reminder_date, ClientReminder.reminder_time, ClientReminder.id).all()

    @staticmethod
    def get_reminder(db: Session, reminder_id: int, organization_id: int) -> Optional[ClientReminder]:
        return (
            db.query(ClientReminder)
            .filter(ClientReminder.id == reminder_id, ClientReminder.organization_id == organization_id)
            .first()
        )

    # Care plans

    @staticmethod
    def get_care_plans(db: Session, organization_id: int, client_id: Optional[int] = None) -> list[CarePlan]:
        query = (
            db.query(CarePlan)
            .options(joinedload(CarePlan.client))
            .filter(CarePlan.organization_id == organization_id)
        )
        if client_id is not None:
            query = query.filter(CarePlan.client_id == client_id)
        return query.order_by(CarePlan.created_at.desc(), CarePlan.id.desc()).all()

    @staticmethod
    def get_care_plan(db: Session, plan_id: int, organization_id: int) -> Optional[CarePlan]:
        return (
            db.query(CarePlan)
            .filter(CarePlan.id == plan_id, CarePlan.organization_id == organization_id)
            .first()
        )

    # Care logs

    @staticmethod
    def get_care_logs(
        db: Session, organization_id: int, client_id: Optional[int] = None, limit: int = CARE_LOG_LIMIT
    ) -> list[CareLog]:
        query = (
            db.query(CareLog)
            .options(joinedload(CareLog.client), joinedload(CareLog.staff_member))
            .filter(CareLog.organization_id == organization_id)
        )
        if client_id is not None:
            query = query.filter(CareLog.client_id == client_id)
        return (
            query.order_by(CareLog.log_date.desc(), CareLog.log_time.desc(), CareLog.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_care_logs_since(db: Session, organization_id: int, since: date) -> list[CareLog]:
        return (
            db.query(CareLog)
            .filter(CareLog.organization_id == organization_id, CareLog.log_date >= since)
            .all()
        )
