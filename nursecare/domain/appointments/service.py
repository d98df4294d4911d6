"""Appointment service - booking, upcoming/past views and Dodo Payments checkout"""

import logging
from datetime import date, datetime
from typing import Optional

from dodopayments import AsyncDodoPayments
from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...config import (
    DODO_ADHOC_PRODUCT_ID,
    DODO_PAYMENTS_API_KEY,
    DODO_PAYMENTS_ENVIRONMENT,
    FRONTEND_URL,
)
from ...models import User
from ...models_appointment import Appointment
from ...services.notification_service import notify_user
from ...services.realtime import publish_change
from ...shared.time_utils import shift_hours
from .schemas import AppointmentCreate, AppointmentResponse, AppointmentUpdate

logger = logging.getLogger(__name__)


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        public_id=appointment.public_id,
        client_id=appointment.client_id,
        nurse_id=appointment.nurse_id,
        client_name=appointment.client.full_name if appointment.client else None,
        nurse_name=appointment.nurse.full_name if appointment.nurse else None,
        title=appointment.title,
        description=appointment.description,
        appointment_date=appointment.appointment_date,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        duration_minutes=appointment.duration_minutes,
        service_type=appointment.service_type,
        address=appointment.address,
        special_instructions=appointment.special_instructions,
        status=appointment.status,
        cancellation_reason=appointment.cancellation_reason,
        hourly_rate=appointment.hourly_rate,
        total_cost=appointment.total_cost,
        payment_status=appointment.payment_status,
        paid_at=appointment.paid_at,
        created_at=appointment.created_at,
    )


def starts_at(appointment: Appointment) -> datetime:
    hours, minutes = appointment.start_time.split(":")[:2]
    return datetime.combine(appointment.appointment_date, datetime.min.time()).replace(
        hour=int(hours), minute=int(minutes)
    )


def apply_pricing(appointment: Appointment) -> None:
    """Derive duration and total cost from the time window and hourly rate"""
    hours = shift_hours(appointment.start_time, appointment.end_time)
    appointment.duration_minutes = int(round(hours * 60))
    if appointment.hourly_rate is not None:
        appointment.total_cost = round(hours * appointment.hourly_rate, 2)


def get_dodo_client() -> AsyncDodoPayments:
    if not DODO_PAYMENTS_API_KEY:
        raise HTTPException(status_code=500, detail="Payment system not configured")
    return AsyncDodoPayments(
        bearer_token=DODO_PAYMENTS_API_KEY,
        environment=DODO_PAYMENTS_ENVIRONMENT or "test_mode",
    )


class AppointmentService:
    """Service layer for appointments"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.client), joinedload(Appointment.nurse)
        )

    def get_appointments(self, user: User, view: Optional[str] = None) -> list[Appointment]:
        """
        Appointments where the user is the client or the nurse.

        view="upcoming": starts in the future and not cancelled, soonest first.
        view="past": already started or completed, most recent first.
        """
        appointments = (
            self._query()
            .filter(or_(Appointment.client_id == user.id, Appointment.nurse_id == user.id))
            .order_by(Appointment.appointment_date, Appointment.start_time)
            .all()
        )
        now = datetime.now()
        if view == "upcoming":
            return [a for a in appointments if starts_at(a) >= now and a.status != "cancelled"]
        if view == "past":
            past = [a for a in appointments if starts_at(a) < now or a.status == "completed"]
            return list(reversed(past))
        return appointments

    def get_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self._query().filter(Appointment.id == appointment_id).first()
        if not appointment or user.id not in (appointment.client_id, appointment.nurse_id):
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def create_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        nurse = self.db.query(User).filter(User.id == data.nurse_id, User.is_active.is_(True)).first()
        if not nurse:
            raise HTTPException(status_code=404, detail="Nurse not found")
        if data.appointment_date < date.today():
            raise HTTPException(status_code=400, detail="Appointment date cannot be in the past")

        appointment = Appointment(client_id=user.id, status="pending", payment_status="unpaid", **data.model_dump())
        apply_pricing(appointment)
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        publish_change("appointments", "INSERT", appointment.id, user_ids=[appointment.client_id, appointment.nurse_id])
        notify_user(
            self.db,
            nurse.id,
            "appointment_requested",
            "New appointment request",
            message=f"{user.full_name} requested an appointment on {appointment.appointment_date} at {appointment.start_time}.",
            link=f"/appointments/{appointment.id}",
            data={"appointment_id": appointment.id},
        )
        return appointment

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate, user: User) -> Appointment:
        appointment = self.get_appointment(appointment_id, user)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(appointment, key, value)
        apply_pricing(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        publish_change("appointments", "UPDATE", appointment.id, user_ids=[appointment.client_id, appointment.nurse_id])
        if data.status is not None:
            other = appointment.nurse_id if user.id == appointment.client_id else appointment.client_id
            notify_user(
                self.db,
                other,
                "appointment_updated",
                f"Appointment {appointment.status}",
                message=f"Your appointment on {appointment.appointment_date} is now {appointment.status}.",
                link=f"/appointments/{appointment.id}",
                data={"appointment_id": appointment.id},
            )
        return appointment

    async def create_checkout(self, appointment_id: int, user: User) -> dict:
        """Dodo Payments checkout session for the appointment's total cost (adhoc product)"""
        appointment = self.get_appointment(appointment_id, user)

        if appointment.payment_status == "paid":
            raise HTTPException(status_code=400, detail="Appointment already paid")
        if appointment.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot pay for a cancelled appointment")
        # Guard against zero-amount checkouts
        if appointment.total_cost is None or appointment.total_cost <= 0:
            raise HTTPException(status_code=400, detail="Appointment has no amount to pay")
        if not DODO_ADHOC_PRODUCT_ID:
            raise HTTPException(status_code=500, detail="Adhoc product not configured")

        dodo_client = get_dodo_client()
        session_data = {
            "product_cart": [
                {
                    "product_id": DODO_ADHOC_PRODUCT_ID,
                    "quantity": 1,
                    # Amount in lowest currency unit (cents)
                    "amount": int(round(appointment.total_cost * 100)),
                }
            ],
            "customer": {
                "email": appointment.client.email if appointment.client else "",
                "name": appointment.client.full_name if appointment.client else "",
            },
            "metadata": {
                "appointment_id": str(appointment.id),
                "client_id": str(appointment.client_id),
                "nurse_id": str(appointment.nurse_id),
            },
            "return_url": f"{FRONTEND_URL}/appointments/{appointment.id}/payment-success",
        }

        try:
            logger.info(f"💳 Creating checkout session for appointment {appointment.id}")
            session = await dodo_client.checkout_sessions.create(**session_data)
        except Exception as e:
            logger.error(f"❌ Dodo checkout failed for appointment {appointment.id}: {e}")
            raise HTTPException(status_code=502, detail="Failed to create payment checkout") from e

        checkout_url = getattr(session, "checkout_url", None)
        session_id = getattr(session, "session_id", None)
        if not checkout_url:
            raise HTTPException(status_code=502, detail="Failed to create payment checkout")

        appointment.payment_session_id = session_id
        appointment.payment_status = "pending"
        self.db.commit()

        return {
            "checkout_url": checkout_url,
            "session_id": session_id,
            "appointment_id": appointment.id,
            "amount": appointment.total_cost,
        }

    async def verify_payment(self, appointment_id: int, payment_id: str, user: User) -> Appointment:
        """Look the payment up at Dodo; a succeeded payment confirms the appointment"""
        appointment = self.get_appointment(appointment_id, user)
        dodo_client = get_dodo_client()

        try:
            payment = await dodo_client.payments.retrieve(payment_id)
        except Exception as e:
            logger.error(f"❌ Could not retrieve Dodo payment {payment_id}: {e}")
            raise HTTPException(status_code=502, detail="Failed to verify payment") from e

        metadata = getattr(payment, "metadata", None) or {}
        if metadata.get("appointment_id") not in (None, str(appointment.id)):
            raise HTTPException(status_code=400, detail="Payment does not belong to this appointment")

        status = getattr(payment, "status", None)
        if status == "succeeded":
            appointment.payment_status = "paid"
            appointment.payment_id = payment_id
            appointment.paid_at = datetime.utcnow()
            if appointment.status == "pending":
                appointment.status = "confirmed"
            logger.info(f"✅ Payment {payment_id} verified for appointment {appointment.id}")
        elif status in ("failed", "cancelled"):
            appointment.payment_status = "failed"
            logger.warning(f"⚠️ Payment {payment_id} for appointment {appointment.id} is {status}")

        self.db.commit()
        self.db.refresh(appointment)
        publish_change("appointments", "UPDATE", appointment.id, user_ids=[appointment.client_id, appointment.nurse_id])
        return appointment
