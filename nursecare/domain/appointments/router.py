"""Appointment router - booking and payment endpoints"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    CheckoutResponse,
    PaymentVerify,
    PaymentVerifyResponse,
)
from .service import AppointmentService, to_appointment_response

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    view: Optional[Literal["upcoming", "past"]] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return [to_appointment_response(a) for a in service.get_appointments(current_user, view)]


@router.post("", response_model=AppointmentResponse)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_appointment_response(service.create_appointment(data, current_user))


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_appointment_response(service.get_appointment(appointment_id, current_user))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_appointment_response(service.update_appointment(appointment_id, data, current_user))


@router.post("/{appointment_id}/checkout", response_model=CheckoutResponse)
async def create_checkout(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Create a Dodo Payments checkout session for the appointment"""
    return await service.create_checkout(appointment_id, current_user)


@router.post("/{appointment_id}/verify-payment", response_model=PaymentVerifyResponse)
async def verify_payment(
    appointment_id: int,
    data: PaymentVerify,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = await service.verify_payment(appointment_id, data.payment_id, current_user)
    return PaymentVerifyResponse(
        appointment_id=appointment.id,
        payment_status=appointment.payment_status,
        status=appointment.status,
    )
