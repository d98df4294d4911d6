"""Appointment schemas - booking and payment"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_time_string

AppointmentStatus = Literal["pending", "confirmed", "completed", "cancelled"]


class AppointmentCreate(BaseModel):
    nurse_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    appointment_date: date
    start_time: str
    end_time: str
    service_type: Optional[str] = None
    address: Optional[str] = None
    special_instructions: Optional[str] = None
    hourly_rate: Optional[float] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class AppointmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    appointment_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    service_type: Optional[str] = None
    address: Optional[str] = None
    special_instructions: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    cancellation_reason: Optional[str] = None
    hourly_rate: Optional[float] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class AppointmentResponse(BaseModel):
    id: int
    public_id: Optional[str] = None
    client_id: int
    nurse_id: int
    client_name: Optional[str] = None
    nurse_name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    appointment_date: date
    start_time: str
    end_time: str
    duration_minutes: Optional[int] = None
    service_type: Optional[str] = None
    address: Optional[str] = None
    special_instructions: Optional[str] = None
    status: str
    cancellation_reason: Optional[str] = None
    hourly_rate: Optional[float] = None
    total_cost: Optional[float] = None
    payment_status: str
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CheckoutResponse(BaseModel):
    checkout_url: str
    session_id: Optional[str] = None
    appointment_id: int
    amount: float


class PaymentVerify(BaseModel):
    payment_id: str


class PaymentVerifyResponse(BaseModel):
    appointment_id: int
    payment_status: str
    status: str
