"""Request bodies accepted by the HTTP API."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    level: str | None = None
    age_category: str | None = None
    max_members: int | None = Field(default=None, ge=1)


class GroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    level: str | None = None
    age_category: str | None = None
    max_members: int | None = Field(default=None, ge=1)


class MemberLink(BaseModel):
    member_id: UUID


class SessionCreate(BaseModel):
    group_id: UUID
    start_time: datetime
    end_time: datetime | None = None
    location_id: UUID | None = None
    notes: str | None = None


class SessionUpdate(BaseModel):
    start_time: datetime | None = None
    end_time: datetime | None = None
    location_id: UUID | None = None
    notes: str | None = None


class AttendanceItem(BaseModel):
    member_id: UUID
    present: bool
    notes: str | None = None


class AttendanceUpdate(BaseModel):
    entries: list[AttendanceItem]


class AppointmentCreate(BaseModel):
    patient_id: UUID
    scheduled_at: datetime
    end_time: datetime | None = None
    doctor_id: UUID | None = None
    appointment_type_id: UUID | None = None
    location_id: UUID | None = None
    chief_complaint: str | None = None
    notes: str | None = None


class AppointmentUpdate(BaseModel):
    scheduled_at: datetime | None = None
    end_time: datetime | None = None
    doctor_id: UUID | None = None
    status: (
        Literal[
            "scheduled",
            "confirmed",
            "arrived",
            "in_progress",
            "completed",
            "no_show",
        ]
        | None
    ) = None
    notes: str | None = None
    diagnosis: str | None = None
    treatment_plan: str | None = None


class CancelAppointment(BaseModel):
    reason: str | None = None


class AppointmentRequestCreate(BaseModel):
    patient_name: str = Field(min_length=1)
    patient_email: str = Field(min_length=3)
    patient_phone: str | None = None
    patient_birth_date: date | None = None
    patient_id: UUID | None = None
    appointment_type_id: UUID | None = None
    preferred_date: date | None = None
    preferred_time: str | None = None
    chief_complaint: str = Field(min_length=1)
    urgency: Literal["low", "normal", "high", "urgent"] = "normal"


class RejectAppointmentRequest(BaseModel):
    reason: str | None = None


class ScheduleAppointmentRequest(BaseModel):
    scheduled_at: datetime
    end_time: datetime | None = None
    doctor_id: UUID | None = None
    location_id: UUID | None = None
    patient_id: UUID | None = None
