"""Domain models for the patient portal."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Appointment:
    """Represents a scheduled appointment."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID | None
    appointment_type_id: UUID | None
    scheduled_at: datetime
    end_time: datetime | None
    status: str
    chief_complaint: str | None
    notes: str | None
    cancellation_reason: str | None


@dataclass(frozen=True)
class AppointmentRequest:
    """A patient's request for an appointment, pending review."""

    id: UUID
    patient_id: UUID | None
    patient_name: str
    patient_email: str
    appointment_type_id: UUID | None
    preferred_date: str | None
    chief_complaint: str
    urgency: str
    status: str
    rejection_reason: str | None
    processed_by: UUID | None
    created_at: datetime | None
