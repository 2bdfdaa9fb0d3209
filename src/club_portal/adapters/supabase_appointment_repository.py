"""Supabase queries for appointments and appointment requests."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from club_portal.adapters.rows import optional_str, parse_datetime, parse_uuid, to_row
from club_portal.adapters.supabase_database_helper import DatabaseHelper, Row
from club_portal.domain.appointments import Appointment, AppointmentRequest
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.services.appointments import AppointmentRepository


@dataclass
class SupabaseAppointmentRepository(AppointmentRepository):
    """Supabase-backed repository for the patient portal."""

    appointments: DatabaseHelper
    requests: DatabaseHelper

    async def list_appointments(
        self, pagination: Pagination, filters: dict[str, object]
    ) -> tuple[list[Appointment], PaginationMeta]:
        """Return a page of appointments ordered by schedule."""
        page = await self.appointments.get_all(
            pagination, filters, order_by="scheduled_at"
        )
        return [_parse_appointment(row) for row in page.data], page.pagination

    async def list_upcoming(self, since: datetime, limit: int) -> list[Appointment]:
        """Return the next non-cancelled appointments."""
        request = (
            self.appointments.query()
            .select("*")
            .gte("scheduled_at", since.isoformat())
            .neq("status", "cancelled")
            .order("scheduled_at")
            .limit(limit)
        )
        response = await self.appointments.execute("fetch upcoming", request)
        return [_parse_appointment(row) for row in response.data or []]

    async def get_appointment(self, appointment_id: UUID) -> Appointment | None:
        """Return an appointment by id, if present."""
        row = await self.appointments.get_by_id(appointment_id)
        return _parse_appointment(row) if row else None

    async def create_appointment(self, payload: dict[str, object]) -> Appointment:
        """Create an appointment and return it."""
        row = await self.appointments.create(to_row(payload))
        return _parse_appointment(row)

    async def update_appointment(
        self, appointment_id: UUID, payload: dict[str, object]
    ) -> Appointment:
        """Update an appointment and return it."""
        row = await self.appointments.update(appointment_id, to_row(payload))
        return _parse_appointment(row)

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """Delete an appointment."""
        await self.appointments.delete(appointment_id)

    async def list_requests(self, status: str | None) -> list[AppointmentRequest]:
        """Return appointment requests, newest first."""
        request = self.requests.query().select("*")
        if status:
            request = request.eq("status", status)
        response = await self.requests.execute(
            "fetch", request.order("created_at", desc=True)
        )
        return [_parse_request(row) for row in response.data or []]

    async def get_request(self, request_id: UUID) -> AppointmentRequest | None:
        """Return an appointment request by id, if present."""
        row = await self.requests.get_by_id(request_id)
        return _parse_request(row) if row else None

    async def create_request(self, payload: dict[str, object]) -> AppointmentRequest:
        """Create an appointment request and return it."""
        return _parse_request(await self.requests.create(to_row(payload)))

    async def update_request(
        self, request_id: UUID, payload: dict[str, object]
    ) -> AppointmentRequest:
        """Update an appointment request and return it."""
        row = await self.requests.update(request_id, to_row(payload))
        return _parse_request(row)


def _parse_appointment(row: Row) -> Appointment:
    """Parse an appointment row into a domain model."""
    scheduled_at = parse_datetime(row.get("scheduled_at"))
    if scheduled_at is None:
        raise ValueError(f"Appointment {row.get('id')} has no scheduled_at")
    return Appointment(
        id=UUID(str(row["id"])),
        patient_id=UUID(str(row["patient_id"])),
        doctor_id=parse_uuid(row.get("doctor_id")),
        appointment_type_id=parse_uuid(row.get("appointment_type_id")),
        scheduled_at=scheduled_at,
        end_time=parse_datetime(row.get("end_time")),
        status=str(row.get("status", "scheduled")),
        chief_complaint=optional_str(row.get("chief_complaint")),
        notes=optional_str(row.get("notes")),
        cancellation_reason=optional_str(row.get("cancellation_reason")),
    )


def _parse_request(row: Row) -> AppointmentRequest:
    """Parse an appointment request row into a domain model."""
    return AppointmentRequest(
        id=UUID(str(row["id"])),
        patient_id=parse_uuid(row.get("patient_id")),
        patient_name=str(row.get("patient_name", "")),
        patient_email=str(row.get("patient_email", "")),
        appointment_type_id=parse_uuid(row.get("appointment_type_id")),
        preferred_date=optional_str(row.get("preferred_date")),
        chief_complaint=str(row.get("chief_complaint", "")),
        urgency=str(row.get("urgency", "normal")),
        status=str(row.get("status", "pending")),
        rejection_reason=optional_str(row.get("rejection_reason")),
        processed_by=parse_uuid(row.get("processed_by")),
        created_at=parse_datetime(row.get("created_at")),
    )
