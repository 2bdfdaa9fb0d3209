"""Services for appointments and appointment requests."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from club_portal.domain.appointments import Appointment, AppointmentRequest
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.services.cache import Cache
from club_portal.services.cache_invalidation import CacheInvalidator
from club_portal.services.compensation import compensating

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class AppointmentRepository(Protocol):
    """Persistence interface for appointments and requests."""

    async def list_appointments(
        self, pagination: Pagination, filters: dict[str, object]
    ) -> tuple[list[Appointment], PaginationMeta]:
        """Return a page of appointments."""

    async def list_upcoming(self, since: datetime, limit: int) -> list[Appointment]:
        """Return the next appointments."""

    async def get_appointment(self, appointment_id: UUID) -> Appointment | None:
        """Return an appointment by id, if present."""

    async def create_appointment(self, payload: dict[str, object]) -> Appointment:
        """Create an appointment and return it."""

    async def update_appointment(
        self, appointment_id: UUID, payload: dict[str, object]
    ) -> Appointment:
        """Update an appointment and return it."""

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """Delete an appointment."""

    async def list_requests(self, status: str | None) -> list[AppointmentRequest]:
        """Return appointment requests."""

    async def get_request(self, request_id: UUID) -> AppointmentRequest | None:
        """Return an appointment request by id, if present."""

    async def create_request(self, payload: dict[str, object]) -> AppointmentRequest:
        """Create an appointment request and return it."""

    async def update_request(
        self, request_id: UUID, payload: dict[str, object]
    ) -> AppointmentRequest:
        """Update an appointment request and return it."""


@dataclass
class AppointmentService:
    """Application service for the patient portal."""

    repository: AppointmentRepository
    cache: Cache
    invalidator: CacheInvalidator
    upcoming_ttl_seconds: float = 60
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def list_appointments(
        self,
        pagination: Pagination,
        patient_id: UUID | None = None,
        doctor_id: UUID | None = None,
        status: str | None = None,
    ) -> tuple[list[Appointment], PaginationMeta]:
        filters: dict[str, object] = {
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "status": status,
        }
        return await self.repository.list_appointments(pagination, filters)

    async def upcoming_appointments(self, limit: int = 10) -> list[Appointment]:
        """Return the next appointments, cached per limit."""
        return await self.cache.get_or_set(
            f"appointments:upcoming:{limit}",
            self.upcoming_ttl_seconds,
            lambda: self.repository.list_upcoming(self.clock(), limit),
        )

    async def get_appointment(self, appointment_id: UUID) -> Appointment | None:
        return await self.repository.get_appointment(appointment_id)

    async def create_appointment(self, payload: dict[str, object]) -> Appointment:
        """Create an appointment; status defaults to scheduled."""
        appointment = await self.repository.create_appointment(
            {"status": "scheduled", **payload}
        )
        self.invalidator.invalidate_appointment(appointment.id)
        return appointment

    async def update_appointment(
        self, appointment_id: UUID, payload: dict[str, object]
    ) -> Appointment:
        appointment = await self.repository.update_appointment(
            appointment_id, payload
        )
        self.invalidator.invalidate_appointment(appointment_id)
        return appointment

    async def cancel_appointment(
        self, appointment_id: UUID, cancelled_by: UUID, reason: str | None
    ) -> Appointment:
        """Mark an appointment as cancelled."""
        appointment = await self.update_appointment(
            appointment_id,
            {
                "status": "cancelled",
                "cancelled_by": cancelled_by,
                "cancellation_reason": reason,
            },
        )
        _logger.info("Cancelled appointment %s", appointment_id)
        return appointment

    async def list_requests(
        self, status: str | None = None
    ) -> list[AppointmentRequest]:
        return await self.repository.list_requests(status)

    async def get_request(self, request_id: UUID) -> AppointmentRequest | None:
        return await self.repository.get_request(request_id)

    async def create_request(self, payload: dict[str, object]) -> AppointmentRequest:
        """Store a new request as pending."""
        request = await self.repository.create_request({**payload, "status": "pending"})
        _logger.info("Received appointment request %s", request.id)
        return request

    async def reject_request(
        self, request_id: UUID, processed_by: UUID, reason: str | None
    ) -> AppointmentRequest:
        return await self.repository.update_request(
            request_id,
            {
                "status": "rejected",
                "processed_by": processed_by,
                "processed_at": self.clock(),
                "rejection_reason": reason,
            },
        )

    async def schedule_request(
        self,
        request_id: UUID,
        processed_by: UUID,
        appointment: dict[str, object],
    ) -> Appointment | None:
        """Create an appointment for a request and mark the request scheduled.

        Returns None when the request does not exist. Raises ValueError when
        neither the request nor ``appointment`` names a patient. If marking the
        request fails, the new appointment is deleted again.
        """
        request = await self.repository.get_request(request_id)
        if request is None:
            return None
        payload = {
            "patient_id": request.patient_id,
            "appointment_type_id": request.appointment_type_id,
            "chief_complaint": request.chief_complaint,
            "created_by": processed_by,
            **appointment,
        }
        if payload["patient_id"] is None:
            raise ValueError(f"Request {request_id} has no patient")
        async with compensating(f"schedule request {request_id}") as steps:
            created = await steps.run(
                "create appointment",
                lambda: self.create_appointment(payload),
                undo=self._discard_appointment,
            )
            await steps.run(
                "mark request scheduled",
                lambda: self.repository.update_request(
                    request_id,
                    {
                        "status": "scheduled",
                        "processed_by": processed_by,
                        "processed_at": self.clock(),
                        "rejection_reason": None,
                    },
                ),
            )
        return created

    async def _discard_appointment(self, appointment: Appointment) -> None:
        await self.repository.delete_appointment(appointment.id)
        self.invalidator.invalidate_appointment(appointment.id)
