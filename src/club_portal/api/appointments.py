"""Patient portal endpoints."""

from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from club_portal.api.dependencies import get_container, pagination_params, require_role
from club_portal.api.models import (
    AppointmentCreate,
    AppointmentRequestCreate,
    AppointmentUpdate,
    CancelAppointment,
    RejectAppointmentRequest,
    ScheduleAppointmentRequest,
)
from club_portal.domain.auth import UserProfile
from club_portal.domain.pagination import Pagination

router = APIRouter(tags=["appointments"])

_practice = require_role("admin", "doctor", "assistant")


@router.get("/appointments", dependencies=[Depends(_practice)])
async def list_appointments(
    request: Request,
    patient_id: UUID | None = None,
    doctor_id: UUID | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(pagination_params),
) -> dict[str, object]:
    container = get_container(request)
    appointments, meta = await container.appointment_service.list_appointments(
        pagination, patient_id=patient_id, doctor_id=doctor_id, status=status_filter
    )
    return {
        "data": [asdict(appointment) for appointment in appointments],
        "pagination": meta.as_dict(),
    }


@router.get("/appointments/upcoming", dependencies=[Depends(_practice)])
async def upcoming_appointments(
    request: Request, limit: int = Query(default=10, ge=1, le=50)
) -> dict[str, object]:
    container = get_container(request)
    upcoming = await container.appointment_service.upcoming_appointments(limit)
    return {"appointments": [asdict(appointment) for appointment in upcoming]}


@router.post("/appointments", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    request: Request,
    user: UserProfile = Depends(_practice),
) -> dict[str, object]:
    container = get_container(request)
    appointment = await container.appointment_service.create_appointment(
        {**body.model_dump(), "created_by": user.id}
    )
    return asdict(appointment)


@router.patch("/appointments/{appointment_id}", dependencies=[Depends(_practice)])
async def update_appointment(
    appointment_id: UUID, body: AppointmentUpdate, request: Request
) -> dict[str, object]:
    container = get_container(request)
    if await container.appointment_service.get_appointment(appointment_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    appointment = await container.appointment_service.update_appointment(
        appointment_id, body.model_dump(exclude_unset=True)
    )
    return asdict(appointment)


@router.post("/appointments/{appointment_id}/cancel")
async def cancel_appointment(
    appointment_id: UUID,
    body: CancelAppointment,
    request: Request,
    user: UserProfile = Depends(_practice),
) -> dict[str, object]:
    container = get_container(request)
    if await container.appointment_service.get_appointment(appointment_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    appointment = await container.appointment_service.cancel_appointment(
        appointment_id, cancelled_by=user.id, reason=body.reason
    )
    return asdict(appointment)


@router.post("/appointment-requests", status_code=status.HTTP_201_CREATED)
async def create_appointment_request(
    body: AppointmentRequestCreate, request: Request
) -> dict[str, object]:
    """Public endpoint for patients asking for an appointment."""
    container = get_container(request)
    created = await container.appointment_service.create_request(body.model_dump())
    return asdict(created)


@router.get("/appointment-requests", dependencies=[Depends(_practice)])
async def list_appointment_requests(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
) -> dict[str, object]:
    container = get_container(request)
    requests = await container.appointment_service.list_requests(status_filter)
    return {"requests": [asdict(item) for item in requests]}


@router.post("/appointment-requests/{request_id}/reject")
async def reject_appointment_request(
    request_id: UUID,
    body: RejectAppointmentRequest,
    request: Request,
    user: UserProfile = Depends(_practice),
) -> dict[str, object]:
    container = get_container(request)
    if await container.appointment_service.get_request(request_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    rejected = await container.appointment_service.reject_request(
        request_id, processed_by=user.id, reason=body.reason
    )
    return asdict(rejected)


@router.post("/appointment-requests/{request_id}/schedule")
async def schedule_appointment_request(
    request_id: UUID,
    body: ScheduleAppointmentRequest,
    request: Request,
    user: UserProfile = Depends(_practice),
) -> dict[str, object]:
    """Turn a request into an appointment."""
    container = get_container(request)
    try:
        appointment = await container.appointment_service.schedule_request(
            request_id,
            processed_by=user.id,
            appointment=body.model_dump(exclude_none=True),
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    if appointment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return asdict(appointment)
