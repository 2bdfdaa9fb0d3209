"""Training session, attendance and dashboard endpoints."""

from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from club_portal.api.dependencies import current_user, get_container, require_role
from club_portal.api.models import AttendanceUpdate, SessionCreate, SessionUpdate
from club_portal.domain.auth import UserProfile
from club_portal.domain.sessions import AttendanceEntry

router = APIRouter(tags=["sessions"])

_staff = require_role("admin", "trainer")


@router.post(
    "/sessions", status_code=status.HTTP_201_CREATED, dependencies=[Depends(_staff)]
)
async def create_session(body: SessionCreate, request: Request) -> dict[str, object]:
    container = get_container(request)
    session = await container.session_service.create_session(body.model_dump())
    return asdict(session)


@router.get("/sessions/{session_id}", dependencies=[Depends(current_user)])
async def session_detail(session_id: UUID, request: Request) -> dict[str, object]:
    container = get_container(request)
    session = await container.session_service.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return asdict(session)


@router.patch("/sessions/{session_id}", dependencies=[Depends(_staff)])
async def update_session(
    session_id: UUID, body: SessionUpdate, request: Request
) -> dict[str, object]:
    container = get_container(request)
    if await container.session_service.get_session(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    session = await container.session_service.update_session(
        session_id, body.model_dump(exclude_unset=True)
    )
    return asdict(session)


@router.delete("/sessions/{session_id}", dependencies=[Depends(_staff)])
async def delete_session(session_id: UUID, request: Request) -> Response:
    container = get_container(request)
    await container.session_service.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/sessions/{session_id}/attendance", dependencies=[Depends(current_user)])
async def get_attendance(session_id: UUID, request: Request) -> dict[str, object]:
    container = get_container(request)
    records = await container.session_service.get_attendance(session_id)
    return {"attendance": [asdict(record) for record in records]}


@router.put("/sessions/{session_id}/attendance")
async def record_attendance(
    session_id: UUID,
    body: AttendanceUpdate,
    request: Request,
    user: UserProfile = Depends(_staff),
) -> dict[str, object]:
    """Replace the attendance list of a session."""
    container = get_container(request)
    if await container.session_service.get_session(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    entries = [
        AttendanceEntry(
            member_id=item.member_id, present=item.present, notes=item.notes
        )
        for item in body.entries
    ]
    records = await container.session_service.record_attendance(
        session_id, entries, recorded_by=user.id
    )
    return {"attendance": [asdict(record) for record in records]}


@router.get("/dashboard/trainer")
async def trainer_dashboard(
    request: Request, user: UserProfile = Depends(_staff)
) -> dict[str, object]:
    """Return the caller's groups and their upcoming sessions."""
    container = get_container(request)
    dashboard = await container.session_service.trainer_dashboard(user.id)
    return asdict(dashboard)
