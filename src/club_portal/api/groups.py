"""Training group endpoints."""

from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from club_portal.api.dependencies import (
    current_user,
    get_container,
    pagination_params,
    require_role,
)
from club_portal.api.models import GroupCreate, GroupUpdate, MemberLink
from club_portal.domain.auth import UserProfile
from club_portal.domain.pagination import Pagination

router = APIRouter(prefix="/groups", tags=["groups"])

_staff = require_role("admin", "trainer")


@router.get("", dependencies=[Depends(current_user)])
async def list_groups(
    request: Request,
    created_by: UUID | None = None,
    pagination: Pagination = Depends(pagination_params),
) -> dict[str, object]:
    """Return a page of groups."""
    container = get_container(request)
    groups, meta = await container.group_service.list_groups(pagination, created_by)
    return {"data": [asdict(group) for group in groups], "pagination": meta.as_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_group(
    body: GroupCreate, request: Request, user: UserProfile = Depends(_staff)
) -> dict[str, object]:
    """Create a group owned by the caller."""
    container = get_container(request)
    group = await container.group_service.create_group(
        {**body.model_dump(), "created_by": user.id}
    )
    return asdict(group)


@router.get("/{group_id}", dependencies=[Depends(current_user)])
async def group_detail(group_id: UUID, request: Request) -> dict[str, object]:
    """Return a group with its members."""
    container = get_container(request)
    details = await container.group_service.get_group_details(group_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return asdict(details)


@router.patch("/{group_id}", dependencies=[Depends(_staff)])
async def update_group(
    group_id: UUID, body: GroupUpdate, request: Request
) -> dict[str, object]:
    """Update group fields that were sent."""
    container = get_container(request)
    if await container.group_service.get_group(group_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    group = await container.group_service.update_group(
        group_id, body.model_dump(exclude_unset=True)
    )
    return asdict(group)


@router.delete("/{group_id}", dependencies=[Depends(_staff)])
async def delete_group(group_id: UUID, request: Request) -> Response:
    container = get_container(request)
    await container.group_service.delete_group(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{group_id}/members",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_staff)],
)
async def add_member(
    group_id: UUID, body: MemberLink, request: Request
) -> dict[str, str]:
    container = get_container(request)
    await container.group_service.add_member(group_id, body.member_id)
    return {"status": "ok"}


@router.delete("/{group_id}/members/{member_id}", dependencies=[Depends(_staff)])
async def remove_member(group_id: UUID, member_id: UUID, request: Request) -> Response:
    container = get_container(request)
    await container.group_service.remove_member(group_id, member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{group_id}/sessions", dependencies=[Depends(current_user)])
async def list_group_sessions(
    group_id: UUID,
    request: Request,
    pagination: Pagination = Depends(pagination_params),
) -> dict[str, object]:
    """Return a page of the group's sessions."""
    container = get_container(request)
    sessions, meta = await container.session_service.list_sessions(
        group_id, pagination
    )
    return {
        "data": [asdict(session) for session in sessions],
        "pagination": meta.as_dict(),
    }
