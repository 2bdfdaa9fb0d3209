"""Login, refresh, logout and profile endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from club_portal.api.dependencies import bearer_token, current_user, get_container
from club_portal.api.models import LoginRequest, RefreshRequest
from club_portal.domain.auth import UserProfile
from club_portal.domain.errors import AuthenticationError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> dict[str, object]:
    """Exchange email and password for a Supabase session."""
    container = get_container(request)
    try:
        session = await container.auth_service.login(body.email, body.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        ) from exc
    return asdict(session)


@router.post("/refresh")
async def refresh(body: RefreshRequest, request: Request) -> dict[str, object]:
    """Exchange a refresh token for a new session."""
    container = get_container(request)
    try:
        session = await container.auth_service.refresh_session(body.refresh_token)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
        ) from exc
    return asdict(session)


@router.post("/logout", dependencies=[Depends(current_user)])
async def logout(
    request: Request, token: str = Depends(bearer_token)
) -> dict[str, str]:
    """Revoke the caller's sessions."""
    container = get_container(request)
    try:
        await container.auth_service.logout(token)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
    return {"status": "ok"}


@router.get("/me")
async def me(user: UserProfile = Depends(current_user)) -> dict[str, object]:
    """Return the caller's profile."""
    return asdict(user)
