"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Query, Request, status

from club_portal.domain.auth import UserProfile
from club_portal.domain.pagination import Pagination

if TYPE_CHECKING:
    from club_portal.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return token.strip()


async def current_user(
    request: Request, token: str = Depends(bearer_token)
) -> UserProfile:
    """Resolve the bearer token into the caller's profile."""
    container = get_container(request)
    profile = await container.auth_service.get_user(token)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return profile


def require_role(*roles: str) -> Callable[..., Awaitable[UserProfile]]:
    """Build a dependency that only admits callers with one of ``roles``."""

    async def dependency(user: UserProfile = Depends(current_user)) -> UserProfile:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return user

    return dependency


def pagination_params(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> Pagination:
    return Pagination(page=page, limit=limit)
