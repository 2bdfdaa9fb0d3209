"""Authentication on top of the Supabase identity client."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from supabase import AuthError

from club_portal.domain.auth import AuthSession, UserProfile
from club_portal.domain.errors import AuthenticationError

_logger = logging.getLogger(__name__)


class IdentityAdmin(Protocol):
    """The subset of ``supabase.Client.auth.admin`` used by the application."""

    def sign_out(self, jwt: str, scope: str = "global") -> None:
        """Revoke the sessions behind an access token."""


class IdentityClient(Protocol):
    """The subset of ``supabase.Client.auth`` used by the application."""

    admin: IdentityAdmin

    def sign_in_with_password(self, credentials: dict[str, str]) -> Any:
        """Sign in with email and password."""

    def refresh_session(self, refresh_token: str | None = None) -> Any:
        """Exchange a refresh token for a new session."""

    def get_user(self, jwt: str | None = None) -> Any:
        """Resolve the user behind an access token."""


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    async def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile of a user, if present."""


@dataclass
class AuthService:
    """Login, logout and session lookups for API callers.

    ``identity`` belongs to the client shared with the database helpers and
    is only used for stateless calls. Signing in stores the session on the
    client that made the call and switches its requests to the user's token,
    so logins and refreshes run on a fresh client from ``new_identity``.
    """

    identity: IdentityClient
    profiles: ProfileRepository
    new_identity: Callable[[], IdentityClient]

    async def login(self, email: str, password: str) -> AuthSession:
        """Sign in and return the new session."""
        identity = self.new_identity()
        try:
            response = await asyncio.to_thread(
                identity.sign_in_with_password,
                {"email": email, "password": password},
            )
        except AuthError as exc:
            _logger.info("Login rejected for %s: %s", email, exc)
            raise AuthenticationError(str(exc)) from exc
        return _session_from(response)

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        """Return a new session for the caller holding ``refresh_token``."""
        identity = self.new_identity()
        try:
            response = await asyncio.to_thread(identity.refresh_session, refresh_token)
        except AuthError as exc:
            _logger.info("Session refresh rejected: %s", exc)
            raise AuthenticationError(str(exc)) from exc
        return _session_from(response)

    async def logout(self, access_token: str) -> None:
        """Revoke the caller's sessions; other users stay signed in."""
        try:
            await asyncio.to_thread(self.identity.admin.sign_out, access_token)
        except AuthError as exc:
            _logger.info("Logout rejected: %s", exc)
            raise AuthenticationError(str(exc)) from exc

    async def get_user(self, access_token: str) -> UserProfile | None:
        """Return the profile behind an access token, or None if invalid."""
        try:
            response = await asyncio.to_thread(self.identity.get_user, access_token)
        except AuthError as exc:
            _logger.info("Rejected access token: %s", exc)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return await self.profiles.get_profile(UUID(str(user.id)))


def _session_from(response: Any) -> AuthSession:
    session = getattr(response, "session", None)
    if session is None:
        raise AuthenticationError("No session returned")
    user = session.user
    return AuthSession(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user_id=UUID(str(user.id)),
        email=getattr(user, "email", None),
    )
