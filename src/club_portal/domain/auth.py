"""Domain models for authentication and user profiles."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class AuthSession:
    """An authenticated Supabase session."""

    access_token: str
    refresh_token: str | None
    expires_at: int | None
    user_id: UUID
    email: str | None


@dataclass(frozen=True)
class UserProfile:
    """Application profile row for an authenticated user."""

    id: UUID
    email: str | None
    name: str
    role: str
    created_at: datetime | None
