"""Supabase-backed user profile lookups."""

from dataclasses import dataclass
from uuid import UUID

from club_portal.adapters.rows import optional_str, parse_datetime
from club_portal.adapters.supabase_database_helper import DatabaseHelper
from club_portal.domain.auth import UserProfile
from club_portal.services.auth import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Reads profiles from the ``users`` table."""

    users: DatabaseHelper

    async def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a profile by user id, if present."""
        row = await self.users.get_by_id(user_id)
        if not row:
            return None
        return UserProfile(
            id=UUID(str(row["id"])),
            email=optional_str(row.get("email")),
            name=str(row.get("name", "")),
            role=str(row.get("role", "trainer")),
            created_at=parse_datetime(row.get("created_at")),
        )
