"""Services for training sessions, attendance and the trainer dashboard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from club_portal.domain.groups import Group
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.domain.sessions import (
    AttendanceEntry,
    AttendanceRecord,
    TrainingSession,
)
from club_portal.services.cache import Cache
from club_portal.services.cache_invalidation import CacheInvalidator
from club_portal.services.compensation import compensating
from club_portal.services.groups import GroupService

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class TrainingSessionRepository(Protocol):
    """Persistence interface for sessions and attendance."""

    async def list_sessions(
        self, group_id: UUID, pagination: Pagination
    ) -> tuple[list[TrainingSession], PaginationMeta]:
        """Return a page of a group's sessions."""

    async def list_upcoming_sessions(
        self, group_ids: list[UUID], since: datetime, limit: int
    ) -> list[TrainingSession]:
        """Return the next sessions of the given groups."""

    async def get_session(self, session_id: UUID) -> TrainingSession | None:
        """Return a session by id, if present."""

    async def create_session(self, payload: dict[str, object]) -> TrainingSession:
        """Create a session and return it."""

    async def update_session(
        self, session_id: UUID, payload: dict[str, object]
    ) -> TrainingSession:
        """Update a session and return it."""

    async def delete_session(self, session_id: UUID) -> None:
        """Delete a session."""

    async def list_attendance(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return attendance of a session."""

    async def delete_attendance(self, session_id: UUID) -> list[dict[str, object]]:
        """Delete and return the attendance rows of a session."""

    async def insert_attendance(
        self, rows: list[dict[str, object]]
    ) -> list[AttendanceRecord]:
        """Insert attendance rows and return them."""


@dataclass(frozen=True)
class TrainerDashboard:
    """Groups and upcoming sessions for a trainer."""

    groups: list[Group]
    upcoming_sessions: list[TrainingSession]


@dataclass
class TrainingSessionService:
    """Application service for sessions and attendance."""

    repository: TrainingSessionRepository
    group_service: GroupService
    cache: Cache
    invalidator: CacheInvalidator
    attendance_ttl_seconds: float = 120
    dashboard_ttl_seconds: float = 60
    upcoming_limit: int = 5
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def list_sessions(
        self, group_id: UUID, pagination: Pagination
    ) -> tuple[list[TrainingSession], PaginationMeta]:
        return await self.repository.list_sessions(group_id, pagination)

    async def get_session(self, session_id: UUID) -> TrainingSession | None:
        return await self.repository.get_session(session_id)

    async def create_session(self, payload: dict[str, object]) -> TrainingSession:
        session = await self.repository.create_session(payload)
        self.invalidator.invalidate_session(session.id, session.group_id)
        return session

    async def update_session(
        self, session_id: UUID, payload: dict[str, object]
    ) -> TrainingSession:
        session = await self.repository.update_session(session_id, payload)
        self.invalidator.invalidate_session(session_id, session.group_id)
        return session

    async def delete_session(self, session_id: UUID) -> None:
        await self.repository.delete_session(session_id)
        self.invalidator.invalidate_session(session_id)

    async def get_attendance(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return attendance of a session, cached per session."""
        return await self.cache.get_or_set(
            f"attendance:{session_id}:list",
            self.attendance_ttl_seconds,
            lambda: self.repository.list_attendance(session_id),
        )

    async def record_attendance(
        self,
        session_id: UUID,
        entries: list[AttendanceEntry],
        recorded_by: UUID | None,
    ) -> list[AttendanceRecord]:
        """Replace a session's attendance with ``entries``.

        Old rows are deleted first; if inserting the new rows fails, the old
        rows are written back.
        """
        rows = [
            {
                "session_id": session_id,
                "member_id": entry.member_id,
                "present": entry.present,
                "notes": entry.notes,
                "recorded_by": recorded_by,
            }
            for entry in entries
        ]
        try:
            async with compensating(f"record attendance {session_id}") as steps:
                await steps.run(
                    "delete previous attendance",
                    lambda: self.repository.delete_attendance(session_id),
                    undo=self.repository.insert_attendance,
                )
                records = await steps.run(
                    "insert attendance",
                    lambda: self.repository.insert_attendance(rows),
                )
        finally:
            self.invalidator.invalidate_attendance(session_id)
        _logger.info(
            "Recorded attendance for session %s (%s members)", session_id, len(records)
        )
        return records

    async def trainer_dashboard(self, trainer_id: UUID) -> TrainerDashboard:
        """Return the trainer's groups and their next sessions."""

        async def load() -> TrainerDashboard:
            groups = await self.group_service.groups_for_trainer(trainer_id)
            upcoming = await self.repository.list_upcoming_sessions(
                [group.id for group in groups], self.clock(), self.upcoming_limit
            )
            return TrainerDashboard(groups=groups, upcoming_sessions=upcoming)

        return await self.cache.get_or_set(
            f"upcoming:{trainer_id}", self.dashboard_ttl_seconds, load
        )
