"""Supabase queries for training sessions and attendance."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from club_portal.adapters.rows import optional_str, parse_datetime, parse_uuid, to_row
from club_portal.adapters.supabase_database_helper import DatabaseHelper, Row
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.domain.sessions import AttendanceRecord, TrainingSession
from club_portal.services.sessions import TrainingSessionRepository


@dataclass
class SupabaseTrainingSessionRepository(TrainingSessionRepository):
    """Supabase-backed repository for sessions and their attendance."""

    sessions: DatabaseHelper
    attendance: DatabaseHelper

    async def list_sessions(
        self, group_id: UUID, pagination: Pagination
    ) -> tuple[list[TrainingSession], PaginationMeta]:
        """Return a page of a group's sessions ordered by start time."""
        page = await self.sessions.get_all(
            pagination, {"group_id": group_id}, order_by="start_time"
        )
        return [_parse_session(row) for row in page.data], page.pagination

    async def list_upcoming_sessions(
        self, group_ids: list[UUID], since: datetime, limit: int
    ) -> list[TrainingSession]:
        """Return the next sessions of the given groups."""
        if not group_ids:
            return []
        request = (
            self.sessions.query()
            .select("*")
            .in_("group_id", [str(group_id) for group_id in group_ids])
            .gte("start_time", since.isoformat())
            .order("start_time")
            .limit(limit)
        )
        response = await self.sessions.execute("fetch upcoming", request)
        return [_parse_session(row) for row in response.data or []]

    async def get_session(self, session_id: UUID) -> TrainingSession | None:
        """Return a session by id, if present."""
        row = await self.sessions.get_by_id(session_id)
        return _parse_session(row) if row else None

    async def create_session(self, payload: dict[str, object]) -> TrainingSession:
        """Create a session and return it."""
        return _parse_session(await self.sessions.create(to_row(payload)))

    async def update_session(
        self, session_id: UUID, payload: dict[str, object]
    ) -> TrainingSession:
        """Update a session and return it."""
        row = await self.sessions.update(session_id, to_row(payload))
        return _parse_session(row)

    async def delete_session(self, session_id: UUID) -> None:
        """Delete a session."""
        await self.sessions.delete(session_id)

    async def list_attendance(self, session_id: UUID) -> list[AttendanceRecord]:
        """Return raw attendance rows of a session."""
        return [
            _parse_attendance(row) for row in await self._attendance_rows(session_id)
        ]

    async def delete_attendance(self, session_id: UUID) -> list[Row]:
        """Delete and return all attendance rows of a session."""
        rows = await self._attendance_rows(session_id)
        await self.attendance.execute(
            "delete session rows from",
            self.attendance.query().delete().eq("session_id", str(session_id)),
        )
        for row in rows:
            self.attendance.invalidate_record(str(row["id"]))
        self.attendance.invalidate_lists()
        return rows

    async def insert_attendance(self, rows: list[Row]) -> list[AttendanceRecord]:
        """Insert attendance rows and return them."""
        created = await self.attendance.create_many([to_row(row) for row in rows])
        return [_parse_attendance(row) for row in created]

    async def _attendance_rows(self, session_id: UUID) -> list[Row]:
        response = await self.attendance.execute(
            "fetch session rows from",
            self.attendance.query().select("*").eq("session_id", str(session_id)),
        )
        return list(response.data or [])


def _parse_session(row: Row) -> TrainingSession:
    """Parse a session row into a domain model."""
    start_time = parse_datetime(row.get("start_time"))
    if start_time is None:
        raise ValueError(f"Session {row.get('id')} has no start_time")
    return TrainingSession(
        id=UUID(str(row["id"])),
        group_id=UUID(str(row["group_id"])),
        start_time=start_time,
        end_time=parse_datetime(row.get("end_time")),
        location_id=parse_uuid(row.get("location_id")),
        notes=optional_str(row.get("notes")),
        created_at=parse_datetime(row.get("created_at")),
    )


def _parse_attendance(row: Row) -> AttendanceRecord:
    return AttendanceRecord(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        member_id=UUID(str(row["member_id"])),
        present=bool(row.get("present", False)),
        notes=optional_str(row.get("notes")),
        recorded_by=parse_uuid(row.get("recorded_by")),
    )
