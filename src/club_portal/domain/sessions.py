"""Domain models for training sessions and attendance."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class TrainingSession:
    """Represents a scheduled training session of a group."""

    id: UUID
    group_id: UUID
    start_time: datetime
    end_time: datetime | None
    location_id: UUID | None
    notes: str | None
    created_at: datetime | None


@dataclass(frozen=True)
class AttendanceEntry:
    """Attendance input for one member."""

    member_id: UUID
    present: bool
    notes: str | None = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted attendance of a member at a session."""

    id: UUID
    session_id: UUID
    member_id: UUID
    present: bool
    notes: str | None
    recorded_by: UUID | None
