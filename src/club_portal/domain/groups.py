"""Domain models for training groups."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Group:
    """Represents a training group."""

    id: UUID
    name: str
    description: str | None
    level: str | None
    age_category: str | None
    max_members: int | None
    created_by: UUID | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class GroupMember:
    """A club member belonging to a group."""

    id: UUID
    name: str
    birth_date: str | None


@dataclass(frozen=True)
class GroupDetails:
    """A group together with its members."""

    group: Group
    members: list[GroupMember]
