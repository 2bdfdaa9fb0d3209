"""Services for training groups."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from club_portal.domain.groups import Group, GroupDetails, GroupMember
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.services.cache import Cache
from club_portal.services.cache_invalidation import CacheInvalidator

_logger = logging.getLogger(__name__)


class GroupRepository(Protocol):
    """Persistence interface for groups and membership."""

    async def list_groups(
        self, pagination: Pagination, created_by: UUID | None = None
    ) -> tuple[list[Group], PaginationMeta]:
        """Return a page of groups."""

    async def get_group(self, group_id: UUID) -> Group | None:
        """Return a group by id, if present."""

    async def create_group(self, payload: dict[str, object]) -> Group:
        """Create a group and return it."""

    async def update_group(self, group_id: UUID, payload: dict[str, object]) -> Group:
        """Update a group and return it."""

    async def delete_group(self, group_id: UUID) -> None:
        """Delete a group."""

    async def list_groups_created_by(self, trainer_id: UUID) -> list[Group]:
        """Return groups created by a trainer."""

    async def list_members(self, group_id: UUID) -> list[GroupMember]:
        """Return the members of a group."""

    async def add_member(self, group_id: UUID, member_id: UUID) -> None:
        """Link a member to a group."""

    async def remove_member(self, group_id: UUID, member_id: UUID) -> None:
        """Unlink a member from a group."""


@dataclass
class GroupService:
    """Application service for group management."""

    repository: GroupRepository
    cache: Cache
    invalidator: CacheInvalidator
    details_ttl_seconds: float = 300

    async def list_groups(
        self, pagination: Pagination, created_by: UUID | None = None
    ) -> tuple[list[Group], PaginationMeta]:
        return await self.repository.list_groups(pagination, created_by)

    async def get_group(self, group_id: UUID) -> Group | None:
        return await self.repository.get_group(group_id)

    async def create_group(self, payload: dict[str, object]) -> Group:
        """Create a group owned by ``created_by``."""
        group = await self.repository.create_group(payload)
        self.invalidator.invalidate_group(group.id)
        _logger.info("Created group %s (%s)", group.id, group.name)
        return group

    async def update_group(self, group_id: UUID, payload: dict[str, object]) -> Group:
        group = await self.repository.update_group(group_id, payload)
        self.invalidator.invalidate_group(group_id)
        return group

    async def delete_group(self, group_id: UUID) -> None:
        await self.repository.delete_group(group_id)
        self.invalidator.invalidate_group(group_id)
        _logger.info("Deleted group %s", group_id)

    async def get_group_details(self, group_id: UUID) -> GroupDetails | None:
        """Return a group with its members, cached per group."""
        group = await self.repository.get_group(group_id)
        if group is None:
            return None

        async def load() -> GroupDetails:
            members = await self.repository.list_members(group_id)
            return GroupDetails(group=group, members=members)

        return await self.cache.get_or_set(
            f"groups:{group_id}:details", self.details_ttl_seconds, load
        )

    async def add_member(self, group_id: UUID, member_id: UUID) -> None:
        await self.repository.add_member(group_id, member_id)
        self.invalidator.invalidate_group(group_id)

    async def remove_member(self, group_id: UUID, member_id: UUID) -> None:
        await self.repository.remove_member(group_id, member_id)
        self.invalidator.invalidate_group(group_id)

    async def groups_for_trainer(self, trainer_id: UUID) -> list[Group]:
        return await self.repository.list_groups_created_by(trainer_id)
