"""Supabase queries for training groups and their members."""

from dataclasses import dataclass
from uuid import UUID

from club_portal.adapters.rows import optional_str, parse_datetime, parse_uuid, to_row
from club_portal.adapters.supabase_database_helper import DatabaseHelper, Row
from club_portal.domain.groups import Group, GroupMember
from club_portal.domain.pagination import Pagination, PaginationMeta
from club_portal.services.groups import GroupRepository


@dataclass
class SupabaseGroupRepository(GroupRepository):
    """Supabase-backed repository for groups and group membership."""

    groups: DatabaseHelper
    group_members: DatabaseHelper
    members: DatabaseHelper

    async def list_groups(
        self, pagination: Pagination, created_by: UUID | None = None
    ) -> tuple[list[Group], PaginationMeta]:
        """Return a page of groups, optionally limited to one creator."""
        page = await self.groups.get_all(pagination, {"created_by": created_by})
        return [_parse_group(row) for row in page.data], page.pagination

    async def get_group(self, group_id: UUID) -> Group | None:
        """Return a group by id, if present."""
        row = await self.groups.get_by_id(group_id)
        return _parse_group(row) if row else None

    async def create_group(self, payload: dict[str, object]) -> Group:
        """Create a group and return it."""
        return _parse_group(await self.groups.create(to_row(payload)))

    async def update_group(self, group_id: UUID, payload: dict[str, object]) -> Group:
        """Update a group and return it."""
        return _parse_group(await self.groups.update(group_id, to_row(payload)))

    async def delete_group(self, group_id: UUID) -> None:
        """Delete a group."""
        await self.groups.delete(group_id)

    async def list_groups_created_by(self, trainer_id: UUID) -> list[Group]:
        """Return every group a trainer created, newest first."""
        request = (
            self.groups.query()
            .select("*")
            .eq("created_by", str(trainer_id))
            .order("created_at", desc=True)
        )
        response = await self.groups.execute("fetch trainer", request)
        return [_parse_group(row) for row in response.data or []]

    async def list_members(self, group_id: UUID) -> list[GroupMember]:
        """Return the members of a group ordered by name."""
        links = await self.group_members.execute(
            "fetch members of",
            self.group_members.query()
            .select("member_id")
            .eq("group_id", str(group_id)),
        )
        member_ids = [str(row["member_id"]) for row in links.data or []]
        if not member_ids:
            return []
        response = await self.members.execute(
            "fetch",
            self.members.query().select("*").in_("id", member_ids).order("name"),
        )
        return [_parse_member(row) for row in response.data or []]

    async def add_member(self, group_id: UUID, member_id: UUID) -> None:
        """Link a member to a group."""
        await self.group_members.create(
            {"group_id": str(group_id), "member_id": str(member_id)}
        )

    async def remove_member(self, group_id: UUID, member_id: UUID) -> None:
        """Unlink a member from a group."""
        await self.group_members.execute(
            "delete member from",
            self.group_members.query()
            .delete()
            .eq("group_id", str(group_id))
            .eq("member_id", str(member_id)),
        )
        self.group_members.invalidate_lists()


def _parse_group(row: Row) -> Group:
    """Parse a group row into a domain model."""
    max_members = row.get("max_members")
    return Group(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        description=optional_str(row.get("description")),
        level=optional_str(row.get("level")),
        age_category=optional_str(row.get("age_category")),
        max_members=int(max_members) if max_members is not None else None,
        created_by=parse_uuid(row.get("created_by")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def _parse_member(row: Row) -> GroupMember:
    return GroupMember(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        birth_date=optional_str(row.get("birth_date")),
    )
