"""Cross-entity cache invalidation rules."""

import logging
from dataclasses import dataclass
from uuid import UUID

from club_portal.services.cache import Cache

_logger = logging.getLogger(__name__)


@dataclass
class CacheInvalidator:
    """Drops cached reads that a change to one entity may have made stale.

    Keys follow the ``<table>:<id>``, ``<table>:<id>:details`` and
    ``<table>:list:`` layout written by the database helper, plus the
    service-level keys derived from it.
    """

    cache: Cache

    def invalidate_user(self, user_id: UUID | str) -> None:
        self._drop_record("users", user_id)
        self.cache.delete_by_prefix("users:list:")
        # Trainers own groups.
        self.cache.delete_by_prefix("groups:")

    def invalidate_group(self, group_id: UUID | str) -> None:
        self._drop_record("groups", group_id)
        self.cache.delete_by_prefix("groups:list:")
        self.cache.delete_by_prefix(f"sessions:{group_id}:")
        self.cache.delete_by_prefix("attendance:")
        # Trainer dashboards list the groups a trainer owns.
        self.cache.delete_by_prefix("upcoming:")

    def invalidate_session(
        self, session_id: UUID | str, group_id: UUID | str | None = None
    ) -> None:
        self._drop_record("sessions", session_id)
        if group_id is not None:
            self.cache.delete_by_prefix(f"sessions:{group_id}:")
        else:
            self.cache.delete_by_prefix("sessions:")
        self.cache.delete_by_prefix("upcoming:")
        self.cache.delete_by_prefix(f"attendance:{session_id}:")

    def invalidate_attendance(self, session_id: UUID | str) -> None:
        self.cache.delete_by_prefix(f"attendance:{session_id}:")
        self.cache.delete(f"sessions:{session_id}:details")
        self.cache.delete_by_prefix("stats:")

    def invalidate_appointment(self, appointment_id: UUID | str) -> None:
        self._drop_record("appointments", appointment_id)
        self.cache.delete_by_prefix("appointments:upcoming:")
        self.cache.delete_by_prefix("appointments:list:")

    def invalidate_all(self) -> None:
        _logger.info("Clearing all cached entries")
        self.cache.clear()

    def _drop_record(self, table: str, record_id: UUID | str) -> None:
        self.cache.delete(f"{table}:{record_id}")
        self.cache.delete(f"{table}:{record_id}:details")
