"""Generic CRUD and pagination helper over a single Supabase table."""

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from club_portal.domain.errors import DatabaseError, DatabaseTimeoutError
from club_portal.domain.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    Page,
    Pagination,
    PaginationMeta,
)
from club_portal.services.cache import Cache

# PostgREST error code for "JSON object requested, multiple (or no) rows returned".
NO_ROWS_CODE = "PGRST116"

Row = dict[str, object]

_logger = logging.getLogger(__name__)


@dataclass
class DatabaseHelper:
    """CRUD operations on one table with cache invalidation on writes.

    Reads are cached only when both ``cache`` and a positive ``ttl_seconds``
    are given; writes always invalidate when a cache is present.
    """

    table: str
    client: Client
    cache: Cache | None = None
    ttl_seconds: float = 0
    timeout_seconds: float = 10.0

    def query(self) -> Any:
        """Return a fresh query builder for the table."""
        return self.client.table(self.table)

    async def execute(self, operation: str, request: Any) -> Any:
        """Execute a built request off the event loop under the deadline."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(request.execute), timeout=self.timeout_seconds
            )
        except TimeoutError as exc:
            _logger.warning(
                "Supabase %s on %s timed out after %ss",
                operation,
                self.table,
                self.timeout_seconds,
            )
            raise DatabaseTimeoutError(
                self.table,
                operation,
                f"no response within {self.timeout_seconds}s",
            ) from exc
        except APIError as exc:
            if exc.code != NO_ROWS_CODE:
                _logger.warning(
                    "Supabase %s on %s failed (code=%s): %s",
                    operation,
                    self.table,
                    exc.code,
                    exc.message,
                )
            raise DatabaseError(
                self.table, operation, str(exc.message), code=exc.code
            ) from exc
        except httpx.HTTPError as exc:
            _logger.warning("Supabase %s on %s failed: %s", operation, self.table, exc)
            raise DatabaseError(self.table, operation, str(exc)) from exc

    async def get_all(
        self,
        pagination: Pagination | None = None,
        filters: dict[str, object] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Page:
        """Return one page of rows matching the equality filters."""
        requested = pagination or Pagination()
        window = Pagination(
            page=requested.page or DEFAULT_PAGE, limit=requested.limit or DEFAULT_LIMIT
        )
        page, limit = window.page, window.limit
        active_filters = {
            key: _filter_value(value)
            for key, value in (filters or {}).items()
            if value is not None
        }

        async def fetch() -> Page:
            count_request = self._apply_filters(
                self.query().select("*", count="exact", head=True), active_filters
            )
            count_response = await self.execute("count", count_request)
            total = count_response.count or 0

            data_request = self._apply_filters(
                self.query().select("*"), active_filters
            )
            if order_by:
                data_request = data_request.order(order_by, desc=descending)
            start = window.offset
            data_request = data_request.range(start, start + limit - 1)
            data_response = await self.execute("fetch", data_request)
            return Page(
                data=list(data_response.data or []),
                pagination=PaginationMeta(
                    total=total,
                    page=page,
                    limit=limit,
                    pages=math.ceil(total / limit) if total else 0,
                ),
            )

        if not self._caching:
            return await fetch()
        key = self.list_cache_key(page, limit, active_filters)
        if order_by:
            key = f"{key}:{order_by}:{'desc' if descending else 'asc'}"
        return await self.cache.get_or_set(key, self.ttl_seconds, fetch)

    async def get_by_id(self, record_id: UUID | str) -> Row | None:
        """Return a row by id, or None when no row matches."""

        async def fetch() -> Row | None:
            request = self.query().select("*").eq("id", str(record_id)).single()
            try:
                response = await self.execute(f"fetch id {record_id} from", request)
            except DatabaseError as exc:
                if exc.code == NO_ROWS_CODE:
                    return None
                raise
            return response.data

        if not self._caching:
            return await fetch()
        key = f"{self.table}:{record_id}"
        row = await self.cache.get_or_set(key, self.ttl_seconds, fetch)
        if row is None:
            # Misses are not cached.
            self.cache.delete(key)
        return row

    async def create(self, payload: Row) -> Row:
        """Insert a row, stamping created_at when missing."""
        data = {**payload, "created_at": payload.get("created_at") or _now_iso()}
        response = await self.execute("create", self.query().insert([data]))
        if not response.data:
            raise DatabaseError(self.table, "create", "no row returned")
        self.invalidate_lists()
        _logger.debug("Created %s row %s", self.table, response.data[0].get("id"))
        return response.data[0]

    async def create_many(self, payloads: list[Row]) -> list[Row]:
        """Insert several rows in one request."""
        if not payloads:
            return []
        now = _now_iso()
        data = [
            {**payload, "created_at": payload.get("created_at") or now}
            for payload in payloads
        ]
        response = await self.execute("create batch of", self.query().insert(data))
        self.invalidate_lists()
        _logger.debug("Created %s %s rows", len(response.data or []), self.table)
        return list(response.data or [])

    async def update(self, record_id: UUID | str, payload: Row) -> Row:
        """Update a row; id and created_at are never written."""
        data = {**payload, "updated_at": _now_iso()}
        data.pop("id", None)
        data.pop("created_at", None)
        operation = f"update id {record_id} in"
        response = await self.execute(
            operation, self.query().update(data).eq("id", str(record_id))
        )
        if not response.data:
            raise DatabaseError(self.table, operation, "no rows matched", NO_ROWS_CODE)
        self.invalidate_record(record_id)
        return response.data[0]

    async def delete(self, record_id: UUID | str) -> None:
        """Delete a row by id; deleting a missing row is not an error."""
        await self.execute(
            f"delete id {record_id} from",
            self.query().delete().eq("id", str(record_id)),
        )
        self.invalidate_record(record_id)

    def invalidate_record(self, record_id: UUID | str) -> None:
        """Drop cached reads of one row and every cached list of the table."""
        if self.cache is None:
            return
        self.cache.delete(f"{self.table}:{record_id}")
        self.cache.delete(f"{self.table}:{record_id}:details")
        self.invalidate_lists()

    def invalidate_lists(self) -> None:
        """Drop every cached list page of the table."""
        if self.cache is None:
            return
        removed = self.cache.delete_by_prefix(f"{self.table}:list:")
        # List pages are also keyed under the plural table name.
        removed += self.cache.delete_by_prefix(f"{self.table}s:list:")
        if removed:
            _logger.debug("Invalidated %s cached %s lists", removed, self.table)

    def list_cache_key(self, page: int, limit: int, filters: dict[str, object]) -> str:
        encoded = json.dumps(filters, sort_keys=True, default=str)
        return f"{self.table}:list:{page}:{limit}:{encoded}"

    @property
    def _caching(self) -> bool:
        return self.cache is not None and self.ttl_seconds > 0

    @staticmethod
    def _apply_filters(request: Any, filters: dict[str, object]) -> Any:
        for column, value in filters.items():
            request = request.eq(column, value)
        return request


def _filter_value(value: object) -> object:
    if isinstance(value, UUID):
        return str(value)
    return value


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()
