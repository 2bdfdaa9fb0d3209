"""Helpers for turning Supabase rows into domain values."""

from datetime import date, datetime
from uuid import UUID


def parse_uuid(raw: object) -> UUID | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, UUID):
        return raw
    return UUID(str(raw))


def parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def optional_str(raw: object) -> str | None:
    return str(raw) if raw is not None else None


def to_row(payload: dict[str, object]) -> dict[str, object]:
    """Convert UUID, date and datetime values to their JSON wire form."""
    row: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, UUID):
            row[key] = str(value)
        elif isinstance(value, date):
            row[key] = value.isoformat()
        else:
            row[key] = value
    return row
