"""Pagination models shared by list queries."""

from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class Pagination:
    """Requested page window; page numbers are 1-based."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination metadata returned with a page of rows."""

    total: int
    page: int
    limit: int
    pages: int

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
        }


@dataclass(frozen=True)
class Page:
    """A page of raw rows plus its pagination metadata."""

    data: list[dict[str, object]]
    pagination: PaginationMeta
