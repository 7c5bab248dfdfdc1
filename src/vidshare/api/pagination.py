"""Request parameters and response envelope for keyset-paginated endpoints."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from fastapi import HTTPException, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from vidshare.pagination import Cursor, InvalidCursorError, Keyset, Page

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PageParams:
    """``?limit=&cursor=`` query parameters shared by every listing."""

    def __init__(
        self,
        limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        cursor: str | None = Query(default=None),
    ) -> None:
        self.limit = limit
        self.cursor = cursor or None

    def cursor_for(self, keyset: Keyset) -> Cursor | None:
        """Decode the request cursor for ``keyset``; a malformed one is a 400."""
        if self.cursor is None:
            return None
        try:
            return keyset.decode(self.cursor)
        except InvalidCursorError:
            raise HTTPException(status_code=400, detail="Invalid cursor")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response envelope: ``{"items": [...], "nextCursor": ...}``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T]
    next_cursor: str | None = None

    @classmethod
    def from_page(cls, page: Page[Any], keyset: Keyset, item: Callable[[Any], T], **extra: Any) -> "PaginatedResponse[T]":
        next_cursor = keyset.encode(page.next_cursor) if page.next_cursor is not None else None
        return cls(items=[item(row) for row in page.items], next_cursor=next_cursor, **extra)


class CountedPaginatedResponse(PaginatedResponse[T], Generic[T]):
    """Envelope that also carries a total computed outside the paged query."""

    total_count: int = 0
