"""Keyset (seek) pagination over SQLAlchemy select statements.

A :class:`Keyset` is the ordered list of sort keys a listing pages by: the
primary sort key first, then one or more tie-break keys that together make
the order total. For a descending keyset ``(a, b)`` and a cursor ``(p, t)``
the next page is every row with::

    a < p OR (a = p AND b < t)

followed by ``ORDER BY a DESC, b DESC LIMIT n + 1``. The extra row only
signals that another page exists; it is never returned.

The boundary is a pure comparison, so a cursor stays usable after the row it
was taken from is deleted, and rows inserted ahead of the cursor after a page
was served are not seen by later pages. Cursors carry no filter: reusing one
with a different filter is a caller error that is not detected here.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Any, Generic, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import ColumnElement, Select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.pagination.cursor import InvalidCursorError, decode_token, encode_token

logger = structlog.get_logger()

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class SortKey:
    """One column (or expression) of a keyset.

    ``name`` is the field name used inside the cursor, ``expression`` is what
    the database compares and orders by, ``type_`` is the Python type cursor
    values are validated against, and ``value_of`` reads the key back from a
    fetched row.
    """

    name: str
    expression: Any
    type_: type
    value_of: Callable[[Any], Any]

    @classmethod
    def of(cls, name: str, expression: Any, type_: type, path: str | None = None) -> SortKey:
        """Build a key whose row value is read by dotted attribute path (default: ``name``)."""
        return cls(name, expression, type_, attrgetter(path or name))


@dataclass(frozen=True)
class Cursor:
    """Decoded position: the sort-key values of the last row already served."""

    values: Mapping[str, Any]

    def __getitem__(self, name: str) -> Any:
        return self.values[name]


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    next_cursor: Cursor | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    def map(self, fn: Callable[[T], U]) -> Page[U]:
        return Page(items=[fn(item) for item in self.items], next_cursor=self.next_cursor)


class Keyset:
    """Ordered sort keys plus direction; builds predicates and assembles pages."""

    def __init__(self, *keys: SortKey, descending: bool = True) -> None:
        if len(keys) < 2:
            raise ValueError("a keyset needs a sort key and at least one tie-break key")
        names = [k.name for k in keys]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate sort key names: {names}")
        self.keys: tuple[SortKey, ...] = keys
        self.descending = descending
        self._adapters = {k.name: TypeAdapter(k.type_) for k in keys}

    @property
    def field_names(self) -> list[str]:
        return [k.name for k in self.keys]

    def _after(self, key: SortKey, value: Any) -> ColumnElement[bool]:
        return key.expression < value if self.descending else key.expression > value

    def boundary(self, cursor: Cursor) -> ColumnElement[bool]:
        """Predicate selecting rows strictly after ``cursor`` in keyset order."""
        clauses = []
        for i, key in enumerate(self.keys):
            equal_prefix = [prev.expression == cursor[prev.name] for prev in self.keys[:i]]
            clauses.append(and_(*equal_prefix, self._after(key, cursor[key.name])))
        return or_(*clauses)

    def order_by(self) -> list[ColumnElement[Any]]:
        return [k.expression.desc() if self.descending else k.expression.asc() for k in self.keys]

    def apply(self, statement: Select[Any], cursor: Cursor | None, limit: int) -> Select[Any]:
        """Add the boundary, ordering and ``limit + 1`` row cap to ``statement``."""
        if cursor is not None:
            statement = statement.where(self.boundary(cursor))
        return statement.order_by(*self.order_by()).limit(limit + 1)

    def cursor_for(self, row: Any) -> Cursor:
        return Cursor({k.name: k.value_of(row) for k in self.keys})

    def paginate(self, rows: Sequence[T], limit: int) -> Page[T]:
        """Trim a ``limit + 1`` result to a page and derive the next cursor."""
        has_more = len(rows) > limit
        items = list(rows[:limit])
        next_cursor = self.cursor_for(items[-1]) if has_more else None
        return Page(items=items, next_cursor=next_cursor)

    def encode(self, cursor: Cursor) -> str:
        return encode_token({name: cursor[name] for name in self.field_names})

    def decode(self, token: str) -> Cursor:
        """Parse a token produced by :meth:`encode` for this keyset.

        Raises ``InvalidCursorError`` when fields are missing or extra, or a
        value does not parse as its key's type.
        """
        raw = decode_token(token)
        if set(raw) != set(self.field_names):
            raise InvalidCursorError(f"Cursor fields {sorted(raw)} do not match {sorted(self.field_names)}")
        try:
            values = {name: self._adapters[name].validate_python(raw[name]) for name in self.field_names}
        except ValidationError as exc:
            raise InvalidCursorError(f"Malformed cursor value: {exc.errors()[0]['msg']}") from exc
        return Cursor(values)


async def fetch_page(
    session: AsyncSession,
    statement: Select[Any],
    keyset: Keyset,
    *,
    limit: int,
    cursor: Cursor | None = None,
) -> Page[Any]:
    """Run ``statement`` as one keyset page and return its rows."""
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")

    result = await session.execute(keyset.apply(statement, cursor, limit))
    rows = result.all()
    page = keyset.paginate(rows, limit)
    logger.debug(
        "keyset_page",
        keys=keyset.field_names,
        limit=limit,
        resumed=cursor is not None,
        returned=len(page.items),
        has_more=page.has_more,
    )
    return page
