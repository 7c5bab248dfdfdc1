"""Shared utility functions."""

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape SQL ILIKE/LIKE wildcard characters.

    Prevents user-controlled input from being interpreted as wildcard patterns
    when used in ILIKE queries.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """``%value%`` with wildcards in ``value`` escaped; pair with ``escape=LIKE_ESCAPE``."""
    return f"%{escape_like(value)}%"
