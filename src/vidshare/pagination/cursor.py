"""Opaque cursor tokens.

A cursor is the set of sort-key values of the last row on a page, keyed by
wire field name (``{"updatedAt": ..., "id": ...}``). On the wire it travels as
URL-safe base64 of compact JSON so clients treat it as an opaque string.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

from pydantic_core import to_jsonable_python


class InvalidCursorError(ValueError):
    """Raised when a cursor token cannot be decoded."""


def encode_token(values: Mapping[str, Any]) -> str:
    """Encode sort-key values into an opaque cursor token."""
    payload = json.dumps(to_jsonable_python(dict(values)), separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_token(token: str) -> dict[str, Any]:
    """Decode a cursor token into its raw JSON field values.

    Raises ``InvalidCursorError`` if the token is not base64-encoded JSON object.
    """
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode())
    except (ValueError, binascii.Error, UnicodeError) as exc:
        raise InvalidCursorError(f"Malformed cursor: {token!r}") from exc
    if not isinstance(payload, dict):
        raise InvalidCursorError(f"Malformed cursor: {token!r}")
    return payload
