"""Keyset pagination shared by every listing endpoint."""

from vidshare.pagination.cursor import InvalidCursorError, decode_token, encode_token
from vidshare.pagination.keyset import Cursor, Keyset, Page, SortKey, fetch_page

__all__ = [
    "Cursor",
    "InvalidCursorError",
    "Keyset",
    "Page",
    "SortKey",
    "decode_token",
    "encode_token",
    "fetch_page",
]
