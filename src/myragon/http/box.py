"""
=============================================================================
BOX - READ-ONLY KEY/VALUE CONTAINERS
=============================================================================

Every group of request data (query, form, body, files, server, cookies,
headers) is stored in a Box: an ordered, read-only mapping with
default-valued lookup.

    box = Box({"page": "1"})
    box.get("page")          # "1"
    box.get("limit", "10")   # "10"
    box["page"] = "2"        # TypeError - boxes never change

HeaderBox does the same for HTTP headers, with case-insensitive keys:

    headers = HeaderBox({"content-type": "application/json"})
    headers["CONTENT-TYPE"]  # "application/json"
    list(headers)            # ["Content-Type"]

=============================================================================
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional


# A header holding any of these would split into extra header lines
FORBIDDEN_HEADER_CHARS = ("\r", "\n", "\0")


def normalize_header_name(name: str) -> str:
    """
    Normalize a header name to its canonical capitalized-hyphenated form.

        content-type  → Content-Type
        CONTENT-TYPE  → Content-Type
        x-request-id  → X-Request-Id

    Normalization is idempotent.
    """
    return "-".join(part.capitalize() for part in name.strip().split("-"))


def has_forbidden_header_chars(text: str) -> bool:
    """Check for CR, LF or NUL in a header name or value."""
    return any(char in text for char in FORBIDDEN_HEADER_CHARS)


class Box(Mapping):
    """
    Ordered read-only mapping with default-valued lookup.

    Box copies its input, so later changes to the source dict are not
    visible through the box. Nested values are returned as-is.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping] = None):
        self._items: Dict[Any, Any] = {}
        for key, value in (items or {}).items():
            self._items[self._key(key)] = value

    def _key(self, key: Any) -> Any:
        return key

    def __getitem__(self, key: Any) -> Any:
        return self._items[self._key(key)]

    def __contains__(self, key: object) -> bool:
        return self._key(key) in self._items

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def has(self, key: Any) -> bool:
        """Check whether a key is present."""
        return key in self

    def all(self) -> Dict[Any, Any]:
        """Return a shallow copy of the contents as a plain dict."""
        return dict(self._items)


class HeaderBox(Box):
    """Box whose keys are HTTP header names, looked up case-insensitively."""

    __slots__ = ()

    def _key(self, key: Any) -> Any:
        if isinstance(key, str):
            return normalize_header_name(key)
        return key
