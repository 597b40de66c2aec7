"""Naming utilities for code generation."""

from __future__ import annotations

from functools import lru_cache

from .errors import NamingError


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a snake_case catalog identifier to PascalCase.

    Only the first character of each segment is upper-cased; the rest of
    the segment is kept as-is. Empty segments (leading, trailing or doubled
    underscores) are skipped.

    Examples:
        >>> to_pascal_case("user_name")
        'UserName'
        >>> to_pascal_case("order_ID")
        'OrderID'
        >>> to_pascal_case("_legacy__flag")
        'LegacyFlag'

    Raises:
        NamingError: If the identifier has no non-empty segments.
    """
    parts = [part for part in value.split("_") if part]
    if not parts:
        raise NamingError(value)
    return "".join(part[:1].upper() + part[1:] for part in parts)


def is_identity_column(name: str) -> bool:
    """Return True if the column is the shared identity column."""
    return name.casefold() == "id"
