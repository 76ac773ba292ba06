"""Cache utility functions for Airtable request normalization.

This module provides utilities for generating consistent cache keys from
Airtable request parameters. It ensures that identical requests produce
identical cache keys regardless of parameter order.

Key Features:
    - Parameter normalization (None removal, stable value rendering)
    - Sorted ``name=value`` pairs so argument order never matters
    - Human-readable keys, so they can be matched by regular expressions
      and passed back to ``cache-invalidate``

Example:
    >>> from airtable_manager.shared.cache_utils import build_cache_key
    >>> build_cache_key("records", {"table": "tblA", "baseId": "appX", "view": None})
    'records:baseId=appX:table=tblA'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from airtable_manager.shared.constants import CacheKeys


def escape_component(text: str) -> str:
    """Percent-encode the characters that delimit key components.

    Free-text values such as filter formulas or search terms may contain
    ``:`` or ``=``; escaping keeps one parameter set from spelling another.

    Example:
        >>> escape_component("{A}=1:x")
        '{A}%3D1%3Ax'
    """
    for char, encoded in CacheKeys.ESCAPES:
        text = text.replace(char, encoded)
    return text


def _render_value(value: Any) -> str:
    """Render one parameter value for inclusion in a key (booleans as JSON literals)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def canonical_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Normalize parameters for consistent cache key generation.

    Normalization rules:
        1. Remove None values (an omitted optional and an explicit None
           produce the same key)
        2. Render values as strings

    Values are not case-folded: Airtable ids are case-sensitive.

    Args:
        params: Query parameters mapping. Can be None.

    Returns:
        Normalized parameters. Returns an empty dict if params is None.

    Example:
        >>> canonical_params({"maxRecords": 10, "view": None, "raw": True})
        {'maxRecords': '10', 'raw': 'true'}
    """
    if not params:
        return {}

    return {
        str(name): _render_value(value)
        for name, value in params.items()
        if value is not None
    }


def build_cache_key(operation: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a deterministic cache key for one logical query.

    Cache key format:
        - With params: "{operation}:{name1}={value1}:{name2}={value2}..."
        - Without params: "{operation}"

    Args:
        operation: Operation family, e.g. "tables", "records", "search".
        params: Effective parameters of the query.

    Returns:
        The cache key.

    Raises:
        ValueError: If operation is empty.

    Example:
        >>> build_cache_key("tables", {"baseId": "appX"})
        'tables:baseId=appX'
        >>> build_cache_key("bases")
        'bases'
        >>> build_cache_key("t", {"a": 1, "b": 2}) == build_cache_key("t", {"b": 2, "a": 1})
        True
    """
    if not operation:
        raise ValueError("operation cannot be empty or None")

    normalized = canonical_params(params)
    parts = [operation]
    parts.extend(
        f"{escape_component(name)}{CacheKeys.ASSIGN}{escape_component(value)}"
        for name, value in sorted(normalized.items())
    )
    return CacheKeys.SEPARATOR.join(parts)


def operation_pattern(operation: str, **params: str) -> re.Pattern[str]:
    """Build a pattern matching every key of ``operation`` carrying ``params``.

    Used to drop all cached listings of a collection after a mutation, without
    knowing the full parameter set each listing was cached under. Parameter
    values are escaped and bounded by the key separator (or key end), so
    ``table=tblA`` does not also match ``table=tblAB``.

    Example:
        >>> bool(operation_pattern("records", table="tblA").search("records:baseId=appX:table=tblA:view=Grid"))
        True
        >>> bool(operation_pattern("records", table="tblA").search("records:baseId=appX:table=tblAB"))
        False
    """
    sep = re.escape(CacheKeys.SEPARATOR)
    pattern = f"^{re.escape(operation)}(?={sep}|$)"
    for name, value in sorted(params.items()):
        component = f"{escape_component(name)}{CacheKeys.ASSIGN}{escape_component(value)}"
        pattern += f"(?=.*{sep}{re.escape(component)}(?:{sep}|$))"
    return re.compile(pattern)
