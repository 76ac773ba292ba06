"""Table name resolution for Airtable Manager.

Some Airtable MCP tools only accept table ids (``tbl...``), while users refer
to tables by display name. This module keeps a per-base mapping from display
name to table id, populated in one batch from a table listing and kept for
the life of the process.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from airtable_manager.services.cache_store import Clock, utc_now
from airtable_manager.shared.constants import IdPrefix
from airtable_manager.shared.errors import create_table_not_found_error

logger = logging.getLogger(__name__)

ListFn = Callable[[str], Iterable[Mapping[str, Any]]]


class ScopeMapping(BaseModel):
    """A populated scope: every display name known in it, and since when.

    A scope without a ``ScopeMapping`` is unpopulated.
    """

    model_config = ConfigDict(frozen=True)

    mapping: dict[str, str] = Field(default_factory=dict, description="Display name to id")
    since: datetime = Field(..., description="When the scope was populated")

    def get(self, name: str) -> str | None:
        return self.mapping.get(name)

    @property
    def names(self) -> list[str]:
        return list(self.mapping)


class NameResolutionCache:
    """Per-scope ``display name -> id`` resolver.

    Entries never expire; a scope is only repopulated when a name is missing
    from it, or after ``clear``.

    Args:
        id_prefix: Names starting with this prefix are already ids.
        clock: Callable returning the current UTC time.
    """

    def __init__(self, id_prefix: str = IdPrefix.TABLE, clock: Clock | None = None) -> None:
        self.id_prefix = id_prefix
        self._clock = clock or utc_now
        self._scopes: dict[str, ScopeMapping] = {}
        self._lock = threading.RLock()

    def resolve(self, name: str, scope: str, list_fn: ListFn) -> str:
        """Resolve ``name`` to an id within ``scope``.

        Args:
            name: Display name, or an id carrying the id prefix.
            scope: Scope the name lives in (the base id).
            list_fn: Called with ``scope`` when the name is unknown; returns
                rows with ``id`` and ``name`` keys.

        Returns:
            The id for ``name``.

        Raises:
            NotFoundError: If the name is still unknown after repopulating
                the scope. The message lists the names that do exist.
        """
        if name.startswith(self.id_prefix):
            return name

        with self._lock:
            populated = self._scopes.get(scope)
        if populated is not None:
            resolved = populated.get(name)
            if resolved is not None:
                return resolved

        logger.debug("Populating name cache for scope '%s' (looking up '%s')", scope, name)
        populated = self._populate(scope, list_fn(scope))

        resolved = populated.get(name)
        if resolved is None:
            raise create_table_not_found_error(name, scope, populated.names)
        return resolved

    def _populate(self, scope: str, rows: Iterable[Mapping[str, Any]]) -> ScopeMapping:
        mapping: dict[str, str] = {}
        for row in rows:
            row_name = str(row["name"])
            row_id = str(row["id"])
            if row_name in mapping and mapping[row_name] != row_id:
                logger.warning(
                    "Duplicate name '%s' in scope '%s': %s replaces %s",
                    row_name,
                    scope,
                    row_id,
                    mapping[row_name],
                )
            mapping[row_name] = row_id

        populated = ScopeMapping(mapping=mapping, since=self._clock())
        with self._lock:
            self._scopes[scope] = populated
        return populated

    def is_populated(self, scope: str) -> bool:
        with self._lock:
            return scope in self._scopes

    def scopes(self) -> list[str]:
        with self._lock:
            return list(self._scopes)

    def clear(self, scope: str | None = None) -> int:
        """Forget one scope, or every scope when ``scope`` is None.

        Returns:
            Number of scopes forgotten.
        """
        with self._lock:
            if scope is None:
                count = len(self._scopes)
                self._scopes.clear()
            else:
                count = 1 if self._scopes.pop(scope, None) is not None else 0
        logger.debug("Cleared %d name cache scope(s)", count)
        return count
