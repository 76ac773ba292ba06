"""Data access facade for Airtable Manager.

``AirtableService`` is what the CLI talks to. For every read it resolves the
table name to an id, builds a cache key from the effective parameters and
serves the result from the response cache, calling the MCP client only on a
miss. Mutations always go to the server and then drop the cache entries they
made stale.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from airtable_manager.services.cache_store import CacheStats, CacheStore
from airtable_manager.services.mcp import AirtableMCPClient
from airtable_manager.services.resolution_cache import NameResolutionCache
from airtable_manager.shared.cache_utils import build_cache_key, operation_pattern
from airtable_manager.shared.constants import TTL, CacheKeys, MCPProtocol
from airtable_manager.shared.errors import RemoteCallError, create_config_error, create_record_not_found_error
from airtable_manager.shared.logging import log_operation_start, log_operation_success

logger = logging.getLogger(__name__)


def _table_rows(result: Any) -> Iterable[Mapping[str, Any]]:
    """Extract ``{"id", "name"}`` rows from a ``list_tables`` result."""
    if isinstance(result, Mapping):
        tables = result.get("tables", [])
    else:
        tables = result
    if not isinstance(tables, list):
        return []
    return [row for row in tables if isinstance(row, Mapping) and "id" in row and "name" in row]


class AirtableService:
    """Cached, name-resolving access to an Airtable base.

    Args:
        client: MCP client used for every remote call.
        cache: Response cache owned by this service.
        resolver: Table name resolver owned by this service.
        default_base: Base id used when a call does not name one.
        structure_ttl: TTL for bases, tables and table schemas.
        records_ttl: TTL for record listings and single records.
        search_ttl: TTL for search results.
    """

    def __init__(
        self,
        client: AirtableMCPClient,
        cache: CacheStore,
        resolver: NameResolutionCache,
        default_base: str = "",
        *,
        structure_ttl: int = TTL.HOUR,
        records_ttl: int = TTL.FIFTEEN_MINUTES,
        search_ttl: int = TTL.FIVE_MINUTES,
    ) -> None:
        self.client = client
        self.cache = cache
        self.resolver = resolver
        self._default_base = default_base
        self.structure_ttl = structure_ttl
        self.records_ttl = records_ttl
        self.search_ttl = search_ttl

    @property
    def default_base(self) -> str:
        return self._default_base

    def _base(self, base: str | None) -> str:
        resolved = base or self._default_base
        if not resolved:
            raise create_config_error(
                "No base given and no default base configured. "
                "Pass --base or set server.default_base",
                config_key="server.default_base",
                operation="resolve_base",
            )
        return resolved

    def _table_id(self, table: str, base_id: str) -> str:
        return self.resolver.resolve(
            table,
            base_id,
            lambda scope: _table_rows(self.client.list_tables(scope)),
        )

    # Reads

    def list_tools(self) -> list[dict[str, Any]]:
        return self.client.list_tools()

    def list_bases(self) -> Any:
        return self.cache.get_or_fetch(
            build_cache_key(CacheKeys.BASES),
            self.client.list_bases,
            ttl=self.structure_ttl,
        )

    def list_tables(self, base: str | None = None) -> Any:
        base_id = self._base(base)
        return self.cache.get_or_fetch(
            build_cache_key(CacheKeys.TABLES, {"baseId": base_id}),
            lambda: self.client.list_tables(base_id),
            ttl=self.structure_ttl,
        )

    def describe_table(self, table: str, base: str | None = None) -> Any:
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)
        return self.cache.get_or_fetch(
            build_cache_key(CacheKeys.TABLE_SCHEMA, {"baseId": base_id, "tableId": table_id}),
            lambda: self.client.describe_table(base_id, table_id),
            ttl=self.structure_ttl,
        )

    def list_records(
        self,
        table: str,
        base: str | None = None,
        max_records: int | None = None,
        filter_formula: str | None = None,
        view: str | None = None,
    ) -> Any:
        """List records, optionally limited, filtered or through a view.

        The filter formula and view are passed to Airtable verbatim.
        """
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)
        key = build_cache_key(
            CacheKeys.RECORDS,
            {
                "baseId": base_id,
                "table": table_id,
                "maxRecords": max_records,
                "filter": filter_formula,
                "view": view,
            },
        )
        return self.cache.get_or_fetch(
            key,
            lambda: self.client.list_records(
                base_id,
                table_id,
                max_records=max_records,
                filter_formula=filter_formula,
                view=view,
            ),
            ttl=self.records_ttl,
        )

    def get_record(self, table: str, record_id: str, base: str | None = None) -> Any:
        """Fetch one record.

        Raises:
            NotFoundError: If the server reports the record id as unknown.
        """
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)

        def fetch() -> Any:
            try:
                return self.client.get_record(base_id, table_id, record_id)
            except RemoteCallError as e:
                if MCPProtocol.NOT_FOUND_ERROR in e.message:
                    raise create_record_not_found_error(record_id, table_id, e) from e
                raise

        return self.cache.get_or_fetch(
            self._record_key(base_id, table_id, record_id),
            fetch,
            ttl=self.records_ttl,
        )

    def search_records(self, table: str, term: str, base: str | None = None) -> Any:
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)
        return self.cache.get_or_fetch(
            build_cache_key(CacheKeys.SEARCH, {"baseId": base_id, "tableId": table_id, "term": term}),
            lambda: self.client.search_records(base_id, table_id, term),
            ttl=self.search_ttl,
        )

    # Mutations

    @staticmethod
    def _record_key(base_id: str, table_id: str, record_id: str) -> str:
        return build_cache_key(CacheKeys.RECORD, {"baseId": base_id, "table": table_id, "id": record_id})

    def _invalidate_table(self, table_id: str) -> int:
        removed = self.cache.invalidate_pattern(operation_pattern(CacheKeys.RECORDS, table=table_id))
        removed += self.cache.invalidate_pattern(operation_pattern(CacheKeys.SEARCH, tableId=table_id))
        return removed

    def create_record(self, table: str, fields: dict[str, Any], base: str | None = None) -> Any:
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)

        log_operation_start(logger, "create_record", {"table": table_id})
        start_time = time.perf_counter()
        result = self.client.create_record(base_id, table_id, fields)
        removed = self._invalidate_table(table_id)
        log_operation_success(
            logger,
            "create_record",
            (time.perf_counter() - start_time) * 1000,
            result_info={"invalidated": removed},
        )
        return result

    def update_records(
        self,
        table: str,
        records: Sequence[dict[str, Any]],
        base: str | None = None,
    ) -> Any:
        """Update one or more records as a single batch.

        Each record is ``{"id": ..., "fields": {...}}``. If the server rejects
        the batch nothing is invalidated and the error propagates.
        """
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)

        log_operation_start(logger, "update_records", {"table": table_id, "count": len(records)})
        start_time = time.perf_counter()
        result = self.client.update_records(base_id, table_id, records)
        removed = self._invalidate_table(table_id)
        for record in records:
            if self.cache.invalidate(self._record_key(base_id, table_id, record["id"])):
                removed += 1
        log_operation_success(
            logger,
            "update_records",
            (time.perf_counter() - start_time) * 1000,
            result_info={"invalidated": removed},
        )
        return result

    def delete_records(self, table: str, record_ids: Sequence[str], base: str | None = None) -> Any:
        base_id = self._base(base)
        table_id = self._table_id(table, base_id)

        log_operation_start(logger, "delete_records", {"table": table_id, "count": len(record_ids)})
        start_time = time.perf_counter()
        result = self.client.delete_records(base_id, table_id, record_ids)
        removed = self._invalidate_table(table_id)
        log_operation_success(
            logger,
            "delete_records",
            (time.perf_counter() - start_time) * 1000,
            result_info={"invalidated": removed},
        )
        return result

    # Cache control

    def disable_cache(self) -> None:
        self.cache.disable()

    def enable_cache(self) -> None:
        self.cache.enable()

    def get_cache_stats(self) -> CacheStats:
        return self.cache.get_stats()

    def clear_cache(self) -> int:
        """Clear the response cache and forget every resolved table name.

        Returns:
            Number of response cache entries removed.
        """
        scopes = self.resolver.scopes()
        if scopes:
            logger.debug("Forgetting table names for %s", ", ".join(scopes))
        self.resolver.clear()
        return self.cache.clear()

    def invalidate_cache_key(self, key: str) -> bool:
        return self.cache.invalidate(key)

    def close(self) -> None:
        self.client.disconnect()
