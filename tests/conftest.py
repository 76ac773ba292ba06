"""
Pytest configuration and shared fixtures for Airtable Manager tests.

This module provides a controllable clock, an in-memory stand-in for the
Airtable MCP client, and ready-wired caches and facade built on them.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from airtable_manager.cli.common.context import clear_cli_context
from airtable_manager.services.airtable_service import AirtableService
from airtable_manager.services.cache_store import CacheStore
from airtable_manager.services.resolution_cache import NameResolutionCache
from airtable_manager.shared.constants import Logging

TEST_BASE = "appTEST"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeAirtableClient:
    """In-memory stand-in for AirtableMCPClient.

    Every call is appended to ``calls`` as ``(method, args)`` so tests can
    count remote round-trips.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.tables: dict[str, list[dict[str, str]]] = {
            TEST_BASE: [
                {"id": "tblProducts", "name": "Products"},
                {"id": "tblOrders", "name": "Orders"},
            ],
        }
        self.disconnected = False
        self._version = 0

    def _record(self, method: str, *args: Any) -> int:
        self.calls.append((method, args))
        self._version += 1
        return self._version

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def list_tools(self) -> list[dict[str, Any]]:
        self._record("list_tools")
        return [{"name": "list_bases", "description": "List bases", "inputSchema": {}}]

    def list_bases(self) -> dict[str, Any]:
        version = self._record("list_bases")
        return {"bases": [{"id": TEST_BASE, "name": "Test"}], "version": version}

    def list_tables(self, base_id: str) -> dict[str, Any]:
        self._record("list_tables", base_id)
        return {"tables": list(self.tables.get(base_id, []))}

    def describe_table(self, base_id: str, table_id: str) -> dict[str, Any]:
        version = self._record("describe_table", base_id, table_id)
        return {"id": table_id, "fields": [], "version": version}

    def list_records(
        self,
        base_id: str,
        table_id: str,
        max_records: int | None = None,
        filter_formula: str | None = None,
        view: str | None = None,
    ) -> dict[str, Any]:
        version = self._record("list_records", base_id, table_id, max_records, filter_formula, view)
        return {"records": [{"id": "rec1", "fields": {"table": table_id}}], "version": version}

    def get_record(self, base_id: str, table_id: str, record_id: str) -> dict[str, Any]:
        version = self._record("get_record", base_id, table_id, record_id)
        return {"id": record_id, "fields": {}, "version": version}

    def search_records(self, base_id: str, table_id: str, term: str) -> dict[str, Any]:
        version = self._record("search_records", base_id, table_id, term)
        return {"records": [], "term": term, "version": version}

    def create_record(self, base_id: str, table_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        self._record("create_record", base_id, table_id, fields)
        return {"id": "recNEW", "fields": fields}

    def update_records(self, base_id: str, table_id: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        self._record("update_records", base_id, table_id, records)
        return list(records)

    def delete_records(self, base_id: str, table_id: str, record_ids: list[str]) -> list[dict[str, Any]]:
        self._record("delete_records", base_id, table_id, record_ids)
        return [{"id": rid, "deleted": True} for rid in record_ids]

    def disconnect(self) -> None:
        self.disconnected = True


@pytest.fixture(autouse=True)
def _reset_cli_state() -> Generator[None, None, None]:
    """Clear CLI context and let package logs reach caplog."""
    clear_cli_context()
    package_logger = logging.getLogger(Logging.LOGGER_NAME)
    package_logger.propagate = True
    yield
    clear_cli_context()
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeAirtableClient:
    return FakeAirtableClient()


@pytest.fixture
def cache_store(fake_clock: FakeClock) -> CacheStore:
    return CacheStore(namespace="test", default_ttl=900, clock=fake_clock)


@pytest.fixture
def resolver(fake_clock: FakeClock) -> NameResolutionCache:
    return NameResolutionCache(clock=fake_clock)


@pytest.fixture
def service(
    fake_client: FakeAirtableClient,
    cache_store: CacheStore,
    resolver: NameResolutionCache,
) -> AirtableService:
    return AirtableService(
        client=fake_client,  # type: ignore[arg-type]
        cache=cache_store,
        resolver=resolver,
        default_base=TEST_BASE,
    )
