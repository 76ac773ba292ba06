"""Tests for the cached, name-resolving data access facade."""

from __future__ import annotations

import logging

import pytest

from airtable_manager.services.airtable_service import AirtableService
from airtable_manager.services.cache_store import CacheStore
from airtable_manager.services.resolution_cache import NameResolutionCache
from airtable_manager.shared.cache_utils import build_cache_key
from airtable_manager.shared.constants import TTL
from airtable_manager.shared.errors import ConfigurationError, NotFoundError, RemoteCallError, ErrorCode

BASE = "appTEST"


class TestReads:
    """Reads go through the cache with the expected keys."""

    def test_list_bases_cached(self, service: AirtableService, fake_client) -> None:
        first = service.list_bases()
        second = service.list_bases()

        assert first == second
        assert fake_client.count("list_bases") == 1
        assert "bases" in service.cache

    def test_list_tables_uses_default_base(self, service: AirtableService, fake_client) -> None:
        service.list_tables()
        service.list_tables(BASE)

        assert fake_client.count("list_tables") == 1
        assert f"tables:baseId={BASE}" in service.cache

    def test_describe_table_key_uses_resolved_id(self, service: AirtableService, fake_client) -> None:
        by_name = service.describe_table("Products")
        by_id = service.describe_table("tblProducts")

        assert by_name == by_id
        assert fake_client.count("describe_table") == 1
        assert build_cache_key("table_schema", {"baseId": BASE, "tableId": "tblProducts"}) in service.cache

    def test_name_and_id_lookups_share_record_listing(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products")
        service.list_records("tblProducts")

        assert fake_client.count("list_records") == 1
        assert fake_client.count("list_tables") == 1

    def test_list_records_parameters_distinguish_keys(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products", max_records=10)
        service.list_records("Products", max_records=10, view="Grid")
        service.list_records("Products", max_records=10)

        assert fake_client.count("list_records") == 2
        assert build_cache_key(
            "records",
            {"baseId": BASE, "table": "tblProducts", "maxRecords": 10, "view": "Grid"},
        ) in service.cache

    def test_list_records_passes_options_through(self, service: AirtableService, fake_client) -> None:
        service.list_records("Orders", max_records=5, filter_formula="{Done} = TRUE()", view="Open")

        assert fake_client.calls[-1] == (
            "list_records",
            (BASE, "tblOrders", 5, "{Done} = TRUE()", "Open"),
        )

    def test_search_is_cached_per_term(self, service: AirtableService, fake_client) -> None:
        service.search_records("Products", "abc")
        service.search_records("Products", "abc")
        service.search_records("Products", "xyz")

        assert fake_client.count("search_records") == 2
        assert build_cache_key("search", {"baseId": BASE, "tableId": "tblProducts", "term": "abc"}) in service.cache

    def test_explicit_base_overrides_default(self, service: AirtableService, fake_client) -> None:
        fake_client.tables["appOTHER"] = [{"id": "tblElse", "name": "Products"}]

        service.get_record("Products", "rec1", base="appOTHER")

        assert fake_client.calls[-1] == ("get_record", ("appOTHER", "tblElse", "rec1"))

    def test_unknown_table_raises_not_found(self, service: AirtableService, fake_client) -> None:
        with pytest.raises(NotFoundError, match="Available tables: Products, Orders"):
            service.list_records("Nope")
        assert fake_client.count("list_records") == 0

    def test_missing_base_raises_configuration_error(self, fake_client, cache_store, resolver) -> None:
        service = AirtableService(fake_client, cache_store, resolver, default_base="")
        with pytest.raises(ConfigurationError):
            service.list_tables()

    def test_remote_failure_is_not_cached(self, service: AirtableService, fake_client, mocker) -> None:
        mocker.patch.object(
            fake_client,
            "list_bases",
            side_effect=[RemoteCallError(ErrorCode.REMOTE_CALL_FAILED, "rate limited"), {"bases": []}],
        )

        with pytest.raises(RemoteCallError, match="rate limited"):
            service.list_bases()
        assert service.list_bases() == {"bases": []}

    def test_unknown_record_raises_not_found(self, service: AirtableService, fake_client, mocker) -> None:
        mocker.patch.object(
            fake_client,
            "get_record",
            side_effect=RemoteCallError(ErrorCode.REMOTE_CALL_FAILED, "Airtable API error: NOT_FOUND"),
        )

        with pytest.raises(NotFoundError, match="Record recMISSING not found in table tblProducts") as exc_info:
            service.get_record("Products", "recMISSING")

        assert exc_info.value.code == ErrorCode.RECORD_NOT_FOUND
        assert isinstance(exc_info.value.original_error, RemoteCallError)
        assert build_cache_key("record", {"baseId": BASE, "table": "tblProducts", "id": "recMISSING"}) not in service.cache

    def test_other_record_failures_propagate_unchanged(self, service: AirtableService, fake_client, mocker) -> None:
        mocker.patch.object(
            fake_client,
            "get_record",
            side_effect=RemoteCallError(ErrorCode.REMOTE_CALL_FAILED, "INVALID_PERMISSIONS"),
        )

        with pytest.raises(RemoteCallError, match="INVALID_PERMISSIONS") as exc_info:
            service.get_record("Products", "rec1")
        assert not isinstance(exc_info.value, NotFoundError)

    def test_ttl_classes(self, fake_client, fake_clock) -> None:
        cache = CacheStore(namespace="ttl", clock=fake_clock)
        service = AirtableService(fake_client, cache, NameResolutionCache(), default_base=BASE)

        service.list_bases()
        service.list_records("Products")
        service.search_records("Products", "abc")

        fake_clock.advance(TTL.FIVE_MINUTES + 1)
        service.list_bases()
        service.list_records("Products")
        service.search_records("Products", "abc")
        assert fake_client.count("search_records") == 2
        assert fake_client.count("list_records") == 1

        fake_clock.advance(TTL.FIFTEEN_MINUTES)
        service.list_bases()
        service.list_records("Products")
        assert fake_client.count("list_records") == 2
        assert fake_client.count("list_bases") == 1

        fake_clock.advance(TTL.HOUR)
        service.list_bases()
        assert fake_client.count("list_bases") == 2


class TestMutations:
    """Mutations invalidate exactly the entries they made stale."""

    def test_create_invalidates_only_that_tables_listings(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products")
        service.list_records("Products", max_records=3)
        service.list_records("Orders")

        service.create_record("Products", {"Name": "Widget"})

        service.list_records("Products")
        service.list_records("Orders")
        assert fake_client.count("list_records") == 4
        assert fake_client.calls[-1][0] == "list_records"
        assert ("create_record", (BASE, "tblProducts", {"Name": "Widget"})) in fake_client.calls

    def test_create_invalidates_listings_with_free_text_filters(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products", filter_formula="{Label}='a:table=tblOrders'")
        service.list_records("Orders", filter_formula="{Label}='x:table=tblProducts'")

        service.create_record("Products", {"Name": "Widget"})

        service.list_records("Products", filter_formula="{Label}='a:table=tblOrders'")
        service.list_records("Orders", filter_formula="{Label}='x:table=tblProducts'")
        assert fake_client.count("list_records") == 3

    def test_create_by_id_invalidates_listing_cached_by_name(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products")
        service.create_record("tblProducts", {"Name": "Widget"})
        service.list_records("Products")
        assert fake_client.count("list_records") == 2

    def test_update_invalidates_updated_record_only(self, service: AirtableService, fake_client) -> None:
        service.get_record("Products", "r1")
        service.get_record("Products", "r2")

        service.update_records("Products", [{"id": "r1", "fields": {"Name": "New"}}])

        assert build_cache_key("record", {"baseId": BASE, "table": "tblProducts", "id": "r1"}) not in service.cache
        assert build_cache_key("record", {"baseId": BASE, "table": "tblProducts", "id": "r2"}) in service.cache
        service.get_record("Products", "r2")
        assert fake_client.count("get_record") == 2

    def test_update_invalidates_listings_and_search(self, service: AirtableService, fake_client) -> None:
        service.list_records("Products")
        service.search_records("Products", "abc")
        service.describe_table("Products")

        service.update_records("Products", [{"id": "r1", "fields": {}}])

        service.list_records("Products")
        service.search_records("Products", "abc")
        service.describe_table("Products")
        assert fake_client.count("list_records") == 2
        assert fake_client.count("search_records") == 2
        assert fake_client.count("describe_table") == 1

    def test_delete_invalidates_listings(self, service: AirtableService, fake_client) -> None:
        service.list_records("Orders")
        result = service.delete_records("Orders", ["r1", "r2"])

        assert result == [{"id": "r1", "deleted": True}, {"id": "r2", "deleted": True}]
        service.list_records("Orders")
        assert fake_client.count("list_records") == 2

    def test_failed_mutation_invalidates_nothing(self, service: AirtableService, fake_client, mocker) -> None:
        service.list_records("Products")
        mocker.patch.object(
            fake_client,
            "create_record",
            side_effect=RemoteCallError(ErrorCode.REMOTE_CALL_FAILED, "INVALID_VALUE"),
        )

        with pytest.raises(RemoteCallError):
            service.create_record("Products", {"Bad": object()})

        service.list_records("Products")
        assert fake_client.count("list_records") == 1


class TestCacheControl:
    def test_disable_enable_round_trip(self, service: AirtableService, fake_client) -> None:
        original = service.list_bases()

        service.disable_cache()
        fresh = service.list_bases()
        assert fresh != original
        assert fake_client.count("list_bases") == 2

        service.enable_cache()
        assert service.list_bases() == original
        assert fake_client.count("list_bases") == 2

    def test_stats(self, service: AirtableService) -> None:
        service.list_bases()
        service.list_bases()

        stats = service.get_cache_stats()
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)

    def test_clear_cache_also_clears_name_resolution(self, service: AirtableService, fake_client, caplog) -> None:
        service.list_records("Products")
        assert service.resolver.scopes() == [BASE]

        with caplog.at_level(logging.DEBUG, logger="airtable_manager"):
            assert service.clear_cache() == 1

        assert service.resolver.scopes() == []
        assert f"Forgetting table names for {BASE}" in caplog.text
        service.list_records("Products")
        assert fake_client.count("list_tables") == 2

    def test_invalidate_cache_key(self, service: AirtableService) -> None:
        service.list_bases()
        assert service.invalidate_cache_key("bases") is True
        assert service.invalidate_cache_key("bases") is False

    def test_list_tools_is_not_cached(self, service: AirtableService, fake_client) -> None:
        service.list_tools()
        service.list_tools()
        assert fake_client.count("list_tools") == 2

    def test_close_disconnects_client(self, service: AirtableService, fake_client) -> None:
        service.close()
        assert fake_client.disconnected is True
