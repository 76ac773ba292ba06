"""Tests for the Airtable MCP client."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from airtable_manager.config.models import ServerSettings
from airtable_manager.services.mcp import AirtableMCPClient, StdioJsonRpcTransport
from airtable_manager.shared.errors import ConfigurationError, ErrorCode, RemoteCallError

FAKE_SERVER = Path(__file__).parent.parent / "fixtures" / "fake_mcp_server.py"


def _text(text: str, *, is_error: bool = False) -> dict:
    result: dict = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


@pytest.fixture
def transport(mocker):
    transport = mocker.Mock(spec=StdioJsonRpcTransport)
    transport.request.return_value = {"serverInfo": {"name": "mock"}}
    return transport


@pytest.fixture
def client(transport, monkeypatch) -> AirtableMCPClient:
    monkeypatch.setenv("AIRTABLE_API_KEY", "keyTEST")
    return AirtableMCPClient(ServerSettings(), transport=transport)


class TestConnect:
    def test_missing_api_key_fails_before_spawning(self, transport, monkeypatch) -> None:
        monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
        client = AirtableMCPClient(ServerSettings(), transport=transport)

        with pytest.raises(ConfigurationError, match="AIRTABLE_API_KEY") as exc_info:
            client.list_bases()

        assert exc_info.value.code == ErrorCode.MISSING_CONFIG
        transport.start.assert_not_called()
        transport.request.assert_not_called()

    def test_api_key_from_settings_env(self, transport, monkeypatch) -> None:
        monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
        client = AirtableMCPClient(ServerSettings(env={"AIRTABLE_API_KEY": "keyCFG"}), transport=transport)

        client.connect()

        assert client.connected
        transport.start.assert_called_once()

    def test_handshake(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        client.connect()

        transport.start.assert_called_once()
        method, params = transport.request.call_args.args
        assert method == "initialize"
        assert params["protocolVersion"] == "2024-11-05"
        assert params["clientInfo"] == {"name": "airtable-cli", "version": "1.0.0"}
        transport.notify.assert_called_once_with("notifications/initialized")
        assert client.server_info == {"name": "mock"}

    def test_failed_handshake_closes_transport(self, client: AirtableMCPClient, transport) -> None:
        transport.request.side_effect = RemoteCallError(ErrorCode.REMOTE_CALL_FAILED, "nope")

        with pytest.raises(RemoteCallError):
            client.connect()

        transport.close.assert_called_once()
        assert not client.connected

    def test_context_manager_disconnects(self, client: AirtableMCPClient, transport) -> None:
        with client:
            assert client.connected
        transport.close.assert_called_once()
        assert not client.connected


class TestCallTool:
    def test_json_text_is_decoded(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        transport.request.return_value = _text('{"bases": [{"id": "app1"}]}')

        assert client.call_tool("list_bases", {}) == {"bases": [{"id": "app1"}]}
        transport.request.assert_called_with("tools/call", {"name": "list_bases", "arguments": {}})

    def test_plain_text_is_returned_as_string(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        transport.request.return_value = _text("Deleted 2 records")
        assert client.call_tool("delete_records", {}) == "Deleted 2 records"

    def test_no_text_returns_raw_content(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        content = [{"type": "image", "data": "AAAA"}]
        transport.request.return_value = {"content": content}
        assert client.call_tool("x", {}) == content

    def test_is_error_raises_with_server_text(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        transport.request.return_value = _text("INVALID_PERMISSIONS", is_error=True)

        with pytest.raises(RemoteCallError, match="INVALID_PERMISSIONS") as exc_info:
            client.call_tool("create_record", {})
        assert exc_info.value.context.additional_data == {"tool": "create_record"}

    def test_is_error_without_text(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        transport.request.return_value = {"content": [], "isError": True}
        with pytest.raises(RemoteCallError, match="Tool call failed"):
            client.call_tool("x", {})


class TestToolWrappers:
    @pytest.fixture(autouse=True)
    def _connected(self, client: AirtableMCPClient, transport) -> None:
        client.connect()
        transport.request.return_value = _text("{}")

    def _arguments(self, transport) -> tuple[str, dict]:
        method, params = transport.request.call_args.args
        assert method == "tools/call"
        return params["name"], params["arguments"]

    def test_list_records_sends_only_set_options(self, client: AirtableMCPClient, transport) -> None:
        client.list_records("app1", "tbl1")
        assert self._arguments(transport) == ("list_records", {"baseId": "app1", "tableId": "tbl1"})

        client.list_records("app1", "tbl1", max_records=5, filter_formula="{A}", view="Grid")
        assert self._arguments(transport) == (
            "list_records",
            {"baseId": "app1", "tableId": "tbl1", "maxRecords": 5, "filterByFormula": "{A}", "view": "Grid"},
        )

    def test_record_wrappers(self, client: AirtableMCPClient, transport) -> None:
        client.get_record("app1", "tbl1", "rec1")
        assert self._arguments(transport) == (
            "get_record",
            {"baseId": "app1", "tableId": "tbl1", "recordId": "rec1"},
        )

        client.search_records("app1", "tbl1", "term")
        assert self._arguments(transport) == (
            "search_records",
            {"baseId": "app1", "tableId": "tbl1", "searchTerm": "term"},
        )

        client.create_record("app1", "tbl1", {"Name": "x"})
        assert self._arguments(transport) == (
            "create_record",
            {"baseId": "app1", "tableId": "tbl1", "fields": {"Name": "x"}},
        )

        client.update_records("app1", "tbl1", [{"id": "rec1", "fields": {}}])
        assert self._arguments(transport) == (
            "update_records",
            {"baseId": "app1", "tableId": "tbl1", "records": [{"id": "rec1", "fields": {}}]},
        )

        client.delete_records("app1", "tbl1", ("rec1", "rec2"))
        assert self._arguments(transport) == (
            "delete_records",
            {"baseId": "app1", "tableId": "tbl1", "recordIds": ["rec1", "rec2"]},
        )

    def test_structure_wrappers(self, client: AirtableMCPClient, transport) -> None:
        client.list_bases()
        assert self._arguments(transport) == ("list_bases", {})
        client.list_tables("app1")
        assert self._arguments(transport) == ("list_tables", {"baseId": "app1"})
        client.describe_table("app1", "tbl1")
        assert self._arguments(transport) == ("describe_table", {"baseId": "app1", "tableId": "tbl1"})


class TestAgainstFakeServer:
    @pytest.fixture
    def live_client(self, monkeypatch):
        monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
        settings = ServerSettings(
            command=sys.executable,
            args=[str(FAKE_SERVER)],
            env={"AIRTABLE_API_KEY": "keyFROMSETTINGS"},
            timeout_s=5,
        )
        client = AirtableMCPClient(settings)
        yield client
        client.disconnect()

    def test_round_trip(self, live_client: AirtableMCPClient) -> None:
        assert live_client.list_bases() == {"bases": [{"id": "appFAKE", "name": "Fake"}]}
        assert live_client.server_info["name"] == "fake-airtable"
        assert [tool["name"] for tool in live_client.list_tools()] == ["list_bases"]

    def test_settings_env_reaches_server(self, live_client: AirtableMCPClient) -> None:
        assert live_client.call_tool("env", {}) == {"key": "keyFROMSETTINGS"}

    def test_tool_error(self, live_client: AirtableMCPClient) -> None:
        with pytest.raises(RemoteCallError, match="Table not writable"):
            live_client.call_tool("fail", {})
        assert live_client.call_tool("plain", {}) == "not json at all"
        assert live_client.call_tool("image", {}) == [{"type": "image", "data": "AAAA"}]
