"""Airtable MCP client.

Wraps the Airtable MCP server's tools as plain methods. The server process is
started lazily on the first call and performs the MCP ``initialize``
handshake before any tool is used.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from typing import Any

import orjson

from airtable_manager.config.models import ServerSettings
from airtable_manager.services.mcp.transport import StdioJsonRpcTransport
from airtable_manager.shared.constants import MCPArgs, MCPProtocol, MCPTools
from airtable_manager.shared.errors import (
    create_config_error,
    create_remote_call_error,
)
from airtable_manager.shared.logging import log_operation_start, log_operation_success

logger = logging.getLogger(__name__)


class AirtableMCPClient:
    """Client for the Airtable MCP server.

    Every tool wrapper takes ids exactly as the server expects them; name
    resolution and caching live in ``AirtableService``.

    Args:
        settings: Server command, arguments and extra environment.
        transport: Transport to use instead of spawning ``settings.command``.
    """

    def __init__(
        self,
        settings: ServerSettings,
        transport: StdioJsonRpcTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._connected = False
        self.server_info: dict[str, Any] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    def _build_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.settings.env)
        return env

    def connect(self) -> None:
        """Start the server and perform the MCP handshake.

        Does nothing when already connected.

        Raises:
            ConfigurationError: If ``AIRTABLE_API_KEY`` is not set in the
                environment or in ``settings.env``. Checked before anything
                is spawned.
            RemoteCallError: If the server cannot be started or rejects the
                handshake.
        """
        if self._connected:
            return

        env = self._build_env()
        if not env.get(MCPProtocol.API_KEY_ENV):
            raise create_config_error(
                f"{MCPProtocol.API_KEY_ENV} environment variable is not set. "
                "Export it in your shell or add it to .env",
                config_key=MCPProtocol.API_KEY_ENV,
                operation="connect",
            )

        if self._transport is None:
            self._transport = StdioJsonRpcTransport(
                command=self.settings.command,
                args=self.settings.args,
                env=env,
                timeout_s=self.settings.timeout_s,
            )

        log_operation_start(logger, "connect", {"command": self.settings.command})
        start_time = time.perf_counter()

        self._transport.start()
        try:
            result = self._transport.request(
                MCPProtocol.METHOD_INITIALIZE,
                {
                    "protocolVersion": MCPProtocol.PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {
                        "name": MCPProtocol.CLIENT_NAME,
                        "version": MCPProtocol.CLIENT_VERSION,
                    },
                },
            )
            self._transport.notify(MCPProtocol.METHOD_INITIALIZED)
        except Exception:
            self._transport.close()
            raise

        self.server_info = result.get("serverInfo", {})
        self._connected = True
        log_operation_success(
            logger,
            "connect",
            (time.perf_counter() - start_time) * 1000,
            result_info={"server": str(self.server_info.get("name", ""))},
        )

    def disconnect(self) -> None:
        """Stop the server process if it was started."""
        if self._transport is not None:
            self._transport.close()
        self._connected = False

    def __enter__(self) -> AirtableMCPClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        self.connect()
        assert self._transport is not None
        return self._transport.request(method, params)

    def list_tools(self) -> list[dict[str, Any]]:
        """Return the tool definitions advertised by the server."""
        result = self._request(MCPProtocol.METHOD_TOOLS_LIST, {})
        tools = result.get("tools", [])
        return tools if isinstance(tools, list) else []

    def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Call one MCP tool and decode its result.

        The first text block of the result is decoded as JSON when possible
        and returned as a plain string otherwise. A result without text is
        returned as the raw content list.

        Raises:
            RemoteCallError: The tool reported ``isError``; the message is the
                first text block the server sent.
        """
        logger.debug("Calling MCP tool '%s'", name)
        result = self._request(
            MCPProtocol.METHOD_TOOLS_CALL,
            {"name": name, "arguments": arguments},
        )
        content = result.get("content") or []
        text = next(
            (
                block.get("text")
                for block in content
                if isinstance(block, dict) and block.get("type") == "text"
            ),
            None,
        )

        if result.get("isError"):
            raise create_remote_call_error(text or "Tool call failed", tool_name=name)

        if text:
            try:
                return orjson.loads(text)
            except orjson.JSONDecodeError:
                return text
        return content

    def list_bases(self) -> Any:
        return self.call_tool(MCPTools.LIST_BASES, {})

    def list_tables(self, base_id: str) -> Any:
        return self.call_tool(MCPTools.LIST_TABLES, {MCPArgs.BASE_ID: base_id})

    def describe_table(self, base_id: str, table_id: str) -> Any:
        return self.call_tool(
            MCPTools.DESCRIBE_TABLE,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id},
        )

    def list_records(
        self,
        base_id: str,
        table_id: str,
        max_records: int | None = None,
        filter_formula: str | None = None,
        view: str | None = None,
    ) -> Any:
        """List records; optional arguments are only sent when set."""
        args: dict[str, Any] = {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id}
        if max_records:
            args[MCPArgs.MAX_RECORDS] = max_records
        if filter_formula:
            args[MCPArgs.FILTER_BY_FORMULA] = filter_formula
        if view:
            args[MCPArgs.VIEW] = view
        return self.call_tool(MCPTools.LIST_RECORDS, args)

    def get_record(self, base_id: str, table_id: str, record_id: str) -> Any:
        return self.call_tool(
            MCPTools.GET_RECORD,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id, MCPArgs.RECORD_ID: record_id},
        )

    def search_records(self, base_id: str, table_id: str, term: str) -> Any:
        return self.call_tool(
            MCPTools.SEARCH_RECORDS,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id, MCPArgs.SEARCH_TERM: term},
        )

    def create_record(self, base_id: str, table_id: str, fields: dict[str, Any]) -> Any:
        return self.call_tool(
            MCPTools.CREATE_RECORD,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id, MCPArgs.FIELDS: fields},
        )

    def update_records(self, base_id: str, table_id: str, records: Sequence[dict[str, Any]]) -> Any:
        return self.call_tool(
            MCPTools.UPDATE_RECORDS,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id, MCPArgs.RECORDS: list(records)},
        )

    def delete_records(self, base_id: str, table_id: str, record_ids: Sequence[str]) -> Any:
        return self.call_tool(
            MCPTools.DELETE_RECORDS,
            {MCPArgs.BASE_ID: base_id, MCPArgs.TABLE_ID: table_id, MCPArgs.RECORD_IDS: list(record_ids)},
        )
