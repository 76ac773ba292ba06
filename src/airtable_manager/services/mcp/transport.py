"""Stdio transport for MCP JSON-RPC calls.

The Airtable MCP server runs as a child process and speaks newline-delimited
JSON-RPC 2.0 on its stdin/stdout. A reader thread drains stdout into a queue
so that each request can wait for its response with a timeout.
"""

from __future__ import annotations

import itertools
import logging
import queue
import subprocess
import threading
import time
from collections.abc import Mapping, Sequence
from typing import IO, Any

import orjson

from airtable_manager.shared.constants import MCPProtocol
from airtable_manager.shared.errors import (
    ErrorCode,
    ErrorContext,
    RemoteCallError,
    RemoteProtocolError,
)

logger = logging.getLogger(__name__)

_EOF = None


class StdioJsonRpcTransport:
    """Newline-delimited JSON-RPC client over a child process's stdio.

    Args:
        command: Executable that starts the server.
        args: Arguments passed to ``command``.
        env: Full environment for the child process (None inherits ours).
        timeout_s: Seconds to wait for each response.
    """

    def __init__(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Mapping[str, str] | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        self.command = command
        self.args = list(args)
        self.env = dict(env) if env is not None else None
        self.timeout_s = timeout_s
        self._process: subprocess.Popen[bytes] | None = None
        self._lines: queue.Queue[bytes | None] = queue.Queue()
        self._reader: threading.Thread | None = None
        self._ids = itertools.count(1)
        self._write_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """Spawn the server process and start draining its stdout."""
        if self._process is not None:
            return

        logger.debug("Starting MCP server: %s %s", self.command, " ".join(self.args))
        try:
            self._process = subprocess.Popen(
                [self.command, *self.args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=None if logger.isEnabledFor(logging.DEBUG) else subprocess.DEVNULL,
                env=self.env,
            )
        except OSError as e:
            raise RemoteCallError(
                ErrorCode.REMOTE_CONNECTION_FAILED,
                f"Failed to start MCP server '{self.command}': {e}",
                ErrorContext(operation="start_transport", additional_data={"command": self.command}),
                original_error=e,
            ) from e

        self._lines = queue.Queue()
        self._reader = threading.Thread(
            target=self._drain_stdout,
            args=(self._process.stdout, self._lines),
            name="mcp-stdout-reader",
            daemon=True,
        )
        self._reader.start()

    @staticmethod
    def _drain_stdout(stream: IO[bytes], lines: queue.Queue[bytes | None]) -> None:
        for line in iter(stream.readline, b""):
            if line.strip():
                lines.put(line)
        lines.put(_EOF)

    def _send(self, message: dict[str, Any]) -> None:
        if self._process is None or self._process.stdin is None:
            raise RemoteCallError(
                ErrorCode.REMOTE_CONNECTION_FAILED,
                "MCP transport is not started",
                ErrorContext(operation="send", additional_data={"method": message.get("method", "")}),
            )
        payload = orjson.dumps(message) + b"\n"
        try:
            with self._write_lock:
                self._process.stdin.write(payload)
                self._process.stdin.flush()
        except (BrokenPipeError, OSError, ValueError) as e:
            raise RemoteCallError(
                ErrorCode.REMOTE_CONNECTION_FAILED,
                f"MCP server '{self.command}' closed its input: {e}",
                ErrorContext(operation="send", additional_data={"method": message.get("method", "")}),
                original_error=e,
            ) from e

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification (no response expected)."""
        message: dict[str, Any] = {"jsonrpc": MCPProtocol.JSONRPC_VERSION, "method": method}
        if params is not None:
            message["params"] = params
        self._send(message)

    def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a request and wait for the matching response.

        Server notifications and responses to other ids are skipped.

        Returns:
            The response's ``result`` object.

        Raises:
            RemoteCallError: The server answered with an ``error`` object, or
                did not answer within ``timeout_s`` (``API_TIMEOUT``).
            RemoteProtocolError: The server closed stdout, or sent a line
                that is not a JSON-RPC envelope.
        """
        request_id = next(self._ids)
        self._send(
            {
                "jsonrpc": MCPProtocol.JSONRPC_VERSION,
                "id": request_id,
                "method": method,
                "params": params or {},
            }
        )

        deadline = time.monotonic() + self.timeout_s
        while True:
            message = self._next_message(method, deadline)
            if "method" in message or message.get("id") != request_id:
                logger.debug("Skipping unrelated MCP message: %s", message.get("method", message.get("id")))
                continue
            return self._unwrap(method, message)

    def _next_message(self, method: str, deadline: float) -> dict[str, Any]:
        remaining = deadline - time.monotonic()
        try:
            line = self._lines.get(timeout=max(remaining, 0))
        except queue.Empty as e:
            raise RemoteCallError(
                ErrorCode.API_TIMEOUT,
                f"MCP server '{self.command}' did not answer '{method}' within {self.timeout_s}s",
                ErrorContext(operation="request", additional_data={"method": method}),
                original_error=e,
            ) from e

        if line is _EOF:
            raise RemoteProtocolError(
                ErrorCode.REMOTE_PROTOCOL_ERROR,
                f"MCP server '{self.command}' closed the connection during '{method}'",
                ErrorContext(operation="request", additional_data={"method": method}),
            )

        try:
            decoded = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            raise RemoteProtocolError(
                ErrorCode.REMOTE_PROTOCOL_ERROR,
                f"Invalid JSON from MCP server '{self.command}'",
                ErrorContext(operation="request", additional_data={"method": method}),
                original_error=e,
            ) from e

        if not isinstance(decoded, dict):
            raise RemoteProtocolError(
                ErrorCode.REMOTE_PROTOCOL_ERROR,
                f"Invalid JSON-RPC envelope from MCP server '{self.command}'",
                ErrorContext(operation="request", additional_data={"method": method}),
            )
        return decoded

    def _unwrap(self, method: str, message: dict[str, Any]) -> dict[str, Any]:
        err = message.get("error")
        if isinstance(err, dict):
            detail = err.get("message") if isinstance(err.get("message"), str) else ""
            raise RemoteCallError(
                ErrorCode.REMOTE_CALL_FAILED,
                f"MCP method '{method}' failed: {detail or err}",
                ErrorContext(
                    operation="request",
                    additional_data={"method": method, "rpc_code": str(err.get("code", ""))},
                ),
            )

        result = message.get("result")
        if not isinstance(result, dict):
            raise RemoteProtocolError(
                ErrorCode.REMOTE_PROTOCOL_ERROR,
                f"Missing JSON-RPC result object for '{method}'",
                ErrorContext(operation="request", additional_data={"method": method}),
            )
        return result

    def close(self) -> None:
        """Close stdin and wait for the server to exit, killing it if needed."""
        process, self._process = self._process, None
        if process is None:
            return

        if process.stdin is not None:
            try:
                process.stdin.close()
            except OSError:
                logger.debug("MCP server stdin already closed")
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.debug("MCP server did not exit, terminating")
            process.kill()
            process.wait()
        if process.stdout is not None:
            process.stdout.close()
        if self._reader is not None:
            self._reader.join(timeout=1)
            self._reader = None
        logger.debug("MCP server stopped (exit code %s)", process.returncode)

    def __enter__(self) -> StdioJsonRpcTransport:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
