"""MCP server configuration model.

This module contains the configuration for launching the Airtable MCP
server and the base used when a command does not name one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from airtable_manager.shared.constants import ServerDefaults


class ServerSettings(BaseModel):
    """Airtable MCP server configuration.

    Security: values in ``env`` (which may carry AIRTABLE_API_KEY) are masked
    in ``__repr__`` so they never reach logs.
    """

    command: str = Field(default=ServerDefaults.COMMAND, description="Executable that starts the MCP server")
    args: list[str] = Field(
        default_factory=lambda: list(ServerDefaults.ARGS),
        description="Arguments passed to the server command",
    )
    env: dict[str, str] = Field(
        default_factory=dict,
        repr=False,
        description="Extra environment variables for the server process",
    )
    default_base: str = Field(default="", description="Base ID used when a command omits --base")
    timeout_s: float = Field(
        default=ServerDefaults.TIMEOUT_S,
        gt=0,
        description="Seconds to wait for each server response",
    )

    def __repr__(self) -> str:
        masked_env = {key: "****" for key in self.env}
        return (
            f"ServerSettings("
            f"command={self.command!r}, "
            f"args={self.args!r}, "
            f"env={masked_env!r}, "
            f"default_base={self.default_base!r}, "
            f"timeout_s={self.timeout_s})"
        )


__all__ = ["ServerSettings"]
