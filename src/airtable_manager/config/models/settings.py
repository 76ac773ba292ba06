"""Airtable Manager Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from airtable_manager.config.models.app_settings import LoggingSettings
from airtable_manager.config.models.cache_settings import CacheSettings
from airtable_manager.config.models.server_settings import ServerSettings


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Values come from ``AIRTABLE_MANAGER_*`` environment variables, then
    keyword arguments (a parsed TOML file), then defaults. Nested fields use
    ``__``, e.g. ``AIRTABLE_MANAGER_SERVER__DEFAULT_BASE``, and override a
    single key of a TOML section without replacing the rest of it.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIRTABLE_MANAGER_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    server: ServerSettings = Field(default_factory=ServerSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first, so it beats values read from the TOML file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""

        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)
