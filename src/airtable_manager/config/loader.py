"""Settings loader.

This module handles:
- Environment variable loading from .env files
- Configuration file discovery and loading from TOML
- Translating validation failures into ConfigurationError
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from airtable_manager.config.models.settings import Settings
from airtable_manager.shared.errors import ErrorCode, create_config_error

logger = logging.getLogger(__name__)

HOME_DIR = ".airtable-manager"


def default_config_paths() -> list[Path]:
    """Return the locations probed when no config path is given, in order."""
    return [
        Path("config.toml"),
        Path("config/config.toml"),
        Path.home() / HOME_DIR / "config.toml",
    ]


def _load_env_file(env_file: Path = Path(".env")) -> bool:
    """Load variables from ``env_file`` into the environment.

    Variables already set in the environment win over the file.

    Returns:
        True if the file existed and was loaded.
    """
    if not env_file.exists():
        return False
    loaded = load_dotenv(env_file, override=False)
    logger.debug("Loaded environment from %s", env_file)
    return loaded


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the first
            existing file among ``default_config_paths()`` is used, falling
            back to environment variables and defaults.

    Returns:
        Settings instance loaded from the selected source.

    Raises:
        ConfigurationError: If ``config_path`` does not exist
            (``MISSING_CONFIG``), or the file or environment holds invalid
            values (``INVALID_CONFIG``).
    """
    _load_env_file()

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise create_config_error(
                f"Configuration file not found: {path}",
                config_key="config_path",
                operation="load_settings",
            )
    else:
        path = next((p for p in default_config_paths() if p.exists()), None)

    try:
        if path is None:
            logger.debug("No configuration file found, using environment and defaults")
            return Settings()
        logger.debug("Loading configuration from %s", path)
        return Settings.from_toml_file(path)
    except toml.TomlDecodeError as e:
        raise create_config_error(
            f"Invalid TOML in {path}: {e}",
            config_key="config_path",
            operation="load_settings",
            original_error=e,
            code=ErrorCode.INVALID_CONFIG,
        ) from e
    except ValidationError as e:
        raise create_config_error(
            f"Invalid configuration: {e}",
            operation="load_settings",
            original_error=e,
            code=ErrorCode.INVALID_CONFIG,
        ) from e


__all__ = [
    "default_config_paths",
    "load_settings",
]
