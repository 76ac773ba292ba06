"""Logging-related constants."""


class Logging:
    """Logging configuration constants."""

    DEFAULT_LEVEL = "WARNING"
    LOGGER_NAME = "airtable_manager"
    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DATE_FORMAT = "[%H:%M:%S]"


__all__ = ["Logging"]
