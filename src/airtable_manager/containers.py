"""Dependency Injection container for Airtable Manager.

This module provides a centralized DI container using dependency-injector
so that every CLI run gets exactly one response cache, one name resolver,
one MCP client and one facade wired together explicitly.

The container manages:
- Settings (Singleton, overridable by the CLI after ``--config``)
- CacheStore and NameResolutionCache
- AirtableMCPClient
- AirtableService
"""

from __future__ import annotations

from dependency_injector import containers, providers

from airtable_manager.config.loader import load_settings
from airtable_manager.services import (
    AirtableMCPClient,
    AirtableService,
    CacheStore,
    NameResolutionCache,
)
from airtable_manager.shared.constants import IdPrefix


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for Airtable Manager services.

    Example:
        >>> container = Container()
        >>> container.settings.override(providers.Object(load_settings("config.toml")))
        >>> service = container.airtable_service()
        >>> service.list_tables()
    """

    # Configuration
    settings = providers.Singleton(load_settings)

    # Caches
    cache_store = providers.Singleton(
        CacheStore,
        namespace=providers.Callable(lambda s: s.cache.namespace, settings),
        default_ttl=providers.Callable(lambda s: s.cache.default_ttl, settings),
    )

    name_resolver = providers.Singleton(
        NameResolutionCache,
        id_prefix=providers.Object(IdPrefix.TABLE),
    )

    # MCP client
    mcp_client = providers.Singleton(
        AirtableMCPClient,
        settings=providers.Callable(lambda s: s.server, settings),
    )

    # Facade
    airtable_service = providers.Singleton(
        AirtableService,
        client=mcp_client,
        cache=cache_store,
        resolver=name_resolver,
        default_base=providers.Callable(lambda s: s.server.default_base, settings),
        structure_ttl=providers.Callable(lambda s: s.cache.structure_ttl, settings),
        records_ttl=providers.Callable(lambda s: s.cache.records_ttl, settings),
        search_ttl=providers.Callable(lambda s: s.cache.search_ttl, settings),
    )
