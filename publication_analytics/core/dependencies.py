"""
FastAPI dependency injection module for the publication analytics backend.

This module provides the reusable FastAPI dependencies the dashboard router
is built on. Endpoint handlers never construct infrastructure themselves, so
tests can swap any of it through app.dependency_overrides.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached Settings singleton
- get_record_source / RecordSourceDep: the publication log record source
- get_dashboard_cache / DashboardCacheDep: TTL cache for composite responses
- get_clients_cache / ClientsCacheDep: TTL cache for the client list
- reset_caches: drop both caches (tests, settings reload)

Usage Examples:
    @router.get("/clients")
    async def list_clients(
        source: RecordSourceDep,
        cache: ClientsCacheDep
    ) -> List[str]:
        return await source.fetch_clients()

    # In tests
    app.dependency_overrides[get_record_source] = lambda: InMemoryRecordSource(records)

See Also:
    - publication_analytics/core/config.py: Settings and environment variables
    - publication_analytics/services/record_source.py: RecordSource implementations
    - publication_analytics/api/dashboard.py: Endpoint handlers using these dependencies
"""

from typing import Annotated, Optional

from fastapi import Depends

from publication_analytics.core.config import Settings, get_settings
from publication_analytics.services.cache import TTLCache
from publication_analytics.services.record_source import PostgresRecordSource, RecordSource


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so FastAPI's dependency override
    mechanism can replace it in tests:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Record Source Dependency
# =============================================================================

def get_record_source(settings: SettingsDep) -> RecordSource:
    """
    Return the record source for the configured publication log table.

    PostgresRecordSource holds no connection itself; it borrows from the
    shared asyncpg pool on every fetch, so a new instance per request is cheap.
    """
    return PostgresRecordSource(table=settings.publications_table)


RecordSourceDep = Annotated[RecordSource, Depends(get_record_source)]


# =============================================================================
# Cache Dependencies
# =============================================================================

# Process-wide caches, created on first use with the TTLs from Settings
_dashboard_cache: Optional[TTLCache] = None
_clients_cache: Optional[TTLCache] = None


def get_dashboard_cache(settings: SettingsDep) -> TTLCache:
    """Return the composite dashboard cache (disabled when the TTL is 0)."""
    global _dashboard_cache

    if _dashboard_cache is None:
        _dashboard_cache = TTLCache(ttl_seconds=settings.dashboard_cache_ttl_seconds)

    return _dashboard_cache


def get_clients_cache(settings: SettingsDep) -> TTLCache:
    """Return the client list cache."""
    global _clients_cache

    if _clients_cache is None:
        _clients_cache = TTLCache(ttl_seconds=settings.clients_cache_ttl_seconds, max_entries=1)

    return _clients_cache


def reset_caches() -> None:
    """Forget both caches; the next request recreates them from Settings."""
    global _dashboard_cache, _clients_cache

    _dashboard_cache = None
    _clients_cache = None


DashboardCacheDep = Annotated[TTLCache, Depends(get_dashboard_cache)]
ClientsCacheDep = Annotated[TTLCache, Depends(get_clients_cache)]
