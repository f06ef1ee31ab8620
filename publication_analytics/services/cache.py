"""
In-process TTL cache for dashboard responses and the client list.

Caching wraps the composer from the outside; the aggregators stay pure and
never see the cache.

Key composition:
- Dashboard key = SHA256 of the JSON-serialized normalized filter plus the
  options that change the result (bucket mode, ranking limit, unknown-client
  label, requested sections), first 32 hex chars
- Entries expire ttl_seconds after they are stored; ttl_seconds <= 0 disables
  the cache entirely
- Responses with any ERROR section are not stored
"""

import hashlib
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from publication_analytics.models.enums import SectionStatus
from publication_analytics.models.schemas import DashboardFilter, DashboardResponse
from publication_analytics.services.composer import AggregationOptions, build_dashboard
from publication_analytics.services.record_source import RecordSource


logger = logging.getLogger(__name__)

DashboardBuilder = Callable[
    [RecordSource, DashboardFilter, Optional[AggregationOptions]],
    Awaitable[DashboardResponse],
]


class TTLCache:
    """
    Small expiring key/value store.

    Args:
        ttl_seconds: Lifetime of an entry; <= 0 disables storage.
        max_entries: Oldest entries are evicted past this size.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


def make_dashboard_cache_key(
    dashboard_filter: DashboardFilter,
    options: AggregationOptions
) -> str:
    """
    Cache key for a dashboard computation.

    Two requests share a key only when they would produce the same sections.
    """
    payload = {
        'filter': dashboard_filter.model_dump(mode='json', by_alias=True),
        'bucket_mode': options.bucket_mode.value,
        'ranking_limit': options.ranking_limit,
        'unknown_client_label': options.unknown_client_label,
        'sections': [s.value for s in options.requested_sections(dashboard_filter.mode)],
    }
    encoded = json.dumps(payload, sort_keys=True).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()[:32]


def cached_dashboard(
    cache: TTLCache,
    builder: DashboardBuilder = build_dashboard
) -> DashboardBuilder:
    """
    Wrap a dashboard builder with the TTL cache.

    Hits are returned as copies flagged cached=True.

    Example:
        build = cached_dashboard(TTLCache(ttl_seconds=60))
        response = await build(source, dashboard_filter, options)
    """
    async def wrapper(
        source: RecordSource,
        dashboard_filter: DashboardFilter,
        options: Optional[AggregationOptions] = None
    ) -> DashboardResponse:
        options = options or AggregationOptions()
        if not cache.enabled:
            return await builder(source, dashboard_filter, options)

        key = make_dashboard_cache_key(dashboard_filter, options)
        hit = cache.get(key)
        if hit is not None:
            logger.debug(f"Dashboard cache hit {key}")
            return hit.model_copy(update={'cached': True})

        response = await builder(source, dashboard_filter, options)
        failed = any(
            response.section(section).status == SectionStatus.ERROR
            for section in options.requested_sections(dashboard_filter.mode)
        )
        if not failed:
            cache.set(key, response)
        return response

    return wrapper
