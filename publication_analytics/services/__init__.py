"""
Backend Services Module

Business logic for the publication dashboard. Every aggregator is a pure
function over an already-filtered, immutable slice of publication records;
only the record sources perform I/O.

Services:
- filters: Filter stage (normalization, validation, date presets, selection)
- grouping: Shared group / count / stable-rank primitive
- metrics: Totals and FEED / STORIES breakdown
- evolution: Sparse daily series
- ranking: Top-N client ranking
- distribution: Dense hourly and weekly histograms
- vehicles: Vehicle x client cross-tabulation and summary
- record_source: RecordSource interface, PostgreSQL / in-memory sources, CSV loader
- composer: Section policy, fan-out and composite response
- cache: TTL cache wrapped around the composer
- table: Detailed table, search, sort, pagination, CSV export

All services are designed to be consumed by the API layer (publication_analytics/api/).
"""

# =============================================================================
# Filter Stage Exports
# =============================================================================

from publication_analytics.services.filters import (
    apply_filter,
    get_date_range_from_preset,
    normalize_client_name,
    normalize_filter,
    record_matches,
    resolve_query_mode,
    validate_filter,
)

# =============================================================================
# Aggregator Exports
# =============================================================================

from publication_analytics.services.grouping import (
    count_by,
    count_nested,
    group_and_rank,
    rank_counts,
    top_entry,
)
from publication_analytics.services.metrics import (
    aggregate_metrics,
    percent_of,
    percent_of_1dp,
    round_half_up,
)
from publication_analytics.services.evolution import aggregate_evolution, day_key
from publication_analytics.services.ranking import RANKING_LIMIT, aggregate_ranking
from publication_analytics.services.distribution import (
    aggregate_hourly,
    aggregate_weekly,
    weekday_index,
)
from publication_analytics.services.vehicles import UNKNOWN_CLIENT_LABEL, aggregate_vehicles

# =============================================================================
# Record Source Exports
# =============================================================================

from publication_analytics.services.record_source import (
    InMemoryRecordSource,
    PostgresRecordSource,
    RecordSource,
    SourceUnavailableError,
    load_records_from_csv,
    record_from_row,
)

# =============================================================================
# Composer, Cache and Table Exports
# =============================================================================

from publication_analytics.services.composer import (
    AggregationOptions,
    build_aggregators,
    build_dashboard,
    build_section,
    compose_dashboard,
    run_section,
    sections_for_mode,
)
from publication_analytics.services.cache import (
    TTLCache,
    cached_dashboard,
    make_dashboard_cache_key,
)
from publication_analytics.services.table import (
    build_client_table,
    build_detailed_table,
    default_page_size,
    export_table_csv,
    paginate,
    search_records,
    search_rows,
    sort_items,
    table_items,
)


__all__ = [
    # ----- Filter Stage -----
    'apply_filter',
    'get_date_range_from_preset',
    'normalize_client_name',
    'normalize_filter',
    'record_matches',
    'resolve_query_mode',
    'validate_filter',
    # ----- Grouping -----
    'count_by',
    'count_nested',
    'group_and_rank',
    'rank_counts',
    'top_entry',
    # ----- Aggregators -----
    'aggregate_metrics',
    'percent_of',
    'percent_of_1dp',
    'round_half_up',
    'aggregate_evolution',
    'day_key',
    'RANKING_LIMIT',
    'aggregate_ranking',
    'aggregate_hourly',
    'aggregate_weekly',
    'weekday_index',
    'UNKNOWN_CLIENT_LABEL',
    'aggregate_vehicles',
    # ----- Record Sources -----
    'InMemoryRecordSource',
    'PostgresRecordSource',
    'RecordSource',
    'SourceUnavailableError',
    'load_records_from_csv',
    'record_from_row',
    # ----- Composer -----
    'AggregationOptions',
    'build_aggregators',
    'build_dashboard',
    'build_section',
    'compose_dashboard',
    'run_section',
    'sections_for_mode',
    # ----- Cache -----
    'TTLCache',
    'cached_dashboard',
    'make_dashboard_cache_key',
    # ----- Detailed Table -----
    'build_client_table',
    'build_detailed_table',
    'default_page_size',
    'export_table_csv',
    'paginate',
    'search_records',
    'search_rows',
    'sort_items',
    'table_items',
]
