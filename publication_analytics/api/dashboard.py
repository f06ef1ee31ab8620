"""
FastAPI router module for the publication dashboard.

Every endpoint takes the same filter query parameters, normalizes and
validates them in one dependency, and reads the publication log through the
injected RecordSource.

Key Endpoints:
- GET /dashboard: Composite response, one status per section
- GET /dashboard/metrics: Totals and FEED / STORIES shares
- GET /dashboard/evolution: Daily FEED / STORIES series
- GET /dashboard/ranking: Top-N clients by volume
- GET /dashboard/hourly: 24 hour-of-day buckets
- GET /dashboard/weekly: 7 day-of-week buckets (Sunday first)
- GET /dashboard/vehicles: Vehicle x client analysis
- GET /dashboard/clients: Distinct client names (cached)
- GET /dashboard/table: Paginated detailed table
- GET /dashboard/table/export: Detailed table as CSV

Filter query parameters:
- from / to: ISO timestamps (inclusive); either may be omitted
- preset: quick range (today, last-7-days, ...); fills the omitted bounds
- client: exact client name; blank means all clients
- bucket_mode: record / utc day bucketing for the evolution series

Error mapping:
- Invalid filter -> 422 with the list of filter problems
- Record source failure -> per section in the composite endpoint, 503 elsewhere
- Unexpected failure -> 500
"""

import logging
from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from publication_analytics.core.dependencies import (
    ClientsCacheDep,
    DashboardCacheDep,
    RecordSourceDep,
    SettingsDep,
)
from publication_analytics.models.enums import (
    DashboardSection,
    DateRangePreset,
    DayBucketMode,
    QueryMode,
    SortDirection,
)
from publication_analytics.models.schemas import (
    ClientTableRow,
    DashboardFilter,
    DashboardResponse,
    DateRange,
    DetailedTableResponse,
    EvolutionPoint,
    HourBucket,
    MetricStats,
    PublicationRecord,
    RankingEntry,
    VehicleAnalysis,
    WeekBucket,
)
from publication_analytics.services.cache import cached_dashboard
from publication_analytics.services.composer import AggregationOptions, build_section
from publication_analytics.services.filters import (
    get_date_range_from_preset,
    normalize_filter,
    validate_filter,
)
from publication_analytics.services.record_source import RecordSource, SourceUnavailableError
from publication_analytics.services.table import (
    build_detailed_table,
    export_table_csv,
    table_items,
)


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

# Key of the single entry held by the client list cache
CLIENTS_CACHE_KEY = "clients"


# =============================================================================
# Request Dependencies
# =============================================================================

def get_dashboard_filter(
    settings: SettingsDep,
    from_: Optional[datetime] = Query(
        default=None,
        alias="from",
        description="Inclusive range start (ISO timestamp)"
    ),
    to: Optional[datetime] = Query(
        default=None,
        description="Inclusive range end (ISO timestamp)"
    ),
    preset: Optional[DateRangePreset] = Query(
        default=None,
        description="Quick date range; fills whichever bound is omitted"
    ),
    client: Optional[str] = Query(
        default=None,
        description="Exact client name; omit or leave blank for all clients"
    ),
) -> DashboardFilter:
    """
    Build, normalize and validate the dashboard filter from query parameters.

    Bounds that are not given explicitly come from the preset, or from the
    configured default preset when none is given.

    Raises:
        HTTPException 422: If the filter is invalid (e.g. from after to).
    """
    if from_ is None or to is None:
        fallback = get_date_range_from_preset(preset or settings.default_date_preset)
        from_ = from_ if from_ is not None else fallback.from_
        to = to if to is not None else fallback.to

    dashboard_filter = normalize_filter(DashboardFilter(
        dateRange=DateRange(from_=from_, to=to),
        selectedClient=client,
    ))

    errors = validate_filter(dashboard_filter)
    if errors:
        raise HTTPException(
            status_code=422,
            detail=[error.model_dump() for error in errors],
        )

    return dashboard_filter


def get_aggregation_options(
    settings: SettingsDep,
    bucket_mode: Optional[DayBucketMode] = Query(
        default=None,
        description="Day bucketing for the evolution series (default from settings)"
    ),
) -> AggregationOptions:
    """Aggregation options from settings, with the per-request bucket mode."""
    return AggregationOptions.from_settings(settings, bucket_mode=bucket_mode)


FilterDep = Annotated[DashboardFilter, Depends(get_dashboard_filter)]
OptionsDep = Annotated[AggregationOptions, Depends(get_aggregation_options)]


# =============================================================================
# Helper Functions
# =============================================================================

async def _single_view(
    source: RecordSource,
    dashboard_filter: DashboardFilter,
    section: DashboardSection,
    options: AggregationOptions
):
    """
    Run one aggregator for a single-view endpoint.

    Raises:
        HTTPException 503: If the record source is unavailable.
        HTTPException 500: If the aggregator fails.
    """
    try:
        return await build_section(source, dashboard_filter, section, options)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception(f"Error computing dashboard section '{section.value}'")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute {section.value}: {str(e)}"
        )


async def _fetch_records(
    source: RecordSource,
    dashboard_filter: DashboardFilter
) -> List[PublicationRecord]:
    try:
        return await source.fetch(dashboard_filter)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


# =============================================================================
# Composite Endpoint
# =============================================================================

@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
    cache: DashboardCacheDep,
) -> DashboardResponse:
    """
    Composite dashboard for one filter.

    Sections outside the query-mode policy come back SKIPPED. A record source
    failure is reported as ERROR on every requested section with HTTP 200.
    """
    logger.info(
        f"Building dashboard: mode={dashboard_filter.mode.value}, "
        f"client={dashboard_filter.selectedClient or 'all'}"
    )
    build = cached_dashboard(cache)
    return await build(source, dashboard_filter, options)


# =============================================================================
# Single-View Endpoints
# =============================================================================

@router.get("/metrics", response_model=MetricStats)
async def get_metrics(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> MetricStats:
    """Totals and FEED / STORIES percentages."""
    return await _single_view(source, dashboard_filter, DashboardSection.METRICS, options)


@router.get("/evolution", response_model=List[EvolutionPoint])
async def get_evolution(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> List[EvolutionPoint]:
    """Sparse daily series, ascending by date; days without records are omitted."""
    return await _single_view(source, dashboard_filter, DashboardSection.EVOLUTION, options)


@router.get("/ranking", response_model=List[RankingEntry])
async def get_ranking(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> List[RankingEntry]:
    return await _single_view(source, dashboard_filter, DashboardSection.RANKING, options)


@router.get("/hourly", response_model=List[HourBucket])
async def get_hourly(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> List[HourBucket]:
    return await _single_view(source, dashboard_filter, DashboardSection.HOURLY, options)


@router.get("/weekly", response_model=List[WeekBucket])
async def get_weekly(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> List[WeekBucket]:
    return await _single_view(source, dashboard_filter, DashboardSection.WEEKLY, options)


@router.get("/vehicles", response_model=VehicleAnalysis)
async def get_vehicles(
    dashboard_filter: FilterDep,
    options: OptionsDep,
    source: RecordSourceDep,
) -> VehicleAnalysis:
    """Vehicle stats, per-client vehicle diversity and the summary block."""
    return await _single_view(source, dashboard_filter, DashboardSection.VEHICLES, options)


# =============================================================================
# Client List
# =============================================================================

@router.get("/clients", response_model=List[str])
async def list_clients(
    source: RecordSourceDep,
    cache: ClientsCacheDep,
) -> List[str]:
    """Distinct non-empty client names, sorted; feeds the client selector."""
    cached = cache.get(CLIENTS_CACHE_KEY)
    if cached is not None:
        return cached

    try:
        clients = await source.fetch_clients()
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    cache.set(CLIENTS_CACHE_KEY, clients)
    logger.info(f"Listed {len(clients)} clients")
    return clients


# =============================================================================
# Detailed Table
# =============================================================================

@router.get("/table", response_model=DetailedTableResponse)
async def get_table(
    dashboard_filter: FilterDep,
    settings: SettingsDep,
    source: RecordSourceDep,
    search: Optional[str] = Query(default=None, description="Client name substring"),
    sort_by: Optional[str] = Query(default=None, description="Column to sort on"),
    direction: SortDirection = Query(default=SortDirection.ASC),
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, le=500),
) -> DetailedTableResponse:
    """
    Paginated detailed table.

    All-clients mode returns one aggregated row per client (default page size
    20); single-client mode returns the raw records (default page size 50).
    """
    records = await _fetch_records(source, dashboard_filter)

    try:
        return build_detailed_table(
            records,
            dashboard_filter.mode,
            search=search,
            sort_by=sort_by,
            direction=direction,
            page=page,
            page_size=page_size,
            unknown_client_label=settings.unknown_client_label,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/table/export")
async def export_table(
    dashboard_filter: FilterDep,
    settings: SettingsDep,
    source: RecordSourceDep,
    search: Optional[str] = Query(default=None, description="Client name substring"),
    sort_by: Optional[str] = Query(default=None, description="Column to sort on"),
    direction: SortDirection = Query(default=SortDirection.ASC),
) -> Response:
    """The full detailed table (no pagination) as a CSV download."""
    records = await _fetch_records(source, dashboard_filter)
    mode = dashboard_filter.mode

    try:
        items = table_items(
            records,
            mode,
            search=search,
            sort_by=sort_by,
            direction=direction,
            unknown_client_label=settings.unknown_client_label,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    model = PublicationRecord if mode == QueryMode.SINGLE_CLIENT else ClientTableRow
    filename = f"publications-{mode.value}.csv"
    return Response(
        content=export_table_csv(items, model=model),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
