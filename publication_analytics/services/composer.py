"""
Result composer for the publication dashboard.

Fetches one slice per query, fans the aggregators out over that shared
immutable slice, and bundles every result into a single DashboardResponse in
which each section reports its own status.

Section policy (which aggregators run per query mode):
- ALL_CLIENTS: metrics, evolution, ranking, vehicles
- SINGLE_CLIENT: metrics, evolution, hourly, weekly, vehicles
Sections outside the policy (or outside an explicit subset) are SKIPPED.

Failure isolation:
- An aggregator that raises marks only its own section as ERROR
- A SourceUnavailableError while fetching marks every requested section as
  ERROR; nothing is retried here

Concurrency:
- Aggregators are pure functions over a tuple of frozen records, so they can
  run concurrently (asyncio.to_thread fan-out, joined with asyncio.gather) or
  sequentially with identical results
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from publication_analytics.core.config import Settings
from publication_analytics.models.enums import (
    DashboardSection,
    DayBucketMode,
    QueryMode,
    SectionStatus,
)
from publication_analytics.models.schemas import (
    DashboardFilter,
    DashboardResponse,
    PublicationRecord,
    SectionResult,
)
from publication_analytics.services.distribution import aggregate_hourly, aggregate_weekly
from publication_analytics.services.evolution import aggregate_evolution
from publication_analytics.services.metrics import aggregate_metrics
from publication_analytics.services.ranking import RANKING_LIMIT, aggregate_ranking
from publication_analytics.services.record_source import RecordSource, SourceUnavailableError
from publication_analytics.services.vehicles import UNKNOWN_CLIENT_LABEL, aggregate_vehicles


logger = logging.getLogger(__name__)

AggregatorFn = Callable[[Sequence[PublicationRecord]], Any]


# =============================================================================
# Section Policy
# =============================================================================

MODE_SECTIONS: Dict[QueryMode, Tuple[DashboardSection, ...]] = {
    QueryMode.ALL_CLIENTS: (
        DashboardSection.METRICS,
        DashboardSection.EVOLUTION,
        DashboardSection.RANKING,
        DashboardSection.VEHICLES,
    ),
    QueryMode.SINGLE_CLIENT: (
        DashboardSection.METRICS,
        DashboardSection.EVOLUTION,
        DashboardSection.HOURLY,
        DashboardSection.WEEKLY,
        DashboardSection.VEHICLES,
    ),
}


def sections_for_mode(mode: QueryMode) -> Tuple[DashboardSection, ...]:
    """Sections computed by default for a query mode."""
    return MODE_SECTIONS[mode]


@dataclass(frozen=True)
class AggregationOptions:
    """
    Knobs for one dashboard computation.

    Attributes:
        bucket_mode: Day bucketing for the evolution series.
        ranking_limit: Top-N cut of the client ranking.
        unknown_client_label: Client label for vehicle records with no client.
        sections: Explicit subset of sections to run; None applies the
            query-mode policy.
        concurrent: Fan aggregators out over worker threads.
    """
    bucket_mode: DayBucketMode = DayBucketMode.RECORD
    ranking_limit: int = RANKING_LIMIT
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL
    sections: Optional[Tuple[DashboardSection, ...]] = None
    concurrent: bool = True

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "AggregationOptions":
        """Build options from application settings, with per-request overrides."""
        values = {
            'bucket_mode': settings.day_bucket_mode,
            'ranking_limit': settings.ranking_limit,
            'unknown_client_label': settings.unknown_client_label,
            'concurrent': settings.concurrent_aggregation,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def requested_sections(self, mode: QueryMode) -> Tuple[DashboardSection, ...]:
        if self.sections is not None:
            return tuple(self.sections)
        return sections_for_mode(mode)


def build_aggregators(options: AggregationOptions) -> Dict[DashboardSection, AggregatorFn]:
    """
    Bind every aggregator to the options, keyed by section.

    Each value is a one-argument callable taking the filtered slice, so any
    subset can be invoked independently.
    """
    return {
        DashboardSection.METRICS: aggregate_metrics,
        DashboardSection.EVOLUTION: partial(aggregate_evolution, bucket_mode=options.bucket_mode),
        DashboardSection.RANKING: partial(aggregate_ranking, limit=options.ranking_limit),
        DashboardSection.HOURLY: aggregate_hourly,
        DashboardSection.WEEKLY: aggregate_weekly,
        DashboardSection.VEHICLES: partial(
            aggregate_vehicles,
            unknown_client_label=options.unknown_client_label,
        ),
    }


# =============================================================================
# Section Execution
# =============================================================================


def run_section(
    section: DashboardSection,
    aggregator: AggregatorFn,
    records: Sequence[PublicationRecord]
) -> SectionResult:
    """
    Run one aggregator and tag the outcome.

    Returns:
        SectionResult with status READY and data, or ERROR and a message.
    """
    try:
        data = aggregator(records)
    except Exception as e:
        logger.exception(f"Dashboard section '{section.value}' failed")
        return SectionResult(
            section=section,
            status=SectionStatus.ERROR,
            error=str(e) or e.__class__.__name__,
        )
    return SectionResult(section=section, status=SectionStatus.READY, data=data)


def _assemble(
    dashboard_filter: DashboardFilter,
    options: AggregationOptions,
    record_count: int,
    results: Iterable[SectionResult]
) -> DashboardResponse:
    by_section = {result.section: result for result in results}
    sections = {
        section.value: by_section.get(
            section,
            SectionResult(section=section, status=SectionStatus.SKIPPED),
        )
        for section in DashboardSection
    }
    return DashboardResponse(
        filter=dashboard_filter,
        mode=dashboard_filter.mode,
        dayBucketMode=options.bucket_mode,
        recordCount=record_count,
        generatedAt=datetime.now(timezone.utc),
        **sections,
    )


def compose_dashboard(
    records: Sequence[PublicationRecord],
    dashboard_filter: DashboardFilter,
    options: Optional[AggregationOptions] = None
) -> DashboardResponse:
    """
    Run the requested aggregators sequentially over an already-filtered slice.

    Args:
        records: Filtered slice (filter stage output).
        dashboard_filter: Filter the slice was produced with.
        options: Aggregation options (defaults when None).

    Returns:
        DashboardResponse with one SectionResult per section.
    """
    options = options or AggregationOptions()
    shared = tuple(records)
    aggregators = build_aggregators(options)

    results = [
        run_section(section, aggregators[section], shared)
        for section in options.requested_sections(dashboard_filter.mode)
    ]
    return _assemble(dashboard_filter, options, len(shared), results)


async def build_dashboard(
    source: RecordSource,
    dashboard_filter: DashboardFilter,
    options: Optional[AggregationOptions] = None
) -> DashboardResponse:
    """
    Fetch one slice from the record source and compose the dashboard.

    The slice is fetched once and shared by every aggregator, so all sections
    of one response describe the same snapshot.

    Args:
        source: Record source to read from.
        dashboard_filter: Normalized, validated filter.
        options: Aggregation options (defaults when None).

    Returns:
        DashboardResponse. Source failures are reported per section, never
        raised.
    """
    options = options or AggregationOptions()
    requested = options.requested_sections(dashboard_filter.mode)

    try:
        records = tuple(await source.fetch(dashboard_filter))
    except SourceUnavailableError as e:
        logger.warning(f"Dashboard fetch failed for mode {dashboard_filter.mode.value}: {e}")
        failed = [
            SectionResult(section=section, status=SectionStatus.ERROR, error=str(e))
            for section in requested
        ]
        return _assemble(dashboard_filter, options, 0, failed)

    aggregators = build_aggregators(options)

    if options.concurrent:
        results: List[SectionResult] = list(await asyncio.gather(*(
            asyncio.to_thread(run_section, section, aggregators[section], records)
            for section in requested
        )))
    else:
        results = [run_section(section, aggregators[section], records) for section in requested]

    logger.info(
        f"Dashboard built: mode={dashboard_filter.mode.value}, records={len(records)}, "
        f"sections={','.join(s.value for s in requested)}"
    )
    return _assemble(dashboard_filter, options, len(records), results)


async def build_section(
    source: RecordSource,
    dashboard_filter: DashboardFilter,
    section: DashboardSection,
    options: Optional[AggregationOptions] = None
) -> Any:
    """
    Fetch a slice and run a single aggregator, outside the mode policy.

    Raises:
        SourceUnavailableError: If the record source fails.
    """
    options = options or AggregationOptions()
    records = tuple(await source.fetch(dashboard_filter))
    return build_aggregators(options)[section](records)
