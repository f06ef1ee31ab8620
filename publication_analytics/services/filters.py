"""
Filter stage for the dashboard aggregation pipeline.

Normalizes and validates the dashboard filter (date range + optional client)
and selects the records a query covers. Also resolves the dashboard's quick
date-range presets.

Filter contract:
- A record matches when from <= createdAt <= to (both bounds inclusive) and,
  when a client is selected, clientName == selectedClient (exact,
  case-sensitive)
- An inverted range (from > to) matches nothing; it never raises
- validate_filter reports problems as FilterValidationError models and leaves
  the decision to reject to the caller (the API answers 422)

Date presets:
- today: start of today .. end of today
- last-7-days / last-30-days / last-3-months / last-6-months: now minus 7 /
  30 / 90 / 180 days .. end of today
- this-month / last-month / this-year: start .. end of that calendar period
- custom or unknown: today
"""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from publication_analytics.models.enums import DateRangePreset, QueryMode
from publication_analytics.models.schemas import (
    DashboardFilter,
    DateRange,
    FilterValidationError,
    PublicationRecord,
)


logger = logging.getLogger(__name__)

# Longest client name accepted from a request
MAX_CLIENT_NAME_LENGTH: int = 255

# Day offsets for the rolling presets
_ROLLING_PRESET_DAYS = {
    DateRangePreset.LAST_7_DAYS: 7,
    DateRangePreset.LAST_30_DAYS: 30,
    DateRangePreset.LAST_3_MONTHS: 90,
    DateRangePreset.LAST_6_MONTHS: 180,
}


# =============================================================================
# Date Range Presets
# =============================================================================


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def _month_bounds(year: int, month: int, like: datetime) -> Tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    start = _start_of_day(like.replace(year=year, month=month, day=1))
    end = _end_of_day(like.replace(year=year, month=month, day=last_day))
    return start, end


def get_date_range_from_preset(
    preset: DateRangePreset,
    now: Optional[datetime] = None
) -> DateRange:
    """
    Resolve a quick date-range preset to explicit bounds.

    Args:
        preset: Preset to resolve.
        now: Reference instant (default: current local time, timezone-aware).
            Bounds keep the offset of `now`.

    Rolling presets start at `now` truncated to the minute, so repeated
    requests within a minute resolve to the same range and share a cache key.

    Returns:
        DateRange with inclusive bounds.

    Example:
        >>> now = datetime(2026, 3, 14, 15, 0, tzinfo=timezone.utc)
        >>> rng = get_date_range_from_preset(DateRangePreset.LAST_7_DAYS, now)
        >>> rng.from_.isoformat(), rng.to.isoformat()
        ('2026-03-07T15:00:00+00:00', '2026-03-14T23:59:59.999999+00:00')
    """
    if now is None:
        now = datetime.now().astimezone()

    if preset in _ROLLING_PRESET_DAYS:
        days = _ROLLING_PRESET_DAYS[preset]
        start = now.replace(second=0, microsecond=0) - timedelta(days=days)
        return DateRange(from_=start, to=_end_of_day(now))

    if preset == DateRangePreset.THIS_MONTH:
        start, end = _month_bounds(now.year, now.month, now)
        return DateRange(from_=start, to=end)

    if preset == DateRangePreset.LAST_MONTH:
        year, month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
        start, end = _month_bounds(year, month, now)
        return DateRange(from_=start, to=end)

    if preset == DateRangePreset.THIS_YEAR:
        start = _start_of_day(now.replace(month=1, day=1))
        end = _end_of_day(now.replace(month=12, day=31))
        return DateRange(from_=start, to=end)

    # TODAY, CUSTOM and anything unrecognized
    return DateRange(from_=_start_of_day(now), to=_end_of_day(now))


# =============================================================================
# Normalization and Validation
# =============================================================================


def normalize_client_name(name: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace; blank names mean "all clients" (None)."""
    if name is None:
        return None
    stripped = name.strip()
    return stripped or None


def normalize_filter(dashboard_filter: DashboardFilter) -> DashboardFilter:
    """
    Return a copy of the filter with the selected client normalized.

    Args:
        dashboard_filter: Filter as received from the caller.

    Returns:
        DashboardFilter whose selectedClient is stripped, or None when blank.
    """
    client = normalize_client_name(dashboard_filter.selectedClient)
    if client == dashboard_filter.selectedClient:
        return dashboard_filter
    return dashboard_filter.model_copy(update={"selectedClient": client})


def validate_filter(dashboard_filter: DashboardFilter) -> List[FilterValidationError]:
    """
    Check a filter for problems without raising.

    Problems reported:
    - dateRange: from is after to
    - selectedClient: longer than MAX_CLIENT_NAME_LENGTH or contains control
      characters

    Args:
        dashboard_filter: Filter to check (normalize first).

    Returns:
        List of FilterValidationError; empty when the filter is usable.
    """
    errors: List[FilterValidationError] = []

    if dashboard_filter.dateRange.is_inverted:
        errors.append(FilterValidationError(
            field='dateRange',
            message=(
                f"Range start {dashboard_filter.dateRange.from_.isoformat()} is after "
                f"range end {dashboard_filter.dateRange.to.isoformat()}"
            ),
        ))

    client = dashboard_filter.selectedClient
    if client is not None:
        if len(client) > MAX_CLIENT_NAME_LENGTH:
            errors.append(FilterValidationError(
                field='selectedClient',
                message=f"Client name longer than {MAX_CLIENT_NAME_LENGTH} characters",
            ))
        if any(not ch.isprintable() for ch in client):
            errors.append(FilterValidationError(
                field='selectedClient',
                message="Client name contains control characters",
            ))

    if errors:
        logger.warning(f"Dashboard filter rejected with {len(errors)} problem(s)")

    return errors


def resolve_query_mode(dashboard_filter: DashboardFilter) -> QueryMode:
    """ALL_CLIENTS when no client is selected, SINGLE_CLIENT otherwise."""
    return dashboard_filter.mode


# =============================================================================
# Record Selection
# =============================================================================


def record_matches(record: PublicationRecord, dashboard_filter: DashboardFilter) -> bool:
    """
    Check a single record against the filter.

    Returns:
        True when createdAt is inside the inclusive range and the client
        matches (when one is selected).
    """
    date_range = dashboard_filter.dateRange
    if not (date_range.from_ <= record.createdAt <= date_range.to):
        return False
    if dashboard_filter.selectedClient is not None:
        return record.clientName == dashboard_filter.selectedClient
    return True


def apply_filter(
    records: Iterable[PublicationRecord],
    dashboard_filter: DashboardFilter
) -> Tuple[PublicationRecord, ...]:
    """
    Select the records a filter covers, in input order.

    The result is a tuple so every aggregator shares the same immutable
    slice. An inverted range yields an empty tuple.

    Args:
        records: Candidate records.
        dashboard_filter: Filter to apply.

    Returns:
        Tuple of matching records.
    """
    if dashboard_filter.dateRange.is_inverted:
        return ()
    return tuple(r for r in records if record_matches(r, dashboard_filter))
