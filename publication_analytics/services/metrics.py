"""
Metrics aggregation service for the dashboard metric cards.

Computes the total number of publications in the filtered slice and the
FEED / STORIES breakdown with rounded shares.

Rules:
- total = number of records in the slice (unknown formats included)
- feed / stories = records whose format is FEED / STORIES
- percentFeed = round_half_up(feed / total * 100); same for stories
- Both percentages are 0 when total is 0
- Percentages are rounded independently and need not sum to 100

The rounding helpers here are shared with the vehicle and table services.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Tuple, Union

from publication_analytics.models.enums import PublicationFormat
from publication_analytics.models.schemas import MetricStats, PublicationRecord


# =============================================================================
# Rounding Helpers
# =============================================================================


def round_half_up(value: Union[int, float, Decimal], digits: int = 0) -> Decimal:
    """
    Round half away from zero for positive values (0.5 -> 1, 2.45 -> 2.5).

    Python's built-in round() uses banker's rounding, which would turn
    62.5% into 62 instead of 63.

    Args:
        value: Number to round. Floats go through their shortest repr.
        digits: Decimal places to keep.

    Returns:
        Rounded Decimal.
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    quantum = Decimal(1).scaleb(-digits)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def percent_of(part: int, total: int) -> int:
    """
    Whole-number percentage of part in total, rounded half-up.

    Returns 0 when total is 0.

    Example:
        >>> percent_of(3, 5)
        60
        >>> percent_of(1, 0)
        0
    """
    if total <= 0:
        return 0
    return int(round_half_up(Decimal(part) * 100 / Decimal(total)))


def percent_of_1dp(part: int, total: int) -> float:
    """
    Percentage of part in total rounded half-up to one decimal place.

    Returns 0.0 when total is 0.

    Example:
        >>> percent_of_1dp(1, 3)
        33.3
    """
    if total <= 0:
        return 0.0
    return float(round_half_up(Decimal(part) * 100 / Decimal(total), digits=1))


# =============================================================================
# Format Counting
# =============================================================================


def count_formats(records: Sequence[PublicationRecord]) -> Tuple[int, int]:
    """
    Count FEED and STORIES records.

    Returns:
        (feed_count, stories_count); unknown formats are in neither.
    """
    feed = 0
    stories = 0
    for record in records:
        kind = record.publication_format
        if kind is PublicationFormat.FEED:
            feed += 1
        elif kind is PublicationFormat.STORIES:
            stories += 1
    return feed, stories


# =============================================================================
# Metrics Aggregator
# =============================================================================


def aggregate_metrics(records: Sequence[PublicationRecord]) -> MetricStats:
    """
    Build the metric card totals for a filtered slice.

    Args:
        records: Filtered publication records.

    Returns:
        MetricStats with total, feed, stories and rounded shares.

    Example:
        >>> stats = aggregate_metrics(records)  # 3 FEED + 2 STORIES
        >>> (stats.total, stats.percentFeed, stats.percentStories)
        (5, 60, 40)
    """
    total = len(records)
    feed, stories = count_formats(records)

    return MetricStats(
        total=total,
        feed=feed,
        stories=stories,
        percentFeed=percent_of(feed, total),
        percentStories=percent_of(stories, total),
    )
