"""
Evolution aggregation service for the dashboard time-series chart.

Groups the filtered slice by calendar day and counts FEED / STORIES per day.

Rules:
- Series is sparse: only days with at least one record appear
- Points are ordered ascending by ISO date string (lexicographic == chronological)
- Feed / stories counters follow the metric card rules; unknown formats add
  a day bucket with zero counters

Day bucketing is explicit:
- DayBucketMode.RECORD: the timestamp's own date, no timezone conversion
  (2026-03-14T23:30-03:00 buckets on 2026-03-14)
- DayBucketMode.UTC: convert to UTC first
  (2026-03-14T23:30-03:00 buckets on 2026-03-15)
"""

from datetime import datetime, timezone
from typing import Dict, List, Sequence

from publication_analytics.models.enums import DayBucketMode, PublicationFormat
from publication_analytics.models.schemas import EvolutionPoint, PublicationRecord


def day_key(moment: datetime, mode: DayBucketMode = DayBucketMode.RECORD) -> str:
    """
    Calendar-day bucket key (YYYY-MM-DD) for a timestamp.

    Args:
        moment: Timestamp to bucket.
        mode: RECORD keeps the stored offset, UTC normalizes first.

    Returns:
        ISO date string.
    """
    if mode == DayBucketMode.UTC:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def aggregate_evolution(
    records: Sequence[PublicationRecord],
    bucket_mode: DayBucketMode = DayBucketMode.RECORD
) -> List[EvolutionPoint]:
    """
    Build the daily FEED / STORIES series for a filtered slice.

    Args:
        records: Filtered publication records.
        bucket_mode: How a timestamp maps to a calendar day.

    Returns:
        EvolutionPoint list, ascending by date, no duplicate dates.

    Example:
        >>> points = aggregate_evolution(records)  # 3 on day 1, 1 on day 2
        >>> [(p.date, p.feed + p.stories) for p in points]
        [('2026-03-01', 3), ('2026-03-02', 1)]
    """
    grouped: Dict[str, Dict[str, int]] = {}

    for record in records:
        key = day_key(record.createdAt, bucket_mode)
        bucket = grouped.setdefault(key, {'feed': 0, 'stories': 0})
        kind = record.publication_format
        if kind is PublicationFormat.FEED:
            bucket['feed'] += 1
        elif kind is PublicationFormat.STORIES:
            bucket['stories'] += 1

    return [
        EvolutionPoint(date=key, feed=counts['feed'], stories=counts['stories'])
        for key, counts in sorted(grouped.items())
    ]
