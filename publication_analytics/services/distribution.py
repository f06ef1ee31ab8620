"""
Hourly and weekly distribution services.

Both histograms belong to the "single client selected" query mode and are
dense: every bucket is emitted even when its count is zero.

- Hourly: 24 buckets keyed by createdAt.hour, the hour as stored in the
  record's own offset (no conversion)
- Weekly: 7 buckets, Sunday first (Sunday, Monday, ..., Saturday), keyed by
  the weekday of createdAt as stored
"""

from datetime import datetime
from typing import List, Sequence

from publication_analytics.models.enums import Weekday
from publication_analytics.models.schemas import HourBucket, PublicationRecord, WeekBucket


HOURS_PER_DAY: int = 24

# Declaration order of Weekday is the bucket order
WEEKDAY_LABELS: tuple = tuple(day.value for day in Weekday)


def weekday_index(moment: datetime) -> int:
    """
    Sunday-first weekday index (Sunday=0 ... Saturday=6).

    datetime.weekday() is Monday-first, so it is shifted by one.
    """
    return (moment.weekday() + 1) % 7


def aggregate_hourly(records: Sequence[PublicationRecord]) -> List[HourBucket]:
    """
    Build the 24-bucket hour-of-day histogram.

    Args:
        records: Filtered publication records.

    Returns:
        Exactly 24 HourBucket entries, hour 0 to 23.
    """
    counts = [0] * HOURS_PER_DAY
    for record in records:
        counts[record.createdAt.hour] += 1
    return [HourBucket(hour=hour, count=count) for hour, count in enumerate(counts)]


def aggregate_weekly(records: Sequence[PublicationRecord]) -> List[WeekBucket]:
    """
    Build the 7-bucket day-of-week histogram, Sunday first.

    Args:
        records: Filtered publication records.

    Returns:
        Exactly 7 WeekBucket entries labelled Sunday through Saturday.
    """
    counts = [0] * len(WEEKDAY_LABELS)
    for record in records:
        counts[weekday_index(record.createdAt)] += 1
    return [WeekBucket(day=label, count=count) for label, count in zip(WEEKDAY_LABELS, counts)]
