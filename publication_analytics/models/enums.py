"""
Enumeration definitions for the publication analytics backend.

All enums inherit from both `str` and `Enum` so they serialize cleanly through
Pydantic models and FastAPI query parameters.

Source references:
- publicacoes_design_online.formato: FEED / STORIES
- Dashboard date filter quick ranges
- Dashboard query modes (all clients vs. a single selected client)
"""

from enum import Enum


class PublicationFormat(str, Enum):
    """
    Aspect-ratio class of a generated image.

    Values: 'FEED' | 'STORIES'

    - FEED: square post image
    - STORIES: vertical story image

    Records carrying any other format value are still counted in totals but
    are excluded from the feed/stories breakdown.
    """
    FEED = "FEED"
    STORIES = "STORIES"


class Weekday(str, Enum):
    """
    Fixed weekday labels for the weekly distribution, Sunday first.

    Declaration order is the bucket order of the weekly histogram.
    """
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"


class DayBucketMode(str, Enum):
    """
    How the evolution series derives a calendar day from a timestamp.

    - RECORD: date component of the timestamp as stored, in the record's own
      offset. No conversion.
    - UTC: normalize the timestamp to UTC first, then take the date.
    """
    RECORD = "record"
    UTC = "utc"


class QueryMode(str, Enum):
    """
    Dashboard query mode derived from the filter.

    - ALL_CLIENTS: no client selected; ranking runs, hourly/weekly are skipped
    - SINGLE_CLIENT: one client selected; hourly/weekly run, ranking is skipped
    """
    ALL_CLIENTS = "all_clients"
    SINGLE_CLIENT = "single_client"


class DashboardSection(str, Enum):
    """
    Independently computed sections of the dashboard response.
    """
    METRICS = "metrics"
    EVOLUTION = "evolution"
    RANKING = "ranking"
    HOURLY = "hourly"
    WEEKLY = "weekly"
    VEHICLES = "vehicles"


class SectionStatus(str, Enum):
    """
    Load state of a single dashboard section.

    - LOADING: not computed yet
    - READY: computed successfully, data attached
    - ERROR: the section failed; other sections are unaffected
    - SKIPPED: not computed for this query mode
    """
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    SKIPPED = "skipped"


class DateRangePreset(str, Enum):
    """
    Quick date ranges offered by the dashboard date filter.

    CUSTOM means the caller supplies explicit bounds.
    """
    TODAY = "today"
    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    THIS_YEAR = "this-year"
    CUSTOM = "custom"


class SortDirection(str, Enum):
    """Sort direction for the detailed table."""
    ASC = "asc"
    DESC = "desc"
