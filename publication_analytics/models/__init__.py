"""
Package initialization file for backend models.

Re-exports all Pydantic schemas and enumerations from schemas.py and enums.py
so other modules can import them from publication_analytics.models directly.

Usage:
    from publication_analytics.models import (
        PublicationRecord,
        DashboardFilter,
        MetricStats,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from publication_analytics.models.enums import (
    PublicationFormat,
    Weekday,
    DayBucketMode,
    QueryMode,
    DashboardSection,
    SectionStatus,
    DateRangePreset,
    SortDirection,
)


# =============================================================================
# Schemas
# =============================================================================

from publication_analytics.models.schemas import (
    # -------------------------------------------------------------------------
    # Source record and filter
    # -------------------------------------------------------------------------
    PublicationRecord,
    DateRange,
    DashboardFilter,
    FilterValidationError,

    # -------------------------------------------------------------------------
    # Aggregate outputs
    # -------------------------------------------------------------------------
    MetricStats,
    EvolutionPoint,
    RankingEntry,
    HourBucket,
    WeekBucket,
    VehicleStat,
    ClientVehicleStat,
    NamedCount,
    VehicleSummary,
    VehicleAnalysis,

    # -------------------------------------------------------------------------
    # Composite response
    # -------------------------------------------------------------------------
    SectionResult,
    DashboardResponse,

    # -------------------------------------------------------------------------
    # Detailed table
    # -------------------------------------------------------------------------
    ClientTableRow,
    DetailedTableResponse,
)


__all__ = [
    # Enums
    "PublicationFormat",
    "Weekday",
    "DayBucketMode",
    "QueryMode",
    "DashboardSection",
    "SectionStatus",
    "DateRangePreset",
    "SortDirection",

    # Source record and filter
    "PublicationRecord",
    "DateRange",
    "DashboardFilter",
    "FilterValidationError",

    # Aggregate outputs
    "MetricStats",
    "EvolutionPoint",
    "RankingEntry",
    "HourBucket",
    "WeekBucket",
    "VehicleStat",
    "ClientVehicleStat",
    "NamedCount",
    "VehicleSummary",
    "VehicleAnalysis",

    # Composite response
    "SectionResult",
    "DashboardResponse",

    # Detailed table
    "ClientTableRow",
    "DetailedTableResponse",
]
