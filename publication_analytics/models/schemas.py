"""
Pydantic request/response models for the publication analytics backend.

This module provides type-safe data validation and serialization for the
publication record shape read from the record source, the dashboard filter,
and every derived view the dashboard consumes: metric totals, daily evolution,
client ranking, hourly and weekly distributions, and the vehicle analysis.

Source references:
- publicacoes_design_online table: id, created_at, nome_empresa, formato,
  veiculo_gerado, imagem, descricao, publicado
- Dashboard filter: date range + optional selected client
- Dashboard views: metric cards, evolution chart, client ranking, hourly
  distribution, weekly trend, vehicle analysis, detailed table

All models use Pydantic v2 syntax. Aggregate outputs are value types: they are
recomputed per request and never persisted.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from publication_analytics.models.enums import (
    DashboardSection,
    DayBucketMode,
    PublicationFormat,
    QueryMode,
    SectionStatus,
)


def _blank_to_none(value: Any) -> Any:
    """Normalize empty or whitespace-only strings to None."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive timestamps; aware timestamps are left untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Source Record
# =============================================================================


class PublicationRecord(BaseModel):
    """
    One logged image-generation/posting event.

    Source: publicacoes_design_online row

    The record is immutable; aggregators only read it. Absence of a client
    name or a vehicle is a first-class state: empty or blank strings are
    normalized to None at construction so aggregation never relies on
    truthiness checks of raw strings.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1842,
                "createdAt": "2026-03-14T10:32:00-03:00",
                "clientName": "Auto Center Silva",
                "format": "FEED",
                "vehicle": "Onix Plus 2026",
                "imageUrl": "https://cdn.example.com/images/1842.png",
                "description": "Oferta da semana",
                "published": False
            }
        }
    )

    id: Union[int, str] = Field(
        ...,
        description="Opaque unique identifier"
    )
    createdAt: datetime = Field(
        ...,
        description="Instant the image was generated (timezone-aware)"
    )
    clientName: Optional[str] = Field(
        default=None,
        description="End-client name; None when absent"
    )
    format: Optional[str] = Field(
        default=None,
        description="Raw format value (FEED, STORIES or anything else)"
    )
    vehicle: Optional[str] = Field(
        default=None,
        description="Advertisement vehicle tag; None when absent"
    )
    imageUrl: Optional[str] = Field(
        default=None,
        description="Public URL of the generated image"
    )
    description: Optional[str] = Field(
        default=None,
        description="Post caption"
    )
    published: bool = Field(
        default=False,
        description="Whether the image was already posted"
    )

    @field_validator("clientName", "vehicle", mode="before")
    @classmethod
    def _normalize_optional_name(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("createdAt")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return _ensure_aware(value)

    @property
    def publication_format(self) -> Optional[PublicationFormat]:
        """Recognized format, or None for unknown/absent values."""
        try:
            return PublicationFormat(self.format)
        except ValueError:
            return None


# =============================================================================
# Filter Models
# =============================================================================


class DateRange(BaseModel):
    """
    Inclusive date range applied to createdAt.

    Both bounds are inclusive. The model does not enforce from <= to; the
    filter stage validates, and the engine returns empty results for an
    inverted range.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: datetime = Field(
        ...,
        alias="from",
        description="Inclusive lower bound"
    )
    to: datetime = Field(
        ...,
        description="Inclusive upper bound"
    )

    @field_validator("from_", "to")
    @classmethod
    def _normalize_bounds(cls, value: datetime) -> datetime:
        return _ensure_aware(value)

    @property
    def is_inverted(self) -> bool:
        return self.from_ > self.to


class DashboardFilter(BaseModel):
    """
    Dashboard query filter.

    selectedClient = None means "all clients".
    """
    model_config = ConfigDict(frozen=True)

    dateRange: DateRange = Field(
        ...,
        description="Inclusive createdAt range"
    )
    selectedClient: Optional[str] = Field(
        default=None,
        description="Exact (case-sensitive) client name, or None for all clients"
    )

    @property
    def mode(self) -> QueryMode:
        if self.selectedClient is None:
            return QueryMode.ALL_CLIENTS
        return QueryMode.SINGLE_CLIENT


class FilterValidationError(BaseModel):
    """
    Validation problem found in a dashboard filter.

    The filter stage reports problems as a list instead of raising.
    """
    field: str = Field(
        ...,
        description="Filter field with the problem"
    )
    message: str = Field(
        ...,
        description="Human readable description"
    )


# =============================================================================
# Aggregate Outputs
# =============================================================================


class MetricStats(BaseModel):
    """
    Totals and format breakdown for the metric cards.

    Percentages are rounded half-up independently and are 0 when total is 0.
    Unknown formats count in total only, so feed + stories may be < total.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 5,
                "feed": 3,
                "stories": 2,
                "percentFeed": 60,
                "percentStories": 40
            }
        }
    )

    total: int = Field(..., ge=0, description="Number of records in the slice")
    feed: int = Field(..., ge=0, description="Records with format FEED")
    stories: int = Field(..., ge=0, description="Records with format STORIES")
    percentFeed: int = Field(..., ge=0, le=100, description="Rounded FEED share")
    percentStories: int = Field(..., ge=0, le=100, description="Rounded STORIES share")


class EvolutionPoint(BaseModel):
    """One day of the evolution chart (sparse series, ascending by date)."""
    date: str = Field(..., description="Calendar day, YYYY-MM-DD")
    feed: int = Field(default=0, ge=0)
    stories: int = Field(default=0, ge=0)


class RankingEntry(BaseModel):
    """One client of the ranking (descending by total, stable ties)."""
    name: str = Field(..., description="Client name")
    total: int = Field(..., ge=0, description="Images generated in the range")


class HourBucket(BaseModel):
    """One hour-of-day bucket; the hourly series always has 24 of them."""
    hour: int = Field(..., ge=0, le=23)
    count: int = Field(default=0, ge=0)


class WeekBucket(BaseModel):
    """One weekday bucket; the weekly series always has 7, Sunday first."""
    day: str = Field(..., description="Weekday label")
    count: int = Field(default=0, ge=0)


class VehicleStat(BaseModel):
    """
    Per-vehicle statistics.

    percentOfTotal is rounded half-up to one decimal. topClient is the client
    with most images for the vehicle, first-seen client on ties.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "vehicle": "SUV",
                "totalImages": 4,
                "percentOfTotal": 80.0,
                "topClient": "clientA"
            }
        }
    )

    vehicle: str
    totalImages: int = Field(..., ge=0)
    percentOfTotal: float = Field(..., ge=0.0, le=100.0)
    topClient: str


class ClientVehicleStat(BaseModel):
    """Per-client vehicle usage, descending by totalImages."""
    clientName: str
    uniqueVehicleCount: int = Field(..., ge=0)
    totalImages: int = Field(..., ge=0)


class NamedCount(BaseModel):
    """A named extreme of the vehicle summary."""
    name: str
    count: int = Field(..., ge=0)


class VehicleSummary(BaseModel):
    """
    Summary cards of the vehicle analysis.

    Every extreme is None when there are no records with a vehicle.
    """
    totalVehicles: int = Field(default=0, ge=0)
    totalImages: int = Field(default=0, ge=0)
    mostImages: Optional[NamedCount] = None
    leastImages: Optional[NamedCount] = None
    mostActiveClient: Optional[NamedCount] = None


class VehicleAnalysis(BaseModel):
    """Vehicle aggregation output: summary, per-vehicle and per-client stats."""
    summary: VehicleSummary = Field(default_factory=VehicleSummary)
    stats: List[VehicleStat] = Field(default_factory=list)
    clientStats: List[ClientVehicleStat] = Field(default_factory=list)


# =============================================================================
# Composite Response
# =============================================================================


class SectionResult(BaseModel):
    """
    Independently reported state of one dashboard section.

    data holds the section's view (MetricStats, list of EvolutionPoint, ...)
    when status is READY; error holds a message when status is ERROR.
    """
    section: DashboardSection
    status: SectionStatus = SectionStatus.LOADING
    data: Optional[Any] = None
    error: Optional[str] = None


class DashboardResponse(BaseModel):
    """
    Composite dashboard response for one filter.

    Every section is computed from the same fetched slice and carries its own
    status so one failing section never hides the others.
    """
    filter: DashboardFilter
    mode: QueryMode
    dayBucketMode: DayBucketMode
    recordCount: int = Field(default=0, ge=0)
    generatedAt: datetime
    cached: bool = False
    metrics: SectionResult
    evolution: SectionResult
    ranking: SectionResult
    hourly: SectionResult
    weekly: SectionResult
    vehicles: SectionResult

    def section(self, name: DashboardSection) -> SectionResult:
        return getattr(self, name.value)


# =============================================================================
# Detailed Table
# =============================================================================


class ClientTableRow(BaseModel):
    """
    Aggregated detailed-table row for the all-clients view.

    Source: dashboard detailed table "All Clients" aggregation
    """
    client: str
    total: int = Field(..., ge=0)
    feed: int = Field(..., ge=0)
    stories: int = Field(..., ge=0)
    lastGenerated: datetime
    percentFeed: int = Field(..., ge=0, le=100)
    percentStories: int = Field(..., ge=0, le=100)


class DetailedTableResponse(BaseModel):
    """
    Paginated detailed table.

    In all-clients mode rows holds one aggregated row per client; in
    single-client mode records holds the raw publication records.
    """
    mode: QueryMode
    page: int = Field(..., ge=1)
    pageSize: int = Field(..., ge=1)
    totalItems: int = Field(..., ge=0)
    totalPages: int = Field(..., ge=0)
    rows: List[ClientTableRow] = Field(default_factory=list)
    records: List[PublicationRecord] = Field(default_factory=list)
