"""
Record sources for the publication log.

The aggregation engine reads publications only through the narrow RecordSource
interface: given a dashboard filter, return a finite, already-materialized
list of PublicationRecord. Fetch failures surface as SourceUnavailableError
and are not retried here.

Implementations:
- PostgresRecordSource: asyncpg pool + parameterized SQL over the publication
  log table (publicacoes_design_online by default)
- InMemoryRecordSource: a fixed list of records, filtered by the filter stage;
  used for CSV exports and tests
- load_records_from_csv: pandas loader for exported publication logs

Row mapping (record_from_row):
    id -> id, created_at -> createdAt, nome_empresa -> clientName,
    formato -> format, veiculo_gerado -> vehicle, imagem -> imageUrl,
    descricao -> description, publicado -> published
"""

import asyncio
import io
import logging
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Iterable, List, Mapping, Optional, Union

import asyncpg
import numpy as np
import pandas as pd
from pydantic import ValidationError

from publication_analytics.core.database import execute_query
from publication_analytics.models.schemas import DashboardFilter, PublicationRecord
from publication_analytics.services.filters import apply_filter
from publication_analytics.sql.publication_queries import (
    DEFAULT_PUBLICATIONS_TABLE,
    PUBLICATION_COLUMNS,
    get_distinct_clients_query,
    get_publications_in_range_query,
)


logger = logging.getLogger(__name__)

# Columns a publication log export must carry
REQUIRED_CSV_COLUMNS: tuple = ("id", "created_at")

_TRUE_STRINGS = frozenset({"true", "t", "1", "yes", "y"})


class SourceUnavailableError(Exception):
    """The record source could not return data for the requested filter."""


# =============================================================================
# Row Mapping
# =============================================================================


def _clean_cell(value: Any) -> Any:
    """Map missing cells (None / NaN / pd.NA) to None."""
    if value is None or value is pd.NA:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def _as_bool(value: Any) -> bool:
    value = _clean_cell(value)
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_id(value: Any) -> Any:
    """Integer ids stay integers; any other id (uuid, text) becomes a string."""
    value = _clean_cell(value)
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    value = _clean_cell(value)
    if value is None:
        return None
    return str(value)


def record_from_row(row: Mapping[str, Any]) -> PublicationRecord:
    """
    Map a publication log row (database record or CSV row) to a record.

    Args:
        row: Mapping with the publication log column names.

    Returns:
        PublicationRecord with blank client/vehicle normalized to None and
        non-integer ids (e.g. uuid primary keys) as strings.

    Raises:
        pydantic.ValidationError: If id or created_at is missing or invalid.
    """
    return PublicationRecord(
        id=_as_id(row.get("id")),
        createdAt=_clean_cell(row.get("created_at")),
        clientName=_as_optional_str(row.get("nome_empresa")),
        format=_as_optional_str(row.get("formato")),
        vehicle=_as_optional_str(row.get("veiculo_gerado")),
        imageUrl=_as_optional_str(row.get("imagem")),
        description=_as_optional_str(row.get("descricao")),
        published=_as_bool(row.get("publicado")),
    )


# =============================================================================
# Record Source Interface
# =============================================================================


class RecordSource(ABC):
    """
    Read interface the aggregation engine depends on.

    fetch() must return a finite list; it may raise SourceUnavailableError.
    """

    @abstractmethod
    async def fetch(self, dashboard_filter: DashboardFilter) -> List[PublicationRecord]:
        """Return the records matching the filter."""

    @abstractmethod
    async def fetch_clients(self) -> List[str]:
        """Return the distinct non-empty client names, sorted."""


class InMemoryRecordSource(RecordSource):
    """
    Record source over a fixed, already-loaded list of records.

    Filtering goes through the same filter stage the engine uses.
    """

    def __init__(self, records: Iterable[PublicationRecord]):
        self._records = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    async def fetch(self, dashboard_filter: DashboardFilter) -> List[PublicationRecord]:
        return list(apply_filter(self._records, dashboard_filter))

    async def fetch_clients(self) -> List[str]:
        names = {r.clientName for r in self._records if r.clientName is not None}
        return sorted(names)


class PostgresRecordSource(RecordSource):
    """
    Record source backed by the publication log table in PostgreSQL.

    Uses the shared asyncpg pool from core.database. Driver and network
    failures are wrapped in SourceUnavailableError.

    Example:
        source = PostgresRecordSource(table="publicacoes_design_online")
        records = await source.fetch(dashboard_filter)
    """

    def __init__(self, table: str = DEFAULT_PUBLICATIONS_TABLE):
        self.table = table

    async def _fetch_rows(self, query: str, *args: Any) -> List[asyncpg.Record]:
        try:
            return await execute_query(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Publication log query on {self.table} failed: {e}")
            raise SourceUnavailableError(f"Publication log unavailable: {e}") from e

    async def fetch(self, dashboard_filter: DashboardFilter) -> List[PublicationRecord]:
        date_range = dashboard_filter.dateRange
        if date_range.is_inverted:
            return []

        client = dashboard_filter.selectedClient
        query = get_publications_in_range_query(self.table, with_client=client is not None)
        args: List[Any] = [date_range.from_, date_range.to]
        if client is not None:
            args.append(client)

        rows = await self._fetch_rows(query, *args)
        logger.info(
            f"Fetched {len(rows)} publications from {self.table} "
            f"(client={client or 'all'})"
        )
        try:
            return [record_from_row(row) for row in rows]
        except ValidationError as e:
            logger.warning(f"Publication log {self.table} returned an unreadable row: {e}")
            raise SourceUnavailableError(f"Publication log returned an invalid row: {e}") from e

    async def fetch_clients(self) -> List[str]:
        rows = await self._fetch_rows(get_distinct_clients_query(self.table))
        names = {row["nome_empresa"].strip() for row in rows if row["nome_empresa"]}
        return sorted(name for name in names if name)


# =============================================================================
# CSV Loading
# =============================================================================


def load_records_from_csv(
    file: Union[str, bytes, BinaryIO, io.StringIO]
) -> List[PublicationRecord]:
    """
    Load publication records from a CSV export of the publication log.

    Args:
        file: File path, raw CSV bytes, or a file-like object.

    Returns:
        List of PublicationRecord in file order.

    Raises:
        ValueError: If a required column (id, created_at) is missing.
        pydantic.ValidationError: If a row carries an invalid id or timestamp.
    """
    if isinstance(file, bytes):
        file = io.BytesIO(file)

    df = pd.read_csv(file, dtype=str)
    df.columns = df.columns.str.strip().str.lower()

    missing = [col for col in REQUIRED_CSV_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

    # Optional columns default to empty
    for col in PUBLICATION_COLUMNS:
        if col not in df.columns:
            df[col] = None

    # Cells are read as text so numeric-looking client or vehicle names keep
    # their spelling; the id goes back to numbers when every id is numeric
    numeric_ids = pd.to_numeric(df["id"], errors="coerce")
    if numeric_ids.notna().sum() == df["id"].notna().sum():
        df["id"] = numeric_ids

    records = [record_from_row(row) for row in df.to_dict(orient="records")]
    logger.info(f"Loaded {len(records)} publications from CSV")
    return records
