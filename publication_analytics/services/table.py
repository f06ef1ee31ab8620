"""
Detailed table service for the dashboard.

The detailed table lists what the charts summarize:
- All-clients mode: one aggregated row per client (total, feed, stories,
  last generation instant, rounded feed/stories shares); records without a
  client are grouped under the unknown-client label
- Single-client mode: the raw publication records, newest first

Both views support a case-insensitive client-name search, a stable sort on
any column (missing values last), pagination, and CSV export through pandas.
"""

import logging
from math import ceil
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

import pandas as pd
from pydantic import BaseModel

from publication_analytics.models.enums import PublicationFormat, QueryMode, SortDirection
from publication_analytics.models.schemas import (
    ClientTableRow,
    DetailedTableResponse,
    PublicationRecord,
)
from publication_analytics.services.metrics import percent_of
from publication_analytics.services.vehicles import UNKNOWN_CLIENT_LABEL


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_PAGE_SIZE_ALL_CLIENTS: int = 20
DEFAULT_PAGE_SIZE_SINGLE_CLIENT: int = 50


def default_page_size(mode: QueryMode) -> int:
    if mode == QueryMode.SINGLE_CLIENT:
        return DEFAULT_PAGE_SIZE_SINGLE_CLIENT
    return DEFAULT_PAGE_SIZE_ALL_CLIENTS


# =============================================================================
# Search
# =============================================================================


def _matches_term(name: Optional[str], term: Optional[str]) -> bool:
    if term is None or not term.strip():
        return True
    return term.strip().lower() in (name or '').lower()


def search_records(
    records: Iterable[PublicationRecord],
    term: Optional[str]
) -> List[PublicationRecord]:
    """Records whose client name contains the term (case-insensitive)."""
    return [r for r in records if _matches_term(r.clientName, term)]


def search_rows(rows: Iterable[ClientTableRow], term: Optional[str]) -> List[ClientTableRow]:
    """Client rows whose name contains the term (case-insensitive)."""
    return [row for row in rows if _matches_term(row.client, term)]


# =============================================================================
# Aggregated Client Rows
# =============================================================================


def build_client_table(
    records: Sequence[PublicationRecord],
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL
) -> List[ClientTableRow]:
    """
    Aggregate records into one row per client, first-seen client order.

    Args:
        records: Filtered publication records.
        unknown_client_label: Row label for records with no client name.

    Returns:
        ClientTableRow list.
    """
    grouped = {}
    for record in records:
        name = record.clientName if record.clientName is not None else unknown_client_label
        entry = grouped.setdefault(name, {
            'total': 0,
            'feed': 0,
            'stories': 0,
            'lastGenerated': record.createdAt,
        })
        entry['total'] += 1
        kind = record.publication_format
        if kind is PublicationFormat.FEED:
            entry['feed'] += 1
        elif kind is PublicationFormat.STORIES:
            entry['stories'] += 1
        if record.createdAt > entry['lastGenerated']:
            entry['lastGenerated'] = record.createdAt

    return [
        ClientTableRow(
            client=name,
            total=entry['total'],
            feed=entry['feed'],
            stories=entry['stories'],
            lastGenerated=entry['lastGenerated'],
            percentFeed=percent_of(entry['feed'], entry['total']),
            percentStories=percent_of(entry['stories'], entry['total']),
        )
        for name, entry in grouped.items()
    ]


# =============================================================================
# Sorting and Pagination
# =============================================================================


def sort_items(
    items: Sequence[T],
    key: str,
    direction: SortDirection = SortDirection.ASC
) -> List[T]:
    """
    Stable sort of table items on one field; items missing the value go last.

    Raises:
        ValueError: If the field does not exist on the item model.
    """
    if not items:
        return []
    if key not in type(items[0]).model_fields:
        raise ValueError(f"Unknown sort column: {key}")

    present = [item for item in items if getattr(item, key) is not None]
    missing = [item for item in items if getattr(item, key) is None]
    present.sort(key=lambda item: getattr(item, key), reverse=direction == SortDirection.DESC)
    return present + missing


def paginate(items: Sequence[Any], page: int, page_size: int) -> Tuple[List[Any], int]:
    """
    Slice one page out of a list.

    Args:
        items: Full item list.
        page: 1-based page number (values below 1 are treated as 1).
        page_size: Items per page (at least 1).

    Returns:
        (page items, total pages)
    """
    page_size = max(page_size, 1)
    page = max(page, 1)
    total_pages = ceil(len(items) / page_size) if items else 0
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), total_pages


def table_items(
    records: Sequence[PublicationRecord],
    mode: QueryMode,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL
) -> List[Any]:
    """
    Full, unpaginated item list of the detailed table.

    Records are taken newest first before aggregation, so in all-clients mode
    the default row order is the order clients were most recently active.

    Returns:
        ClientTableRow list (all-clients) or PublicationRecord list
        (single-client).

    Raises:
        ValueError: If sort_by names an unknown column.
    """
    newest_first = sorted(records, key=lambda r: r.createdAt, reverse=True)

    if mode == QueryMode.SINGLE_CLIENT:
        items: List[Any] = search_records(newest_first, search)
    else:
        items = search_rows(build_client_table(newest_first, unknown_client_label), search)

    if sort_by:
        items = sort_items(items, sort_by, direction)
    return items


def build_detailed_table(
    records: Sequence[PublicationRecord],
    mode: QueryMode,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    page: int = 1,
    page_size: Optional[int] = None,
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL
) -> DetailedTableResponse:
    """
    Build one page of the detailed table for a filtered slice.

    Raises:
        ValueError: If sort_by names an unknown column.
    """
    page_size = page_size or default_page_size(mode)
    items = table_items(records, mode, search, sort_by, direction, unknown_client_label)
    page_items, total_pages = paginate(items, page, page_size)

    return DetailedTableResponse(
        mode=mode,
        page=max(page, 1),
        pageSize=page_size,
        totalItems=len(items),
        totalPages=total_pages,
        rows=page_items if mode == QueryMode.ALL_CLIENTS else [],
        records=page_items if mode == QueryMode.SINGLE_CLIENT else [],
    )


# =============================================================================
# CSV Export
# =============================================================================


def export_table_csv(items: Sequence[BaseModel], model: type = ClientTableRow) -> str:
    """
    Serialize table items to CSV text with a header row.

    Args:
        items: ClientTableRow or PublicationRecord items.
        model: Item model, used for the header when items is empty.

    Returns:
        CSV text.
    """
    columns = list(model.model_fields)
    df = pd.DataFrame(
        [item.model_dump(mode='json') for item in items],
        columns=columns,
    )
    logger.info(f"Exporting {len(df)} table rows to CSV")
    return df.to_csv(index=False)
