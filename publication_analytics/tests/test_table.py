"""
Test Module for the detailed table service.

Validates:
- Per-client aggregation (totals, feed/stories shares, last generation)
- Case-insensitive client search
- Stable column sort with missing values last, unknown columns rejected
- Pagination bounds and per-mode default page sizes
- CSV export header and rows
"""

import io
from datetime import timedelta
from typing import List

import pandas as pd
import pytest

from publication_analytics.models import (
    ClientTableRow,
    PublicationRecord,
    QueryMode,
    SortDirection,
)
from publication_analytics.services.table import (
    DEFAULT_PAGE_SIZE_ALL_CLIENTS,
    DEFAULT_PAGE_SIZE_SINGLE_CLIENT,
    build_client_table,
    build_detailed_table,
    export_table_csv,
    paginate,
    search_records,
    sort_items,
    table_items,
)
from publication_analytics.tests.conftest import BASE_TIME


@pytest.fixture
def march_records(mixed_records: List[PublicationRecord]) -> List[PublicationRecord]:
    """The seven mixed records that fall in March."""
    return [r for r in mixed_records if r.createdAt.month == 3]


@pytest.fixture
def loja_records(march_records: List[PublicationRecord]) -> List[PublicationRecord]:
    return [r for r in march_records if r.clientName == "Loja Centro"]


# =============================================================================
# CLIENT ROWS
# =============================================================================

class TestBuildClientTable:
    def test_rows_in_first_seen_order(self, march_records) -> None:
        rows = build_client_table(march_records)

        assert [row.client for row in rows] == ["Loja Centro", "Auto Silva", "Unknown", "Padaria Sol"]

    def test_counts_and_shares(self, march_records) -> None:
        rows = {row.client: row for row in build_client_table(march_records)}

        loja = rows["Loja Centro"]
        assert (loja.total, loja.feed, loja.stories) == (3, 2, 1)
        assert (loja.percentFeed, loja.percentStories) == (67, 33)

        # REELS counts towards the total only
        auto = rows["Auto Silva"]
        assert (auto.total, auto.feed, auto.stories) == (2, 1, 0)
        assert (auto.percentFeed, auto.percentStories) == (50, 0)

    def test_last_generated_is_latest_record(self, march_records) -> None:
        rows = {row.client: row for row in build_client_table(march_records)}

        assert rows["Loja Centro"].lastGenerated == BASE_TIME + timedelta(days=3)
        assert rows["Padaria Sol"].lastGenerated == BASE_TIME + timedelta(days=5, hours=14)

    def test_custom_unknown_label(self, march_records) -> None:
        rows = build_client_table(march_records, unknown_client_label="Sem cliente")

        assert "Sem cliente" in [row.client for row in rows]

    def test_empty_input(self) -> None:
        assert build_client_table([]) == []


# =============================================================================
# SEARCH
# =============================================================================

class TestSearch:
    def test_case_insensitive_substring(self, march_records) -> None:
        found = search_records(march_records, "LOJA")

        assert len(found) == 3
        assert all(r.clientName == "Loja Centro" for r in found)

    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_blank_term_matches_everything(self, march_records, term) -> None:
        assert search_records(march_records, term) == march_records

    def test_records_without_client_never_match_a_term(self, march_records) -> None:
        assert all(r.clientName is not None for r in search_records(march_records, "a"))


# =============================================================================
# SORTING AND PAGINATION
# =============================================================================

class TestSortItems:
    def test_sort_is_stable(self, march_records) -> None:
        rows = build_client_table(march_records)

        ordered = sort_items(rows, "total", SortDirection.DESC)

        assert [row.client for row in ordered] == ["Loja Centro", "Auto Silva", "Unknown", "Padaria Sol"]

    def test_ascending(self, march_records) -> None:
        ordered = sort_items(build_client_table(march_records), "client")

        assert [row.client for row in ordered] == ["Auto Silva", "Loja Centro", "Padaria Sol", "Unknown"]

    @pytest.mark.parametrize("direction", [SortDirection.ASC, SortDirection.DESC])
    def test_missing_values_go_last(self, march_records, direction) -> None:
        ordered = sort_items(march_records, "vehicle", direction)

        vehicles = [r.vehicle for r in ordered]
        assert vehicles[-2:] == [None, None]
        assert None not in vehicles[:-2]

    def test_unknown_column(self, march_records) -> None:
        with pytest.raises(ValueError, match="Unknown sort column: nope"):
            sort_items(march_records, "nope")

    def test_empty_list(self) -> None:
        assert sort_items([], "anything") == []


class TestPaginate:
    @pytest.mark.parametrize("page, expected_items", [
        (1, [0, 1, 2]),
        (3, [6]),
        (4, []),
        (0, [0, 1, 2]),
    ])
    def test_pages(self, page, expected_items) -> None:
        items, total_pages = paginate(list(range(7)), page, 3)

        assert items == expected_items
        assert total_pages == 3

    def test_empty(self) -> None:
        assert paginate([], 1, 20) == ([], 0)

    def test_page_size_floor(self) -> None:
        items, total_pages = paginate([1, 2], 1, 0)

        assert items == [1]
        assert total_pages == 2


# =============================================================================
# DETAILED TABLE
# =============================================================================

class TestDetailedTable:
    def test_all_clients_rows_most_recent_first(self, march_records) -> None:
        table = build_detailed_table(march_records, QueryMode.ALL_CLIENTS)

        assert table.pageSize == DEFAULT_PAGE_SIZE_ALL_CLIENTS
        assert table.totalItems == 4
        assert table.totalPages == 1
        assert table.records == []
        assert [row.client for row in table.rows] == ["Padaria Sol", "Loja Centro", "Auto Silva", "Unknown"]

    def test_single_client_records_newest_first(self, loja_records) -> None:
        table = build_detailed_table(loja_records, QueryMode.SINGLE_CLIENT)

        assert table.pageSize == DEFAULT_PAGE_SIZE_SINGLE_CLIENT
        assert table.rows == []
        created = [r.createdAt for r in table.records]
        assert created == sorted(created, reverse=True)
        assert len(created) == 3

    def test_search_sort_and_page(self, march_records) -> None:
        table = build_detailed_table(
            march_records,
            QueryMode.ALL_CLIENTS,
            search="a",
            sort_by="total",
            direction=SortDirection.DESC,
            page=2,
            page_size=2,
        )

        # "Unknown" does not contain "a"
        assert table.totalItems == 3
        assert table.totalPages == 2
        assert [row.client for row in table.rows] == ["Padaria Sol"]

    def test_unknown_sort_column(self, march_records) -> None:
        with pytest.raises(ValueError):
            build_detailed_table(march_records, QueryMode.ALL_CLIENTS, sort_by="vehicle")

    def test_table_items_is_unpaginated(self, march_records) -> None:
        items = table_items(march_records, QueryMode.SINGLE_CLIENT)

        assert len(items) == len(march_records)
        assert isinstance(items[0], PublicationRecord)


# =============================================================================
# CSV EXPORT
# =============================================================================

class TestExportCsv:
    def test_client_rows(self, march_records) -> None:
        csv_text = export_table_csv(build_client_table(march_records))

        df = pd.read_csv(io.StringIO(csv_text))
        assert list(df.columns) == list(ClientTableRow.model_fields)
        assert df["client"].tolist() == ["Loja Centro", "Auto Silva", "Unknown", "Padaria Sol"]
        assert df["total"].tolist() == [3, 2, 1, 1]

    def test_records(self, loja_records) -> None:
        csv_text = export_table_csv(loja_records, model=PublicationRecord)

        df = pd.read_csv(io.StringIO(csv_text))
        assert list(df.columns) == list(PublicationRecord.model_fields)
        assert len(df) == 3

    def test_empty_export_keeps_header(self) -> None:
        csv_text = export_table_csv([])

        assert csv_text.strip() == ",".join(ClientTableRow.model_fields)
