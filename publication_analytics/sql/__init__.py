"""
SQL Query Module for the publication analytics backend.

Provides parameterized SQL queries for reading the publication log
(publication_queries). Re-exported here so callers can import from
publication_analytics.sql directly.

Example usage:
    from publication_analytics.sql import get_publications_in_range_query

    sql = get_publications_in_range_query("publicacoes_design_online", with_client=True)
    rows = await conn.fetch(sql, range_start, range_end, "Auto Center Silva")
"""

from publication_analytics.sql.publication_queries import (
    get_publications_in_range_query,
    get_distinct_clients_query,
    DEFAULT_PUBLICATIONS_TABLE,
    PUBLICATION_COLUMNS,
)


__all__ = [
    'get_publications_in_range_query',
    'get_distinct_clients_query',
    'DEFAULT_PUBLICATIONS_TABLE',
    'PUBLICATION_COLUMNS',
]
