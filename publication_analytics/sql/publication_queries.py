"""
Publication Queries Module.

Provides parameterized PostgreSQL queries for reading the publication log.
The record source fetches one materialized slice per dashboard request and
all aggregation happens in Python over that slice, so these queries only
select rows; they never group.

Columns read from the publication log:
- id, created_at, nome_empresa (client), formato (FEED/STORIES),
  veiculo_gerado (vehicle), imagem (image URL), descricao, publicado

This module follows the Repository Pattern for clean separation between
business logic and data access.
"""

import re


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_PUBLICATIONS_TABLE: str = "publicacoes_design_online"

# Column list shared by every record query, in record_from_row order
PUBLICATION_COLUMNS: tuple = (
    "id",
    "created_at",
    "nome_empresa",
    "formato",
    "veiculo_gerado",
    "imagem",
    "descricao",
    "publicado",
)

# Plain or schema-qualified identifier
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def _checked_table(table: str) -> str:
    """
    Validate a table identifier before it is interpolated into SQL.

    Raises:
        ValueError: If the identifier is not a plain or schema-qualified name.
    """
    if not _IDENTIFIER_PATTERN.match(table):
        raise ValueError(f"Invalid table identifier: {table!r}")
    return table


# =============================================================================
# RECORD QUERIES
# =============================================================================

def get_publications_in_range_query(
    table: str = DEFAULT_PUBLICATIONS_TABLE,
    with_client: bool = False
) -> str:
    """
    Generate SQL to fetch publication records inside an inclusive date range.

    Parameters:
        $1: range start (timestamptz, inclusive)
        $2: range end (timestamptz, inclusive)
        $3: client name, exact match (only when with_client is True)

    Args:
        table: Publication log table name.
        with_client: Add the exact client-name predicate.

    Returns:
        Parameterized PostgreSQL query string ordered by created_at ascending.
    """
    columns = ",\n        ".join(PUBLICATION_COLUMNS)
    client_clause = "\n      AND nome_empresa = $3" if with_client else ""
    return f"""
    SELECT
        {columns}
    FROM {_checked_table(table)}
    WHERE created_at >= $1
      AND created_at <= $2{client_clause}
    ORDER BY created_at ASC, id ASC
    """


def get_distinct_clients_query(table: str = DEFAULT_PUBLICATIONS_TABLE) -> str:
    """
    Generate SQL listing distinct non-empty client names, sorted.

    Args:
        table: Publication log table name.

    Returns:
        PostgreSQL query string with a single nome_empresa column.
    """
    return f"""
    SELECT DISTINCT nome_empresa
    FROM {_checked_table(table)}
    WHERE nome_empresa IS NOT NULL
      AND btrim(nome_empresa) <> ''
    ORDER BY nome_empresa ASC
    """
