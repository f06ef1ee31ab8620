"""
Core infrastructure: settings and the publication log database pool.

    from publication_analytics.core import get_settings, execute_query

FastAPI dependencies are imported from publication_analytics.core.dependencies
directly. They build record sources and caches from the service layer, and
the service layer imports this package.
"""

from publication_analytics.core.config import Settings, get_settings
from publication_analytics.core.database import init_db, close_db, get_db_pool, execute_query


__all__ = [
    # Settings
    'Settings',
    'get_settings',
    # Pool lifecycle and queries
    'init_db',
    'close_db',
    'get_db_pool',
    'execute_query',
]
