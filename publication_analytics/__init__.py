"""
Publication Analytics Backend Package.

FastAPI service layer for the agency publication dashboard. Turns the raw log
of generated/posted images into the dashboard views: totals, daily evolution,
client ranking, hourly and weekly distribution, and vehicle analysis.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Filter stage, aggregators, record sources and the result composer
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
