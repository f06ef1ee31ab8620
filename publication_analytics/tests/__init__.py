'''
Publication Analytics Test Suite

Test Modules:
-------------
- test_filters.py: Filter stage (presets, normalization, validation, selection)
- test_grouping.py: Shared group / count / stable-rank primitive
- test_aggregators.py: Metrics, evolution, ranking, hourly and weekly aggregation
- test_vehicles.py: Vehicle x client analysis and its empty-slice contract
- test_composer.py: Section policy, fan-out and failure isolation
- test_cache.py: TTL cache and the cached dashboard builder
- test_record_source.py: PostgreSQL / in-memory sources and the CSV loader
- test_table.py: Detailed table, search, sort, pagination and CSV export
- test_api.py: FastAPI endpoints through TestClient

Running Tests:
--------------
    pytest publication_analytics/tests/ -v
    pytest publication_analytics/tests/ -m scenario
'''
