"""
Radio Calico Test Suite

Test Files:
- conftest.py: Pytest fixtures and configuration
- test_database.py: Store backends, schema, CRUD and queries
- test_ratings.py: RatingService (upsert semantics, aggregates, validation)
- test_directory.py: DirectoryService
- test_api.py: HTTP endpoints and status codes
- test_metadata.py: Now-playing fetch/parse and poller
- test_settings.py: Settings file and environment overrides

Running Tests:
    # Run all tests
    pytest

    # Run specific test file
    pytest tests/test_ratings.py

    # Run only unit tests
    pytest -m unit

    # Skip slow tests
    pytest -m "not slow"
"""
