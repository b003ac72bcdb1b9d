"""
Pytest configuration and fixtures for Radio Calico tests

Provides test database, Flask app, and HTTP client fixtures for testing
all components of the application.
"""

import pytest
import tempfile
import os

from radio_calico.database import SQLiteBackend, initialize_schema
from radio_calico.metadata import NowPlaying
from radio_calico.web import app as web_app, init_app


@pytest.fixture
def test_db_path():
    """Provide a temporary database file path"""
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)
    yield path
    # Cleanup (WAL/journal files included)
    for suffix in ('', '-journal', '-wal', '-shm'):
        try:
            os.unlink(path + suffix)
        except FileNotFoundError:
            pass


@pytest.fixture
def test_db(test_db_path):
    """Provide a SQLite backend with the schema initialized and no sample users

    The database is closed after the test.
    """
    db = SQLiteBackend(test_db_path)
    initialize_schema(db, seed_sample_users=False)

    yield db

    db.close()


@pytest.fixture
def now_playing():
    """Provide an empty NowPlaying snapshot"""
    return NowPlaying()


@pytest.fixture
def test_app(test_db, now_playing):
    """Provide the Flask app wired to the test database

    All routes are available and the database is isolated.
    """
    init_app(test_db, {'environment': 'test'}, now_playing=now_playing)
    web_app.config['TESTING'] = True

    yield web_app

    web_app.config['db'] = None
    web_app.config['now_playing'] = None


@pytest.fixture
def test_client(test_app):
    """Provide a Flask test client for making HTTP requests"""
    return test_app.test_client()


@pytest.fixture
def sample_users(test_db):
    """Create three listeners

    Returns the list of created ids, oldest first.
    """
    from radio_calico.database import crud

    ids = []
    for i in range(1, 4):
        result = crud.add_user(test_db, f'Listener {i}', f'listener{i}@example.com')
        ids.append(result.inserted_id)
    return ids


@pytest.fixture
def sample_ratings(test_db):
    """Five listeners rate song 's1': three up, two down

    Also stores one vote on another song so per-song counts can be checked.
    """
    from radio_calico.database import crud

    for i, rating in enumerate(['up', 'up', 'up', 'down', 'down'], start=1):
        crud.upsert_rating(test_db, 's1', f'user{i}', rating, artist='Artist', title='Song 1')
    crud.upsert_rating(test_db, 's2', 'user1', 'down')


# Test data helper functions
def create_test_vote_data(**overrides):
    """Create a valid POST /api/ratings body"""
    data = {
        'songId': 'dGVzdHNvbmc=',
        'artist': 'Test Artist',
        'title': 'Test Song',
        'userId': 'user123',
        'rating': 'up'
    }
    data.update(overrides)
    return data


def get_song_ratings(db, song_id):
    """Every stored rating row for a song, oldest first"""
    return db.query_rows(
        "SELECT id, song_id, artist, title, user_id, rating, created_at "
        "FROM ratings WHERE song_id = ? ORDER BY id",
        (song_id,)
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
