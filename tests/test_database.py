"""
Database operation tests

Tests the SQLite backend directly, the schema, CRUD/query helpers and the
PostgreSQL backend against a mocked psycopg pool.
"""

import sqlite3
import threading

import pytest
from datetime import datetime
from unittest.mock import MagicMock, patch

from radio_calico.database import (
    PostgresBackend, SQLiteBackend, UpsertResult, create_database, crud, queries
)
from radio_calico.database.schema import SAMPLE_USERS, populate_sample_users
from radio_calico.errors import StoreError


@pytest.mark.unit
class TestSQLiteBackend:
    """Test the SQLite backend capability set"""

    def test_insert_returns_id(self, test_db):
        first = test_db.insert('users', {'name': 'A', 'email': 'a@example.com'})
        second = test_db.insert('users', {'name': 'B', 'email': 'b@example.com'})

        assert first.inserted_id is not None
        assert second.inserted_id > first.inserted_id
        assert first.affected_rows == 1

    def test_query_rows_returns_dicts(self, test_db):
        test_db.insert('users', {'name': 'A', 'email': 'a@example.com'})

        rows = test_db.query_rows("SELECT name, email FROM users")
        assert rows == [{'name': 'A', 'email': 'a@example.com'}]

    def test_query_one_none(self, test_db):
        assert test_db.query_one("SELECT id FROM users WHERE id = ?", (1,)) is None

    def test_execute_affected_rows(self, test_db):
        test_db.insert('users', {'name': 'A', 'email': 'a@example.com'})

        assert test_db.execute("DELETE FROM users WHERE email = ?", ('a@example.com',)).affected_rows == 1
        assert test_db.execute("DELETE FROM users WHERE email = ?", ('a@example.com',)).affected_rows == 0

    def test_constraint_violation_is_store_error(self, test_db):
        test_db.insert('users', {'name': 'A', 'email': 'a@example.com'})

        with pytest.raises(StoreError):
            test_db.insert('users', {'name': 'B', 'email': 'a@example.com'})

    def test_check_constraint_on_rating(self, test_db):
        """The schema itself rejects ratings other than up/down"""
        with pytest.raises(StoreError):
            test_db.insert('ratings', {'song_id': 's1', 'user_id': 'u1', 'rating': 'meh'})

    def test_unique_pair_constraint(self, test_db):
        test_db.insert('ratings', {'song_id': 's1', 'user_id': 'u1', 'rating': 'up'})

        with pytest.raises(StoreError):
            test_db.insert('ratings', {'song_id': 's1', 'user_id': 'u1', 'rating': 'down'})

    def test_upsert_reports_insert_then_update(self, test_db):
        values = {'song_id': 's1', 'artist': None, 'title': None, 'user_id': 'u1', 'rating': 'up'}

        first = test_db.upsert('ratings', ('song_id', 'user_id'), values, ['rating'], ('created_at',))
        values['rating'] = 'down'
        second = test_db.upsert('ratings', ('song_id', 'user_id'), values, ['rating'], ('created_at',))

        assert first.inserted is True
        assert second.inserted is False
        assert second.row_id == first.row_id

    def test_close_allows_reconnect(self, test_db):
        test_db.close()

        # Next call opens a fresh connection
        assert test_db.query_rows("SELECT id FROM users") == []

    def test_threads_share_one_connection(self, test_db_path):
        """Short-lived threads never open more than one connection"""
        db = SQLiteBackend(test_db_path)
        errors = []

        def run_query():
            try:
                db.query_rows("SELECT 1")
            except StoreError as e:
                errors.append(e)

        with patch('radio_calico.database.backends.sqlite3.connect', wraps=sqlite3.connect) as mock_connect:
            threads = [threading.Thread(target=run_query) for _ in range(200)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        db.close()

        assert errors == []
        assert mock_connect.call_count == 1

    def test_schema_has_song_index(self, test_db):
        rows = test_db.query_rows(
            "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = 'ratings'"
        )
        assert 'idx_ratings_song_id' in [r['name'] for r in rows]


@pytest.mark.unit
class TestSchema:
    """Test schema creation and sample data"""

    def test_sample_users_seeded_once(self, test_db):
        assert populate_sample_users(test_db) == len(SAMPLE_USERS)
        assert populate_sample_users(test_db) == 0

        emails = sorted(u['email'] for u in queries.get_all_users(test_db))
        assert emails == sorted(email for _, email in SAMPLE_USERS)

    def test_create_database_sqlite(self, test_db_path):
        settings = {'database': {'backend': 'sqlite', 'sqlite_path': test_db_path}}
        db = create_database(settings)
        try:
            assert isinstance(db, SQLiteBackend)
            assert len(queries.get_all_users(db)) == len(SAMPLE_USERS)
        finally:
            db.close()

    def test_create_database_without_seed(self, test_db_path):
        settings = {'database': {'backend': 'sqlite', 'sqlite_path': test_db_path,
                                 'seed_sample_users': False}}
        db = create_database(settings)
        try:
            assert queries.get_all_users(db) == []
        finally:
            db.close()

    def test_create_database_unknown_backend(self):
        with pytest.raises(ValueError):
            create_database({'database': {'backend': 'mysql'}}, initialize=False)

    def test_create_database_postgres_not_connected_until_used(self):
        settings = {'database': {'backend': 'postgres', 'postgres': {'host': 'db', 'port': '5433'}}}
        db = create_database(settings, initialize=False)

        assert isinstance(db, PostgresBackend)
        assert db.host == 'db'
        assert db.port == 5433


@pytest.mark.unit
class TestCrudAndQueries:
    """Test the CRUD/query helpers used by the services"""

    def test_rating_counts(self, test_db, sample_ratings):
        assert queries.get_rating_counts(test_db, 's1') == {'up': 3, 'down': 2}
        assert queries.get_rating_counts(test_db, 'missing') == {}

    def test_user_rating(self, test_db, sample_ratings):
        assert queries.get_user_rating(test_db, 's1', 'user1') == 'up'
        assert queries.get_user_rating(test_db, 's1', 'nobody') is None

    def test_delete_user(self, test_db, sample_users):
        assert crud.delete_user(test_db, sample_users[0]) is True
        assert crud.delete_user(test_db, sample_users[0]) is False

    def test_created_at_format(self, test_db, sample_users):
        user = queries.get_user_by_id(test_db, sample_users[0])
        datetime.strptime(user['created_at'], '%Y-%m-%d %H:%M:%S')


def _mock_pg_cursor(description, rows):
    cursor = MagicMock()
    cursor.description = description
    cursor.fetchall.return_value = rows
    cursor.rowcount = len(rows)
    return cursor


@pytest.fixture
def mock_pool():
    """Patch the psycopg pool; yields (pool class mock, pooled connection mock)"""
    with patch('radio_calico.database.backends.ConnectionPool') as mock_pool_cls:
        conn = MagicMock()
        mock_pool_cls.return_value.connection.return_value.__enter__.return_value = conn
        yield mock_pool_cls, conn


@pytest.mark.unit
class TestPostgresBackend:
    """Test PostgresBackend statements against a mocked psycopg pool"""

    @pytest.fixture
    def pg(self):
        return PostgresBackend(host='db', dbname='radiocalico', user='u', password='p', pool_size=4)

    def test_pool_opened_on_first_use(self, pg, mock_pool):
        mock_pool_cls, conn = mock_pool
        conn.cursor.return_value = _mock_pg_cursor([('?column?',)], [(1,)])

        assert mock_pool_cls.call_count == 0
        pg.query_rows("SELECT 1")

        kwargs = mock_pool_cls.call_args.kwargs
        assert kwargs['kwargs']['autocommit'] is True
        assert kwargs['kwargs']['host'] == 'db'
        assert kwargs['kwargs']['dbname'] == 'radiocalico'
        assert kwargs['max_size'] == 4

    def test_upsert_single_statement(self, pg, mock_pool):
        _, conn = mock_pool
        cursor = _mock_pg_cursor([('id',), ('inserted',)], [(7, True)])
        conn.cursor.return_value = cursor

        result = pg.upsert(
            'ratings', ('song_id', 'user_id'),
            {'song_id': 's1', 'artist': None, 'title': None, 'user_id': 'u1', 'rating': 'up'},
            ['rating'], ('created_at',)
        )

        assert result == UpsertResult(7, True)
        assert cursor.execute.call_count == 1

        sql, params = cursor.execute.call_args.args
        assert 'ON CONFLICT (song_id, user_id)' in sql
        assert 'rating = excluded.rating' in sql
        assert 'created_at = CURRENT_TIMESTAMP' in sql
        assert '(xmax = 0) AS inserted' in sql
        assert '%s' in sql and '?' not in sql
        assert params == ('s1', None, None, 'u1', 'up')

    def test_upsert_update(self, pg, mock_pool):
        _, conn = mock_pool
        conn.cursor.return_value = _mock_pg_cursor([('id',), ('inserted',)], [(7, False)])

        result = pg.upsert('ratings', ('song_id', 'user_id'),
                           {'song_id': 's1', 'user_id': 'u1', 'rating': 'down'}, ['rating'])

        assert result.inserted is False

    def test_insert_returning_id(self, pg, mock_pool):
        _, conn = mock_pool
        cursor = _mock_pg_cursor([('id',)], [(42,)])
        conn.cursor.return_value = cursor

        result = pg.insert('users', {'name': 'A', 'email': 'a@example.com'})

        assert result.inserted_id == 42
        sql = cursor.execute.call_args.args[0]
        assert sql.endswith('RETURNING id')

    def test_datetimes_formatted(self, pg, mock_pool):
        _, conn = mock_pool
        conn.cursor.return_value = _mock_pg_cursor(
            [('id',), ('created_at',)], [(1, datetime(2025, 2, 6, 15, 30, 0))]
        )

        row = pg.query_one("SELECT id, created_at FROM users WHERE id = %s", (1,))

        assert row == {'id': 1, 'created_at': '2025-02-06 15:30:00'}

    def test_driver_error_is_store_error(self, pg, mock_pool):
        import psycopg

        _, conn = mock_pool
        cursor = MagicMock()
        cursor.execute.side_effect = psycopg.OperationalError('server closed the connection')
        conn.cursor.return_value = cursor

        with pytest.raises(StoreError):
            pg.query_rows("SELECT 1")

        cursor.close.assert_called_once()

    def test_connection_returned_after_each_statement(self, pg, mock_pool):
        """Short-lived threads borrow from one pool and give connections back"""
        mock_pool_cls, conn = mock_pool
        conn.cursor.return_value = _mock_pg_cursor([('?column?',)], [(1,)])

        threads = [threading.Thread(target=pg.query_rows, args=("SELECT 1",)) for _ in range(50)]
        for t in threads:
            t.start()
            t.join()

        pooled = mock_pool_cls.return_value.connection.return_value
        assert mock_pool_cls.call_count == 1
        assert pooled.__enter__.call_count == 50
        assert pooled.__exit__.call_count == 50

    def test_close_closes_pool(self, pg, mock_pool):
        mock_pool_cls, conn = mock_pool
        conn.cursor.return_value = _mock_pg_cursor([('?column?',)], [(1,)])
        pg.query_rows("SELECT 1")

        pg.close()

        mock_pool_cls.return_value.close.assert_called_once()
        assert pg.pool is None
