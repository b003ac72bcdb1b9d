"""
Store backends for Radio Calico

Two implementations of one DatabaseBackend interface:
- SQLiteBackend: file-backed SQLite (development, tests)
- PostgresBackend: PostgreSQL through a psycopg connection pool (production)

The backend is chosen once at startup (see radio_calico.database.create_database)
and call sites never branch on which one they hold. Each backend exposes its
native parameter marker as `placeholder`; SQL is written with that marker when
the statement is built.

Connections are held by the backend, not by request threads: SQLite shares one
connection behind a lock, PostgreSQL borrows from a bounded pool for the length
of one statement. Driver exceptions are re-raised as StoreError so the services
only ever see one failure type.
"""

import logging
import sqlite3
import threading
from collections import namedtuple
from contextlib import contextmanager
from datetime import datetime

import psycopg
from psycopg_pool import ConnectionPool

from radio_calico.errors import StoreError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Result of a write: id of the inserted row (None when nothing was inserted)
# and number of rows the statement touched
ExecResult = namedtuple('ExecResult', ['inserted_id', 'affected_rows'])

# Result of an upsert: id of the row and whether it was newly inserted
UpsertResult = namedtuple('UpsertResult', ['row_id', 'inserted'])


class DatabaseBackend:
    """Capability set shared by all store backends

    Subclasses provide the connection, the driver error class and the upsert
    statement; everything else is shared.
    """

    name = None
    placeholder = '?'
    id_column = 'INTEGER PRIMARY KEY'
    timestamp_type = 'TIMESTAMP'
    driver_error = Exception

    # ==================== CONNECTIONS ====================

    def connection(self):
        """Context manager yielding a connection for one operation"""
        raise NotImplementedError

    def close(self):
        """Release every connection held by this backend"""
        raise NotImplementedError

    # ==================== STATEMENTS ====================

    def params(self, count):
        """Comma separated list of `count` parameter markers"""
        return ', '.join([self.placeholder] * count)

    def _run(self, sql, params, collect):
        """Execute one statement and hand the cursor to `collect`"""
        try:
            with self.connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(sql, tuple(params))
                    return collect(cursor)
                finally:
                    cursor.close()
        except self.driver_error as e:
            logger.error(f"{self.name} error running {sql.split()[0]}: {e}")
            raise StoreError(str(e)) from e

    @staticmethod
    def _fetch_dicts(cursor):
        columns = [col[0] for col in cursor.description]
        rows = []
        for row in cursor.fetchall():
            record = {}
            for column, value in zip(columns, row):
                if isinstance(value, datetime):
                    value = value.strftime(TIMESTAMP_FORMAT)
                record[column] = value
            rows.append(record)
        return rows

    def query_rows(self, sql, params=()):
        """Run a SELECT and return every row as a dict"""
        return self._run(sql, params, self._fetch_dicts)

    def query_one(self, sql, params=()):
        """Run a SELECT and return the first row as a dict, or None"""
        rows = self._run(sql, params, self._fetch_dicts)
        return rows[0] if rows else None

    def execute(self, sql, params=()):
        """Run an UPDATE/DELETE/DDL statement

        Returns:
            ExecResult with inserted_id None and the affected row count
        """
        return self._run(sql, params, lambda cursor: ExecResult(None, cursor.rowcount))

    def insert(self, table, values):
        """Insert one row

        Args:
            table: Table name
            values: Dict of column -> value

        Returns:
            ExecResult with the new row id
        """
        raise NotImplementedError

    def upsert(self, table, key_columns, values, update_columns, touch_columns=()):
        """Insert a row, or update it when the key already exists

        The conflict is resolved by the table's uniqueness constraint on
        key_columns, never by a separate read followed by a write.

        Args:
            table: Table name
            key_columns: Columns of the unique constraint
            values: Dict of column -> value for the insert
            update_columns: Columns overwritten from `values` on conflict
            touch_columns: Timestamp columns reset to CURRENT_TIMESTAMP on conflict

        Returns:
            UpsertResult(row_id, inserted)
        """
        raise NotImplementedError

    def _upsert_sql(self, table, key_columns, columns, update_columns, touch_columns):
        assignments = [f"{col} = excluded.{col}" for col in update_columns]
        assignments += [f"{col} = CURRENT_TIMESTAMP" for col in touch_columns]
        return (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({self.params(len(columns))}) "
            f"ON CONFLICT ({', '.join(key_columns)}) "
            f"DO UPDATE SET {', '.join(assignments)}"
        )

    def __repr__(self):
        return f"<{type(self).__name__}>"


class SQLiteBackend(DatabaseBackend):
    """SQLite file database

    One connection (check_same_thread=False) is shared by every thread and
    guarded by a lock, so a process never holds more than one handle on the
    file. The connection runs in autocommit mode; the upsert opens its own
    BEGIN IMMEDIATE transaction so writers from other processes queue on
    SQLite's write lock.
    """

    name = 'sqlite'
    placeholder = '?'
    id_column = 'INTEGER PRIMARY KEY AUTOINCREMENT'
    timestamp_type = 'DATETIME'
    driver_error = sqlite3.Error

    def __init__(self, db_path, timeout=30):
        self.db_path = db_path
        self.timeout = timeout
        self.conn = None
        self._lock = threading.RLock()

    def _connect(self):
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.timeout,
            isolation_level=None,
            check_same_thread=False
        )
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self):
        with self._lock:
            if self.conn is None:
                try:
                    self.conn = self._connect()
                except sqlite3.Error as e:
                    logger.error(f"Could not open sqlite database {self.db_path}: {e}")
                    raise
            yield self.conn

    def close(self):
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
                logger.info(f"Closed sqlite database {self.db_path}")

    def insert(self, table, values):
        columns = list(values)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({self.params(len(columns))})"
        return self._run(sql, [values[col] for col in columns],
                         lambda cursor: ExecResult(cursor.lastrowid, cursor.rowcount))

    def upsert(self, table, key_columns, values, update_columns, touch_columns=()):
        columns = list(values)
        key_filter = ' AND '.join(f"{col} = ?" for col in key_columns)
        sql = self._upsert_sql(table, key_columns, columns, update_columns, touch_columns)

        try:
            with self.connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute("BEGIN IMMEDIATE")
                    try:
                        cursor.execute(f"SELECT id FROM {table} WHERE {key_filter}",
                                       tuple(values[col] for col in key_columns))
                        existing = cursor.fetchone()
                        cursor.execute(sql, tuple(values[col] for col in columns))
                        row_id = existing[0] if existing else cursor.lastrowid
                        cursor.execute("COMMIT")
                    except sqlite3.Error:
                        cursor.execute("ROLLBACK")
                        raise
                finally:
                    cursor.close()
        except sqlite3.Error as e:
            logger.error(f"sqlite error upserting into {table}: {e}")
            raise StoreError(str(e)) from e

        return UpsertResult(row_id, existing is None)

    def __repr__(self):
        return f"<SQLiteBackend {self.db_path}>"


class PostgresBackend(DatabaseBackend):
    """PostgreSQL database through a psycopg connection pool

    The pool is opened on first use. Every operation borrows one autocommit
    connection for a single statement and hands it back; the pool checks
    connections on checkout and replaces broken ones.
    """

    name = 'postgres'
    placeholder = '%s'
    id_column = 'SERIAL PRIMARY KEY'
    timestamp_type = 'TIMESTAMP'
    driver_error = psycopg.Error

    def __init__(self, host='postgres', port=5432, dbname='radiocalico',
                 user='radiocalico', password='radiocalico', connect_timeout=2,
                 pool_size=10, pool_timeout=5):
        self.host = host
        self.port = int(port)
        self.dbname = dbname
        self.user = user
        self.password = password
        self.connect_timeout = connect_timeout
        self.pool_size = int(pool_size)
        self.pool_timeout = pool_timeout
        self.pool = None
        self._pool_lock = threading.Lock()

    def _get_pool(self):
        with self._pool_lock:
            if self.pool is None:
                self.pool = ConnectionPool(
                    kwargs={
                        'host': self.host,
                        'port': self.port,
                        'dbname': self.dbname,
                        'user': self.user,
                        'password': self.password,
                        'connect_timeout': self.connect_timeout,
                        'autocommit': True,
                    },
                    min_size=1,
                    max_size=self.pool_size,
                    timeout=self.pool_timeout,
                    check=ConnectionPool.check_connection,
                    name='radio-calico',
                    open=True
                )
                logger.info(f"Opened postgres pool {self!r} (max {self.pool_size} connections)")
            return self.pool

    def connection(self):
        return self._get_pool().connection()

    def close(self):
        with self._pool_lock:
            if self.pool is not None:
                self.pool.close()
                self.pool = None
                logger.info(f"Closed postgres pool {self!r}")

    def insert(self, table, values):
        columns = list(values)
        sql = (f"INSERT INTO {table} ({', '.join(columns)}) "
               f"VALUES ({self.params(len(columns))}) RETURNING id")
        rows = self.query_rows(sql, [values[col] for col in columns])
        return ExecResult(rows[0]['id'], len(rows))

    def upsert(self, table, key_columns, values, update_columns, touch_columns=()):
        columns = list(values)
        # xmax is 0 only for a row version created by an INSERT
        sql = (self._upsert_sql(table, key_columns, columns, update_columns, touch_columns)
               + " RETURNING id, (xmax = 0) AS inserted")
        row = self.query_one(sql, [values[col] for col in columns])
        return UpsertResult(row['id'], bool(row['inserted']))

    def __repr__(self):
        return f"<PostgresBackend {self.user}@{self.host}:{self.port}/{self.dbname}>"
