"""
Database package for Radio Calico

This package provides the store behind the rating and directory services:
- backends.py: SQLiteBackend / PostgresBackend (one DatabaseBackend interface)
- schema.py: Table definitions and sample data
- queries.py: SELECT query methods
- crud.py: INSERT/UPDATE/DELETE operations

create_database() picks the backend once from settings; nothing else in the
application looks at which backend is in use.
"""

import logging

from .backends import DatabaseBackend, SQLiteBackend, PostgresBackend, ExecResult, UpsertResult
from .schema import initialize_schema
from . import queries
from . import crud

logger = logging.getLogger(__name__)


def create_database(settings, initialize=True):
    """Create the configured backend

    Args:
        settings: Settings dict (see radio_calico.settings)
        initialize: Create the schema (and seed sample users if enabled)

    Returns:
        DatabaseBackend instance
    """
    db_config = settings.get('database', {})
    backend = db_config.get('backend', 'sqlite')

    if backend == 'postgres':
        pg = db_config.get('postgres', {})
        db = PostgresBackend(
            host=pg.get('host', 'postgres'),
            port=pg.get('port', 5432),
            dbname=pg.get('dbname', 'radiocalico'),
            user=pg.get('user', 'radiocalico'),
            password=pg.get('password', 'radiocalico'),
            pool_size=pg.get('pool_size', 10)
        )
    elif backend == 'sqlite':
        db = SQLiteBackend(db_config.get('sqlite_path', 'radio_calico.db'))
    else:
        raise ValueError(f"Unsupported database backend: '{backend}'")

    logger.info(f"Database mode: {db.name} ({settings.get('environment', 'development')}) - {db!r}")

    if initialize:
        initialize_schema(db, seed_sample_users=db_config.get('seed_sample_users', True))

    return db


__all__ = [
    "DatabaseBackend",
    "SQLiteBackend",
    "PostgresBackend",
    "ExecResult",
    "UpsertResult",
    "create_database",
    "initialize_schema",
    "queries",
    "crud",
]
