"""
Database schema definitions for Radio Calico

Tables:
- users: Listener directory (email is unique)
- ratings: One up/down vote per (song_id, user_id) pair

The same statements run on both backends; only the id column and timestamp
types differ and are taken from the backend.
"""

import logging

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    ('Alice Johnson', 'alice@example.com'),
    ('Bob Smith', 'bob@example.com'),
    ('Carol Williams', 'carol@example.com'),
]


def create_tables(db):
    """Create both tables and the ratings index

    Args:
        db: DatabaseBackend instance
    """
    # 1. users table
    db.execute(f"""
        CREATE TABLE IF NOT EXISTS users (
            id {db.id_column},
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            created_at {db.timestamp_type} DEFAULT CURRENT_TIMESTAMP
        )
    """)
    logger.info("Users table ready")

    # 2. ratings table
    db.execute(f"""
        CREATE TABLE IF NOT EXISTS ratings (
            id {db.id_column},
            song_id TEXT NOT NULL,
            artist TEXT,
            title TEXT,
            user_id TEXT NOT NULL,
            rating TEXT NOT NULL CHECK(rating IN ('up', 'down')),
            created_at {db.timestamp_type} DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(song_id, user_id)
        )
    """)

    db.execute("CREATE INDEX IF NOT EXISTS idx_ratings_song_id ON ratings(song_id)")
    logger.info("Ratings table ready")


def populate_sample_users(db):
    """Insert the sample listeners when the users table is empty

    Args:
        db: DatabaseBackend instance

    Returns:
        Number of users inserted
    """
    row = db.query_one("SELECT COUNT(*) AS count FROM users")
    if row and int(row['count']) > 0:
        return 0

    for name, email in SAMPLE_USERS:
        db.insert('users', {'name': name, 'email': email})

    logger.info(f"Inserted {len(SAMPLE_USERS)} sample users")
    return len(SAMPLE_USERS)


def initialize_schema(db, seed_sample_users=True):
    """Create the schema and optionally seed sample data

    Args:
        db: DatabaseBackend instance
        seed_sample_users: Insert SAMPLE_USERS into an empty users table
    """
    create_tables(db)
    if seed_sample_users:
        populate_sample_users(db)
