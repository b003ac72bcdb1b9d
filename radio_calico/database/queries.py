"""
Database query methods for Radio Calico

All functions here are read-only and return plain dicts/lists.

Query Categories:
- User queries: get_all_users, get_user_by_id
- Rating queries: get_rating_counts, get_user_rating
"""

import logging

logger = logging.getLogger(__name__)


# ==================== USER QUERIES ====================

def get_all_users(db):
    """Get all users, newest first

    Args:
        db: DatabaseBackend instance

    Returns:
        List of user dicts
    """
    return db.query_rows(
        "SELECT id, name, email, created_at FROM users ORDER BY created_at DESC, id DESC"
    )


def get_user_by_id(db, user_id):
    """Get a single user

    Args:
        db: DatabaseBackend instance
        user_id: Primary key of the user

    Returns:
        User dict or None if not found
    """
    return db.query_one(
        f"SELECT id, name, email, created_at FROM users WHERE id = {db.placeholder}",
        (user_id,)
    )


# ==================== RATING QUERIES ====================

def get_rating_counts(db, song_id):
    """Count a song's votes grouped by rating value

    Args:
        db: DatabaseBackend instance
        song_id: Song token

    Returns:
        Dict of rating value -> count, e.g. {'up': 3, 'down': 2}
    """
    rows = db.query_rows(
        f"SELECT rating, COUNT(*) AS count FROM ratings WHERE song_id = {db.placeholder} GROUP BY rating",
        (song_id,)
    )
    return {row['rating']: int(row['count']) for row in rows}


def get_user_rating(db, song_id, user_id):
    """Get one listener's vote for a song

    Returns:
        'up', 'down' or None when the listener has not voted
    """
    row = db.query_one(
        f"SELECT rating FROM ratings WHERE song_id = {db.placeholder} AND user_id = {db.placeholder}",
        (song_id, user_id)
    )
    return row['rating'] if row else None

