"""
Database CRUD operations for Radio Calico

This module contains all INSERT/UPDATE/DELETE operations that modify the database.

CRUD Categories:
- User CRUD: add_user, delete_user
- Rating CRUD: upsert_rating
"""

import logging

logger = logging.getLogger(__name__)


# ==================== USER CRUD ====================

def add_user(db, name, email):
    """Add a listener to the directory

    Args:
        db: DatabaseBackend instance
        name: Display name
        email: Email address (unique)

    Returns:
        ExecResult with the new user id

    Raises:
        StoreError: If the email already exists or the database fails
    """
    result = db.insert('users', {'name': name, 'email': email})
    logger.info(f"Added user {result.inserted_id}: {email}")
    return result


def delete_user(db, user_id):
    """Delete a listener

    Returns:
        True if a row was deleted, False if the user did not exist
    """
    result = db.execute(f"DELETE FROM users WHERE id = {db.placeholder}", (user_id,))
    if result.affected_rows:
        logger.info(f"Deleted user {user_id}")
    return result.affected_rows > 0


# ==================== RATING CRUD ====================

def upsert_rating(db, song_id, user_id, rating, artist=None, title=None):
    """Record a vote, replacing any earlier vote by the same listener

    artist/title overwrite the stored values only when given; the
    created_at timestamp is reset on every change.

    Args:
        db: DatabaseBackend instance
        song_id: Song token
        user_id: Listener token
        rating: 'up' or 'down'
        artist: Optional artist name
        title: Optional song title

    Returns:
        UpsertResult(row_id, inserted)
    """
    values = {
        'song_id': song_id,
        'artist': artist,
        'title': title,
        'user_id': user_id,
        'rating': rating,
    }
    update_columns = ['rating']
    if artist is not None:
        update_columns.append('artist')
    if title is not None:
        update_columns.append('title')

    result = db.upsert(
        'ratings',
        key_columns=('song_id', 'user_id'),
        values=values,
        update_columns=update_columns,
        touch_columns=('created_at',)
    )

    action = 'Saved' if result.inserted else 'Updated'
    logger.debug(f"{action} rating {result.row_id}: song={song_id} user={user_id} rating={rating}")
    return result
