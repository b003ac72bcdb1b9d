"""
Song ratings for Radio Calico

Listeners vote a song up or down. Each (song_id, user_id) pair holds at most
one vote; voting again replaces the earlier vote ("last vote wins"). The
uniqueness constraint on the ratings table resolves concurrent first votes,
so exactly one of them is reported as the insert.

song_id and user_id are opaque tokens minted by the player; only their
presence and type are checked here.
"""

import logging

from radio_calico.database import crud, queries
from radio_calico.errors import ValidationError

logger = logging.getLogger(__name__)

VALID_RATINGS = ('up', 'down')


def is_valid_rating(value):
    """True only for the exact strings 'up' and 'down'"""
    return isinstance(value, str) and value in VALID_RATINGS


def validate_vote(song_id, user_id, rating, artist=None, title=None):
    """Check a vote before it reaches the database

    Raises:
        ValidationError: If a field is missing, a token or the optional
            artist/title is not a string, or rating is not exactly 'up' or 'down'
    """
    if not song_id or not user_id or not rating:
        raise ValidationError('Missing required fields')

    if not isinstance(song_id, str) or not isinstance(user_id, str):
        raise ValidationError('songId and userId must be strings')

    if not is_valid_rating(rating):
        raise ValidationError('Rating must be "up" or "down"')

    for value in (artist, title):
        if value is not None and not isinstance(value, str):
            raise ValidationError('artist and title must be strings')


class RatingService:
    """Record votes and read per-song aggregates

    Attributes:
        db: DatabaseBackend instance
    """

    def __init__(self, db):
        self.db = db

    def record_vote(self, song_id, user_id, rating, artist=None, title=None):
        """Record a listener's vote for a song

        Args:
            song_id: Song token
            user_id: Listener token
            rating: 'up' or 'down'
            artist: Optional artist name stored with the vote
            title: Optional song title stored with the vote

        Returns:
            Dict with id, rating and updated (False on first vote, True after)

        Raises:
            ValidationError: On missing or invalid input
            StoreError: On database failure
        """
        validate_vote(song_id, user_id, rating, artist=artist, title=title)

        result = crud.upsert_rating(self.db, song_id, user_id, rating, artist=artist, title=title)

        return {
            'id': result.row_id,
            'rating': rating,
            'updated': not result.inserted,
        }

    def get_aggregate(self, song_id, user_id=None):
        """Tally a song's votes and look up the listener's own vote

        Args:
            song_id: Song token
            user_id: Optional listener token

        Returns:
            Dict with thumbsUp, thumbsDown and userVote ('up', 'down' or None)
        """
        counts = queries.get_rating_counts(self.db, song_id)

        user_vote = None
        if user_id:
            user_vote = queries.get_user_rating(self.db, song_id, user_id)

        return {
            'thumbsUp': counts.get('up', 0),
            'thumbsDown': counts.get('down', 0),
            'userVote': user_vote,
        }
