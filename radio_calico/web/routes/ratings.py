"""
Song rating routes for Radio Calico

GET  /api/ratings/<song_id>  - vote tally plus the caller's own vote
POST /api/ratings            - record (or replace) a vote

The caller is identified by the userId query parameter, falling back to the
x-user-id header when the parameter is absent or empty.
"""

import logging
from flask import Blueprint, jsonify, request

from radio_calico.errors import StoreError, ValidationError
from radio_calico.ratings import RatingService
from radio_calico.web.routes import get_db

logger = logging.getLogger(__name__)

ratings_bp = Blueprint('ratings', __name__, url_prefix='/api/ratings')

USER_ID_HEADER = 'x-user-id'


def get_requesting_user_id():
    """userId query parameter, else the x-user-id header, else None"""
    return request.args.get('userId') or request.headers.get(USER_ID_HEADER) or None


@ratings_bp.route('/<path:song_id>', methods=['GET'])
def api_get_ratings(song_id):
    """Get ratings for a song

    Returns JSON:
        {
            "thumbsUp": 3,
            "thumbsDown": 1,
            "userVote": "up" | "down" | null
        }
    """
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        aggregate = RatingService(db).get_aggregate(song_id, get_requesting_user_id())
    except StoreError as e:
        logger.error(f"Error getting ratings for {song_id}: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify(aggregate)


@ratings_bp.route('', methods=['POST'])
def api_rate_song():
    """Rate a song

    Request JSON:
        {"songId": "...", "userId": "...", "rating": "up"|"down",
         "artist": "...", "title": "..."}

    Returns JSON:
        {
            "message": "Rating saved successfully",
            "id": 12,
            "rating": "up",
            "updated": false
        }
    """
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        result = RatingService(db).record_vote(
            data.get('songId'),
            data.get('userId'),
            data.get('rating'),
            artist=data.get('artist'),
            title=data.get('title')
        )
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except StoreError as e:
        logger.error(f"Error saving rating: {e}")
        return jsonify({'error': str(e)}), 500

    message = 'Rating updated successfully' if result['updated'] else 'Rating saved successfully'
    return jsonify({'message': message, **result})
