"""
System routes for Radio Calico

Health check and the latest now-playing metadata.
"""

import logging
from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

logger = logging.getLogger(__name__)

system_bp = Blueprint('system', __name__, url_prefix='/api')


def utc_timestamp():
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@system_bp.route('/health')
def api_health():
    """Health check

    Returns JSON:
        {"status": "ok", "timestamp": "2025-02-06T15:30:00.000Z", "database": "connected"}
    """
    return jsonify({
        'status': 'ok',
        'timestamp': utc_timestamp(),
        'database': 'connected'
    })


@system_bp.route('/now-playing')
def api_now_playing():
    """Latest track metadata from the poller

    Returns JSON:
        {
            "metadata": {"title": "...", "artist": "...", ..., "history": [...]},
            "songId": "QXJ0aXN0OjpUaXRsZQ==",
            "fetched_at": "2025-02-06T15:30:00+00:00"
        }
    """
    now_playing = current_app.config.get('now_playing')
    snapshot = now_playing.snapshot() if now_playing else None

    if snapshot is None:
        return jsonify({'error': 'No metadata available yet'}), 503

    return jsonify(snapshot)
