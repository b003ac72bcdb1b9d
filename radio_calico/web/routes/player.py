"""
Player page routes for Radio Calico

Serves files from the static directory at the site root. Any other non-API
path gets index.html so client-side routes survive a reload.
"""

import os
import logging
from flask import Blueprint, jsonify, send_from_directory, current_app

logger = logging.getLogger(__name__)

player_bp = Blueprint('player', __name__)

INDEX_FILE = 'index.html'

API_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']


@player_bp.route('/api', defaults={'path': ''}, methods=API_METHODS)
@player_bp.route('/api/<path:path>', methods=API_METHODS)
def api_not_found(path):
    """Unknown API path, any method"""
    return jsonify({'error': 'Not found'}), 404


@player_bp.route('/', defaults={'path': ''})
@player_bp.route('/<path:path>')
def serve_player(path):
    """Static file if it exists, else the player page"""
    static_dir = current_app.config['STATIC_DIR']

    if path and os.path.isfile(os.path.join(static_dir, path)):
        return send_from_directory(static_dir, path)

    if not os.path.isfile(os.path.join(static_dir, INDEX_FILE)):
        logger.warning(f"Player page missing: {os.path.join(static_dir, INDEX_FILE)}")
        return jsonify({'error': 'Player page not installed'}), 404

    return send_from_directory(static_dir, INDEX_FILE)
