"""
Listener directory routes for Radio Calico

Provides list/detail/create/delete endpoints over the users table.
"""

import logging
from flask import Blueprint, jsonify, request

from radio_calico.directory import DirectoryService
from radio_calico.errors import NotFoundError, StoreError, ValidationError
from radio_calico.web.routes import get_db

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


def get_directory():
    db = get_db()
    return DirectoryService(db) if db else None


@users_bp.route('', methods=['GET'])
def api_list_users():
    """List all users, newest first

    Returns JSON:
        {"users": [{"id": 1, "name": "...", "email": "...", "created_at": "..."}]}
    """
    directory = get_directory()
    if not directory:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        users = directory.list_users()
    except StoreError as e:
        logger.error(f"Error listing users: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify({'users': users})


@users_bp.route('/<user_id>', methods=['GET'])
def api_get_user(user_id):
    """Get a single user"""
    directory = get_directory()
    if not directory:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        user = directory.get_user(user_id)
    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except StoreError as e:
        logger.error(f"Error getting user {user_id}: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify({'user': user})


@users_bp.route('', methods=['POST'])
def api_create_user():
    """Create a user

    Request JSON:
        {"name": "...", "email": "..."}

    Returns JSON:
        The created user including id and created_at
    """
    directory = get_directory()
    if not directory:
        return jsonify({'error': 'Database not initialized'}), 500

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        user = directory.create_user(data.get('name'), data.get('email'))
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except StoreError as e:
        logger.error(f"Error creating user: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify(user)


@users_bp.route('/<user_id>', methods=['DELETE'])
def api_delete_user(user_id):
    """Delete a user"""
    directory = get_directory()
    if not directory:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        directory.delete_user(user_id)
    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except StoreError as e:
        logger.error(f"Error deleting user {user_id}: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify({'message': 'User deleted successfully'})
