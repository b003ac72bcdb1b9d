"""
Listener directory for Radio Calico

Plain create/list/fetch/delete over the users table. Email uniqueness is
left to the database constraint; a duplicate surfaces as a StoreError.
"""

import logging

from radio_calico.database import crud, queries
from radio_calico.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Largest id either backend can bind (signed 64-bit)
MAX_USER_ID = 2 ** 63 - 1


def parse_user_id(user_id):
    """Turn a path or JSON user id into a row id

    Raises:
        NotFoundError: If the value cannot name an existing row
    """
    if isinstance(user_id, str) and not user_id.isdigit():
        raise NotFoundError('User not found')
    try:
        value = int(user_id)
    except (TypeError, ValueError):
        raise NotFoundError('User not found')
    if value < 1 or value > MAX_USER_ID:
        raise NotFoundError('User not found')
    return value


class DirectoryService:
    """CRUD over listeners

    Attributes:
        db: DatabaseBackend instance
    """

    def __init__(self, db):
        self.db = db

    def create_user(self, name, email):
        """Add a listener

        Returns:
            Dict with id, name, email and created_at

        Raises:
            ValidationError: If name or email is missing
            StoreError: If the email already exists or the database fails
        """
        if not name or not email:
            raise ValidationError('Name and email are required')

        result = crud.add_user(self.db, name, email)
        return queries.get_user_by_id(self.db, result.inserted_id)

    def list_users(self):
        """All listeners, newest first"""
        return queries.get_all_users(self.db)

    def get_user(self, user_id):
        """Fetch one listener

        Raises:
            NotFoundError: If the user does not exist or the id is not a valid row id
        """
        user = queries.get_user_by_id(self.db, parse_user_id(user_id))
        if user is None:
            raise NotFoundError('User not found')
        return user

    def delete_user(self, user_id):
        """Remove a listener

        Raises:
            NotFoundError: If the user does not exist or the id is not a valid row id
        """
        if not crud.delete_user(self.db, parse_user_id(user_id)):
            raise NotFoundError('User not found')
