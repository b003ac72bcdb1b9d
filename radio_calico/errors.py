"""
Exception types for Radio Calico

Every error raised by the services maps onto one HTTP status code:
- ValidationError: missing or malformed input (400)
- NotFoundError: referenced row does not exist (404)
- StoreError: database failure, including constraint violations (500)
"""


class RadioCalicoError(Exception):
    """Base class for all Radio Calico errors"""

    status_code = 500


class ValidationError(RadioCalicoError):
    """Request input is missing or malformed"""

    status_code = 400


class NotFoundError(RadioCalicoError):
    """Referenced row does not exist"""

    status_code = 404


class StoreError(RadioCalicoError):
    """Database operation failed

    Wraps the driver exception so callers never depend on sqlite3 or psycopg
    exception classes directly.
    """

    status_code = 500
