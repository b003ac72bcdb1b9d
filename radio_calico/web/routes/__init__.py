"""
Route blueprints for Radio Calico

- users: Listener directory API
- ratings: Song ratings API
- system: Health check and now-playing metadata
- player: Static player page with SPA fallback
"""

from flask import current_app


def get_db():
    """Get database instance from Flask app config"""
    return current_app.config.get('db')
