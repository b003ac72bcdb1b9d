"""
Flask web package for Radio Calico

This package serves:
- The radio player page (static files with SPA fallback)
- Listener directory API (/api/users)
- Song ratings API (/api/ratings)
- Now-playing metadata (/api/now-playing)
- Health check (/api/health)

Key Principle: Single integrated app - Flask + metadata poller + database in one process.
"""

import os
import logging
from datetime import datetime
from flask import Flask

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'static')

# Static files are served by the player blueprint so unknown paths can fall
# back to index.html
app = Flask(__name__, static_folder=None)
app.config['STATIC_DIR'] = STATIC_DIR
app.json.sort_keys = False

# Global variables
db = None
settings = None
poller = None


def init_app(database, app_settings=None, now_playing=None, metadata_poller=None):
    """Wire the database and metadata objects into the Flask app

    Args:
        database: DatabaseBackend instance (schema already initialized)
        app_settings: Settings dict
        now_playing: NowPlaying instance served by /api/now-playing
        metadata_poller: MetadataPoller to shut down on exit
    """
    global db, settings, poller

    db = database
    settings = app_settings or {}
    poller = metadata_poller

    app.config['db'] = database
    app.config['settings'] = settings
    app.config['now_playing'] = now_playing
    app.config['start_time'] = datetime.now()

    logger.info(f"App initialized - db: {database!r}, metadata: {now_playing is not None}")
    return app


def run_app(host='0.0.0.0', port=3000, debug=False):
    """Run Flask application

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 3000)
        debug: Enable debug mode (default: False)
    """
    logger.info(f"Server running at http://{host}:{port}")
    for line in API_ENDPOINTS:
        logger.info(line)

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    finally:
        logger.info("Shutting down gracefully...")
        cleanup()


def cleanup():
    """Stop the metadata poller and close the database"""
    global poller, db

    if poller:
        poller.shutdown()
        poller = None

    if db:
        logger.info("Closing database...")
        db.close()
        logger.info("Database connection closed")
        db = None


API_ENDPOINTS = [
    "API Endpoints:",
    "   GET    /api/users           - Get all users",
    "   GET    /api/users/:id       - Get user by ID",
    "   POST   /api/users           - Create new user",
    "   DELETE /api/users/:id       - Delete user",
    "   GET    /api/ratings/:songId - Get song ratings",
    "   POST   /api/ratings         - Rate a song",
    "   GET    /api/now-playing     - Current track metadata",
    "   GET    /api/health          - Health check",
]


# Import and register blueprints
from radio_calico.web.routes import users, ratings, system, player

app.register_blueprint(users.users_bp)
app.register_blueprint(ratings.ratings_bp)
app.register_blueprint(system.system_bp)
# Player owns the catch-all route for the static page
app.register_blueprint(player.player_bp)
