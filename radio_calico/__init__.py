"""
Radio Calico - Package Architecture

A listener-facing radio web app: serves the player page, follows the
station's now-playing metadata, keeps a small listener directory and lets
listeners vote songs up or down.

Package Structure:
------------------
radio_calico/
├── __init__.py           # Package initialization (this file)
├── errors.py             # ValidationError / NotFoundError / StoreError
├── settings.py           # Settings file + environment overrides
├── logging_setup.py      # Console + rotating file logging
├── database/             # Store backends (SQLite, PostgreSQL), schema, queries
├── ratings.py            # RatingService: record_vote, get_aggregate
├── directory.py          # DirectoryService: listener CRUD
├── metadata.py           # Now-playing fetch/parse + poller
├── scheduler.py          # APScheduler wrapper for the poller
├── cli.py                # Command-line entry point
└── web/                  # Flask app, API blueprints, player page

Architecture Principles:
-----------------------
1. One vote per (song, listener) - enforced by a UNIQUE constraint, not by app code
2. Last vote wins - a repeat vote updates the row in place
3. Backend chosen once at startup - call sites never branch on SQLite vs PostgreSQL
4. Single integrated app - Flask + metadata poller in one process

Usage:
------
# Start the server (SQLite in development)
python -m radio_calico.cli

# Production (PostgreSQL)
RADIO_CALICO_ENV=production POSTGRES_HOST=db python -m radio_calico.cli

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Radio Calico Team"

from .errors import RadioCalicoError, ValidationError, NotFoundError, StoreError

__all__ = [
    "RadioCalicoError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "__version__",
]
