"""
Command-line interface for Radio Calico

Starts the web server (default) or just prepares the database.

Usage:
    python -m radio_calico.cli --help
    python -m radio_calico.cli --port 3000
    python -m radio_calico.cli --init-db
"""

import argparse
import logging
import sys

from radio_calico.logging_setup import setup_logging
from radio_calico.settings import SETTINGS_FILE, load_settings
from radio_calico.errors import StoreError

# Initial basic config for early logging (replaced once settings are loaded)
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='radio-calico',
        description='Radio Calico - radio player with listener ratings'
    )
    parser.add_argument('--settings', default=SETTINGS_FILE,
                        help=f'Settings file (default: {SETTINGS_FILE})')
    parser.add_argument('--host', help='Host to bind to (default from settings)')
    parser.add_argument('--port', type=int, help='Port to bind to (default from settings)')
    parser.add_argument('--debug', action='store_true', help='Enable Flask debug mode')
    parser.add_argument('--init-db', action='store_true',
                        help='Create the database schema and exit')
    parser.add_argument('--no-poll', action='store_true',
                        help='Do not poll the now-playing metadata endpoint')
    return parser


def cmd_init_db(settings):
    """Create the schema (and sample users) then exit

    Usage: --init-db
    """
    from radio_calico.database import create_database

    try:
        db = create_database(settings)
    except StoreError as e:
        print(f"[FAIL] Database initialization failed: {e}")
        return 1

    db.close()
    print(f"[OK] Database ready ({settings['database']['backend']})")
    return 0


def cmd_serve(args, settings):
    """Start the web server with the metadata poller"""
    from radio_calico.database import create_database
    from radio_calico.metadata import MetadataPoller, NowPlaying
    from radio_calico.web import init_app, run_app

    try:
        db = create_database(settings)
    except StoreError as e:
        logger.error(f"Database initialization failed: {e}")
        return 1

    now_playing = NowPlaying()
    poller = None
    metadata_config = settings.get('metadata', {})
    if metadata_config.get('enabled', True) and not args.no_poll:
        poller = MetadataPoller(
            metadata_config['url'],
            now_playing,
            interval_seconds=metadata_config.get('poll_seconds', 10),
            timeout=metadata_config.get('timeout', 5)
        )
        poller.start()
    else:
        logger.info("Metadata polling disabled")

    init_app(db, settings, now_playing=now_playing, metadata_poller=poller)

    server = settings.get('server', {})
    run_app(
        host=args.host or server.get('host', '0.0.0.0'),
        port=args.port or server.get('port', 3000),
        debug=args.debug
    )
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)

    settings = load_settings(args.settings)
    setup_logging(settings)

    if args.init_db:
        return cmd_init_db(settings)

    return cmd_serve(args, settings)


if __name__ == '__main__':
    sys.exit(main())
