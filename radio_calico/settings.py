"""
Settings for Radio Calico

Settings are read from radio_calico_settings.json when it exists and merged
over DEFAULT_SETTINGS. A handful of environment variables override the file
so container deployments can switch to PostgreSQL without editing it:

- RADIO_CALICO_ENV: 'development' (default) or 'production'
- USE_POSTGRES: 'true' selects PostgreSQL in any environment
- RADIO_CALICO_DB: SQLite database file
- POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DB, POSTGRES_USER, POSTGRES_PASSWORD
- RADIO_CALICO_METADATA_URL: now-playing metadata endpoint

Production always uses PostgreSQL.
"""

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

SETTINGS_FILE = 'radio_calico_settings.json'

DEFAULT_SETTINGS = {
    'environment': 'development',
    'server': {
        'host': '0.0.0.0',
        'port': 3000,
    },
    'database': {
        'backend': 'sqlite',
        'sqlite_path': 'radio_calico.db',
        'seed_sample_users': True,
        'postgres': {
            'host': 'postgres',
            'port': 5432,
            'dbname': 'radiocalico',
            'user': 'radiocalico',
            'password': 'radiocalico',
            'pool_size': 10,
        },
    },
    'metadata': {
        'enabled': True,
        'url': 'https://d3d4yli4hf5bmh.cloudfront.net/metadatav2.json',
        'poll_seconds': 10,
        'timeout': 5,
    },
    'logging': {
        'file': 'radio_calico.log',
        'max_bytes': 10485760,
        'backup_count': 5,
        'console_level': 'INFO',
        'file_level': 'ERROR',
    },
}

# Environment variable -> key inside settings['database']['postgres']
_POSTGRES_ENV = {
    'POSTGRES_HOST': 'host',
    'POSTGRES_PORT': 'port',
    'POSTGRES_DB': 'dbname',
    'POSTGRES_USER': 'user',
    'POSTGRES_PASSWORD': 'password',
}


def _merge(base, override):
    """Recursively merge `override` into a copy of `base`"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(settings, environ=None):
    """Apply environment variable overrides to a settings dict (in place)

    Args:
        settings: Settings dict
        environ: Mapping to read from (default: os.environ)

    Returns:
        The same settings dict
    """
    environ = os.environ if environ is None else environ
    database = settings.setdefault('database', {})

    if environ.get('RADIO_CALICO_ENV'):
        settings['environment'] = environ['RADIO_CALICO_ENV']

    if environ.get('USE_POSTGRES', '').lower() == 'true' or settings.get('environment') == 'production':
        database['backend'] = 'postgres'

    if environ.get('RADIO_CALICO_DB'):
        database['sqlite_path'] = environ['RADIO_CALICO_DB']

    postgres = database.setdefault('postgres', {})
    for env_name, key in _POSTGRES_ENV.items():
        if environ.get(env_name):
            postgres[key] = environ[env_name]
    if 'port' in postgres:
        postgres['port'] = int(postgres['port'])

    if environ.get('RADIO_CALICO_METADATA_URL'):
        settings.setdefault('metadata', {})['url'] = environ['RADIO_CALICO_METADATA_URL']

    return settings


def load_settings(settings_file=SETTINGS_FILE, environ=None):
    """Load settings from file, defaults and environment

    A missing file is not an error; an unreadable one is logged and ignored.

    Args:
        settings_file: Path to the JSON settings file
        environ: Mapping of environment variables (default: os.environ)

    Returns:
        Settings dict
    """
    file_settings = {}
    if settings_file and os.path.exists(settings_file):
        try:
            with open(settings_file, 'r') as f:
                file_settings = json.load(f)
            logger.info(f"Loaded settings from {settings_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading settings from {settings_file}: {e}")

    settings = _merge(DEFAULT_SETTINGS, file_settings)
    return apply_env_overrides(settings, environ)
