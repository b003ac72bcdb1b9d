"""
Now-playing metadata for Radio Calico

The stream publishes a small JSON document describing the current track and
the five previous ones. This module fetches and normalizes it:
- fetch_metadata(): GET the document (cache-busted) with requests
- parse_metadata(): apply the player's defaults
- generate_song_id(): derive the song token used by the ratings API
- NowPlaying: latest snapshot, shared between the poller and the API
- MetadataPoller: refresh NowPlaying on a RadioScheduler interval job
"""

import base64
import logging
import threading
import time
from datetime import datetime, timezone

import requests

logger = logging.getLogger(__name__)

HISTORY_LENGTH = 5

# Placeholder values the player shows before metadata arrives
PLACEHOLDER_ARTISTS = ('—',)
PLACEHOLDER_TITLES = ('Loading...',)


class MetadataError(Exception):
    """Metadata endpoint unreachable or returned something unusable"""


def fetch_metadata(url, timeout=5):
    """Fetch the raw metadata document

    Args:
        url: Metadata endpoint
        timeout: Seconds before giving up

    Returns:
        Decoded JSON dict

    Raises:
        MetadataError: On network, HTTP or JSON errors
    """
    try:
        response = requests.get(
            url,
            params={'t': int(time.time() * 1000)},
            timeout=timeout
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise MetadataError(f"Metadata request timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise MetadataError(f"Metadata request failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise MetadataError(f"Metadata response is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise MetadataError(f"Unexpected metadata payload: {type(data).__name__}")
    return data


def parse_metadata(data):
    """Normalize a metadata document

    Args:
        data: Raw metadata dict

    Returns:
        Dict with title, artist, album, date, bit_depth, sample_rate,
        is_new, is_summer, is_vidgames and history (list of
        {'artist', 'title'}, most recent first)
    """
    history = []
    for i in range(1, HISTORY_LENGTH + 1):
        artist = data.get(f'prev_artist_{i}')
        title = data.get(f'prev_title_{i}')
        if artist and title:
            history.append({'artist': artist, 'title': title})

    return {
        'title': data.get('title') or 'Unknown Track',
        'artist': data.get('artist') or 'Unknown Artist',
        'album': data.get('album') or None,
        'date': data.get('date') or None,
        'bit_depth': data.get('bit_depth') or '16',
        'sample_rate': data.get('sample_rate') or 44100,
        'is_new': bool(data.get('is_new', False)),
        'is_summer': bool(data.get('is_summer', False)),
        'is_vidgames': bool(data.get('is_vidgames', False)),
        'history': history,
    }


def generate_song_id(artist, title):
    """Derive the song token from artist and title

    Returns:
        Base64 of "artist::title", or None for missing/placeholder values
    """
    if not artist or not title:
        return None
    if artist in PLACEHOLDER_ARTISTS or title in PLACEHOLDER_TITLES:
        return None
    return base64.b64encode(f"{artist}::{title}".encode('utf-8')).decode('ascii')


class NowPlaying:
    """Latest metadata snapshot

    Written by the poller thread and read by request threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._metadata = None
        self._fetched_at = None

    def update(self, metadata):
        with self._lock:
            self._metadata = metadata
            self._fetched_at = datetime.now(timezone.utc)

    def snapshot(self):
        """Current track as an API payload, or None before the first fetch"""
        with self._lock:
            if self._metadata is None:
                return None
            metadata = dict(self._metadata)
            fetched_at = self._fetched_at

        return {
            'metadata': metadata,
            'songId': generate_song_id(metadata['artist'], metadata['title']),
            'fetched_at': fetched_at.isoformat(),
        }


class MetadataPoller:
    """Poll the metadata endpoint into a NowPlaying snapshot

    Attributes:
        url: Metadata endpoint
        now_playing: NowPlaying instance updated on every successful poll
        scheduler: RadioScheduler running the poll job (None until started)
    """

    def __init__(self, url, now_playing, interval_seconds=10, timeout=5):
        self.url = url
        self.now_playing = now_playing
        self.interval_seconds = interval_seconds
        self.timeout = timeout
        self.scheduler = None
        self._last_song_id = None

    def poll(self):
        """Fetch once and update the snapshot

        Failures are logged; the previous snapshot stays in place.

        Returns:
            True if the snapshot was updated
        """
        try:
            metadata = parse_metadata(fetch_metadata(self.url, timeout=self.timeout))
        except MetadataError as e:
            logger.warning(f"Metadata poll failed: {e}")
            return False

        self.now_playing.update(metadata)

        song_id = generate_song_id(metadata['artist'], metadata['title'])
        if song_id != self._last_song_id:
            self._last_song_id = song_id
            logger.info(f"Now playing: {metadata['artist']} - {metadata['title']}")
        return True

    def start(self):
        """Poll immediately, then on every interval"""
        from radio_calico.scheduler import RadioScheduler

        self.poll()
        self.scheduler = RadioScheduler(self.poll, interval_seconds=self.interval_seconds)
        self.scheduler.start()

    def shutdown(self):
        if self.scheduler:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
