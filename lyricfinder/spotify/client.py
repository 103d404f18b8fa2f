"""
Spotify Web API catalog provider

This module adapts the Spotify Web API (through spotipy) to the
CatalogProvider interface. Spotify is the primary catalog: song search,
artist search, an artist's top tracks and an artist's full catalog all
come from here first.

Architecture Overview:

1. **Authentication**: client-credentials token held by an injected
   ClientCredentialsAuth/TokenCache; a new spotipy client is built whenever
   the token changes
2. **Request wrapper**: every call goes through _make_request, which applies
   rate limiting and turns spotipy/requests errors into the ProviderError family
   - 401: token invalidated, request retried once with a fresh token
   - 429: short Retry-After waits are honoured once, longer ones raise RateLimited
   - 404/400: NotFound
   - anything else, network errors included: ProviderUnavailable
3. **Pagination**: artist albums and album tracks are walked with spotipy's
   next() until the catalog cap is reached
4. **Conversion**: raw payloads become Song/Artist models via their
   from_spotify_data() factories
"""

import time
from typing import Any, Dict, Iterator, List, Optional

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from ..config.auth import ClientCredentialsAuth, get_auth
from ..config.settings import get_settings
from ..exceptions import AuthFailed, NotFound, ProviderUnavailable, RateLimited
from ..models import Artist, ProviderHandle, Song
from ..providers import CatalogProvider
from ..utils.logger import get_logger


# Spotify rejects larger page sizes
MAX_PAGE_SIZE = 50


class SpotifyCatalog(CatalogProvider):
    """
    Primary catalog provider backed by the Spotify Web API

    Thread-safe for concurrent reads: the only shared mutable state is the
    access token, which lives in the auth object's TokenCache.
    """

    name = "spotify"

    def __init__(self, auth: Optional[ClientCredentialsAuth] = None, client: Optional[spotipy.Spotify] = None):
        """
        Initialize Spotify catalog provider

        Args:
            auth: Client-credentials authentication, defaults to the global instance
            client: Pre-built spotipy client, used as-is (tests inject a mock here)
        """
        self.auth = auth if auth is not None else get_auth()
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self._client: Optional[spotipy.Spotify] = client
        self._fixed_client = client is not None
        self._client_token: Optional[str] = None

        # Rate limiting configuration
        self.last_request_time = 0.0
        self.min_request_interval = 0.1

    @property
    def is_configured(self) -> bool:
        return self._fixed_client or self.auth.is_configured

    @property
    def client(self) -> spotipy.Spotify:
        """
        Lazy spotipy client bound to the current access token

        Raises:
            AuthFailed: If no token can be obtained
            ProviderUnavailable: If the token endpoint is unreachable
        """
        if self._fixed_client:
            return self._client

        token = self.auth.get_valid_token()
        if self._client is None or token != self._client_token:
            self._client = spotipy.Spotify(
                auth=token,
                requests_timeout=self.settings.spotify.timeout,
                retries=0,
                status_retries=0
            )
            self._client_token = token
        return self._client

    def _rate_limit(self) -> None:
        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)
        self.last_request_time = time.time()

    def _make_request(self, method: str, *args, **kwargs) -> Any:
        """
        Call a spotipy method with rate limiting and error translation

        The method is looked up by name on every attempt so that a retry
        after a token refresh uses the new client.

        Args:
            method: spotipy.Spotify method name
            *args: Positional arguments for the method
            **kwargs: Keyword arguments for the method

        Returns:
            Raw API response

        Raises:
            AuthFailed, RateLimited, NotFound, ProviderUnavailable
        """
        max_wait = self.settings.spotify.max_rate_limit_wait

        for attempt in range(2):
            self._rate_limit()
            try:
                return getattr(self.client, method)(*args, **kwargs)
            except SpotifyException as e:
                if e.http_status == 401 and attempt == 0:
                    self.logger.debug("Spotify token rejected, refreshing...")
                    self.auth.invalidate()
                    continue

                if e.http_status == 429:
                    retry_after = self._retry_after(e)
                    if attempt == 0 and retry_after <= max_wait:
                        self.logger.warning(f"Spotify rate limited, waiting {retry_after} seconds...")
                        time.sleep(retry_after)
                        continue
                    raise RateLimited("Spotify rate limit exceeded", provider=self.name,
                                      retry_after=retry_after) from e

                raise self._translate(e) from e
            except requests.RequestException as e:
                raise ProviderUnavailable(
                    f"Spotify request failed: {e}",
                    provider=self.name,
                    details={'method': method, 'original_error': str(e)}
                ) from e

    @staticmethod
    def _retry_after(error: SpotifyException) -> int:
        headers = error.headers or {}
        try:
            return int(headers.get('Retry-After', 1))
        except (TypeError, ValueError):
            return 1

    def _translate(self, error: SpotifyException):
        details = {'status_code': error.http_status, 'original_error': error.msg}
        if error.http_status in (401, 403):
            return AuthFailed(f"Spotify authorization failed: {error.msg}", provider=self.name, details=details)
        if error.http_status in (400, 404):
            return NotFound(f"Spotify entity not found: {error.msg}", provider=self.name, details=details)
        return ProviderUnavailable(f"Spotify API error {error.http_status}: {error.msg}",
                                   provider=self.name, details=details)

    def _iter_pages(self, first_page: Optional[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
        page = first_page
        while page:
            for item in page.get('items') or []:
                if item:
                    yield item
            page = self._make_request('next', page) if page.get('next') else None

    def search_tracks(self, text: str, limit: int) -> List[Song]:
        """
        Search tracks by free text

        Args:
            text: Search query
            limit: Maximum number of songs

        Returns:
            Songs in Spotify's relevance order
        """
        results = self._make_request(
            'search', q=text, type='track', limit=max(1, min(limit, MAX_PAGE_SIZE)),
            market=self.settings.spotify.market
        )

        songs = []
        for track_data in (results or {}).get('tracks', {}).get('items', []):
            # Local files and unavailable tracks come back without an id
            if track_data and track_data.get('id'):
                songs.append(Song.from_spotify_data(track_data))

        self.logger.debug(f"Spotify track search '{text}' returned {len(songs)} songs")
        return songs[:limit]

    def search_artists(self, text: str, limit: int) -> List[Artist]:
        """
        Search artists by free text

        Args:
            text: Search query
            limit: Maximum number of artists

        Returns:
            Artists in Spotify's relevance order
        """
        results = self._make_request('search', q=text, type='artist', limit=max(1, min(limit, MAX_PAGE_SIZE)))

        artists = [
            Artist.from_spotify_data(item)
            for item in (results or {}).get('artists', {}).get('items', [])
            if item and item.get('id')
        ]
        self.logger.debug(f"Spotify artist search '{text}' returned {len(artists)} artists")
        return artists[:limit]

    def get_top_tracks(self, handle: ProviderHandle) -> List[Song]:
        """
        Get an artist's top tracks in the configured market

        Args:
            handle: Spotify artist handle

        Returns:
            Up to 10 songs, most popular first
        """
        if not self.owns(handle):
            return []

        results = self._make_request('artist_top_tracks', handle.ref, country=self.settings.spotify.market)
        return [
            Song.from_spotify_data(track)
            for track in (results or {}).get('tracks', [])
            if track and track.get('id')
        ]

    def get_full_catalog(self, handle: ProviderHandle, limit: int) -> List[Song]:
        """
        Get every song of an artist across albums and singles

        Walks the artist's albums page by page and each album's tracks
        page by page, deduplicating tracks by id, and stops as soon as
        the cap is reached.

        Args:
            handle: Spotify artist handle
            limit: Maximum number of songs

        Returns:
            Songs in album order
        """
        if not self.owns(handle):
            return []

        songs: List[Song] = []
        seen_ids = set()

        albums = self._make_request(
            'artist_albums', handle.ref, include_groups='album,single', limit=MAX_PAGE_SIZE
        )
        for album in self._iter_pages(albums):
            if not album.get('id'):
                continue

            tracks = self._make_request('album_tracks', album['id'], limit=MAX_PAGE_SIZE)
            for track in self._iter_pages(tracks):
                track_id = track.get('id')
                if not track_id or track_id in seen_ids:
                    continue
                seen_ids.add(track_id)
                songs.append(Song.from_spotify_data(track, album=album))
                if len(songs) >= limit:
                    self.logger.debug(f"Catalog cap of {limit} reached for artist {handle.ref}")
                    return songs

        self.logger.debug(f"Full catalog for artist {handle.ref}: {len(songs)} songs")
        return songs


# Global catalog instance for singleton pattern
_catalog_instance: Optional[SpotifyCatalog] = None


def get_spotify_catalog() -> SpotifyCatalog:
    """
    Get the global Spotify catalog provider

    Returns:
        SpotifyCatalog singleton
    """
    global _catalog_instance
    if not _catalog_instance:
        _catalog_instance = SpotifyCatalog()
    return _catalog_instance


def reset_spotify_catalog() -> None:
    """Reset the global Spotify catalog provider"""
    global _catalog_instance
    _catalog_instance = None
