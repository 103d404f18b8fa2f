"""
Genius API provider for lyrics and secondary catalog lookups

Genius plays two roles in Lyric-Finder:

1. LyricsProvider: the structured lyrics source. search_songs() returns
   lightweight SongRefs and fetch_lyrics() scrapes the lyric text for one
   of them through lyricsgenius.
2. CatalogProvider: the secondary catalog used when Spotify is not
   configured or comes back empty. Its song search doubles as the
   artist-search fallback, and its artist_songs endpoint provides an
   artist's top songs and catalog.

All lyricsgenius and requests failures are translated to the ProviderError
family by _make_request, so callers never see library exceptions.
"""

import re
import time
from typing import Any, Dict, Iterator, List, Optional, Union

import lyricsgenius
import requests

from ..config.settings import get_settings
from ..exceptions import AuthFailed, NotFound, ProviderError, ProviderUnavailable, RateLimited
from ..models import Artist, ProviderHandle, Song, SongRef
from ..providers import CatalogProvider, LyricsProvider
from ..utils.helpers import collapse_blank_lines
from ..utils.logger import get_logger


# Genius caps search and artist_songs page sizes
MAX_SEARCH_PAGE = 20
MAX_SONGS_PAGE = 50


def clean_genius_lyrics(lyrics: str) -> str:
    """
    Strip scraping artifacts from lyrics returned by lyricsgenius

    Genius pages prepend a "N Contributors ... Lyrics" header, append an
    "Embed" marker and sometimes inline a "You might also like" block.

    Args:
        lyrics: Raw lyrics text

    Returns:
        Lyrics text without page furniture
    """
    if not lyrics:
        return ""

    lines = lyrics.strip().split('\n')
    if lines and re.search(r'Contributors?.*Lyrics', lines[0]):
        lines = lines[1:]
    elif lines and lines[0].rstrip().endswith('Lyrics') and len(lines) > 1:
        lines = lines[1:]

    text = '\n'.join(lines)
    text = re.sub(r'You might also like', '\n', text)
    text = re.sub(r'\d*Embed\s*$', '', text)
    return collapse_blank_lines(text)


class GeniusProvider(CatalogProvider, LyricsProvider):
    """
    Genius adapter implementing both the catalog and lyrics interfaces
    """

    name = "genius"

    def __init__(self, api_key: Optional[str] = None, client: Optional[lyricsgenius.Genius] = None):
        """
        Initialize Genius provider

        Args:
            api_key: Genius access token, defaults to settings
            client: Pre-built lyricsgenius client (tests inject a mock here)
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.api_key = api_key if api_key is not None else self.settings.lyrics.genius_api_key
        self.timeout = self.settings.lyrics.timeout
        self.max_attempts = self.settings.lyrics.max_attempts

        self._genius_client: Optional[lyricsgenius.Genius] = client

        # Rate limiting configuration
        self.last_request_time = 0.0
        self.min_request_interval = 0.2

    @property
    def is_configured(self) -> bool:
        return self._genius_client is not None or bool(self.api_key)

    @property
    def genius_client(self) -> lyricsgenius.Genius:
        """
        Lazily created lyricsgenius client

        Raises:
            AuthFailed: If no access token is configured
        """
        if not self._genius_client:
            if not self.api_key:
                raise AuthFailed("Genius API key not configured", provider=self.name)

            self._genius_client = lyricsgenius.Genius(
                access_token=self.api_key,
                timeout=self.timeout,
                retries=self.max_attempts,
                remove_section_headers=self.settings.lyrics.remove_section_headers,
                skip_non_songs=True,
                excluded_terms=["(Remix)", "(Live)"],
                verbose=False
            )
            self.logger.debug("Genius API client initialized")

        return self._genius_client

    def _rate_limit(self) -> None:
        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)
        self.last_request_time = time.time()

    def _make_request(self, method: str, *args, **kwargs) -> Any:
        """
        Call a lyricsgenius method and translate its failures

        Args:
            method: lyricsgenius.Genius method name
            *args: Positional arguments for the method
            **kwargs: Keyword arguments for the method

        Returns:
            Raw API response

        Raises:
            AuthFailed, RateLimited, NotFound, ProviderUnavailable
        """
        client = self.genius_client
        self._rate_limit()
        try:
            return getattr(client, method)(*args, **kwargs)
        except ProviderError:
            raise
        except requests.Timeout as e:
            raise ProviderUnavailable(f"Genius request timed out: {e}", provider=self.name) from e
        except Exception as e:
            raise self._translate(e, method) from e

    def _translate(self, error: Exception, method: str) -> ProviderError:
        status = self._status_of(error)
        details = {'method': method, 'status_code': status, 'original_error': str(error)}

        if status in (401, 403):
            return AuthFailed("Genius rejected the access token", provider=self.name, details=details)
        if status == 404:
            return NotFound("Genius entity not found", provider=self.name, details=details)
        if status == 429:
            return RateLimited("Genius rate limit exceeded", provider=self.name, details=details)
        return ProviderUnavailable(f"Genius request failed: {error}", provider=self.name, details=details)

    @staticmethod
    def _status_of(error: Exception) -> Optional[int]:
        # lyricsgenius raises HTTPError(status, message), requests puts it on the response
        status = getattr(error, 'status', None)
        if isinstance(status, int):
            return status
        response = getattr(error, 'response', None)
        if response is not None and isinstance(getattr(response, 'status_code', None), int):
            return response.status_code
        if error.args and isinstance(error.args[0], int):
            return error.args[0]
        return None

    @staticmethod
    def _iter_hits(response: Optional[Dict[str, Any]], hit_type: str) -> Iterator[Dict[str, Any]]:
        """Yield result objects from either a flat or a sectioned search response"""
        if not response:
            return

        hits = list(response.get('hits') or [])
        for section in response.get('sections') or []:
            if section.get('type') in (hit_type, 'top_hit'):
                hits.extend(section.get('hits') or [])

        seen = set()
        for hit in hits:
            if hit.get('type', hit_type) != hit_type:
                continue
            result = hit.get('result') or {}
            if result.get('id') is None or result['id'] in seen:
                continue
            seen.add(result['id'])
            yield result

    # CatalogProvider

    def search_tracks(self, text: str, limit: int) -> List[Song]:
        """
        Search songs by free text

        Args:
            text: Search query
            limit: Maximum number of songs

        Returns:
            Songs in Genius relevance order
        """
        response = self._make_request('search_songs', text, per_page=max(1, min(limit, MAX_SEARCH_PAGE)))
        songs = [Song.from_genius_data(result) for result in self._iter_hits(response, 'song')]
        self.logger.debug(f"Genius song search '{text}' returned {len(songs)} songs")
        return songs[:limit]

    def search_artists(self, text: str, limit: int) -> List[Artist]:
        """
        Search artists by free text

        Args:
            text: Search query
            limit: Maximum number of artists

        Returns:
            Artists in Genius relevance order
        """
        response = self._make_request('search_artists', text, per_page=max(1, min(limit, MAX_SEARCH_PAGE)))
        artists = [Artist.from_genius_data(result) for result in self._iter_hits(response, 'artist')]
        return artists[:limit]

    def get_top_tracks(self, handle: ProviderHandle) -> List[Song]:
        """
        Get an artist's most popular songs

        Args:
            handle: Genius artist handle

        Returns:
            Up to 20 songs, most popular first
        """
        if not self.owns(handle):
            return []

        response = self._make_request('artist_songs', handle.ref, per_page=MAX_SEARCH_PAGE, sort='popularity')
        return [Song.from_genius_data(song) for song in (response or {}).get('songs') or [] if song.get('id') is not None]

    def get_full_catalog(self, handle: ProviderHandle, limit: int) -> List[Song]:
        """
        Get an artist's songs page by page, most popular first

        Args:
            handle: Genius artist handle
            limit: Maximum number of songs

        Returns:
            Songs deduplicated by id
        """
        if not self.owns(handle):
            return []

        songs: List[Song] = []
        seen_ids = set()
        page = 1
        while page and len(songs) < limit:
            response = self._make_request(
                'artist_songs', handle.ref, per_page=MAX_SONGS_PAGE, page=page, sort='popularity'
            ) or {}
            for data in response.get('songs') or []:
                if data.get('id') is None or data['id'] in seen_ids:
                    continue
                seen_ids.add(data['id'])
                songs.append(Song.from_genius_data(data))
                if len(songs) >= limit:
                    break
            page = response.get('next_page')
        return songs

    # LyricsProvider

    def search_songs(self, text: str) -> List[SongRef]:
        """
        Search songs that Genius may have lyrics for

        Args:
            text: Search query, typically "{title} {artist}"

        Returns:
            Song references in relevance order
        """
        per_page = max(1, min(self.settings.lyrics.search_results, MAX_SEARCH_PAGE))
        response = self._make_request('search_songs', text, per_page=per_page)

        refs = []
        for result in self._iter_hits(response, 'song'):
            primary = result.get('primary_artist') or {}
            refs.append(SongRef(
                title=result.get('title') or '',
                artist_name=primary.get('name') or result.get('artist_names') or '',
                handle=ProviderHandle(self.name, result['id']),
                url=result.get('url')
            ))
        return refs

    def fetch_lyrics(self, ref: Union[SongRef, ProviderHandle]) -> str:
        """
        Fetch lyrics for a song reference

        Args:
            ref: SongRef from search_songs, or a Genius song handle

        Returns:
            Cleaned lyrics text

        Raises:
            NotFound: If Genius has no lyrics for the song
        """
        handle = ref.handle if isinstance(ref, SongRef) else ref
        if not self.owns(handle):
            raise NotFound(f"Not a Genius song: {handle}", provider=self.name)

        self.logger.debug(f"Fetching Genius lyrics for song {handle.ref}")
        lyrics = self._make_request('lyrics', song_id=int(handle.ref))
        cleaned = clean_genius_lyrics(lyrics or "")
        if not cleaned:
            raise NotFound(f"Genius has no lyrics for song {handle.ref}", provider=self.name)
        return cleaned

    def get_api_status(self) -> Dict[str, Any]:
        """
        Summarize provider configuration for diagnostics

        Returns:
            Dictionary with configuration flags and client settings
        """
        return {
            'provider': self.name,
            'api_key_configured': bool(self.api_key),
            'client_initialized': self._genius_client is not None,
            'timeout': self.timeout,
            'max_attempts': self.max_attempts,
        }


# Global provider instance
_genius_provider: Optional[GeniusProvider] = None


def get_genius_provider() -> GeniusProvider:
    """
    Get global Genius provider instance

    Returns:
        GeniusProvider singleton
    """
    global _genius_provider
    if not _genius_provider:
        _genius_provider = GeniusProvider()
    return _genius_provider


def reset_genius_provider() -> None:
    """Reset global Genius provider instance"""
    global _genius_provider
    _genius_provider = None
