"""
Data models for songs, artists and lyrics

This module defines the provider-neutral data structures that flow through the
resolution engine. Every provider adapter converts its raw API payloads into
these models through the `from_*_data()` factory methods, so the search
aggregator and the lyrics resolver never look at provider-specific JSON.

Architecture Overview:

1. **Enums Layer**: search modes and the lyrics resolution state machine
   - SearchMode: which pipeline a query runs through
   - ResolutionState: where a lyrics lookup ended up

2. **Entity Layer**: values created per call and never persisted
   - ProviderHandle: opaque reference back to the provider that produced an entity
   - Artist, Song, SongRef: catalog entities
   - LyricsSource: one labelled block of lyric or guidance text

3. **Result Layer**: what the engine hands back to callers
   - LyricsResult: resolved text plus alternatives, or an error
   - SearchResult: ranked songs or artists plus an optional failure notice

All timestamps, caches and credentials live elsewhere; these objects carry
data only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import SearchFailed


class SearchMode(Enum):
    """
    Search pipeline selector

    - SONG: track search across the catalog providers
    - ARTIST: artist search, or the catalog of a selected artist
    - REGIONAL: slug guessing against regional lyrics sites
    """
    SONG = "song"
    ARTIST = "artist"
    REGIONAL = "regional"

    @classmethod
    def from_value(cls, value: Any) -> 'SearchMode':
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class ResolutionState(Enum):
    """
    Lyrics resolution state machine

    State transitions:
    PENDING_PREFETCHED -> RESOLVED (song carried its own lyrics)
    PENDING_PREFETCHED -> PENDING_PROVIDER_DIRECT -> RESOLVED
    PENDING_PROVIDER_DIRECT -> PENDING_PROVIDER_SEARCH -> RESOLVED
    PENDING_PROVIDER_SEARCH -> PENDING_ALTERNATIVE -> RESOLVED (guidance text)
    PENDING_ALTERNATIVE -> FAILED (guidance itself could not be built)
    """
    PENDING_PREFETCHED = "pending_prefetched"
    PENDING_PROVIDER_DIRECT = "pending_provider_direct"
    PENDING_PROVIDER_SEARCH = "pending_provider_search"
    PENDING_ALTERNATIVE = "pending_alternative"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderHandle:
    """
    Reference back to the provider entity a model was built from

    Attributes:
        provider: Adapter name ('spotify', 'genius')
        ref: Provider's own identifier for the entity
    """
    provider: str
    ref: Any

    def belongs_to(self, provider_name: str) -> bool:
        return self.provider == provider_name


def _best_image(images: List[Dict[str, Any]]) -> Optional[str]:
    """Pick the smallest image that is still at least 64px wide"""
    if not images:
        return None
    sized = [img for img in images if (img.get('width') or 0) >= 64]
    if sized:
        return min(sized, key=lambda img: img.get('width') or 0).get('url')
    return images[0].get('url')


@dataclass
class Artist:
    """
    Artist entity from any catalog provider

    Two artists are the same artist when their names match case-insensitively,
    regardless of which provider produced them. Within one provider the id is
    the identity.

    Attributes:
        id: Provider identifier
        name: Display name
        canonical_url: Artist page on the provider
        thumbnail: Small image URL
        followers: Follower count when the provider reports it
        genres: Genre labels, Spotify only
        popularity: Popularity score (0-100), Spotify only
        provider_handle: Reference used for top-track and catalog lookups
    """
    id: str
    name: str
    canonical_url: str
    thumbnail: Optional[str] = None
    followers: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    popularity: Optional[int] = None
    provider_handle: Optional[ProviderHandle] = None

    @property
    def identity(self) -> str:
        """Case-insensitive name used to collapse artists across providers"""
        return self.name.strip().lower()

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'Artist':
        """
        Factory method to construct an Artist from a Spotify artist object

        Handles both simplified artists (embedded in tracks) and full
        artist objects with followers, genres and images.

        Args:
            data: Raw artist data from Spotify API response

        Returns:
            Artist instance
        """
        return cls(
            id=data['id'],
            name=data['name'],
            canonical_url=data.get('external_urls', {}).get('spotify', ''),
            thumbnail=_best_image(data.get('images') or []),
            # Safe extraction of nested followers.total field
            followers=data.get('followers', {}).get('total') if data.get('followers') else None,
            genres=list(data.get('genres') or []),
            popularity=data.get('popularity'),
            provider_handle=ProviderHandle('spotify', data['id'])
        )

    @classmethod
    def from_genius_data(cls, data: Dict[str, Any]) -> 'Artist':
        """
        Factory method to construct an Artist from a Genius artist object

        Args:
            data: Raw artist data (a hit's primary_artist or an artist search result)

        Returns:
            Artist instance
        """
        artist_id = str(data['id'])
        name = data.get('name') or 'Unknown Artist'
        return cls(
            id=artist_id,
            name=name,
            canonical_url=data.get('url') or default_artist_url(name),
            thumbnail=data.get('image_url'),
            followers=data.get('followers_count'),
            provider_handle=ProviderHandle('genius', data['id'])
        )


def default_artist_url(name: str) -> str:
    """Genius artist page URL derived from the artist name"""
    return f"https://genius.com/artists/{'-'.join(name.split())}"


@dataclass
class LyricsSource:
    """
    One labelled block of lyric text

    Attributes:
        source_name: Where the text came from ('Genius', 'Tamil2Lyrics.com', ...)
        text: Lyric or guidance text
        origin_url: Page the text was taken from, or a search URL for guidance
    """
    source_name: str
    text: str
    origin_url: Optional[str] = None


@dataclass
class Song:
    """
    Song entity from a catalog provider or a regional lyrics page

    When available_lyrics_sources is non-empty it is authoritative: the
    lyrics resolver uses it without calling any provider.

    Attributes:
        id: Provider identifier, or "{site}:{slug}" for regional pages
        title: Song title
        artist_name: Display name of the performing artist(s)
        canonical_url: Song page on the provider or site
        album_name: Album, or music director for regional pages
        thumbnail: Cover art URL
        provider_handle: Reference used for direct lyrics lookup
        available_lyrics_sources: Prefetched lyrics, primary first
        primary_artist: Artist record as the provider returned it
        source: Name of the provider or site that produced the song
    """
    id: str
    title: str
    artist_name: str
    canonical_url: str
    album_name: Optional[str] = None
    thumbnail: Optional[str] = None
    provider_handle: Optional[ProviderHandle] = None
    available_lyrics_sources: List[LyricsSource] = field(default_factory=list)
    primary_artist: Optional[Artist] = None
    source: Optional[str] = None

    @property
    def dedup_key(self) -> tuple:
        return (self.id, self.title.strip().lower(), self.artist_name.strip().lower())

    @property
    def display_name(self) -> str:
        return f"{self.artist_name} - {self.title}"

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any], album: Optional[Dict[str, Any]] = None) -> 'Song':
        """
        Factory method to construct a Song from a Spotify track object

        Album tracks endpoints return simplified tracks without an album
        field, so the album can be passed in separately.

        Args:
            data: Raw track data from Spotify API response
            album: Album object to use when the track has none

        Returns:
            Song instance
        """
        album_data = data.get('album') or album or {}
        artists = [Artist.from_spotify_data(a) for a in data.get('artists', []) if a.get('id')]
        artist_names = [a.get('name', '') for a in data.get('artists', []) if a.get('name')]

        return cls(
            id=data['id'],
            title=data.get('name', ''),
            artist_name=', '.join(artist_names) or 'Unknown Artist',
            canonical_url=data.get('external_urls', {}).get('spotify', ''),
            album_name=album_data.get('name'),
            thumbnail=_best_image(album_data.get('images') or []),
            provider_handle=ProviderHandle('spotify', data['id']),
            primary_artist=artists[0] if artists else None,
            source='spotify'
        )

    @classmethod
    def from_genius_data(cls, data: Dict[str, Any]) -> 'Song':
        """
        Factory method to construct a Song from a Genius song object

        Args:
            data: A search hit's 'result' or an artist_songs entry

        Returns:
            Song instance
        """
        primary = data.get('primary_artist') or {}
        primary_artist = Artist.from_genius_data(primary) if primary.get('id') is not None else None
        artist_name = data.get('artist_names') or primary.get('name') or 'Unknown Artist'

        return cls(
            id=str(data['id']),
            title=data.get('title') or data.get('full_title') or '',
            artist_name=artist_name,
            canonical_url=data.get('url', ''),
            album_name=(data.get('album') or {}).get('name'),
            thumbnail=data.get('song_art_image_thumbnail_url') or data.get('header_image_thumbnail_url'),
            provider_handle=ProviderHandle('genius', data['id']),
            primary_artist=primary_artist,
            source='genius'
        )


@dataclass
class SongRef:
    """
    Lightweight song reference returned by a lyrics provider search

    Attributes:
        title: Song title as the provider knows it
        artist_name: Primary artist name
        handle: Provider-specific reference passed back to fetch_lyrics
    """
    title: str
    artist_name: str
    handle: ProviderHandle
    url: Optional[str] = None

    def matches(self, title: str, artist_name: str) -> bool:
        """Exact case-insensitive title and artist match"""
        return (self.title.strip().lower() == title.strip().lower()
                and self.artist_name.strip().lower() == artist_name.strip().lower())


@dataclass
class LyricsResult:
    """
    Outcome of resolving lyrics for one song

    Holds either resolved text or an error, never both.

    Attributes:
        text: Lyrics or guidance text
        source_name: Label of the source the text came from
        origin_url: Page the text came from
        alternative_sources: Other sources the caller can switch to
        error_kind: Error class name when resolution failed
        message: Human readable failure description
        state: Final state of the resolution state machine
        step: Pending state whose step produced the outcome (prefetched,
            provider direct, provider search or alternative)
        request_id: Monotonic id assigned by the engine
    """
    text: Optional[str] = None
    source_name: Optional[str] = None
    origin_url: Optional[str] = None
    alternative_sources: List[LyricsSource] = field(default_factory=list)
    error_kind: Optional[str] = None
    message: Optional[str] = None
    state: ResolutionState = ResolutionState.RESOLVED
    step: Optional[ResolutionState] = None
    request_id: int = 0

    @classmethod
    def resolved(cls, source: LyricsSource, alternatives: Optional[List[LyricsSource]] = None,
                 step: Optional[ResolutionState] = None) -> 'LyricsResult':
        return cls(
            text=source.text,
            source_name=source.source_name,
            origin_url=source.origin_url,
            alternative_sources=list(alternatives or []),
            state=ResolutionState.RESOLVED,
            step=step
        )

    @classmethod
    def failed(cls, error_kind: str, message: str, step: Optional[ResolutionState] = None) -> 'LyricsResult':
        return cls(error_kind=error_kind, message=message, state=ResolutionState.FAILED, step=step)

    @property
    def from_guidance(self) -> bool:
        return self.ok and self.step is ResolutionState.PENDING_ALTERNATIVE

    @property
    def ok(self) -> bool:
        return self.error_kind is None and self.text is not None


@dataclass
class SearchResult:
    """
    Ranked results of one search request

    Attributes:
        mode: Pipeline that produced the result
        query: Normalized query text
        songs: Ranked songs (song, regional and selected-artist searches)
        artists: Ranked artists (artist search with no selection)
        notice: User-facing message, set when a fallback chain was exhausted
        error: SearchFailed when every step came back empty
        provider: Name of the provider whose results won
        request_id: Monotonic id assigned by the engine
    """
    mode: SearchMode
    query: str
    songs: List[Song] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)
    notice: Optional[str] = None
    error: Optional[SearchFailed] = None
    provider: Optional[str] = None
    request_id: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return not self.songs and not self.artists

    def __len__(self) -> int:
        return len(self.songs) + len(self.artists)
