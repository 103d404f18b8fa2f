"""
Search aggregation across catalog providers and regional sources

SearchAggregator runs one search request through the fallback chain for
its mode. Catalog providers are an ordered list, primary first; each step
of a chain either returns a non-empty list (which wins) or comes back
empty or raising, in which case the next step runs.

Song mode:
    each provider's track search in order; exhausted -> SearchFailed
Artist mode, no artist selected:
    primary artist search, then later providers' track search collapsed
    to unique artists (alphabetical); exhausted -> SearchFailed
Artist mode, artist selected:
    primary full catalog -> primary top tracks -> later providers' top
    tracks (when the artist carries their handle) -> later providers'
    track search filtered to the artist's exact name
Regional mode:
    RegionalSource, which never returns an empty list

Provider errors never escape: they are logged and the chain moves on.
"""

from typing import Callable, List, Optional, Sequence, TypeVar

from ..exceptions import ProviderError, SearchFailed
from ..models import Artist, SearchMode, SearchResult, Song, default_artist_url
from ..providers import CatalogProvider
from ..regional.source import RegionalSource
from ..utils.helpers import normalize_name, normalize_query
from ..utils.logger import get_logger


T = TypeVar('T')


class SearchAggregator:
    """
    Drives catalog providers and the regional source for a search request
    """

    def __init__(
        self,
        catalog_providers: Sequence[CatalogProvider],
        regional_source: Optional[RegionalSource] = None,
        song_limit: int = 10,
        artist_limit: int = 10,
        artist_catalog_cap: int = 100,
        min_query_length: int = 2
    ):
        """
        Initialize aggregator

        Args:
            catalog_providers: Catalog providers, primary first
            regional_source: Source used for regional mode
            song_limit: Maximum songs returned by a song search
            artist_limit: Maximum artists returned by an artist search
            artist_catalog_cap: Maximum songs returned for a selected artist
            min_query_length: Shorter normalized queries return an empty result
        """
        self.catalog_providers = list(catalog_providers)
        self.regional_source = regional_source
        self.song_limit = song_limit
        self.artist_limit = artist_limit
        self.artist_catalog_cap = artist_catalog_cap
        self.min_query_length = min_query_length
        self.logger = get_logger(__name__)

    @property
    def primary(self) -> Optional[CatalogProvider]:
        return self.catalog_providers[0] if self.catalog_providers else None

    @property
    def secondaries(self) -> List[CatalogProvider]:
        return self.catalog_providers[1:]

    def search(self, query: str, mode: SearchMode, selected_artist: Optional[Artist] = None) -> SearchResult:
        """
        Run a search request

        Args:
            query: Raw query text
            mode: Search pipeline
            selected_artist: Artist whose songs are wanted (artist mode only)

        Returns:
            SearchResult, with error set when a fallback chain was exhausted
        """
        mode = SearchMode.from_value(mode)
        text = normalize_query(query)

        if mode is SearchMode.ARTIST and selected_artist is not None:
            return self._artist_songs(text, selected_artist)

        if len(text) < self.min_query_length:
            self.logger.debug(f"Query '{text}' too short, not searching")
            return SearchResult(mode=mode, query=text)

        if mode is SearchMode.SONG:
            return self._songs(text)
        if mode is SearchMode.ARTIST:
            return self._artists(text)
        return self._regional(text)

    def _attempt(self, provider: CatalogProvider, step: str, call: Callable[[], List[T]]) -> List[T]:
        """Run one chain step; errors are logged and count as empty"""
        try:
            return call() or []
        except ProviderError as e:
            self.logger.warning(f"{provider.name} {step} failed: {e}")
        except Exception as e:
            self.logger.error(f"Unexpected error in {provider.name} {step}: {e}", exc_info=True)
        return []

    def _failed(self, mode: SearchMode, text: str, notice: str) -> SearchResult:
        self.logger.info(f"Search exhausted for '{text}' ({mode.value})")
        return SearchResult(mode=mode, query=text, notice=notice,
                            error=SearchFailed(notice, {'mode': mode.value, 'query': text}))

    # Song mode

    def _songs(self, text: str) -> SearchResult:
        for provider in self.catalog_providers:
            songs = self._attempt(provider, "track search",
                                  lambda: provider.search_tracks(text, self.song_limit))
            if songs:
                unique = dedupe_songs(songs)[:self.song_limit]
                self.logger.debug(f"Song search '{text}' answered by {provider.name}: {len(unique)} songs")
                return SearchResult(mode=SearchMode.SONG, query=text, songs=unique, provider=provider.name)

        return self._failed(SearchMode.SONG, text, f'No songs found for "{text}"')

    # Artist mode, no selection

    def _artists(self, text: str) -> SearchResult:
        primary = self.primary
        if primary is not None:
            artists = self._attempt(primary, "artist search",
                                    lambda: primary.search_artists(text, self.artist_limit))
            if artists:
                return SearchResult(mode=SearchMode.ARTIST, query=text,
                                    artists=artists[:self.artist_limit], provider=primary.name)

        # A lone catalog collapses its own track results
        fallbacks = self.secondaries or ([primary] if primary is not None else [])
        for provider in fallbacks:
            songs = self._attempt(provider, "track search for artists",
                                  lambda: provider.search_tracks(text, self.song_limit * 2))
            artists = collapse_artists(songs)[:self.artist_limit]
            if artists:
                artists.sort(key=lambda artist: artist.identity)
                return SearchResult(mode=SearchMode.ARTIST, query=text, artists=artists, provider=provider.name)

        return self._failed(SearchMode.ARTIST, text, f'No artists found for "{text}"')

    # Artist mode, artist selected

    def _artist_songs(self, text: str, artist: Artist) -> SearchResult:
        handle = artist.provider_handle
        cap = self.artist_catalog_cap
        primary = self.primary

        if primary is not None and primary.owns(handle):
            for step, call in (
                ("full catalog", lambda: primary.get_full_catalog(handle, cap)),
                ("top tracks", lambda: primary.get_top_tracks(handle)),
            ):
                songs = self._attempt(primary, step, call)
                if songs:
                    return self._artist_result(text, artist, songs, primary)

        for provider in self.secondaries:
            if provider.owns(handle):
                songs = self._attempt(provider, "artist songs", lambda: provider.get_top_tracks(handle))
                if songs:
                    return self._artist_result(text, artist, songs, provider)

        wanted = normalize_name(artist.name)
        for provider in self.secondaries:
            songs = self._attempt(provider, "track search by artist name",
                                  lambda: provider.search_tracks(artist.name, cap))
            songs = [song for song in songs if normalize_name(song.artist_name) == wanted
                     or (song.primary_artist is not None and song.primary_artist.identity == wanted)]
            if songs:
                return self._artist_result(text, artist, songs, provider)

        return self._failed(SearchMode.ARTIST, text or artist.name, f'No songs found for artist "{artist.name}"')

    def _artist_result(self, text: str, artist: Artist, songs: List[Song], provider: CatalogProvider) -> SearchResult:
        unique = dedupe_songs(songs)[:self.artist_catalog_cap]
        self.logger.debug(f"Songs for artist '{artist.name}' from {provider.name}: {len(unique)}")
        return SearchResult(mode=SearchMode.ARTIST, query=text or artist.name, songs=unique, provider=provider.name)

    # Regional mode

    def _regional(self, text: str) -> SearchResult:
        if self.regional_source is None:
            return self._failed(SearchMode.REGIONAL, text, "Regional search is not configured")

        songs = self.regional_source.search(text)
        return SearchResult(mode=SearchMode.REGIONAL, query=text, songs=songs,
                            provider=songs[0].source if songs else None)


def dedupe_songs(songs: Sequence[Song]) -> List[Song]:
    """
    Drop repeated songs, keeping the first occurrence

    Songs are the same when id, lower-cased title and lower-cased artist
    all match.

    Args:
        songs: Songs in provider order

    Returns:
        Songs without duplicates, order preserved
    """
    seen = set()
    unique = []
    for song in songs:
        key = song.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(song)
    return unique


def collapse_artists(songs: Sequence[Song]) -> List[Artist]:
    """
    Collapse songs into their unique artists

    Uses the song's primary artist record when the provider supplied one;
    artists are unique by case-insensitive name, first occurrence wins.

    Args:
        songs: Songs in provider order

    Returns:
        Unique artists in first-seen order
    """
    seen = set()
    artists = []
    for song in songs:
        artist = song.primary_artist or Artist(
            id=song.artist_name,
            name=song.artist_name,
            canonical_url=default_artist_url(song.artist_name)
        )
        if not artist.identity or artist.identity in seen:
            continue
        seen.add(artist.identity)
        artists.append(artist)
    return artists
