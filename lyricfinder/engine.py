"""
Lyrics engine facade

LyricsEngine is the single entry point callers use: it owns the search
aggregator and the lyrics resolver, stamps every search result with a
monotonically increasing request id, and lets callers check whether a
result is still the latest one. SearchSession builds the list/detail
interaction on top of it: it remembers the mode and the selected artist,
drops results that arrive after a newer request was issued, and clears
held results when the mode changes or the artist selection is cleared.

create_engine() wires the configured providers together from settings.
"""

import itertools
import threading
from typing import List, Optional, Tuple

from .config.auth import ClientCredentialsAuth
from .config.settings import Settings, get_settings
from .lyrics.genius import GeniusProvider
from .lyrics.resolver import LyricsResolver
from .models import Artist, LyricsResult, SearchMode, SearchResult, Song
from .providers import CatalogProvider, LyricsProvider
from .regional.extractor import UnstructuredPageExtractor
from .regional.fetcher import RequestsPageFetcher
from .regional.slugs import build_rewrite_table
from .regional.source import RegionalSource, SearchPageSource, SlugSite
from .search.aggregator import SearchAggregator
from .spotify.client import SpotifyCatalog
from .utils.logger import create_operation_logger, get_logger


class LyricsEngine:
    """
    Search and lyrics resolution facade

    Thread-safe: request ids come from a shared counter guarded by a lock,
    everything else is per call.
    """

    def __init__(self, aggregator: SearchAggregator, resolver: LyricsResolver):
        """
        Initialize engine

        Args:
            aggregator: Search aggregator
            resolver: Lyrics resolver
        """
        self.aggregator = aggregator
        self.resolver = resolver
        self.logger = get_logger(__name__)

        self._request_ids = itertools.count(1)
        self._latest_request_id = 0
        self._latest_lyrics_request_id = 0
        self._lock = threading.Lock()

    def next_request_id(self) -> int:
        """Issue a new search request id, which becomes the current one"""
        with self._lock:
            request_id = next(self._request_ids)
            self._latest_request_id = request_id
            return request_id

    def next_lyrics_request_id(self) -> int:
        """Issue a new lyrics request id; searches in flight stay current"""
        with self._lock:
            request_id = next(self._request_ids)
            self._latest_lyrics_request_id = request_id
            return request_id

    def is_current(self, request_id: int) -> bool:
        """Whether request_id is the latest search or the latest lyrics request"""
        with self._lock:
            return request_id in (self._latest_request_id, self._latest_lyrics_request_id) and request_id > 0

    def search(self, query: str, mode: SearchMode = SearchMode.SONG,
               selected_artist: Optional[Artist] = None) -> SearchResult:
        """
        Search songs or artists

        Args:
            query: Free text query
            mode: Search pipeline
            selected_artist: Artist whose songs are wanted (artist mode)

        Returns:
            SearchResult carrying its request id
        """
        request_id = self.next_request_id()
        mode = SearchMode.from_value(mode)
        operation = create_operation_logger(__name__, f"search #{request_id} ({mode.value})")
        operation.start(f"Searching {mode.value} for '{query}'" +
                        (f" by artist '{selected_artist.name}'" if selected_artist else ""))

        result = self.aggregator.search(query, mode, selected_artist)
        result.request_id = request_id

        if result.failed:
            operation.progress(result.notice or "no results")
        operation.complete(f"{len(result)} results")
        return result

    def resolve_lyrics(self, song: Song) -> LyricsResult:
        """
        Resolve lyrics for a song

        Args:
            song: Song picked from a search result

        Returns:
            LyricsResult with lyric or guidance text, carrying its request id
        """
        request_id = self.next_lyrics_request_id()
        operation = create_operation_logger(__name__, f"lyrics #{request_id} for '{song.title}'")
        operation.start()
        result = self.resolver.resolve(song)
        result.request_id = request_id
        if result.ok:
            operation.complete(f"from {result.source_name}")
        else:
            operation.error(result.message or "unavailable")
        return result


class SearchSession:
    """
    Caller-side search state

    Holds the current mode, the selected artist and the latest accepted
    result. Results whose request id is no longer current are discarded.
    """

    def __init__(self, engine: LyricsEngine, mode: SearchMode = SearchMode.SONG):
        self.engine = engine
        self.mode = mode
        self.selected_artist: Optional[Artist] = None
        self.result: Optional[SearchResult] = None

    def set_mode(self, mode: SearchMode) -> None:
        mode = SearchMode.from_value(mode)
        if mode is not self.mode:
            self.mode = mode
            self.reset()

    def select_artist(self, artist: Optional[Artist]) -> None:
        """Select an artist, or clear the selection with None"""
        self.selected_artist = artist
        self.result = None

    def reset(self) -> None:
        """Drop the selected artist and any held results"""
        self.selected_artist = None
        self.result = None

    def search(self, query: str) -> Optional[SearchResult]:
        """
        Search in the current mode and keep the result if still current

        Returns:
            The accepted result, or None when a newer request superseded it
        """
        result = self.engine.search(query, self.mode, self.selected_artist)
        return self.accept(result)

    def accept(self, result: SearchResult) -> Optional[SearchResult]:
        """Keep a result only when its request is still the latest one"""
        if not self.engine.is_current(result.request_id) or result.mode is not self.mode:
            return None
        self.result = result
        return result

    @property
    def songs(self) -> List[Song]:
        return self.result.songs if self.result else []

    @property
    def artists(self) -> List[Artist]:
        return self.result.artists if self.result else []


def build_providers(settings: Settings) -> Tuple[List[CatalogProvider], List[LyricsProvider]]:
    """
    Build the configured providers

    Spotify is the primary catalog when its credentials are set; Genius is
    then the secondary catalog, or the only one otherwise. Genius is always
    the lyrics provider when its token is set.

    Args:
        settings: Application settings

    Returns:
        Tuple of (catalog providers primary first, lyrics providers)
    """
    catalog: List[CatalogProvider] = []
    lyrics: List[LyricsProvider] = []

    if settings.spotify_configured:
        catalog.append(SpotifyCatalog(auth=ClientCredentialsAuth(
            settings.spotify.client_id, settings.spotify.client_secret, settings.spotify.token_url
        )))

    if settings.genius_configured:
        genius = GeniusProvider(api_key=settings.lyrics.genius_api_key)
        catalog.append(genius)
        lyrics.append(genius)

    return catalog, lyrics


def build_regional_source(settings: Settings) -> RegionalSource:
    """
    Build the regional source from settings

    Args:
        settings: Application settings

    Returns:
        RegionalSource for the configured site
    """
    regional = settings.regional
    site = SlugSite(name=regional.site_name, url_template=regional.slug_url_template, home_url=regional.home_url)

    search_pages = []
    if regional.search_pages_enabled and regional.search_url_template:
        search_pages.append(SearchPageSource(site, regional.search_url_template, regional.search_page_results))

    return RegionalSource(
        fetcher=RequestsPageFetcher(user_agent=settings.network.user_agent),
        extractor=UnstructuredPageExtractor(
            min_lyrics_length=regional.min_lyrics_length,
            max_lyrics_length=regional.max_lyrics_length
        ),
        sites=[site],
        search_pages=search_pages,
        max_variations=regional.max_variations,
        fetch_timeout=regional.fetch_timeout,
        max_workers=regional.max_workers,
        rewrites=build_rewrite_table(regional.extra_slug_rewrites)
    )


def create_engine(settings: Optional[Settings] = None) -> LyricsEngine:
    """
    Create a fully wired engine

    Args:
        settings: Application settings, defaults to the global instance

    Returns:
        LyricsEngine
    """
    settings = settings or get_settings()
    logger = get_logger(__name__)

    catalog, lyrics = build_providers(settings)
    if not catalog:
        logger.warning("No catalog provider configured; song and artist searches will return nothing")

    aggregator = SearchAggregator(
        catalog,
        regional_source=build_regional_source(settings),
        song_limit=settings.search.song_limit,
        artist_limit=settings.search.artist_limit,
        artist_catalog_cap=settings.search.artist_catalog_cap,
        min_query_length=settings.search.min_query_length
    )
    logger.debug(f"Engine created with catalog providers {[p.name for p in catalog]}")
    return LyricsEngine(aggregator, LyricsResolver(lyrics))
