"""
Provider interfaces consumed by the resolution engine

The search aggregator and the lyrics resolver only ever talk to these
abstract classes. Concrete adapters live in the spotify, lyrics and
regional packages and translate their library errors into the
ProviderError family before they reach the engine.
"""

from abc import ABC, abstractmethod
from typing import List, Union

from .models import Artist, ProviderHandle, Song, SongRef


class CatalogProvider(ABC):
    """
    Structured song/artist metadata provider

    Every method may raise ProviderUnavailable, AuthFailed or RateLimited.
    Empty lists mean "nothing found" and are not errors.
    """

    #: Adapter name, matched against ProviderHandle.provider
    name: str = ""

    @abstractmethod
    def search_tracks(self, text: str, limit: int) -> List[Song]:
        """Search songs matching free text, best match first"""

    @abstractmethod
    def search_artists(self, text: str, limit: int) -> List[Artist]:
        """Search artists matching free text, best match first"""

    @abstractmethod
    def get_top_tracks(self, handle: ProviderHandle) -> List[Song]:
        """Most popular songs of the artist behind the handle"""

    @abstractmethod
    def get_full_catalog(self, handle: ProviderHandle, limit: int) -> List[Song]:
        """Every song of the artist, deduplicated by id, at most limit songs"""

    def owns(self, handle) -> bool:
        """Whether a handle was produced by this provider"""
        return handle is not None and handle.provider == self.name


class LyricsProvider(ABC):
    """
    Structured lyrics provider

    Methods may raise NotFound in addition to the CatalogProvider errors.
    """

    name: str = ""

    @abstractmethod
    def search_songs(self, text: str) -> List[SongRef]:
        """Search songs this provider has lyrics for"""

    @abstractmethod
    def fetch_lyrics(self, ref: Union[SongRef, ProviderHandle]) -> str:
        """Lyric text for a song reference, raises NotFound when absent"""

    def owns(self, handle) -> bool:
        return handle is not None and handle.provider == self.name


class PageFetcher(ABC):
    """Fetches raw HTML, raises FetchFailed on any failure"""

    @abstractmethod
    def fetch(self, url: str, timeout: float) -> str:
        """Return the page body for url"""
