"""
Per-song lyrics resolution

LyricsResolver walks one song through the resolution state machine:

    PENDING_PREFETCHED       song already carries lyrics (regional results)
    PENDING_PROVIDER_DIRECT  song came from a lyrics provider, fetch by handle
    PENDING_PROVIDER_SEARCH  search each lyrics provider by "{title} {artist}"
    PENDING_ALTERNATIVE      build guidance text (Tamil helper or generic tips)
    RESOLVED | FAILED

"Nothing found" is not a failure: it resolves to guidance content. FAILED
is reserved for guidance generation itself raising.
"""

from typing import List, Optional, Sequence

from .guidance import guidance_for
from ..exceptions import LyricsUnavailable, ProviderError
from ..models import LyricsResult, LyricsSource, ResolutionState, Song, SongRef
from ..providers import LyricsProvider
from ..utils.logger import get_logger


class LyricsResolver:
    """
    Resolves lyrics for a selected song

    Lyrics providers are tried in list order for both the direct-handle
    and the search steps.
    """

    def __init__(self, providers: Sequence[LyricsProvider]):
        """
        Initialize resolver

        Args:
            providers: Lyrics providers, highest priority first
        """
        self.providers = list(providers)
        self.logger = get_logger(__name__)

    def resolve(self, song: Song) -> LyricsResult:
        """
        Resolve lyrics for a song

        Args:
            song: Song selected by the user

        Returns:
            LyricsResult holding lyric or guidance text, or an error when
            even guidance could not be produced
        """
        step = self._enter(song, ResolutionState.PENDING_PREFETCHED)

        if song.available_lyrics_sources:
            sources = song.available_lyrics_sources
            self.logger.debug(f"Using prefetched lyrics from {sources[0].source_name} for '{song.title}'")
            return LyricsResult.resolved(sources[0], sources[1:], step=step)

        step = self._enter(song, ResolutionState.PENDING_PROVIDER_DIRECT)
        source = self._fetch_direct(song)
        if source:
            return LyricsResult.resolved(source, step=step)

        step = self._enter(song, ResolutionState.PENDING_PROVIDER_SEARCH)
        source = self._fetch_by_search(song)
        if source:
            return LyricsResult.resolved(source, step=step)

        step = self._enter(song, ResolutionState.PENDING_ALTERNATIVE)
        try:
            guidance = self._alternative(song)
        except Exception as e:
            self.logger.error(f"Could not build alternative content for '{song.title}': {e}", exc_info=True)
            return LyricsResult.failed(
                LyricsUnavailable.__name__,
                f"Lyrics for \"{song.title}\" are unavailable: {e}",
                step=step
            )

        self.logger.info(f"No lyrics found for '{song.display_name}', showing {guidance.source_name}")
        return LyricsResult.resolved(guidance, [guidance], step=step)

    def _fetch_direct(self, song: Song) -> Optional[LyricsSource]:
        handle = song.provider_handle
        if handle is None:
            return None

        for provider in self.providers:
            if not provider.owns(handle):
                continue
            try:
                text = provider.fetch_lyrics(handle)
            except ProviderError as e:
                self.logger.warning(f"{provider.name} could not fetch lyrics for '{song.title}': {e}")
                return None
            except Exception as e:
                self.logger.error(f"Unexpected error fetching {provider.name} lyrics for '{song.title}': {e}",
                                  exc_info=True)
                return None
            if text and text.strip():
                return LyricsSource(self._source_name(provider), text, song.canonical_url or None)
        return None

    def _fetch_by_search(self, song: Song) -> Optional[LyricsSource]:
        query = f"{song.title} {song.artist_name}".strip()

        for provider in self.providers:
            try:
                refs = provider.search_songs(query)
                match = self.pick_match(refs, song)
                if match is None:
                    self.logger.debug(f"{provider.name} found no match for '{query}'")
                    continue
                text = provider.fetch_lyrics(match)
            except ProviderError as e:
                self.logger.warning(f"{provider.name} lyrics search failed for '{query}': {e}")
                continue
            except Exception as e:
                self.logger.error(f"Unexpected error in {provider.name} lyrics search for '{query}': {e}",
                                  exc_info=True)
                continue

            if text and text.strip():
                return LyricsSource(self._source_name(provider), text, match.url)
        return None

    @staticmethod
    def pick_match(refs: List[SongRef], song: Song) -> Optional[SongRef]:
        """
        Choose the search result to fetch lyrics for

        An exact case-insensitive title and artist match wins over the
        first result.

        Args:
            refs: Search results in provider order
            song: Song being resolved

        Returns:
            Selected reference, or None for an empty result list
        """
        if not refs:
            return None
        for ref in refs:
            if ref.matches(song.title, song.artist_name):
                return ref
        return refs[0]

    @staticmethod
    def _alternative(song: Song) -> LyricsSource:
        return guidance_for(song.title, song.artist_name)

    @staticmethod
    def _source_name(provider: LyricsProvider) -> str:
        return provider.name.capitalize()

    def _enter(self, song: Song, state: ResolutionState) -> ResolutionState:
        self.logger.debug(f"Resolving '{song.title}': {state.value}")
        return state
