"""
Lyrics package: structured lyrics provider, guidance content and resolution

Key components:
- GeniusProvider: Genius API adapter, used both as the lyrics provider and
  as the secondary catalog
- LyricsResolver: per-song resolution state machine (prefetched lyrics,
  direct provider lookup, provider search, guidance fallback)
- guidance: canned suggestion text and the Tamil content heuristic

Usage:
    resolver = LyricsResolver([get_genius_provider()])
    result = resolver.resolve(song)
"""

from .genius import GeniusProvider, get_genius_provider, reset_genius_provider, clean_genius_lyrics
from .guidance import is_regional_content, guidance_for, search_suggestions_song
from .resolver import LyricsResolver

__all__ = [
    'GeniusProvider',
    'get_genius_provider',
    'reset_genius_provider',
    'clean_genius_lyrics',
    'is_regional_content',
    'guidance_for',
    'search_suggestions_song',
    'LyricsResolver',
]
