"""
Regional lyrics package

Slug guessing, page fetching and heuristic extraction for lyrics sites
that have no API. RegionalSource is the entry point used by the search
aggregator.
"""

from .slugs import generate_slug_variations, build_rewrite_table, DEFAULT_SLUG_REWRITES
from .extractor import UnstructuredPageExtractor, ExtractedSong, FieldSpec
from .fetcher import RequestsPageFetcher
from .source import RegionalSource, SearchPageSource, SlugSite, TAMIL2LYRICS

__all__ = [
    'generate_slug_variations',
    'build_rewrite_table',
    'DEFAULT_SLUG_REWRITES',
    'UnstructuredPageExtractor',
    'ExtractedSong',
    'FieldSpec',
    'RequestsPageFetcher',
    'RegionalSource',
    'SearchPageSource',
    'SlugSite',
    'TAMIL2LYRICS',
]
