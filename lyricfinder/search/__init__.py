"""
Search package

SearchAggregator runs song, artist and regional searches through their
provider fallback chains.
"""

from .aggregator import SearchAggregator, dedupe_songs, collapse_artists

__all__ = [
    'SearchAggregator',
    'dedupe_songs',
    'collapse_artists',
]
