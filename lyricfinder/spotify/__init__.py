"""
Spotify integration package

Primary catalog provider for song search, artist search and artist
catalogs, authenticated with the client-credentials grant.
"""

from .client import SpotifyCatalog, get_spotify_catalog, reset_spotify_catalog

__all__ = [
    'SpotifyCatalog',
    'get_spotify_catalog',
    'reset_spotify_catalog',
]
