"""
Lyric-Finder: search songs and artists, read lyrics from the terminal

Lyric-Finder resolves a free text query to songs or artists and then to
lyric text. Spotify is the primary catalog, Genius is both the secondary
catalog and the structured lyrics provider, and Tamil songs that neither
service covers are found by guessing page URLs on regional lyrics sites
and extracting the lyrics from their HTML.

## Core Architecture

**Configuration (`lyricfinder/config/`)**
- YAML and environment variable settings, singleton access
- Spotify client-credentials token with an in-memory cache

**Catalog and lyrics providers (`lyricfinder/spotify/`, `lyricfinder/lyrics/`)**
- SpotifyCatalog: track search, artist search, top tracks, full catalog
- GeniusProvider: secondary catalog plus lyrics search and fetch
- Guidance text when no provider has the lyrics

**Regional sites (`lyricfinder/regional/`)**
- Slug variations generated from the query
- Parallel page fetches and heuristic extraction of title, singers,
  music director and lyrics

**Search and resolution (`lyricfinder/search/`, `lyricfinder/engine.py`)**
- Ordered fallback chains across providers per search mode
- Per-song lyrics resolution state machine
- Request ids so callers can drop stale results

## Quick Start
```bash
pip install -e .
export SPOTIFY_CLIENT_ID=... SPOTIFY_CLIENT_SECRET=... GENIUS_API_KEY=...

lyric-finder search "shape of you"
lyric-finder search --mode artist "anirudh"
lyric-finder lyrics --mode regional "vennilave vennilave" --pick 1
lyric-finder doctor
```
"""

# Version information for the Lyric-Finder package
__version__ = "0.1.0"

__author__ = "Lyric-Finder Team"

__description__ = "Search songs and artists on Spotify and Genius and resolve lyrics, including Tamil lyrics sites"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
