"""
Guidance content shown when no lyrics could be found

When every provider comes back empty the engine still shows something
useful: search strategies and, for Tamil songs, a ready-made web search.
This module holds that canned text and the coarse heuristic that decides
whether a song is Tamil.
"""

import re
from typing import Iterable, Optional
from urllib.parse import quote_plus

from ..models import LyricsSource, Song


TAMIL_SCRIPT = re.compile(r'[\u0B80-\u0BFF]')

REGIONAL_KEYWORDS = [
    'tamil', 'kollywood', 'chennai', 'madras', 'ilayaraja', 'rahman', 'yuvan',
    'anirudh', 'gv prakash', 'harris jayaraj', 'devi sri prasad', 'sean roldan',
]

REGIONAL_HELPER_NAME = "Tamil Lyrics Helper"
GENERIC_SUGGESTION_NAME = "Suggestion"
SEARCH_SUGGESTIONS_NAME = "Search Suggestions"

SEARCH_ENGINE_URL = "https://www.google.com/search?q={query}"

RECOMMENDED_SITES = [
    "TamilPaa.com",
    "Lyricstamil.com",
    "Tamillyrics.hoodi.com",
    "A2zlyrics.com (Tamil section)",
]

TAMIL_TIPS = """Try these search strategies:

1. Search with movie name: "[Movie Name] + {title}"
2. Use Tamil script: if you know the Tamil spelling
3. Try different spellings: Tamil names have multiple English spellings
4. Include composer: add the music director's name to the search

Recommended Tamil lyrics websites:
{sites}

Tips:
• Tamil songs often have better results when searched by movie name
• Include the year of release for more accurate results
• Try both original Tamil and transliterated versions"""


def is_regional_content(title: str, artist: str) -> bool:
    """
    Coarse check whether a song is Tamil

    True when the title or artist contains Tamil script, or when either
    mentions a Tamil keyword (language, industry, well-known composers).

    Args:
        title: Song title
        artist: Artist name

    Returns:
        True if the song looks Tamil
    """
    title = title or ""
    artist = artist or ""
    if TAMIL_SCRIPT.search(title) or TAMIL_SCRIPT.search(artist):
        return True

    combined = f"{title} {artist}".lower()
    return any(keyword in combined for keyword in REGIONAL_KEYWORDS)


def _site_list() -> str:
    return '\n'.join(f"• {site}" for site in RECOMMENDED_SITES)


def regional_guidance_source(title: str, artist: str) -> LyricsSource:
    """Guidance for a Tamil song, with a prepared web search URL"""
    text = f'Search suggestions for Tamil song "{title}" by {artist}:\n\n' + TAMIL_TIPS.format(
        title=title, sites=_site_list()
    )
    return LyricsSource(
        source_name=REGIONAL_HELPER_NAME,
        text=text,
        origin_url=SEARCH_ENGINE_URL.format(query=quote_plus(f"{title} {artist} tamil lyrics"))
    )


def generic_guidance_source(title: str, artist: str) -> LyricsSource:
    """Guidance for any other song"""
    text = (
        f'We couldn\'t find lyrics for "{title}" by {artist}.\n\n'
        "For Tamil songs, try searching with:\n"
        "• Original Tamil script\n"
        "• English transliteration\n"
        "• Movie name + song name\n\n"
        "Alternative sources to try:\n"
        "• Tamil lyrics websites\n"
        "• Movie soundtrack databases\n"
        "• Regional music platforms"
    )
    return LyricsSource(source_name=GENERIC_SUGGESTION_NAME, text=text, origin_url=None)


def guidance_for(title: str, artist: str) -> LyricsSource:
    """Pick the regional or the generic guidance for a song"""
    if is_regional_content(title, artist):
        return regional_guidance_source(title, artist)
    return generic_guidance_source(title, artist)


def search_suggestions_song(query: str, home_url: str, slugs: Optional[Iterable[str]] = None) -> Song:
    """
    Synthetic song returned by a regional search that found nothing

    Its only lyrics source is guidance text, so selecting it shows the
    tips instead of an error.

    Args:
        query: Query the user searched for
        home_url: Regional site home page
        slugs: Slug candidates that were tried, listed as suggestions

    Returns:
        Song carrying one "Search Suggestions" lyrics source
    """
    tried = list(slugs or [])[:4]
    text = TAMIL_TIPS.format(title=query, sites=_site_list())
    if tried:
        text += f'\n\nFor "{query}" specifically, try:\n' + '\n'.join(f'• "{slug}"' for slug in tried)
        text += "\n• Include the movie name if known"

    return Song(
        id=f"suggestions:{query}",
        title=f'Search suggestions for Tamil song "{query}"',
        artist_name=REGIONAL_HELPER_NAME,
        album_name="Search Tips",
        canonical_url=home_url,
        available_lyrics_sources=[LyricsSource(SEARCH_SUGGESTIONS_NAME, text, home_url)],
        source=REGIONAL_HELPER_NAME
    )
