"""
URL slug candidates for regional lyrics sites

Regional lyrics sites expose no search API worth using, but their page URLs
follow the song title closely ("/lyrics/{slug}/"). This module turns a free
text query into an ordered list of slug guesses, most likely first:

1. the base slug and its two common suffixed forms
2. a table of regex rewrites (artist-name canonicalizations, dropped
   "song"/"lyrics" tokens, a no-space form)
3. suffix templates ("-song", "-tamil-lyrics", "-lyrics")
4. a "song"-less variant when the query contains the word

The rewrite table is plain data so it can be extended from settings
without touching this module.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

# (pattern, replacement) pairs applied to the cleaned query, in order
DEFAULT_SLUG_REWRITES: List[Tuple[str, str]] = [
    (r'\bgod\s+bless\b', 'godbless'),
    (r'\banirudh\b', 'anirudh-ravichander'),
    (r'\bpaal\s+dabba\b', 'paaldabba'),
    (r'\s+(song|lyrics)\b', ''),
    (r'\s+', ''),
]

# Suffix templates, {hyphenated} and {nospace} are filled from the cleaned query
DEFAULT_SLUG_TEMPLATES: List[str] = [
    '{hyphenated}-song',
    '{hyphenated}-tamil-lyrics',
    '{nospace}-lyrics',
]

MAX_VARIATIONS = 24


def make_base_slug(query: str) -> str:
    """
    Build the canonical slug for a query

    Args:
        query: Free text query

    Returns:
        Lower-case slug of [a-z0-9] words joined by single hyphens,
        empty when the query has no usable characters
    """
    slug = re.sub(r'[^a-z0-9\s]', '', query.lower().strip())
    slug = re.sub(r'\s+', '-', slug.strip())
    slug = re.sub(r'-{2,}', '-', slug)
    return slug.strip('-')


def _format_slug(candidate: str) -> str:
    # Rewrites may introduce hyphens, so they are kept here
    slug = re.sub(r'[^a-z0-9\s-]', '', candidate.lower())
    slug = re.sub(r'\s+', '-', slug.strip())
    slug = re.sub(r'-{2,}', '-', slug)
    return slug.strip('-')


def _apply_rewrite(text: str, pattern: str, replacement: str) -> Optional[str]:
    try:
        return re.sub(pattern, replacement, text)
    except re.error:
        # A bad entry from configuration must not break generation
        return None


def generate_slug_variations(
    query: str,
    rewrites: Optional[Sequence[Tuple[str, str]]] = None,
    templates: Optional[Sequence[str]] = None,
    limit: int = MAX_VARIATIONS
) -> List[str]:
    """
    Generate ordered slug candidates for a query

    Pure and deterministic: the same query and tables always give the
    same list. Never raises; a query without any [a-z0-9] characters
    gives an empty list.

    Args:
        query: Free text query
        rewrites: (pattern, replacement) table, defaults to DEFAULT_SLUG_REWRITES
        templates: Suffix templates, defaults to DEFAULT_SLUG_TEMPLATES
        limit: Maximum number of candidates returned

    Returns:
        Deduplicated slug candidates, base slug first

    Example:
        >>> generate_slug_variations("happy birthday")[:3]
        ['happy-birthday', 'happy-birthday-song-lyrics', 'happy-birthday-lyrics']
    """
    if not query:
        return []

    rewrites = DEFAULT_SLUG_REWRITES if rewrites is None else rewrites
    templates = DEFAULT_SLUG_TEMPLATES if templates is None else templates

    clean = query.lower().strip()
    base = make_base_slug(clean)

    if not base:
        return []

    candidates: List[str] = [base, f"{base}-song-lyrics", f"{base}-lyrics"]

    rewritten = [_apply_rewrite(clean, pattern, replacement) for pattern, replacement in rewrites]

    hyphenated = re.sub(r'\s+', '-', clean)
    nospace = re.sub(r'\s+', '', clean)
    for template in templates:
        try:
            rewritten.append(template.format(hyphenated=hyphenated, nospace=nospace))
        except (KeyError, IndexError, ValueError):
            continue

    for candidate in rewritten:
        if candidate and len(candidate) > 2:
            candidates.append(_format_slug(candidate))

    if 'song' in clean:
        without_song = make_base_slug(re.sub(r'\bsong\b', '', clean))
        if without_song:
            candidates.extend([without_song, f"{without_song}-lyrics"])

    return _unique(candidates)[:limit]


def _unique(candidates: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for candidate in candidates:
        if len(candidate) <= 1 or candidate in seen:
            continue
        seen.add(candidate)
        result.append(candidate)
    return result


def build_rewrite_table(extra: Optional[Iterable[Sequence[str]]] = None) -> List[Tuple[str, str]]:
    """
    Combine the default rewrites with entries from configuration

    Malformed entries (anything that is not a pair) are skipped.

    Args:
        extra: Additional [pattern, replacement] pairs

    Returns:
        Rewrite table with the defaults first
    """
    table = list(DEFAULT_SLUG_REWRITES)
    for entry in extra or []:
        if isinstance(entry, (list, tuple)) and len(entry) == 2:
            table.append((str(entry[0]), str(entry[1])))
    return table
