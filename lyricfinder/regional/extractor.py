"""
Lyrics extraction from unstructured regional lyrics pages

Regional lyrics sites have no API, so the page HTML is parsed with
BeautifulSoup and the interesting parts are found with a few ordered
heuristics tuned for the tamil2lyrics.com layout family:

- Title: the first <h1>, minus its "Song Lyrics" suffix
- Singers / music director: a bold label in English or Tamil followed by the value
- Lyrics: the block after a "தமிழ்" marker, else the longest Tamil paragraph,
  else the first generic content container with enough text

Extraction never raises. A page whose best lyrics candidate is too short
after clean-up yields None.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from ..utils.helpers import collapse_blank_lines
from ..utils.logger import get_logger


UNKNOWN = "Unknown"

TAMIL_SCRIPT = re.compile(r'[\u0B80-\u0BFF]')
TAMIL_MARKER = 'தமிழ்'
TAMIL_TOKENS = ('ஆண்', 'குழு')

CONTENT_SELECTORS = ['.entry-content', '.post-content', '.lyrics-content', '.content', 'article']

TITLE_SUFFIX = re.compile(r'\s*song\s+lyrics\s*', re.IGNORECASE)

# Footer blocks removed from the end of the lyrics text
FOOTER_PATTERNS = [
    re.compile(r'tamil chat room.*\Z', re.IGNORECASE | re.DOTALL),
    re.compile(r'©\s*\d+\s*-\s*www\.tamil2lyrics\.com.*\Z', re.IGNORECASE | re.DOTALL),
]

# Elements whose end marks a line break in the extracted text
BLOCK_TAGS = ['p', 'div', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li']


@dataclass(frozen=True)
class FieldSpec:
    """
    How to find one labelled metadata field

    Attributes:
        name: Field name, for logging
        labels: Label text per language, tried in order
        default: Display value used when the field is absent
    """
    name: str
    labels: Tuple[str, ...]
    default: str = UNKNOWN


SINGERS_FIELD = FieldSpec('singers', ('Singers', 'பாடகர்கள்'))
MUSIC_BY_FIELD = FieldSpec('music_by', ('Music by', 'இசையமைப்பாளர்'))


@dataclass
class ExtractedSong:
    """
    Song data scraped from one lyrics page

    singers and music_by stay None when the page has no such field, so
    callers can tell "absent" from a page that literally says "Unknown".
    """
    title: str
    lyrics: str
    singers: Optional[str] = None
    music_by: Optional[str] = None

    @property
    def singers_display(self) -> str:
        return self.singers or SINGERS_FIELD.default

    @property
    def music_by_display(self) -> str:
        return self.music_by or MUSIC_BY_FIELD.default


class UnstructuredPageExtractor:
    """
    Heuristic extractor for regional lyrics pages

    The length bounds and container selectors are configurable so the same
    heuristics can serve sites of the same layout family.
    """

    def __init__(
        self,
        min_lyrics_length: int = 50,
        max_lyrics_length: int = 3000,
        container_min_length: int = 100,
        selectors: Optional[Sequence[str]] = None,
        fields: Sequence[FieldSpec] = (SINGERS_FIELD, MUSIC_BY_FIELD)
    ):
        """
        Initialize extractor

        Args:
            min_lyrics_length: Lyrics must be strictly longer than this to be accepted
            max_lyrics_length: Lyrics are truncated to this many characters
            container_min_length: Minimum text length for a generic content container
            selectors: CSS selectors probed as the last resort, in priority order
            fields: Metadata fields to resolve
        """
        self.min_lyrics_length = min_lyrics_length
        self.max_lyrics_length = max_lyrics_length
        self.container_min_length = container_min_length
        self.selectors = list(selectors or CONTENT_SELECTORS)
        self.fields = {spec.name: spec for spec in fields}
        self.all_labels = [label for spec in fields for label in spec.labels]
        self.logger = get_logger(__name__)

    def extract(self, html: str, fallback_title: str) -> Optional[ExtractedSong]:
        """
        Extract song data from a page

        Args:
            html: Page HTML
            fallback_title: Title used when the page has no <h1>, typically the slug

        Returns:
            ExtractedSong, or None when no lyrics block clears the length floor
        """
        try:
            soup = self._parse(html or "")
        except Exception as e:
            self.logger.debug(f"Could not parse page: {e}")
            return None

        lyrics = self._find_lyrics(soup)
        if not lyrics:
            return None

        lyrics = self.clean_lyrics(lyrics)
        if len(lyrics) <= self.min_lyrics_length:
            self.logger.debug(f"Lyrics candidate too short ({len(lyrics)} chars)")
            return None

        return ExtractedSong(
            title=self._find_title(soup, fallback_title),
            lyrics=lyrics,
            singers=self.resolve_field(soup, self.fields['singers']) if 'singers' in self.fields else None,
            music_by=self.resolve_field(soup, self.fields['music_by']) if 'music_by' in self.fields else None
        )

    def _parse(self, html: str) -> BeautifulSoup:
        soup = BeautifulSoup(html, 'html.parser')

        for br in soup.find_all('br'):
            br.replace_with('\n')

        for tag in soup.find_all(BLOCK_TAGS):
            tag.append('\n')

        return soup

    def _find_title(self, soup: BeautifulSoup, fallback_title: str) -> str:
        heading = soup.find('h1')
        if heading:
            title = TITLE_SUFFIX.sub(' ', heading.get_text()).strip()
            if title:
                return re.sub(r'\s+', ' ', title)
        return fallback_title.replace('-', ' ').strip()

    def resolve_field(self, soup: BeautifulSoup, spec: FieldSpec) -> Optional[str]:
        """
        Resolve a labelled field, trying each language's label in turn

        A value equal to the placeholder "Unknown" counts as absent so the
        next label gets a chance.

        Args:
            soup: Parsed page
            spec: Field definition

        Returns:
            Field value, or None when no label yields one
        """
        for label in spec.labels:
            value = self._value_after_label(soup, label)
            if value and value != UNKNOWN:
                return value
        return None

    def _value_after_label(self, soup: BeautifulSoup, label: str) -> Optional[str]:
        for tag in soup.find_all(['strong', 'b']):
            if label not in tag.get_text():
                continue

            value = self._strip_labels(self._sibling_text(tag))
            if not value and tag.parent is not None:
                value = self._strip_labels(tag.parent.get_text().split('\n')[0])
            if not value:
                # Value may be inside the label element itself ("Singers : X")
                value = self._strip_labels(tag.get_text())
            if value:
                return value
        return None

    def _sibling_text(self, tag: Tag) -> str:
        parts: List[str] = []
        for sibling in tag.next_siblings:
            if isinstance(sibling, Tag) and sibling.name in ('strong', 'b'):
                break
            text = str(sibling) if isinstance(sibling, NavigableString) else sibling.get_text()
            if '\n' in text:
                parts.append(text.split('\n')[0])
                break
            parts.append(text)
        return ''.join(parts)

    def _strip_labels(self, text: str) -> str:
        for label in self.all_labels:
            text = text.replace(label, '')
        text = re.sub(r'^[\s:：\-]+', '', text)
        return re.sub(r'\s+', ' ', text).strip()

    def _find_lyrics(self, soup: BeautifulSoup) -> str:
        return (self._lyrics_after_marker(soup)
                or self._longest_tamil_block(soup)
                or self._content_container(soup))

    def _lyrics_after_marker(self, soup: BeautifulSoup) -> str:
        """Method 1: block immediately following a "தமிழ்" marker element"""
        for string in soup.find_all(string=re.compile(TAMIL_MARKER)):
            marker = string.parent
            if marker is None:
                continue
            following = marker.find_next_sibling()
            if following is None:
                continue
            text = following.get_text().strip()
            if len(text) > self.min_lyrics_length:
                return text
        return ""

    def _longest_tamil_block(self, soup: BeautifulSoup) -> str:
        """Method 2: longest paragraph or div holding Tamil text"""
        best = ""
        for block in soup.find_all(['p', 'div']):
            text = block.get_text()
            if not (TAMIL_SCRIPT.search(text) or any(token in text for token in TAMIL_TOKENS)):
                continue
            if len(text) > len(best) and len(text) > self.min_lyrics_length:
                best = text
        return best

    def _content_container(self, soup: BeautifulSoup) -> str:
        """Method 3: first generic content container with enough text"""
        for selector in self.selectors:
            text = '\n'.join(element.get_text() for element in soup.select(selector)).strip()
            if len(text) > self.container_min_length:
                return text
        return ""

    def clean_lyrics(self, lyrics: str) -> str:
        """
        Normalize extracted lyrics text

        Collapses blank line runs, strips the site's chat-room and
        copyright footers and truncates to the maximum length.

        Args:
            lyrics: Raw text of the lyrics block

        Returns:
            Cleaned lyrics text
        """
        cleaned = collapse_blank_lines(lyrics)
        for pattern in FOOTER_PATTERNS:
            cleaned = pattern.sub('', cleaned)
        return cleaned.strip()[:self.max_lyrics_length]
