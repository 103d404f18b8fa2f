"""
Regional lyrics search by URL slug guessing

RegionalSource turns a query into slug candidates, fetches the matching
pages of each configured site, extracts lyrics and returns one Song per
distinct page title. Songs produced here carry their lyrics with them,
so resolving them never calls a lyrics provider.

Fetches for one site run on a thread pool, but results are always put
back into slug-generation order before deduplication, so the output does
not depend on which request finished first.
"""

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote_plus, urljoin, urlparse

from bs4 import BeautifulSoup

from .extractor import ExtractedSong, UnstructuredPageExtractor
from .slugs import generate_slug_variations
from ..exceptions import FetchFailed
from ..lyrics.guidance import search_suggestions_song
from ..models import LyricsSource, Song
from ..providers import PageFetcher
from ..utils.logger import get_logger, log_performance


@dataclass(frozen=True)
class SlugSite:
    """
    A lyrics site whose page URLs are derived from the song title

    Attributes:
        name: Display name, also used as the lyrics source name
        url_template: Page URL with a {slug} placeholder
        home_url: Site home page
    """
    name: str
    url_template: str
    home_url: str

    def url_for(self, slug: str) -> str:
        return self.url_template.format(slug=slug)


TAMIL2LYRICS = SlugSite(
    name="Tamil2Lyrics.com",
    url_template="https://www.tamil2lyrics.com/lyrics/{slug}/",
    home_url="https://www.tamil2lyrics.com"
)


class SearchPageSource:
    """
    Secondary lookup through a site's own search results page

    Fetches the search page, follows the first few result links that
    point at lyrics pages and extracts them like any slug page.
    """

    def __init__(self, site: SlugSite, search_url_template: str, max_results: int = 2,
                 link_pattern: str = r'/lyrics/[^/]+/?$'):
        """
        Initialize search page source

        Args:
            site: Site the search page belongs to
            search_url_template: Search URL with a {query} placeholder
            max_results: Number of result links followed
            link_pattern: Regex a result link path must match
        """
        self.site = site
        self.search_url_template = search_url_template
        self.max_results = max_results
        self.link_pattern = re.compile(link_pattern)
        self.logger = get_logger(__name__)

    def result_links(self, html: str, base_url: str) -> List[str]:
        """
        Collect result links from a search page

        Args:
            html: Search page HTML
            base_url: URL the page was fetched from, for relative links

        Returns:
            Absolute lyrics page URLs in page order, without duplicates
        """
        soup = BeautifulSoup(html or "", 'html.parser')
        site_host = urlparse(self.site.home_url).netloc

        links: List[str] = []
        for anchor in soup.find_all('a', href=True):
            url = urljoin(base_url, anchor['href'])
            parsed = urlparse(url)
            if parsed.netloc and site_host and parsed.netloc != site_host:
                continue
            if not self.link_pattern.search(parsed.path) or url in links:
                continue
            links.append(url)
            if len(links) >= self.max_results:
                break
        return links

    def search(self, query: str, fetcher: PageFetcher, extractor: UnstructuredPageExtractor,
               timeout: float) -> List[Tuple[str, str, ExtractedSong]]:
        """
        Run the search page lookup

        Returns:
            (slug, url, extracted) tuples for every result page with lyrics
        """
        search_url = self.search_url_template.format(query=quote_plus(query))
        try:
            html = fetcher.fetch(search_url, timeout)
        except FetchFailed as e:
            self.logger.debug(f"Search page unavailable: {e}")
            return []

        found = []
        for url in self.result_links(html, search_url):
            slug = urlparse(url).path.rstrip('/').rsplit('/', 1)[-1]
            try:
                page = fetcher.fetch(url, timeout)
            except FetchFailed as e:
                self.logger.debug(f"Search result unavailable: {e}")
                continue
            extracted = extractor.extract(page, slug)
            if extracted:
                found.append((slug, url, extracted))
        return found


class RegionalSource:
    """
    Lyrics search against regional sites by slug guessing

    search() never returns an empty list: when nothing is found it returns
    a single synthetic song carrying search suggestions.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: Optional[UnstructuredPageExtractor] = None,
        sites: Sequence[SlugSite] = (TAMIL2LYRICS,),
        search_pages: Sequence[SearchPageSource] = (),
        max_variations: int = 8,
        fetch_timeout: float = 10,
        max_workers: int = 4,
        rewrites: Optional[Sequence[Tuple[str, str]]] = None
    ):
        """
        Initialize regional source

        Args:
            fetcher: Page fetcher used for every request
            extractor: Page extractor, a default one is created if None
            sites: Slug sites tried in order
            search_pages: Secondary search page sources, tried after the slug sites
            max_variations: Number of slug candidates fetched per site
            fetch_timeout: Per-request timeout in seconds
            max_workers: Concurrent fetches per site, 1 fetches sequentially
            rewrites: Slug rewrite table, defaults to the built-in one
        """
        self.fetcher = fetcher
        self.extractor = extractor or UnstructuredPageExtractor()
        self.sites = list(sites)
        self.search_pages = list(search_pages)
        self.max_variations = max_variations
        self.fetch_timeout = fetch_timeout
        self.max_workers = max(1, max_workers)
        self.rewrites = rewrites
        self.logger = get_logger(__name__)

    @property
    def home_url(self) -> str:
        return self.sites[0].home_url if self.sites else TAMIL2LYRICS.home_url

    @log_performance
    def search(self, query: str) -> List[Song]:
        """
        Search regional sites for a query

        Args:
            query: Normalized query text

        Returns:
            Songs in slug-generation order followed by search page results,
            or a single search-suggestions song
        """
        slugs = generate_slug_variations(query, rewrites=self.rewrites)
        self.logger.debug(f"Generated {len(slugs)} slug variations for '{query}': {slugs}")

        songs: List[Song] = []
        try:
            candidates = slugs[:self.max_variations]
            for site in self.sites:
                for slug, extracted in self._search_site(site, candidates):
                    self._keep(songs, self._to_song(site, slug, site.url_for(slug), extracted))

            for page_source in self.search_pages:
                for slug, url, extracted in page_source.search(query, self.fetcher, self.extractor, self.fetch_timeout):
                    self._keep(songs, self._to_song(page_source.site, slug, url, extracted))
        except Exception as e:
            self.logger.error(f"Regional search failed for '{query}': {e}", exc_info=True)

        if not songs:
            self.logger.info(f"No regional lyrics for '{query}', returning search suggestions")
            return [search_suggestions_song(query, self.home_url, slugs)]

        self.logger.info(f"Regional search for '{query}' found {len(songs)} songs")
        return songs

    def _search_site(self, site: SlugSite, slugs: List[str]) -> List[Tuple[str, ExtractedSong]]:
        if self.max_workers == 1 or len(slugs) <= 1:
            outcomes = [self._try_slug(site, slug) for slug in slugs]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(slugs))) as executor:
                # map() yields in submission order, which is slug order
                outcomes = list(executor.map(lambda slug: self._try_slug(site, slug), slugs))

        return [(slug, extracted) for slug, extracted in zip(slugs, outcomes) if extracted]

    def _try_slug(self, site: SlugSite, slug: str) -> Optional[ExtractedSong]:
        url = site.url_for(slug)
        try:
            html = self.fetcher.fetch(url, self.fetch_timeout)
        except FetchFailed as e:
            self.logger.debug(f"Missed candidate {slug}: {e}")
            return None

        extracted = self.extractor.extract(html, slug)
        if extracted:
            self.logger.debug(f"Found lyrics with variation: {slug}")
        return extracted

    @staticmethod
    def _keep(songs: List[Song], song: Song) -> None:
        # Deduplicate by title exactly as extracted
        if not any(existing.title == song.title for existing in songs):
            songs.append(song)

    @staticmethod
    def _to_song(site: SlugSite, slug: str, url: str, extracted: ExtractedSong) -> Song:
        return Song(
            id=f"{site.name}:{slug}",
            title=extracted.title,
            artist_name=extracted.singers_display,
            album_name=extracted.music_by_display,
            canonical_url=url,
            available_lyrics_sources=[LyricsSource(site.name, extracted.lyrics, url)],
            source=site.name
        )
