"""
HTTP page fetcher for regional lyrics sites
"""

from typing import Optional

import requests

from ..config.settings import get_settings
from ..exceptions import FetchFailed
from ..providers import PageFetcher
from ..utils.logger import get_logger


class RequestsPageFetcher(PageFetcher):
    """
    PageFetcher backed by a shared requests.Session

    Every failure (timeout, connection error, non-2xx status) is raised
    as FetchFailed so callers only have one exception type to handle.
    """

    def __init__(self, user_agent: Optional[str] = None, session: Optional[requests.Session] = None):
        """
        Initialize fetcher

        Args:
            user_agent: User-Agent header, defaults to settings
            session: Session to reuse, a new one is created if None
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or self.settings.network.user_agent,
            'Accept': 'text/html,application/xhtml+xml',
        })

    def fetch(self, url: str, timeout: float) -> str:
        """
        Fetch a page

        Args:
            url: Page URL
            timeout: Seconds before the request is abandoned

        Returns:
            Decoded page body

        Raises:
            FetchFailed: On any network error or non-2xx response
        """
        try:
            response = self.session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchFailed(f"HTTP {status} for {url}", url=url, status_code=status) from e
        except requests.Timeout as e:
            raise FetchFailed(f"Timed out after {timeout}s fetching {url}", url=url) from e
        except requests.RequestException as e:
            raise FetchFailed(f"Request failed for {url}: {e}", url=url) from e

        # Sites often omit the charset, requests then falls back to ISO-8859-1
        if not response.encoding or response.encoding.lower() == 'iso-8859-1':
            response.encoding = response.apparent_encoding or 'utf-8'

        self.logger.debug(f"Fetched {url} ({len(response.text)} chars)")
        return response.text

    def close(self) -> None:
        self.session.close()
