"""
Exception classes for Lyric-Finder

This module defines all custom exceptions used throughout the application.
Provider adapters translate library errors (spotipy, lyricsgenius, requests)
into this taxonomy so that the search aggregator and the lyrics resolver can
treat every provider the same way: a ProviderError means "try the next one".

Exception Hierarchy:
    LyricFinderError (base)
        ConfigError - Configuration file issues
        ProviderError - Any external provider failure
            ProviderUnavailable - Network failure, timeout, 5xx
                AuthFailed - Credentials rejected or missing
                RateLimited - Provider asked us to slow down
            NotFound - Provider has no such entity
        FetchFailed - Lyrics page could not be fetched
        SearchFailed - Every step of a search fallback chain came back empty
        LyricsUnavailable - Lyrics resolution could not produce any content
"""

from typing import Optional


class LyricFinderError(Exception):
    """
    Base exception for all Lyric-Finder errors

    Attributes:
        message: Human-readable error description.
        details: Dictionary with additional context (provider, url, status code).

    Example:
        try:
            songs = provider.search_tracks("kanmani", 10)
        except LyricFinderError as e:
            logger.error(f"Search failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        """
        Initialize the base exception

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'provider': Name of the provider adapter involved
                     - 'url': URL that caused the error
                     - 'status_code': HTTP status returned by the provider
                     - 'original_error': The underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricFinderError):
    """
    Raised when the configuration cannot be used.

    Common causes:
        - config.yaml has invalid YAML syntax
        - A slug URL template without a {slug} placeholder
    """
    pass


class ProviderError(LyricFinderError):
    """
    Base class for failures of an external provider.

    None of these are fatal: callers log them and move on to the next
    provider in their fallback chain.

    Attributes:
        provider: Name of the adapter that failed ('spotify', 'genius', ...).
    """

    def __init__(self, message: str, provider: str = "", details: Optional[dict] = None) -> None:
        details = dict(details or {})
        if provider:
            details.setdefault('provider', provider)
        super().__init__(message, details)
        self.provider = provider


class ProviderUnavailable(ProviderError):
    """
    Raised when a provider cannot be reached or answers with a server error.

    Common causes:
        - Network connectivity issues or DNS failure
        - Request timeout
        - HTTP 5xx responses
        - Provider not configured at all
    """
    pass


class AuthFailed(ProviderUnavailable):
    """
    Raised when a provider rejects our credentials.

    Common causes:
        - Wrong Spotify client id or secret
        - Missing or revoked Genius access token
        - Token endpoint answering 400/401
    """
    pass


class RateLimited(ProviderUnavailable):
    """
    Raised when a provider answers HTTP 429.

    Attributes:
        retry_after: Seconds the provider asked us to wait, if known.

    Example:
        raise RateLimited(
            "Spotify rate limit exceeded",
            provider="spotify",
            retry_after=30
        )
    """

    def __init__(self, message: str, provider: str = "", retry_after: Optional[float] = None,
                 details: Optional[dict] = None) -> None:
        super().__init__(message, provider, details)
        self.retry_after = retry_after
        if retry_after is not None:
            self.details.setdefault('retry_after', retry_after)


class NotFound(ProviderError):
    """
    Raised when a provider has no entity for the given id, or no lyrics
    for a song it knows.
    """
    pass


class FetchFailed(LyricFinderError):
    """
    Raised by a page fetcher when a lyrics page cannot be retrieved.

    A candidate slug that does not exist produces this error (HTTP 404),
    so it is expected and only logged at debug level by the regional source.

    Attributes:
        url: URL that was requested.
        status_code: HTTP status, None for network errors and timeouts.
    """

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None,
                 details: Optional[dict] = None) -> None:
        details = dict(details or {})
        if url:
            details.setdefault('url', url)
        if status_code is not None:
            details.setdefault('status_code', status_code)
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class SearchFailed(LyricFinderError):
    """
    Returned (not raised) inside a SearchResult when every step of a
    search fallback chain produced nothing.
    """
    pass


class LyricsUnavailable(LyricFinderError):
    """
    Raised when lyrics resolution cannot produce any content, not even
    guidance text.
    """
    pass
