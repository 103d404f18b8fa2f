"""
Spotify client-credentials authentication for Lyric-Finder

Catalog lookups need no user context, so the Spotify adapter authenticates
with the client-credentials grant only. This module provides two pieces:

1. TokenCache:
   - Holds one (access_token, expires_at) pair in memory, never on disk
   - Refreshes it ahead of expiry using a safety buffer
   - Serializes refreshes with a lock so that concurrent callers trigger
     at most one token request and all reuse its result
   - Can be invalidated when the API answers 401

2. ClientCredentialsAuth:
   - Performs the token request against the Spotify accounts service
   - Translates HTTP and network failures into AuthFailed / ProviderUnavailable
   - Retries transient failures with exponential backoff

Usage:
    auth = get_auth()
    token = auth.get_valid_token()
"""

import threading
import time
from typing import Callable, Optional, Tuple

import requests

from .settings import get_settings
from ..exceptions import AuthFailed, ProviderUnavailable
from ..utils.helpers import retry_on_failure
from ..utils.logger import get_logger


# Refresh tokens this many seconds before they actually expire
SAFETY_BUFFER_SECONDS = 300


class TokenCache:
    """
    Thread-safe in-memory access token cache

    The fetch callable returns (access_token, expires_in_seconds). The cache
    calls it only when no token is held or the held token is within the
    safety buffer of its expiry.
    """

    def __init__(
        self,
        fetch_token: Callable[[], Tuple[str, int]],
        safety_buffer: int = SAFETY_BUFFER_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize token cache

        Args:
            fetch_token: Callable performing the token request
            safety_buffer: Seconds before expiry at which the token counts as expired
            clock: Time source, injectable for tests
        """
        self._fetch_token = fetch_token
        self._safety_buffer = safety_buffer
        self._clock = clock
        self._lock = threading.Lock()
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0
        self.refresh_count = 0
        self.logger = get_logger(__name__)

    def _valid_token(self) -> Optional[str]:
        """The held token if still fresh; token and expiry are read once"""
        token, expires_at = self._access_token, self._expires_at
        if not token or self._clock() >= (expires_at - self._safety_buffer):
            return None
        return token

    def get_token(self) -> str:
        """
        Get a valid access token, refreshing it if needed

        Callers that arrive while a refresh is running wait on the lock
        and then reuse the freshly fetched token instead of requesting
        another one.

        Returns:
            Access token string

        Raises:
            AuthFailed: If the credentials were rejected
            ProviderUnavailable: If the token endpoint could not be reached
        """
        token = self._valid_token()
        if token:
            return token

        with self._lock:
            # Another thread may have refreshed while we waited
            token = self._valid_token()
            if token:
                return token

            self.logger.debug("Requesting new access token")
            access_token, expires_in = self._fetch_token()
            self._access_token = access_token
            self._expires_at = self._clock() + int(expires_in)
            self.refresh_count += 1
            self.logger.debug(f"Access token refreshed, valid for {expires_in}s")
            return access_token

    def invalidate(self) -> None:
        """Drop the held token so the next call refreshes it"""
        with self._lock:
            self._access_token = None
            self._expires_at = 0.0

    @property
    def has_token(self) -> bool:
        return self._valid_token() is not None


class ClientCredentialsAuth:
    """
    Spotify client-credentials grant

    Owns a TokenCache whose fetch function posts to the Spotify token
    endpoint with the configured client id and secret.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        token_url: Optional[str] = None
    ):
        """
        Initialize client-credentials authentication

        Args:
            client_id: Spotify client id, defaults to settings
            client_secret: Spotify client secret, defaults to settings
            token_url: Token endpoint, defaults to settings
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.client_id = client_id if client_id is not None else self.settings.spotify.client_id
        self.client_secret = client_secret if client_secret is not None else self.settings.spotify.client_secret
        self.token_url = token_url or self.settings.spotify.token_url
        self.timeout = self.settings.network.request_timeout

        self.token_cache = TokenCache(self._fetch_with_retry)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _request_token(self) -> Tuple[str, int]:
        """
        Perform the client-credentials token request

        Returns:
            Tuple of (access_token, expires_in)

        Raises:
            AuthFailed: Credentials missing or rejected (HTTP 400/401)
            ProviderUnavailable: Network error, timeout or server error
        """
        if not self.is_configured:
            raise AuthFailed("Spotify client_id and client_secret must be configured", provider="spotify")

        try:
            response = requests.post(
                self.token_url,
                data={'grant_type': 'client_credentials'},
                auth=(self.client_id, self.client_secret),
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ProviderUnavailable(
                f"Spotify token endpoint unreachable: {e}",
                provider="spotify",
                details={'original_error': str(e)}
            ) from e

        if response.status_code in (400, 401):
            raise AuthFailed(
                "Spotify rejected the client credentials",
                provider="spotify",
                details={'status_code': response.status_code}
            )

        if response.status_code >= 400:
            raise ProviderUnavailable(
                f"Spotify token endpoint returned HTTP {response.status_code}",
                provider="spotify",
                details={'status_code': response.status_code}
            )

        try:
            token_data = response.json()
            return token_data['access_token'], int(token_data.get('expires_in', 3600))
        except (ValueError, KeyError) as e:
            raise ProviderUnavailable(
                "Malformed token response from Spotify",
                provider="spotify",
                details={'original_error': str(e)}
            ) from e

    def _fetch_with_retry(self) -> Tuple[str, int]:
        network = self.settings.network
        retrying = retry_on_failure(
            max_attempts=network.max_retries,
            delay=network.retry_delay,
            exceptions=(ProviderUnavailable,),
            giveup=(AuthFailed,)
        )
        return retrying(self._request_token)()

    def get_valid_token(self) -> str:
        """
        Get a valid Spotify access token

        Returns:
            Access token string

        Raises:
            AuthFailed: If the credentials were rejected
            ProviderUnavailable: If the token endpoint could not be reached
        """
        return self.token_cache.get_token()

    def invalidate(self) -> None:
        """Force a refresh on the next request, used after HTTP 401"""
        self.logger.debug("Invalidating Spotify access token")
        self.token_cache.invalidate()


# Global auth instance
_auth_instance: Optional[ClientCredentialsAuth] = None


def get_auth() -> ClientCredentialsAuth:
    """
    Get global Spotify authentication instance

    Returns:
        ClientCredentialsAuth singleton
    """
    global _auth_instance
    if not _auth_instance:
        _auth_instance = ClientCredentialsAuth()
    return _auth_instance


def reset_auth() -> None:
    """Reset global authentication instance"""
    global _auth_instance
    _auth_instance = None
