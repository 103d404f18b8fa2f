"""
Text and retry helpers shared by the providers and the engine
"""

import functools
import re
import time
from typing import Optional, Tuple, Type


_WHITESPACE = re.compile(r'\s+')


def normalize_query(query: Optional[str]) -> str:
    """
    Normalize a free-text query before it reaches any provider

    Args:
        query: Raw user input

    Returns:
        Lower-cased query with whitespace runs collapsed and ends trimmed
    """
    return _WHITESPACE.sub(' ', query or '').strip().lower()


def normalize_name(name: Optional[str]) -> str:
    """Artist or song name in the form used for case-insensitive comparison"""
    return normalize_query(name)


def collapse_blank_lines(text: str) -> str:
    """Strip trailing spaces per line and keep at most one blank line in a row"""
    text = re.sub(r'[ \t]+\n', '\n', text)
    return re.sub(r'\n{3,}', '\n\n', text).strip()


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Shorten text to max_length characters, suffix included

    Args:
        text: Original text
        max_length: Maximum length of the result
        suffix: Marker appended when text is cut

    Returns:
        text unchanged when it fits, otherwise its head plus suffix
    """
    if len(text) <= max_length:
        return text
    keep = max_length - len(suffix)
    return text[:keep] + suffix if keep > 0 else suffix[:max_length]


def retry_on_failure(max_attempts: int = 3, delay: float = 1.0, backoff: float = 2.0,
                     exceptions: Tuple[Type[BaseException], ...] = (Exception,),
                     giveup: Tuple[Type[BaseException], ...] = ()):
    """
    Decorator for retrying functions on failure

    Only the listed exception types are retried, anything else
    propagates on the first attempt.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts
        backoff: Delay multiplier for exponential backoff
        exceptions: Exception types that trigger a retry
        giveup: Subtypes of those exceptions that are re-raised immediately
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, max(1, max_attempts) + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if isinstance(e, giveup) or attempt >= max_attempts:
                        raise
                time.sleep(wait)
                wait *= backoff

        return wrapper
    return decorator
