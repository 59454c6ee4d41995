"""
Error taxonomy and API error translation for BranchMirror.

The pipeline never retries: callers decide from the exception type whether a
failure aborts the run, the repository, the branch or a single subtree.
"""

import functools
import inspect
from typing import Callable, Optional, TypeVar

import httpx

from .logger import logger


F = TypeVar("F", bound=Callable)


class MirrorError(Exception):
    """Base exception for mirror failures."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class RateLimitError(MirrorError):
    """Raised when the platform rejects a request for rate-limit reasons."""


class AuthenticationError(MirrorError):
    """Raised when the token is missing, invalid or lacks access."""


class RepositoryNotFoundError(MirrorError):
    """Raised when a requested repository or account does not exist."""


class BranchResolutionError(MirrorError):
    """Raised when a branch ref cannot be resolved to a commit."""


class ListingError(MirrorError):
    """Raised when a branch, tree or contents listing cannot be obtained."""


class UnknownEntryTypeError(MirrorError):
    """Raised when a contents listing returns an entry of unrecognized kind."""


class MirrorCancelledError(MirrorError):
    """Raised when a run is cancelled, including during a rate-limit wait."""


def translate_error(error: Exception) -> MirrorError:
    """Map an HTTP-layer exception onto the mirror error taxonomy."""

    if isinstance(error, MirrorError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        status = response.status_code
        if status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            return RateLimitError(f"GitHub API rate limit exceeded: {response.url}", error)
        if status in (401, 403):
            return AuthenticationError(f"GitHub API authentication failed: {response.url}", error)
        if status == 404:
            return RepositoryNotFoundError(f"Not found: {response.url}", error)
        return MirrorError(f"GitHub API error {status}: {response.url}", error)

    if isinstance(error, httpx.RequestError):
        if "429" in str(error):
            return RateLimitError("Rate limit exceeded", error)
        return MirrorError(f"Network error: {error}", error)

    return MirrorError(f"Unexpected error: {error}", error)


def handle_api_error(func: F) -> F:
    """
    Decorator translating HTTP failures raised by ``func`` into MirrorError
    subclasses. Works on both coroutine functions and plain functions.
    """

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except MirrorError:
                raise
            except Exception as e:
                translated = translate_error(e)
                logger.debug(f"{func.__name__} failed: {translated}")
                raise translated from e

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MirrorError:
            raise
        except Exception as e:
            translated = translate_error(e)
            logger.debug(f"{func.__name__} failed: {translated}")
            raise translated from e

    return wrapper  # type: ignore[return-value]


__all__ = [
    "MirrorError",
    "RateLimitError",
    "AuthenticationError",
    "RepositoryNotFoundError",
    "BranchResolutionError",
    "ListingError",
    "UnknownEntryTypeError",
    "MirrorCancelledError",
    "translate_error",
    "handle_api_error",
]
