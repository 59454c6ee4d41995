from .logger import logger, log_verbose, VERBOSE
from .error_handler import (
    MirrorError,
    RateLimitError,
    AuthenticationError,
    RepositoryNotFoundError,
    BranchResolutionError,
    ListingError,
    UnknownEntryTypeError,
    MirrorCancelledError,
    handle_api_error,
)
from .rate_limiter import RateLimiter, cancellable_sleep

__all__ = [
    "logger",
    "log_verbose",
    "VERBOSE",
    "MirrorError",
    "RateLimitError",
    "AuthenticationError",
    "RepositoryNotFoundError",
    "BranchResolutionError",
    "ListingError",
    "UnknownEntryTypeError",
    "MirrorCancelledError",
    "handle_api_error",
    "RateLimiter",
    "cancellable_sleep",
]
