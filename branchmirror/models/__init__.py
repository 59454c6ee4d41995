"""
Core data models API surface for BranchMirror.

This file re-exports model classes from domain-specific modules so callers
can write `from branchmirror.models import X`.
"""

from .github import (
    RATE_LIMIT_LOW_WATER_MARK,
    AccountType,
    Repository,
    Branch,
    TreeEntry,
    TreeListing,
    ContentEntry,
    RateBudget,
)
from .download import (
    BRANCH_MARKER_NAME,
    branch_directory,
    WalkStrategy,
    FetchOutcome,
    MirrorStatus,
    DownloadTarget,
    BranchResult,
    RepositoryResult,
    MirrorResult,
)
from .config import MirrorConfig, normalize_root_path

__all__ = [
    # GitHub models
    "RATE_LIMIT_LOW_WATER_MARK",
    "AccountType",
    "Repository",
    "Branch",
    "TreeEntry",
    "TreeListing",
    "ContentEntry",
    "RateBudget",
    # Download models
    "BRANCH_MARKER_NAME",
    "branch_directory",
    "WalkStrategy",
    "FetchOutcome",
    "MirrorStatus",
    "DownloadTarget",
    "BranchResult",
    "RepositoryResult",
    "MirrorResult",
    # Config models
    "MirrorConfig",
    "normalize_root_path",
]
