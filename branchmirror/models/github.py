"""
GitHub domain models for BranchMirror.

This module contains strongly typed data classes and enums representing
GitHub-specific entities: accounts, repositories, branches, tree listings
and the rate budget.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# Below this many remaining requests the pipeline waits for the reset window
RATE_LIMIT_LOW_WATER_MARK = 10


class AccountType(Enum):
    """Kind of account owning the repositories."""

    USER = "User"
    ORGANIZATION = "Organization"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "AccountType":
        if value == cls.ORGANIZATION.value:
            return cls.ORGANIZATION
        return cls.USER


@dataclass(frozen=True)
class Repository:
    """Immutable repository snapshot fetched once per run."""

    owner: str
    name: str
    default_branch: str
    is_fork: bool = False
    is_archived: bool = False

    def __post_init__(self) -> None:
        if not self.owner or not self.name:
            raise ValueError("Repository owner and name are required")

    @property
    def full_name(self) -> str:
        return f'{self.owner}/{self.name}'

    @classmethod
    def from_api(cls, data: Dict[str, Any], owner: Optional[str] = None) -> "Repository":
        """Build a repository from a REST payload."""

        owner_login = owner or (data.get("owner") or {}).get("login", "")
        return cls(
            owner=owner_login,
            name=data["name"],
            default_branch=data.get("default_branch") or "main",
            is_fork=bool(data.get("fork", False)),
            is_archived=bool(data.get("archived", False)),
        )


@dataclass(frozen=True)
class Branch:
    """A branch name paired with its head commit SHA."""

    name: str
    sha: str

    def __post_init__(self) -> None:
        if not self.name or not self.sha:
            raise ValueError("Branch name and SHA are required")


@dataclass(frozen=True)
class TreeEntry:
    """One entry of a recursive git tree listing."""

    path: str
    type: str  # 'blob', 'tree', 'commit'
    sha: Optional[str] = None
    size: Optional[int] = None

    @property
    def is_blob(self) -> bool:
        return self.type == "blob"


@dataclass
class TreeListing:
    """Flat recursive listing for a commit; truncation is tree-level."""

    sha: str
    entries: List[TreeEntry] = field(default_factory=list)
    truncated: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TreeListing":
        return cls(
            sha=data.get("sha", ""),
            entries=[
                TreeEntry(
                    path=item["path"],
                    type=item["type"],
                    sha=item.get("sha"),
                    size=item.get("size"),
                )
                for item in data.get("tree", [])
            ],
            truncated=bool(data.get("truncated", False)),
        )


@dataclass(frozen=True)
class ContentEntry:
    """Entry of a directory listing from the contents API."""

    path: str
    type: str  # 'file', 'dir', 'symlink', 'submodule'
    name: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContentEntry":
        return cls(path=data["path"], type=data["type"], name=data.get("name", ""))


@dataclass
class RateBudget:
    """Remaining request budget and the time it resets."""

    limit: int = 5000
    remaining: int = 5000
    reset_time: Optional[datetime] = None
    low_water_mark: int = RATE_LIMIT_LOW_WATER_MARK

    @property
    def is_exhausted(self) -> bool:
        return self.remaining < self.low_water_mark

    @property
    def reset_in_seconds(self) -> float:
        if not self.reset_time:
            return 0.0
        delta = (self.reset_time - datetime.now(timezone.utc)).total_seconds()
        return max(delta, 0.0)

    @classmethod
    def from_api(cls, data: Dict[str, Any], low_water_mark: int = RATE_LIMIT_LOW_WATER_MARK) -> "RateBudget":
        """Parse the ``core`` resource of a ``/rate_limit`` payload."""

        core = (data.get("resources") or {}).get("core") or data.get("rate") or {}
        reset = core.get("reset")
        return cls(
            limit=int(core.get("limit", 0)),
            remaining=int(core.get("remaining", 0)),
            reset_time=datetime.fromtimestamp(int(reset), tz=timezone.utc) if reset else None,
            low_water_mark=low_water_mark,
        )


__all__ = [
    "RATE_LIMIT_LOW_WATER_MARK",
    "AccountType",
    "Repository",
    "Branch",
    "TreeEntry",
    "TreeListing",
    "ContentEntry",
    "RateBudget",
]
