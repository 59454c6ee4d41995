"""
Download domain models for BranchMirror.

This module contains data classes and enums representing download targets,
walk strategies and the per-branch, per-repository and run-level results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote

from .github import Branch, Repository


# Zero-byte file marking a branch directory as a materialized snapshot
BRANCH_MARKER_NAME = ".git"


def branch_directory(output_dir: Path, org: str, repo: str, branch: str) -> Path:
    """Root directory of one materialized branch snapshot."""

    return Path(output_dir) / org / repo / branch


class WalkStrategy(Enum):
    """How a branch's file listing is obtained."""

    DIRECT = "direct"        # One recursive tree listing
    FALLBACK = "fallback"    # Directory-by-directory contents walk


class FetchOutcome(Enum):
    """Result of retrieving a single file."""

    WRITTEN = "written"
    ABSENT = "absent"
    FAILED = "failed"


class MirrorStatus(Enum):
    """Status enumeration for mirror operations."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class DownloadTarget:
    """A single file to retrieve, mapping 1:1 to a destination path."""

    org: str
    repo: str
    branch: str
    commit: str
    path: str

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Target path is required")

    @classmethod
    def for_branch(cls, repository: Repository, branch: Branch, path: str) -> "DownloadTarget":
        return cls(
            org=repository.owner,
            repo=repository.name,
            branch=branch.name,
            commit=branch.sha,
            path=path,
        )

    def branch_directory(self, output_dir: Path) -> Path:
        return branch_directory(output_dir, self.org, self.repo, self.branch)

    def destination(self, output_dir: Path) -> Path:
        return self.branch_directory(output_dir).joinpath(*self.path.split("/"))

    def raw_url(self, raw_base_url: str) -> str:
        return "/".join((
            raw_base_url.rstrip("/"),
            quote(self.org, safe=""),
            quote(self.repo, safe=""),
            self.commit,
            quote(self.path, safe="/"),
        ))


@dataclass
class BranchResult:
    """Outcome of mirroring one branch."""

    branch: Branch
    strategy: Optional[WalkStrategy] = None
    written_files: List[str] = field(default_factory=list)
    absent_files: List[str] = field(default_factory=list)
    failed_files: Dict[str, str] = field(default_factory=dict)
    error_message: Optional[str] = None

    def record(self, path: str, outcome: FetchOutcome, message: str = "") -> None:
        if outcome is FetchOutcome.WRITTEN:
            self.written_files.append(path)
        elif outcome is FetchOutcome.ABSENT:
            self.absent_files.append(path)
        else:
            self.failed_files[path] = message

    @property
    def is_successful(self) -> bool:
        return self.error_message is None and not self.failed_files


@dataclass
class RepositoryResult:
    """Outcome of mirroring every selected branch of one repository."""

    repository: Repository
    branches: List[BranchResult] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def written_files(self) -> int:
        return sum(len(b.written_files) for b in self.branches)


@dataclass
class MirrorResult:
    """Run-level result of a mirror operation."""

    status: MirrorStatus = MirrorStatus.PENDING
    repositories: List[RepositoryResult] = field(default_factory=list)
    skipped_forks: List[str] = field(default_factory=list)
    skipped_archived: List[str] = field(default_factory=list)

    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def total_written(self) -> int:
        return sum(r.written_files for r in self.repositories)

    @property
    def failed_repositories(self) -> List[str]:
        return [r.repository.full_name for r in self.repositories if r.error_message]

    def mark_completed(self) -> None:
        self.completed_at = datetime.now()
        if self.status is not MirrorStatus.CANCELLED:
            self.status = MirrorStatus.COMPLETED

    def mark_failed(self, message: str) -> None:
        self.completed_at = datetime.now()
        self.status = MirrorStatus.FAILED
        self.error_message = message


__all__ = [
    "BRANCH_MARKER_NAME",
    "branch_directory",
    "WalkStrategy",
    "FetchOutcome",
    "MirrorStatus",
    "DownloadTarget",
    "BranchResult",
    "RepositoryResult",
    "MirrorResult",
]
