"""
Configuration models for BranchMirror runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .github import RATE_LIMIT_LOW_WATER_MARK


DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_RAW_BASE_URL = "https://raw.githubusercontent.com"


@dataclass
class MirrorConfig:
    """
    Settings consumed by the mirror pipeline.

    Populated by whatever front end drives the run; the pipeline never reads
    command-line arguments itself.
    """

    org: str
    repo: Optional[str] = None
    output_dir: Path = field(default_factory=lambda: Path("output"))
    path: str = ""

    # Authentication and transport
    token: Optional[str] = None
    proxy: bool = False
    api_base_url: str = DEFAULT_API_BASE_URL
    raw_base_url: str = DEFAULT_RAW_BASE_URL
    timeout: float = 30.0
    per_page: int = 100

    # Selection
    default_branch_only: bool = False
    max_branches: int = 0  # 0 means unlimited
    include_archives: bool = False
    include_forks: bool = False

    # Rate limiting
    low_water_mark: int = RATE_LIMIT_LOW_WATER_MARK
    grace_period: float = 300.0  # seconds added after the reset time

    def __post_init__(self) -> None:
        if not self.org:
            raise ValueError("Target org or user is required")
        if self.max_branches < 0:
            raise ValueError("max_branches cannot be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.per_page <= 0:
            raise ValueError("per_page must be positive")
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        self.path = normalize_root_path(self.path)

    @classmethod
    def from_env(cls, org: str, **overrides: Any) -> "MirrorConfig":
        """Build a config, reading ``GITHUB_TOKEN`` when no token is given."""

        if not overrides.get("token"):
            overrides["token"] = os.environ.get("GITHUB_TOKEN") or None
        return cls(org=org, **overrides)


def normalize_root_path(path: Optional[str]) -> str:
    """Strip surrounding slashes; ``"."`` and ``None`` mean the whole tree."""

    cleaned = (path or "").strip().strip("/")
    if cleaned in ("", "."):
        return ""
    if cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return cleaned


__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_RAW_BASE_URL",
    "MirrorConfig",
    "normalize_root_path",
]
