"""
BranchMirror: mirror the branches of GitHub repositories to a local tree.
"""

from .interfaces.api import GitHubMirror
from .models import MirrorConfig, MirrorResult

__version__ = "0.1.0"

__all__ = ["GitHubMirror", "MirrorConfig", "MirrorResult", "__version__"]
