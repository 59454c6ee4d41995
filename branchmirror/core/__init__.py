from .repository_source import RepositorySource, filter_repositories
from .branch_resolver import BranchResolver
from .file_fetcher import FileFetcher
from .tree_walker import TreeWalker, in_scope, select_strategy
from .orchestrator import MirrorOrchestrator

__all__ = [
    "RepositorySource",
    "filter_repositories",
    "BranchResolver",
    "FileFetcher",
    "TreeWalker",
    "in_scope",
    "select_strategy",
    "MirrorOrchestrator",
]
