"""
Recursive traversal of a branch's files.

The walk first asks for the whole recursive tree in one call. When the
platform reports that listing as truncated it is discarded and the branch is
walked directory by directory through the contents API instead:

    Start -> Listing -> {Direct walk | Fallback walk} -> Done
"""

from typing import Iterable, List

from ..infrastructure.error_handler import (
    ListingError, MirrorError, UnknownEntryTypeError
)
from ..infrastructure.logger import logger
from ..models import (
    Branch, BranchResult, DownloadTarget, FetchOutcome, Repository,
    TreeEntry, TreeListing, WalkStrategy, normalize_root_path
)
from ..services import GitHubAPIService
from .file_fetcher import FileFetcher


def in_scope(path: str, root_path: str) -> bool:
    """True when ``path`` is ``root_path`` itself or lies beneath it."""

    if not root_path:
        return True
    return path == root_path or path.startswith(root_path + "/")


def select_strategy(listing: TreeListing) -> WalkStrategy:
    return WalkStrategy.FALLBACK if listing.truncated else WalkStrategy.DIRECT


def blobs_in_scope(entries: Iterable[TreeEntry], root_path: str) -> List[str]:
    """Paths of file entries under ``root_path``, in listing order."""

    return [e.path for e in entries if e.is_blob and in_scope(e.path, root_path)]


class TreeWalker:
    """Materializes every file of a branch under a root path."""

    def __init__(self, github_service: GitHubAPIService, file_fetcher: FileFetcher):
        self.github_service = github_service
        self.file_fetcher = file_fetcher

    async def walk(self, repository: Repository, branch: Branch, root_path: str = "") -> BranchResult:
        """
        Download every in-scope file of ``branch``.

        Per-file and nested-directory failures are recorded on the result and
        do not stop the walk.

        Raises:
            ListingError: If the top-level tree or contents listing fails
        """
        root_path = normalize_root_path(root_path)
        result = BranchResult(branch=branch)

        try:
            listing = await self.github_service.get_tree(repository.owner, repository.name, branch.sha)
        except MirrorError as e:
            raise ListingError(
                f"failed to get tree for branch {branch.name} (commit {branch.sha})", e
            ) from e

        result.strategy = select_strategy(listing)

        if result.strategy is WalkStrategy.DIRECT:
            for path in blobs_in_scope(listing.entries, root_path):
                await self._fetch(repository, branch, path, result)
            return result

        logger.info(
            f"Tree truncated for {repository.full_name}/{branch.name}, falling back to API"
        )
        try:
            await self._walk_directory(repository, branch, root_path, result, top_level=True)
        except UnknownEntryTypeError as e:
            logger.error(f"Aborted walk of {repository.full_name}/{branch.name}: {e}")
            result.error_message = str(e)

        return result

    async def _walk_directory(
        self,
        repository: Repository,
        branch: Branch,
        path: str,
        result: BranchResult,
        top_level: bool = False,
    ) -> None:
        try:
            entries = await self.github_service.get_contents(
                repository.owner, repository.name, path, branch.sha
            )
        except MirrorError as e:
            if top_level:
                raise ListingError(
                    f"failed to list contents of branch {branch.name} (commit {branch.sha})", e
                ) from e
            logger.error(f"Failed to list directory {path}: {e}")
            result.failed_files[path] = str(e)
            return

        for entry in entries:
            if entry.type == "dir":
                await self._walk_directory(repository, branch, entry.path, result)
            elif entry.type == "file":
                await self._fetch(repository, branch, entry.path, result)
            else:
                raise UnknownEntryTypeError(f"unknown type {entry.type} for {entry.path}")

    async def _fetch(self, repository: Repository, branch: Branch, path: str, result: BranchResult) -> None:
        target = DownloadTarget.for_branch(repository, branch, path)
        try:
            outcome = await self.file_fetcher.fetch(target)
        except (MirrorError, OSError) as e:
            logger.error(f"Error downloading {path}: {e}")
            result.record(path, FetchOutcome.FAILED, str(e))
            return
        result.record(path, outcome)


__all__ = ["in_scope", "select_strategy", "blobs_in_scope", "TreeWalker"]
