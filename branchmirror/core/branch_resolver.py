"""
Selection of the branches to mirror for a repository.
"""

from contextlib import aclosing
from typing import List, Set

from ..infrastructure.error_handler import (
    BranchResolutionError, ListingError, MirrorError, translate_error
)
from ..infrastructure.logger import logger
from ..models import Branch, Repository
from ..services import GitHubAPIService


class BranchResolver:
    """
    Produces the (name, head SHA) pairs to download for a repository.

    In default-branch mode only the repository's default branch is resolved;
    otherwise every branch is listed, up to ``max_branches`` when non-zero.
    """

    def __init__(
        self,
        github_service: GitHubAPIService,
        default_branch_only: bool = False,
        max_branches: int = 0,
    ):
        self.github_service = github_service
        self.default_branch_only = default_branch_only
        self.max_branches = max_branches

    async def resolve(self, repository: Repository) -> List[Branch]:
        if self.default_branch_only:
            return [await self._resolve_default(repository)]
        return await self._list_branches(repository)

    async def _resolve_default(self, repository: Repository) -> Branch:
        try:
            sha = await self.github_service.get_branch_ref(
                repository.owner, repository.name, repository.default_branch
            )
        except MirrorError as e:
            logger.error(f"Fail to get default branch of repository {repository.name}: {e}")
            raise BranchResolutionError(
                f"Cannot resolve refs/heads/{repository.default_branch} "
                f"of {repository.full_name}", e
            ) from e
        return Branch(name=repository.default_branch, sha=sha)

    async def _list_branches(self, repository: Repository) -> List[Branch]:
        branches: List[Branch] = []
        seen: Set[str] = set()

        try:
            pages = self.github_service.iter_branch_pages(repository.owner, repository.name)
            async with aclosing(pages):
                async for page in pages:
                    for item in page:
                        name = item.get("name")
                        sha = (item.get("commit") or {}).get("sha")
                        # Branches without a resolvable commit are skipped
                        if not name or not sha or name in seen:
                            continue
                        seen.add(name)
                        branches.append(Branch(name=name, sha=sha))

                    # Stop paging once the cap is hit
                    if self.max_branches and len(branches) >= self.max_branches:
                        logger.debug(
                            f"Truncating branches of {repository.name} to {self.max_branches}"
                        )
                        return branches[:self.max_branches]
        except Exception as e:
            error = translate_error(e)
            logger.error(f"Fail to list branches of repository {repository.name}: {error}")
            raise ListingError(f"Cannot list branches of {repository.full_name}", error) from e

        return branches


__all__ = ["BranchResolver"]
