"""
Resolution of the repositories a run should mirror.
"""

from typing import List, Optional, Sequence, Tuple

from ..infrastructure.logger import logger
from ..models import AccountType, Repository
from ..services import GitHubAPIService


class RepositorySource:
    """
    Resolves either one named repository or every repository of an account.
    """

    def __init__(self, github_service: GitHubAPIService, owner: str, repo: Optional[str] = None):
        self.github_service = github_service
        self.owner = owner
        self.repo = repo

    async def resolve(self) -> List[Repository]:
        """
        Fetch the target repositories in platform order.

        Raises:
            RepositoryNotFoundError: If the single named repository is absent
            MirrorError: If the account type or a listing page cannot be fetched
        """
        if self.repo:
            try:
                repository = await self.github_service.get_repository(self.owner, self.repo)
            except Exception as e:
                logger.error(f"Fail to find repository {self.repo}: {e}")
                raise
            return [repository]

        logger.info(f"Downloading files of org: {self.owner}")

        try:
            account_type = await self.github_service.get_account_type(self.owner)
        except Exception as e:
            logger.error(f"Fail to determine if {self.owner} is a user or an org: {e}")
            raise

        try:
            if account_type is AccountType.ORGANIZATION:
                repositories = await self.github_service.list_org_repositories(self.owner)
            else:
                repositories = await self.github_service.list_user_repositories(self.owner)
        except Exception as e:
            logger.error(f"Fail to list repositories of {self.owner}: {e}")
            raise

        logger.debug(f"Found {len(repositories)} repositories for {self.owner}")
        return repositories


def filter_repositories(
    repositories: Sequence[Repository],
    include_forks: bool = False,
    include_archives: bool = False,
) -> Tuple[List[Repository], List[Repository], List[Repository]]:
    """
    Drop forks and archived repositories unless their inclusion is enabled.

    Returns:
        Tuple of (kept, skipped_forks, skipped_archived)
    """
    kept: List[Repository] = []
    skipped_forks: List[Repository] = []
    skipped_archived: List[Repository] = []

    for repository in repositories:
        if repository.is_fork and not include_forks:
            logger.debug(f"Not including {repository.name} because it's a fork")
            skipped_forks.append(repository)
            continue
        if repository.is_archived and not include_archives:
            logger.debug(f"Not including {repository.name} because it has been archived")
            skipped_archived.append(repository)
            continue
        kept.append(repository)

    return kept, skipped_forks, skipped_archived


__all__ = ["RepositorySource", "filter_repositories"]
