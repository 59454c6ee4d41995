"""
Orchestrator running the complete mirror pipeline
with rate-limit pacing and per-level error isolation.
"""

import asyncio
from typing import Optional

from ..infrastructure.error_handler import MirrorCancelledError, MirrorError
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..models import (
    Branch, BranchResult, MirrorConfig, MirrorResult, MirrorStatus,
    Repository, RepositoryResult, branch_directory
)
from ..services import DownloadService, GitHubAPIService
from .branch_resolver import BranchResolver
from .file_fetcher import FileFetcher
from .repository_source import RepositorySource, filter_repositories
from .tree_walker import TreeWalker



####
##      MIRROR ORCHESTRATOR
#####
class MirrorOrchestrator:
    """
    Runs repositories, branches and files strictly one at a time, in
    discovery order, checking the rate budget before each burst of calls.
    """

    def __init__(
        self,
        config: MirrorConfig,
        github_service: GitHubAPIService,
        download_service: DownloadService,
        rate_limiter: RateLimiter,
        repository_source: Optional[RepositorySource] = None,
        branch_resolver: Optional[BranchResolver] = None,
        tree_walker: Optional[TreeWalker] = None,
    ):
        self.config = config
        self.github_service = github_service
        self.download_service = download_service
        self.rate_limiter = rate_limiter

        self.repository_source = repository_source or RepositorySource(
            github_service, config.org, config.repo
        )
        self.branch_resolver = branch_resolver or BranchResolver(
            github_service,
            default_branch_only=config.default_branch_only,
            max_branches=config.max_branches,
        )
        self.tree_walker = tree_walker or TreeWalker(
            github_service,
            FileFetcher(
                github_service,
                download_service,
                config.output_dir,
                raw_base_url=config.raw_base_url,
            ),
        )

        self._cancel_event = asyncio.Event()
        if self.rate_limiter.cancel_event is None:
            self.rate_limiter.cancel_event = self._cancel_event
        self._current_result: Optional[MirrorResult] = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def run(self) -> MirrorResult:
        """
        Mirror every selected repository.

        Returns:
            MirrorResult with per-repository and per-branch outcomes

        Raises:
            MirrorError: If the account type, repository listing or rate
                status cannot be obtained
        """
        result = MirrorResult(status=MirrorStatus.IN_PROGRESS)
        self._current_result = result
        self._cancel_event.clear()

        try:
            await self.rate_limiter.check_and_wait()
            repositories = await self.repository_source.resolve()

            kept, forks, archived = filter_repositories(
                repositories,
                include_forks=self.config.include_forks,
                include_archives=self.config.include_archives,
            )
            result.skipped_forks = [r.full_name for r in forks]
            result.skipped_archived = [r.full_name for r in archived]

            for repository in kept:
                self._raise_if_cancelled()
                await self.rate_limiter.check_and_wait()
                repo_result = RepositoryResult(repository=repository)
                # Appended first so a cancel keeps the branches already done
                result.repositories.append(repo_result)
                await self.mirror_repository(repository, repo_result)

        except MirrorCancelledError:
            logger.info("Mirror run cancelled")
            result.status = MirrorStatus.CANCELLED

        except MirrorError as e:
            logger.error(f"Mirror run failed: {e}")
            result.mark_failed(str(e))
            raise

        finally:
            self._current_result = None

        result.mark_completed()
        logger.info(
            f"Mirror finished: {len(result.repositories)} repositories, "
            f"{result.total_written} files written"
        )
        return result

    async def mirror_repository(
        self,
        repository: Repository,
        repo_result: Optional[RepositoryResult] = None,
    ) -> RepositoryResult:
        """Mirror the selected branches of one repository into ``repo_result``."""

        if repo_result is None:
            repo_result = RepositoryResult(repository=repository)
        logger.info(f"Downloading files of repo: {repository.name}")

        try:
            branches = await self.branch_resolver.resolve(repository)
        except MirrorError as e:
            logger.error(f"Error while downloading files of repo: {repository.name}: {e}")
            repo_result.error_message = str(e)
            return repo_result

        for branch in branches:
            self._raise_if_cancelled()
            await self.rate_limiter.check_and_wait()
            repo_result.branches.append(await self.mirror_branch(repository, branch))

        return repo_result

    async def mirror_branch(self, repository: Repository, branch: Branch) -> BranchResult:
        """Create the branch directory and marker, then walk its files."""

        target_dir = branch_directory(
            self.config.output_dir, repository.owner, repository.name, branch.name
        )
        try:
            await self.download_service.prepare_branch_directory(target_dir)
            branch_result = await self.tree_walker.walk(repository, branch, self.config.path)
        except MirrorCancelledError:
            raise
        except (MirrorError, OSError) as e:
            logger.error(f"{repository.full_name}/{branch.name}: {e}")
            return BranchResult(branch=branch, error_message=str(e))

        logger.debug(
            f"Branch {repository.full_name}/{branch.name} done via {branch_result.strategy.value}: "
            f"{len(branch_result.written_files)} written, "
            f"{len(branch_result.absent_files)} absent, "
            f"{len(branch_result.failed_files)} failed"
        )
        return branch_result

    def _raise_if_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise MirrorCancelledError("Mirror run cancelled")

    def cancel(self) -> Optional[MirrorResult]:
        """
        Cancel the current run, interrupting any rate-limit wait.

        Returns:
            The in-progress MirrorResult, or None if no run is active
        """
        if self._current_result is None:
            logger.warning("No active mirror run to cancel")
            return None

        self._cancel_event.set()
        logger.info("Mirror run cancelled by user")
        return self._current_result


__all__ = ["MirrorOrchestrator"]
