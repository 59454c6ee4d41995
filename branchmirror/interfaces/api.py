"""
Python API for mirroring GitHub branches to disk.

    config = MirrorConfig(org="octo-org", output_dir=Path("out"))
    async with GitHubMirror(config) as mirror:
        result = await mirror.mirror()
"""

import logging
from typing import Optional

import httpx

from ..core.orchestrator import MirrorOrchestrator
from ..infrastructure.logger import VERBOSE, logger
from ..infrastructure.rate_limiter import RateLimiter
from ..models import MirrorConfig, MirrorResult, RateBudget
from ..services import DownloadService, GitHubAPIService


class GitHubMirror:
    """
    High-level entry point wiring the mirror pipeline from a MirrorConfig.
    """

    def __init__(
        self,
        config: MirrorConfig,
        verbose: bool = False,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.verbose = verbose
        self._apply_log_level()

        self.rate_limiter = RateLimiter(
            low_water_mark=config.low_water_mark,
            grace_period=config.grace_period,
        )
        self.github_service = GitHubAPIService(
            self.rate_limiter,
            auth_token=config.token,
            api_base_url=config.api_base_url,
            timeout=config.timeout,
            per_page=config.per_page,
            proxy=config.proxy,
            client=client,
        )
        self.download_service = DownloadService()
        self.orchestrator = MirrorOrchestrator(
            config,
            self.github_service,
            self.download_service,
            self.rate_limiter,
        )

    async def __aenter__(self) -> "GitHubMirror":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.github_service.aclose()

    def _apply_log_level(self) -> None:
        logger.setLevel(VERBOSE if self.verbose else logging.INFO)

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        self._apply_log_level()

    async def mirror(self) -> MirrorResult:
        """Run the full pipeline for the configured org, user or repository."""

        logger.debug(f"Mirroring {self.config.org} into {self.config.output_dir}")
        return await self.orchestrator.run()

    async def get_rate_limit_info(self) -> RateBudget:
        return await self.github_service.get_rate_limit()

    def cancel(self) -> Optional[MirrorResult]:
        return self.orchestrator.cancel()


__all__ = ["GitHubMirror"]
