"""
Retrieval of single files from the raw content host.
"""

from pathlib import Path

from ..infrastructure.logger import logger, log_verbose
from ..models import DownloadTarget, FetchOutcome
from ..models.config import DEFAULT_RAW_BASE_URL
from ..services import DownloadService, GitHubAPIService


class FileFetcher:
    """
    Downloads a file at a commit and writes it under its deterministic path.

    A non-success status means the file is absent on this branch (submodule
    pointers and symlinked paths appear in tree listings but do not resolve);
    that is a normal outcome, not an error.
    """

    def __init__(
        self,
        github_service: GitHubAPIService,
        download_service: DownloadService,
        output_dir: Path,
        raw_base_url: str = DEFAULT_RAW_BASE_URL,
    ):
        self.github_service = github_service
        self.download_service = download_service
        self.output_dir = Path(output_dir)
        self.raw_base_url = raw_base_url

    async def fetch(self, target: DownloadTarget) -> FetchOutcome:
        """
        Fetch ``target`` and persist it verbatim.

        Raises:
            MirrorError: On network failure; the caller records and moves on
        """
        url = target.raw_url(self.raw_base_url)
        response = await self.github_service.get_raw(url)

        if not response.is_success:
            log_verbose(f"Skipping {target.path} ({response.status_code})")
            return FetchOutcome.ABSENT

        destination = target.destination(self.output_dir)
        written = await self.download_service.write_bytes(destination, response.content)
        logger.debug(f"Downloaded {target.path} ({written} bytes)")
        return FetchOutcome.WRITTEN


__all__ = ["FileFetcher"]
