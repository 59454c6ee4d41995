from .github_api import GitHubAPIService
from .download import DownloadService

__all__ = ["GitHubAPIService", "DownloadService"]
