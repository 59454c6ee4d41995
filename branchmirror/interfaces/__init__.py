from .api import GitHubMirror

__all__ = ["GitHubMirror"]
