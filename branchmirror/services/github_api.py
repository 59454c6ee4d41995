"""
Async client for the GitHub REST API and the raw content endpoint.

A single httpx.AsyncClient is owned (or injected) per service instance; every
REST response refreshes the rate limiter's cached budget.
"""

from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..infrastructure.error_handler import handle_api_error
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..models import (
    AccountType, ContentEntry, RateBudget, Repository, TreeListing
)
from ..models.config import DEFAULT_API_BASE_URL


API_VERSION = "2022-11-28"
USER_AGENT = "branchmirror"


class GitHubAPIService:
    """Service for the GitHub endpoints the mirror pipeline consumes."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        auth_token: Optional[str] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        per_page: int = 100,
        proxy: bool = False,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rate_limiter = rate_limiter
        self.auth_token = auth_token
        self.api_base_url = api_base_url.rstrip("/")
        self.per_page = per_page
        self._owns_client = client is None
        # trust_env makes httpx honor HTTP(S)_PROXY from the environment
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            trust_env=proxy,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

        if self.rate_limiter.status_source is None:
            self.rate_limiter.status_source = self.get_rate_limit

        if not auth_token:
            logger.debug("No GitHub token configured; using unauthenticated requests")

    async def __aenter__(self) -> "GitHubAPIService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.api_base_url}{endpoint}"

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET a REST endpoint, refreshing the budget and raising on non-2xx."""

        response = await self.client.get(self._url(endpoint), headers=self._headers, params=params)
        await self.rate_limiter.update_rate_limit_info(response.headers)
        response.raise_for_status()
        return response

    async def paginate(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Yield successive pages of a list endpoint.

        Paging continues while the response carries a ``rel="next"`` link.
        """
        query: Optional[Dict[str, Any]] = {"per_page": self.per_page, **(params or {})}
        url: Optional[str] = endpoint

        while url:
            response = await self._get(url, params=query)
            yield response.json()
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            query = None

    async def _collect_repositories(self, endpoint: str, owner: str) -> List[Repository]:
        repositories: List[Repository] = []
        async for page in self.paginate(endpoint):
            repositories.extend(Repository.from_api(item, owner=owner) for item in page)
        return repositories

    @handle_api_error
    async def get_account_type(self, login: str) -> AccountType:
        response = await self._get(f"/users/{quote(login, safe='')}")
        return AccountType.from_api(response.json().get("type"))

    @handle_api_error
    async def get_repository(self, owner: str, name: str) -> Repository:
        response = await self._get(f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}")
        return Repository.from_api(response.json(), owner=owner)

    @handle_api_error
    async def list_org_repositories(self, org: str) -> List[Repository]:
        return await self._collect_repositories(f"/orgs/{quote(org, safe='')}/repos", org)

    @handle_api_error
    async def list_user_repositories(self, user: str) -> List[Repository]:
        return await self._collect_repositories(f"/users/{quote(user, safe='')}/repos", user)

    def iter_branch_pages(self, owner: str, repo: str) -> AsyncIterator[List[Dict[str, Any]]]:
        """Pages of ``/branches``; errors surface as raw httpx exceptions."""

        return self.paginate(f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/branches")

    @handle_api_error
    async def get_branch_ref(self, owner: str, repo: str, branch: str) -> str:
        """Resolve ``refs/heads/<branch>`` to its head commit SHA."""

        response = await self._get(
            f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"
            f"/git/ref/heads/{quote(branch, safe='/')}"
        )
        return response.json()["object"]["sha"]

    @handle_api_error
    async def get_tree(self, owner: str, repo: str, sha: str) -> TreeListing:
        response = await self._get(
            f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/git/trees/{sha}",
            params={"recursive": "1"},
        )
        return TreeListing.from_api(response.json())

    @handle_api_error
    async def get_contents(self, owner: str, repo: str, path: str, ref: str) -> List[ContentEntry]:
        """List a directory at ``ref``; a file path yields a single entry."""

        endpoint = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contents"
        if path:
            endpoint = f"{endpoint}/{quote(path, safe='/')}"
        response = await self._get(endpoint, params={"ref": ref})
        data = response.json()
        if isinstance(data, dict):
            return [ContentEntry.from_api(data)]
        return [ContentEntry.from_api(item) for item in data]

    @handle_api_error
    async def get_rate_limit(self) -> RateBudget:
        response = await self._get("/rate_limit")
        return RateBudget.from_api(response.json(), low_water_mark=self.rate_limiter.low_water_mark)

    @handle_api_error
    async def get_raw(self, url: str) -> httpx.Response:
        """Plain retrieval from the raw content host; status is not checked."""

        return await self.client.get(url)


__all__ = ["GitHubAPIService"]
