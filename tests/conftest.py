"""
Shared fixtures: an in-memory GitHub served through httpx.MockTransport.
"""

import time
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from branchmirror.infrastructure.rate_limiter import RateLimiter
from branchmirror.models import MirrorConfig
from branchmirror.services import DownloadService, GitHubAPIService


API = "https://api.test"
RAW = "https://raw.test"


def repo_payload(
    name: str,
    owner: str = "acme",
    fork: bool = False,
    archived: bool = False,
    default_branch: str = "main",
) -> Dict[str, Any]:
    return {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "fork": fork,
        "archived": archived,
        "default_branch": default_branch,
    }


def branch_payload(name: str, sha: Optional[str]) -> Dict[str, Any]:
    commit = {"sha": sha} if sha else {}
    return {"name": name, "commit": commit}


class FakeGitHub:
    """Routes REST and raw requests to canned payloads."""

    def __init__(self):
        self.json_routes: Dict[str, Any] = {}
        self.pages: Dict[str, List[Any]] = {}
        self.raw_files: Dict[str, bytes] = {}
        self.failures: Dict[str, int] = {}
        self.rate = {"limit": 5000, "remaining": 4999, "reset": int(time.time()) + 3600}
        self.requests: List[httpx.Request] = []

    # -- setup helpers -------------------------------------------------------

    def add_json(self, path: str, payload: Any) -> None:
        self.json_routes[path] = payload

    def add_pages(self, path: str, pages: List[Any]) -> None:
        self.pages[path] = pages

    def add_raw(self, org: str, repo: str, sha: str, path: str, content: bytes) -> None:
        self.raw_files[f"/{org}/{repo}/{sha}/{path}"] = content

    def fail(self, path: str, status: int = 500) -> None:
        self.failures[path] = status

    def add_tree(
        self,
        org: str,
        repo: str,
        sha: str,
        files: Dict[str, bytes],
        truncated: bool = False,
    ) -> None:
        """Register the tree, contents listings and raw bytes for ``files``."""

        dirs = set()
        for path in files:
            parts = path.split("/")
            for i in range(1, len(parts)):
                dirs.add("/".join(parts[:i]))

        entries = [{"path": d, "type": "tree", "sha": "t"} for d in sorted(dirs)]
        entries += [
            {"path": p, "type": "blob", "sha": "b", "size": len(c)}
            for p, c in files.items()
        ]
        self.add_json(
            f"/repos/{org}/{repo}/git/trees/{sha}",
            {"sha": sha, "tree": entries, "truncated": truncated},
        )

        children: Dict[str, List[Dict[str, str]]] = {"": []}
        for d in dirs:
            children.setdefault(d, [])
        for d in sorted(dirs):
            parent = d.rsplit("/", 1)[0] if "/" in d else ""
            children[parent].append({"path": d, "name": d.split("/")[-1], "type": "dir"})
        for p in files:
            parent = p.rsplit("/", 1)[0] if "/" in p else ""
            children[parent].append({"path": p, "name": p.split("/")[-1], "type": "file"})
        for d, items in children.items():
            suffix = f"/{d}" if d else ""
            self.add_json(f"/repos/{org}/{repo}/contents{suffix}", items)

        for p, c in files.items():
            self.add_raw(org, repo, sha, p, c)

    # -- inspection ----------------------------------------------------------

    def requested_paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def requested_urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]

    # -- transport -----------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "raw.test":
            content = self.raw_files.get(path)
            if content is None:
                return httpx.Response(404, content=b"404: Not Found")
            return httpx.Response(200, content=content)

        headers = {
            "x-ratelimit-limit": str(self.rate["limit"]),
            "x-ratelimit-remaining": str(self.rate["remaining"]),
            "x-ratelimit-reset": str(self.rate["reset"]),
        }

        if path in self.failures:
            return httpx.Response(self.failures[path], json={"message": "boom"}, headers=headers)

        if path == "/rate_limit":
            return httpx.Response(200, json={"resources": {"core": dict(self.rate)}, "rate": dict(self.rate)})

        if path in self.pages:
            pages = self.pages[path]
            page = int(request.url.params.get("page", "1"))
            if page < len(pages):
                headers["link"] = f'<{API}{path}?page={page + 1}>; rel="next"'
            return httpx.Response(200, json=pages[page - 1], headers=headers)

        if path in self.json_routes:
            return httpx.Response(200, json=self.json_routes[path], headers=headers)

        return httpx.Response(404, json={"message": "Not Found"}, headers=headers)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def http_client(fake_github):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))
    yield client
    await client.aclose()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture
def github_service(http_client, rate_limiter) -> GitHubAPIService:
    return GitHubAPIService(rate_limiter, api_base_url=API, client=http_client)


@pytest.fixture
def download_service() -> DownloadService:
    return DownloadService()


@pytest.fixture
def make_config(tmp_path):
    """Factory for configs pointed at the fake hosts and ``tmp_path``."""

    def _make(**overrides) -> MirrorConfig:
        params = {
            "org": "acme",
            "output_dir": tmp_path / "out",
            "api_base_url": API,
            "raw_base_url": RAW,
        }
        params.update(overrides)
        return MirrorConfig(**params)

    return _make
