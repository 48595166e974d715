"""
GitHub REST API client.

``RepositoryHost`` is the boundary the pipeline depends on; ``GitHubClient``
is the httpx-backed implementation. Methods raise on HTTP errors and leave
fallback handling to the collectors, except ``get_file_content`` which
treats 404 as "file absent".
"""

import base64
import binascii
import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
RATE_LIMIT_WARNING_THRESHOLD = 10


class RepositoryHost(Protocol):
    """Operations the pipeline needs from a source-control host."""

    async def list_repositories(
        self, owner: str, org: str | None, page: int, per_page: int
    ) -> list[dict[str, Any]]:
        ...

    async def list_branches(self, owner: str, repo: str) -> list[str]:
        ...

    async def count_open_pulls(self, owner: str, repo: str) -> int:
        ...

    async def commit_activity(self, owner: str, repo: str) -> list[dict[str, Any]]:
        ...

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:
        ...

    async def get_file_content(self, owner: str, repo: str, path: str) -> dict[str, Any] | None:
        ...


def decode_content(payload: dict[str, Any] | None) -> str | None:
    """
    Decode a contents-API payload.

    Returns:
        File text, or None for directories, non-base64 payloads or
        invalid base64. Bytes that aren't UTF-8 are replaced.
    """
    if not isinstance(payload, dict) or payload.get("encoding") != "base64":
        return None
    content = payload.get("content")
    if not isinstance(content, str):
        return None
    # GitHub wraps the payload at 60 characters
    try:
        raw = base64.b64decode("".join(content.split()), validate=True)
    except binascii.Error:
        return None
    return raw.decode("utf-8", errors="replace")


class GitHubClient:
    """
    Async GitHub client.

    Usage:
        async with GitHubClient(token) as client:
            repos = await client.list_repositories("octocat", None, page=1, per_page=100)
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            token: GitHub personal access token
            api_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.api_url = api_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.timeout = timeout
        self.transport = transport
        self.client: httpx.AsyncClient | None = None
        self.request_count = 0

    async def __aenter__(self) -> "GitHubClient":
        self.client = httpx.AsyncClient(
            base_url=self.api_url,
            headers=self.headers,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Issue a GET request and raise on non-2xx responses."""
        if self.client is None:
            raise RuntimeError("GitHubClient must be used as an async context manager")

        logger.debug(f"GitHub API: GET {endpoint}")
        response = await self.client.get(endpoint, params=params)
        self.request_count += 1

        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining and remaining.isdigit() and int(remaining) < RATE_LIMIT_WARNING_THRESHOLD:
            logger.warning(f"GitHub rate limit low: {remaining} remaining")

        response.raise_for_status()
        return response

    async def list_repositories(
        self, owner: str, org: str | None, page: int, per_page: int
    ) -> list[dict[str, Any]]:
        if org:
            response = await self._get(
                f"/orgs/{org}/repos",
                params={"per_page": per_page, "sort": "pushed", "page": page},
            )
        else:
            response = await self._get(
                "/user/repos",
                params={"per_page": per_page, "sort": "pushed", "affiliation": "owner", "page": page},
            )
        return response.json()

    async def list_branches(self, owner: str, repo: str) -> list[str]:
        response = await self._get(f"/repos/{owner}/{repo}/branches", params={"per_page": 100})
        return [branch["name"] for branch in response.json()]

    async def count_open_pulls(self, owner: str, repo: str) -> int:
        response = await self._get(
            f"/repos/{owner}/{repo}/pulls", params={"state": "open", "per_page": 100}
        )
        return len(response.json())

    async def commit_activity(self, owner: str, repo: str) -> list[dict[str, Any]]:
        response = await self._get(f"/repos/{owner}/{repo}/stats/commit_activity")
        # 202 means GitHub is still computing the statistics
        if response.status_code == 202:
            return []
        data = response.json()
        return data if isinstance(data, list) else []

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:
        response = await self._get(f"/repos/{owner}/{repo}/languages")
        return response.json()

    async def get_file_content(self, owner: str, repo: str, path: str) -> dict[str, Any] | None:
        try:
            response = await self._get(f"/repos/{owner}/{repo}/contents/{path}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return response.json()
