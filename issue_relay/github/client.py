"""Async client for the three GitHub REST endpoints the relay calls.

Every call is a single attempt. No timeout is configured by default; callers
bound latency with ``asyncio.timeout`` around the whole notification, and
cancellation propagates out of the in-flight request untouched.
"""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError
from .models import CloseIssueRequest, IssueRequest

GITHUB_API_ENDPOINT = "https://api.github.com/repos"
GITHUB_ACCEPT = "application/vnd.github.v3+json"
USER_AGENT = "GCB-Notifier/0.1 (http)"


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for :class:`GitHubIssuesClient`."""

    token: str = dataclasses.field(repr=False)
    endpoint: str = GITHUB_API_ENDPOINT
    user_agent: str = USER_AGENT
    timeout_s: float | None = None


def build_headers(config: GitHubRestConfig) -> dict[str, str]:
    """Return the fixed header set sent with every GitHub call."""
    return {
        "Accept": GITHUB_ACCEPT,
        "Authorization": f"token {config.token}",
        "User-Agent": config.user_agent,
    }


class GitHubIssuesClient:
    """Issue create/close plus commit and release lookups over httpx."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client, creating an owned httpx client if needed."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._headers = build_headers(config)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    @property
    def endpoint(self) -> str:
        """Base URL that repository slugs are appended to."""
        return self._config.endpoint

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def issues_url(self, repo: str) -> str:
        """Return the issue collection URL for ``repo``."""
        return f"{self._config.endpoint}/{repo}/issues"

    def commit_url(self, repo: str, ref: str) -> str:
        """Return the commit-by-ref URL for ``repo``."""
        return f"{self._config.endpoint}/{repo}/commits/{ref}"

    def release_url(self, repo: str, tag: str) -> str:
        """Return the release-by-tag URL for ``repo``."""
        return f"{self._config.endpoint}/{repo}/releases/tags/{tag}"

    async def create_issue(self, repo: str, issue: IssueRequest) -> httpx.Response:
        """POST ``issue`` to the repository's issue collection."""
        return await self._send(
            "POST", self.issues_url(repo), content=msgspec.json.encode(issue)
        )

    async def close_issue(self, issue_url: str) -> httpx.Response:
        """PATCH the issue at ``issue_url`` into the closed state."""
        return await self._send(
            "PATCH", issue_url, content=msgspec.json.encode(CloseIssueRequest())
        )

    async def get(self, url: str) -> httpx.Response:
        """GET ``url`` with the relay's headers."""
        return await self._send("GET", url)

    async def _send(
        self,
        method: typ.Literal["GET", "POST", "PATCH"],
        url: str,
        *,
        content: bytes | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method, url, headers=self._headers, content=content
            )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise GitHubAPIError.transport(url, str(exc) or type(exc).__name__) from exc
