"""An in-memory GitHub REST stub built on ``httpx.MockTransport``."""

from __future__ import annotations

import collections
import dataclasses
import json
import typing as typ

import httpx

API = "https://api.github.com/repos"

Reply = httpx.Response | Exception


@dataclasses.dataclass(frozen=True, slots=True)
class RecordedRequest:
    """A request that reached the stub."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes

    def json(self) -> typ.Any:  # noqa: ANN401 - arbitrary JSON payload
        """Decode the request body."""
        return json.loads(self.body)


class GitHubStub:
    """Answer GitHub calls from queued replies keyed by method and URL.

    Unqueued calls answer ``404``. Queue an exception to simulate a transport
    failure.
    """

    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self._replies: dict[tuple[str, str], collections.deque[Reply]] = (
            collections.defaultdict(collections.deque)
        )

    def reply(
        self,
        method: str,
        url: str,
        status: int,
        payload: object | None = None,
        *,
        content: bytes | None = None,
    ) -> None:
        """Queue a response for ``method url``."""
        if content is not None:
            response = httpx.Response(status, content=content)
        elif payload is not None:
            response = httpx.Response(status, json=payload)
        else:
            response = httpx.Response(status)
        self._replies[(method, url)].append(response)

    def reply_encoded(
        self, method: str, url: str, status: int, body: bytes, encoding: str
    ) -> None:
        """Queue a response whose raw ``body`` claims ``Content-Encoding``.

        The body is only decoded when the client reads it.
        """
        response = httpx.Response(
            status,
            headers={"content-encoding": encoding},
            stream=httpx.ByteStream(body),
        )
        self._replies[(method, url)].append(response)

    def fail(self, method: str, url: str, exc: Exception | None = None) -> None:
        """Queue a transport error for ``method url``."""
        self._replies[(method, url)].append(exc or httpx.ConnectError("boom"))

    def calls(self, method: str | None = None) -> list[RecordedRequest]:
        """Return recorded requests, optionally filtered by method."""
        return [req for req in self.requests if method in (None, req.method)]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                url=str(request.url),
                headers=dict(request.headers),
                body=request.content,
            )
        )
        queue = self._replies.get((request.method, str(request.url)))
        if not queue:
            return httpx.Response(404, json={"message": "Not Found"})
        reply = queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def http_client(self) -> httpx.AsyncClient:
        """Return an httpx client routed through the stub."""
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))


def issue_payload(
    repo: str = "acme/widgets", number: int = 7, state: str = "open"
) -> dict[str, object]:
    """Return a create-issue response body."""
    return {
        "number": number,
        "state": state,
        "url": f"{API}/{repo}/issues/{number}",
        "html_url": f"https://github.com/{repo}/issues/{number}",
        "user": {"login": "relay-bot", "type": "Bot"},
    }


def commit_payload(
    *,
    login: str | None = "octocat",
    account_type: str = "User",
    committer: str | None = "Octo Cat",
    author: str | None = "Octo Author",
) -> dict[str, object]:
    """Return a commit lookup body."""
    git_commit: dict[str, object] = {"message": "fix widgets"}
    if committer is not None:
        git_commit["committer"] = {"name": committer, "email": "c@example.test"}
    if author is not None:
        git_commit["author"] = {"name": author, "email": "a@example.test"}
    payload: dict[str, object] = {"sha": "4f2b6c9", "commit": git_commit}
    if login is not None:
        payload["author"] = {"login": login, "type": account_type}
    return payload
