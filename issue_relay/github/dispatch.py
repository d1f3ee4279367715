"""Create an issue for a build and, unless a repository opts out, close it.

Dispatch is a linear, best-effort sequence:

1. ``POST`` the rendered issue. A transport failure aborts by raising; a
   non-success status is only logged because GitHub may have applied the
   request anyway.
2. When the create call answered ``201 Created`` and the repository has not
   set ``DISABLE_AUTO_CLOSE__{owner/name}`` to ``"true"``, decode the new
   issue and ``PATCH`` it closed if it is still open. Failures here are
   logged and never raised.

The override lookup is injected so tests need not touch ``os.environ``.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import os
import typing as typ
from http import HTTPStatus

from issue_relay.logging import get_logger, log_debug, log_info, log_warning

from .errors import GitHubAPIError, GitHubResponseShapeError
from .models import decode_issue_response

if typ.TYPE_CHECKING:
    import httpx

    from .client import GitHubIssuesClient
    from .models import IssueRequest

logger = get_logger(__name__)

AUTO_CLOSE_OVERRIDE_PREFIX = "DISABLE_AUTO_CLOSE__"
_OPEN_STATE = "open"
# 201 is the expected create answer, so it is not reported as non-OK.
_CREATE_SUCCESS = frozenset({HTTPStatus.OK, HTTPStatus.CREATED})


def auto_close_override_key(repo: str) -> str:
    """Return the override key that disables auto-close for ``repo``."""
    return f"{AUTO_CLOSE_OVERRIDE_PREFIX}{repo}"


def auto_close_disabled(overrides: cabc.Mapping[str, str], repo: str) -> bool:
    """Return True only when the override is exactly the string ``"true"``."""
    return overrides.get(auto_close_override_key(repo)) == "true"


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchResult:
    """What happened during one dispatch."""

    create_status: int
    issue_url: str | None = None
    close_status: int | None = None

    @property
    def close_attempted(self) -> bool:
        """Return True when a close request reached GitHub."""
        return self.close_status is not None


def _warn_status(response: httpx.Response, url: str) -> None:
    log_warning(
        logger,
        "got a non-OK response status %r (%d) from %r",
        response.reason_phrase,
        response.status_code,
        url,
    )


class IssueDispatcher:
    """Send rendered issues to GitHub and apply the auto-close policy."""

    def __init__(
        self,
        client: GitHubIssuesClient,
        *,
        overrides: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Bind the dispatcher to a client and an override lookup.

        Parameters
        ----------
        client
            GitHub client carrying the token and fixed headers.
        overrides
            Key/value store consulted for ``DISABLE_AUTO_CLOSE__*`` flags.
            Defaults to the process environment.

        """
        self._client = client
        self._overrides: cabc.Mapping[str, str] = (
            os.environ if overrides is None else overrides
        )

    async def dispatch(self, repo: str, issue: IssueRequest) -> DispatchResult:
        """Create the issue in ``repo`` and close it when policy allows.

        Raises
        ------
        GitHubAPIError
            If the create request fails before a response is received.

        """
        create_url = self._client.issues_url(repo)
        response = await self._client.create_issue(repo, issue)
        if response.status_code not in _CREATE_SUCCESS:
            _warn_status(response, create_url)
        else:
            log_debug(logger, "sent create issue HTTP request successfully")

        if response.status_code != HTTPStatus.CREATED:
            return DispatchResult(create_status=response.status_code)

        if auto_close_disabled(self._overrides, repo):
            log_info(logger, "auto-close disabled for %s, leaving issue open", repo)
            return DispatchResult(create_status=response.status_code)

        return await self._close_if_open(response)

    async def _close_if_open(self, created: httpx.Response) -> DispatchResult:
        result = DispatchResult(create_status=created.status_code)
        try:
            issue = decode_issue_response(created.content)
        except GitHubResponseShapeError as exc:
            log_warning(logger, "failed to decode JSON response: %s", exc)
            return result

        if issue.state != _OPEN_STATE:
            return dataclasses.replace(result, issue_url=issue.url)
        if not issue.url:
            log_warning(logger, "%s", GitHubResponseShapeError.missing("url"))
            return result

        result = dataclasses.replace(result, issue_url=issue.url)
        try:
            closed = await self._client.close_issue(issue.url)
        except GitHubAPIError as exc:
            log_warning(logger, "failed to close issue %s: %s", issue.url, exc)
            return result

        if closed.status_code != HTTPStatus.OK:
            _warn_status(closed, issue.url)
        else:
            log_debug(logger, "sent close issue HTTP request successfully")
        return dataclasses.replace(result, close_status=closed.status_code)
