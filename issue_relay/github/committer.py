"""Resolve the person behind the commit or tag that triggered a build."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from issue_relay.build.models import REF_NAME_KEY, TAG_NAME_KEY

from .errors import GitHubAPIError, MissingRefError
from .models import CommitResponse, LookupResponse, decode_lookup_response

if typ.TYPE_CHECKING:
    from issue_relay.build.models import BuildEvent

    from .client import GitHubIssuesClient

_USER_ACCOUNT_TYPE = "User"


def identity_from_response(response: LookupResponse) -> str:
    """Pick the committer identity from a decoded lookup body.

    The first match wins:

    1. ``author.login`` when the linked account is a ``User``. Commits made
       through the web UI carry the ``web-flow`` bot as git committer, so the
       GitHub account is preferred over the git-level names.
    2. ``commit.committer.name``.
    3. ``commit.author.name``.

    Returns ``""`` when none of these is present.
    """
    author = response.author
    if author is not None and author.type == _USER_ACCOUNT_TYPE and author.login:
        return author.login

    if isinstance(response, CommitResponse):
        git_commit = response.commit
        if git_commit.committer is not None and git_commit.committer.name:
            return git_commit.committer.name
        if git_commit.author is not None and git_commit.author.name:
            return git_commit.author.name

    return ""


class CommitterResolver:
    """Look up committer identities through the GitHub REST API."""

    def __init__(self, client: GitHubIssuesClient) -> None:
        """Bind the resolver to a GitHub client."""
        self._client = client

    def lookup_url(self, event: BuildEvent, repo: str) -> str:
        """Return the release-by-tag URL for tag builds, else commit-by-ref.

        Raises
        ------
        MissingRefError
            If the build has no ``REF_NAME`` substitution.

        """
        ref_name = event.substitution(REF_NAME_KEY)
        if not ref_name:
            raise MissingRefError
        if event.substitution(TAG_NAME_KEY):
            return self._client.release_url(repo, ref_name)
        return self._client.commit_url(repo, ref_name)

    async def resolve(self, event: BuildEvent, repo: str) -> str:
        """Return the committer identity for ``event``, or ``""`` if unknown.

        Raises
        ------
        MissingRefError
            If the build has no ``REF_NAME`` substitution.
        GitHubAPIError
            If the lookup fails in transport or returns a non-200 status.
        GitHubResponseShapeError
            If the body matches neither the commit nor the release shape.

        """
        url = self.lookup_url(event, repo)
        response = await self._client.get(url)
        if response.status_code != HTTPStatus.OK:
            raise GitHubAPIError.unexpected_status(
                response.status_code, response.reason_phrase, url
            )
        return identity_from_response(decode_lookup_response(response.content))
