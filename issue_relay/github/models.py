"""Wire shapes for the GitHub REST resources the relay touches.

GitHub answers the commit lookup and the release-by-tag lookup with
structurally different bodies. Rather than probing an untyped mapping, the
body is decoded against each known shape in turn: a commit (which must carry
a ``commit`` object) first, then a release, whose fields are all optional and
which therefore accepts any JSON object. Missing members decode to ``None``
so callers see an absent field explicitly.
"""

from __future__ import annotations

import msgspec

from .errors import GitHubResponseShapeError


class IssueRequest(msgspec.Struct, kw_only=True):
    """Body of ``POST /repos/{owner}/{name}/issues``."""

    title: str
    body: str = ""
    labels: list[str] | msgspec.UnsetType = msgspec.UNSET
    assignees: list[str] | msgspec.UnsetType = msgspec.UNSET


class CloseIssueRequest(msgspec.Struct, kw_only=True):
    """Body of the ``PATCH`` that closes an issue."""

    state: str = "closed"


class Account(msgspec.Struct, kw_only=True):
    """A GitHub account reference (``author`` / ``user`` members)."""

    login: str | None = None
    type: str | None = None


class GitActor(msgspec.Struct, kw_only=True):
    """Git-level author or committer recorded on a commit object."""

    name: str | None = None
    email: str | None = None


class GitCommit(msgspec.Struct, kw_only=True):
    """The ``commit`` member of a commit lookup."""

    author: GitActor | None = None
    committer: GitActor | None = None
    message: str = ""


class CommitResponse(msgspec.Struct, kw_only=True):
    """Body of ``GET /repos/{owner}/{name}/commits/{ref}``."""

    commit: GitCommit
    sha: str = ""
    author: Account | None = None
    html_url: str = ""


class ReleaseResponse(msgspec.Struct, kw_only=True):
    """Body of ``GET /repos/{owner}/{name}/releases/tags/{tag}``."""

    tag_name: str = ""
    name: str | None = None
    author: Account | None = None
    html_url: str = ""


LookupResponse = CommitResponse | ReleaseResponse

_LOOKUP_SHAPES: tuple[type[CommitResponse] | type[ReleaseResponse], ...] = (
    CommitResponse,
    ReleaseResponse,
)


class IssueResponse(msgspec.Struct, kw_only=True):
    """Subset of the issue object returned by create and update calls."""

    state: str | None = None
    url: str | None = None
    html_url: str = ""
    number: int | None = None
    user: Account | None = None


def decode_lookup_response(body: bytes) -> LookupResponse:
    """Decode a committer lookup body against the known shapes in order.

    Raises
    ------
    GitHubResponseShapeError
        If the body is not JSON or matches none of the shapes.

    """
    last_error: msgspec.DecodeError | None = None
    for shape in _LOOKUP_SHAPES:
        try:
            return msgspec.json.decode(body, type=shape)
        except msgspec.DecodeError as exc:
            last_error = exc
    raise GitHubResponseShapeError.undecodable("committer lookup", str(last_error))


def decode_issue_response(body: bytes) -> IssueResponse:
    """Decode the body of an issue create call."""
    try:
        return msgspec.json.decode(body, type=IssueResponse)
    except msgspec.DecodeError as exc:
        raise GitHubResponseShapeError.undecodable("issue", str(exc)) from exc
