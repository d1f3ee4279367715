"""GitHub REST client, committer resolution and issue dispatch."""

from __future__ import annotations

from .client import GitHubIssuesClient, GitHubRestConfig
from .committer import CommitterResolver, identity_from_response
from .dispatch import (
    AUTO_CLOSE_OVERRIDE_PREFIX,
    DispatchResult,
    IssueDispatcher,
    auto_close_disabled,
)
from .errors import GitHubAPIError, GitHubResponseShapeError, MissingRefError
from .models import IssueRequest, IssueResponse

__all__ = [
    "AUTO_CLOSE_OVERRIDE_PREFIX",
    "CommitterResolver",
    "DispatchResult",
    "GitHubAPIError",
    "GitHubIssuesClient",
    "GitHubResponseShapeError",
    "GitHubRestConfig",
    "IssueDispatcher",
    "IssueRequest",
    "IssueResponse",
    "MissingRefError",
    "auto_close_disabled",
    "identity_from_response",
]
