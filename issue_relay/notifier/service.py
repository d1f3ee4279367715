"""The notification delivery pipeline.

One call to :meth:`GitHubIssuesNotifier.send_notification` runs these stages
in order, each with its own failure domain:

==================  =====================================================
Stage               On failure
==================  =====================================================
Event filter        rejected events are skipped (DEBUG)
Repository          missing ``REPO_FULL_NAME`` skips the build (WARNING)
Bindings            logged as WARNING, template gets empty ``params``
Committer lookup    logged as WARNING, ``GH_COMMITTER_LOGIN`` set to ``""``
Rendering           raises, nothing is sent
Dispatch            create transport errors raise; everything else is
                    logged by the dispatcher
==================  =====================================================

Nothing is retried and nothing is rolled back.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum
import typing as typ

from issue_relay.build.models import COMMITTER_LOGIN_KEY
from issue_relay.github.client import GitHubIssuesClient, GitHubRestConfig
from issue_relay.github.committer import CommitterResolver
from issue_relay.github.dispatch import IssueDispatcher
from issue_relay.github.errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    MissingRefError,
)
from issue_relay.logging import get_logger, log_debug, log_info, log_warning

from .errors import BindingResolutionError
from .routing import resolve_repo
from .template import MessageRenderer

if typ.TYPE_CHECKING:
    import httpx

    from issue_relay.build.models import BuildEvent
    from issue_relay.github.dispatch import DispatchResult

    from .config import NotifierConfig

logger = get_logger(__name__)


class NotificationStatus(enum.StrEnum):
    """How a notification attempt ended without raising."""

    FILTERED = "filtered"
    NO_REPOSITORY = "no_repository"
    DISPATCHED = "dispatched"


@dataclasses.dataclass(frozen=True, slots=True)
class NotificationResult:
    """Outcome of :meth:`GitHubIssuesNotifier.send_notification`."""

    status: NotificationStatus
    repo: str = ""
    committer: str = ""
    dispatch: DispatchResult | None = None


class GitHubIssuesNotifier:
    """Relay build events into GitHub issues.

    Parameters
    ----------
    config
        Setup-time configuration; shared read-only by concurrent calls.
    http_client
        Optional httpx client, mainly for tests. When omitted the notifier
        owns its own client and closes it in :meth:`aclose`.
    overrides
        Lookup for ``DISABLE_AUTO_CLOSE__{repo}`` flags; defaults to the
        process environment.

    """

    def __init__(
        self,
        config: NotifierConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        overrides: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Wire the pipeline stages around a single GitHub client."""
        self._config = config
        self._client = GitHubIssuesClient(
            GitHubRestConfig(token=config.token), http_client=http_client
        )
        self._committers = CommitterResolver(self._client)
        self._renderer = MessageRenderer(config.template)
        self._dispatcher = IssueDispatcher(self._client, overrides=overrides)

    @property
    def config(self) -> NotifierConfig:
        """The configuration this notifier was built from."""
        return self._config

    async def aclose(self) -> None:
        """Release HTTP resources owned by the notifier."""
        await self._client.aclose()

    async def send_notification(self, event: BuildEvent) -> NotificationResult:
        """Run the pipeline for one build event.

        ``event.substitutions`` gains a ``GH_COMMITTER_LOGIN`` entry once the
        event passes the filter and repository stages.

        Raises
        ------
        TrackingParamsError
            If the build log URL cannot be rewritten.
        TemplateRenderError
            If the issue template cannot be rendered into an issue.
        GitHubAPIError
            If the create-issue request fails in transport.

        """
        if not self._config.event_filter.apply(event):
            log_debug(
                logger,
                "not sending response for event (build id = %s, status = %s)",
                event.id,
                event.status,
            )
            return NotificationResult(status=NotificationStatus.FILTERED)

        repo = resolve_repo(event)
        if not repo:
            log_warning(
                logger,
                "could not determine GitHub repository from build %s, "
                "skipping notification",
                event.id,
            )
            return NotificationResult(status=NotificationStatus.NO_REPOSITORY)

        log_info(
            logger,
            "sending GitHub issue for build %r (status: %r) to %r",
            event.id,
            str(event.status),
            repo,
        )

        params = self._resolve_bindings(event)
        committer = await self._record_committer(event, repo)
        issue = self._renderer.render_issue(event, params)
        result = await self._dispatcher.dispatch(repo, issue)
        return NotificationResult(
            status=NotificationStatus.DISPATCHED,
            repo=repo,
            committer=committer,
            dispatch=result,
        )

    def _resolve_bindings(self, event: BuildEvent) -> dict[str, str]:
        try:
            return self._config.bindings.resolve(event)
        except BindingResolutionError as exc:
            log_warning(logger, "failed to resolve bindings: %s", exc)
            return {}

    async def _record_committer(self, event: BuildEvent, repo: str) -> str:
        try:
            committer = await self._committers.resolve(event, repo)
        except (MissingRefError, GitHubAPIError, GitHubResponseShapeError) as exc:
            log_warning(logger, "failed to get committer from commit ref: %s", exc)
            committer = ""
        event.record_substitution(COMMITTER_LOGIN_KEY, committer)
        return committer
