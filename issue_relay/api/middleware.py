"""Lifespan middleware releasing notifier resources.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(middleware=[NotifierLifespan(notifier)])

"""

from __future__ import annotations

import typing as typ

from issue_relay.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from issue_relay.notifier.service import GitHubIssuesNotifier

__all__ = ["NotifierLifespan"]

logger = get_logger(__name__)


class NotifierLifespan:
    """Close the notifier's HTTP client when the ASGI server shuts down."""

    def __init__(self, notifier: GitHubIssuesNotifier) -> None:
        """Initialize the middleware with the notifier it owns."""
        self._notifier = notifier

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Log the notifier serving this process."""
        log_info(logger, "notifier %r ready", self._notifier.config.name)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Close the notifier's GitHub client."""
        await self._notifier.aclose()
