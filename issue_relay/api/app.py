"""Application factory for the relay's Falcon ASGI application.

Usage
-----
Create a probes-only app (no notifier configured)::

    app = create_app()

Create the full app with the Pub/Sub push endpoint::

    from issue_relay.api.app import AppDependencies, create_app

    app = create_app(AppDependencies(notifier=notifier))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from issue_relay.api.errors import (
    InvalidPushMessageError,
    handle_delivery_failure,
    handle_invalid_push_message,
)
from issue_relay.api.health.resources import HealthResource, ReadyResource
from issue_relay.github.errors import GitHubAPIError
from issue_relay.notifier.errors import TemplateRenderError, TrackingParamsError

if typ.TYPE_CHECKING:
    from issue_relay.notifier.service import GitHubIssuesNotifier

__all__ = ["AppDependencies", "create_app"]

_DELIVERY_FAILURES: tuple[type[Exception], ...] = (
    TemplateRenderError,
    TrackingParamsError,
    GitHubAPIError,
)


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    notifier
        Configured notifier. When ``None`` only the probes are registered
        and ``/ready`` reports the instance as unconfigured.

    """

    notifier: GitHubIssuesNotifier | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    notifier = dependencies.notifier if dependencies is not None else None
    middleware: list[object] = []
    if notifier is not None:
        from issue_relay.api.middleware import NotifierLifespan

        middleware.append(NotifierLifespan(notifier))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(ready=notifier is not None))

    if notifier is not None:
        from issue_relay.api.pubsub.resources import PushResource

        app.add_route("/", PushResource(notifier))

    app.add_error_handler(InvalidPushMessageError, handle_invalid_push_message)
    for error_type in _DELIVERY_FAILURES:
        app.add_error_handler(error_type, handle_delivery_failure)

    return app
