"""Health probe resources for container liveness and readiness checks.

Usage
-----
Register health endpoints on the Falcon app::

    from issue_relay.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(ready=True))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Responds ``{"status": "ready"}`` with HTTP 200 once a notifier is
    configured, and ``{"status": "unconfigured"}`` with HTTP 503 otherwise so
    that no Pub/Sub traffic is routed to an instance that would drop it.

    """

    def __init__(self, *, ready: bool) -> None:
        """Record whether the push endpoint is available."""
        self._ready = ready

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        if self._ready:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
        else:
            resp.media = {"status": "unconfigured"}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
