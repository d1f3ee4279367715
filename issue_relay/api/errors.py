"""API exceptions and Falcon error handlers.

Usage
-----
Register error handlers on the Falcon app::

    from issue_relay.api.errors import (
        InvalidPushMessageError,
        handle_delivery_failure,
        handle_invalid_push_message,
    )

    app.add_error_handler(InvalidPushMessageError, handle_invalid_push_message)
    app.add_error_handler(TemplateRenderError, handle_delivery_failure)

"""

from __future__ import annotations

import typing as typ

import falcon

from issue_relay.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidPushMessageError",
    "handle_delivery_failure",
    "handle_invalid_push_message",
]

logger = get_logger(__name__)


class InvalidPushMessageError(Exception):
    """Raised when a push request does not carry a decodable build.

    Attributes
    ----------
    reason
        Human-readable description of the decoding failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialize with the decoding failure reason."""
        self.reason = reason
        super().__init__(reason)


async def handle_invalid_push_message(
    _req: Request,
    resp: Response,
    ex: InvalidPushMessageError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidPushMessageError`` to an HTTP 400 JSON response.

    Pub/Sub redelivers on any non-2xx status, so a malformed message keeps
    failing until it reaches the subscription's dead-letter policy.
    """
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid push message",
        "description": ex.reason,
    }


async def handle_delivery_failure(
    _req: Request,
    resp: Response,
    ex: Exception,
    _params: dict[str, typ.Any],
) -> None:
    """Log a notification that aborted and answer HTTP 500.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        Template, tracking-parameter or GitHub transport failure.
    _params
        URI template parameters (unused).

    """
    log_exception(logger, "failed to send GitHub issue notification", ex)
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Notification failed",
        "description": str(ex),
    }
