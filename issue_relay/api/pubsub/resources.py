"""Pub/Sub push endpoint for Cloud Build events.

A push subscription on the ``cloud-builds`` topic POSTs each build update
here. The body is decoded into a :class:`~issue_relay.build.BuildEvent` and
handed to the notifier.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/", PushResource(notifier))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from issue_relay.api.errors import InvalidPushMessageError
from issue_relay.build import BuildDecodeError, decode_push_envelope

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from issue_relay.notifier.service import GitHubIssuesNotifier, NotificationResult

__all__ = ["PushResource"]


def _serialize_result(result: NotificationResult) -> dict[str, typ.Any]:
    media: dict[str, typ.Any] = {"status": str(result.status)}
    if result.repo:
        media["repository"] = result.repo
    if result.dispatch is not None:
        media["create_status"] = result.dispatch.create_status
        media["issue_url"] = result.dispatch.issue_url
        media["close_status"] = result.dispatch.close_status
    return media


class PushResource:
    """Accept Pub/Sub push deliveries and run the notification pipeline."""

    def __init__(self, notifier: GitHubIssuesNotifier) -> None:
        """Bind the resource to the configured notifier."""
        self._notifier = notifier

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST / requests.

        Returns HTTP 200 for delivered and skipped builds alike. Malformed
        envelopes become HTTP 400 via :class:`InvalidPushMessageError`;
        notifications that abort propagate to the app's 500 handler.

        Parameters
        ----------
        req
            Falcon request carrying the push envelope.
        resp
            Falcon response populated with the notification outcome.

        """
        body = await req.stream.read()
        try:
            event = decode_push_envelope(body)
        except BuildDecodeError as exc:
            raise InvalidPushMessageError(str(exc)) from exc

        result = await self._notifier.send_notification(event)
        resp.media = _serialize_result(result)
        resp.status = HTTPStatus.OK
