"""Decoding of Pub/Sub push deliveries carrying Cloud Build events.

Cloud Build publishes build status changes to the ``cloud-builds`` topic. A
push subscription POSTs an envelope of the form::

    {
      "message": {
        "data": "<base64 build JSON>",
        "attributes": {"buildId": "...", "status": "SUCCESS"},
        "messageId": "123"
      },
      "subscription": "projects/p/subscriptions/s"
    }

msgspec decodes the base64 ``data`` field straight into ``bytes``.
"""

from __future__ import annotations

import msgspec

from .errors import BuildDecodeError
from .models import BuildEvent


class PushMessage(msgspec.Struct, kw_only=True, rename="camel"):
    """The ``message`` member of a push envelope."""

    data: bytes
    attributes: dict[str, str] = msgspec.field(default_factory=dict)
    message_id: str = ""


class PushEnvelope(msgspec.Struct, kw_only=True):
    """A Pub/Sub push request body."""

    message: PushMessage
    subscription: str = ""


def decode_build(data: bytes) -> BuildEvent:
    """Decode Cloud Build JSON into a :class:`BuildEvent`."""
    try:
        return msgspec.json.decode(data, type=BuildEvent)
    except msgspec.DecodeError as exc:
        raise BuildDecodeError.invalid_build(str(exc)) from exc


def decode_push_envelope(body: bytes) -> BuildEvent:
    """Decode a push request body and return the build it carries.

    Raises
    ------
    BuildDecodeError
        If the envelope or the embedded build JSON is malformed.

    """
    try:
        envelope = msgspec.json.decode(body, type=PushEnvelope)
    except msgspec.DecodeError as exc:
        raise BuildDecodeError.invalid_envelope(str(exc)) from exc

    if not envelope.message.data:
        raise BuildDecodeError.invalid_envelope("message.data is empty")
    return decode_build(envelope.message.data)
