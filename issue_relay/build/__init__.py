"""Cloud Build event models and inbound decoding."""

from __future__ import annotations

from .errors import BuildDecodeError
from .models import (
    COMMITTER_LOGIN_KEY,
    REF_NAME_KEY,
    REPO_FULL_NAME_KEY,
    TAG_NAME_KEY,
    BuildEvent,
    BuildStatus,
    build_to_builtins,
)
from .pubsub import decode_build, decode_push_envelope

__all__ = [
    "COMMITTER_LOGIN_KEY",
    "REF_NAME_KEY",
    "REPO_FULL_NAME_KEY",
    "TAG_NAME_KEY",
    "BuildDecodeError",
    "BuildEvent",
    "BuildStatus",
    "build_to_builtins",
    "decode_build",
    "decode_push_envelope",
]
