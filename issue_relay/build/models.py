"""Typed Cloud Build event structures."""

from __future__ import annotations

import enum

import msgspec

REPO_FULL_NAME_KEY = "REPO_FULL_NAME"
REF_NAME_KEY = "REF_NAME"
TAG_NAME_KEY = "TAG_NAME"
# Written back by the pipeline once the committer lookup has run.
COMMITTER_LOGIN_KEY = "GH_COMMITTER_LOGIN"


class BuildStatus(enum.StrEnum):
    """Cloud Build lifecycle states as published on the ``cloud-builds`` topic."""

    STATUS_UNKNOWN = "STATUS_UNKNOWN"
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    WORKING = "WORKING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class BuildEvent(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Snapshot of one CI build run.

    The struct itself is frozen; only the ``substitutions`` mapping is mutated
    while a notification is processed, to record the resolved committer under
    :data:`COMMITTER_LOGIN_KEY`.

    Attributes
    ----------
    id : str
        Cloud Build identifier.
    project_id : str
        Project that owns the build.
    status : BuildStatus
        Lifecycle state at publication time.
    log_url : str
        Console URL for the build log.
    substitutions : dict[str, str]
        Named build variables (``REPO_FULL_NAME``, ``REF_NAME`` ...).

    """

    id: str
    project_id: str = ""
    status: BuildStatus = BuildStatus.STATUS_UNKNOWN
    status_detail: str = ""
    log_url: str = ""
    build_trigger_id: str = ""
    create_time: str | None = None
    start_time: str | None = None
    finish_time: str | None = None
    images: list[str] = msgspec.field(default_factory=list)
    tags: list[str] = msgspec.field(default_factory=list)
    substitutions: dict[str, str] = msgspec.field(default_factory=dict)

    def substitution(self, key: str) -> str:
        """Return the substitution value for ``key`` or ``""`` when unset."""
        return self.substitutions.get(key, "")

    def record_substitution(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` in the substitutions mapping."""
        self.substitutions[key] = value


def build_to_builtins(event: BuildEvent) -> dict[str, object]:
    """Return ``event`` as plain JSON-compatible data with snake_case keys."""
    return {
        field: msgspec.to_builtins(getattr(event, field))
        for field in event.__struct_fields__
    }
