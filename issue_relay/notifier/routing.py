"""Target repository resolution."""

from __future__ import annotations

import typing as typ

from issue_relay.build.models import REPO_FULL_NAME_KEY

if typ.TYPE_CHECKING:
    from issue_relay.build.models import BuildEvent


def resolve_repo(event: BuildEvent) -> str:
    """Return the ``owner/name`` slug the build belongs to, or ``""``.

    Triggers connected to GitHub populate ``REPO_FULL_NAME`` (for example
    ``GoogleCloudPlatform/cloud-build-notifiers``). An empty result means the
    notification cannot be routed and should be skipped.
    """
    return event.substitution(REPO_FULL_NAME_KEY)
