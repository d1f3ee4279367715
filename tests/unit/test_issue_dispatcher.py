"""Unit tests for issue creation and the auto-close policy."""

from __future__ import annotations

import pytest

from issue_relay.github import GitHubIssuesClient, GitHubRestConfig, IssueDispatcher
from issue_relay.github import dispatch as dispatch_module
from issue_relay.github.dispatch import auto_close_disabled, auto_close_override_key
from issue_relay.github.errors import GitHubAPIError
from issue_relay.github.models import IssueRequest
from tests.helpers.github_stub import API, GitHubStub, issue_payload
from tests.helpers.log_recorder import record_module_logs

_REPO = "acme/widgets"
_ISSUES = f"{API}/{_REPO}/issues"
_ISSUE = f"{_ISSUES}/7"
_ISSUE_REQUEST = IssueRequest(title="Build b-1 FAILURE")


def _dispatcher(
    github: GitHubStub, overrides: dict[str, str] | None = None
) -> IssueDispatcher:
    client = GitHubIssuesClient(GitHubRestConfig(token="t"), http_client=github.http_client())
    return IssueDispatcher(client, overrides=overrides or {})


def test_override_key_embeds_slug() -> None:
    """The override key is the prefix plus the owner/name slug."""
    assert auto_close_override_key(_REPO) == "DISABLE_AUTO_CLOSE__acme/widgets"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("false", False), ("TRUE", False), ("1", False), (None, False)],
)
def test_override_must_be_exactly_true(value: str | None, *, expected: bool) -> None:
    """Only the literal string "true" disables auto-close."""
    overrides = {} if value is None else {auto_close_override_key(_REPO): value}

    assert auto_close_disabled(overrides, _REPO) is expected


@pytest.mark.asyncio
async def test_created_open_issue_is_closed(github: GitHubStub) -> None:
    """201 with an open issue triggers exactly one close PATCH."""
    github.reply("POST", _ISSUES, 201, issue_payload())
    github.reply("PATCH", _ISSUE, 200, issue_payload(state="closed"))

    result = await _dispatcher(github).dispatch(_REPO, _ISSUE_REQUEST)

    assert result.create_status == 201
    assert result.issue_url == _ISSUE
    assert result.close_status == 200
    assert [req.method for req in github.requests] == ["POST", "PATCH"]


@pytest.mark.asyncio
async def test_override_leaves_issue_open(github: GitHubStub) -> None:
    """DISABLE_AUTO_CLOSE__{repo}=true suppresses the close call."""
    github.reply("POST", _ISSUES, 201, issue_payload())
    overrides = {auto_close_override_key(_REPO): "true"}

    result = await _dispatcher(github, overrides).dispatch(_REPO, _ISSUE_REQUEST)

    assert not result.close_attempted
    assert github.calls("PATCH") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [200, 202, 422, 500])
async def test_only_created_status_triggers_close(
    github: GitHubStub, monkeypatch: pytest.MonkeyPatch, status: int
) -> None:
    """Responses other than 201 never lead to a close call."""
    logs = record_module_logs(monkeypatch, dispatch_module)
    github.reply("POST", _ISSUES, status, issue_payload())

    result = await _dispatcher(github).dispatch(_REPO, _ISSUE_REQUEST)

    assert result.create_status == status
    assert github.calls("PATCH") == []
    warned = bool(logs.messages("WARNING"))
    assert warned is (status != 200)


@pytest.mark.asyncio
async def test_already_closed_issue_is_not_patched(github: GitHubStub) -> None:
    """A created issue that is not open needs no close call."""
    github.reply("POST", _ISSUES, 201, issue_payload(state="closed"))

    result = await _dispatcher(github).dispatch(_REPO, _ISSUE_REQUEST)

    assert github.calls("PATCH") == []
    assert result.issue_url == _ISSUE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [b"not json", b'{"state": "open"}'],
    ids=["undecodable", "missing-url"],
)
async def test_unusable_create_body_skips_close(
    github: GitHubStub, monkeypatch: pytest.MonkeyPatch, content: bytes
) -> None:
    """Create bodies without a usable URL are logged, not raised."""
    logs = record_module_logs(monkeypatch, dispatch_module)
    github.reply("POST", _ISSUES, 201, content=content)

    result = await _dispatcher(github).dispatch(_REPO, _ISSUE_REQUEST)

    assert not result.close_attempted
    assert logs.messages("WARNING")


@pytest.mark.asyncio
async def test_close_failures_are_logged(
    github: GitHubStub, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Transport errors and non-200 closes only warn."""
    logs = record_module_logs(monkeypatch, dispatch_module)
    github.reply("POST", _ISSUES, 201, issue_payload())
    github.fail("PATCH", _ISSUE)
    github.reply("POST", _ISSUES, 201, issue_payload())
    github.reply("PATCH", _ISSUE, 403, {"message": "Forbidden"})
    dispatcher = _dispatcher(github)

    first = await dispatcher.dispatch(_REPO, _ISSUE_REQUEST)
    second = await dispatcher.dispatch(_REPO, _ISSUE_REQUEST)

    assert first.close_status is None
    assert second.close_status == 403
    assert len(logs.messages("WARNING")) == 2


@pytest.mark.asyncio
async def test_create_transport_error_propagates(github: GitHubStub) -> None:
    """A create call that never answers aborts dispatch."""
    github.fail("POST", _ISSUES)

    with pytest.raises(GitHubAPIError):
        await _dispatcher(github).dispatch(_REPO, _ISSUE_REQUEST)
