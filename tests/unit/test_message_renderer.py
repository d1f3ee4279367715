"""Unit tests for tracking parameters and issue rendering."""

from __future__ import annotations

import urllib.parse

import pytest

from issue_relay.github.models import IssueRequest
from issue_relay.notifier import (
    MessageRenderer,
    RelayConfigError,
    TemplateRenderError,
    TrackingParamsError,
    add_utm_params,
    compile_template,
)
from tests.helpers.builds import make_build

TEMPLATE = """\
{
  "title": {{ ("Build " ~ build.id ~ " " ~ build.status) | tojson }},
  "body": {{ build.log_url | tojson }},
  "labels": [{{ params.label | tojson }}]
}
"""


def test_add_utm_params_appends_sorted_tracking_query() -> None:
    """Tracking parameters join existing ones in key order."""
    url = add_utm_params("https://console.example.test/builds/b-1?project=123", "http")

    parts = urllib.parse.urlsplit(url)
    assert parts.path == "/builds/b-1"
    assert parts.query == (
        "project=123&utm_campaign=google-cloud-build-notifiers"
        "&utm_medium=http&utm_source=google-cloud-build"
    )


def test_add_utm_params_replaces_existing_tracking_keys() -> None:
    """Earlier utm_* values are dropped rather than repeated."""
    url = add_utm_params(
        "https://console.example.test/b?utm_medium=email&utm_source=old&x=1", "http"
    )

    assert urllib.parse.urlsplit(url).query == (
        "utm_campaign=google-cloud-build-notifiers"
        "&utm_medium=http&utm_source=google-cloud-build&x=1"
    )


def test_add_utm_params_rejects_unknown_medium() -> None:
    """Only the known delivery mediums are accepted."""
    with pytest.raises(TrackingParamsError, match="unknown UTM medium"):
        add_utm_params("https://example.test", "carrier-pigeon")


def test_add_utm_params_rejects_unparsable_url() -> None:
    """A URL that does not split raises TrackingParamsError."""
    with pytest.raises(TrackingParamsError):
        add_utm_params("http://[::1", "http")


def test_render_issue_sees_tracked_log_url_and_params() -> None:
    """The template sees the rewritten log URL; the event keeps the original."""
    event = make_build(build_id="b-3")
    original_url = event.log_url
    renderer = MessageRenderer(compile_template(TEMPLATE))

    issue = renderer.render_issue(event, {"label": "ci"})

    assert isinstance(issue, IssueRequest)
    assert issue.title == "Build b-3 FAILURE"
    assert issue.body.startswith(original_url)
    assert "utm_source=google-cloud-build" in issue.body
    assert issue.labels == ["ci"]
    assert event.log_url == original_url


def test_render_issue_fails_on_undefined_names() -> None:
    """Referencing an unbound param is a render error, not a blank."""
    renderer = MessageRenderer(compile_template(TEMPLATE))

    with pytest.raises(TemplateRenderError, match="failed to render"):
        renderer.render_issue(make_build(), {})


def test_render_issue_requires_issue_document() -> None:
    """Output that is not an issue object is rejected."""
    renderer = MessageRenderer(compile_template('{"body": "no title"}'))

    with pytest.raises(TemplateRenderError, match="not a valid issue payload"):
        renderer.render_issue(make_build(), {})


def test_compile_template_reports_syntax_errors() -> None:
    """Broken templates fail at setup."""
    with pytest.raises(RelayConfigError, match="failed to parse issue body template"):
        compile_template("{{ build.id ")
