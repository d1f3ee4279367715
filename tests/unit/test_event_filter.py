"""Unit tests for CEL event filters."""

from __future__ import annotations

import pytest

from issue_relay.build import BuildStatus
from issue_relay.notifier import RelayConfigError, compile_event_filter
from issue_relay.notifier import filters as filters_module
from tests.helpers.builds import make_build
from tests.helpers.log_recorder import record_module_logs


@pytest.mark.parametrize(
    ("expression", "status", "expected"),
    [
        ('build.status == "FAILURE"', BuildStatus.FAILURE, True),
        ('build.status == "FAILURE"', BuildStatus.SUCCESS, False),
        ("build.status == Build.Status.TIMEOUT", BuildStatus.TIMEOUT, True),
        (
            "build.status in [Build.Status.FAILURE, Build.Status.INTERNAL_ERROR]",
            BuildStatus.INTERNAL_ERROR,
            True,
        ),
    ],
)
def test_filter_matches_status(
    expression: str, status: BuildStatus, *, expected: bool
) -> None:
    """Status predicates select the expected builds."""
    event_filter = compile_event_filter(expression)

    assert event_filter.apply(make_build(status=status)) is expected


def test_filter_reads_substitutions() -> None:
    """Substitutions are reachable as a map."""
    event_filter = compile_event_filter('build.substitutions.REF_NAME == "main"')

    assert event_filter.apply(make_build(ref="main"))
    assert not event_filter.apply(make_build(ref="develop"))


def test_evaluation_error_rejects_event(monkeypatch: pytest.MonkeyPatch) -> None:
    """A filter that fails at runtime rejects the event and warns."""
    logs = record_module_logs(monkeypatch, filters_module)
    event_filter = compile_event_filter('build.substitutions.MISSING == "x"')

    assert event_filter.apply(make_build()) is False
    assert logs.messages("WARNING")


def test_non_boolean_result_rejects_event(monkeypatch: pytest.MonkeyPatch) -> None:
    """A filter producing a string rejects the event."""
    logs = record_module_logs(monkeypatch, filters_module)
    event_filter = compile_event_filter("build.status")

    assert event_filter.apply(make_build()) is False
    assert "non-boolean" in logs.messages("WARNING")[0]


@pytest.mark.parametrize("expression", ["", "   ", "build.status ==", "(("])
def test_invalid_expressions_are_config_errors(expression: str) -> None:
    """Blank or unparsable expressions fail at setup."""
    with pytest.raises(RelayConfigError, match="CEL predicate"):
        compile_event_filter(expression)
