"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest

from tests.helpers.github_stub import GitHubStub
from tests.helpers.notifier_config import make_config

if typ.TYPE_CHECKING:
    from issue_relay.notifier import NotifierConfig


@pytest.fixture
def github() -> GitHubStub:
    """Provide a fresh GitHub REST stub."""
    return GitHubStub()


@pytest.fixture
def notifier_config() -> NotifierConfig:
    """Provide a config that notifies on failed builds."""
    return make_config()
