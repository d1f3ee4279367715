"""Unit tests for the issue_relay.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus
from pathlib import Path

import falcon.testing
import pytest

from issue_relay.runtime import RuntimeConfig, create_app
from tests.helpers.notifier_config import ISSUE_TEMPLATE, NOTIFIER_YAML

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _write_config(directory: Path) -> Path:
    (directory / "issue.json.j2").write_text(ISSUE_TEMPLATE, encoding="utf-8")
    config_path = directory / "notifier.yaml"
    config_path.write_text(NOTIFIER_YAML, encoding="utf-8")
    return config_path


class TestRuntimeConfig:
    """Tests for RuntimeConfig.from_env."""

    def test_defaults(self) -> None:
        """An empty environment yields the container defaults."""
        assert RuntimeConfig.from_env({}) == RuntimeConfig(
            config_path=None, host="0.0.0.0", port=8080, log_level="INFO"
        )

    def test_reads_environment(self) -> None:
        """Every ISSUE_RELAY_* variable is honoured."""
        env = {
            "ISSUE_RELAY_CONFIG": "/etc/relay/notifier.yaml",
            "ISSUE_RELAY_HOST": "127.0.0.1",
            "ISSUE_RELAY_PORT": "9000",
            "ISSUE_RELAY_LOG_LEVEL": "debug",
        }
        config = RuntimeConfig.from_env(env)
        assert config.config_path == Path("/etc/relay/notifier.yaml")
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.log_level == "debug"

    @pytest.mark.parametrize("port", ["http", "0", "65536", "-1"])
    def test_invalid_port_exits(self, port: str) -> None:
        """Ports outside 1-65535 stop the process."""
        with pytest.raises(SystemExit):
            RuntimeConfig.from_env({"ISSUE_RELAY_PORT": port})


class TestCreateApp:
    """Tests for the Granian application factory."""

    @pytest.fixture
    def environ(self, monkeypatch: pytest.MonkeyPatch) -> cabc.Callable[..., None]:
        """Return a setter for the relay environment variables."""
        monkeypatch.delenv("ISSUE_RELAY_CONFIG", raising=False)
        monkeypatch.delenv("ISSUE_RELAY_PORT", raising=False)

        def _set(**values: str) -> None:
            for key, value in values.items():
                monkeypatch.setenv(key, value)

        return _set

    def test_without_config_serves_probes_only(
        self, environ: cabc.Callable[..., None]
    ) -> None:
        """No ISSUE_RELAY_CONFIG means /ready reports unavailable."""
        environ()
        client = falcon.testing.TestClient(create_app())

        assert client.simulate_get("/health").status_code == HTTPStatus.OK
        assert client.simulate_get("/ready").status_code == HTTPStatus.SERVICE_UNAVAILABLE

    def test_with_config_is_ready(
        self, environ: cabc.Callable[..., None], tmp_path: Path
    ) -> None:
        """A loadable config registers the push endpoint."""
        environ(
            ISSUE_RELAY_CONFIG=str(_write_config(tmp_path)),
            GITHUB_TOKEN="ghp_runtime",
        )
        client = falcon.testing.TestClient(create_app())

        result = client.simulate_get("/ready")
        assert result.status_code == HTTPStatus.OK
        assert result.json == {"status": "ready"}

    def test_broken_config_exits(
        self,
        environ: cabc.Callable[..., None],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A config whose secret is missing stops startup."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        environ(ISSUE_RELAY_CONFIG=str(_write_config(tmp_path)))

        with pytest.raises(SystemExit):
            create_app()
