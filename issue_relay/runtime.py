"""Relay runtime entrypoint for container deployments.

This module provides the ASGI application factory served by Granian. It
delegates to :func:`issue_relay.api.app.create_app` for application
construction while keeping the ``issue_relay.runtime:create_app`` entrypoint
stable.

When ``ISSUE_RELAY_CONFIG`` is set, the runtime loads the notifier YAML, its
template and its token secret, and registers the Pub/Sub push endpoint.
Otherwise it starts in probes-only mode and ``/ready`` reports 503.

Configuration is driven by environment variables:

- ``ISSUE_RELAY_CONFIG``: Path to the notifier YAML (optional)
- ``ISSUE_RELAY_HOST``: Bind address (default ``0.0.0.0``)
- ``ISSUE_RELAY_PORT``: Listen port (default ``8080``)
- ``ISSUE_RELAY_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m issue_relay.runtime``.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import os
import typing as typ
from pathlib import Path

from issue_relay.logging import (
    DEFAULT_LOG_LEVEL,
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["RuntimeConfig", "create_app", "main"]

logger = get_logger(__name__)

CONFIG_ENV = "ISSUE_RELAY_CONFIG"
HOST_ENV = "ISSUE_RELAY_HOST"
PORT_ENV = "ISSUE_RELAY_PORT"
LOG_LEVEL_ENV = "ISSUE_RELAY_LOG_LEVEL"

DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - bind all interfaces for container
DEFAULT_PORT = 8080

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid %s value: %r (must be %d-%d): %s",
            PORT_ENV,
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


@dc.dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Process-level settings read from the environment.

    Attributes
    ----------
    config_path
        Notifier YAML location, or ``None`` for probes-only mode.
    host
        Bind address.
    port
        Listen port.
    log_level
        Raw log level name; normalized by :func:`configure_logging`.

    """

    config_path: Path | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> RuntimeConfig:
        """Build the runtime settings from ``environ`` (default ``os.environ``).

        Raises
        ------
        SystemExit
            If ``ISSUE_RELAY_PORT`` is not a valid port number.

        """
        env = os.environ if environ is None else environ
        raw_path = env.get(CONFIG_ENV, "").strip()
        return cls(
            config_path=Path(raw_path) if raw_path else None,
            host=env.get(HOST_ENV, DEFAULT_HOST),
            port=_parse_port(env.get(PORT_ENV, str(DEFAULT_PORT))),
            log_level=env.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
        )


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Raises
    ------
    SystemExit
        If ``ISSUE_RELAY_CONFIG`` names a configuration that cannot be
        loaded.

    """
    from issue_relay.api.app import AppDependencies
    from issue_relay.api.app import create_app as _create_api_app

    config_path = RuntimeConfig.from_env().config_path
    if config_path is None:
        log_warning(
            logger,
            "%s is not set; starting without a notifier",
            CONFIG_ENV,
        )
        return _create_api_app()

    from issue_relay.notifier import (
        GitHubIssuesNotifier,
        LocalSecretGetter,
        RelayConfigError,
        load_notifier_config,
    )

    try:
        config = load_notifier_config(config_path, LocalSecretGetter())
    except RelayConfigError as exc:
        log_error(logger, "failed to load notifier configuration: %s", exc)
        raise SystemExit(1) from exc

    log_info(logger, "loaded notifier %r from %s", config.name, config_path)
    return _create_api_app(AppDependencies(notifier=GitHubIssuesNotifier(config)))


def main() -> None:
    """Start the relay server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    runtime = RuntimeConfig.from_env()

    normalized_level, invalid_level = configure_logging(runtime.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid %s %r, falling back to %s",
            LOG_LEVEL_ENV,
            runtime.log_level,
            normalized_level,
        )

    log_info(
        logger,
        "Starting issue relay on %s:%d (log_level=%s)",
        runtime.host,
        runtime.port,
        normalized_level,
    )

    server = Granian(
        "issue_relay.runtime:create_app",
        address=runtime.host,
        port=runtime.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
