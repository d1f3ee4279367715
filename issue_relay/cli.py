"""Validate a notifier configuration and preview the issue it would open."""

from __future__ import annotations

import argparse
import typing as typ
from pathlib import Path

import msgspec

from issue_relay.build import (
    COMMITTER_LOGIN_KEY,
    BuildDecodeError,
    decode_build,
    decode_push_envelope,
)
from issue_relay.notifier import (
    BindingResolutionError,
    LocalSecretGetter,
    MessageRenderer,
    RelayConfigError,
    TemplateRenderError,
    TrackingParamsError,
    load_notifier_config,
    resolve_repo,
)

if typ.TYPE_CHECKING:
    from issue_relay.build import BuildEvent
    from issue_relay.notifier import NotifierConfig, SecretGetter

DRY_RUN_TOKEN = "dry-run"  # noqa: S105 - placeholder, never sent


class _PlaceholderSecrets:
    """Secret getter used with ``--skip-secrets``."""

    def get_secret(self, resource: str) -> str:  # noqa: ARG002 - protocol signature
        return DRY_RUN_TOKEN


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="issue-relay-check", description=__doc__)
    parser.add_argument("config", type=Path, help="Notifier YAML to validate")
    parser.add_argument(
        "--build",
        type=Path,
        default=None,
        help="Optional Cloud Build JSON file to render an issue for",
    )
    parser.add_argument(
        "--envelope",
        action="store_true",
        help="Treat --build as a Pub/Sub push envelope rather than build JSON",
    )
    parser.add_argument(
        "--committer",
        default="",
        help="Value used for GH_COMMITTER_LOGIN while rendering",
    )
    parser.add_argument(
        "--skip-secrets",
        action="store_true",
        help="Do not read the GitHub token secret",
    )
    return parser


def _load_build(path: Path, *, envelope: bool) -> BuildEvent:
    data = path.read_bytes()
    return decode_push_envelope(data) if envelope else decode_build(data)


def _preview(config: NotifierConfig, event: BuildEvent, committer: str) -> int:
    """Print what the pipeline would send for ``event`` without calling GitHub."""
    if not config.event_filter.apply(event):
        print(f"build {event.id} does not match filter {config.event_filter!r}")
        return 0

    repo = resolve_repo(event)
    if not repo:
        print(f"build {event.id} has no REPO_FULL_NAME substitution; it would be skipped")
        return 0

    try:
        params = config.bindings.resolve(event)
    except BindingResolutionError as exc:
        print(f"warning: {exc}; rendering with empty params")
        params = {}

    event.record_substitution(COMMITTER_LOGIN_KEY, committer)
    try:
        issue = MessageRenderer(config.template).render_issue(event, params)
    except (TemplateRenderError, TrackingParamsError) as exc:
        print(f"Rendering failed for build {event.id}: {exc}")
        return 1

    print(f"would open an issue in {repo}:")
    print(msgspec.json.format(msgspec.json.encode(issue)).decode("utf-8"))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Validate a notifier config and optionally render a sample build.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation or rendering fails.

    """
    args = _build_parser().parse_args(argv)

    config_path: Path = args.config
    secrets: SecretGetter = (
        _PlaceholderSecrets() if args.skip_secrets else LocalSecretGetter()
    )
    try:
        config = load_notifier_config(config_path, secrets)
    except RelayConfigError as exc:
        print(f"Configuration check failed for {config_path}:")
        print(f"  - {exc}")
        return 1

    print(
        f"notifier {config.name or '<unnamed>'} in {config_path} is valid "
        f"(filter {config.event_filter!r}, "
        f"{len(config.bindings.params)} params)"
    )

    if args.build is None:
        return 0

    try:
        event = _load_build(args.build, envelope=args.envelope)
    except (OSError, BuildDecodeError) as exc:
        print(f"Could not read build from {args.build}: {exc}")
        return 1
    return _preview(config, event, args.committer)


if __name__ == "__main__":
    raise SystemExit(main())
