"""Notifier configuration loading.

The relay reads the Cloud Build notifier YAML format::

    apiVersion: cloud-build-notifiers/v1
    kind: GitHubIssuesNotifier
    metadata:
      name: build-failures
    spec:
      notification:
        filter: build.status == "FAILURE"
        delivery:
          githubToken:
            secretRef: github-token
          githubRepo: acme/widgets
        template:
          type: jinja
          uri: issue.json.j2
        params:
          - name: trigger
            value: $(build.build_trigger_id)
      secrets:
        - name: github-token
          value: env:GITHUB_TOKEN

Everything that can fail is resolved here, once: the filter is compiled, the
template is parsed and the token secret is fetched. Any failure raises
:class:`RelayConfigError` and should stop the process.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from issue_relay.common.slug import is_repo_slug

from .bindings import BindingResolver, Param
from .errors import RelayConfigError, SecretLookupError
from .filters import compile_event_filter
from .template import compile_template

if typ.TYPE_CHECKING:
    import jinja2

    from .filters import EventFilter
    from .secrets import SecretGetter

YAML_VERSION = (1, 2)
NOTIFIER_KIND = "GitHubIssuesNotifier"
GITHUB_TOKEN_FIELD = "githubToken"
_TEMPLATE_TYPES = frozenset({"jinja", "jinja2"})


class SecretRef(msgspec.Struct, kw_only=True, rename="camel"):
    """A delivery field that names an entry of ``spec.secrets``."""

    secret_ref: str


class Delivery(msgspec.Struct, kw_only=True, rename="camel"):
    """``spec.notification.delivery`` for the GitHub issues notifier."""

    github_token: SecretRef | None = None
    github_repo: str | None = None


class TemplateSpec(msgspec.Struct, kw_only=True):
    """``spec.notification.template``."""

    uri: str
    type: str = "jinja"


class Notification(msgspec.Struct, kw_only=True):
    """``spec.notification``."""

    filter: str
    delivery: Delivery
    template: TemplateSpec
    params: list[Param] = msgspec.field(default_factory=list)


class SecretEntry(msgspec.Struct, kw_only=True):
    """One entry of ``spec.secrets``."""

    name: str
    value: str


class NotifierSpec(msgspec.Struct, kw_only=True):
    """``spec``."""

    notification: Notification
    secrets: list[SecretEntry] = msgspec.field(default_factory=list)


class Metadata(msgspec.Struct, kw_only=True):
    """``metadata``."""

    name: str = ""


class NotifierDocument(msgspec.Struct, kw_only=True, rename="camel"):
    """A whole notifier configuration file."""

    api_version: str
    kind: str
    spec: NotifierSpec
    metadata: Metadata = msgspec.field(default_factory=Metadata)


@dataclasses.dataclass(frozen=True, slots=True)
class NotifierConfig:
    """Read-only configuration shared by every notification.

    Attributes
    ----------
    name
        ``metadata.name`` of the notifier.
    github_repo
        Repository slug from the delivery config.
    template
        Compiled issue template.
    token
        GitHub token used for every call.
    event_filter
        Compiled filter predicate.
    bindings
        Resolver for ``spec.notification.params``.

    """

    name: str
    github_repo: str
    template: jinja2.Template
    token: str = dataclasses.field(repr=False)
    event_filter: EventFilter
    bindings: BindingResolver


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


def parse_notifier_document(text: str) -> NotifierDocument:
    """Parse notifier YAML text into a :class:`NotifierDocument`."""
    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        raise RelayConfigError.invalid_document(f"failed to parse YAML: {exc}") from exc

    if loaded is None:
        raise RelayConfigError.invalid_document("configuration file is empty")

    try:
        document = msgspec.convert(loaded, type=NotifierDocument)
    except msgspec.ValidationError as exc:
        raise RelayConfigError.invalid_document(str(exc)) from exc

    if document.kind != NOTIFIER_KIND:
        raise RelayConfigError.invalid_document(
            f"expected kind {NOTIFIER_KIND!r}, got {document.kind!r}"
        )
    return document


def load_notifier_document(path: Path | str) -> NotifierDocument:
    """Read and parse a notifier YAML file."""
    path_obj = Path(path)
    try:
        text = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        raise RelayConfigError.unreadable(path_obj, str(exc)) from exc
    return parse_notifier_document(text)


def load_template_source(document: NotifierDocument, base_dir: Path) -> str:
    """Read the issue template named by ``document``.

    Relative URIs are resolved against ``base_dir``, normally the directory
    holding the configuration file.
    """
    spec = document.spec.notification.template
    if spec.type.lower() not in _TEMPLATE_TYPES:
        raise RelayConfigError.invalid_document(
            f"unsupported template type {spec.type!r}; expected 'jinja'"
        )

    template_path = Path(spec.uri)
    if not template_path.is_absolute():
        template_path = base_dir / template_path
    try:
        return template_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RelayConfigError.unreadable(template_path, str(exc)) from exc


def _secret_resource(spec: NotifierSpec, field: str, ref: SecretRef | None) -> str:
    if ref is None or not ref.secret_ref.strip():
        raise RelayConfigError.missing_secret_ref(field)
    for secret in spec.secrets:
        if secret.name == ref.secret_ref:
            return secret.value
    raise RelayConfigError.unknown_secret(ref.secret_ref)


def build_notifier_config(
    document: NotifierDocument,
    template_source: str,
    secret_getter: SecretGetter,
) -> NotifierConfig:
    """Compile a parsed document into a :class:`NotifierConfig`.

    Raises
    ------
    RelayConfigError
        If the filter, template, repository or token secret is unusable.

    """
    notification = document.spec.notification
    event_filter = compile_event_filter(notification.filter)

    github_repo = notification.delivery.github_repo
    if github_repo is None:
        raise RelayConfigError.missing_repo()
    if not is_repo_slug(github_repo):
        raise RelayConfigError.invalid_repo(github_repo)

    template = compile_template(template_source)

    resource = _secret_resource(
        document.spec, GITHUB_TOKEN_FIELD, notification.delivery.github_token
    )
    try:
        token = secret_getter.get_secret(resource)
    except SecretLookupError as exc:
        raise RelayConfigError.secret_unavailable(str(exc)) from exc

    return NotifierConfig(
        name=document.metadata.name,
        github_repo=github_repo,
        template=template,
        token=token,
        event_filter=event_filter,
        bindings=BindingResolver(notification.params),
    )


def load_notifier_config(
    path: Path | str, secret_getter: SecretGetter
) -> NotifierConfig:
    """Load the YAML at ``path`` and its template into a config."""
    path_obj = Path(path)
    document = load_notifier_document(path_obj)
    template_source = load_template_source(document, path_obj.parent)
    return build_notifier_config(document, template_source, secret_getter)
