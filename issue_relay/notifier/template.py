"""Issue message rendering.

The issue template is a Jinja2 template whose output is the JSON body of the
create-issue call. Templates see two names: ``build`` (the build event, with
its log URL already carrying tracking parameters) and ``params`` (resolved
bindings). Values should be emitted with the ``tojson`` filter::

    {
      "title": {{ ("Build " ~ build.id ~ " " ~ build.status) | tojson }},
      "body": {{ ("Logs: " ~ build.log_url) | tojson }}
    }

Undefined names are errors, not blanks.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum
import typing as typ
import urllib.parse

import jinja2
import msgspec

from issue_relay.github.models import IssueRequest

from .errors import RelayConfigError, TemplateRenderError, TrackingParamsError

if typ.TYPE_CHECKING:
    from issue_relay.build.models import BuildEvent

UTM_CAMPAIGN = "google-cloud-build-notifiers"
UTM_SOURCE = "google-cloud-build"


class UTMMedium(enum.StrEnum):
    """Delivery channels recognised as ``utm_medium`` values."""

    EMAIL = "email"
    HTTP = "http"
    SLACK = "slack"
    CHAT = "chat"


_MEDIUMS = frozenset(medium.value for medium in UTMMedium)
_UTM_KEYS = frozenset({"utm_campaign", "utm_medium", "utm_source"})


def add_utm_params(url: str, medium: str) -> str:
    """Append Cloud Build tracking parameters to ``url``.

    Existing query parameters are kept, except earlier tracking parameters,
    which are replaced. The combined query is sorted by key.

    Raises
    ------
    TrackingParamsError
        If ``medium`` is unknown or ``url`` does not parse.

    """
    if medium not in _MEDIUMS:
        raise TrackingParamsError.unknown_medium(medium)
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError as exc:
        raise TrackingParamsError.invalid_url(url, str(exc)) from exc

    query = [
        (key, value)
        for key, value in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        if key not in _UTM_KEYS
    ]
    query.extend(
        [
            ("utm_campaign", UTM_CAMPAIGN),
            ("utm_medium", str(medium)),
            ("utm_source", UTM_SOURCE),
        ]
    )
    query.sort(key=lambda item: item[0])
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


_ENVIRONMENT = jinja2.Environment(  # noqa: S701 - renders JSON, not HTML
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)


def compile_template(source: str) -> jinja2.Template:
    """Parse the issue template once at setup.

    Raises
    ------
    RelayConfigError
        If the template has a syntax error.

    """
    try:
        return _ENVIRONMENT.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise RelayConfigError.invalid_template(str(exc)) from exc


@dataclasses.dataclass(frozen=True, slots=True)
class TemplateView:
    """Names exposed to the issue template."""

    build: BuildEvent
    params: cabc.Mapping[str, str] = dataclasses.field(default_factory=dict)


def render(template: jinja2.Template, view: TemplateView) -> bytes:
    """Expand ``template`` against ``view`` and return UTF-8 bytes.

    Raises
    ------
    TemplateRenderError
        If expansion fails, e.g. on an undefined field.

    """
    try:
        text = template.render(build=view.build, params=view.params)
    except jinja2.TemplateError as exc:
        raise TemplateRenderError.render_failed(str(exc)) from exc
    return text.encode("utf-8")


def parse_issue_request(rendered: bytes) -> IssueRequest:
    """Decode rendered template output into the create-issue body."""
    try:
        return msgspec.json.decode(rendered, type=IssueRequest)
    except msgspec.DecodeError as exc:
        raise TemplateRenderError.invalid_payload(str(exc)) from exc


class MessageRenderer:
    """Turn a build and its bindings into an :class:`IssueRequest`."""

    def __init__(
        self, template: jinja2.Template, *, medium: UTMMedium = UTMMedium.HTTP
    ) -> None:
        """Bind the renderer to a compiled template."""
        self._template = template
        self._medium = medium

    def render_issue(
        self, event: BuildEvent, params: cabc.Mapping[str, str]
    ) -> IssueRequest:
        """Render the issue for ``event``.

        The event itself is not modified: the template sees a copy whose log
        URL carries tracking parameters.

        Raises
        ------
        TrackingParamsError
            If the log URL cannot be rewritten.
        TemplateRenderError
            If expansion fails or the output is not an issue document.

        """
        log_url = add_utm_params(event.log_url, self._medium)
        view = TemplateView(
            build=msgspec.structs.replace(event, log_url=log_url), params=params
        )
        return parse_issue_request(render(self._template, view))
