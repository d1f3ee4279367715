"""Notifier setup and the build-to-issue delivery pipeline."""

from __future__ import annotations

from .bindings import BindingResolver, Param
from .config import (
    NotifierConfig,
    NotifierDocument,
    build_notifier_config,
    load_notifier_config,
    parse_notifier_document,
)
from .errors import (
    BindingResolutionError,
    RelayConfigError,
    SecretLookupError,
    TemplateRenderError,
    TrackingParamsError,
)
from .filters import CELEventFilter, EventFilter, compile_event_filter
from .routing import resolve_repo
from .secrets import LocalSecretGetter, SecretGetter
from .service import GitHubIssuesNotifier, NotificationResult, NotificationStatus
from .template import MessageRenderer, TemplateView, add_utm_params, compile_template

__all__ = [
    "BindingResolutionError",
    "BindingResolver",
    "CELEventFilter",
    "EventFilter",
    "GitHubIssuesNotifier",
    "LocalSecretGetter",
    "MessageRenderer",
    "NotificationResult",
    "NotificationStatus",
    "NotifierConfig",
    "NotifierDocument",
    "Param",
    "RelayConfigError",
    "SecretGetter",
    "SecretLookupError",
    "TemplateRenderError",
    "TemplateView",
    "TrackingParamsError",
    "add_utm_params",
    "build_notifier_config",
    "compile_event_filter",
    "compile_template",
    "load_notifier_config",
    "parse_notifier_document",
    "resolve_repo",
]
