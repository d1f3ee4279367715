"""Errors raised while setting up or running the notification pipeline.

``RelayConfigError`` is fatal at startup. ``TemplateRenderError`` and
``TrackingParamsError`` abort a single notification. ``SecretLookupError``
surfaces during setup and is reported as a configuration error, while
``BindingResolutionError`` is only ever logged.
"""

from __future__ import annotations


class RelayConfigError(ValueError):
    """Raised when notifier configuration cannot be turned into a pipeline."""

    @classmethod
    def unreadable(cls, path: object, detail: str) -> RelayConfigError:
        """Return an error for a config or template file that cannot be read."""
        return cls(f"failed to read {path}: {detail}")

    @classmethod
    def invalid_document(cls, detail: str) -> RelayConfigError:
        """Return an error for YAML that does not match the notifier schema."""
        return cls(f"invalid notifier configuration: {detail}")

    @classmethod
    def invalid_filter(cls, expression: str, detail: str) -> RelayConfigError:
        """Return an error for a filter expression that does not compile."""
        return cls(f"failed to make a CEL predicate from {expression!r}: {detail}")

    @classmethod
    def invalid_template(cls, detail: str) -> RelayConfigError:
        """Return an error for an issue template that does not parse."""
        return cls(f"failed to parse issue body template: {detail}")

    @classmethod
    def missing_repo(cls) -> RelayConfigError:
        """Return an error for a delivery config without ``githubRepo``."""
        return cls("expected delivery config to have string field `githubRepo`")

    @classmethod
    def invalid_repo(cls, value: str) -> RelayConfigError:
        """Return an error for a ``githubRepo`` that is not ``owner/name``."""
        return cls(
            f"expected delivery config field `githubRepo` to be owner/name, got {value!r}"
        )

    @classmethod
    def missing_secret_ref(cls, field: str) -> RelayConfigError:
        """Return an error for a delivery field lacking a ``secretRef``."""
        return cls(f"failed to get Secret ref from delivery config field {field!r}")

    @classmethod
    def unknown_secret(cls, ref: str) -> RelayConfigError:
        """Return an error for a ``secretRef`` with no matching secret entry."""
        return cls(f"failed to find Secret for ref {ref!r}")

    @classmethod
    def secret_unavailable(cls, detail: str) -> RelayConfigError:
        """Return an error when the token secret cannot be retrieved."""
        return cls(f"failed to get token secret: {detail}")


class TemplateRenderError(RuntimeError):
    """Raised when the issue template cannot produce a valid issue payload."""

    @classmethod
    def render_failed(cls, detail: str) -> TemplateRenderError:
        """Return an error for a failure during template expansion."""
        return cls(f"failed to render issue template: {detail}")

    @classmethod
    def invalid_payload(cls, detail: str) -> TemplateRenderError:
        """Return an error for rendered output that is not an issue document."""
        return cls(f"rendered issue template is not a valid issue payload: {detail}")


class TrackingParamsError(ValueError):
    """Raised when tracking parameters cannot be added to a log URL."""

    @classmethod
    def unknown_medium(cls, medium: str) -> TrackingParamsError:
        """Return an error for an unsupported ``utm_medium``."""
        return cls(f"unknown UTM medium: {medium!r}")

    @classmethod
    def invalid_url(cls, url: str, detail: str) -> TrackingParamsError:
        """Return an error for a log URL that does not parse."""
        return cls(f"failed to add UTM params to {url!r}: {detail}")


class SecretLookupError(LookupError):
    """Raised when a secret resource cannot be read."""

    @classmethod
    def not_found(cls, resource: str) -> SecretLookupError:
        """Return an error for a secret whose source holds no value."""
        return cls(f"secret {resource!r} not found")

    @classmethod
    def unsupported(cls, resource: str) -> SecretLookupError:
        """Return an error for a resource name with no known scheme."""
        return cls(
            f"unsupported secret resource {resource!r}: expected 'env:NAME' or 'file:PATH'"
        )


class BindingResolutionError(LookupError):
    """Raised when a template parameter cannot be resolved from the build."""

    @classmethod
    def unresolved(cls, name: str, expression: str) -> BindingResolutionError:
        """Return an error for a parameter whose build path does not exist."""
        return cls(f"failed to resolve param {name!r} from {expression!r}")
