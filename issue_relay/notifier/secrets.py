"""Secret retrieval for notifier setup.

Delivery fields point at secrets indirectly::

    delivery:
      githubToken:
        secretRef: github-token
    secrets:
      - name: github-token
        value: env:GITHUB_TOKEN

The ``value`` is a resource name handed to a :class:`SecretGetter`. The local
getter understands ``env:NAME`` (read from the environment) and
``file:PATH`` (read from a mounted file, trailing whitespace stripped).
"""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from .errors import SecretLookupError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_ENV_SCHEME = "env:"
_FILE_SCHEME = "file:"


class SecretGetter(typ.Protocol):
    """Source of secret values keyed by resource name."""

    def get_secret(self, resource: str) -> str:
        """Return the secret stored at ``resource``."""
        ...


class LocalSecretGetter:
    """Read secrets from the environment or from files."""

    def __init__(self, environ: cabc.Mapping[str, str] | None = None) -> None:
        """Use ``environ`` for ``env:`` lookups, defaulting to ``os.environ``."""
        self._environ: cabc.Mapping[str, str] = (
            os.environ if environ is None else environ
        )

    def get_secret(self, resource: str) -> str:
        """Return the secret value for ``resource``.

        Raises
        ------
        SecretLookupError
            If the scheme is unknown or the source holds no value.

        """
        if resource.startswith(_ENV_SCHEME):
            value = self._environ.get(resource.removeprefix(_ENV_SCHEME), "")
        elif resource.startswith(_FILE_SCHEME):
            path = Path(resource.removeprefix(_FILE_SCHEME))
            try:
                value = path.read_text(encoding="utf-8").rstrip()
            except OSError as exc:
                raise SecretLookupError.not_found(resource) from exc
        else:
            raise SecretLookupError.unsupported(resource)

        if not value:
            raise SecretLookupError.not_found(resource)
        return value
