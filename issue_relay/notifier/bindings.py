"""Template parameter bindings.

``spec.notification.params`` names values that are handed to the issue
template as ``params``. A value of the form ``$(build.<path>)`` is looked up
in the build (snake_case field names, dotted for nested members such as
``$(build.substitutions.BRANCH_NAME)``); anything else is passed through as a
literal string.
"""

from __future__ import annotations

import re
import typing as typ

import msgspec

from issue_relay.build.models import build_to_builtins

from .errors import BindingResolutionError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from issue_relay.build.models import BuildEvent

_BUILD_REFERENCE = re.compile(r"^\$\(build\.(?P<path>[A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\)$")


class Param(msgspec.Struct, kw_only=True, frozen=True):
    """One entry of ``spec.notification.params``."""

    name: str
    value: str


def _stringify(value: object) -> str:
    if isinstance(value, str):
        return value
    return msgspec.json.encode(value).decode("utf-8")


def _lookup(data: object, path: str) -> object | None:
    node = data
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


class BindingResolver:
    """Resolve configured params against a build."""

    def __init__(self, params: cabc.Sequence[Param] = ()) -> None:
        """Store the params in configuration order."""
        self._params = tuple(params)

    @property
    def params(self) -> tuple[Param, ...]:
        """Configured params."""
        return self._params

    def resolve(self, event: BuildEvent) -> dict[str, str]:
        """Return a name to value mapping for every configured param.

        Raises
        ------
        BindingResolutionError
            If a ``$(build...)`` reference names a missing or null field.

        """
        if not self._params:
            return {}

        data = build_to_builtins(event)
        bindings: dict[str, str] = {}
        for param in self._params:
            match = _BUILD_REFERENCE.match(param.value.strip())
            if match is None:
                bindings[param.name] = param.value
                continue
            value = _lookup(data, match.group("path"))
            if value is None:
                raise BindingResolutionError.unresolved(param.name, param.value)
            bindings[param.name] = _stringify(value)
        return bindings
