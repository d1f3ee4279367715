"""Event filtering with Common Expression Language predicates.

The filter expression from ``spec.notification.filter`` is compiled once at
setup. At notification time it is evaluated against a single variable,
``build``, holding the build as JSON-like data with snake_case keys::

    build.status == "FAILURE" && build.substitutions.REF_NAME == "main"

``Build.Status.<NAME>`` constants are also bound so filters written for the
Cloud Build notifier format keep working::

    build.status in [Build.Status.FAILURE, Build.Status.TIMEOUT]

Evaluation errors and non-boolean results reject the event.
"""

from __future__ import annotations

import typing as typ

import celpy
from celpy import celtypes

from issue_relay.build.models import BuildStatus, build_to_builtins
from issue_relay.logging import get_logger, log_warning

from .errors import RelayConfigError

if typ.TYPE_CHECKING:
    from issue_relay.build.models import BuildEvent

logger = get_logger(__name__)

_BUILD_CONSTANTS = celpy.json_to_cel(
    {"Status": {status.name: status.value for status in BuildStatus}}
)


class EventFilter(typ.Protocol):
    """Predicate deciding whether a build warrants a notification."""

    def apply(self, event: BuildEvent) -> bool:
        """Return True when ``event`` should be notified."""
        ...


def _activation_data(event: BuildEvent) -> dict[str, object]:
    return {
        key: value
        for key, value in build_to_builtins(event).items()
        if value is not None
    }


class CELEventFilter:
    """An :class:`EventFilter` backed by a compiled CEL program."""

    def __init__(self, expression: str, program: celpy.Runner) -> None:
        """Wrap an already compiled program; use :func:`compile_event_filter`."""
        self.expression = expression
        self._program = program

    def __repr__(self) -> str:
        """Show the source expression."""
        return f"CELEventFilter({self.expression!r})"

    def apply(self, event: BuildEvent) -> bool:
        """Evaluate the predicate for ``event``."""
        activation = {
            "build": celpy.json_to_cel(_activation_data(event)),
            "Build": _BUILD_CONSTANTS,
        }
        try:
            result = self._program.evaluate(activation)
        except celpy.CELEvalError as exc:
            log_warning(
                logger,
                "filter %r failed for build %s: %s",
                self.expression,
                event.id,
                exc,
            )
            return False

        if not isinstance(result, celtypes.BoolType):
            log_warning(
                logger,
                "filter %r produced a non-boolean result for build %s: %r",
                self.expression,
                event.id,
                result,
            )
            return False
        return bool(result)


def compile_event_filter(expression: str) -> CELEventFilter:
    """Compile ``expression`` into an event filter.

    Raises
    ------
    RelayConfigError
        If the expression is blank or not valid CEL.

    """
    if not expression.strip():
        raise RelayConfigError.invalid_filter(expression, "expression is empty")

    env = celpy.Environment()
    try:
        ast = env.compile(expression)
    except celpy.CELParseError as exc:
        raise RelayConfigError.invalid_filter(expression, str(exc)) from exc
    return CELEventFilter(expression, env.program(ast))
