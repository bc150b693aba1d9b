"""Correlation and causation ids of the command currently running.

The ids live in a ContextVar, so concurrent tasks each see their own.
Aggregates read them when building events; ContextPropagationMiddleware
sets them for the duration of each dispatched command.
"""

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ulid import ULID

if TYPE_CHECKING:
    from .domain import Command


@dataclass(frozen=True)
class ExecutionContext:
    """Ids stamped onto every event built while a command runs.

    Attributes:
        correlation_id: Shared by everything one request causes. A new goal
            and the update chaining its predecessor carry the same one.
        causation_id: What triggered the running command.
        command_id: The running command. Events name it as their cause.
    """

    correlation_id: ULID | None = None
    causation_id: ULID | None = None
    command_id: ULID | None = None

    @classmethod
    def of_command(cls, command: "Command[Any]") -> "ExecutionContext":
        """Context for running a command.

        A command without a correlation id starts a new correlation, and a
        command without a causation id is treated as caused by it.
        """
        correlation_id = command.correlation_id or ULID()
        return cls(
            correlation_id=correlation_id,
            causation_id=command.causation_id or correlation_id,
            command_id=command.command_id,
        )


_current: contextvars.ContextVar[ExecutionContext | None] = contextvars.ContextVar(
    "jumbo_execution_context", default=None
)


def get_context() -> ExecutionContext:
    """The running context, or an empty one outside any command."""
    return _current.get() or ExecutionContext()


def set_context(context: ExecutionContext) -> None:
    _current.set(context)


def clear_context() -> None:
    _current.set(None)


@contextmanager
def use_context(context: ExecutionContext) -> Iterator[ExecutionContext]:
    """Make `context` current inside the block, restoring the previous one after."""
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)
