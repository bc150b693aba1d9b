"""Middleware giving each command its execution context."""

from typing import Any

from ...context import ExecutionContext, use_context
from ...domain import Command
from ...routing import intercepts
from .base import Handler, Middleware


class ContextPropagationMiddleware(Middleware):
    """Runs every command inside an ExecutionContext built from it.

    Events built while the command runs pick up the context, so all events
    of one operation (a new goal and the update linking its predecessor,
    for instance) share one correlation id and name the command as their
    cause. The previous context is restored afterwards, even on failure.

    Register it before any middleware that reads the context:

        >>> app = (ApplicationBuilder()
        ...     .register_middleware(ContextPropagationMiddleware())
        ...     .register_middleware(LoggingMiddleware("DEBUG"))
        ...     .build())
    """

    @intercepts
    async def propagate_context(self, command: Command, next: Handler) -> Any:
        with use_context(ExecutionContext.of_command(command)):
            return await next(command)
