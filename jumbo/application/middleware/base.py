"""Base middleware class for commands.

Middleware components wrap the command handler to provide cross-cutting
concerns like logging or execution context propagation.
"""

import inspect
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

from ...routing import setup_middleware_routing

if TYPE_CHECKING:
    from ...routing import MessageRouter

Handler = Callable[[BaseModel], Coroutine[Any, Any, Any]]


class Middleware:
    """Base class for middleware with annotation-based routing.

    Methods decorated with @intercepts receive the command and the next
    handler in the chain. The command type is taken from the annotation,
    so annotating with `Command` intercepts every command while a concrete
    command type intercepts only that one.

    If no interceptor matches the command type, the middleware forwards
    to the next handler unchanged.

    Examples:
        >>> class TimingMiddleware(Middleware):
        ...     @intercepts
        ...     async def time_command(self, cmd: Command, next: Handler) -> Any:
        ...         started = time.monotonic()
        ...         try:
        ...             return await next(cmd)
        ...         finally:
        ...             LOGGER.debug("Took", extra={"s": time.monotonic() - started})
    """

    _command_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Set up routing when a subclass is defined."""
        super().__init_subclass__(**kwargs)
        cls._command_router = setup_middleware_routing(cls)

    async def intercept(self, message: BaseModel, next: Handler) -> Any:
        """Route the command to an interceptor method or forward it to next.

        Args:
            message: The command to intercept.
            next: The next handler in the middleware chain.

        Returns:
            The result from the interceptor or next handler.
        """
        result = self._command_router.route(self, message, next)

        # Unmatched commands route to None
        if result is None:
            return await next(message)
        elif inspect.isawaitable(result):
            return await result
        else:
            return result
