"""Command bus and routing infrastructure."""

from collections.abc import Callable, Coroutine
from functools import reduce
from typing import Any, TypeVar

from ...domain import Command
from ...domain.exceptions import ConfigurationError
from ..middleware import Middleware
from .handler import CommandHandler

T = TypeVar("T")


class CommandToHandlerMap:
    @staticmethod
    def from_handlers(handlers: list[CommandHandler]) -> "CommandToHandlerMap":
        map = CommandToHandlerMap()
        for handler in handlers:
            map.add(handler)
        return map

    def __init__(self) -> None:
        self.command_to_handler_map: dict[type[Command[Any]], CommandHandler] = {}

    def add(self, handler: CommandHandler) -> None:
        for command_type in handler.handled_command_types():
            existing = self.command_to_handler_map.get(command_type)
            if existing is not None and existing is not handler:
                raise ConfigurationError(
                    f"{command_type.__name__} is already handled by {type(existing).__name__}"
                )
            self.command_to_handler_map[command_type] = handler

    def get(self, command_type: type[Command[Any]]) -> CommandHandler:
        try:
            return self.command_to_handler_map[command_type]
        except KeyError:
            raise ConfigurationError(
                f"No command handler registered for {command_type.__name__}"
            ) from None


class DelegateToHandler:
    def __init__(self, command_to_handler_map: CommandToHandlerMap):
        self.command_to_handler_map = command_to_handler_map

    async def handle(self, command: Command[T]) -> T:
        handler = self.command_to_handler_map.get(type(command))
        return await handler.handle(command)


class CommandBus:
    """Command bus for dispatching commands through middleware.

    The CommandBus manages the middleware chain and delegates commands
    to the handler registered for their type. Middleware is applied in
    registration order, with each middleware deciding via annotation-
    based routing whether to intercept a command.

    Args:
        root_handler: The final handler that delegates to command handlers.
        middleware: List of middleware to apply (in order).
    """

    def __init__(
        self,
        root_handler: DelegateToHandler,
        middleware: list[Middleware],
    ):
        self.root_handler = root_handler
        self.middleware = middleware
        # Build the middleware chain by reducing from right to left
        self.chain: Callable[[Command[Any]], Coroutine[Any, Any, Any]] = reduce(
            lambda next, mw: lambda cmd, n=next, m=mw: m.intercept(cmd, n),
            reversed(middleware),
            self.root_handler.handle,
        )

    async def dispatch(self, command: Command[T]) -> T:
        """Dispatch command through the middleware chain to its handler.

        Args:
            command: The command to dispatch.

        Returns:
            The result from the command handler.

        Raises:
            ConfigurationError: If no handler is registered for the
                command's type.
        """
        return await self.chain(command)
