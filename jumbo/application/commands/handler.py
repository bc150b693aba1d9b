"""Base class for application services handling commands."""

import inspect
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from ...domain import Command
from ...routing import setup_command_routing

if TYPE_CHECKING:
    from ...routing import MessageRouter

T = TypeVar("T")


class CommandHandler:
    """Base class for command handlers.

    A command handler orchestrates one use case: it rehydrates the
    aggregates it needs, asks them to validate the request, appends the
    resulting events and publishes them. Methods decorated with
    @handles_command are routed by the type annotation of their command
    parameter.

    Examples:
        >>> class ArchiveGoalCommandHandler(CommandHandler):
        ...     @handles_command
        ...     async def execute(self, command: ArchiveGoalCommand) -> None:
        ...         ...
    """

    _command_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._command_router = setup_command_routing(cls)

    @classmethod
    def handled_command_types(cls) -> list[type[Command[Any]]]:
        """Command types this handler has a method for."""
        return list(cls._command_router.registered_types)

    async def handle(self, command: Command[T]) -> T:
        """Route the command to its handler method.

        Raises:
            NotImplementedError: If this handler has no method for the
                command's type.
        """
        result = self._command_router.route(self, command)
        if inspect.isawaitable(result):
            return await result
        return result
