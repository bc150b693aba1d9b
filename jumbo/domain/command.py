"""Commands: requests to change goal state, dispatched through the CommandBus."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from ulid import ULID

TResponse = TypeVar("TResponse")


class Command(BaseModel, Generic[TResponse]):
    """A request handled by exactly one CommandHandler.

    The type parameter is what dispatching the command returns:
    ``AddGoalCommand(Command[str])`` yields the new goal id and
    ``UpdateGoalCommand(Command[int])`` the goal's new version.

    A caller continuing an existing operation passes its correlation id,
    and optionally the id of whatever caused this command; otherwise
    ContextPropagationMiddleware starts a new correlation.
    """

    command_id: ULID = Field(default_factory=ULID)
    correlation_id: ULID | None = None
    causation_id: ULID | None = None
