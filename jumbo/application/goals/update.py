"""Use case: partially update an existing goal."""

import logging

from ...domain import Command
from ...domain.exceptions import NotFoundError
from ...domain.goals import EmbeddedContext, Goal, GoalErrorMessages, format_error_message
from ...routing import handles_command
from ..commands import CommandHandler
from ..events import EventBus, EventReader, EventWriter
from .projection import GoalFinder

LOGGER = logging.getLogger(__name__)


class UpdateGoalCommand(Command[int]):
    """Request to change some fields of a goal. Returns the goal's new version.

    Fields left as None are not changed.
    """

    goal_id: str
    objective: str | None = None
    success_criteria: list[str] | None = None
    scope_in: list[str] | None = None
    scope_out: list[str] | None = None
    boundaries: list[str] | None = None
    embedded_context: EmbeddedContext | None = None
    next_goal_id: str | None = None
    previous_goal_id: str | None = None


class UpdateGoalCommandHandler(CommandHandler):
    def __init__(
        self,
        finder: GoalFinder,
        reader: EventReader,
        writer: EventWriter,
        bus: EventBus,
    ):
        self.finder = finder
        self.reader = reader
        self.writer = writer
        self.bus = bus

    @handles_command
    async def execute(self, command: UpdateGoalCommand) -> int:
        # A chain link may only name a goal that already exists
        for goal_id in (command.goal_id, *self._linked_goal_ids(command)):
            if await self.finder.find_by_id(goal_id) is None:
                raise NotFoundError(
                    goal_id, format_error_message(GoalErrorMessages.NOT_FOUND, goal_id=goal_id)
                )

        goal = Goal.rehydrate(command.goal_id, await self.reader.read_stream(command.goal_id))
        event = goal.update(
            objective=command.objective,
            success_criteria=command.success_criteria,
            scope_in=command.scope_in,
            scope_out=command.scope_out,
            boundaries=command.boundaries,
            embedded_context=command.embedded_context,
            next_goal_id=command.next_goal_id,
            previous_goal_id=command.previous_goal_id,
        )

        await self.writer.append(event)
        await self.bus.publish(event)
        LOGGER.info(
            "Goal updated",
            extra={"goal_id": command.goal_id, "version": event.version},
        )
        return event.version

    @staticmethod
    def _linked_goal_ids(command: UpdateGoalCommand) -> list[str]:
        embedded_next = command.embedded_context.next_goal_id if command.embedded_context else None
        candidates = (command.next_goal_id, command.previous_goal_id, embedded_next)
        return [goal_id for goal_id in candidates if goal_id is not None]
