"""Use case: add a new goal, optionally chained after an existing one."""

import logging

from pydantic import Field

from ...domain import Command
from ...domain.exceptions import ConfigurationError, NotFoundError
from ...domain.goals import (
    ArchitectureRef,
    ComponentRef,
    DependencyRef,
    EmbeddedContext,
    Goal,
    GoalErrorMessages,
    GuidelineRef,
    InvariantRef,
    format_error_message,
    new_goal_id,
)
from ...routing import handles_command
from ..commands import CommandHandler
from ..events import EventBus, EventWriter
from .chaining import GoalChainingConfig

LOGGER = logging.getLogger(__name__)


class AddGoalCommand(Command[str]):
    """Request to add a goal. Returns the id of the new goal.

    The objective and success criteria are validated by the Goal aggregate,
    so a command missing them is rejected with a ValidationError naming
    the field.
    """

    objective: str = ""
    success_criteria: list[str] = Field(default_factory=list)
    scope_in: list[str] = Field(default_factory=list)
    scope_out: list[str] = Field(default_factory=list)
    boundaries: list[str] = Field(default_factory=list)

    relevant_invariants: list[InvariantRef] | None = None
    relevant_guidelines: list[GuidelineRef] | None = None
    relevant_dependencies: list[DependencyRef] | None = None
    relevant_components: list[ComponentRef] | None = None
    architecture: ArchitectureRef | None = None
    files_to_be_created: list[str] | None = None
    files_to_be_changed: list[str] | None = None
    next_goal_id: str | None = None

    previous_goal_id: str | None = None

    def embedded_context(self) -> EmbeddedContext | None:
        """The solution context to embed, or None if none was supplied."""
        context = EmbeddedContext(
            relevant_invariants=self.relevant_invariants,
            relevant_guidelines=self.relevant_guidelines,
            relevant_dependencies=self.relevant_dependencies,
            relevant_components=self.relevant_components,
            architecture=self.architecture,
            files_to_be_created=self.files_to_be_created,
            files_to_be_changed=self.files_to_be_changed,
            next_goal_id=self.next_goal_id,
        )
        return None if context.is_empty() else context


class AddGoalCommandHandler(CommandHandler):
    """Adds goals and links them to the goal they follow.

    The new goal's GoalAdded event is appended and published first. When
    `previous_goal_id` is given, the previous goal is then rehydrated and
    updated to point at the new goal.

    Chaining runs after the new goal is stored. If it fails, the new goal
    keeps its single GoalAdded event and is left unlinked; the error is
    re-raised to the caller.
    """

    def __init__(
        self,
        writer: EventWriter,
        bus: EventBus,
        chaining: GoalChainingConfig | None = None,
    ):
        self.writer = writer
        self.bus = bus
        self.chaining = chaining or GoalChainingConfig.disabled()

    @handles_command
    async def execute(self, command: AddGoalCommand) -> str:
        goal_id = new_goal_id()
        event = Goal.create(goal_id).add(
            objective=command.objective,
            success_criteria=command.success_criteria,
            scope_in=command.scope_in,
            scope_out=command.scope_out,
            boundaries=command.boundaries,
            embedded_context=command.embedded_context(),
        )

        await self.writer.append(event)
        await self.bus.publish(event)
        LOGGER.info("Goal added", extra={"goal_id": goal_id})

        if command.previous_goal_id is not None:
            try:
                await self.link_previous_goal(command.previous_goal_id, goal_id)
            except Exception as e:
                LOGGER.warning(
                    "Goal chaining failed",
                    extra={
                        "goal_id": goal_id,
                        "previous_goal_id": command.previous_goal_id,
                        "error": type(e).__name__,
                    },
                )
                raise

        return goal_id

    async def link_previous_goal(self, previous_goal_id: str, goal_id: str) -> None:
        """Set the previous goal's `next_goal_id` to the new goal.

        Raises:
            ConfigurationError: If chaining is not enabled.
            NotFoundError: If the previous goal does not exist.
        """
        finder, reader, writer = self.chaining.finder, self.chaining.reader, self.chaining.writer
        if not self.chaining.enabled or finder is None or reader is None or writer is None:
            raise ConfigurationError(GoalErrorMessages.CHAINING_NOT_CONFIGURED)

        if await finder.find_by_id(previous_goal_id) is None:
            raise NotFoundError(
                previous_goal_id,
                format_error_message(GoalErrorMessages.NOT_FOUND, goal_id=previous_goal_id),
            )

        history = await reader.read_stream(previous_goal_id)
        previous = Goal.rehydrate(previous_goal_id, history)
        event = previous.update(next_goal_id=goal_id)

        await writer.append(event)
        await self.bus.publish(event)
        LOGGER.info(
            "Goals chained",
            extra={"previous_goal_id": previous_goal_id, "goal_id": goal_id},
        )
