from typing import ClassVar

from pydantic import BaseModel, Field

from ...routing import applies_event
from ..aggregate import Aggregate
from ..event import Event
from ..exceptions import NotFoundError, ValidationError
from .events import EmbeddedContext, GoalAdded, GoalUpdated
from .messages import GoalErrorMessages, format_error_message


class Goal(Aggregate):
    """A unit of work with an objective, success criteria and scope.

    Goals move from Created (an unsaved scaffold) to Added with a single
    GoalAdded event, and may then be Updated any number of times. Goals can
    be chained: `next_goal_id` and `previous_goal_id` form a doubly linked
    list across goal streams.

    `add` and `update` only validate and return the event describing the
    change; they never modify the goal they are called on.
    """

    event_types: ClassVar[tuple[type[BaseModel], ...]] = (GoalAdded, GoalUpdated)

    objective: str = ""
    success_criteria: list[str] = Field(default_factory=list)
    scope_in: list[str] = Field(default_factory=list)
    scope_out: list[str] = Field(default_factory=list)
    boundaries: list[str] = Field(default_factory=list)
    embedded_context: EmbeddedContext | None = None
    next_goal_id: str | None = None
    previous_goal_id: str | None = None

    def add(
        self,
        objective: str | None,
        success_criteria: list[str] | None,
        scope_in: list[str] | None = None,
        scope_out: list[str] | None = None,
        boundaries: list[str] | None = None,
        embedded_context: EmbeddedContext | None = None,
    ) -> Event[GoalAdded]:
        """Validate a new goal and return its GoalAdded event.

        Raises:
            ValidationError: If the objective or success criteria are
                missing, or the goal was already added.
        """
        if self.exists():
            raise ValidationError(
                None, format_error_message(GoalErrorMessages.ALREADY_ADDED, goal_id=self.id)
            )
        if not objective or not objective.strip():
            raise ValidationError("objective", GoalErrorMessages.OBJECTIVE_REQUIRED)
        if not success_criteria:
            raise ValidationError("success_criteria", GoalErrorMessages.SUCCESS_CRITERIA_REQUIRED)
        if embedded_context is not None and embedded_context.is_empty():
            embedded_context = None
        if embedded_context is not None and embedded_context.next_goal_id == self.id:
            raise ValidationError(
                "next_goal_id",
                format_error_message(GoalErrorMessages.SELF_REFERENCE, goal_id=self.id),
            )

        return self._build_event(
            GoalAdded(
                objective=objective,
                success_criteria=list(success_criteria),
                scope_in=list(scope_in or []),
                scope_out=list(scope_out or []),
                boundaries=list(boundaries or []),
                embedded_context=embedded_context,
            )
        )

    def update(
        self,
        objective: str | None = None,
        success_criteria: list[str] | None = None,
        scope_in: list[str] | None = None,
        scope_out: list[str] | None = None,
        boundaries: list[str] | None = None,
        embedded_context: EmbeddedContext | None = None,
        next_goal_id: str | None = None,
        previous_goal_id: str | None = None,
    ) -> Event[GoalUpdated]:
        """Validate a partial update and return its GoalUpdated event.

        Arguments left as None are omitted from the event and leave the
        corresponding field unchanged.

        Raises:
            NotFoundError: If the goal has no history.
            ValidationError: If nothing would change, a supplied required
                field is blank, or the goal would be chained to itself.
        """
        if not self.exists():
            raise NotFoundError(
                self.id, format_error_message(GoalErrorMessages.NOT_FOUND, goal_id=self.id)
            )
        if objective is not None and not objective.strip():
            raise ValidationError(
                "objective", format_error_message(GoalErrorMessages.FIELD_BLANK, field="objective")
            )
        if success_criteria is not None and not success_criteria:
            raise ValidationError("success_criteria", GoalErrorMessages.SUCCESS_CRITERIA_REQUIRED)
        links = (("next_goal_id", next_goal_id), ("previous_goal_id", previous_goal_id))
        for field, linked_id in links:
            if linked_id == self.id:
                raise ValidationError(
                    field, format_error_message(GoalErrorMessages.SELF_REFERENCE, goal_id=self.id)
                )

        payload = GoalUpdated(
            objective=objective,
            success_criteria=success_criteria,
            scope_in=scope_in,
            scope_out=scope_out,
            boundaries=boundaries,
            embedded_context=embedded_context,
            next_goal_id=next_goal_id,
            previous_goal_id=previous_goal_id,
        )
        if not payload.changed_fields():
            raise ValidationError(
                None, format_error_message(GoalErrorMessages.NO_CHANGES, goal_id=self.id)
            )
        return self._build_event(payload)

    @applies_event
    def apply_added(self, evt: GoalAdded) -> None:
        self.objective = evt.objective
        self.success_criteria = list(evt.success_criteria)
        self.scope_in = list(evt.scope_in)
        self.scope_out = list(evt.scope_out)
        self.boundaries = list(evt.boundaries)
        self.embedded_context = evt.embedded_context
        if evt.embedded_context is not None:
            self.next_goal_id = evt.embedded_context.next_goal_id

    @applies_event
    def apply_updated(self, evt: GoalUpdated) -> None:
        if evt.objective is not None:
            self.objective = evt.objective
        if evt.success_criteria is not None:
            self.success_criteria = list(evt.success_criteria)
        if evt.scope_in is not None:
            self.scope_in = list(evt.scope_in)
        if evt.scope_out is not None:
            self.scope_out = list(evt.scope_out)
        if evt.boundaries is not None:
            self.boundaries = list(evt.boundaries)
        if evt.embedded_context is not None:
            self.embedded_context = evt.embedded_context
            if evt.embedded_context.next_goal_id is not None:
                self.next_goal_id = evt.embedded_context.next_goal_id
        if evt.next_goal_id is not None:
            self.next_goal_id = evt.next_goal_id
        if evt.previous_goal_id is not None:
            self.previous_goal_id = evt.previous_goal_id
