"""Error message templates for the goal aggregate."""

from typing import Any


class GoalErrorMessages:
    NOT_FOUND = "Goal not found: {goal_id}"
    OBJECTIVE_REQUIRED = "Goal objective must be provided"
    SUCCESS_CRITERIA_REQUIRED = "At least one success criterion must be provided"
    FIELD_BLANK = "Goal {field} must not be blank"
    ALREADY_ADDED = "Goal already added: {goal_id}"
    NO_CHANGES = "Goal update for {goal_id} must change at least one field"
    SELF_REFERENCE = "Goal {goal_id} cannot be chained to itself"
    CHAINING_NOT_CONFIGURED = "Goal chaining dependencies not configured"


def format_error_message(template: str, **values: Any) -> str:
    """Fill a message template with values.

    >>> format_error_message(GoalErrorMessages.NOT_FOUND, goal_id="goal_1")
    'Goal not found: goal_1'
    """
    return template.format(**values)
