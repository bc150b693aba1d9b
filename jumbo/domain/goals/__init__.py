"""The goal aggregate and the events in its stream."""

import uuid

from .events import (
    ArchitectureRef,
    ComponentRef,
    DependencyRef,
    EmbeddedContext,
    GoalAdded,
    GoalUpdated,
    GuidelineRef,
    InvariantRef,
)
from .goal import Goal
from .messages import GoalErrorMessages, format_error_message

GOAL_ID_PREFIX = "goal_"


def new_goal_id() -> str:
    """Generate a fresh goal identity: the goal prefix plus a random UUID."""
    return f"{GOAL_ID_PREFIX}{uuid.uuid4()}"


__all__ = [
    "GOAL_ID_PREFIX",
    "ArchitectureRef",
    "ComponentRef",
    "DependencyRef",
    "EmbeddedContext",
    "Goal",
    "GoalAdded",
    "GoalErrorMessages",
    "GoalUpdated",
    "GuidelineRef",
    "InvariantRef",
    "format_error_message",
    "new_goal_id",
]
