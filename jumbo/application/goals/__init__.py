"""Goal use cases and the goal read model."""

from .add import AddGoalCommand, AddGoalCommandHandler
from .chaining import GoalChainingConfig
from .projection import GoalFinder, GoalProjection, GoalSummary
from .update import UpdateGoalCommand, UpdateGoalCommandHandler

__all__ = [
    "AddGoalCommand",
    "AddGoalCommandHandler",
    "GoalChainingConfig",
    "GoalFinder",
    "GoalProjection",
    "GoalSummary",
    "UpdateGoalCommand",
    "UpdateGoalCommandHandler",
]
