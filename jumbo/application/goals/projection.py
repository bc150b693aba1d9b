"""Read model of goals, kept current by projecting goal events."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field

from ...domain import Event
from ...domain.exceptions import CorruptHistoryError
from ...domain.goals import GoalAdded, GoalUpdated
from ...routing import handles_event
from ..events import EventProcessor

LOGGER = logging.getLogger(__name__)


class GoalSummary(BaseModel):
    """Denormalized view of one goal, as answered by the GoalFinder."""

    goal_id: str
    objective: str
    success_criteria: list[str] = Field(default_factory=list)
    scope_in: list[str] = Field(default_factory=list)
    scope_out: list[str] = Field(default_factory=list)
    boundaries: list[str] = Field(default_factory=list)
    next_goal_id: str | None = None
    previous_goal_id: str | None = None
    version: int
    updated_at: datetime


class GoalFinder(ABC):
    """Read port answering whether a goal exists, and what it looks like."""

    @abstractmethod
    async def find_by_id(self, goal_id: str) -> GoalSummary | None:
        """Look up a goal's summary.

        Returns:
            The summary, or None if no such goal has been added. A missing
            goal is not an error at this level.
        """
        ...


class GoalProjection(EventProcessor, GoalFinder):
    """In-memory goal read model.

    Subscribed to the event bus, the projection is updated synchronously
    after each goal event is appended. In a fresh process it is rebuilt with
    the FromReplayingEvents catch-up strategy before any command runs.

    Chain links are kept in both directions: when goal A gets a
    `next_goal_id` of B, B's summary records A as its `previous_goal_id`.
    During replay A's link may be seen before B was added; the back link
    is then applied once B's GoalAdded arrives. When A is re-chained to C,
    B loses its back link to A.

    Parked back links live in `pending_previous` until the named goal is
    added or its predecessor is re-chained. A link to a goal that never
    arrives stays parked for the life of the process; the map holds at
    most one entry per goal, so it is bounded by the number of goals.

    Example:
        >>> projection = GoalProjection()
        >>> bus.subscribe_processor(projection)
        >>> await projection.find_by_id("goal_...")
    """

    def __init__(self) -> None:
        self.goals: dict[str, GoalSummary] = {}
        self.pending_previous: dict[str, str] = {}

    async def find_by_id(self, goal_id: str) -> GoalSummary | None:
        return self.goals.get(goal_id)

    async def list_goals(self) -> list[GoalSummary]:
        """All goals in the order they were added."""
        return list(self.goals.values())

    async def chain_from(self, goal_id: str) -> list[GoalSummary]:
        """Follow `next_goal_id` links starting at a goal.

        Returns:
            The starting goal followed by each successor, stopping at the
            end of the chain, at a goal that is not known, or before a goal
            that was already visited. Empty if the starting goal is unknown.
        """
        chain: list[GoalSummary] = []
        seen: set[str] = set()
        current = self.goals.get(goal_id)
        while current is not None and current.goal_id not in seen:
            chain.append(current)
            seen.add(current.goal_id)
            current = self.goals.get(current.next_goal_id) if current.next_goal_id else None
        return chain

    @handles_event
    async def on_goal_added(self, event: Event[GoalAdded]) -> None:
        evt = event.payload
        next_goal_id = evt.embedded_context.next_goal_id if evt.embedded_context else None
        self.goals[event.stream_id] = GoalSummary(
            goal_id=event.stream_id,
            objective=evt.objective,
            success_criteria=list(evt.success_criteria),
            scope_in=list(evt.scope_in),
            scope_out=list(evt.scope_out),
            boundaries=list(evt.boundaries),
            next_goal_id=next_goal_id,
            previous_goal_id=self.pending_previous.pop(event.stream_id, None),
            version=event.version,
            updated_at=event.timestamp,
        )
        if next_goal_id is not None:
            self._link(event.stream_id, next_goal_id)

    @handles_event
    async def on_goal_updated(self, event: Event[GoalUpdated]) -> None:
        summary = self.goals.get(event.stream_id)
        if summary is None:
            raise CorruptHistoryError(event.stream_id, "GoalUpdated before GoalAdded")

        evt = event.payload
        changes = {
            name: value
            for name, value in evt.model_dump(exclude={"embedded_context"}).items()
            if value is not None
        }
        if evt.embedded_context is not None and evt.embedded_context.next_goal_id is not None:
            changes.setdefault("next_goal_id", evt.embedded_context.next_goal_id)

        self.goals[event.stream_id] = summary.model_copy(
            update={**changes, "version": event.version, "updated_at": event.timestamp}
        )
        next_goal_id = changes.get("next_goal_id")
        if next_goal_id is not None and next_goal_id != summary.next_goal_id:
            if summary.next_goal_id is not None:
                self._unlink(event.stream_id, summary.next_goal_id)
            self._link(event.stream_id, next_goal_id)

    def _link(self, previous_goal_id: str, next_goal_id: str) -> None:
        following = self.goals.get(next_goal_id)
        if following is None:
            self.pending_previous[next_goal_id] = previous_goal_id
            return
        self.goals[next_goal_id] = following.model_copy(
            update={"previous_goal_id": previous_goal_id}
        )
        LOGGER.debug(
            "Goal chain projected",
            extra={"previous_goal_id": previous_goal_id, "next_goal_id": next_goal_id},
        )

    def _unlink(self, previous_goal_id: str, old_next_goal_id: str) -> None:
        if self.pending_previous.get(old_next_goal_id) == previous_goal_id:
            del self.pending_previous[old_next_goal_id]
        former = self.goals.get(old_next_goal_id)
        if former is not None and former.previous_goal_id == previous_goal_id:
            self.goals[old_next_goal_id] = former.model_copy(update={"previous_goal_id": None})
