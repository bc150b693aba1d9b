from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field
from ulid import ULID

T = TypeVar("T", bound=BaseModel)


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information

    Note:
        Used as default_factory for Event.timestamp to ensure all
        events are timestamped in UTC regardless of system timezone.
    """
    return datetime.now(tz=timezone.utc)


class Event(BaseModel, Generic[T]):
    """Immutable record of a fact that happened to one aggregate.

    Each event belongs to exactly one stream (one stream per aggregate
    instance) and carries its position in that stream. Events are:

    - **Immutable**: the model is frozen; once appended an event is never
      mutated or deleted
    - **Ordered**: versions within a stream start at 1 and increase by one
      with no gaps
    - **Typed**: the generic parameter T is the payload schema, and ``type``
      is the payload class name used to decode persisted records
    - **Timestamped**: all events record when they occurred (UTC)
    - **Traceable**: correlation/causation IDs link events to the command
      that produced them

    Type Parameters:
        T: Pydantic BaseModel subclass defining the payload schema

    Attributes:
        id: Unique identifier for this specific event instance
        stream_id: Identity of the aggregate whose stream holds this event
        version: Position in the stream (1-indexed)
        payload: Typed event data (e.g., GoalAdded, GoalUpdated)
        timestamp: When the event occurred (UTC timezone)
        correlation_id: Correlation ID of the logical operation
        causation_id: ID of what directly caused this event (the command_id)

    Examples:
        >>> event = Event(
        ...     stream_id="goal_0b9f...",
        ...     version=1,
        ...     payload=GoalAdded(objective="Ship it", success_criteria=["done"]),
        ... )
        >>> event.type
        'GoalAdded'
    """

    model_config = ConfigDict(frozen=True)

    id: ULID = Field(
        default_factory=ULID,
        description="Unique identifier for this event instance",
    )
    stream_id: str = Field(description="Identity of the stream this event belongs to")
    version: int = Field(
        ge=1,
        description="Position in the stream (1-indexed, monotonically increasing)",
    )
    payload: T = Field(description="Typed event data conforming to schema T")
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )
    correlation_id: ULID | None = Field(
        default=None,
        description="Correlation ID for tracing the entire logical operation",
    )
    causation_id: ULID | None = Field(
        default=None,
        description="ID of what directly caused this event (typically the command_id)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def type(self) -> str:
        """Name of the payload type, e.g. ``"GoalAdded"``."""
        return self.payload.__class__.__name__
