from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel
from typing_extensions import Self

from ..context import get_context
from ..routing import setup_event_applying
from .event import Event
from .exceptions import CorruptHistoryError

if TYPE_CHECKING:
    from ..routing import MessageRouter

T = TypeVar("T", bound=BaseModel)


class Aggregate(BaseModel):
    """Base class for all aggregates in the event sourcing system.

    An aggregate is the authoritative state of one entity and is derived
    solely from its event stream. It never writes anything itself: domain
    operations validate the request against current state and *return* the
    event describing the change, leaving persistence and publication to the
    command handler. State is only ever changed by folding events, either
    through `rehydrate` or `replay_events`.

    Each subclass declares the closed set of payload types that may appear
    in its stream via `event_types`, and one `@applies_event` method per
    type. Defining a subclass that leaves a declared type without an applier
    fails immediately, so the fold is exhaustive by construction.

    Examples:
        >>> class Renamed(BaseModel):
        ...     name: str
        >>>
        >>> class Project(Aggregate):
        ...     event_types = (Renamed,)
        ...     name: str = ""
        ...
        ...     def rename(self, name: str) -> Event[Renamed]:
        ...         return self._build_event(Renamed(name=name))
        ...
        ...     @applies_event
        ...     def apply_renamed(self, evt: Renamed) -> None:
        ...         self.name = evt.name
        >>>
        >>> project = Project.create("project_1")
        >>> event = project.rename("jumbo")
        >>> Project.rehydrate("project_1", [event]).name
        'jumbo'

    Attributes:
        id: Identity of the aggregate, also the id of its stream.
        version: Version of the last folded event; 0 for a scaffold.
        last_event_time: Timestamp of the last folded event.
    """

    id: str
    version: int = 0
    last_event_time: datetime | None = None

    event_types: ClassVar[tuple[type[BaseModel], ...]] = ()

    _event_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Set up event routing and check every declared event type has an applier."""
        super().__init_subclass__(**kwargs)  # type: ignore[arg-type]
        cls._event_router = setup_event_applying(cls)
        missing = [t.__name__ for t in cls.event_types if not cls._event_router.handles(t)]
        if missing:
            raise TypeError(f"{cls.__name__} has no applier for event types: {', '.join(missing)}")

    @classmethod
    def create(cls, aggregate_id: str) -> Self:
        """Create an in-memory scaffold with identity only and no history."""
        return cls(id=aggregate_id)

    @classmethod
    def rehydrate(cls, aggregate_id: str, history: Iterable[Event[Any]]) -> Self:
        """Rebuild an aggregate by folding its history left to right.

        Args:
            aggregate_id: Identity of the aggregate (and its stream).
            history: Events of the stream ordered by version.

        Returns:
            The aggregate as of the last event. An empty history yields a
            scaffold at version 0.

        Raises:
            CorruptHistoryError: If an event belongs to another stream, is
                out of order, or carries a payload type outside
                `event_types`.
        """
        aggregate = cls.create(aggregate_id)
        aggregate.replay_events(history)
        return aggregate

    def replay_events(self, events: Iterable[Event[Any]]) -> None:
        """Continue folding events onto the current state.

        Rehydrating a prefix of a history and then replaying the remainder
        produces the same state as rehydrating the whole history at once.
        """
        for event in events:
            self._fold(event)

    def _fold(self, event: Event[Any]) -> None:
        if event.stream_id != self.id:
            raise CorruptHistoryError(
                self.id, f"event {event.id} belongs to stream {event.stream_id}"
            )
        if event.version != self.version + 1:
            raise CorruptHistoryError(
                self.id, f"expected version {self.version + 1}, got {event.version}"
            )
        if type(event.payload) not in self.event_types:
            raise CorruptHistoryError(self.id, f"unrecognized event type {event.type}")

        self._event_router.route(self, event.payload)
        self.version = event.version
        self.last_event_time = event.timestamp

    def _build_event(self, payload: T) -> Event[T]:
        """Build the event that would follow the current version.

        The aggregate itself is left untouched. correlation_id and
        causation_id are taken from the current execution context, with the
        running command's id as the causation.
        """
        ctx = get_context()
        return Event(
            stream_id=self.id,
            version=self.version + 1,
            payload=payload,
            correlation_id=ctx.correlation_id,
            causation_id=ctx.command_id,
        )

    def exists(self) -> bool:
        """Whether at least one event has been folded into this aggregate."""
        return self.version > 0
