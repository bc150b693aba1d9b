"""Event store interfaces and implementations for durable event persistence."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any

from ...domain import Event
from ...domain.exceptions import ConcurrencyError

LOGGER = logging.getLogger(__name__)


class EventWriter(ABC):
    """Write port of the event store."""

    @abstractmethod
    async def append(self, event: Event[Any]) -> None:
        """Durably append one event to its stream.

        The event must directly follow the stream's current version
        (``event.version == len(stream) + 1``). The event is persisted before
        this method returns; it is all-or-nothing at single-event granularity.

        Args:
            event: The event to append. Its stream_id names the stream.

        Raises:
            ConcurrencyError: If the event's version does not directly
                follow the current stream version.
            StoreUnavailableError: If the underlying storage fails.
        """
        ...


class EventReader(ABC):
    """Read port of the event store."""

    @abstractmethod
    async def read_stream(self, stream_id: str) -> list[Event[Any]]:
        """Read every event of a stream ordered by version.

        Returns:
            The stream's events, or an empty list for an unknown stream.
            An unknown stream is not an error; callers decide what an
            empty history means.
        """
        ...


class EventStore(EventWriter, EventReader):
    """Abstract interface for durable event persistence.

    EventStore persists events as an immutable, append-only log with one
    stream per aggregate instance. Replaying a stream from version 1
    deterministically reconstructs that aggregate.

    Key responsibilities:
    - **Durability**: an appended event survives process exit
    - **Ordering**: events are stored and read back in version order
    - **Concurrency Control**: optimistic locking via the event's version
    - **Immutability**: events are never modified or deleted
    """

    @abstractmethod
    async def list_streams(self) -> list[str]:
        """List the ids of every stream holding at least one event.

        Used to replay the whole log when rebuilding read models.
        """
        ...


class InMemoryEventStore(EventStore):
    """Dictionary-based in-memory event store for testing.

    Stores events in a dictionary keyed by stream id. Each stream is a list
    ordered by version. Version checking behaves exactly like the durable
    store, so it can stand in for it in unit tests.

    **NOT suitable for production**: nothing survives process exit.
    """

    def __init__(self) -> None:
        """Initialize an empty in-memory event store."""
        self.by_stream_id: dict[str, list[Event[Any]]] = defaultdict(list)

    async def append(self, event: Event[Any]) -> None:
        """Append an event to its stream with version checking.

        Raises:
            ConcurrencyError: If the event does not directly follow the
                stream's current version.
        """
        stream = self.by_stream_id[event.stream_id]
        current_version = stream[-1].version if stream else 0

        if event.version != current_version + 1:
            raise ConcurrencyError(event.stream_id, event.version - 1, current_version)

        stream.append(event)
        LOGGER.debug(
            "Event appended",
            extra={"stream_id": event.stream_id, "version": event.version, "type": event.type},
        )

    async def read_stream(self, stream_id: str) -> list[Event[Any]]:
        """Return the stream's events in version order, empty if unknown."""
        return list(self.by_stream_id.get(stream_id, []))

    async def list_streams(self) -> list[str]:
        """List stream ids in the order they were first written."""
        return [stream_id for stream_id, events in self.by_stream_id.items() if events]
