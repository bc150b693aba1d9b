import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from ..store import EventStore
    from .processor import EventProcessor

P = TypeVar("P", bound="EventProcessor")

LOGGER = logging.getLogger(__name__)


class CatchupStrategy(ABC, Generic[P]):
    """Strategy for bringing an event processor up to date with the event store.

    Each command runs in a fresh process, so a processor whose read model
    lives in memory starts out empty. Its catchup strategy runs once at
    application startup, before any command is dispatched.

    Implementations:
    - NoCatchup: Start empty (processors that only care about new events)
    - FromReplayingEvents: Replay every stream from the event store
    """

    @abstractmethod
    async def catchup(self, processor: P) -> None:
        """Synchronize the processor with the event store.

        Args:
            processor: The event processor instance to catch up

        Raises:
            Any store error (e.g. CorruptHistoryError) propagates; a read
            model that could not be rebuilt must not serve queries.
        """
        ...


class NoCatchup(CatchupStrategy):
    """No catchup - processor starts from the current position."""

    async def catchup(self, processor: P) -> None:
        return None


class FromReplayingEvents(CatchupStrategy):
    """Catch up by replaying all historical events from the event store.

    This is the conceptually simplest catchup strategy. Streams are replayed
    one at a time, each in version order, through the processor's normal
    event handlers.

    **Advantages:**
    - Simple and correct, every event is processed
    - No additional infrastructure needed (uses the existing event store)

    **Disadvantages:**
    - Cost grows with the size of the log

    Note:
        Events of different streams are not ordered relative to each other,
        so handlers must not rely on cross-stream ordering. The goal
        projection, for example, tolerates a chain update arriving before
        the goal it points to.
    """

    def __init__(self, store: "EventStore"):
        self.store = store

    async def catchup(self, processor: P) -> None:
        """Replay every stream in the store through the processor.

        Args:
            processor: The event processor to replay events through
        """
        replayed = 0
        for stream_id in await self.store.list_streams():
            for event in await self.store.read_stream(stream_id):
                await processor.handle_event(event)
                replayed += 1

        LOGGER.debug(
            "Processor caught up",
            extra={"processor": type(processor).__name__, "replayed_events": replayed},
        )
