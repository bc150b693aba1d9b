"""Event infrastructure: storage, publication and processing.

- EventStore: durable per-stream persistence (EventWriter + EventReader)
- EventTypeRegistry: closed set of payload types a store may decode
- EventBus: synchronous delivery of appended events to subscribers
- EventProcessor: base class for projectors, with catch-up strategies
"""

from .bus import EventBus, EventHandler, SynchronousEventBus
from .processing import CatchupStrategy, EventProcessor, FromReplayingEvents, NoCatchup
from .registry import EventTypeRegistry
from .store import EventReader, EventStore, EventWriter, InMemoryEventStore

__all__ = [
    "EventBus",
    "EventHandler",
    "SynchronousEventBus",
    "EventProcessor",
    "CatchupStrategy",
    "FromReplayingEvents",
    "NoCatchup",
    "EventTypeRegistry",
    "EventReader",
    "EventStore",
    "EventWriter",
    "InMemoryEventStore",
]
