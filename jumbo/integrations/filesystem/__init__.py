"""Local filesystem integration for jumbo.

Stores every event stream as an append-only JSON Lines file inside the
project's data directory, so that the history survives between the
short-lived processes the tool runs in.

Usage:
    >>> from jumbo.integrations.filesystem import FileEventStore
    >>>
    >>> registry = EventTypeRegistry.for_aggregates(Goal)
    >>> store = FileEventStore(settings.events_dir, registry)
"""

from .event_store import FileEventStore

__all__ = ["FileEventStore"]
