"""Synchronous in-process publish/subscribe for domain events."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from ...domain import Event
from .processing import EventProcessor

LOGGER = logging.getLogger(__name__)

EventHandler = Callable[[Event[Any]], Awaitable[Any]]


class EventBus(ABC):
    """Delivers appended events to the subscribers of their payload type.

    Command handlers publish an event only after it has been durably
    appended, so subscribers never observe an event that is not in the
    store.
    """

    @abstractmethod
    def subscribe(self, event_type: type[BaseModel], handler: EventHandler) -> None:
        """Register a handler for one payload type for the life of the process."""
        ...

    @abstractmethod
    async def publish(self, event: Event[Any]) -> None:
        """Deliver an event to every subscriber of its payload type.

        Raises:
            Exception: Any exception raised by a subscriber. A failing
                subscriber fails the command that published the event.
        """
        ...

    def subscribe_processor(self, processor: EventProcessor) -> None:
        """Subscribe a processor for every payload type it has a handler for."""
        for event_type in processor.handled_event_types():
            self.subscribe(event_type, processor.handle_event)


class SynchronousEventBus(EventBus):
    """Event bus that runs subscribers inline during `publish`.

    Characteristics:
    - Subscribers run in registration order, one at a time
    - `publish` returns only after every subscriber has finished
    - Subscriber failures propagate to the publisher; later subscribers
      for the same event are not called

    Example:
        >>> bus = SynchronousEventBus()
        >>> bus.subscribe(GoalAdded, on_goal_added)
        >>> await bus.publish(event)  # on_goal_added has run
    """

    def __init__(self) -> None:
        self.subscribers: dict[type[BaseModel], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type[BaseModel], handler: EventHandler) -> None:
        self.subscribers[event_type].append(handler)

    async def publish(self, event: Event[Any]) -> None:
        handlers = list(self.subscribers.get(type(event.payload), []))
        LOGGER.debug(
            "Publishing event",
            extra={
                "stream_id": event.stream_id,
                "version": event.version,
                "type": event.type,
                "subscribers": len(handlers),
            },
        )
        for handler in handlers:
            await handler(event)
