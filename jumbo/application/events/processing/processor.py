"""Event processors for building read models (projectors)."""

import inspect
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

from ....domain import Event
from ....routing import setup_event_handling

if TYPE_CHECKING:
    from ....routing import MessageRouter


class EventProcessor:
    """Base class for projectors that keep a read model in sync with events.

    Subclass EventProcessor and use the @handles_event decorator to declare
    which events the processor is interested in. Routing is set up from the
    handler type annotations when the subclass is defined:

    - a handler annotated with the payload type (``evt: GoalAdded``)
      receives only the payload
    - a handler annotated with the wrapper (``event: Event[GoalAdded]``)
      receives the full event, including its stream id and version

    Processors are subscribed to the EventBus, which calls `handle_event`
    synchronously after each event is durably appended. Events the
    processor has no handler for are ignored.

    Example:
        >>> class GoalCounter(EventProcessor):
        ...     def __init__(self):
        ...         self.count = 0
        ...
        ...     @handles_event
        ...     async def on_added(self, evt: GoalAdded) -> None:
        ...         self.count += 1
        >>>
        >>> bus.subscribe_processor(GoalCounter())
    """

    _event_router: ClassVar["MessageRouter"]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Set up the event routing table when a subclass is defined."""
        super().__init_subclass__(**kwargs)
        cls._event_router = setup_event_handling(cls)

    @classmethod
    def handled_event_types(cls) -> list[type[BaseModel]]:
        """Payload types this processor has a handler for."""
        return list(cls._event_router.registered_types)

    async def handle_event(self, event: Event[Any]) -> object:
        """Route a full event to the handler registered for its payload type.

        Args:
            event: The event to process.

        Returns:
            The return value of the handler method (typically None)
        """
        result = self._event_router.route(self, event.payload, event=event)
        if inspect.iscoroutine(result):
            return await result
        return result
