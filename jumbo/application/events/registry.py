"""Closed registry of event payload types used to decode persisted events."""

from pydantic import BaseModel

from ...domain import Aggregate
from ...domain.exceptions import CorruptHistoryError


class EventTypeRegistry:
    """Maps persisted event type names to payload classes.

    A stored record only carries the payload's type name. The registry is
    the closed set of names a store is willing to decode; anything else is
    reported as corrupt history rather than guessed at.

    Example:
        >>> registry = EventTypeRegistry.for_aggregates(Goal)
        >>> registry.resolve("goal_1", "GoalAdded")
        <class 'jumbo.domain.goals.events.GoalAdded'>
    """

    @staticmethod
    def for_aggregates(*aggregate_types: type[Aggregate]) -> "EventTypeRegistry":
        registry = EventTypeRegistry()
        for aggregate_type in aggregate_types:
            registry.register(*aggregate_type.event_types)
        return registry

    def __init__(self) -> None:
        self.types_by_name: dict[str, type[BaseModel]] = {}

    def register(self, *payload_types: type[BaseModel]) -> None:
        """Register payload types under their class names.

        Raises:
            ValueError: If a different class is already registered under
                the same name.
        """
        for payload_type in payload_types:
            name = payload_type.__name__
            existing = self.types_by_name.get(name)
            if existing is not None and existing is not payload_type:
                raise ValueError(
                    f"Event type name {name} already registered for "
                    f"{existing.__module__}.{existing.__qualname__}"
                )
            self.types_by_name[name] = payload_type

    def resolve(self, stream_id: str, type_name: str) -> type[BaseModel]:
        """Look up the payload class for a stored type name.

        Raises:
            CorruptHistoryError: If the name is not registered.
        """
        try:
            return self.types_by_name[type_name]
        except KeyError:
            raise CorruptHistoryError(stream_id, f"unrecognized event type {type_name}") from None
