"""Domain primitives for event sourcing.

This module contains the core building blocks the goal domain is built on:

- Aggregate: Base class for aggregates rehydrated from their event stream
- Command: Base class for command messages (write side)
- Event: Immutable record of something that happened to one aggregate
- Exceptions: The error taxonomy shared by the store, handlers and domain
"""

from .aggregate import Aggregate
from .command import Command
from .event import Event, utc_now
from .exceptions import (
    ConcurrencyError,
    ConfigurationError,
    CorruptHistoryError,
    JumboError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

__all__ = [
    "Aggregate",
    "Command",
    "Event",
    "utc_now",
    "JumboError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "ConcurrencyError",
    "StoreUnavailableError",
    "CorruptHistoryError",
]
