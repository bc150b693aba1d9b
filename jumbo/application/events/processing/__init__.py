"""Event processors and the strategies used to catch them up at startup."""

from .processor import EventProcessor
from .strategies import CatchupStrategy, FromReplayingEvents, NoCatchup

__all__ = [
    "EventProcessor",
    "CatchupStrategy",
    "FromReplayingEvents",
    "NoCatchup",
]
