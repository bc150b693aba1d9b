from .application import Application, ApplicationBuilder
from .commands import CommandBus, CommandHandler
from .events import (
    CatchupStrategy,
    EventBus,
    EventProcessor,
    EventReader,
    EventStore,
    EventTypeRegistry,
    EventWriter,
    FromReplayingEvents,
    InMemoryEventStore,
    NoCatchup,
    SynchronousEventBus,
)
from .middleware import ContextPropagationMiddleware, LoggingMiddleware, Middleware

__all__ = [
    "Application",
    "ApplicationBuilder",
    "CommandBus",
    "CommandHandler",
    "CatchupStrategy",
    "EventBus",
    "EventProcessor",
    "EventReader",
    "EventStore",
    "EventTypeRegistry",
    "EventWriter",
    "FromReplayingEvents",
    "InMemoryEventStore",
    "NoCatchup",
    "SynchronousEventBus",
    "ContextPropagationMiddleware",
    "LoggingMiddleware",
    "Middleware",
]
