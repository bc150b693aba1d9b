from .bus import CommandBus, CommandToHandlerMap, DelegateToHandler
from .handler import CommandHandler

__all__ = [
    "CommandBus",
    "CommandHandler",
    "CommandToHandlerMap",
    "DelegateToHandler",
]
