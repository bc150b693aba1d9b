"""Jumbo - event-sourced goal tracking for coding assistants.

This module provides the public API of the core: the domain primitives,
the application builder and the decorators used to route messages.
"""

from .application import Application, ApplicationBuilder
from .domain import Aggregate, Command, Event
from .routing import (
    applies_event,
    handles_command,
    handles_event,
    intercepts,
)

__all__ = [
    # Application
    "Application",
    "ApplicationBuilder",
    # Domain primitives
    "Aggregate",
    "Command",
    "Event",
    # Decorators
    "applies_event",
    "handles_command",
    "handles_event",
    "intercepts",
]
