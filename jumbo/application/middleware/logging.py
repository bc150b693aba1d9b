"""Middleware tracing each command by type and ids."""

import logging
from typing import Any

from ...context import get_context
from ...domain import Command
from ...routing import intercepts
from .base import Handler, Middleware

LOGGER = logging.getLogger(__name__)


def trace_fields(command: Command) -> dict[str, str]:
    """Log fields identifying a command without any of its data."""
    ctx = get_context()
    fields = {"command_type": type(command).__name__, "command_id": str(command.command_id)}
    if ctx.correlation_id is not None:
        fields["correlation_id"] = str(ctx.correlation_id)
    if ctx.causation_id is not None:
        fields["causation_id"] = str(ctx.causation_id)
    return fields


class LoggingMiddleware(Middleware):
    """Logs when a command is received and how it ended.

    Only the command type and the ids are logged; objectives, criteria and
    file names never reach the log. A failure is logged with the error's
    class name and re-raised unchanged.

    Register it after ContextPropagationMiddleware so the correlation ids
    are known when it runs.

    Attributes:
        level: Numeric level every record is logged at.
    """

    def __init__(self, level: str = "INFO"):
        # Level names are case-insensitive: "debug" and "DEBUG" both work
        self.level = getattr(logging, level.upper())

    @intercepts
    async def log_command(self, command: Command, next: Handler) -> Any:
        fields = trace_fields(command)
        LOGGER.log(self.level, "Received Command", extra=fields)
        try:
            result = await next(command)
        except Exception as e:
            LOGGER.log(self.level, "Command Failed", extra={**fields, "error": type(e).__name__})
            raise
        LOGGER.log(self.level, "Command Succeeded", extra=fields)
        return result
