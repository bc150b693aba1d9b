"""Annotation-driven routing of messages to handler methods.

Command handlers, aggregates, event processors and middleware mark their
methods with one of the decorators below. The annotation of the first
argument after ``self`` decides which messages reach a method. Event
handlers may annotate that argument as ``Event[T]``: routing then happens
on ``T`` and the method receives the whole event instead of the payload.

Each class builds its router once, when it is defined, by scanning its
MRO for marked methods.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

HANDLER_SPEC_ATTR = "__jumbo_handler__"

COMMAND_HANDLER = "command handler"
EVENT_APPLIER = "event applier"
EVENT_HANDLER = "event handler"
INTERCEPTOR = "interceptor"


@dataclass(frozen=True)
class HandlerSpec:
    """What a marked method handles, stored on the function itself."""

    role: str
    message_type: type
    wants_event: bool = False


def _message_type(func: Callable[..., Any]) -> tuple[type, bool]:
    """Return the routed type of a handler and whether it wants the whole event.

    Raises:
        ValueError: If the handler takes no message or leaves it unannotated.
    """
    from .domain.event import Event

    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        raise ValueError(f"Handler {func.__qualname__} must take a message after self")
    param = params[1]
    if param.annotation is inspect.Parameter.empty:
        raise ValueError(
            f"Handler {func.__qualname__} parameter '{param.name}' must have a type annotation"
        )

    annotation = param.annotation
    if isinstance(annotation, type) and issubclass(annotation, Event):
        # Event[GoalAdded] is a pydantic subclass recording its type argument
        args = annotation.__pydantic_generic_metadata__["args"]
        if not args:
            raise ValueError(f"Handler {func.__qualname__} must annotate Event[T], not Event")
        return args[0], True
    return annotation, False


def _mark(func: F, role: str) -> F:
    message_type, wants_event = _message_type(func)
    setattr(func, HANDLER_SPEC_ATTR, HandlerSpec(role, message_type, wants_event))
    return func


def handles_command(func: F) -> F:
    """Mark a method as the handler of the command type it is annotated with.

    Example:
        >>> class AddGoalCommandHandler(CommandHandler):
        ...     @handles_command
        ...     async def execute(self, command: AddGoalCommand) -> str:
        ...         ...
    """
    return _mark(func, COMMAND_HANDLER)


def applies_event(func: F) -> F:
    """Mark an aggregate method as the applier of one payload type."""
    return _mark(func, EVENT_APPLIER)


def handles_event(func: F) -> F:
    """Mark a processor method as the handler of one payload type.

    Example:
        >>> class GoalProjection(EventProcessor):
        ...     @handles_event
        ...     async def on_goal_added(self, event: Event[GoalAdded]) -> None:
        ...         self.goals[event.stream_id] = ...
    """
    return _mark(func, EVENT_HANDLER)


def intercepts(func: F) -> F:
    """Mark a middleware method as an interceptor.

    Annotate with ``Command`` to see every command, or with a concrete
    command type to see only that one.
    """
    return _mark(func, INTERCEPTOR)


class MessageRouter:
    """Routes messages to the marked methods of one class.

    Lookup follows the message's MRO, so a method annotated with a base
    type receives every subclass. Messages nobody handles go to
    `on_unhandled`.
    """

    __slots__ = ("_dispatch", "registered_types")

    def __init__(self, on_unhandled: Callable[[Any], Any]):
        @singledispatch
        def dispatch(message: Any, instance: Any, event: Any, *args: Any) -> Any:
            return on_unhandled(message)

        self._dispatch = dispatch
        self.registered_types: list[type] = []

    def register(self, spec: HandlerSpec, method: Callable[..., Any]) -> None:
        def call(message: Any, instance: Any, event: Any, *args: Any) -> Any:
            argument = event if spec.wants_event and event is not None else message
            return method(instance, argument, *args)

        self._dispatch.register(spec.message_type, call)
        if spec.message_type not in self.registered_types:
            self.registered_types.append(spec.message_type)

    def handles(self, message_type: type) -> bool:
        """Whether a method was registered for exactly this type."""
        return message_type in self.registered_types

    def route(self, instance: Any, message: Any, *args: Any, event: Any = None) -> Any:
        """Call the method registered for the message's type on `instance`.

        For events, route the payload and pass the full event as `event`;
        methods annotated ``Event[T]`` receive it in place of the payload.
        """
        return self._dispatch(message, instance, event, *args)


def _ignore(message: Any) -> None:
    return None


def _reject(role: str) -> Callable[[Any], Any]:
    def unhandled(message: Any) -> Any:
        raise NotImplementedError(f"No {role} registered for {type(message).__name__}")

    return unhandled


def _build_router(cls: type, role: str, on_unhandled: Callable[[Any], Any]) -> MessageRouter:
    router = MessageRouter(on_unhandled)
    # Base classes first so subclasses override inherited handlers
    for klass in reversed(cls.__mro__):
        for value in vars(klass).values():
            spec = getattr(value, HANDLER_SPEC_ATTR, None)
            if isinstance(spec, HandlerSpec) and spec.role == role:
                router.register(spec, value)
    return router


def setup_command_routing(cls: type) -> MessageRouter:
    return _build_router(cls, COMMAND_HANDLER, _reject(COMMAND_HANDLER))


def setup_event_applying(cls: type) -> MessageRouter:
    return _build_router(cls, EVENT_APPLIER, _reject(EVENT_APPLIER))


def setup_event_handling(cls: type) -> MessageRouter:
    """Processors ignore payload types they have no handler for."""
    return _build_router(cls, EVENT_HANDLER, _ignore)


def setup_middleware_routing(cls: type) -> MessageRouter:
    """Unmatched commands route to None so the middleware can pass them on."""
    return _build_router(cls, INTERCEPTOR, _ignore)
