"""Composition root wiring the goal use cases for one process."""

from .application import (
    Application,
    ApplicationBuilder,
    ContextPropagationMiddleware,
    EventTypeRegistry,
    FromReplayingEvents,
    LoggingMiddleware,
    SynchronousEventBus,
)
from .application.goals import (
    AddGoalCommandHandler,
    GoalChainingConfig,
    GoalProjection,
    UpdateGoalCommandHandler,
)
from .domain.goals import Goal
from .integrations.filesystem import FileEventStore
from .settings import JumboSettings, configure_logging


def build_application(settings: JumboSettings | None = None) -> Application:
    """Build the application over the project's file event store.

    The goal projection is rebuilt by replaying the event store when the
    application starts, so the returned application must be started (or
    used as an async context manager) before commands are dispatched.
    """
    settings = settings or JumboSettings()
    configure_logging(settings)

    store = FileEventStore(settings.events_dir, EventTypeRegistry.for_aggregates(Goal))
    bus = SynchronousEventBus()
    projection = GoalProjection()

    if settings.goal_chaining_enabled:
        chaining = GoalChainingConfig(enabled=True, writer=store, reader=store, finder=projection)
    else:
        chaining = GoalChainingConfig.disabled()

    return (
        ApplicationBuilder()
        .use_settings(settings)
        .use_event_store(store)
        .use_event_bus(bus)
        .register_middleware(ContextPropagationMiddleware())
        .register_middleware(LoggingMiddleware("DEBUG"))
        .register_event_processor(projection, FromReplayingEvents(store))
        .register_command_handler(AddGoalCommandHandler(store, bus, chaining))
        .register_command_handler(UpdateGoalCommandHandler(projection, store, store, bus))
        .build()
    )
