"""Central test fixtures for the goal application."""

import logging

import pytest

from jumbo.application import (
    Application,
    ApplicationBuilder,
    ContextPropagationMiddleware,
    FromReplayingEvents,
    InMemoryEventStore,
    SynchronousEventBus,
)
from jumbo.application.goals import (
    AddGoalCommandHandler,
    GoalChainingConfig,
    GoalProjection,
    UpdateGoalCommandHandler,
)
from jumbo.settings import JumboSettings


@pytest.fixture
def event_store() -> InMemoryEventStore:
    """Create an in-memory event store."""
    return InMemoryEventStore()


@pytest.fixture
def event_bus() -> SynchronousEventBus:
    """Create a synchronous event bus with no subscribers."""
    return SynchronousEventBus()


@pytest.fixture
def goal_projection() -> GoalProjection:
    """Create an empty goal projection (not subscribed to any bus)."""
    return GoalProjection()


@pytest.fixture
def chaining(event_store: InMemoryEventStore, goal_projection: GoalProjection) -> GoalChainingConfig:
    """Chaining configured against the in-memory store and projection."""
    return GoalChainingConfig(
        enabled=True,
        writer=event_store,
        reader=event_store,
        finder=goal_projection,
    )


@pytest.fixture
def settings(tmp_path) -> JumboSettings:
    """Settings pointing at a temporary project directory."""
    return JumboSettings(data_dir=tmp_path / ".jumbo")


@pytest.fixture
def goal_app(
    event_store: InMemoryEventStore,
    event_bus: SynchronousEventBus,
    goal_projection: GoalProjection,
    chaining: GoalChainingConfig,
) -> Application:
    """Create an application with the goal use cases over in-memory storage."""
    return (
        ApplicationBuilder()
        .use_event_store(event_store)
        .use_event_bus(event_bus)
        .register_middleware(ContextPropagationMiddleware())
        .register_event_processor(goal_projection, FromReplayingEvents(event_store))
        .register_command_handler(AddGoalCommandHandler(event_store, event_bus, chaining))
        .register_command_handler(
            UpdateGoalCommandHandler(goal_projection, event_store, event_store, event_bus)
        )
        .build()
    )


@pytest.fixture(autouse=True)
def clear_execution_context():
    """Automatically clear execution context after each test."""
    yield
    from jumbo.context import clear_context

    clear_context()


@pytest.fixture(autouse=True)
def reset_jumbo_log_level():
    """Undo log levels applied by configure_logging during a test."""
    yield
    logging.getLogger("jumbo").setLevel(logging.NOTSET)
