"""Tests for adding goals and chaining them to the goal they follow."""

import logging
from unittest.mock import AsyncMock

import pytest

from jumbo.application import Application, EventBus, EventWriter, SynchronousEventBus
from jumbo.application.events import InMemoryEventStore
from jumbo.application.goals import (
    AddGoalCommand,
    AddGoalCommandHandler,
    GoalChainingConfig,
    GoalProjection,
)
from jumbo.domain import (
    ConfigurationError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from jumbo.domain.goals import (
    ComponentRef,
    EmbeddedContext,
    Goal,
    GoalAdded,
    GoalUpdated,
    InvariantRef,
)


def add_goal(objective: str = "Ship the release", **fields) -> AddGoalCommand:
    return AddGoalCommand(
        objective=objective, success_criteria=["Release is tagged"], **fields
    )


@pytest.mark.asyncio
async def test_add_goal_appends_exactly_one_event(
    goal_app: Application, event_store: InMemoryEventStore
):
    goal_id = await goal_app.dispatch(
        add_goal(scope_in=["src/"], scope_out=["docs/"], boundaries=["No API changes"])
    )

    assert goal_id.startswith("goal_")
    events = await event_store.read_stream(goal_id)
    assert len(events) == 1
    assert events[0].version == 1
    assert events[0].payload == GoalAdded(
        objective="Ship the release",
        success_criteria=["Release is tagged"],
        scope_in=["src/"],
        scope_out=["docs/"],
        boundaries=["No API changes"],
    )


@pytest.mark.asyncio
async def test_added_goal_is_visible_to_finder(
    goal_app: Application, goal_projection: GoalProjection
):
    goal_id = await goal_app.dispatch(add_goal())

    summary = await goal_projection.find_by_id(goal_id)
    assert summary is not None
    assert summary.objective == "Ship the release"


@pytest.mark.asyncio
async def test_each_goal_gets_a_fresh_id(goal_app: Application):
    first = await goal_app.dispatch(add_goal())
    second = await goal_app.dispatch(add_goal())

    assert first != second


@pytest.mark.asyncio
async def test_embedded_context_omitted_without_context_fields(
    goal_app: Application, event_store: InMemoryEventStore
):
    goal_id = await goal_app.dispatch(add_goal())

    [event] = await event_store.read_stream(goal_id)
    assert event.payload.embedded_context is None


@pytest.mark.asyncio
async def test_embedded_context_built_from_context_fields(
    goal_app: Application, event_store: InMemoryEventStore
):
    goal_id = await goal_app.dispatch(
        add_goal(
            relevant_invariants=[InvariantRef(title="Events are immutable")],
            relevant_components=[ComponentRef(name="EventStore")],
            files_to_be_changed=["jumbo/domain/goals/goal.py"],
        )
    )

    [event] = await event_store.read_stream(goal_id)
    assert event.payload.embedded_context == EmbeddedContext(
        relevant_invariants=[InvariantRef(title="Events are immutable")],
        relevant_components=[ComponentRef(name="EventStore")],
        files_to_be_changed=["jumbo/domain/goals/goal.py"],
    )


@pytest.mark.asyncio
async def test_missing_objective_is_rejected_before_append(
    goal_app: Application, event_store: InMemoryEventStore
):
    with pytest.raises(ValidationError) as exc_info:
        await goal_app.dispatch(AddGoalCommand(success_criteria=["done"]))

    assert exc_info.value.field == "objective"
    assert await event_store.list_streams() == []


@pytest.mark.asyncio
async def test_missing_success_criteria_is_rejected_before_append(
    goal_app: Application, event_store: InMemoryEventStore
):
    with pytest.raises(ValidationError) as exc_info:
        await goal_app.dispatch(AddGoalCommand(objective="Ship"))

    assert exc_info.value.field == "success_criteria"
    assert await event_store.list_streams() == []


@pytest.mark.asyncio
async def test_chaining_links_previous_goal_to_new_goal(
    goal_app: Application, event_store: InMemoryEventStore, goal_projection: GoalProjection
):
    goal_a = await goal_app.dispatch(add_goal("A"))

    goal_b = await goal_app.dispatch(add_goal("B", previous_goal_id=goal_a))

    a_events = await event_store.read_stream(goal_a)
    b_events = await event_store.read_stream(goal_b)
    assert [e.type for e in a_events] == ["GoalAdded", "GoalUpdated"]
    assert a_events[1].version == 2
    assert a_events[1].payload == GoalUpdated(next_goal_id=goal_b)
    assert [e.type for e in b_events] == ["GoalAdded"]

    assert Goal.rehydrate(goal_a, a_events).next_goal_id == goal_b
    summary_b = await goal_projection.find_by_id(goal_b)
    assert summary_b is not None
    assert summary_b.previous_goal_id == goal_a


@pytest.mark.asyncio
async def test_chaining_a_second_goal_moves_the_link(
    goal_app: Application, goal_projection: GoalProjection
):
    goal_a = await goal_app.dispatch(add_goal("A"))
    goal_b = await goal_app.dispatch(add_goal("B", previous_goal_id=goal_a))

    goal_c = await goal_app.dispatch(add_goal("C", previous_goal_id=goal_a))

    assert (await goal_projection.find_by_id(goal_a)).next_goal_id == goal_c
    assert (await goal_projection.find_by_id(goal_b)).previous_goal_id is None
    assert (await goal_projection.find_by_id(goal_c)).previous_goal_id == goal_a


@pytest.mark.asyncio
async def test_chained_events_share_the_command_context(
    goal_app: Application, event_store: InMemoryEventStore
):
    goal_a = await goal_app.dispatch(add_goal("A"))
    command = add_goal("B", previous_goal_id=goal_a)

    goal_b = await goal_app.dispatch(command)

    added = (await event_store.read_stream(goal_b))[0]
    linked = (await event_store.read_stream(goal_a))[1]
    assert added.correlation_id is not None
    assert added.correlation_id == linked.correlation_id
    assert added.causation_id == command.command_id
    assert linked.causation_id == command.command_id


@pytest.mark.asyncio
async def test_chaining_to_nonexistent_goal_leaves_new_goal_unlinked(
    goal_app: Application, event_store: InMemoryEventStore, goal_projection: GoalProjection
):
    with pytest.raises(NotFoundError) as exc_info:
        await goal_app.dispatch(add_goal("C", previous_goal_id="goal_nonexistent"))

    assert exc_info.value.entity_id == "goal_nonexistent"
    assert "goal_nonexistent" in str(exc_info.value)

    [goal_c] = await event_store.list_streams()
    events = await event_store.read_stream(goal_c)
    assert [e.type for e in events] == ["GoalAdded"]
    summary = await goal_projection.find_by_id(goal_c)
    assert summary is not None
    assert summary.previous_goal_id is None


@pytest.mark.asyncio
async def test_chaining_without_configuration_is_rejected(
    event_store: InMemoryEventStore, event_bus: SynchronousEventBus
):
    handler = AddGoalCommandHandler(event_store, event_bus, GoalChainingConfig.disabled())

    with pytest.raises(ConfigurationError, match="Goal chaining dependencies not configured"):
        await handler.handle(add_goal(previous_goal_id="goal_a"))

    [goal_id] = await event_store.list_streams()
    assert len(await event_store.read_stream(goal_id)) == 1


@pytest.mark.asyncio
async def test_handler_defaults_to_chaining_disabled(
    event_store: InMemoryEventStore, event_bus: SynchronousEventBus
):
    handler = AddGoalCommandHandler(event_store, event_bus)

    assert not handler.chaining.enabled


@pytest.mark.asyncio
async def test_no_publish_when_append_fails():
    writer = AsyncMock(spec=EventWriter)
    writer.append.side_effect = StoreUnavailableError("disk full")
    bus = AsyncMock(spec=EventBus)
    handler = AddGoalCommandHandler(writer, bus)

    with pytest.raises(StoreUnavailableError):
        await handler.handle(add_goal())

    bus.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_append_happens_before_publish():
    calls: list[str] = []
    writer = AsyncMock(spec=EventWriter)
    writer.append.side_effect = lambda event: calls.append("append")
    bus = AsyncMock(spec=EventBus)
    bus.publish.side_effect = lambda event: calls.append("publish")
    handler = AddGoalCommandHandler(writer, bus)

    await handler.handle(add_goal())

    assert calls == ["append", "publish"]


@pytest.mark.asyncio
async def test_subscriber_error_reaches_caller_after_append(
    goal_app: Application, event_store: InMemoryEventStore, event_bus: SynchronousEventBus
):
    event_bus.subscribe(GoalAdded, AsyncMock(side_effect=RuntimeError("subscriber failed")))

    with pytest.raises(RuntimeError, match="subscriber failed"):
        await goal_app.dispatch(add_goal())

    [goal_id] = await event_store.list_streams()
    assert len(await event_store.read_stream(goal_id)) == 1


@pytest.mark.asyncio
async def test_goal_added_and_chained_are_logged(goal_app: Application, caplog):
    with caplog.at_level(logging.INFO, logger="jumbo"):
        goal_a = await goal_app.dispatch(add_goal("A"))
        goal_b = await goal_app.dispatch(add_goal("B", previous_goal_id=goal_a))

    messages = [(r.levelno, r.message) for r in caplog.records]
    assert (logging.INFO, "Goal added") in messages
    assert (logging.INFO, "Goals chained") in messages
    chained = next(r for r in caplog.records if r.message == "Goals chained")
    assert chained.previous_goal_id == goal_a
    assert chained.goal_id == goal_b


@pytest.mark.asyncio
async def test_failed_chaining_is_logged_as_warning(goal_app: Application, caplog):
    with caplog.at_level(logging.INFO, logger="jumbo"):
        with pytest.raises(NotFoundError):
            await goal_app.dispatch(add_goal(previous_goal_id="goal_nonexistent"))

    warning = next(r for r in caplog.records if r.levelno == logging.WARNING)
    assert warning.message == "Goal chaining failed"
    assert warning.previous_goal_id == "goal_nonexistent"
    assert warning.error == "NotFoundError"
