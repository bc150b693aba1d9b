"""Tests for the JSON Lines event store."""

import json

import pytest
from ulid import ULID

from jumbo.application.events import EventTypeRegistry
from jumbo.domain import (
    ConcurrencyError,
    CorruptHistoryError,
    Event,
    StoreUnavailableError,
)
from jumbo.domain.goals import EmbeddedContext, Goal, GoalUpdated, InvariantRef
from jumbo.integrations.filesystem import FileEventStore
from tests.fixtures.goals import goal_added, make_event


@pytest.fixture
def events_dir(tmp_path):
    return tmp_path / "events"


@pytest.fixture
def store(events_dir) -> FileEventStore:
    return FileEventStore(events_dir, EventTypeRegistry.for_aggregates(Goal))


def write_lines(path, *records):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")


def record(stream_id="goal_1", version=1, type="GoalAdded", payload=None):
    return {
        "id": str(ULID()),
        "stream_id": stream_id,
        "type": type,
        "version": version,
        "timestamp": "2025-01-01T00:00:00+00:00",
        "correlation_id": None,
        "causation_id": None,
        "payload": payload or {"objective": "Ship", "success_criteria": ["done"]},
    }


@pytest.mark.asyncio
async def test_read_unknown_stream_is_empty(store: FileEventStore):
    assert await store.read_stream("goal_unknown") == []
    assert await store.list_streams() == []


@pytest.mark.asyncio
async def test_append_then_read_round_trips_event(store: FileEventStore):
    payload = goal_added(
        embedded_context=EmbeddedContext(
            relevant_invariants=[InvariantRef(title="Append only")], next_goal_id="goal_2"
        )
    )
    event = Event(
        stream_id="goal_1",
        version=1,
        payload=payload,
        correlation_id=ULID(),
        causation_id=ULID(),
    )

    await store.append(event)

    [loaded] = await store.read_stream("goal_1")
    assert loaded.id == event.id
    assert loaded.version == 1
    assert loaded.timestamp == event.timestamp
    assert loaded.correlation_id == event.correlation_id
    assert loaded.causation_id == event.causation_id
    assert loaded.payload == payload


@pytest.mark.asyncio
async def test_one_file_per_stream_with_one_line_per_event(store: FileEventStore, events_dir):
    await store.append(make_event("goal_1", 1, goal_added()))
    await store.append(make_event("goal_1", 2, GoalUpdated(next_goal_id="goal_2")))
    await store.append(make_event("goal_2", 1, goal_added()))

    lines = (events_dir / "goal_1.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["type"] for line in lines] == ["GoalAdded", "GoalUpdated"]
    assert json.loads(lines[1])["payload"] == {"next_goal_id": "goal_2"}
    assert await store.list_streams() == ["goal_1", "goal_2"]


@pytest.mark.asyncio
async def test_partial_update_round_trips(store: FileEventStore):
    await store.append(make_event("goal_1", 1, goal_added()))
    await store.append(make_event("goal_1", 2, GoalUpdated(scope_in=["src/"])))

    events = await store.read_stream("goal_1")

    assert events[1].payload == GoalUpdated(scope_in=["src/"])
    assert Goal.rehydrate("goal_1", events).scope_in == ["src/"]


@pytest.mark.asyncio
async def test_append_rejects_stale_version(store: FileEventStore):
    await store.append(make_event("goal_1", 1, goal_added()))

    with pytest.raises(ConcurrencyError) as exc_info:
        await store.append(make_event("goal_1", 1, goal_added()))

    assert exc_info.value.actual_version == 1
    assert len(await store.read_stream("goal_1")) == 1


@pytest.mark.asyncio
async def test_append_rejects_version_gap(store: FileEventStore):
    with pytest.raises(ConcurrencyError):
        await store.append(make_event("goal_1", 2, GoalUpdated(objective="x")))


@pytest.mark.asyncio
async def test_history_survives_a_new_store_instance(store: FileEventStore, events_dir):
    event = make_event("goal_1", 1, goal_added())
    await store.append(event)

    reopened = FileEventStore(events_dir, EventTypeRegistry.for_aggregates(Goal))

    assert [e.id for e in await reopened.read_stream("goal_1")] == [event.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("stream_id", ["../escape", "goal/1", "", "..", "goal 1"])
async def test_invalid_stream_ids_are_rejected(store: FileEventStore, stream_id):
    with pytest.raises(ValueError):
        await store.read_stream(stream_id)


@pytest.mark.asyncio
async def test_undecodable_record_is_corrupt_history(store: FileEventStore, events_dir):
    events_dir.mkdir(parents=True)
    (events_dir / "goal_1.jsonl").write_text("{not json\n", encoding="utf-8")

    with pytest.raises(CorruptHistoryError) as exc_info:
        await store.read_stream("goal_1")

    assert exc_info.value.stream_id == "goal_1"


@pytest.mark.asyncio
async def test_invalid_utf8_is_corrupt_history_on_read_and_append(
    store: FileEventStore, events_dir
):
    events_dir.mkdir(parents=True)
    (events_dir / "goal_1.jsonl").write_bytes(b"\xff\xfe{\n")

    with pytest.raises(CorruptHistoryError):
        await store.read_stream("goal_1")
    with pytest.raises(CorruptHistoryError):
        await store.append(make_event("goal_1", 1, goal_added()))

    assert (events_dir / "goal_1.jsonl").read_bytes() == b"\xff\xfe{\n"


@pytest.mark.asyncio
async def test_unknown_event_type_is_corrupt_history(store: FileEventStore, events_dir):
    write_lines(events_dir / "goal_1.jsonl", record(type="GoalDeleted"))

    with pytest.raises(CorruptHistoryError, match="GoalDeleted"):
        await store.read_stream("goal_1")


@pytest.mark.asyncio
async def test_version_gap_in_file_is_corrupt_history(store: FileEventStore, events_dir):
    write_lines(
        events_dir / "goal_1.jsonl",
        record(version=1),
        record(version=3, type="GoalUpdated", payload={"objective": "x"}),
    )

    with pytest.raises(CorruptHistoryError):
        await store.read_stream("goal_1")


@pytest.mark.asyncio
async def test_record_of_another_stream_is_corrupt_history(store: FileEventStore, events_dir):
    write_lines(events_dir / "goal_1.jsonl", record(stream_id="goal_2"))

    with pytest.raises(CorruptHistoryError):
        await store.read_stream("goal_1")


@pytest.mark.asyncio
async def test_invalid_payload_is_corrupt_history(store: FileEventStore, events_dir):
    write_lines(events_dir / "goal_1.jsonl", record(payload={"objective": "Ship"}))

    with pytest.raises(CorruptHistoryError):
        await store.read_stream("goal_1")


@pytest.mark.asyncio
async def test_write_failure_is_store_unavailable(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory", encoding="utf-8")
    store = FileEventStore(blocked, EventTypeRegistry.for_aggregates(Goal))

    with pytest.raises(StoreUnavailableError):
        await store.append(make_event("goal_1", 1, goal_added()))
