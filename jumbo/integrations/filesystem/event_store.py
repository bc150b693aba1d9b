"""Append-only JSON Lines implementation of EventStore.

Each stream is stored in its own file, ``<directory>/<stream_id>.jsonl``,
with one JSON record per line in version order.
"""

import asyncio
import fcntl
import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from ulid import ULID

from jumbo.application.events import EventStore, EventTypeRegistry
from jumbo.domain import Event
from jumbo.domain.exceptions import ConcurrencyError, CorruptHistoryError, StoreUnavailableError

LOGGER = logging.getLogger(__name__)

STREAM_ID_PATTERN = re.compile(r"[A-Za-z0-9_.-]+")
STREAM_FILE_SUFFIX = ".jsonl"


class FileEventStore(EventStore):
    """File-backed implementation of the EventStore interface.

    This implementation keeps one append-only file per stream with:
    - Durable appends: every record is flushed and fsynced before
      `append` returns
    - Optimistic concurrency control: the version check and the write
      happen under an exclusive lock on the stream file
    - Strict decoding: records are validated against the
      EventTypeRegistry, and any gap or unknown type is reported as
      CorruptHistoryError instead of being skipped

    Record layout (one line per event)::

        {"id": ..., "stream_id": ..., "type": "GoalAdded", "version": 1,
         "timestamp": ..., "correlation_id": ..., "causation_id": ...,
         "payload": {...}}

    Attributes:
        directory: Directory holding the stream files.
        registry: Payload types this store can decode.

    Examples:
        >>> registry = EventTypeRegistry.for_aggregates(Goal)
        >>> store = FileEventStore(Path(".jumbo/events"), registry)
        >>> await store.append(event)
        >>> events = await store.read_stream(event.stream_id)
    """

    def __init__(self, directory: Path | str, registry: EventTypeRegistry):
        self.directory = Path(directory)
        self.registry = registry

    def stream_path(self, stream_id: str) -> Path:
        """Return the file a stream is stored in.

        Raises:
            ValueError: If the stream id cannot be used as a file name.
        """
        if not STREAM_ID_PATTERN.fullmatch(stream_id) or stream_id in (".", ".."):
            raise ValueError(f"Invalid stream id: {stream_id!r}")
        return self.directory / f"{stream_id}{STREAM_FILE_SUFFIX}"

    async def append(self, event: Event[Any]) -> None:
        """Append an event to its stream file with version checking.

        Raises:
            ConcurrencyError: If the event does not directly follow the
                stream's current version.
            CorruptHistoryError: If the existing file is not valid UTF-8.
            StoreUnavailableError: If the file cannot be written.
            ValueError: If the stream id is not a valid file name.
        """
        path = self.stream_path(event.stream_id)
        line = json.dumps(self._encode(event), separators=(",", ":"))

        try:
            await asyncio.to_thread(self._append_line, path, event, line)
        except UnicodeDecodeError as e:
            raise CorruptHistoryError(event.stream_id, f"undecodable record: {e}") from e
        except OSError as e:
            raise StoreUnavailableError(
                f"Failed to append to stream {event.stream_id}: {e}"
            ) from e

        LOGGER.debug(
            "Event appended",
            extra={"stream_id": event.stream_id, "version": event.version, "type": event.type},
        )

    async def read_stream(self, stream_id: str) -> list[Event[Any]]:
        """Read and decode every event of a stream in version order.

        Returns:
            The decoded events, or an empty list if the stream file does
            not exist.

        Raises:
            CorruptHistoryError: If a record cannot be decoded, belongs to
                another stream, has an unknown type or breaks the version
                sequence.
            StoreUnavailableError: If the file cannot be read.
        """
        path = self.stream_path(stream_id)
        try:
            lines = await asyncio.to_thread(self._read_lines, path)
        except UnicodeDecodeError as e:
            raise CorruptHistoryError(stream_id, f"undecodable record: {e}") from e
        except OSError as e:
            raise StoreUnavailableError(f"Failed to read stream {stream_id}: {e}") from e

        events = []
        for line in lines:
            event = self._decode(stream_id, line)
            if event.version != len(events) + 1:
                raise CorruptHistoryError(
                    stream_id, f"expected version {len(events) + 1}, got {event.version}"
                )
            events.append(event)
        return events

    async def list_streams(self) -> list[str]:
        """List the streams that have a file in the store directory."""
        try:
            paths = await asyncio.to_thread(self._stream_files)
        except OSError as e:
            raise StoreUnavailableError(f"Failed to list streams in {self.directory}: {e}") from e
        return [path.name.removesuffix(STREAM_FILE_SUFFIX) for path in paths]

    def _stream_files(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and path.name.endswith(STREAM_FILE_SUFFIX)
        )

    @staticmethod
    def _read_lines(path: Path) -> list[str]:
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as f:
            return [line for line in f.read().splitlines() if line.strip()]

    @staticmethod
    def _append_line(path: Path, event: Event[Any], line: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a+", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.seek(0)
                current_version = sum(1 for existing in f.read().splitlines() if existing.strip())
                if event.version != current_version + 1:
                    raise ConcurrencyError(event.stream_id, event.version - 1, current_version)
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    @staticmethod
    def _encode(event: Event[Any]) -> dict[str, Any]:
        return {
            "id": str(event.id),
            "stream_id": event.stream_id,
            "type": event.type,
            "version": event.version,
            "timestamp": event.timestamp.isoformat(),
            "correlation_id": str(event.correlation_id) if event.correlation_id else None,
            "causation_id": str(event.causation_id) if event.causation_id else None,
            "payload": event.payload.model_dump(mode="json", exclude_none=True),
        }

    def _decode(self, stream_id: str, line: str) -> Event[Any]:
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise CorruptHistoryError(stream_id, f"undecodable record: {e}") from e

        if not isinstance(record, dict):
            raise CorruptHistoryError(stream_id, "record is not an object")
        if record.get("stream_id") != stream_id:
            raise CorruptHistoryError(
                stream_id, f"record belongs to stream {record.get('stream_id')}"
            )

        payload_type = self.registry.resolve(stream_id, str(record.get("type")))
        try:
            return Event(
                id=ULID.from_str(record["id"]),
                stream_id=stream_id,
                version=record["version"],
                timestamp=record["timestamp"],
                payload=payload_type.model_validate(record["payload"]),
                correlation_id=(
                    ULID.from_str(record["correlation_id"])
                    if record.get("correlation_id")
                    else None
                ),
                causation_id=(
                    ULID.from_str(record["causation_id"]) if record.get("causation_id") else None
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptHistoryError(stream_id, f"invalid record: {e}") from e
