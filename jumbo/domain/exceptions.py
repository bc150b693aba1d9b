"""Exceptions raised by the event-sourcing core.

Every error derives from JumboError so callers can report any failed
command uniformly. Nothing in the core catches these and carries on.
"""


class JumboError(Exception):
    """Base class for all errors raised by jumbo."""


class ValidationError(JumboError):
    """Raised when a command is missing a required field or carries an invalid one.

    Raised before anything is appended, so the caller can retry with
    corrected input.
    """

    def __init__(self, field: str | None, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(JumboError):
    """Raised when a referenced aggregate does not exist."""

    def __init__(self, entity_id: str, message: str | None = None):
        super().__init__(message or f"Not found: {entity_id}")
        self.entity_id = entity_id


class ConfigurationError(JumboError):
    """Raised when required collaborators were not wired at composition time."""


class ConcurrencyError(JumboError):
    """Raised when an optimistic concurrency check fails on append.

    The event's version did not directly follow the stream's current
    version, meaning the stream changed after it was read. Callers should
    reread the stream and retry; the core never retries on its own.
    """

    def __init__(self, stream_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Expected stream {stream_id} at version {expected_version}, "
            f"got {actual_version}"
        )
        self.stream_id = stream_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class StoreUnavailableError(JumboError):
    """Raised when the event store cannot be read or written."""


class CorruptHistoryError(JumboError):
    """Raised when a stream cannot be replayed.

    Covers unknown event types, version gaps or reordering, events that
    belong to another stream and records that cannot be decoded.
    """

    def __init__(self, stream_id: str, message: str):
        super().__init__(f"Corrupt history for stream {stream_id}: {message}")
        self.stream_id = stream_id
