from dataclasses import dataclass

from ...domain.exceptions import ConfigurationError
from ...domain.goals import GoalErrorMessages
from ..events import EventReader, EventWriter
from .projection import GoalFinder


@dataclass(frozen=True)
class GoalChainingConfig:
    """Collaborators needed to link a new goal to its predecessor.

    Chaining reads, rehydrates and updates the previous goal, so it needs
    the event writer and reader plus a finder to check the goal exists.
    Validated once at construction: an enabled configuration with a
    missing collaborator is rejected immediately instead of failing the
    first chained command.

    Examples:
        >>> GoalChainingConfig(enabled=True, writer=store, reader=store, finder=projection)
        >>> GoalChainingConfig.disabled()
    """

    enabled: bool
    writer: EventWriter | None = None
    reader: EventReader | None = None
    finder: GoalFinder | None = None

    def __post_init__(self) -> None:
        collaborators = (self.writer, self.reader, self.finder)
        if self.enabled and any(c is None for c in collaborators):
            raise ConfigurationError(GoalErrorMessages.CHAINING_NOT_CONFIGURED)

    @classmethod
    def disabled(cls) -> "GoalChainingConfig":
        return cls(enabled=False)
