"""Payloads of the events in a goal's stream.

GoalAdded and GoalUpdated are the only payloads a goal stream may contain.
"""

from pydantic import BaseModel, Field


class InvariantRef(BaseModel):
    title: str
    description: str = ""


class GuidelineRef(BaseModel):
    title: str
    description: str = ""


class DependencyRef(BaseModel):
    consumer: str
    provider: str


class ComponentRef(BaseModel):
    name: str
    responsibility: str = ""


class ArchitectureRef(BaseModel):
    description: str
    organization: str = ""
    patterns: list[str] = Field(default_factory=list)
    principles: list[str] = Field(default_factory=list)


class EmbeddedContext(BaseModel):
    """Solution context copied into a goal so it can be worked on in isolation.

    Every field is optional. A goal only carries an embedded context when at
    least one of them is set.
    """

    relevant_invariants: list[InvariantRef] | None = None
    relevant_guidelines: list[GuidelineRef] | None = None
    relevant_dependencies: list[DependencyRef] | None = None
    relevant_components: list[ComponentRef] | None = None
    architecture: ArchitectureRef | None = None
    files_to_be_created: list[str] | None = None
    files_to_be_changed: list[str] | None = None
    next_goal_id: str | None = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.__dict__.values())


class GoalAdded(BaseModel):
    objective: str
    success_criteria: list[str]
    scope_in: list[str] = Field(default_factory=list)
    scope_out: list[str] = Field(default_factory=list)
    boundaries: list[str] = Field(default_factory=list)
    embedded_context: EmbeddedContext | None = None


class GoalUpdated(BaseModel):
    """Partial update of a goal. Fields left as None are unchanged."""

    objective: str | None = None
    success_criteria: list[str] | None = None
    scope_in: list[str] | None = None
    scope_out: list[str] | None = None
    boundaries: list[str] | None = None
    embedded_context: EmbeddedContext | None = None
    next_goal_id: str | None = None
    previous_goal_id: str | None = None

    def changed_fields(self) -> list[str]:
        return [name for name, value in self.__dict__.items() if value is not None]
