"""Read-side views of the solution context recorded for a project."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class ArchitectureView(BaseModel):
    description: str
    organization: str = ""
    patterns: list[str] = Field(default_factory=list)
    principles: list[str] = Field(default_factory=list)


class ComponentView(BaseModel):
    component_id: str
    name: str
    responsibility: str = ""


class DecisionView(BaseModel):
    decision_id: str
    title: str
    rationale: str = ""


class InvariantView(BaseModel):
    invariant_id: str
    title: str
    description: str = ""


class GuidelineView(BaseModel):
    guideline_id: str
    title: str
    description: str = ""


class SolutionContextView(BaseModel):
    """Everything recorded about how the solution is built.

    Attributes:
        architecture: The architecture definition, if one was recorded.
        components: System parts and their responsibilities.
        decisions: Design choices with their rationale.
        invariants: Non-negotiable constraints.
        guidelines: Coding standards and practices.
    """

    architecture: ArchitectureView | None = None
    components: list[ComponentView] = Field(default_factory=list)
    decisions: list[DecisionView] = Field(default_factory=list)
    invariants: list[InvariantView] = Field(default_factory=list)
    guidelines: list[GuidelineView] = Field(default_factory=list)


class SolutionContextReader(ABC):
    """Read port returning the aggregated solution context."""

    @abstractmethod
    async def get_solution_context(self) -> SolutionContextView: ...
