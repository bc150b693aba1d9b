"""Solution context read side and the brownfield priming check."""

from .context import (
    ArchitectureView,
    ComponentView,
    DecisionView,
    GuidelineView,
    InvariantView,
    SolutionContextReader,
    SolutionContextView,
)
from .qualifier import UnprimedBrownfieldQualifier

__all__ = [
    "ArchitectureView",
    "ComponentView",
    "DecisionView",
    "GuidelineView",
    "InvariantView",
    "SolutionContextReader",
    "SolutionContextView",
    "UnprimedBrownfieldQualifier",
]
