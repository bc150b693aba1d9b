from .context import SolutionContextReader


class UnprimedBrownfieldQualifier:
    """Decides whether an existing project still needs its knowledge primed.

    A brownfield project is unprimed when it has been added but no solution
    context has been recorded for it yet. It counts as primed as soon as
    any of the following exists:

    - an architecture definition
    - at least one component
    - at least one decision
    - at least one invariant
    - at least one guideline
    """

    def __init__(self, reader: SolutionContextReader):
        self.reader = reader

    async def is_unprimed(self) -> bool:
        context = await self.reader.get_solution_context()
        is_primed = (
            context.architecture is not None
            or bool(context.components)
            or bool(context.decisions)
            or bool(context.invariants)
            or bool(context.guidelines)
        )
        return not is_primed
