"""StepSequence - ordered steps of a flow and the forward-progress rule."""

from typing import Any, Dict, Iterator, List, Optional, Sequence

from .errors import OutOfRangeError
from .schema import Step


def is_empty_answer(value: Any) -> bool:
    """Return True for answers that do not count as given (None, blank text)."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class StepSequence:
    """
    Ordered content steps of a flow.

    Holds configuration only, so one instance can be shared read-only by
    any number of flow controllers.
    """

    def __init__(self, steps: Sequence[Step]):
        self._steps: List[Step] = list(steps)
        self._index_by_id: Dict[str, int] = {step.id: i for i, step in enumerate(self._steps)}

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def step_count(self) -> int:
        """Number of content steps, excluding the loading/results pseudo-steps."""
        return len(self._steps)

    def step_at(self, index: int) -> Step:
        """
        Return the step at a position.

        Raises:
            OutOfRangeError: If index is negative or >= step_count()
        """
        if index < 0 or index >= len(self._steps):
            raise OutOfRangeError(f"Step index {index} out of range 0..{len(self._steps) - 1}")
        return self._steps[index]

    def index_of(self, step_id: str) -> Optional[int]:
        """Return the position of a step id, or None when unknown."""
        return self._index_by_id.get(step_id)

    def step_by_id(self, step_id: str) -> Step:
        """
        Find a step by ID.

        Raises:
            KeyError: If no step has this id
        """
        index = self._index_by_id.get(step_id)
        if index is None:
            raise KeyError(f"Unknown step id: {step_id}")
        return self._steps[index]

    def is_satisfied(self, index: int, answers: Dict[str, Any]) -> bool:
        """
        Check whether the step at index allows moving forward.

        Required steps need a non-empty answer under their id; other
        steps are always satisfied.
        """
        step = self.step_at(index)
        if not step.required:
            return True
        return not is_empty_answer(answers.get(step.id))
