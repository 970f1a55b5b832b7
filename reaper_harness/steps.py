"""
reaper_harness.steps - Test Steps and the Step Registry

A TestStep pairs a display name with a single-shot operation. Steps are
kept in registration order; the runner executes them in exactly that order
and stops at the first failure.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, List, Tuple

if TYPE_CHECKING:
    from .registry import ReaperTest

logger = logging.getLogger(__name__)

# Returns normally on success; raises StepFailure (or AssertionError) on failure
StepOperation = Callable[["ReaperTest"], None]


@dataclass(frozen=True)
class TestStep:
    """A named test operation."""
    name: str
    operation: StepOperation

    # Keep pytest from collecting this class when authors import it in test modules
    __test__ = False

    def __post_init__(self):
        if not callable(self.operation):
            raise TypeError(f"Operation for step '{self.name}' is not callable")

    def __repr__(self) -> str:
        return self.name


class StepRegistry:
    """
    Ordered sequence of test steps.

    Append-only: steps cannot be removed or reordered once pushed.
    """

    def __init__(self):
        self._steps: List[TestStep] = []

    def push(self, step: TestStep) -> None:
        """Append a step at the end of the sequence."""
        if not isinstance(step, TestStep):
            raise TypeError(f"Expected TestStep, got {type(step).__name__}")
        self._steps.append(step)
        logger.debug(f"Registered test step #{len(self._steps)}: {step.name}")

    def snapshot(self) -> Tuple[TestStep, ...]:
        """Immutable view of the steps in registration order."""
        return tuple(self._steps)

    def names(self) -> List[str]:
        return [step.name for step in self._steps]

    def __iter__(self) -> Iterator[TestStep]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"StepRegistry({self.names()!r})"
