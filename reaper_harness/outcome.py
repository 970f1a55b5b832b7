"""
reaper_harness.outcome - Run Outcome

A RunOutcome is produced exactly once per step-runner invocation. There is
no partial success: either every step passed, or the run stopped at the
first failure.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RunOutcome:
    """Result of one pass over the step registry."""
    success: bool
    reason: Optional[str] = None

    # Name of the step that stopped the run (None on success)
    failed_step: Optional[str] = None

    # Number of step operations that were invoked
    steps_run: int = 0

    @classmethod
    def passed(cls, steps_run: int = 0) -> "RunOutcome":
        return cls(success=True, steps_run=steps_run)

    @classmethod
    def failed(
        cls,
        reason: str,
        failed_step: Optional[str] = None,
        steps_run: int = 0,
    ) -> "RunOutcome":
        return cls(
            success=False,
            reason=reason,
            failed_step=failed_step,
            steps_run=steps_run,
        )

    def __bool__(self) -> bool:
        return self.success
