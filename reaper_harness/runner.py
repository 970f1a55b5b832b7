"""
reaper_harness.runner - Step Runner

Executes the registered steps strictly in order inside a crash-containment
boundary and produces exactly one RunOutcome per call.

Failure normalization:
    - StepFailure / AssertionError  -> Failure(<step's reason>)
    - any other Exception          -> Failure("host crashed")

Coverage gap: the boundary only sees exceptions raised on the calling
thread. A fault that kills the interpreter (a segfault inside host code,
heap corruption, os._exit from a step) never reaches it. faulthandler is
enabled at setup so such faults at least leave a traceback on stderr.
SystemExit and KeyboardInterrupt are not contained either.
"""

import logging
from typing import TYPE_CHECKING, Iterable

from .errors import StepFailure
from .outcome import RunOutcome
from .steps import TestStep

if TYPE_CHECKING:
    from .registry import ReaperTest

logger = logging.getLogger(__name__)

START_BANNER = "# Testing REAPER extension\n"
STEP_MARKER = "Testing step: {name}"
CRASH_REASON = "host crashed"


def failure_reason(exc: BaseException) -> str:
    """Text carried by a failed outcome for a reported step failure."""
    if isinstance(exc, StepFailure):
        return exc.reason
    return str(exc) or type(exc).__name__


class StepRunner:
    """
    Runs a fixed sequence of steps against a harness.

    The sequence is captured at construction, so steps pushed while a run
    is in progress are not picked up by that run.
    """

    def __init__(self, steps: Iterable[TestStep]):
        self._steps = tuple(steps)

    def run(self, harness: "ReaperTest") -> RunOutcome:
        """
        Execute every step in order, stopping at the first failure.

        Args:
            harness: Passed to each step operation

        Returns:
            RunOutcome for this run
        """
        print(START_BANNER, flush=True)
        logger.info(f"Starting test run ({len(self._steps)} steps)")

        steps_run = 0
        current = None
        try:
            for step in self._steps:
                current = step
                print(STEP_MARKER.format(name=step.name), flush=True)
                logger.info(f"Running step {steps_run + 1}/{len(self._steps)}: {step.name}")
                steps_run += 1
                step.operation(harness)
        except (StepFailure, AssertionError) as e:
            reason = failure_reason(e)
            logger.warning(f"Step '{current.name}' failed: {reason}")
            return RunOutcome.failed(reason, failed_step=current.name, steps_run=steps_run)
        except Exception:
            logger.exception(f"Step '{current.name}' crashed")
            return RunOutcome.failed(CRASH_REASON, failed_step=current.name, steps_run=steps_run)

        logger.info(f"All {steps_run} steps passed")
        return RunOutcome.passed(steps_run=steps_run)
