"""
reaper_harness.errors - Harness Error Taxonomy

Error Categories:
    - StepFailure: a test step reports a descriptive failure
    - SetupMisuse: the global harness is used before setup() (programmer error)
    - HostRegistrationError: the host refused a command/hook/surface registration
    - IntegrationTestFailed: a run failed (raised in interactive mode and by the driver)
    - HostProcessError: the host process exited through an unexpected path

Contained crashes are not an exception type; the step runner converts them
into a failed RunOutcome.
"""

from typing import Any, Optional


class HarnessError(Exception):
    """Base class for all harness errors."""


class StepFailure(HarnessError):
    """Raised by a step operation to fail the run with a reason."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SetupMisuse(HarnessError):
    """The global harness was accessed before setup() completed."""


class HostRegistrationError(HarnessError):
    """The host refused a registration request."""


class IntegrationTestFailed(HarnessError):
    """An integration test run ended in failure."""

    def __init__(self, reason: str, message: Optional[str] = None, result: Any = None):
        super().__init__(message or reason)
        self.reason = reason
        # DriverResult with the captured host output, when raised by the driver
        self.result = result


class HostProcessError(HarnessError):
    """The host process ended with an exit code the harness never produces."""

    def __init__(self, message: str, returncode: Optional[int] = None, result: Any = None):
        super().__init__(message)
        self.returncode = returncode
        self.result = result
