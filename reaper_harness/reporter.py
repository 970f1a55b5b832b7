"""
reaper_harness.reporter - Exit Reporter

Maps a RunOutcome to process-visible behavior.

    Mode         Outcome   Behavior
    AUTOMATED    success   banner on stdout, exit 0
    AUTOMATED    failure   banner + reason on stderr, exit 172
    INTERACTIVE  success   banner on stdout, host keeps running
    INTERACTIVE  failure   raise IntegrationTestFailed into the host

172 is outside the range used by shells for signal deaths (128 + n for
common signals) and by generic crashes, so a driver can tell a failed
test from a crashed host. It is part of the external interface and is not
configurable.
"""

import logging
import os
import sys
from enum import Enum

from .errors import IntegrationTestFailed
from .outcome import RunOutcome

logger = logging.getLogger(__name__)

SUCCESS_EXIT_CODE = 0
FAILURE_EXIT_CODE = 172

SUCCESS_BANNER = "From REAPER: integration test executed successfully"
FAILURE_PREFIX = "From REAPER: integration test failed: "


class RunMode(Enum):
    """How the harness reports results."""
    AUTOMATED = "automated"      # CI: always ends with a process exit
    INTERACTIVE = "interactive"  # human at the host: failures raise in-host


def failure_banner(reason: str) -> str:
    return f"{FAILURE_PREFIX}{reason}"


def _error_stream():
    """stderr, or the interpreter's original stderr when the host replaced it with None."""
    return sys.stderr if sys.stderr is not None else sys.__stderr__


def terminate(code: int) -> None:
    """
    End the host process immediately with the given exit code.

    os._exit is used because SystemExit raised inside a host callback is
    swallowed by the host's embedded interpreter.
    """
    logger.info(f"Terminating host process with exit code {code}")
    logging.shutdown()
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()
    os._exit(code)


def report_outcome(outcome: RunOutcome, mode: RunMode) -> None:
    """
    Act on a run outcome according to the run mode.

    Raises:
        IntegrationTestFailed: In interactive mode when the run failed
    """
    if outcome.success:
        print(SUCCESS_BANNER, flush=True)
        if mode is RunMode.AUTOMATED:
            terminate(SUCCESS_EXIT_CODE)
        return

    banner = failure_banner(outcome.reason)
    if mode is RunMode.AUTOMATED:
        stream = _error_stream()
        if stream is not None:
            print(banner, file=stream, flush=True)
        else:
            logger.error(banner)
        terminate(FAILURE_EXIT_CODE)
        return

    logger.error(banner)
    raise IntegrationTestFailed(outcome.reason, banner)
