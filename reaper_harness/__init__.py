"""
reaper_harness - In-process integration testing for REAPER extension plugins

The harness registers itself inside the host (an action plus, in automated
mode, a polled control surface), runs the author's steps in order on the
host's own thread, and reports back to whoever launched the host through
the process exit code.

Plugin side:
    - setup(context, action_name): one-time global harness construction
    - get() / get_mut(): access the global harness
    - TestStep / ReaperTest.push_test_step(): register steps
    - StepFailure: raise from a step to fail the run

Driver side:
    - run_integration_test(host_command): launch the host, interpret its exit code
    - python -m reaper_harness run -- <host command>

Environment:
    RUN_REAPER_INTEGRATION_TEST: present -> automated mode (exit 0 / 172)
    REAPER_HARNESS_CONFIG: alternative YAML configuration file
"""

import logging

from .action_hook import ActionHook
from .driver import DriverResult, run_integration_test
from .errors import (
    HarnessError,
    HostProcessError,
    HostRegistrationError,
    IntegrationTestFailed,
    SetupMisuse,
    StepFailure,
)
from .host import ControlSurface, HostSession, PluginContext
from .outcome import RunOutcome
from .registry import ReaperTest, get, get_mut, is_available, setup, teardown
from .reporter import FAILURE_EXIT_CODE, SUCCESS_EXIT_CODE, RunMode
from .runner import CRASH_REASON, StepRunner
from .steps import StepRegistry, TestStep
from .surface import ReaperTestSurface, TriggerState

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'ActionHook',
    'ControlSurface',
    'CRASH_REASON',
    'DriverResult',
    'FAILURE_EXIT_CODE',
    'HarnessError',
    'HostProcessError',
    'HostRegistrationError',
    'HostSession',
    'IntegrationTestFailed',
    'PluginContext',
    'ReaperTest',
    'ReaperTestSurface',
    'RunMode',
    'RunOutcome',
    'SetupMisuse',
    'StepFailure',
    'StepRegistry',
    'StepRunner',
    'SUCCESS_EXIT_CODE',
    'TestStep',
    'TriggerState',
    'get',
    'get_mut',
    'is_available',
    'run_integration_test',
    'setup',
    'teardown',
]
