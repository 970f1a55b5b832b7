"""
reaper_harness.registry - Global Test Registry

Owns the single ReaperTest instance for the process. setup() builds it
during the host's plugin-load callback; get()/get_mut() hand it out
afterwards. The instance is dropped by a destroy hook registered with the
host, which runs when the plugin is unloaded.

Usage (inside the plugin entry point):

    from reaper_harness import setup, TestStep

    def hello_world(harness):
        harness.reaper.show_console_msg("Hello world!")

    def plugin_main(context):
        harness = setup(context, "test_action")
        harness.push_test_step(TestStep("Hello World!", hello_world))
"""

import faulthandler
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from .action_hook import ActionHook
from .config import (
    configure_logging,
    get_action_description,
    get_mode_env_var,
    load_config,
)
from .errors import HostRegistrationError, SetupMisuse
from .host import HostSession, PluginContext
from .outcome import RunOutcome
from .reporter import RunMode, report_outcome
from .runner import StepRunner
from .steps import StepOperation, StepRegistry, TestStep
from .surface import ReaperTestSurface

logger = logging.getLogger(__name__)


class ReaperTest:
    """
    The test harness living inside the host process.

    Holds the host handles (acquired once, never reacquired), the action
    hook, the ordered steps and the run mode.
    """

    def __init__(
        self,
        low: Any,
        session: HostSession,
        mode: RunMode,
        config: Optional[Dict[str, Any]] = None,
        hook_command_installed: bool = False,
    ):
        self._low = low
        self._session = session
        self._reaper = session.reaper
        self._mode = mode
        self._config = config or {}
        self._action_hook: Optional[ActionHook] = None
        self._steps = StepRegistry()
        self._surface: Optional[ReaperTestSurface] = None
        self._running = False
        # The host keeps hook commands for the life of the process
        self._hook_command_installed = hook_command_installed

    # =========================================================================
    # Host handles
    # =========================================================================

    @property
    def low(self) -> Any:
        """Low-level host function table."""
        return self._low

    @property
    def session(self) -> HostSession:
        return self._session

    @property
    def reaper(self) -> Any:
        """High-level host handle, the one most steps want."""
        return self._reaper

    # =========================================================================
    # State
    # =========================================================================

    @property
    def mode(self) -> RunMode:
        return self._mode

    @property
    def is_integration_test(self) -> bool:
        return self._mode is RunMode.AUTOMATED

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def action_hook(self) -> Optional[ActionHook]:
        return self._action_hook

    @property
    def surface(self) -> Optional[ReaperTestSurface]:
        return self._surface

    @property
    def steps(self) -> Tuple[TestStep, ...]:
        return self._steps.snapshot()

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # Author API
    # =========================================================================

    def push_test_step(self, step: TestStep) -> None:
        self._steps.push(step)

    def step(self, name: str) -> Callable[[StepOperation], StepOperation]:
        """Decorator form of push_test_step."""
        def decorator(operation: StepOperation) -> StepOperation:
            self.push_test_step(TestStep(name, operation))
            return operation
        return decorator

    def register_action(self, name: str, description: Optional[str] = None) -> int:
        """
        Register a host action that triggers the test run.

        Args:
            name: Command name to allocate an id for
            description: Text shown in the host's action list (defaults to name)

        Returns:
            The host-assigned command id

        Raises:
            HostRegistrationError: If the host refuses the command or the action
        """
        hook = self._ensure_action_hook()
        try:
            command_id = self._session.add_command_id(name)
            self._session.add_action(command_id, description or name)
        except Exception as e:
            raise HostRegistrationError(f"Can not register test action '{name}': {e}") from e

        hook.add(command_id)
        logger.info(f"Registered test action '{name}' as command {command_id}")
        return command_id

    @property
    def hook_command_installed(self) -> bool:
        return self._hook_command_installed

    def _ensure_action_hook(self) -> ActionHook:
        if self._action_hook is None:
            if not self._hook_command_installed:
                try:
                    self._session.add_hook_command(ActionHook.call)
                except Exception as e:
                    raise HostRegistrationError(f"Can not register hook command: {e}") from e
                self._hook_command_installed = True
                logger.debug("Installed hook command")
            else:
                logger.debug("Reusing hook command installed by an earlier setup attempt")
            self._action_hook = ActionHook()
        return self._action_hook

    def _install_surface(self) -> None:
        surface = ReaperTestSurface()
        try:
            self._session.add_control_surface(surface)
        except Exception as e:
            raise HostRegistrationError(f"Can not register test control surface: {e}") from e
        self._surface = surface
        logger.info("Installed deferred trigger surface")

    # =========================================================================
    # Running
    # =========================================================================

    def test(self) -> Optional[RunOutcome]:
        """
        Run every step and report the outcome.

        In automated mode this does not return: the reporter ends the
        process. A trigger arriving while a run is in progress (a step that
        invokes the test action itself) is ignored and returns None.

        Raises:
            IntegrationTestFailed: In interactive mode when a step failed
        """
        if self._running:
            logger.warning("Test run already in progress, ignoring trigger")
            return None

        self._running = True
        try:
            outcome = StepRunner(self._steps).run(self)
        finally:
            self._running = False

        report_outcome(outcome, self._mode)
        return outcome

    def __repr__(self) -> str:
        actions = self._action_hook.actions if self._action_hook else ()
        return f"ReaperTest(mode={self._mode.value}, steps={self._steps.names()!r}, actions={actions!r})"


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

class _InstanceCell:
    """One-time initialization cell for the process-wide harness."""

    def __init__(self):
        self._lock = threading.Lock()
        self._initialized = False
        self._value: Optional[ReaperTest] = None
        # Survives failed setup attempts; the host never removes a hook command
        self.hook_command_installed = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def value(self) -> Optional[ReaperTest]:
        return self._value

    def get_or_init(self, factory: Callable[[], ReaperTest]) -> Optional[ReaperTest]:
        """Run factory once; later calls return whatever the cell holds."""
        with self._lock:
            if not self._initialized:
                self._value = factory()
                self._initialized = True
            return self._value

    def clear(self) -> None:
        self._value = None


_cell = _InstanceCell()


def _enable_fault_diagnostics() -> None:
    if faulthandler.is_enabled():
        return
    try:
        faulthandler.enable()
    except (RuntimeError, ValueError, AttributeError) as e:
        # Hosts may run without a usable stderr file descriptor
        logger.debug(f"faulthandler unavailable: {e}")


def _resolve_mode(config: Dict[str, Any]) -> RunMode:
    env_var = get_mode_env_var(config)
    return RunMode.AUTOMATED if os.environ.get(env_var) is not None else RunMode.INTERACTIVE


def _build(
    context: PluginContext,
    action_name: str,
    config: Dict[str, Any],
    mode: RunMode,
) -> ReaperTest:
    low = context.load_api()
    session = context.create_session(low)
    logger.info(f"Setting up REAPER test harness in {mode.value} mode")

    instance = ReaperTest(
        low, session, mode, config,
        hook_command_installed=_cell.hook_command_installed,
    )
    try:
        instance.register_action(action_name, get_action_description(config, action_name))
        if mode is RunMode.AUTOMATED:
            instance._install_surface()
    finally:
        _cell.hook_command_installed = instance.hook_command_installed

    context.register_destroy_hook(teardown)
    return instance


def _abort_automated_setup(error: Exception) -> None:
    """End the host process with the failure exit code (172) when an automated build fails."""
    logger.error(f"Harness setup failed in automated mode: {error}")
    report_outcome(RunOutcome.failed(f"harness setup failed: {error}"), RunMode.AUTOMATED)


def setup(
    context: PluginContext,
    action_name: str,
    config_path: Optional[Path] = None,
) -> ReaperTest:
    """
    Build the process-wide harness and make it available globally.

    Call once from the plugin entry point. Later calls do nothing and
    return the existing instance.

    Args:
        context: The host's plugin context
        action_name: Name of the default action that triggers a run
        config_path: Optional YAML config (defaults to REAPER_HARNESS_CONFIG or harness.yaml)

    Returns:
        The global ReaperTest

    Raises:
        HostRegistrationError: If the host refuses a registration (in automated
            mode the process is ended with the failure exit code first)
        SetupMisuse: If called again after the harness was torn down
    """
    if _cell.initialized:
        logger.debug("setup() called again, returning existing harness")
        return get_mut()

    def factory() -> ReaperTest:
        config = load_config(config_path)
        configure_logging(config)
        _enable_fault_diagnostics()
        mode = _resolve_mode(config)
        try:
            return _build(context, action_name, config, mode)
        except Exception as e:
            if mode is RunMode.AUTOMATED:
                _abort_automated_setup(e)
            raise

    _cell.get_or_init(factory)
    return get_mut()


def get() -> ReaperTest:
    """
    Give access to the global harness.

    Raises:
        SetupMisuse: If setup() has not completed (or the harness was torn down)
    """
    instance = _cell.value
    if instance is None:
        raise SetupMisuse("call `setup(context, action_name)` before using `get()`")
    return instance


def get_mut() -> ReaperTest:
    """
    Same instance as get(). Kept as a separate entry point for code that
    mutates the harness (hook and surface callbacks).
    """
    instance = _cell.value
    if instance is None:
        raise SetupMisuse("call `setup(context, action_name)` before using `get_mut()`")
    return instance


def teardown() -> None:
    """Drop the global harness. Registered as the host destroy hook."""
    if _cell.value is not None:
        logger.info("Tearing down REAPER test harness")
    _cell.clear()


def is_available() -> bool:
    return _cell.value is not None
