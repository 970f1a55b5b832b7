"""
reaper_harness.action_hook - Command Hook Dispatcher

The host accepts a single process-wide hook-command callback that sees
every command invocation. ActionHook holds the set of command ids that
should start a test run; ActionHook.call is the callback handed to the
host. It looks the harness up through the global registry on every call
instead of holding a reference to it.
"""

import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)


class ActionHook:
    """Command ids that trigger a test run when invoked."""

    def __init__(self):
        self._actions: List[int] = []

    def add(self, command_id: int) -> None:
        if command_id in self._actions:
            logger.debug(f"Command {command_id} already hooked")
            return
        self._actions.append(command_id)
        logger.debug(f"Hooked command {command_id}")

    @property
    def actions(self) -> Tuple[int, ...]:
        return tuple(self._actions)

    def try_handle(self, command_id: int) -> bool:
        """True when command_id belongs to this hook."""
        return command_id in self._actions

    def __contains__(self, command_id: int) -> bool:
        return self.try_handle(command_id)

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"ActionHook(actions={self._actions!r})"

    @staticmethod
    def call(command_id: int, flag: int) -> bool:
        """
        Host hook-command callback.

        Returns:
            True if the command was ours (the host skips default handling),
            False so other listeners still see the command
        """
        from .registry import get_mut, is_available

        # Setup failed or the plugin was torn down; leave the command to the host
        if not is_available():
            return False

        harness = get_mut()
        hook = harness.action_hook
        if hook is None or not hook.try_handle(command_id):
            return False

        logger.info(f"Test action {command_id} invoked (flag={flag})")
        harness.test()
        return True
