"""
reaper_harness.host - Host Capability Protocols

This module declares the slice of the host API the harness consumes. The
harness never implements these; the plugin-loading layer hands it objects
that satisfy them.

Capabilities:
    - PluginContext: produced by the host's plugin-load callback
    - HostSession: command registration, hook-command dispatch, poll registration
    - ControlSurface: objects the host polls once per processing cycle
"""

from typing import Any, Callable, Protocol, runtime_checkable

# (command_id, flag) -> handled
HookCommand = Callable[[int, int], bool]


@runtime_checkable
class ControlSurface(Protocol):
    """Object whose run() the host invokes once per processing cycle."""

    def run(self) -> None:
        ...


@runtime_checkable
class HostSession(Protocol):
    """
    Registration facilities of a live host session.

    Every add_* method may raise if the host refuses the registration.
    Nothing registered here is ever removed while the process lives.
    """

    # High-level host handle used by test steps
    reaper: Any

    def add_command_id(self, name: str) -> int:
        """Allocate (or look up) the numeric command id bound to name."""
        ...

    def add_action(self, command_id: int, description: str) -> None:
        """Expose command_id in the host's action list, without a key binding."""
        ...

    def add_hook_command(self, callback: HookCommand) -> None:
        """Install a process-wide callback that sees every command invocation."""
        ...

    def add_control_surface(self, surface: ControlSurface) -> None:
        """Register a surface to be polled once per processing cycle."""
        ...


@runtime_checkable
class PluginContext(Protocol):
    """Context passed by the host to the plugin entry point."""

    def load_api(self) -> Any:
        """Return the low-level host function table."""
        ...

    def create_session(self, api: Any) -> HostSession:
        """Open a registration session on top of the low-level API."""
        ...

    def register_destroy_hook(self, hook: Callable[[], None]) -> None:
        """Run hook when the plugin is unloaded or the process ends."""
        ...
