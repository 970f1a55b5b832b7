"""
reaper_harness.driver - External Test Driver

Runs on the outside of the host: launches the host executable with the
automated-mode environment variable set and turns its exit status back
into a Python result.

    exit 0    -> DriverResult (all steps passed)
    exit 172  -> IntegrationTestFailed (a step failed or a crash was contained)
    other     -> HostProcessError (the host died some other way)

The host's stdout and stderr are echoed line by line while it runs and
captured for the result. There is deliberately no timeout: a hung step
hangs the host, and the driver waits for it.
"""

import logging
import os
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, List, Mapping, Optional, Sequence

from .config import CONFIG_ENV_VAR, DEFAULT_MODE_ENV_VAR
from .errors import HostProcessError, IntegrationTestFailed
from .reporter import FAILURE_EXIT_CODE, FAILURE_PREFIX, SUCCESS_EXIT_CODE, failure_banner

logger = logging.getLogger(__name__)

UNKNOWN_REASON = "unknown failure (no failure banner on stderr)"


@dataclass
class DriverResult:
    """Captured result of one host run."""
    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    env: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def passed(self) -> bool:
        return self.returncode == SUCCESS_EXIT_CODE


def build_environment(
    env_var: Optional[str] = None,
    base_env: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Dict[str, str]:
    """Environment for the host process with automated mode switched on."""
    env = dict(os.environ if base_env is None else base_env)
    env[env_var or DEFAULT_MODE_ENV_VAR] = "1"
    if config_path is not None:
        env[CONFIG_ENV_VAR] = str(config_path)
    return env


def parse_failure_reason(stderr: str) -> Optional[str]:
    """Pull the reason out of the last failure banner on stderr."""
    for line in reversed(stderr.splitlines()):
        if line.startswith(FAILURE_PREFIX):
            return line[len(FAILURE_PREFIX):]
    return None


def _pump(source: IO[str], sink_name: str, chunks: List[str], echo: bool) -> None:
    """Copy lines from a host pipe into chunks, echoing them as they arrive."""
    with source:
        for line in iter(source.readline, ""):
            chunks.append(line)
            if echo:
                # Looked up per line so capture tools that swap sys.stdout still see it
                sink = getattr(sys, sink_name)
                if sink is not None:
                    sink.write(line)
                    sink.flush()


def run_integration_test(
    host_command: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
    env_var: Optional[str] = None,
    config_path: Optional[Path] = None,
    echo: bool = True,
) -> DriverResult:
    """
    Launch the host in automated mode and wait for it to exit.

    Args:
        host_command: Host executable followed by its arguments
        env: Base environment (defaults to the current process environment)
        cwd: Working directory for the host
        env_var: Mode environment variable (defaults to RUN_REAPER_INTEGRATION_TEST)
        config_path: Harness config file forwarded to the plugin side
        echo: Stream the host's stdout/stderr onto ours while it runs

    Returns:
        DriverResult when every step passed

    Raises:
        IntegrationTestFailed: Host exited with 172 (the DriverResult is on .result)
        HostProcessError: Host could not be started or exited with another code
    """
    command = [str(part) for part in host_command]
    if not command:
        raise ValueError("host_command must not be empty")

    run_env = build_environment(env_var, env, config_path)
    logger.info(f"Launching host: {' '.join(command)}")

    try:
        process = subprocess.Popen(
            command,
            env=run_env,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except OSError as e:
        raise HostProcessError(f"Can not start host '{command[0]}': {e}") from e

    stdout_chunks: List[str] = []
    stderr_chunks: List[str] = []
    pumps = [
        threading.Thread(
            target=_pump, args=(process.stdout, "stdout", stdout_chunks, echo), daemon=True
        ),
        threading.Thread(
            target=_pump, args=(process.stderr, "stderr", stderr_chunks, echo), daemon=True
        ),
    ]
    for pump in pumps:
        pump.start()

    returncode = process.wait()
    for pump in pumps:
        pump.join()

    result = DriverResult(
        command=command,
        returncode=returncode,
        stdout="".join(stdout_chunks),
        stderr="".join(stderr_chunks),
        env=run_env,
    )

    if result.returncode == SUCCESS_EXIT_CODE:
        logger.info("Host reported success")
        return result

    if result.returncode == FAILURE_EXIT_CODE:
        reason = parse_failure_reason(result.stderr) or UNKNOWN_REASON
        logger.error(f"Host reported test failure: {reason}")
        raise IntegrationTestFailed(reason, failure_banner(reason), result=result)

    logger.error(f"Host exited with unexpected code {result.returncode}")
    raise HostProcessError(
        f"Host exited with code {result.returncode} instead of "
        f"{SUCCESS_EXIT_CODE} or {FAILURE_EXIT_CODE}",
        returncode=result.returncode,
        result=result,
    )
