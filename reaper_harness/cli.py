#!/usr/bin/env python3
"""
REAPER Test Harness CLI
=======================
Command-line front end for the external test driver.

Commands:
    run        - Launch the host in automated mode and report the result
    config     - Show the resolved harness configuration

Usage:
    python -m reaper_harness run -- reaper -new -nosplash
    python -m reaper_harness run --env-var MY_FLAG -- /opt/REAPER/reaper
    python -m reaper_harness config --config ci/harness.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .config import get_driver_env_var, load_config
from .driver import run_integration_test
from .errors import HostProcessError, IntegrationTestFailed
from .reporter import FAILURE_EXIT_CODE, SUCCESS_EXIT_CODE

logger = logging.getLogger(__name__)


# =============================================================================
# Color Output Helpers
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"


def colored(text: str, *colors: str) -> str:
    """Apply colors to text."""
    if not sys.stdout.isatty():
        return text
    return "".join(colors) + text + Colors.RESET


def success(text: str) -> str:
    return colored(text, Colors.GREEN)


def error(text: str) -> str:
    return colored(text, Colors.RED)


# =============================================================================
# Command Handlers
# =============================================================================

def cmd_run(args: argparse.Namespace) -> int:
    """Run the host and translate its outcome into our exit code."""
    command = list(args.host_command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print(error("Error: host command required (after --)"))
        return 2

    config = load_config(args.config)
    env_var = args.env_var or get_driver_env_var(config)

    try:
        run_integration_test(
            command,
            cwd=args.cwd,
            env_var=env_var,
            config_path=args.config,
            echo=not args.quiet,
        )
    except IntegrationTestFailed as e:
        print(error(f"FAILED: {e.reason}"))
        return FAILURE_EXIT_CODE
    except HostProcessError as e:
        print(error(f"HOST ERROR: {e}"))
        return 1

    print(success("PASSED"))
    return SUCCESS_EXIT_CODE


def cmd_config(args: argparse.Namespace) -> int:
    """Print the resolved configuration as YAML."""
    config = load_config(args.config)
    print(yaml.safe_dump(config, default_flow_style=False, sort_keys=True), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="REAPER Test Harness CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s run -- reaper -new            Run the tests inside a fresh host
    %(prog)s run -q -- reaper              Same, without replaying host output
    %(prog)s config                        Show the resolved configuration
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to harness configuration file",
        default=None
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run the host in automated mode")
    run_parser.add_argument("--env-var", default=None,
                            help="Environment variable that selects automated mode")
    run_parser.add_argument("--cwd", type=Path, default=None,
                            help="Working directory for the host")
    run_parser.add_argument("-q", "--quiet", action="store_true",
                            help="Don't replay host stdout/stderr")
    run_parser.add_argument("host_command", nargs=argparse.REMAINDER,
                            help="Host executable and arguments (after --)")

    subparsers.add_parser("config", help="Show resolved configuration")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "run": cmd_run,
        "config": cmd_config,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
