"""
Tests for the command-line front end
"""

from unittest.mock import patch

import pytest

from reaper_harness import cli
from reaper_harness.errors import HostProcessError, IntegrationTestFailed


class TestRunCommand:
    """`run` subcommand exit codes."""

    def test_pass(self, capsys):
        with patch("reaper_harness.cli.run_integration_test") as mock_run:
            code = cli.main(["run", "--", "reaper", "-new"])

        assert code == 0
        assert mock_run.call_args.args[0] == ["reaper", "-new"]
        assert "PASSED" in capsys.readouterr().out

    def test_failure(self, capsys):
        with patch("reaper_harness.cli.run_integration_test",
                   side_effect=IntegrationTestFailed("X")):
            code = cli.main(["run", "--", "reaper"])

        assert code == 172
        assert "FAILED: X" in capsys.readouterr().out

    def test_host_error(self):
        with patch("reaper_harness.cli.run_integration_test",
                   side_effect=HostProcessError("Host exited with code 139", 139)):
            assert cli.main(["run", "--", "reaper"]) == 1

    def test_options_forwarded(self, tmp_path):
        with patch("reaper_harness.cli.run_integration_test") as mock_run:
            cli.main(["run", "-q", "--env-var", "MY_FLAG", "--cwd", str(tmp_path), "--", "reaper"])

        kwargs = mock_run.call_args.kwargs
        assert kwargs["env_var"] == "MY_FLAG"
        assert kwargs["cwd"] == tmp_path
        assert kwargs["echo"] is False

    def test_env_var_from_config(self, tmp_path):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("mode:\n  env_var: CONFIGURED_FLAG\n")

        with patch("reaper_harness.cli.run_integration_test") as mock_run:
            cli.main(["--config", str(config_file), "run", "--", "reaper"])

        assert mock_run.call_args.kwargs["env_var"] == "CONFIGURED_FLAG"
        assert mock_run.call_args.kwargs["config_path"] == config_file

    def test_driver_env_var_from_config(self, tmp_path):
        """driver.env_var wins over mode.env_var for the launched host."""
        config_file = tmp_path / "harness.yaml"
        config_file.write_text(
            "mode:\n  env_var: CONFIGURED_FLAG\n"
            "driver:\n  env_var: DRIVER_FLAG\n"
        )

        with patch("reaper_harness.cli.run_integration_test") as mock_run:
            cli.main(["--config", str(config_file), "run", "--", "reaper"])

        assert mock_run.call_args.kwargs["env_var"] == "DRIVER_FLAG"

    def test_env_var_option_beats_config(self, tmp_path):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("driver:\n  env_var: DRIVER_FLAG\n")

        with patch("reaper_harness.cli.run_integration_test") as mock_run:
            cli.main(["--config", str(config_file), "run", "--env-var", "CLI_FLAG", "--", "reaper"])

        assert mock_run.call_args.kwargs["env_var"] == "CLI_FLAG"

    def test_missing_host_command(self):
        assert cli.main(["run"]) == 2


class TestMisc:
    """Other commands."""

    def test_config_command_prints_yaml(self, capsys):
        assert cli.main(["config"]) == 0
        assert "RUN_REAPER_INTEGRATION_TEST" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()
