"""
Tests for configuration loading

These tests validate:
- The shipped harness.yaml
- Merging user files over defaults
- REAPER_HARNESS_CONFIG lookup
- Logging setup
"""

import logging
from unittest.mock import patch

import pytest
import yaml

from reaper_harness import config


class TestLoadConfig:
    """Configuration file loading."""

    def test_shipped_defaults(self):
        """The bundled harness.yaml selects the standard mode flag."""
        loaded = config.load_config()
        assert config.get_mode_env_var(loaded) == "RUN_REAPER_INTEGRATION_TEST"
        assert loaded["logging"]["level"] == "INFO"

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        """A missing file warns and falls back to built-in defaults."""
        with caplog.at_level(logging.WARNING, logger="reaper_harness.config"):
            loaded = config.load_config(tmp_path / "absent.yaml")

        assert loaded == config.DEFAULTS
        assert "not found" in caplog.text

    def test_partial_file_merged_over_defaults(self, tmp_path):
        """Keys not present in the file keep their defaults."""
        path = tmp_path / "harness.yaml"
        path.write_text("logging:\n  level: DEBUG\n")

        loaded = config.load_config(path)

        assert loaded["logging"]["level"] == "DEBUG"
        assert loaded["logging"]["format"] == config.DEFAULTS["logging"]["format"]
        assert loaded["mode"]["env_var"] == config.DEFAULT_MODE_ENV_VAR

    def test_env_var_points_at_file(self, tmp_path, monkeypatch):
        """REAPER_HARNESS_CONFIG replaces the bundled file."""
        path = tmp_path / "ci.yaml"
        path.write_text("mode:\n  env_var: CI_REAPER\n")
        monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))

        assert config.resolve_config_path() == path
        assert config.get_mode_env_var(config.load_config()) == "CI_REAPER"

    def test_non_mapping_root_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            config.load_config(path)

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("mode: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            config.load_config(path)

    def test_defaults_not_mutated(self, tmp_path):
        """Merging never writes into DEFAULTS."""
        path = tmp_path / "harness.yaml"
        path.write_text("mode:\n  env_var: OTHER\n")
        config.load_config(path)
        assert config.DEFAULTS["mode"]["env_var"] == config.DEFAULT_MODE_ENV_VAR


class TestHelpers:
    """Accessor helpers."""

    def test_action_description_falls_back_to_name(self):
        assert config.get_action_description(config.DEFAULTS, "test_action") == "test_action"

    def test_empty_env_var_falls_back(self):
        assert config.get_mode_env_var({"mode": {"env_var": ""}}) == config.DEFAULT_MODE_ENV_VAR

    def test_driver_env_var_defaults_to_mode_env_var(self):
        """An empty driver.env_var follows mode.env_var."""
        loaded = {"mode": {"env_var": "MODE_FLAG"}, "driver": {"env_var": ""}}
        assert config.get_driver_env_var(loaded) == "MODE_FLAG"
        assert config.get_driver_env_var(config.DEFAULTS) == config.DEFAULT_MODE_ENV_VAR

    def test_driver_env_var_overrides(self):
        loaded = {"mode": {"env_var": "MODE_FLAG"}, "driver": {"env_var": "DRIVER_FLAG"}}
        assert config.get_driver_env_var(loaded) == "DRIVER_FLAG"
        assert config.get_mode_env_var(loaded) == "MODE_FLAG"

    def test_shipped_file_has_driver_section(self):
        loaded = config.load_config()
        assert loaded["driver"]["env_var"] == ""


class TestConfigureLogging:
    """Logging installation."""

    def test_noop_when_root_has_handlers(self, monkeypatch):
        monkeypatch.setattr(logging.getLogger(), "handlers", [logging.NullHandler()])
        with patch("reaper_harness.config.logging.basicConfig") as mock_basic:
            config.configure_logging(config.DEFAULTS)
        mock_basic.assert_not_called()

    def test_level_and_file_handler(self, monkeypatch, tmp_path):
        monkeypatch.setattr(logging.getLogger(), "handlers", [])
        settings = {"logging": {"level": "debug", "file": str(tmp_path / "harness.log")}}

        with patch("reaper_harness.config.logging.basicConfig") as mock_basic:
            config.configure_logging(settings)

        kwargs = mock_basic.call_args.kwargs
        assert kwargs["level"] == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in kwargs["handlers"])
        for handler in kwargs["handlers"]:
            handler.close()

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setattr(logging.getLogger(), "handlers", [])
        with patch("reaper_harness.config.logging.basicConfig") as mock_basic:
            config.configure_logging({"logging": {"level": "LOUD"}})
        assert mock_basic.call_args.kwargs["level"] == logging.INFO
