"""
pytest fixtures for the reaper_harness test suite.

Provides the in-memory host from fake_host and resets the global harness
between tests.
"""

import pytest
from typing import List
from unittest.mock import patch

from .fake_host import FakePluginContext


# ===========================================================================
# Custom markers registration
# ===========================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that drive the harness through the fake host"
    )


# ===========================================================================
# Fixtures
# ===========================================================================

@pytest.fixture(autouse=True)
def fresh_registry(monkeypatch):
    """Give every test an empty global harness cell and a clean environment."""
    from reaper_harness import registry
    from reaper_harness.config import CONFIG_ENV_VAR, DEFAULT_MODE_ENV_VAR

    monkeypatch.setattr(registry, "_cell", registry._InstanceCell())
    monkeypatch.delenv(DEFAULT_MODE_ENV_VAR, raising=False)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    yield


@pytest.fixture
def fake_context():
    """Provide a fresh fake plugin context."""
    return FakePluginContext()


@pytest.fixture
def automated_mode(monkeypatch):
    """Switch the harness into automated mode."""
    from reaper_harness.config import DEFAULT_MODE_ENV_VAR
    monkeypatch.setenv(DEFAULT_MODE_ENV_VAR, "1")


@pytest.fixture
def terminate():
    """Replace process termination with a mock."""
    with patch("reaper_harness.reporter.terminate") as mock_terminate:
        yield mock_terminate


@pytest.fixture
def harness(fake_context):
    """Interactive-mode harness set up against the fake host."""
    from reaper_harness import setup
    return setup(fake_context, "test_action")


@pytest.fixture
def automated_harness(fake_context, automated_mode, terminate):
    """Automated-mode harness set up against the fake host."""
    from reaper_harness import setup
    return setup(fake_context, "test_action")


@pytest.fixture
def recorder():
    """Factory for steps that record their invocation order."""
    calls: List[str] = []

    def make(name: str, error: Exception = None):
        def operation(harness):
            calls.append(name)
            if error is not None:
                raise error
        return operation

    make.calls = calls
    return make
