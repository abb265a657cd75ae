"""Pytest configuration and shared fixtures."""
import pytest

from triggers import TriggerBus, reset_trigger_bus
from triggers.logging_config import configure_logging


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "benchmark: mark test as benchmark")
    configure_logging(level="WARNING", colors=False)


@pytest.fixture
def bus():
    """Fresh, isolated trigger bus with default settings."""
    return TriggerBus()


@pytest.fixture(autouse=True)
def _reset_global_bus(monkeypatch):
    """Keep the global bus and TRIGGERS_* env from leaking between tests."""
    for name in (
        "TRIGGERS_EAGER_CLEAR",
        "TRIGGERS_PURGE_ON_EXECUTE",
        "TRIGGERS_LOG_LEVEL",
        "TRIGGERS_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_trigger_bus()
    yield
    reset_trigger_bus()
