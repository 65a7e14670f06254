"""Shared pytest fixtures for the prediction-line engine.

Environment variables are set before importing engine code so that Settings
picks up the test configuration.
"""
import os

os.environ["BOSHEN_ENVIRONMENT"] = "test"
os.environ["BOSHEN_LOG_LEVEL"] = "WARNING"

import threading
from collections.abc import Generator

import pytest

from boshen.core.config import Settings, get_settings
from boshen.services.line_strategies import calculate_boshen_lines
from boshen.utils.structured_logging import configure_structured_logging


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings.

    Returns:
        Settings: Test configuration
    """
    return Settings(
        environment="test",
        log_level="WARNING",
        cache_max_size=64,
        batch_concurrency=4,
    )


@pytest.fixture(scope="session", autouse=True)
def setup_logging(test_settings: Settings) -> None:
    """Configure structured logging once for the test session."""
    configure_structured_logging(log_level=test_settings.log_level)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Ensure no test leaks a cached Settings instance into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class CountingCompute:
    """Thread-safe wrapper counting calls to a line function."""

    def __init__(self, func=calculate_boshen_lines, delay_event: threading.Event | None = None):
        self.func = func
        self.calls = 0
        self.delay_event = delay_event
        self._lock = threading.Lock()

    def __call__(self, low: float, high: float):
        with self._lock:
            self.calls += 1
        if self.delay_event is not None:
            # Hold the computation until the test releases it
            self.delay_event.wait(timeout=5)
        return self.func(low, high)


@pytest.fixture
def counting_compute() -> CountingCompute:
    """Counting wrapper around the Boshen calculator."""
    return CountingCompute()


@pytest.fixture
def make_counting_compute() -> type[CountingCompute]:
    """Factory for counting wrappers with a custom function or delay."""
    return CountingCompute
