"""Shared test fixtures for the bulk operations processor."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

import pytest
import structlog

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


class ConcurrencyRecorder:
    """Handler that sleeps per item and records the peak number of overlapping calls."""

    def __init__(self, delay_seconds: float = 0.02) -> None:
        self.delay_seconds = delay_seconds
        self.current = 0
        self.peak = 0
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, item: Any) -> Any:
        with self._lock:
            self.calls += 1
            self.current += 1
            self.peak = max(self.peak, self.current)
        try:
            time.sleep(self.delay_seconds)
            return item
        finally:
            with self._lock:
                self.current -= 1


@pytest.fixture
def sample_items() -> list[dict[str, Any]]:
    """Fifty items with 1-based ids."""
    return [{"id": i + 1, "name": f"Item {i + 1}"} for i in range(50)]


@pytest.fixture
def concurrency_recorder() -> ConcurrencyRecorder:
    """A delaying handler that tracks concurrent invocations."""
    return ConcurrencyRecorder()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any configure_logging() call so later tests log to the current stdout."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_recorder() -> Callable[[float], ConcurrencyRecorder]:
    """Factory for additional recorders with a given per-item delay."""
    return ConcurrencyRecorder
