"""
Shared fixtures for the tickflow test suite.

Provides a virtual clock so polling loops can be tested without real sleeps,
plus simple counting actions and event plumbing.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from tickflow.core.engine.actions import Action
from tickflow.core.engine.timing import Clock
from tickflow.core.events.event_manager import EventManager
from tickflow.behaviors.log_manager import LogManager


class FakeClock(Clock):
    """Clock whose sleep advances virtual time instantly.

    Args:
        interrupt_after: Number of sleeps that succeed before every further
            sleep reports interruption (None never interrupts)
    """

    def __init__(self, interrupt_after=None):
        super().__init__()
        self.time = 0.0
        self.sleeps: list[float] = []
        self.interrupt_after = interrupt_after

    def now_ms(self) -> float:
        return self.time

    def advance(self, milliseconds: float) -> None:
        self.time += milliseconds

    def sleep(self, milliseconds: float) -> bool:
        if self.cancelled:
            return False
        if self.interrupt_after is not None and len(self.sleeps) >= self.interrupt_after:
            return False
        if milliseconds > 0:
            self.sleeps.append(milliseconds)
            self.time += milliseconds
        return True


class CountingAction(Action):
    """Action that records how often it ran and returns a fixed result."""

    def __init__(self, result: bool = True, name: str = "counting", log=None):
        self.result = result
        self.name = name
        self.calls = 0
        self.log = log

    def execute(self) -> bool:
        self.calls += 1
        if self.log is not None:
            self.log.append(self.name)
        return self.result


class RaisingAction(Action):
    """Action subclass that raises instead of returning False."""

    def __init__(self, error=None, succeed_first: int = 0):
        self.error = error or RuntimeError("boom")
        self.succeed_first = succeed_first
        self.calls = 0

    def execute(self) -> bool:
        self.calls += 1
        if self.calls <= self.succeed_first:
            return True
        raise self.error


class CountingCondition:
    """Predicate that becomes true after a number of checks."""

    def __init__(self, true_after=None):
        self.true_after = true_after
        self.checks = 0

    def __call__(self) -> bool:
        self.checks += 1
        return self.true_after is not None and self.checks > self.true_after


@pytest.fixture
def clock():
    """Create a fresh virtual clock."""
    return FakeClock()


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager()


@pytest.fixture
def log_manager(event_manager, tmp_path):
    """Create a log manager writing into a temporary directory."""
    return LogManager(event_manager, log_dir=str(tmp_path / "logs"))
