"""Engine events and their types.

This module defines the events that engine components publish through the
EventManager. Components never print or write logs directly; they publish
events and let subscribers (most notably the LogManager) decide what to do.

Event Design Principles:
- Events are immutable dataclasses
- Every event names the component that produced it in ``source``
- Events use proper enums instead of magic strings
- Keep event types focused and avoid over-granular events
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional


class EventType(Enum):
    """Types of engine events that subscribers can listen to."""
    # Execution Events
    ACTION_FAILED = auto()       # An action raised and was converted to failure
    WAIT_TIMED_OUT = auto()      # A wait/repeat loop exhausted its budget
    SLEEP_INTERRUPTED = auto()   # The clock was cancelled mid-sleep
    CYCLE_COMPLETED = auto()     # A tick manipulation cycle finished

    # Script Events
    ITERATION_ABORTED = auto()   # A script iteration was aborted by a gate

    # Logging Events
    LOG_MESSAGE = auto()
    DEBUG_MESSAGE = auto()
    LOG_SAVE_REQUESTED = auto()


@dataclass(frozen=True)
class EngineEvent(ABC):
    """Base class for all engine events."""
    source: str
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class ActionFailed(EngineEvent):
    """Event emitted when an action raised instead of returning a result."""
    action_name: str
    error: Optional[str] = None

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.ACTION_FAILED)


@dataclass(frozen=True)
class WaitTimedOut(EngineEvent):
    """Event emitted when a polling loop ran out of time."""
    timeout: float
    elapsed: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.WAIT_TIMED_OUT)


@dataclass(frozen=True)
class SleepInterrupted(EngineEvent):
    """Event emitted when a sleep was cut short by cancellation."""

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.SLEEP_INTERRUPTED)


@dataclass(frozen=True)
class CycleCompleted(EngineEvent):
    """Event emitted at the end of every tick manipulation cycle."""
    cycle_number: int
    successful: bool
    duration_ms: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CYCLE_COMPLETED)


@dataclass(frozen=True)
class IterationAborted(EngineEvent):
    """Event emitted when a script iteration unwinds on an abort."""
    iteration: int
    reason: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ITERATION_ABORTED)


@dataclass(frozen=True)
class LogMessage(EngineEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: str = "INFO"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)


@dataclass(frozen=True)
class DebugMessage(EngineEvent):
    """Event emitted for debug-specific messages."""
    message: str
    context: Optional[dict] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.DEBUG_MESSAGE)


@dataclass(frozen=True)
class LogSaveRequested(EngineEvent):
    """Event emitted to ask the LogManager to write its buffer to disk."""

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_SAVE_REQUESTED)
