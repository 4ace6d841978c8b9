"""Engine event system.

This package contains the publish/subscribe plumbing used for logging and
structured signals:
- events.py: Event types and immutable event dataclasses
- event_manager.py: Central event bus with a bounded delivery queue
- emitter.py: Mixin for components that publish log and debug messages
"""

from .events import (
    EventType,
    EngineEvent,
    ActionFailed,
    WaitTimedOut,
    SleepInterrupted,
    CycleCompleted,
    IterationAborted,
    LogMessage,
    DebugMessage,
    LogSaveRequested,
)
from .event_manager import EventManager
from .emitter import EventEmitter

__all__ = [
    "EventType",
    "EngineEvent",
    "ActionFailed",
    "WaitTimedOut",
    "SleepInterrupted",
    "CycleCompleted",
    "IterationAborted",
    "LogMessage",
    "DebugMessage",
    "LogSaveRequested",
    "EventManager",
    "EventEmitter",
]
