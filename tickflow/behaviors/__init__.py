"""Higher-level behaviors built on the action engine.

- sleep_action.py: Sleep, wait and repeat actions with optional companions
- fluent_timing.py: Factory for timed actions using configured defaults
- tick_manipulation.py: Repeatable before/main/after timing cycles
- script.py: Base class for reactive script loops
- log_manager.py: Collects and filters engine log events
"""

from .sleep_action import SleepAction, SleepType
from .fluent_timing import FluentTiming
from .tick_manipulation import CycleDefinition, TickManipulationAction
from .log_manager import LogCategory, LogLevel, LogManager
from .script import FluentScript

__all__ = [
    "SleepAction",
    "SleepType",
    "FluentTiming",
    "CycleDefinition",
    "TickManipulationAction",
    "LogCategory",
    "LogLevel",
    "LogManager",
    "FluentScript",
]
