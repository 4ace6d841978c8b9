"""tickflow: declarative action sequencing for reactive behavior loops.

Typical use inside a script::

    when(inventory_full).then(open_bank).wait_until(bank_open).then(deposit_all)
"""

from .config import DEFAULT_TIMING, TimingConfig, TimingConfigLoader, load_timing_config
from .core.engine import (
    NO_OP,
    SYSTEM_CLOCK,
    Action,
    ActionChain,
    ActionResult,
    CallableAction,
    Clock,
    ExponentialBackoff,
    ScriptAborted,
    SituationClause,
    as_action,
    exponential_backoff,
    fixed_rate,
    random_jitter,
    repeat_until,
    sleep,
    wait_until,
)
from .core.events import EventManager, EventType
from .behaviors import (
    CycleDefinition,
    FluentScript,
    FluentTiming,
    LogCategory,
    LogLevel,
    LogManager,
    SleepAction,
    SleepType,
    TickManipulationAction,
)
from .fluent import chain, tick_manipulation, timing, when

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TIMING",
    "TimingConfig",
    "TimingConfigLoader",
    "load_timing_config",
    "NO_OP",
    "SYSTEM_CLOCK",
    "Action",
    "ActionChain",
    "ActionResult",
    "CallableAction",
    "Clock",
    "ExponentialBackoff",
    "ScriptAborted",
    "SituationClause",
    "as_action",
    "exponential_backoff",
    "fixed_rate",
    "random_jitter",
    "repeat_until",
    "sleep",
    "wait_until",
    "EventManager",
    "EventType",
    "CycleDefinition",
    "FluentScript",
    "FluentTiming",
    "LogCategory",
    "LogLevel",
    "LogManager",
    "SleepAction",
    "SleepType",
    "TickManipulationAction",
    "chain",
    "tick_manipulation",
    "timing",
    "when",
]
