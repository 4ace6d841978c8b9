"""Core action engine components.

This package contains the fundamental engine systems:
- timing.py: Clock with cancellation and the wait/repeat polling loops
- rates.py: Fixed, jittered and exponential-backoff delay suppliers
- actions.py: Action contract, callable adapter and fail-fast chains
- situation.py: Condition gates and immutable result continuations
"""

from .timing import Clock, SYSTEM_CLOCK, sleep, wait_until, repeat_until
from .rates import (
    ExponentialBackoff,
    as_rate,
    exponential_backoff,
    fixed_rate,
    random_jitter,
)
from .actions import (
    Action,
    ActionChain,
    CallableAction,
    NO_OP,
    ScriptAborted,
    as_action,
    chain,
    execute_safely,
)
from .situation import ActionResult, SituationClause, when

__all__ = [
    "Clock",
    "SYSTEM_CLOCK",
    "sleep",
    "wait_until",
    "repeat_until",
    "ExponentialBackoff",
    "as_rate",
    "exponential_backoff",
    "fixed_rate",
    "random_jitter",
    "Action",
    "ActionChain",
    "CallableAction",
    "NO_OP",
    "ScriptAborted",
    "as_action",
    "chain",
    "execute_safely",
    "ActionResult",
    "SituationClause",
    "when",
]
