"""Repeatable before/main/after cycles for tick-precise techniques.

One cycle runs:

1. ``before`` (failure aborts the cycle)
2. a jittered pre-delay
3. ``main`` (failure aborts the cycle)
4. a wait for ``completion_condition`` bounded by ``timeout``; timing out is
   logged and the cycle carries on
5. ``after`` (failure aborts the cycle)
6. a short jittered trailing delay

A stop condition that already holds when execution starts (the default) runs
exactly one cycle. Otherwise cycles repeat until the stop condition holds,
bounded by ``max_duration``. The per-cycle completion timeout and the overall
max duration are independent so each step can be kept tight while the
technique as a whole runs for as long as it is wanted.
"""

import math
import random
from dataclasses import dataclass, replace
from typing import Optional

from ..core.engine.actions import (
    NO_OP,
    Action,
    ActionLike,
    ScriptAborted,
    as_action,
    execute_safely,
)
from ..core.engine.rates import as_rate, random_jitter
from ..core.engine.timing import SYSTEM_CLOCK, Clock, Condition, Rate, repeat_until, wait_until
from ..core.events.emitter import EventEmitter
from ..core.events.event_manager import EventManager
from ..core.events.events import CycleCompleted


def _always() -> bool:
    return True


def _never() -> bool:
    return False


@dataclass
class CycleDefinition:
    """Plain configuration for a TickManipulationAction."""
    before: Action = NO_OP
    main: Action = NO_OP
    after: Action = NO_OP
    completion_condition: Condition = _always
    timeout: Rate = 600  # One game tick
    polling_rate: Rate = 25
    stop_condition: Condition = _always
    max_duration: float = math.inf
    pre_delay: float = 600
    pre_jitter: float = 10
    post_delay: float = 50
    post_jitter: float = 10


class TickManipulationAction(Action, EventEmitter):
    """Runs one or more before/main/after cycles.

    The definition passed in is copied, so builder calls on one action never
    leak into another built from the same definition.
    """

    source_name = "TickManipulation"

    def __init__(
        self,
        definition: Optional[CycleDefinition] = None,
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
        rng: Optional[random.Random] = None,
    ):
        self.definition = replace(definition) if definition else CycleDefinition()
        self.clock = clock or SYSTEM_CLOCK
        self.event_manager = event_manager
        self.rng = rng
        self.name = "tick_manipulation"
        self.cycles_run = 0

    # Builder methods

    def action(self, main: ActionLike) -> "TickManipulationAction":
        self.definition.main = as_action(main, event_manager=self.event_manager)
        return self

    def before(self, before: ActionLike) -> "TickManipulationAction":
        self.definition.before = as_action(before, event_manager=self.event_manager)
        return self

    def after(self, after: ActionLike) -> "TickManipulationAction":
        self.definition.after = as_action(after, event_manager=self.event_manager)
        return self

    def wait_until(self, completion_condition: Condition) -> "TickManipulationAction":
        self.definition.completion_condition = completion_condition
        return self

    def timeout(self, timeout: Rate) -> "TickManipulationAction":
        """Per-cycle completion timeout in ms (number or supplier)."""
        self.definition.timeout = timeout
        return self

    def polling_rate(self, polling_rate: Rate) -> "TickManipulationAction":
        self.definition.polling_rate = polling_rate
        return self

    def max_duration(self, max_duration: Rate) -> "TickManipulationAction":
        """Overall budget for repeated cycles; a supplier is read once, now."""
        self.definition.max_duration = max_duration() if callable(max_duration) else max_duration
        return self

    def repeating(self) -> "TickManipulationAction":
        """Repeat cycles until ``max_duration`` runs out."""
        self.definition.stop_condition = _never
        self._emit_log("Configured for infinite repetition", "CYCLE")
        return self

    def repeat_until(self, stop_condition: Condition) -> "TickManipulationAction":
        self.definition.stop_condition = stop_condition
        self._emit_log("Configured to repeat until stop condition met", "CYCLE")
        return self

    # Execution

    def execute(self) -> bool:
        definition = self.definition
        start = self.clock.now_ms()
        self.cycles_run = 0
        try:
            if definition.stop_condition():
                self._emit_log("Stop condition already true, executing single cycle", "CYCLE", "DEBUG")
                result = self._execute_one_cycle()
            else:
                self._emit_log(
                    f"Starting repeating execution with max duration: {definition.max_duration}ms",
                    "CYCLE",
                )
                result = repeat_until(
                    self._execute_one_cycle,
                    definition.stop_condition,
                    definition.polling_rate,
                    definition.max_duration,
                    self.clock,
                )
        except ScriptAborted:
            raise
        except Exception as e:
            self._emit_log(f"Error during tick manipulation execution: {e!r}", "CYCLE", "ERROR")
            return False

        self._emit_log(
            f"Tick manipulation finished after {self.cycles_run} cycles in "
            f"{self.clock.now_ms() - start:.0f}ms: {'SUCCESS' if result else 'FAILED'}",
            "CYCLE",
        )
        return result

    def _delay(self, base: float, jitter: float) -> bool:
        return self.clock.sleep(random_jitter(base, jitter, self.rng)())

    def _execute_one_cycle(self) -> bool:
        self.cycles_run += 1
        start = self.clock.now_ms()
        result = self._run_phases()
        self._publish(
            CycleCompleted(
                source=self.source_name,
                cycle_number=self.cycles_run,
                successful=result,
                duration_ms=self.clock.now_ms() - start,
            )
        )
        return result

    def _run_phases(self) -> bool:
        definition = self.definition

        if not execute_safely(definition.before, self.event_manager):
            self._emit_log("Before action failed, aborting cycle", "CYCLE", "WARNING")
            return False

        if not self._delay(definition.pre_delay, definition.pre_jitter):
            self._emit_log("Pre-delay interrupted, aborting cycle", "CYCLE", "WARNING")
            return False

        if not execute_safely(definition.main, self.event_manager):
            self._emit_log("Main action failed, aborting cycle", "CYCLE", "WARNING")
            return False

        timeout = as_rate(definition.timeout)()
        if wait_until(definition.completion_condition, definition.polling_rate, timeout, self.clock):
            self._emit_log("Completion condition met", "CYCLE", "DEBUG")
        else:
            self._emit_log(f"Completion condition timed out after {timeout}ms", "CYCLE", "DEBUG")

        if not execute_safely(definition.after, self.event_manager):
            self._emit_log("After action failed, aborting cycle", "CYCLE", "WARNING")
            return False

        if not self._delay(definition.post_delay, definition.post_jitter):
            self._emit_log("Trailing delay interrupted, aborting cycle", "CYCLE", "WARNING")
            return False

        return True
