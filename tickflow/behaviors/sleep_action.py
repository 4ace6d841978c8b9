"""Timed actions with an optional companion action.

A SleepAction is an Action that spends time in one of three ways: a plain
sleep, waiting for a condition, or repeating an action until an exit
condition holds. A companion action can be attached with ``while_doing``;
it then runs periodically at its own rate while the primary wait is in
progress. Companion results are ignored and the companion never pushes the
primary past its timeout.
"""

from enum import Enum, auto
from typing import Optional

from ..core.engine.actions import Action, ActionLike, ScriptAborted, as_action, execute_safely
from ..core.engine.rates import RateSupplier, as_rate
from ..core.engine.timing import (
    SYSTEM_CLOCK,
    Clock,
    Condition,
    Rate,
    repeat_until,
    wait_until,
)
from ..core.events.emitter import EventEmitter
from ..core.events.event_manager import EventManager
from ..core.events.events import SleepInterrupted, WaitTimedOut

DEFAULT_COMPANION_RATE = 100


class SleepType(Enum):
    """How a SleepAction spends its time."""
    SIMPLE_SLEEP = auto()
    WAIT_UNTIL = auto()
    REPEAT_UNTIL = auto()


class SleepAction(Action, EventEmitter):
    """Sleep, wait or repeat, optionally doing something else meanwhile.

    Use the ``for_duration``, ``until`` and ``repeating`` constructors rather
    than calling ``__init__`` directly.
    """

    source_name = "SleepAction"

    def __init__(
        self,
        sleep_type: SleepType,
        duration: Optional[RateSupplier] = None,
        condition: Optional[Condition] = None,
        polling_rate: Optional[RateSupplier] = None,
        timeout: float = 0,
        action_to_repeat: Optional[Action] = None,
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
        companion_rate: Rate = DEFAULT_COMPANION_RATE,
    ):
        self.sleep_type = sleep_type
        self.duration = duration
        self.condition = condition
        self.polling_rate = polling_rate
        self.timeout = timeout
        self.action_to_repeat = action_to_repeat
        self.clock = clock or SYSTEM_CLOCK
        self.event_manager = event_manager
        self.name = sleep_type.name.lower()

        self.companion: Optional[Action] = None
        self.companion_rate: RateSupplier = as_rate(companion_rate)

        # Statistics from the most recent execute()
        self.companion_runs = 0
        self.main_runs = 0

    @classmethod
    def for_duration(cls, duration: Rate, **kwargs) -> "SleepAction":
        """Sleep for a fixed or supplied number of milliseconds."""
        return cls(SleepType.SIMPLE_SLEEP, duration=as_rate(duration), **kwargs)

    @classmethod
    def until(cls, condition: Condition, polling_rate: Rate, timeout: float, **kwargs) -> "SleepAction":
        """Wait until ``condition`` holds or ``timeout`` elapses."""
        return cls(
            SleepType.WAIT_UNTIL,
            condition=condition,
            polling_rate=as_rate(polling_rate),
            timeout=timeout,
            **kwargs,
        )

    @classmethod
    def repeating(
        cls,
        action: ActionLike,
        exit_condition: Condition,
        polling_rate: Rate,
        timeout: float,
        **kwargs,
    ) -> "SleepAction":
        """Repeat ``action`` until ``exit_condition`` holds or ``timeout`` elapses."""
        return cls(
            SleepType.REPEAT_UNTIL,
            condition=exit_condition,
            polling_rate=as_rate(polling_rate),
            timeout=timeout,
            action_to_repeat=as_action(action),
            **kwargs,
        )

    def while_doing(self, companion: ActionLike, rate: Optional[Rate] = None) -> "SleepAction":
        """Run ``companion`` every ``rate`` ms while this action waits.

        Args:
            companion: Action or chain to interleave; its result is ignored
            rate: Interval between companion runs; keeps the current rate if None
        """
        self.companion = as_action(companion, event_manager=self.event_manager)
        if rate is not None:
            self.companion_rate = as_rate(rate)
        self._emit_debug(f"Companion {self.companion.describe()} attached to {self.name}")
        return self

    def execute(self) -> bool:
        self._emit_log(f"Executing {self.sleep_type.name} action", "TIMING", "DEBUG")
        start = self.clock.now_ms()
        self.companion_runs = 0
        self.main_runs = 0
        try:
            if self.companion is None:
                result = self._execute_alone()
            else:
                result = self._execute_with_companion()
        except ScriptAborted:
            raise
        except Exception as e:
            self._emit_log(f"Error during {self.sleep_type.name} action: {e!r}", "TIMING", "WARNING")
            return False

        duration = self.clock.now_ms() - start
        self._emit_log(
            f"{self.sleep_type.name} action completed in {duration:.0f}ms: "
            f"{'SUCCESS' if result else 'FAILED'}",
            "TIMING",
            "DEBUG",
        )
        return result

    def _execute_alone(self) -> bool:
        if self.sleep_type == SleepType.SIMPLE_SLEEP:
            return self._sleep(self.duration())
        if self.sleep_type == SleepType.WAIT_UNTIL:
            return wait_until(self.condition, self.polling_rate, self.timeout, self.clock)
        return repeat_until(
            self._run_main, self.condition, self.polling_rate, self.timeout, self.clock
        )

    def _execute_with_companion(self) -> bool:
        if self.sleep_type == SleepType.SIMPLE_SLEEP:
            return self._sleep_with_companion()
        return self._poll_with_companion()

    def _run_main(self) -> bool:
        self.main_runs += 1
        return execute_safely(self.action_to_repeat, self.event_manager)

    def _run_companion(self) -> None:
        self.companion_runs += 1
        execute_safely(self.companion, self.event_manager)

    def _sleep(self, milliseconds: float) -> bool:
        if self.clock.sleep(milliseconds):
            return True
        self._publish(SleepInterrupted(source=self.source_name))
        self._emit_log(f"Sleep interrupted during {self.sleep_type.name}", "TIMING", "WARNING")
        return False

    def _sleep_with_companion(self) -> bool:
        total = self.duration()
        deadline = self.clock.now_ms() + total

        while deadline - self.clock.now_ms() > 0:
            self._run_companion()
            remaining = deadline - self.clock.now_ms()
            if remaining <= 0:
                break
            if not self._sleep(min(self.companion_rate(), remaining)):
                return False

        self._emit_debug(f"Completed {total}ms sleep with {self.companion_runs} companion runs")
        return True

    def _poll_with_companion(self) -> bool:
        """Shared tick loop for WAIT_UNTIL and REPEAT_UNTIL with a companion."""
        repeating = self.sleep_type == SleepType.REPEAT_UNTIL
        start = self.clock.now_ms()
        # The companion rate is read once per companion run
        next_companion = start + self.companion_rate()

        while True:
            if self.condition():
                return True

            if repeating:
                if not self._run_main():
                    self._emit_log(
                        f"Main action failed after {self.main_runs} attempts", "TIMING", "WARNING"
                    )
                    return False
                if self.condition():
                    return True

            now = self.clock.now_ms()
            if now - start >= self.timeout:
                break

            if now >= next_companion:
                self._run_companion()
                next_companion = now + self.companion_rate()

            remaining = self.timeout - (self.clock.now_ms() - start)
            if remaining <= 0:
                break

            wait_time = min(self.polling_rate(), remaining)
            if wait_time > 0 and not self._sleep(wait_time):
                return False

            if self.clock.now_ms() - start >= self.timeout:
                break

        elapsed = self.clock.now_ms() - start
        self._publish(WaitTimedOut(source=self.source_name, timeout=self.timeout, elapsed=elapsed))
        self._emit_log(
            f"{self.sleep_type.name} with companion timed out after {self.timeout}ms, "
            f"{self.main_runs} main runs, {self.companion_runs} companion runs",
            "TIMING",
            "WARNING",
        )
        return False

    def __repr__(self) -> str:
        companion = self.companion.describe() if self.companion else None
        return f"SleepAction({self.sleep_type.name}, timeout={self.timeout}, companion={companion})"

