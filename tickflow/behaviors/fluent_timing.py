"""Factory for timed actions with configured defaults."""

from typing import Optional

from ..config import DEFAULT_TIMING, TimingConfig
from ..core.engine.actions import ActionLike
from ..core.engine.rates import random_jitter
from ..core.engine.timing import Clock, Condition, Rate
from ..core.events.emitter import EventEmitter
from ..core.events.event_manager import EventManager
from .sleep_action import SleepAction


class FluentTiming(EventEmitter):
    """Builds SleepActions that share a clock, an event manager and defaults.

    Omitted polling rates and timeouts come from the TimingConfig, never from
    mutable module state.
    """

    source_name = "FluentTiming"

    def __init__(
        self,
        config: TimingConfig = DEFAULT_TIMING,
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
    ):
        self.config = config
        self.clock = clock
        self.event_manager = event_manager

    def _context(self) -> dict:
        return {
            'clock': self.clock,
            'event_manager': self.event_manager,
            'companion_rate': self.config.companion_rate,
        }

    def sleep(self, duration: Rate, jitter: float = 0) -> SleepAction:
        """Sleep for ``duration`` ms, plus up to ``jitter`` ms of random delay.

        ``duration`` may also be a supplier, in which case ``jitter`` must be 0.
        """
        if jitter:
            if callable(duration):
                raise ValueError("Jitter cannot be combined with a duration supplier")
            self._emit_debug(f"Creating sleep action: {duration}ms with jitter: {jitter}ms")
            return SleepAction.for_duration(random_jitter(duration, jitter), **self._context())

        self._emit_debug(f"Creating sleep action: {duration}")
        return SleepAction.for_duration(duration, **self._context())

    def sleep_until(
        self,
        condition: Condition,
        polling_rate: Optional[Rate] = None,
        timeout: Optional[float] = None,
    ) -> SleepAction:
        """Wait until ``condition`` holds."""
        if polling_rate is None:
            polling_rate = self.config.default_polling_rate
        if timeout is None:
            timeout = self.config.default_timeout
        self._emit_debug(f"Creating sleep_until action with timeout: {timeout}ms")
        return SleepAction.until(condition, polling_rate, timeout, **self._context())

    def repeat_until(
        self,
        action: ActionLike,
        exit_condition: Condition,
        polling_rate: Optional[Rate] = None,
        timeout: Optional[float] = None,
    ) -> SleepAction:
        """Repeat ``action`` until ``exit_condition`` holds."""
        if polling_rate is None:
            polling_rate = self.config.default_polling_rate
        if timeout is None:
            timeout = self.config.default_timeout
        self._emit_debug(f"Creating repeat_until action with timeout: {timeout}ms")
        return SleepAction.repeating(
            action, exit_condition, polling_rate, timeout, **self._context()
        )
