"""Base class for behavior scripts driven by the action engine.

A FluentScript owns the clock, event manager and log manager its gates and
timed actions share. ``run()`` calls ``on_loop()`` repeatedly on the calling
thread, sleeping ``polling_rate()`` ms between iterations. A gate's ``abort``
ends only the current iteration; the loop then carries on. ``stop()`` may be
called from another thread and interrupts any sleep in progress.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from ..config import DEFAULT_TIMING, TimingConfig
from ..core.engine.actions import ActionChain, ActionLike, ScriptAborted
from ..core.engine.situation import SituationClause
from ..core.engine.timing import Clock, Condition
from ..core.events.emitter import EventEmitter
from ..core.events.event_manager import EventManager
from ..core.events.events import IterationAborted
from .fluent_timing import FluentTiming
from .log_manager import LogManager
from .tick_manipulation import TickManipulationAction


class FluentScript(ABC, EventEmitter):
    """Reactive script loop built from gates, chains and timed actions."""

    source_name = "FluentScript"

    def __init__(
        self,
        config: TimingConfig = DEFAULT_TIMING,
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
        log_manager: Optional[LogManager] = None,
    ):
        self.config = config
        self.clock = clock or Clock()
        self.event_manager = event_manager or EventManager()
        self.log_manager = log_manager or LogManager(self.event_manager)

        self.iterations = 0
        self.aborted_iterations = 0
        self.running = False

    # Hooks for subclasses

    def initialize(self) -> bool:
        """Check preconditions before the loop starts.

        Return False or abort through a gate to refuse to start.
        """
        return True

    @abstractmethod
    def on_loop(self) -> None:
        """One pass of the behavior; gates built here run immediately."""
        pass

    def polling_rate(self) -> float:
        """Delay in ms between iterations."""
        return self.config.script_polling_rate

    # Factories bound to this script's clock and event manager

    def when(self, condition: Union[bool, Condition]) -> SituationClause:
        return SituationClause(condition, clock=self.clock, event_manager=self.event_manager)

    def chain(self, *actions: ActionLike) -> ActionChain:
        return ActionChain(actions, clock=self.clock, event_manager=self.event_manager)

    def timing(self) -> FluentTiming:
        return FluentTiming(self.config, clock=self.clock, event_manager=self.event_manager)

    def tick_manipulation(self) -> TickManipulationAction:
        return TickManipulationAction(clock=self.clock, event_manager=self.event_manager)

    # Loop control

    def run(self, max_iterations: Optional[int] = None) -> bool:
        """Initialize, then loop until stopped or ``max_iterations`` is reached.

        Returns:
            False if the script refused to start, True otherwise
        """
        self.clock.reset()
        try:
            if not self.initialize():
                self._emit_log("Script failed to initialize", "SCRIPT", "ERROR")
                self.event_manager.process_events()
                return False
        except ScriptAborted as e:
            self._emit_log(f"Cannot start script: {e}", "SCRIPT", "ERROR")
            self.event_manager.process_events()
            return False

        self._emit_log("Script started", "SCRIPT")
        self.running = True
        try:
            while not self.clock.cancelled:
                self.run_iteration()
                if max_iterations is not None and self.iterations >= max_iterations:
                    break
                if not self.clock.sleep(self.polling_rate()):
                    break
        finally:
            self.running = False
            self._emit_log(
                f"Script stopped after {self.iterations} iterations "
                f"({self.aborted_iterations} aborted)",
                "SCRIPT",
            )
            dropped = self.event_manager.get_statistics()['events_dropped']
            if dropped:
                self._emit_log(f"{dropped} events were dropped from a full queue", "SCRIPT", "WARNING")
            self.event_manager.process_events()
        return True

    def run_iteration(self) -> bool:
        """Run ``on_loop`` once.

        Returns:
            False if the iteration was aborted
        """
        self.iterations += 1
        try:
            self.on_loop()
            return True
        except ScriptAborted as e:
            self.aborted_iterations += 1
            self._publish(
                IterationAborted(source=self.source_name, iteration=self.iterations, reason=str(e))
            )
            self._emit_log(f"Iteration {self.iterations} aborted: {e}", "SCRIPT", "WARNING")
            return False
        finally:
            self.event_manager.process_events()

    def stop(self) -> None:
        """Interrupt the loop and any sleep in progress."""
        self._emit_log("Stop requested", "SCRIPT")
        self.clock.cancel()
