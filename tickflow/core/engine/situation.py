"""Condition-gated execution and result continuations.

A SituationClause evaluates its condition exactly once and, when it holds,
executes the action it is handed right away. There is no deferred execution
anywhere in the engine: every continuation on the returned ActionResult also
runs synchronously inside the call.

Classifications of a result:
- did not happen: the gate's condition was false, nothing ran
- failed: the condition held but this step (or an earlier one) failed
- succeeded: the condition held and every step so far succeeded
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Union

from ..events.emitter import EventEmitter
from ..events.event_manager import EventManager
from .actions import (
    DEFAULT_CHAIN_WAIT_POLLING_RATE,
    DEFAULT_CHAIN_WAIT_TIMEOUT,
    DEFAULT_REPEAT_POLLING_RATE,
    DEFAULT_REPEAT_TIMEOUT,
    NO_OP,
    Action,
    ActionChain,
    ActionLike,
    CallableAction,
    ScriptAborted,
    as_action,
    execute_safely,
)
from .timing import Clock, Condition, Rate, repeat_until, wait_until


@dataclass(frozen=True)
class ActionResult(EventEmitter):
    """Immutable outcome of one step of a gated pipeline.

    ``last_action`` is the unit produced by the step that created this
    result; ``pipeline`` holds every unit that actually ran since the gate
    opened. Continuations build new results and never modify this one.
    """

    condition_met: bool
    executed: bool
    successful: bool
    last_action: Action = NO_OP
    pipeline: tuple[Action, ...] = ()
    clock: Optional[Clock] = field(default=None, compare=False, repr=False)
    event_manager: Optional[EventManager] = field(default=None, compare=False, repr=False)

    source_name = "ActionResult"

    def succeeded(self) -> bool:
        return self.condition_met and self.successful

    def failed(self) -> bool:
        return self.condition_met and not self.successful

    def did_not_happen(self) -> bool:
        return not self.condition_met

    def was_executed(self) -> bool:
        """Whether the step that produced this result actually ran."""
        return self.executed

    def _step(self, action: Action) -> ActionResult:
        if not self.succeeded():
            self._emit_debug(f"Skipping {action.describe()}: previous step did not succeed")
            return replace(self, executed=False, successful=False, last_action=action)

        successful = execute_safely(action, self.event_manager)
        if not successful:
            self._emit_log(f"{action.describe()} failed", "GATE", "DEBUG")
        return replace(
            self,
            executed=True,
            successful=successful,
            last_action=action,
            pipeline=self.pipeline + (action,),
        )

    def then(self, next_action: ActionLike) -> ActionResult:
        """Run ``next_action`` only if everything so far succeeded."""
        return self._step(as_action(next_action, event_manager=self.event_manager))

    def wait_until(
        self,
        condition: Condition,
        polling_rate: Rate = DEFAULT_CHAIN_WAIT_POLLING_RATE,
        timeout: float = DEFAULT_CHAIN_WAIT_TIMEOUT,
    ) -> ActionResult:
        """Wait for ``condition`` as the next step, only if everything so far succeeded."""
        clock = self.clock
        return self._step(
            CallableAction(
                lambda: wait_until(condition, polling_rate, timeout, clock),
                name="wait_until",
                event_manager=self.event_manager,
            )
        )

    def _fire(self, side_effect: ActionLike) -> None:
        execute_safely(as_action(side_effect, event_manager=self.event_manager), self.event_manager)

    def on_success(self, side_effect: ActionLike) -> ActionResult:
        """Run ``side_effect`` now if this result succeeded; its outcome is ignored."""
        if self.succeeded():
            self._fire(side_effect)
        return replace(self)

    def on_failure(self, side_effect: ActionLike) -> ActionResult:
        """Run ``side_effect`` now if this result failed; its outcome is ignored."""
        if self.failed():
            self._fire(side_effect)
        return replace(self)

    def repeat_until(
        self,
        exit_condition: Condition,
        polling_rate: Rate = DEFAULT_REPEAT_POLLING_RATE,
        timeout: float = DEFAULT_REPEAT_TIMEOUT,
    ) -> bool:
        """Re-run only the last action until ``exit_condition`` holds.

        Returns:
            False without running anything if this result did not succeed
        """
        if not self.succeeded():
            return False
        action, event_manager = self.last_action, self.event_manager
        return repeat_until(
            lambda: execute_safely(action, event_manager),
            exit_condition,
            polling_rate,
            timeout,
            self.clock,
        )

    def repeat_all_until(
        self,
        exit_condition: Condition,
        polling_rate: Rate = DEFAULT_REPEAT_POLLING_RATE,
        timeout: float = DEFAULT_REPEAT_TIMEOUT,
    ) -> bool:
        """Re-run every step of the pipeline, in order, until ``exit_condition`` holds.

        Returns:
            False without running anything if this result did not succeed
        """
        if not self.succeeded():
            return False
        whole = ActionChain(
            self.pipeline, clock=self.clock, name="pipeline", event_manager=self.event_manager
        )
        return repeat_until(whole.execute, exit_condition, polling_rate, timeout, self.clock)

    def when(self, next_condition: Union[bool, Condition]) -> SituationClause:
        """Open a new gate sharing this result's clock and event manager."""
        return SituationClause(next_condition, clock=self.clock, event_manager=self.event_manager)


class SituationClause(EventEmitter):
    """One-shot gate that runs an action immediately if its condition holds.

    The condition may be a bool or a predicate; a predicate is evaluated once,
    when the clause is created.
    """

    source_name = "SituationClause"

    def __init__(
        self,
        condition: Union[bool, Condition],
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
    ):
        self.condition = bool(condition() if callable(condition) else condition)
        self.clock = clock
        self.event_manager = event_manager

    def _run(self, unit: Action) -> ActionResult:
        if not self.condition:
            return ActionResult(
                condition_met=False,
                executed=False,
                successful=False,
                last_action=unit,
                clock=self.clock,
                event_manager=self.event_manager,
            )

        successful = execute_safely(unit, self.event_manager)
        self._emit_debug(f"{unit.describe()} -> {'SUCCESS' if successful else 'FAILED'}")
        return ActionResult(
            condition_met=True,
            executed=True,
            successful=successful,
            last_action=unit,
            pipeline=(unit,),
            clock=self.clock,
            event_manager=self.event_manager,
        )

    def then(self, action: ActionLike) -> ActionResult:
        """Execute ``action`` now if the condition holds.

        The result's ``repeat_until`` re-runs exactly this action.
        """
        return self._run(as_action(action, event_manager=self.event_manager))

    def perform_all(self, *actions: ActionLike) -> ActionResult:
        """Execute ``actions`` as one fail-fast chain if the condition holds.

        The result's ``repeat_until`` re-runs the whole chain.
        """
        if len(actions) == 1 and isinstance(actions[0], ActionChain):
            unit = actions[0]
        else:
            unit = ActionChain(
                [as_action(action, event_manager=self.event_manager) for action in actions],
                clock=self.clock,
                event_manager=self.event_manager,
            )
        return self._run(unit)

    def abort(self, reason: Union[str, BaseException], *args: object) -> None:
        """Unwind the current script iteration if the condition holds.

        Args:
            reason: Message (``%``-formatted with ``args``) or an exception to raise

        Raises:
            ScriptAborted: With the formatted message
        """
        if not self.condition:
            return
        if isinstance(reason, BaseException):
            raise reason
        message = reason % args if args else reason
        self._emit_log(f"Aborting: {message}", "GATE", "WARNING")
        raise ScriptAborted(message)


def when(
    condition: Union[bool, Callable[[], bool]],
    clock: Optional[Clock] = None,
    event_manager: Optional[EventManager] = None,
) -> SituationClause:
    """Open a gate on ``condition``; a predicate is evaluated right now."""
    return SituationClause(condition, clock=clock, event_manager=event_manager)
