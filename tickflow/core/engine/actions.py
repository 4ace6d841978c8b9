"""Atomic actions and fail-fast chains.

This module defines the unit of work the engine sequences. An action is
anything with ``execute() -> bool``; plain callables are accepted wherever an
action is expected and are wrapped on the way in.

Contract:
- ``execute()`` returns True on success and False on any failure
- ``execute()`` never raises; faults are converted to False
- ``ScriptAborted`` is the single exception allowed through, because it must
  unwind the whole script iteration
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, Optional, Union

from ..events.emitter import EventEmitter
from ..events.event_manager import EventManager
from ..events.events import ActionFailed
from .timing import Clock, Condition, Rate, repeat_until, wait_until

DEFAULT_CHAIN_WAIT_TIMEOUT = 5000
DEFAULT_CHAIN_WAIT_POLLING_RATE = 100
DEFAULT_REPEAT_TIMEOUT = 30000
DEFAULT_REPEAT_POLLING_RATE = 1000


class ScriptAborted(Exception):
    """Raised by a gate's abort combinator to end the current script iteration."""


class Action(ABC):
    """Base class for everything the engine can execute.

    Actions are expected to return quickly, to be safe to call more than once
    where possible, and to report failure by returning False.
    """

    name: str = ""

    @abstractmethod
    def execute(self) -> bool:
        """Perform the operation.

        Returns:
            True if the intended operation completed
        """
        pass

    def __call__(self) -> bool:
        return self.execute()

    def then(self, next_action: ActionLike) -> ActionChain:
        """Start a new chain running this action and then ``next_action``."""
        return ActionChain([self]).then(next_action)

    def describe(self) -> str:
        """Human-readable name used in logs."""
        return self.name or self.__class__.__name__


ActionLike = Union[Action, Callable[[], bool]]


class CallableAction(Action, EventEmitter):
    """Adapts a zero-argument callable to the Action contract."""

    source_name = "CallableAction"

    def __init__(
        self,
        func: Callable[[], bool],
        name: Optional[str] = None,
        event_manager: Optional[EventManager] = None,
    ):
        self.func = func
        self.name = name or getattr(func, '__name__', 'anonymous')
        self.event_manager = event_manager
        self.last_error: Optional[Exception] = None

    def execute(self) -> bool:
        try:
            return bool(self.func())
        except ScriptAborted:
            raise
        except Exception as e:
            self.last_error = e
            self._publish(
                ActionFailed(source=self.source_name, action_name=self.name, error=repr(e))
            )
            self._emit_log(f"{self.name} raised {e!r}", "ACTION", "WARNING")
            return False

    def __repr__(self) -> str:
        return f"CallableAction({self.name!r})"


def as_action(
    action: ActionLike,
    name: Optional[str] = None,
    event_manager: Optional[EventManager] = None,
) -> Action:
    """Return ``action`` itself if it is an Action, otherwise wrap it.

    Raises:
        TypeError: If ``action`` is neither an Action nor callable
    """
    if isinstance(action, Action):
        return action
    if callable(action):
        return CallableAction(action, name=name, event_manager=event_manager)
    raise TypeError(f"Expected an Action or a callable, got {type(action).__name__}")


NO_OP: Action = CallableAction(lambda: True, name="no_op")


def execute_safely(action: Action, event_manager: Optional[EventManager] = None) -> bool:
    """Execute any action under the CallableAction fault rules.

    Custom Action subclasses are not trusted to honor the never-raise
    contract, so they are run through a CallableAction here.
    """
    if isinstance(action, CallableAction):
        return action.execute()
    return CallableAction(action.execute, name=action.describe(), event_manager=event_manager).execute()


class ActionChain(Action):
    """Ordered, fail-fast composition of actions.

    Elements run strictly in insertion order and the chain stops at the first
    one that fails. An empty chain succeeds. Chains are actions themselves,
    so they nest.
    """

    def __init__(
        self,
        actions: Iterable[ActionLike] = (),
        clock: Optional[Clock] = None,
        name: str = "chain",
        event_manager: Optional[EventManager] = None,
    ):
        self._actions: list[Action] = [as_action(action) for action in actions]
        self.clock = clock
        self.name = name
        self.event_manager = event_manager

    @classmethod
    def start(
        cls,
        first_action: ActionLike,
        clock: Optional[Clock] = None,
        event_manager: Optional[EventManager] = None,
    ) -> ActionChain:
        """Create a chain whose first element is ``first_action``."""
        return cls([first_action], clock=clock, event_manager=event_manager)

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def then(self, next_action: ActionLike) -> ActionChain:
        """Append ``next_action`` in place and return this chain."""
        self._actions.append(as_action(next_action))
        return self

    def wait_until(
        self,
        condition: Condition,
        polling_rate: Rate = DEFAULT_CHAIN_WAIT_POLLING_RATE,
        timeout: float = DEFAULT_CHAIN_WAIT_TIMEOUT,
    ) -> ActionChain:
        """Append a step that waits for ``condition``."""
        clock = self.clock
        return self.then(
            CallableAction(
                lambda: wait_until(condition, polling_rate, timeout, clock),
                name="wait_until",
            )
        )

    def repeat_until(
        self,
        exit_condition: Condition,
        polling_rate: Rate = DEFAULT_REPEAT_POLLING_RATE,
        timeout: float = DEFAULT_REPEAT_TIMEOUT,
    ) -> ActionChain:
        """Append a step that re-runs everything chained so far until ``exit_condition``.

        The repeated unit is a snapshot of the chain taken now, so the new
        step never repeats itself.
        """
        snapshot = ActionChain(
            self._actions,
            clock=self.clock,
            name=f"{self.name}[snapshot]",
            event_manager=self.event_manager,
        )
        clock = self.clock
        return self.then(
            CallableAction(
                lambda: repeat_until(snapshot.execute, exit_condition, polling_rate, timeout, clock),
                name="repeat_until",
            )
        )

    def execute(self) -> bool:
        for action in self._actions:
            if not execute_safely(action, self.event_manager):
                return False
        return True

    def __repr__(self) -> str:
        return f"ActionChain({[action.describe() for action in self._actions]})"


def chain(
    *actions: ActionLike,
    clock: Optional[Clock] = None,
    event_manager: Optional[EventManager] = None,
) -> ActionChain:
    """Build a fail-fast chain, e.g. ``chain(open_bank, deposit).wait_until(closed)``."""
    return ActionChain(actions, clock=clock, event_manager=event_manager)
