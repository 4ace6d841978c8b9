"""Polling primitives for the action engine.

This module implements the blocking wait loops every higher-level combinator
is built on. All waiting is the calling thread sleeping in fixed or computed
increments and re-polling a predicate; there is no background execution.

Core Concepts:
- Durations are plain numbers of milliseconds
- Polling rates are suppliers recomputed on every iteration (see rates.py)
- Interruption is reported as ``False``, never raised
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Union

from .rates import RateSupplier, as_rate

Condition = Callable[[], bool]
Rate = Union[int, float, RateSupplier]


class Clock:
    """Wall clock with cooperative cancellation.

    Sleeping waits on an internal ``threading.Event`` so another thread can
    cut every current and future sleep short by calling ``cancel()``.
    """

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self._cancel_event = cancel_event or threading.Event()

    def now_ms(self) -> float:
        """Milliseconds from an arbitrary, monotonic origin."""
        return time.monotonic() * 1000.0

    def sleep(self, milliseconds: float) -> bool:
        """Block for ``milliseconds``.

        Returns:
            False if the clock was cancelled before or during the sleep
        """
        if milliseconds <= 0:
            return not self._cancel_event.is_set()
        interrupted = self._cancel_event.wait(milliseconds / 1000.0)
        return not interrupted

    def cancel(self) -> None:
        """Interrupt all sleeps on this clock until ``reset()`` is called."""
        self._cancel_event.set()

    def reset(self) -> None:
        self._cancel_event.clear()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()


SYSTEM_CLOCK = Clock()


def sleep(milliseconds: float, clock: Optional[Clock] = None) -> bool:
    """Sleep on ``clock`` (the system clock by default).

    Returns:
        True if the full duration elapsed, False if interrupted
    """
    return (clock or SYSTEM_CLOCK).sleep(milliseconds)


def wait_until(
    condition: Condition,
    polling_rate: Rate,
    timeout: float,
    clock: Optional[Clock] = None,
) -> bool:
    """Poll ``condition`` until it holds or ``timeout`` elapses.

    The condition is checked before any sleep, so an already-true condition
    returns immediately. The polling rate is re-read on every iteration.

    Args:
        condition: Predicate to poll
        polling_rate: Delay in ms between checks, or a supplier of it
        timeout: Budget in ms; 0 still allows one check
        clock: Clock to sleep on

    Returns:
        True once the condition holds, False on timeout or interruption
    """
    clock = clock or SYSTEM_CLOCK
    rate = as_rate(polling_rate)
    start = clock.now_ms()

    while True:
        if condition():
            return True

        wait_time = rate()
        if wait_time > 0 and not clock.sleep(wait_time):
            return False

        if clock.now_ms() - start >= timeout:
            return False


def repeat_until(
    action: Callable[[], bool],
    exit_condition: Condition,
    polling_rate: Rate,
    timeout: float,
    clock: Optional[Clock] = None,
) -> bool:
    """Run ``action`` repeatedly until ``exit_condition`` holds.

    The exit condition is checked both before and after each run so the
    action is never invoked once the goal is reached. A failing action ends
    the loop at once; that is distinct from running out of time.

    Args:
        action: Operation to repeat; returning False aborts the loop
        exit_condition: Predicate that ends the loop successfully
        polling_rate: Delay in ms between runs, or a supplier of it
        timeout: Budget in ms
        clock: Clock to sleep on

    Returns:
        True if the exit condition was reached, False on action failure,
        timeout or interruption
    """
    clock = clock or SYSTEM_CLOCK
    rate = as_rate(polling_rate)
    start = clock.now_ms()

    while True:
        if exit_condition():
            return True

        if not action():
            return False

        if exit_condition():
            return True

        wait_time = rate()
        if wait_time > 0 and not clock.sleep(wait_time):
            return False

        if clock.now_ms() - start >= timeout:
            return False
