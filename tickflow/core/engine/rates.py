"""Delay strategies for polling loops.

A rate supplier is any zero-argument callable returning the number of
milliseconds to sleep before the next poll. Suppliers are called once per
loop iteration, which is what makes adaptive polling possible.

Strategies:
- Fixed: the same delay every time
- Jitter: base delay plus a fresh random offset on every call
- Exponential backoff: doubles after every call up to a ceiling (stateful)
"""

from __future__ import annotations

import random
from typing import Callable, Optional, Union

RateSupplier = Callable[[], float]


def fixed_rate(milliseconds: float) -> RateSupplier:
    """Create a supplier that always returns ``milliseconds``."""
    return lambda: milliseconds


def random_jitter(
    base_ms: float, jitter_ms: float, rng: Optional[random.Random] = None
) -> RateSupplier:
    """Create a supplier returning ``base_ms`` plus a random offset.

    The offset is drawn uniformly from ``[0, jitter_ms)`` and truncated to
    whole milliseconds on every call.

    Args:
        base_ms: Minimum delay
        jitter_ms: Exclusive upper bound of the random offset
        rng: Random source, mainly for deterministic tests

    Raises:
        ValueError: If ``jitter_ms`` is negative
    """
    if jitter_ms < 0:
        raise ValueError(f"Jitter must be non-negative, got {jitter_ms}")

    source = rng or random

    def supplier() -> float:
        return base_ms + int(source.random() * jitter_ms)

    return supplier


class ExponentialBackoff:
    """Stateful supplier that doubles its delay after every call.

    Each call returns the current delay and then advances it to
    ``min(current * 2, max_ms)``. The delay never resets on its own, so build
    a fresh instance for every logical retry sequence.
    """

    def __init__(self, initial_ms: float, max_ms: float):
        if initial_ms <= 0:
            raise ValueError(f"Initial delay must be positive, got {initial_ms}")
        if max_ms < 0:
            raise ValueError(f"Max delay must be non-negative, got {max_ms}")
        self.initial_ms = initial_ms
        self.max_ms = max_ms
        self.current_delay = initial_ms

    def __call__(self) -> float:
        result = self.current_delay
        self.current_delay = min(self.current_delay * 2, self.max_ms)
        return result

    def __repr__(self) -> str:
        return (
            f"ExponentialBackoff(initial_ms={self.initial_ms}, max_ms={self.max_ms}, "
            f"current_delay={self.current_delay})"
        )


def exponential_backoff(initial_ms: float, max_ms: float) -> ExponentialBackoff:
    """Create a new exponential backoff supplier."""
    return ExponentialBackoff(initial_ms, max_ms)


def as_rate(value: Union[int, float, RateSupplier]) -> RateSupplier:
    """Normalize a number or supplier into a supplier."""
    if callable(value):
        return value
    return fixed_rate(value)
