"""
Unit tests for delay strategies.
"""

import random

import pytest

from tickflow.core.engine.rates import (
    ExponentialBackoff,
    as_rate,
    exponential_backoff,
    fixed_rate,
    random_jitter,
)


class TestFixedRate:
    """Test constant delay suppliers."""

    def test_returns_same_value(self):
        supplier = fixed_rate(600)
        assert [supplier() for _ in range(3)] == [600, 600, 600]

    def test_as_rate_wraps_numbers_and_keeps_callables(self):
        """Numbers become suppliers; suppliers pass through untouched."""
        backoff = ExponentialBackoff(10, 100)

        assert as_rate(250)() == 250
        assert as_rate(backoff) is backoff


class TestRandomJitter:
    """Test jittered delay suppliers."""

    def test_values_within_bounds(self):
        """Every value lies in [base, base + jitter)."""
        supplier = random_jitter(600, 10, random.Random(42))

        values = [supplier() for _ in range(200)]

        assert all(600 <= value < 610 for value in values)
        assert all(value == int(value) for value in values)

    def test_fresh_offset_per_call(self):
        """The offset is redrawn on every call."""
        supplier = random_jitter(0, 1000, random.Random(7))

        assert len({supplier() for _ in range(50)}) > 1

    def test_zero_jitter_is_constant(self):
        supplier = random_jitter(50, 0)
        assert {supplier() for _ in range(10)} == {50}

    def test_negative_jitter_rejected(self):
        with pytest.raises(ValueError):
            random_jitter(100, -1)


class TestExponentialBackoff:
    """Test doubling delay suppliers."""

    def test_sequence_doubles_to_cap(self):
        """50, 100, 200, 400, 800, then stays at the cap."""
        backoff = exponential_backoff(50, 800)

        assert [backoff() for _ in range(7)] == [50, 100, 200, 400, 800, 800, 800]

    def test_instances_are_independent(self):
        """Two suppliers never share state."""
        first = ExponentialBackoff(10, 1000)
        second = ExponentialBackoff(10, 1000)

        first()
        first()

        assert second() == 10
        assert first.current_delay == 40

    def test_cap_below_initial(self):
        """The first call returns the initial delay even above the cap."""
        backoff = ExponentialBackoff(500, 100)

        assert backoff() == 500
        assert backoff() == 100

    @pytest.mark.parametrize("initial", [0, -10])
    def test_non_positive_initial_rejected(self, initial):
        with pytest.raises(ValueError):
            ExponentialBackoff(initial, 1000)

    def test_negative_max_rejected(self):
        with pytest.raises(ValueError):
            ExponentialBackoff(10, -1)
