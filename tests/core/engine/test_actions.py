"""
Unit tests for the Action contract and fail-fast chains.

Tests callable adaptation, fault containment, chain ordering and the
chain-level wait/repeat steps.
"""

import pytest
from unittest.mock import Mock

from tickflow.core.engine.actions import (
    NO_OP,
    ActionChain,
    CallableAction,
    ScriptAborted,
    as_action,
    chain,
)
from tickflow.core.events.events import ActionFailed, EventType
from tests.conftest import CountingAction, CountingCondition, RaisingAction


class TestCallableAction:
    """Test adapting plain callables to actions."""

    def test_truthy_result_is_success(self):
        assert CallableAction(lambda: True).execute()
        assert CallableAction(lambda: 1).execute()
        assert not CallableAction(lambda: None).execute()

    def test_name_defaults_to_function_name(self):
        def deposit_all():
            return True

        assert CallableAction(deposit_all).describe() == "deposit_all"
        assert CallableAction(deposit_all, name="bank").describe() == "bank"

    def test_exception_becomes_failure(self):
        """A raising callable reports False and keeps the error."""
        error = RuntimeError("widget missing")
        action = CallableAction(Mock(side_effect=error))

        assert not action.execute()
        assert action.last_error is error

    def test_exception_publishes_action_failed(self, event_manager):
        """Faults are reported through the event manager."""
        received = []
        event_manager.subscribe(EventType.ACTION_FAILED, received.append)
        action = CallableAction(Mock(side_effect=ValueError("bad")), name="click",
                                event_manager=event_manager)

        action.execute()
        event_manager.process_events()

        assert len(received) == 1
        assert isinstance(received[0], ActionFailed)
        assert received[0].action_name == "click"
        assert "bad" in received[0].error

    def test_script_aborted_passes_through(self):
        """Aborts are never converted to failure."""
        action = CallableAction(Mock(side_effect=ScriptAborted("stop")))

        with pytest.raises(ScriptAborted):
            action.execute()

    def test_action_is_callable(self):
        action = CountingAction()

        assert action()
        assert action.calls == 1


class TestAsAction:
    """Test normalizing action-like values."""

    def test_action_returned_unchanged(self):
        action = CountingAction()
        assert as_action(action) is action

    def test_callable_wrapped(self):
        wrapped = as_action(lambda: True, name="step")

        assert isinstance(wrapped, CallableAction)
        assert wrapped.name == "step"

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            as_action(42)

    def test_no_op_succeeds(self):
        assert NO_OP.execute()


class TestActionChain:
    """Test fail-fast sequencing."""

    def test_runs_in_order(self):
        log = []
        steps = [CountingAction(name=name, log=log) for name in ("a", "b", "c")]

        assert chain(*steps).execute()
        assert log == ["a", "b", "c"]

    def test_stops_at_first_failure(self):
        """Elements after a failing one never run."""
        ok1, ok2 = CountingAction(), CountingAction()
        failing = CountingAction(result=False)
        never = CountingAction()

        assert not chain(ok1, ok2, failing, never).execute()

        assert (ok1.calls, ok2.calls, failing.calls, never.calls) == (1, 1, 1, 0)

    def test_empty_chain_succeeds(self):
        assert ActionChain().execute()
        assert len(ActionChain()) == 0

    def test_single_element_matches_bare_action(self):
        """A one-element chain behaves exactly like its element."""
        for result in (True, False):
            bare = CountingAction(result=result)
            wrapped = CountingAction(result=result)

            assert chain(wrapped).execute() == bare.execute()
            assert wrapped.calls == bare.calls == 1

    def test_chains_nest(self):
        log = []
        inner = chain(CountingAction(name="b", log=log), CountingAction(name="c", log=log))
        outer = chain(CountingAction(name="a", log=log), inner, CountingAction(name="d", log=log))

        assert outer.execute()
        assert log == ["a", "b", "c", "d"]

    def test_then_appends_in_place(self):
        first = CountingAction()
        built = ActionChain.start(first)

        returned = built.then(lambda: True).then(CountingAction())

        assert returned is built
        assert len(built) == 3
        assert built.actions[0] is first

    def test_action_then_starts_new_chain(self):
        first, second = CountingAction(), CountingAction()

        built = first.then(second)

        assert isinstance(built, ActionChain)
        assert list(built) == [first, second]

    def test_callables_accepted(self):
        calls = []

        assert chain(lambda: calls.append(1) or True, lambda: True).execute()
        assert calls == [1]

    def test_raising_element_fails_chain(self):
        after = CountingAction()

        assert not chain(Mock(side_effect=RuntimeError("boom")), after).execute()
        assert after.calls == 0

    def test_abort_propagates_through_chain(self):
        after = CountingAction()

        with pytest.raises(ScriptAborted):
            chain(Mock(side_effect=ScriptAborted("out")), after).execute()
        assert after.calls == 0

    def test_raising_action_subclass_fails_chain(self):
        after = CountingAction()

        assert not chain(lambda: True, RaisingAction(), after).execute()
        assert after.calls == 0

    def test_raising_action_subclass_in_nested_chain(self):
        assert not chain(CountingAction(), chain(RaisingAction())).execute()

    def test_raising_action_subclass_publishes_action_failed(self, event_manager):
        received = []
        event_manager.subscribe(EventType.ACTION_FAILED, received.append)

        assert not ActionChain([RaisingAction()], event_manager=event_manager).execute()
        event_manager.process_events()

        assert received[0].action_name == "RaisingAction"
        assert "RuntimeError" in received[0].error

    def test_abort_from_action_subclass_propagates(self):
        with pytest.raises(ScriptAborted):
            chain(RaisingAction(ScriptAborted("out"))).execute()


class TestChainWaitAndRepeat:
    """Test wait and repeat steps appended to a chain."""

    def test_wait_until_step(self, clock):
        condition = CountingCondition(true_after=2)
        after = CountingAction()

        built = chain(CountingAction(), clock=clock).wait_until(condition, 50, 1000).then(after)

        assert built.execute()
        assert clock.sleeps == [50, 50]
        assert after.calls == 1

    def test_wait_until_timeout_fails_chain(self, clock):
        after = CountingAction()

        built = chain(clock=clock).wait_until(lambda: False, 100, 300).then(after)

        assert not built.execute()
        assert after.calls == 0
        assert clock.now_ms() == 300

    def test_wait_until_defaults(self, clock):
        """Chain waits default to 100ms polls and a 5s budget."""
        assert not chain(clock=clock).wait_until(lambda: False).execute()

        assert set(clock.sleeps) == {100}
        assert clock.now_ms() == 5000

    def test_repeat_until_repeats_chain_so_far(self, clock):
        """The repeat step re-runs a snapshot of the preceding actions."""
        a, b = CountingAction(), CountingAction()
        condition = CountingCondition(true_after=2)

        built = chain(a, b, clock=clock).repeat_until(condition, 100, 10_000)

        assert built.execute()
        assert len(built) == 3
        assert (a.calls, b.calls) == (2, 2)

    def test_repeat_until_does_not_include_later_steps(self, clock):
        a, later = CountingAction(), CountingAction()
        condition = CountingCondition(true_after=4)

        built = chain(a, clock=clock).repeat_until(condition, 100, 10_000).then(later)

        assert built.execute()
        assert a.calls == 3
        assert later.calls == 1
