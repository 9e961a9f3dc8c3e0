"""PaneStateMachine 测试"""

import pytest

from panewm.pane import (
    SIGNAL_CLOSE,
    SIGNAL_MAXIMIZE,
    SIGNAL_MINIMIZE,
    SIGNAL_RESTORE,
    SIGNAL_RESTORE_MINIMIZED,
    Capability,
    LifecycleEvent,
    PaneStateMachine,
    StateChange,
    TransitionRule,
    WindowState,
    require_no_active_session,
    require_state_in,
)
from panewm.pane.predicates import always_false, always_true
from panewm.pane.transitions import TRANSITION_RULES, find_matching_rules
from panewm.telemetry import metrics


def _event(signal: str, trigger: str = "api") -> LifecycleEvent:
    return LifecycleEvent(pane_id="test-pane-123", signal=signal, trigger=trigger)


@pytest.fixture
def machine():
    """创建测试用状态机"""
    return PaneStateMachine(pane_id="test-pane-123")


class TestMinimizeTransitions:
    """最小化流转测试"""

    def test_minimize_from_normal(self, machine):
        """L1: NORMAL → MINIMIZED"""
        result = machine.process(_event(SIGNAL_MINIMIZE, "icon"))

        assert isinstance(result, StateChange)
        assert result.old_state == WindowState.NORMAL
        assert result.new_state == WindowState.MINIMIZED
        assert machine.state == WindowState.MINIMIZED
        assert metrics.get_counter("transition.ok", {"rule": "L1"}) == 1

    def test_restore_minimized(self, machine):
        """L2: MINIMIZED → NORMAL"""
        machine.process(_event(SIGNAL_MINIMIZE))

        result = machine.process(_event(SIGNAL_RESTORE_MINIMIZED, "entry"))

        assert result is not None
        assert machine.state == WindowState.NORMAL

    def test_duplicate_minimize_rejected(self, machine):
        """已经最小化时再次最小化被拒绝"""
        machine.process(_event(SIGNAL_MINIMIZE))

        assert machine.process(_event(SIGNAL_MINIMIZE)) is None
        assert machine.state == WindowState.MINIMIZED
        assert metrics.get_counter("transition.rejected", {"reason": "no_rule"}) == 1

    def test_minimize_requires_capability(self):
        machine = PaneStateMachine("p1", capabilities=Capability.DRAGGABLE)

        assert machine.process(_event(SIGNAL_MINIMIZE)) is None
        assert machine.state == WindowState.NORMAL
        assert metrics.get_counter("transition.rejected", {"reason": "predicate"}) == 1

    def test_minimize_while_maximized_rejected(self, machine):
        machine.process(_event(SIGNAL_MAXIMIZE))

        assert machine.process(_event(SIGNAL_MINIMIZE)) is None
        assert machine.state == WindowState.MAXIMIZED


class TestMaximizeTransitions:
    """最大化流转测试"""

    def test_maximize_toggle(self, machine):
        """L3 + L4: 同一控件切换"""
        first = machine.process(_event(SIGNAL_MAXIMIZE))
        second = machine.process(_event(SIGNAL_MAXIMIZE))

        assert first.new_state == WindowState.MAXIMIZED
        assert second.new_state == WindowState.NORMAL
        assert machine.state == WindowState.NORMAL

    def test_restore_from_maximized(self, machine):
        """L5: MAXIMIZED → NORMAL"""
        machine.process(_event(SIGNAL_MAXIMIZE))

        result = machine.process(_event(SIGNAL_RESTORE))

        assert result is not None
        assert machine.state == WindowState.NORMAL

    def test_restore_from_normal_rejected(self, machine):
        assert machine.process(_event(SIGNAL_RESTORE)) is None

    def test_maximize_from_minimized_rejected(self, machine):
        machine.process(_event(SIGNAL_MINIMIZE))
        assert machine.process(_event(SIGNAL_MAXIMIZE)) is None


class TestCloseTransitions:
    """关闭流转测试"""

    @pytest.mark.parametrize("setup", [[], [SIGNAL_MINIMIZE], [SIGNAL_MAXIMIZE]])
    def test_close_from_any_open_state(self, machine, setup):
        """L6: 任意非终态 → CLOSED"""
        for signal in setup:
            machine.process(_event(signal))

        result = machine.process(_event(SIGNAL_CLOSE))

        assert result is not None
        assert machine.state == WindowState.CLOSED
        assert machine.is_closed()

    def test_closed_is_terminal(self, machine):
        machine.process(_event(SIGNAL_CLOSE))

        for signal in (SIGNAL_MINIMIZE, SIGNAL_MAXIMIZE, SIGNAL_RESTORE,
                       SIGNAL_RESTORE_MINIMIZED, SIGNAL_CLOSE):
            assert machine.process(_event(signal)) is None
        assert machine.state == WindowState.CLOSED

    def test_close_rejected_during_session(self, machine):
        assert machine.process(_event(SIGNAL_CLOSE), in_session=True) is None
        assert machine.state == WindowState.NORMAL

    def test_close_requires_capability(self):
        machine = PaneStateMachine("p1", capabilities=Capability.MINIMIZABLE)
        assert machine.process(_event(SIGNAL_CLOSE)) is None


class TestStateId:
    """state_id 自增"""

    def test_state_id_increments_on_success(self, machine):
        before = machine.state_id
        change = machine.process(_event(SIGNAL_MINIMIZE))

        assert machine.state_id > before
        assert change.state_id == machine.state_id

    def test_state_id_unchanged_on_rejection(self, machine):
        before = machine.state_id
        machine.process(_event(SIGNAL_RESTORE))
        assert machine.state_id == before


class TestHistory:
    """历史记录"""

    def test_records_success_and_failure(self, machine):
        machine.process(_event(SIGNAL_MINIMIZE))
        machine.process(_event(SIGNAL_MINIMIZE))

        history = machine.history
        assert len(history) == 2
        assert history[0].success
        assert history[0].to_state == WindowState.MINIMIZED
        assert not history[1].success
        assert history[1].description == "no_rule_matched"

    def test_history_is_bounded(self, machine):
        for _ in range(100):
            machine.process(_event(SIGNAL_RESTORE))
        assert len(machine.history) == 30

    def test_history_log(self, machine):
        assert "no history" in machine.get_history_log()
        machine.process(_event(SIGNAL_MAXIMIZE))
        assert "maximize" in machine.get_history_log()


class TestRuleTable:

    def test_rule_names_unique(self):
        names = [rule.name for rule in TRANSITION_RULES]
        assert len(names) == len(set(names))

    def test_find_matching_rules(self):
        rules = find_matching_rules(SIGNAL_MAXIMIZE, WindowState.MAXIMIZED)
        assert [rule.name for rule in rules] == ["L4"]
        assert find_matching_rules(SIGNAL_CLOSE, WindowState.CLOSED) == []


class TestPredicates:
    """谓词库"""

    def test_require_state_in(self, machine):
        snapshot = machine.get_state_snapshot()
        event = _event(SIGNAL_CLOSE)

        assert require_state_in({WindowState.NORMAL})(event, snapshot)
        assert not require_state_in({WindowState.CLOSED})(event, snapshot)

    def test_require_no_active_session(self, machine):
        event = _event(SIGNAL_CLOSE)

        assert require_no_active_session()(event, machine.get_state_snapshot())
        assert not require_no_active_session()(event, machine.get_state_snapshot(in_session=True))

    def test_rule_with_failing_predicate(self):
        rule = TransitionRule(
            name="T",
            from_states=None,
            signal="noop",
            to_state=WindowState.NORMAL,
            description="",
            predicates=[always_true(), always_false()],
        )
        snapshot = PaneStateMachine("p1").get_state_snapshot()

        assert rule.matches_from_state(WindowState.MINIMIZED)
        assert not rule.matches_from_state(WindowState.CLOSED)
        assert not rule.check_predicates(_event("noop"), snapshot)


class TestMetrics:

    def test_counters_recorded(self, machine):
        machine.process(_event(SIGNAL_MINIMIZE))
        machine.process(_event(SIGNAL_MINIMIZE))

        assert metrics.get_all_counters() == {
            "transition.ok{rule=L1}": 1,
            "transition.rejected{reason=no_rule}": 1,
        }
        assert metrics.get_all_gauges() == {}
