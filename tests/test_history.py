# tests/test_history.py
from dataclasses import replace

import numpy as np
import pytest

from fecap_core.hysteresis import (
    BranchContext,
    BranchFunction,
    Direction,
    HistoryManager,
    HistoryStateError,
    TurningPoint,
)

from conftest import drive


def assert_stack_invariants(history):
    stack = history.turning_points
    for below, above in zip(stack[:-1], stack[1:]):
        assert above.direction is below.direction.opposite
        assert Direction.of_step(below.voltage, above.voltage) is above.direction
    for i in range(2, len(stack)):
        assert not stack[i - 2].is_met_by(stack[i].voltage)
    if stack:
        assert history.direction is stack[-1].direction.opposite


class TestTurningPoint:
    def test_is_met_by_is_non_strict(self):
        maximum = TurningPoint(1.0, Direction.UP, 0.1)
        minimum = TurningPoint(-1.0, Direction.DOWN, -0.1)
        assert maximum.is_met_by(1.0) and maximum.is_met_by(1.5)
        assert not maximum.is_met_by(0.99)
        assert minimum.is_met_by(-1.0) and minimum.is_met_by(-2.0)
        assert not minimum.is_met_by(-0.99)


class TestHistoryManager:
    def test_initial_state_is_major_loop(self, history):
        assert len(history) == 0
        assert history.direction is Direction.DOWN
        assert history.previous_voltage == 0.0
        assert history.closing_voltage() is None
        assert history.active_context() == BranchContext.major_loop(Direction.DOWN)

    def test_reference_scenario_stack_depths(self, scenario_params):
        history = HistoryManager(BranchFunction(scenario_params))
        drive(history, [0.0, 3.0])
        # Leaving the initial, positively poled state is itself a reversal.
        assert len(history) == 1
        assert history.update(2.9) is True
        assert len(history) == 2
        assert history.turning_points[-1].voltage == 3.0
        drive(history, [2.9, -3.0])
        assert len(history) == 0
        drive(history, [-3.0, 3.0])
        assert len(history) == 1
        only = history.turning_points[0]
        assert (only.voltage, only.direction) == (-3.0, Direction.DOWN)
        assert_stack_invariants(history)

    def test_nested_minor_loops(self, history):
        drive(history, [0.0, 2.0, -2.0, 1.0, -1.0, 0.5])
        assert [tp.voltage for tp in history.turning_points] == [-2.0, 1.0, -1.0]
        assert [tp.direction for tp in history.turning_points] == [Direction.DOWN, Direction.UP, Direction.DOWN]
        assert history.direction is Direction.UP
        assert history.closing_voltage() == 1.0
        assert_stack_invariants(history)

    def test_wipeout_removes_enclosed_loops(self, history):
        drive(history, [0.0, 2.0, -2.0, 1.0, -1.0, 0.5])
        history.update(0.4)
        assert len(history) == 4
        drive(history, [0.4, -1.5])
        assert [tp.voltage for tp in history.turning_points] == [-2.0, 1.0]
        assert history.closing_voltage() == -2.0
        drive(history, [-1.5, 1.5])
        assert [tp.voltage for tp in history.turning_points] == [-2.0]
        assert_stack_invariants(history)

    def test_wipe_out_returns_removed_count(self, history):
        drive(history, [0.0, 2.0, -2.0, 1.0, -1.0, 0.5])
        history.update(0.4)
        assert history.wipe_out(-1.0) == 2
        assert history.wipe_out(-1.0) == 0

    def test_polarization_is_continuous_at_reversal(self, history):
        drive(history, [0.0, 2.0, -2.0, 1.0])
        history.update(0.9)
        top = history.turning_points[-1]
        assert top.voltage == 1.0
        assert history.polarization_at(1.0) == pytest.approx(top.polarization, rel=1e-12)

    def test_return_point_memory(self, history):
        drive(history, [0.0, 2.0, -2.0, 1.0, -1.0])
        history.update(-0.9)
        closing = history.turning_points[-2]
        assert closing.voltage == 1.0
        assert history.polarization_at(1.0) == pytest.approx(closing.polarization, rel=1e-12)

    def test_equal_sample_is_not_a_reversal(self, history):
        drive(history, [0.0, 1.0, 0.7])
        before = history.turning_points
        assert history.update(0.7) is False
        assert history.turning_points == before
        assert history.direction is Direction.DOWN

    def test_random_walk_keeps_invariants(self, history):
        rng = np.random.default_rng(1234)
        voltage, reversals = 0.0, 0
        for step in rng.uniform(-0.6, 0.6, size=400):
            if step == 0.0:
                continue
            voltage = float(np.clip(voltage + step, -4.0, 4.0))
            reversals += history.update(voltage)
            assert_stack_invariants(history)
            assert len(history) <= reversals

    def test_random_walk_near_saturation_stays_continuous(self, params):
        steep = replace(params, slope_factor=10.0)
        history = HistoryManager(BranchFunction(steep))
        rng = np.random.default_rng(18)
        voltage = 0.0
        for step in rng.choice([-0.05, 0.05], size=3000):
            voltage += float(step)
            history.update(voltage)
            if len(history):
                top = history.turning_points[-1]
                assert history.polarization_at(top.voltage) == pytest.approx(top.polarization, abs=1e-14)
            assert abs(history.polarization_at(voltage)) <= steep.saturation_charge * (1.0 + 1e-9)

    def test_copy_is_independent(self, history):
        drive(history, [0.0, 2.0, 1.0])
        clone = history.copy()
        clone.update(1.5)
        assert len(history) == 2
        assert len(clone) == 3
        assert history.direction is Direction.DOWN
        assert history.previous_voltage == 1.0

    def test_reset(self, history):
        drive(history, [0.0, 2.0, -1.0])
        history.reset()
        assert len(history) == 0
        assert history.direction is Direction.DOWN
        assert history.previous_voltage == 0.0


class TestRestore:
    def test_round_trip_through_pairs(self, branch, history):
        drive(history, [0.0, 2.0, -2.0, 1.0, -1.0, 0.5])
        pairs = history.to_pairs()
        clone = HistoryManager.from_pairs(branch, pairs, history.direction.name.lower(), history.previous_voltage)
        assert clone.to_pairs() == pairs
        assert clone.direction is history.direction
        for original, restored in zip(history.turning_points, clone.turning_points):
            assert restored.polarization == pytest.approx(original.polarization, rel=1e-12)
        assert clone.polarization_at(0.2) == pytest.approx(history.polarization_at(0.2), rel=1e-12)

    @pytest.mark.parametrize("pairs, direction", [
        ([(0.0, "UP"), (1.0, "UP")], "DOWN"),
        ([(1.0, "DOWN"), (0.5, "UP")], "DOWN"),
        ([(-2.0, "DOWN"), (1.0, "UP"), (-3.0, "DOWN")], "UP"),
        ([(1.0, "UP")], "UP"),
        ([(1.0, "SIDEWAYS")], "DOWN"),
        ([(float("inf"), "UP")], "DOWN"),
    ])
    def test_invalid_histories_are_rejected(self, history, pairs, direction):
        with pytest.raises(HistoryStateError) as excinfo:
            history.restore(pairs, direction, 0.0)
        assert isinstance(excinfo.value, ValueError)
        assert "Invalid Turning-Point History" in excinfo.value.get_diagnostic_report()
        # A rejected restore leaves the history untouched.
        assert len(history) == 0
