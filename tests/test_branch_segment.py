# tests/test_branch_segment.py
import numpy as np
import pytest

from fecap_core.hysteresis import (
    BranchContext,
    BranchFunction,
    ChargeFunction,
    DegenerateSegmentError,
    Direction,
    PolarizationFunction,
    SegmentCalculator,
    segment_scale_offset,
)


class TestBranchFunction:
    def test_sign_symmetry(self, branch):
        v = np.linspace(-3.0, 3.0, 61)
        np.testing.assert_allclose(branch.value(v, Direction.UP), -branch.value(-v, Direction.DOWN),
                                   rtol=1e-14, atol=1e-18)

    def test_centred_on_coercive_voltage(self, branch, params):
        vc = params.coercive_voltage
        assert branch.value(vc, Direction.UP) == pytest.approx(0.0, abs=1e-15)
        assert branch.value(-vc, Direction.DOWN) == pytest.approx(0.0, abs=1e-15)
        # Peak slope Qs * a at the centre.
        assert branch.derivative(vc, Direction.UP) == pytest.approx(params.saturation_charge * params.slope_factor)

    def test_derivative_matches_finite_difference(self, branch):
        v = np.linspace(-2.5, 2.5, 11)
        h = 1e-6
        for direction in Direction:
            numeric = (branch.value(v + h, direction) - branch.value(v - h, direction)) / (2 * h)
            np.testing.assert_allclose(branch.derivative(v, direction), numeric, rtol=1e-6, atol=1e-9)

    def test_saturates_without_overflow(self, scenario_params):
        steep = BranchFunction(scenario_params)
        qs = scenario_params.saturation_charge
        with np.errstate(all="raise"):
            assert steep.value(1e6, Direction.UP) == qs
            assert steep.value(-1e6, Direction.DOWN) == -qs
            assert steep.derivative(1e6, Direction.UP) == 0.0
            assert steep.value(np.inf, Direction.UP) == qs
            assert steep.value(-np.inf, Direction.UP) == -qs

    def test_call_is_value(self, branch):
        assert branch(0.3, Direction.DOWN) == branch.value(0.3, Direction.DOWN)


class TestSegmentCalculator:
    def test_linear_map_through_both_points(self):
        scale, offset = segment_scale_offset(0.1, 0.2, -0.1, -0.3)
        assert scale == pytest.approx(0.4)
        assert offset == pytest.approx(0.02)
        assert scale * 0.2 + offset == pytest.approx(0.1)
        assert scale * -0.3 + offset == pytest.approx(-0.1)

    def test_nearly_saturated_points_keep_the_start_point(self):
        a_branch, b_branch = 0.2 * (1.0 - 1e-10), 0.2 * (1.0 - 5e-11)
        scale, offset = segment_scale_offset(0.1999999, a_branch, 0.19999995, b_branch)
        assert scale * a_branch + offset == pytest.approx(0.1999999, abs=1e-15)

    def test_equal_branch_values_are_degenerate(self):
        with pytest.raises(DegenerateSegmentError):
            segment_scale_offset(0.1, 0.05, -0.1, 0.05)

    def test_identical_voltages_are_degenerate(self, branch):
        calculator = SegmentCalculator(branch)
        with pytest.raises(DegenerateSegmentError) as excinfo:
            calculator.between(0.5, 0.1, 0.5, -0.1, Direction.UP)
        assert "Degenerate Hysteresis Segment" in excinfo.value.get_diagnostic_report()

    def test_segment_reproduces_turning_points(self, branch):
        calculator = SegmentCalculator(branch)
        polarization = PolarizationFunction(branch)
        scale, offset = calculator.between(-0.8, -0.05, 1.2, 0.12, Direction.UP)
        context = BranchContext(Direction.UP, scale, offset)
        assert polarization.value(-0.8, context) == pytest.approx(-0.05, rel=1e-12)
        assert polarization.value(1.2, context) == pytest.approx(0.12, rel=1e-12)

    def test_segment_towards_saturation(self, branch, params):
        calculator = SegmentCalculator(branch)
        polarization = PolarizationFunction(branch)
        scale, offset = calculator.between(-1.0, -0.15, np.inf, params.saturation_charge, Direction.UP)
        context = BranchContext(Direction.UP, scale, offset)
        assert polarization.value(-1.0, context) == pytest.approx(-0.15, rel=1e-12)
        assert polarization.value(50.0, context) == pytest.approx(params.saturation_charge, rel=1e-9)

    def test_saturated_branch_uses_shifted_segment(self, scenario_params):
        calculator = SegmentCalculator(BranchFunction(scenario_params))
        scale, offset = calculator.between(2.0, 4e-6, 3.0, 5e-6, Direction.UP)
        assert scale == 1.0
        assert offset == pytest.approx(4e-6 - 5e-6)


class TestChargeFunction:
    @pytest.mark.parametrize("scale, offset", [(1.0, 0.0), (0.3, 0.01), (0.0, 0.1)])
    def test_slope_is_strictly_positive(self, scenario_params, scale, offset):
        branch = BranchFunction(scenario_params)
        charge = ChargeFunction(PolarizationFunction(branch), scenario_params)
        v = np.linspace(-5.0, 5.0, 2001)
        for direction in Direction:
            context = BranchContext(direction, scale, offset)
            assert np.all(charge.derivative(v, context) > 0.0)

    def test_charge_adds_linear_dielectric_term(self, branch, params):
        polarization = PolarizationFunction(branch)
        charge = ChargeFunction(polarization, params)
        context = BranchContext.major_loop(Direction.DOWN)
        q, dq = charge.evaluate(0.7, context)
        assert q == pytest.approx(polarization.value(0.7, context) + params.linear_capacitance * 0.7)
        assert dq == pytest.approx(polarization.derivative(0.7, context) + params.linear_capacitance)
        assert isinstance(q, float) and isinstance(dq, float)
