# src/fecap_core/simulation/solver.py
"""
Inverts the charge response of one segment: finds V with Q(V) = Qt.

The primary method is damped Newton-Raphson. Q is strictly increasing on every segment,
so divergence can only come from overshooting across a steep switching region; steps
longer than a fraction of the coercive voltage are halved, and a step that fails to
reduce the residual is backtracked. A bracketing solve with `scipy.optimize.brentq` is
available as a fallback for the rare cases Newton cannot finish within its budget.

The solver never mutates the turning-point history; it only sees a charge function of a
single voltage.
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, Tuple

from scipy import optimize

from .config import SolverConfig
from .results import METHOD_BISECTION, METHOD_NEWTON

logger = logging.getLogger(__name__)

#: (Q, dQ/dV) at a voltage, on a fixed segment.
ChargeEvaluator = Callable[[float], Tuple[float, float]]

_MAX_BACKTRACKS = 30
_MAX_BRACKET_EXPANSIONS = 64
_BRENTQ_MIN_XTOL = 2e-12


@dataclass(frozen=True)
class SolverOutcome:
    """Explicit state of a finished solve."""
    voltage: float
    iterations: int
    converged: bool
    method: str
    residual: float = math.nan


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


class NewtonSolver:
    """
    Charge-to-voltage solver for one device.

    Args:
        config: Tolerances, iteration cap and damping settings.
        voltage_scale: Characteristic voltage of the switching region (Ec * tFE), V.
    """

    def __init__(self, config: SolverConfig, voltage_scale: float):
        self.config = config
        self.voltage_scale = voltage_scale
        self.max_step = config.damping_fraction * voltage_scale

    def solve(self, evaluate: ChargeEvaluator, target_charge: float, start_voltage: float) -> SolverOutcome:
        """Damped Newton-Raphson from `start_voltage`."""
        config = self.config
        tolerance = config.charge_tolerance(target_charge)
        voltage = float(start_voltage)
        charge, slope = evaluate(voltage)

        for iteration in range(config.max_iterations):
            residual = charge - target_charge
            if not _finite(residual, slope) or slope <= 0.0:
                logger.debug(f"Newton stopped at {voltage:.6e} V: Q={charge!r}, dQ={slope!r}")
                return SolverOutcome(voltage, iteration, False, METHOD_NEWTON, residual)
            if abs(residual) <= tolerance:
                return SolverOutcome(voltage, iteration, True, METHOD_NEWTON, residual)

            step = -residual / slope
            if not math.isfinite(step):
                return SolverOutcome(voltage, iteration, False, METHOD_NEWTON, residual)
            while abs(step) > self.max_step:
                step *= 0.5

            trial_voltage = voltage + step
            trial_charge, trial_slope = evaluate(trial_voltage)
            backtracks = 0
            while not (math.isfinite(trial_charge) and abs(trial_charge - target_charge) <= abs(residual)):
                if backtracks >= _MAX_BACKTRACKS:
                    logger.debug(f"Newton stalled at {voltage:.6e} V after {backtracks} backtracking steps.")
                    return SolverOutcome(voltage, iteration + 1, False, METHOD_NEWTON, residual)
                step *= 0.5
                trial_voltage = voltage + step
                trial_charge, trial_slope = evaluate(trial_voltage)
                backtracks += 1

            voltage, charge, slope = trial_voltage, trial_charge, trial_slope
            if abs(step) < config.voltage_tol:
                return SolverOutcome(voltage, iteration + 1, True, METHOD_NEWTON, charge - target_charge)

        residual = charge - target_charge
        converged = math.isfinite(residual) and abs(residual) <= tolerance
        return SolverOutcome(voltage, config.max_iterations, converged, METHOD_NEWTON, residual)

    def bracketed_solve(self, evaluate: ChargeEvaluator, target_charge: float, start_voltage: float) -> SolverOutcome:
        """
        Brackets the root by expanding geometrically away from `start_voltage`, up to
        `max_bracket_span`, then refines it with Brent's method.
        """
        start = float(start_voltage)

        def residual(v: float) -> float:
            return evaluate(v)[0] - target_charge

        start_residual = residual(start)
        if not math.isfinite(start_residual):
            return SolverOutcome(start, 0, False, METHOD_BISECTION, start_residual)
        if start_residual == 0.0:
            return SolverOutcome(start, 0, True, METHOD_BISECTION, 0.0)

        # Q increases with V, so the root lies above the start when Q is still too small.
        sign = 1.0 if start_residual < 0.0 else -1.0
        width = max(self.max_step, _BRENTQ_MIN_XTOL)
        inner = start
        outer = start + sign * width
        expansions = 1
        outer_residual = residual(outer)
        while math.isfinite(outer_residual) and sign * outer_residual < 0.0:
            if width > self.config.max_bracket_span or expansions >= _MAX_BRACKET_EXPANSIONS:
                logger.debug(f"No sign change within {width:.3e} V of {start:.6e} V.")
                return SolverOutcome(outer, expansions, False, METHOD_BISECTION, outer_residual)
            inner = outer
            width *= 2.0
            outer = start + sign * width
            outer_residual = residual(outer)
            expansions += 1
        if not math.isfinite(outer_residual):
            return SolverOutcome(inner, expansions, False, METHOD_BISECTION, math.nan)

        low, high = (inner, outer) if sign > 0 else (outer, inner)
        root, info = optimize.brentq(
            residual, low, high,
            xtol=max(self.config.voltage_tol, _BRENTQ_MIN_XTOL),
            maxiter=max(self.config.max_iterations, 100),
            full_output=True, disp=False,
        )
        return SolverOutcome(float(root), expansions + info.iterations, bool(info.converged),
                             METHOD_BISECTION, residual(float(root)))
