# src/fecap_core/simulation/device.py
"""
The device facade: one ferroelectric capacitor instance as seen by a host simulator.

A `FerroelectricCapacitor` owns its parameters, its solver settings, its relaxation hook
and, exclusively, its turning-point history. Calls on one instance must arrive in
simulation-time order; separate instances share no state and may be evaluated on
separate threads.
"""
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np

from ..checkpoint import load_history, save_history
from ..errors import DeviceBuildError
from ..hysteresis.base_enums import Direction
from ..hysteresis.branch import BranchFunction
from ..hysteresis.context import BranchContext
from ..hysteresis.history import HistoryManager
from ..hysteresis.response import ChargeFunction, PolarizationFunction
from ..parameters import ParameterSet
from .config import SolverConfig
from .relaxation import NoRelaxation, RelaxationHook
from .results import METHOD_DIRECT, METHOD_NEWTON, EvaluationResult, TraceResult
from .solver import NewtonSolver, SolverOutcome

logger = logging.getLogger(__name__)


class FerroelectricCapacitor:
    """
    History-dependent charge-voltage model of a ferroelectric capacitor.

    Args:
        parameters: The validated physical constants of this device.
        config: Solver settings and initial history state; defaults if omitted.
        relaxation: Optional time-domain relaxation hook; identity if omitted.

    Raises:
        DeviceBuildError: if any argument has the wrong type.
    """

    def __init__(
        self,
        parameters: ParameterSet,
        config: Optional[SolverConfig] = None,
        relaxation: Optional[RelaxationHook] = None,
    ):
        if not isinstance(parameters, ParameterSet):
            raise DeviceBuildError(
                f"A ferroelectric capacitor requires a ParameterSet, got '{type(parameters).__name__}'."
            )
        config = config if config is not None else SolverConfig()
        if not isinstance(config, SolverConfig):
            raise DeviceBuildError(f"'config' must be a SolverConfig, got '{type(config).__name__}'.")
        relaxation = relaxation if relaxation is not None else NoRelaxation()
        if not isinstance(relaxation, RelaxationHook):
            raise DeviceBuildError(
                f"'relaxation' must provide adjust_voltage() and adjust_charge(); got '{type(relaxation).__name__}'."
            )

        self.parameters = parameters
        self.config = config
        self.relaxation = relaxation

        self.branch = BranchFunction(parameters)
        self.polarization = PolarizationFunction(self.branch)
        self.charge = ChargeFunction(self.polarization, parameters)
        self.solver = NewtonSolver(config, parameters.coercive_voltage)
        self._history = HistoryManager(self.branch, config.initial_direction, config.initial_voltage)
        logger.debug(f"FerroelectricCapacitor created with {config!r} and {relaxation!r}")

    # --- State ---

    @property
    def history(self) -> HistoryManager:
        """The turning-point history. Mutate it only through this device's methods."""
        return self._history

    def reset(self) -> None:
        """Returns the device to its initial, unswitched state."""
        self._history.reset()

    def save_checkpoint(self, path: Union[str, Path]) -> Path:
        return save_history(self._history, path, self.parameters)

    def load_checkpoint(self, path: Union[str, Path]) -> None:
        load_history(self._history, path, self.parameters)

    # --- Evaluation ---

    def evaluate_at_voltage(self, voltage: float) -> EvaluationResult:
        """
        Direct evaluation at an applied voltage. Records a turning point when `voltage`
        reverses the direction of travel.

        A non-finite voltage leaves the history untouched and returns a result with
        `converged=False` and NaN charge.
        """
        applied = float(voltage)
        effective = float(self.relaxation.adjust_voltage(applied, self.parameters))
        if not math.isfinite(effective):
            logger.warning(f"Refusing to evaluate at non-finite voltage {effective!r}; history unchanged.")
            return EvaluationResult(
                voltage=effective, charge=math.nan, dcharge_dvoltage=math.nan, polarization=math.nan,
                direction=self._history.direction, iterations=0, converged=False, method=METHOD_DIRECT,
            )
        self._history.update(effective)
        return self._result_at(effective, self._history.active_context())

    def solve_for_charge(self, target_charge: float) -> EvaluationResult:
        """
        Inverse evaluation: the voltage at which this device holds `target_charge`.

        The history is updated from the voltage found, exactly as `evaluate_at_voltage`
        would, but only when the solve converged. A failed solve returns the last
        iterate with `converged=False` and leaves the history as it was.
        """
        requested = float(target_charge)
        target = float(self.relaxation.adjust_charge(requested, self.parameters))
        history = self._history
        if not math.isfinite(target):
            logger.warning(f"Refusing to solve for non-finite charge {target!r}; history unchanged.")
            return EvaluationResult(
                voltage=history.previous_voltage, charge=math.nan, dcharge_dvoltage=math.nan,
                polarization=math.nan, direction=history.direction, iterations=0, converged=False,
                method=METHOD_NEWTON,
            )

        trial = history.copy()
        start = trial.previous_voltage
        start_charge, _ = self.charge.evaluate(start, trial.active_context())
        if target == start_charge:
            return self._result_at(start, trial.active_context())

        # Q increases with V on every segment, so the charge comparison fixes the direction
        # of travel before the voltage is known.
        direction = Direction.UP if target > start_charge else Direction.DOWN
        trial.reverse(direction)

        iterations = 0
        wiped_at = None
        while True:
            context = trial.active_context()
            outcome = self._solve_on(context, target, start)
            iterations += outcome.iterations
            closing = trial.closing_voltage()
            if not outcome.converged or closing is None:
                break
            if trial.wipe_out(outcome.voltage):
                # The root lies beyond the extremum that closes this minor loop; continue
                # on the enclosing segment from that extremum.
                start = wiped_at = closing
                continue
            closing_charge, _ = self.charge.evaluate(closing, context)
            if abs(target - closing_charge) <= self.config.charge_tolerance(target):
                # Qt is the charge of the closing extremum itself; land on it exactly so the
                # committed sample closes the minor loop.
                outcome = replace(outcome, voltage=closing)
            break

        if outcome.converged and wiped_at is not None and direction.sign * (wiped_at - outcome.voltage) > 0:
            # The re-solved root fell short of the extremum already passed.
            outcome = replace(outcome, voltage=wiped_at)

        if not outcome.converged:
            logger.warning(
                f"Charge solve for Qt={target:.6e} C/m^2 did not converge after {iterations} iteration(s); "
                f"last voltage {outcome.voltage:.6e} V. History unchanged."
            )
            result = self._result_at(outcome.voltage, context)
            return EvaluationResult(
                voltage=result.voltage, charge=result.charge, dcharge_dvoltage=result.dcharge_dvoltage,
                polarization=result.polarization, direction=result.direction, iterations=iterations,
                converged=False, method=outcome.method,
            )

        history.update(outcome.voltage)
        result = self._result_at(outcome.voltage, history.active_context())
        logger.debug(
            f"Solved Qt={target:.6e} C/m^2 -> V={outcome.voltage:.6e} V in {iterations} iteration(s) "
            f"({outcome.method})."
        )
        return EvaluationResult(
            voltage=result.voltage, charge=result.charge, dcharge_dvoltage=result.dcharge_dvoltage,
            polarization=result.polarization, direction=result.direction, iterations=iterations,
            converged=True, method=outcome.method,
        )

    def trace(self, voltages: Iterable[float]) -> TraceResult:
        """Evaluates a voltage waveform sample by sample, updating the history as it goes."""
        samples = np.asarray(list(voltages), dtype=float)
        if samples.ndim != 1:
            raise ValueError(f"Expected a 1D voltage waveform, got shape {samples.shape}.")
        charges = np.empty_like(samples)
        capacitances = np.empty_like(samples)
        polarizations = np.empty_like(samples)
        depths = np.empty(samples.shape, dtype=int)
        for i, v in enumerate(samples):
            result = self.evaluate_at_voltage(v)
            charges[i] = result.charge
            capacitances[i] = result.dcharge_dvoltage
            polarizations[i] = result.polarization
            depths[i] = len(self._history)
        return TraceResult(
            voltages=samples, charges=charges, capacitances=capacitances,
            polarizations=polarizations, history_depths=depths,
        )

    # --- Helpers ---

    def _solve_on(self, context: BranchContext, target: float, start: float) -> SolverOutcome:
        def evaluate(v: float):
            return self.charge.evaluate(v, context)

        outcome = self.solver.solve(evaluate, target, start)
        if not outcome.converged and self.config.bisection_fallback:
            logger.info(
                f"Newton did not converge for Qt={target:.6e} C/m^2 after {outcome.iterations} iteration(s); "
                f"falling back to bracketed solve."
            )
            fallback = self.solver.bracketed_solve(evaluate, target, start)
            outcome = SolverOutcome(
                fallback.voltage, outcome.iterations + fallback.iterations, fallback.converged,
                fallback.method, fallback.residual,
            )
        return outcome

    def _result_at(self, voltage: float, context: BranchContext) -> EvaluationResult:
        charge, slope = self.charge.evaluate(voltage, context)
        return EvaluationResult(
            voltage=voltage,
            charge=charge,
            dcharge_dvoltage=slope,
            polarization=float(self.polarization.value(voltage, context)),
            direction=context.direction,
            iterations=0,
            converged=True,
            method=METHOD_DIRECT,
        )

    def __repr__(self) -> str:
        return f"FerroelectricCapacitor({self.parameters!r}, history={self._history!r})"
