# src/fecap_core/simulation/results.py
"""
Immutable result contracts returned by the device facade.

Results are frozen dataclasses rather than tuples so that a host simulator reads
`result.dcharge_dvoltage` instead of remembering positional order.
"""
from dataclasses import dataclass

import numpy as np

from ..hysteresis.base_enums import Direction
from .exceptions import NonConvergenceError

#: Labels for `EvaluationResult.method`.
METHOD_DIRECT = "direct"
METHOD_NEWTON = "newton"
METHOD_BISECTION = "bisection"


@dataclass(frozen=True)
class EvaluationResult:
    """
    The outcome of a single device evaluation.

    Attributes:
        voltage: The applied (or solved-for) voltage, V.
        charge: Total charge density Q at `voltage`, C/m^2.
        dcharge_dvoltage: dQ/dV at `voltage`, F/m^2. Always positive.
        polarization: Ferroelectric polarization P at `voltage`, C/m^2.
        direction: Direction of travel of the segment that produced the result.
        iterations: Solver iterations used; 0 for a direct evaluation.
        converged: False only when a charge solve stopped short of tolerance. The
                   remaining fields then describe the last iterate.
        method: "direct", "newton" or "bisection".
    """
    voltage: float
    charge: float
    dcharge_dvoltage: float
    polarization: float
    direction: Direction
    iterations: int = 0
    converged: bool = True
    method: str = METHOD_DIRECT

    @property
    def capacitance(self) -> float:
        """Alias of `dcharge_dvoltage`, the small-signal capacitance per area."""
        return self.dcharge_dvoltage

    def raise_for_convergence(self, target_charge: float = float("nan")) -> "EvaluationResult":
        """Returns self if converged, otherwise raises NonConvergenceError."""
        if not self.converged:
            raise NonConvergenceError(
                target_charge=target_charge,
                last_voltage=self.voltage,
                iterations=self.iterations,
                details=f"Method: {self.method}.",
            )
        return self


@dataclass(frozen=True)
class TraceResult:
    """
    Sample-by-sample response of a device to a voltage waveform.

    Attributes:
        voltages: Applied voltages, V. Shape (N,).
        charges: Total charge density, C/m^2. Shape (N,).
        capacitances: dQ/dV, F/m^2. Shape (N,).
        polarizations: Polarization, C/m^2. Shape (N,).
        history_depths: Number of stored turning points after each sample. Shape (N,).
    """
    voltages: np.ndarray
    charges: np.ndarray
    capacitances: np.ndarray
    polarizations: np.ndarray
    history_depths: np.ndarray

    def __len__(self) -> int:
        return int(self.voltages.shape[0])
