# src/fecap_core/hysteresis/response.py
"""
Polarization and total-charge responses on the active segment.

    P(V)  = branch(V, dir) * m + b
    dP(V) = d_branch(V, dir) * m
    Q(V)  = P(V) + epsr * EPS0 * V / tFE
    dQ(V) = dP(V) + epsr * EPS0 / tFE

`ChargeFunction` is built on top of `PolarizationFunction` so that Q and dQ cannot drift
apart from P and dP.
"""
from typing import Tuple

from ..parameters import ParameterSet
from .branch import BranchFunction
from .context import BranchContext


class PolarizationFunction:
    """Ferroelectric polarization on the segment described by a BranchContext."""

    def __init__(self, branch: BranchFunction):
        self.branch = branch

    def value(self, voltage, context: BranchContext):
        return self.branch.value(voltage, context.direction) * context.scale + context.offset

    def derivative(self, voltage, context: BranchContext):
        return self.branch.derivative(voltage, context.direction) * context.scale


class ChargeFunction:
    """Total capacitor charge: polarization plus the linear dielectric contribution."""

    def __init__(self, polarization: PolarizationFunction, parameters: ParameterSet):
        self.polarization = polarization
        self.linear_capacitance: float = parameters.linear_capacitance

    def value(self, voltage, context: BranchContext):
        return self.polarization.value(voltage, context) + self.linear_capacitance * voltage

    def derivative(self, voltage, context: BranchContext):
        return self.polarization.derivative(voltage, context) + self.linear_capacitance

    def evaluate(self, voltage: float, context: BranchContext) -> Tuple[float, float]:
        """(Q, dQ/dV) at a single voltage."""
        return float(self.value(voltage, context)), float(self.derivative(voltage, context))
