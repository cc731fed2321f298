# src/fecap_core/simulation/relaxation.py
"""
The pluggable time-domain relaxation hook.

The engine itself is static: it maps a voltage (or target charge) to a point on the
history-selected hysteresis segment. Rate-dependent effects, such as a
Landau-Khalatnikov-style lag governed by `ParameterSet.delay_constant`, are supplied by
the host as a `RelaxationHook` that perturbs the effective voltage or target charge
before each evaluation. The hook must be deterministic and side-effect free with respect
to the device; it is called exactly once per evaluation request.
"""
import logging
from typing import Protocol, runtime_checkable

from ..parameters import ParameterSet

logger = logging.getLogger(__name__)


@runtime_checkable
class RelaxationHook(Protocol):
    """Contract for host-supplied relaxation models."""

    def adjust_voltage(self, voltage: float, parameters: ParameterSet) -> float:
        """Effective voltage seen by the hysteresis engine for an applied `voltage`."""
        ...

    def adjust_charge(self, target_charge: float, parameters: ParameterSet) -> float:
        """Effective target charge handed to the solver for a requested `target_charge`."""
        ...


class NoRelaxation:
    """The identity hook: the device responds instantaneously."""

    def adjust_voltage(self, voltage: float, parameters: ParameterSet) -> float:
        return voltage

    def adjust_charge(self, target_charge: float, parameters: ParameterSet) -> float:
        return target_charge

    def __repr__(self) -> str:
        return "NoRelaxation()"
