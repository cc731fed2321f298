# src/fecap_core/hysteresis/branch.py
"""
The canonical outer (major-loop) branch of the ferroelectric hysteresis loop:

    branch(V, dir)   = Qs * tanh(a * (V - dir * Ec * tFE))
    d_branch(V, dir) = Qs * a * sech^2(a * (V - dir * Ec * tFE))

The ascending branch (dir = +1) switches around +Ec*tFE and the descending branch
(dir = -1) around -Ec*tFE. Both accept scalars or NumPy arrays.
"""
import logging

import numpy as np

from ..parameters import ParameterSet
from .base_enums import Direction

logger = logging.getLogger(__name__)


class BranchFunction:
    """Saturating tanh polarization curve of one device, parameterized by switching direction."""

    def __init__(self, parameters: ParameterSet):
        self.parameters = parameters
        self.saturation_charge: float = parameters.saturation_charge
        self._slope = parameters.slope_factor
        self._coercive_voltage = parameters.coercive_voltage
        logger.debug(
            f"BranchFunction initialized: Qs={self.saturation_charge:.4e} C/m^2, "
            f"a={self._slope:.4e} 1/V, Vc={self._coercive_voltage:.4e} V"
        )

    def _tanh(self, voltage, direction: Direction):
        return np.tanh(self._slope * (voltage - direction.sign * self._coercive_voltage))

    def value(self, voltage, direction: Direction):
        """Branch charge component at `voltage`, in C/m^2."""
        return self.saturation_charge * self._tanh(voltage, direction)

    def derivative(self, voltage, direction: Direction):
        """
        d(branch)/dV, in F/m^2. sech^2 is evaluated as 1 - tanh^2, which is exactly zero
        rather than overflowing once the tanh argument saturates.
        """
        t = self._tanh(voltage, direction)
        return self.saturation_charge * self._slope * (1.0 - t * t)

    def __call__(self, voltage, direction: Direction):
        return self.value(voltage, direction)
