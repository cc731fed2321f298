# src/fecap_core/parameters/parameters.py
"""
The immutable physical constants of one ferroelectric capacitor instance.

A `ParameterSet` is created once per device and validated at construction time; the
hysteresis engine never re-checks it. All values are plain SI floats, unit conversion
is the host simulator's responsibility.
"""
import logging
import math
import numbers
from dataclasses import dataclass, asdict
from typing import Dict

from ..constants import VACUUM_PERMITTIVITY_F_PER_M
from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

# Canonical unit of each field, used for diagnostics.
PARAMETER_UNITS: Dict[str, str] = {
    "thickness": "m",
    "coercive_field": "V/m",
    "relative_permittivity": "dimensionless",
    "saturation_charge": "C/m**2",
    "slope_factor": "1/V",
    "delay_constant": "s",
    "vacuum_permittivity": "F/m",
}

_STRICTLY_POSITIVE_FIELDS = (
    "thickness",
    "coercive_field",
    "relative_permittivity",
    "saturation_charge",
    "slope_factor",
    "vacuum_permittivity",
)


@dataclass(frozen=True)
class ParameterSet:
    """
    Physical constants of the ferroelectric layer.

    Attributes:
        thickness: Ferroelectric thickness tFE, in m.
        coercive_field: Coercive field Ec, in V/m.
        relative_permittivity: Background relative permittivity of the ferroelectric.
        saturation_charge: Saturation polarization Qs, in C/m^2.
        slope_factor: Steepness `a` of the tanh branch, in 1/V.
        delay_constant: Relaxation delay constant, in s. Only consumed by an external
                        relaxation hook; the static engine ignores it.
        vacuum_permittivity: EPS0, in F/m.
    """
    thickness: float
    coercive_field: float
    relative_permittivity: float
    saturation_charge: float
    slope_factor: float
    delay_constant: float = 0.0
    vacuum_permittivity: float = VACUUM_PERMITTIVITY_F_PER_M

    def __post_init__(self):
        for name in PARAMETER_UNITS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameterError(
                    parameter_name=name, value=value,
                    details=f"Expected a real number, got type '{type(value).__name__}'",
                    expected_unit=PARAMETER_UNITS[name],
                )
            if not math.isfinite(value):
                raise InvalidParameterError(
                    parameter_name=name, value=value,
                    details="Value must be finite",
                    expected_unit=PARAMETER_UNITS[name],
                )
        for name in _STRICTLY_POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise InvalidParameterError(
                    parameter_name=name, value=getattr(self, name),
                    details="Value must be strictly positive",
                    expected_unit=PARAMETER_UNITS[name],
                )
        if self.delay_constant < 0:
            raise InvalidParameterError(
                parameter_name="delay_constant", value=self.delay_constant,
                details="Value must be non-negative",
                expected_unit=PARAMETER_UNITS["delay_constant"],
            )
        logger.debug(f"Validated {self!r}")

    @property
    def coercive_voltage(self) -> float:
        """Ec * tFE, the centre of the ascending branch, in V."""
        return self.coercive_field * self.thickness

    @property
    def linear_capacitance(self) -> float:
        """Background dielectric capacitance per area, epsr * EPS0 / tFE, in F/m^2."""
        return self.relative_permittivity * self.vacuum_permittivity / self.thickness

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
