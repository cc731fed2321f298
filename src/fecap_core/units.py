# --- src/fecap_core/units.py ---
import pint
import logging

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.info("Pint Unit Registry initialized.")

# --- Canonical dimensionality objects for explicit checks ---
# Polarization and capacitor charge are both expressed per unit electrode area.
VOLTAGE_DIMENSIONALITY = ureg.parse_expression('volt').dimensionality
CHARGE_DENSITY_DIMENSIONALITY = ureg.parse_expression('coulomb / meter ** 2').dimensionality


def to_si_magnitude(raw_value, expected_dimensionality, canonical_unit: str) -> float:
    """
    Converts a config value (plain number or unit-bearing string such as '1 uV') to a
    float magnitude in `canonical_unit`. Plain numbers are taken to already be in the
    canonical unit.

    Raises:
        pint.DimensionalityError: if the value carries incompatible units.
        pint.UndefinedUnitError: if the value names an unknown unit.
    """
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        return float(raw_value)
    qty = Quantity(raw_value)
    if qty.dimensionless and expected_dimensionality:
        # A bare number inside a string, e.g. '1e-6'.
        return float(qty.magnitude)
    if qty.dimensionality != expected_dimensionality:
        raise pint.DimensionalityError(qty.units, ureg.Unit(canonical_unit))
    return float(qty.to(canonical_unit).magnitude)


logger.debug("Defined canonical dimensionalities: VOLTAGE_DIMENSIONALITY, CHARGE_DENSITY_DIMENSIONALITY")
