# src/fecap_core/simulation/config.py
"""
Solver configuration: a frozen `SolverConfig` plus the parsers that build one from a raw
mapping or a YAML file.

Raw values may be plain SI numbers or unit-bearing strings, which are converted with
pint. The structure of the mapping is validated with a Cerberus schema first, so the
conversion code only ever sees well-typed input.
"""
import logging
import math
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cerberus
import pint
import yaml

from ..constants import (
    DEFAULT_ABS_CHARGE_TOL,
    DEFAULT_DAMPING_FRACTION,
    DEFAULT_MAX_BRACKET_SPAN,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_REL_CHARGE_TOL,
    DEFAULT_VOLTAGE_TOL,
)
from ..hysteresis.base_enums import Direction
from ..units import CHARGE_DENSITY_DIMENSIONALITY, VOLTAGE_DIMENSIONALITY, to_si_magnitude
from .exceptions import ConfigParsingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverConfig:
    """
    Numerical settings of one device's charge solver and the pre-history of its
    turning-point stack.

    Attributes:
        max_iterations: Newton-Raphson iteration cap.
        abs_charge_tol: Absolute charge residual tolerance, C/m^2.
        rel_charge_tol: Residual tolerance relative to |Qt|.
        voltage_tol: Newton steps shorter than this (V) count as converged.
        damping_fraction: Steps longer than this fraction of Ec*tFE are halved.
        bisection_fallback: Retry with a bracketing solver when Newton fails.
        max_bracket_span: Widest voltage interval the bracketing solver searches, V.
        initial_direction: Direction of travel before the first sample; DOWN means the
                           device starts positively poled on the descending major branch.
        initial_voltage: Voltage assumed before the first sample, V.
    """
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    abs_charge_tol: float = DEFAULT_ABS_CHARGE_TOL
    rel_charge_tol: float = DEFAULT_REL_CHARGE_TOL
    voltage_tol: float = DEFAULT_VOLTAGE_TOL
    damping_fraction: float = DEFAULT_DAMPING_FRACTION
    bisection_fallback: bool = False
    max_bracket_span: float = DEFAULT_MAX_BRACKET_SPAN
    initial_direction: Direction = Direction.DOWN
    initial_voltage: float = 0.0

    def __post_init__(self):
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) \
                or self.max_iterations < 1:
            raise ConfigParsingError(
                details="'max_iterations' must be an integer >= 1.",
                parameter="max_iterations", user_input=self.max_iterations,
            )
        for name in ("abs_charge_tol", "rel_charge_tol", "voltage_tol"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigParsingError(
                    details=f"'{name}' must be finite and non-negative.", parameter=name, user_input=value,
                )
        for name in ("damping_fraction", "max_bracket_span"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigParsingError(
                    details=f"'{name}' must be finite and strictly positive.", parameter=name, user_input=value,
                )
        if not isinstance(self.initial_direction, Direction):
            raise ConfigParsingError(
                details="'initial_direction' must be a Direction.",
                parameter="initial_direction", user_input=self.initial_direction,
            )
        if not math.isfinite(self.initial_voltage):
            raise ConfigParsingError(
                details="'initial_voltage' must be finite.",
                parameter="initial_voltage", user_input=self.initial_voltage,
            )

    def charge_tolerance(self, target_charge: float) -> float:
        """Residual tolerance for a solve towards `target_charge`."""
        return self.abs_charge_tol + self.rel_charge_tol * abs(target_charge)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["initial_direction"] = self.initial_direction.name
        return data


def _upper_if_string(value):
    return value.upper() if isinstance(value, str) else value


_quantity_rule = {"type": ["number", "string"]}

_schema = {
    "max_iterations": {"type": "integer", "min": 1},
    "abs_charge_tol": _quantity_rule,
    "rel_charge_tol": {"type": "number", "min": 0},
    "voltage_tol": _quantity_rule,
    "damping_fraction": {"type": "number"},
    "bisection_fallback": {"type": "boolean"},
    "max_bracket_span": _quantity_rule,
    "initial_direction": {"type": "string", "coerce": _upper_if_string, "allowed": ["UP", "DOWN"]},
    "initial_voltage": _quantity_rule,
}

# (field name, dimensionality, canonical unit) for every unit-bearing field.
_QUANTITY_FIELDS = (
    ("abs_charge_tol", CHARGE_DENSITY_DIMENSIONALITY, "coulomb / meter ** 2"),
    ("voltage_tol", VOLTAGE_DIMENSIONALITY, "volt"),
    ("max_bracket_span", VOLTAGE_DIMENSIONALITY, "volt"),
    ("initial_voltage", VOLTAGE_DIMENSIONALITY, "volt"),
)


def parse_solver_config(
    raw_config: Optional[Dict[str, Any]],
    source_file: Optional[Path] = None,
) -> SolverConfig:
    """
    Parses a raw solver configuration mapping into a validated `SolverConfig`.
    Missing keys keep their defaults; `None` or an empty mapping yields the defaults.

    Raises:
        ConfigParsingError: on unknown keys, wrong types, wrong physical dimensions or
                            out-of-range values.
    """
    if not raw_config:
        return SolverConfig()
    if not isinstance(raw_config, dict):
        raise ConfigParsingError(
            details=f"Solver configuration must be a mapping, got '{type(raw_config).__name__}'.",
            source_file=source_file,
        )

    validator = cerberus.Validator(_schema)
    if not validator.validate(raw_config):
        raise ConfigParsingError(
            details=f"Schema validation found {len(validator.errors)} issue(s).",
            source_file=source_file,
            schema_errors=validator.errors,
        )
    document = validator.document

    values: Dict[str, Any] = dict(document)
    for name, dimensionality, canonical_unit in _QUANTITY_FIELDS:
        if name not in document:
            continue
        try:
            values[name] = to_si_magnitude(document[name], dimensionality, canonical_unit)
        except (ValueError, TypeError, pint.DimensionalityError, pint.UndefinedUnitError) as e:
            raise ConfigParsingError(
                details=f"Could not convert '{name}' to {canonical_unit}: {e}",
                source_file=source_file, parameter=name, user_input=document[name],
            ) from e
    for name in ("rel_charge_tol", "damping_fraction"):
        if name in values:
            values[name] = float(values[name])
    if "initial_direction" in values:
        values["initial_direction"] = Direction[values["initial_direction"]]

    try:
        config = SolverConfig(**values)
    except ConfigParsingError as e:
        e.source_file = source_file
        raise
    logger.debug(f"Parsed {config!r}")
    return config


def load_solver_config(path: Union[str, Path]) -> SolverConfig:
    """Reads a YAML file whose root mapping is a solver configuration."""
    source = Path(path).resolve()
    if not source.is_file():
        raise ConfigParsingError(details=f"Configuration file not found at path: {source}", source_file=source)
    try:
        with source.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except PermissionError as e:
        raise ConfigParsingError(details=f"Permission denied when trying to read file: {e}", source_file=source) from e
    except yaml.YAMLError as e:
        raise ConfigParsingError(details=f"Invalid YAML syntax: {e}", source_file=source) from e
    if content is not None and not isinstance(content, dict):
        raise ConfigParsingError(
            details="The root of the YAML file must be a dictionary (mapping).", source_file=source
        )
    logger.info(f"Loading solver configuration from {source}")
    return parse_solver_config(content, source_file=source)
