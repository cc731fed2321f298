# src/fecap_core/device_builder.py
"""
Top-level construction facade for ferroelectric capacitor devices.

`build_device` turns the raw mappings a host simulator holds (plain SI numbers for the
physical parameters, an optional solver configuration) into a ready
`FerroelectricCapacitor`. It is the gatekeeper for construction-time errors: any
`DiagnosableError` raised by the parameter or configuration subsystems is re-raised as a
single `DeviceBuildError` whose message is the full diagnostic report.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from .errors import DeviceBuildError, DiagnosableError, format_diagnostic_report
from .parameters import ParameterSet
from .simulation.config import parse_solver_config
from .simulation.device import FerroelectricCapacitor
from .simulation.relaxation import RelaxationHook

logger = logging.getLogger(__name__)


def build_device(
    raw_parameters: Mapping[str, Any],
    raw_config: Optional[Dict[str, Any]] = None,
    relaxation: Optional[RelaxationHook] = None,
) -> FerroelectricCapacitor:
    """
    Validates raw parameter and configuration mappings and builds a device.

    Raises:
        DeviceBuildError: with an actionable report if anything is invalid.
    """
    try:
        parameters = ParameterSet(**dict(raw_parameters))
        config = parse_solver_config(raw_config)
        device = FerroelectricCapacitor(parameters, config, relaxation)
        logger.info(
            f"Built ferroelectric capacitor: Vc={parameters.coercive_voltage:.4e} V, "
            f"Qs={parameters.saturation_charge:.4e} C/m^2"
        )
        return device

    except DiagnosableError as e:
        raise DeviceBuildError(e.get_diagnostic_report()) from e

    except DeviceBuildError:
        raise

    except TypeError as e:
        # Missing or unknown parameter names surface from the dataclass constructor.
        report = format_diagnostic_report(
            error_type="Malformed Device Parameters",
            details=str(e),
            suggestion="Supply exactly the ParameterSet fields: thickness, coercive_field, "
                       "relative_permittivity, saturation_charge, slope_factor and, optionally, "
                       "delay_constant and vacuum_permittivity.",
            context={}
        )
        raise DeviceBuildError(report) from e
