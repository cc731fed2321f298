# src/fecap_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("fecap_core package initialized.")

from .units import ureg, pint, Quantity, VOLTAGE_DIMENSIONALITY, CHARGE_DENSITY_DIMENSIONALITY
from .parameters import ParameterSet, InvalidParameterError
from .hysteresis import Direction, TurningPoint, HistoryManager, BranchContext
from .simulation import (
    FerroelectricCapacitor,
    SolverConfig,
    parse_solver_config,
    load_solver_config,
    EvaluationResult,
    TraceResult,
    RelaxationHook,
    NoRelaxation,
)
from .checkpoint import save_history, load_history
from .device_builder import build_device
from .errors import FeCapError, DeviceBuildError, DiagnosableError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Canonical dimensionalities
    "VOLTAGE_DIMENSIONALITY", "CHARGE_DENSITY_DIMENSIONALITY",
    # Parameters
    "ParameterSet", "InvalidParameterError",
    # Hysteresis state
    "Direction", "TurningPoint", "HistoryManager", "BranchContext",
    # Device
    "build_device",
    "FerroelectricCapacitor", "EvaluationResult", "TraceResult",
    "RelaxationHook", "NoRelaxation",
    # Configuration
    "SolverConfig", "parse_solver_config", "load_solver_config",
    # Checkpoints
    "save_history", "load_history",
    # Top-Level Errors (Actionable Diagnostics)
    "FeCapError", "DeviceBuildError", "DiagnosableError",
]
