# src/fecap_core/simulation/__init__.py
from .exceptions import NonConvergenceError, ConfigParsingError
from .config import SolverConfig, parse_solver_config, load_solver_config
from .results import EvaluationResult, TraceResult
from .relaxation import RelaxationHook, NoRelaxation
from .solver import NewtonSolver, SolverOutcome
from .device import FerroelectricCapacitor

__all__ = [
    # Exceptions
    "NonConvergenceError",
    "ConfigParsingError",
    # Configuration
    "SolverConfig",
    "parse_solver_config",
    "load_solver_config",
    # Results
    "EvaluationResult",
    "TraceResult",
    # Relaxation
    "RelaxationHook",
    "NoRelaxation",
    # Core Classes
    "NewtonSolver",
    "SolverOutcome",
    "FerroelectricCapacitor",
]
