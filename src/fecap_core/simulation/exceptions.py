# src/fecap_core/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions for the device evaluation phase.

Non-convergence of the charge solver is a known, recoverable condition: the device
reports it through `EvaluationResult.converged` and never raises on its own. The
`NonConvergenceError` below exists for callers that prefer an exception, and is
raised only by `EvaluationResult.raise_for_convergence()`.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class NonConvergenceError(DiagnosableError, ArithmeticError):
    """
    Raised on request when solving for a target charge did not reach tolerance within
    the iteration limit.
    """
    target_charge: float
    last_voltage: float
    iterations: int
    details: str = ""

    def __str__(self):
        return (f"Charge solve for Qt={self.target_charge:.6e} C/m^2 did not converge after "
                f"{self.iterations} iteration(s); last voltage {self.last_voltage:.6e} V. {self.details}").rstrip()

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Charge Solver Non-Convergence",
            details=str(self),
            suggestion="Check that the target charge is physically reachable for this device, increase "
                       "'max_iterations', or enable 'bisection_fallback' in the solver configuration.",
            context={'charge': f"{self.target_charge:.6e} C/m^2", 'voltage': f"{self.last_voltage:.6e} V"}
        )


@dataclass()
class ConfigParsingError(DiagnosableError, ValueError):
    """
    Raised when a solver configuration (raw mapping or YAML file) is malformed, fails
    schema validation, or carries a value with the wrong physical dimension.
    """
    details: str
    source_file: Optional[Path] = None
    parameter: Optional[str] = None
    user_input: Any = None
    schema_errors: Optional[Dict[str, Any]] = None

    def __str__(self):
        where = f" in '{self.source_file}'" if self.source_file else ""
        return f"Failed to parse solver configuration{where}: {self.details}"

    def get_diagnostic_report(self) -> str:
        details = self.details
        if self.schema_errors:
            error_list_str = "\n".join(
                f"  - Field '{key}': {value}" for key, value in sorted(self.schema_errors.items())
            )
            details = f"{details}\n{error_list_str}"
        return format_diagnostic_report(
            error_type="Solver Configuration Error",
            details=details,
            suggestion="Tolerances and voltages accept plain SI numbers or unit strings such as '1 uV' or "
                       "'1e-12 C/m**2'. 'initial_direction' must be 'UP' or 'DOWN'.",
            context={
                'parameter': self.parameter,
                'source_file': self.source_file,
                'user_input': self.user_input,
            }
        )
