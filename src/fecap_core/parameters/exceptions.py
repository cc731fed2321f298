# src/fecap_core/parameters/exceptions.py
"""
Defines the custom, diagnosable exceptions for the device parameter subsystem.

Every error raised while constructing a `ParameterSet` is an `InvalidParameterError`.
It is fatal to device construction and carries enough context (parameter name, the
offending value and its expected unit) to be reported to the user without a traceback.
"""
from dataclasses import dataclass
from typing import Any

from ..errors import DiagnosableError, format_diagnostic_report


class ParameterError(DiagnosableError):
    """
    A concrete base class for all parameter-related errors.
    """
    def get_diagnostic_report(self) -> str:
        """Fallback report for subclasses without their own implementation."""
        return format_diagnostic_report(
            error_type="Generic Parameter Error",
            details=str(self),
            suggestion="Review the physical parameters supplied for the ferroelectric capacitor.",
            context={}
        )


@dataclass()
class InvalidParameterError(ParameterError, ValueError):
    """
    Raised when a `ParameterSet` field violates its physical domain, e.g. a non-positive
    thickness or a negative delay constant. Also a `ValueError` so that hosts which only
    know about built-in exceptions can still catch it.
    """
    parameter_name: str
    value: Any
    details: str
    expected_unit: str = ""

    def __str__(self):
        return f"Invalid parameter '{self.parameter_name}' = {self.value!r}: {self.details}"

    def get_diagnostic_report(self) -> str:
        unit_hint = f" (expected in {self.expected_unit})" if self.expected_unit else ""
        return format_diagnostic_report(
            error_type="Invalid Device Parameter",
            details=f"{self.details}{unit_hint}.",
            suggestion="All parameters are plain SI floats. Thickness, coercive field, permittivities, "
                       "saturation charge and slope factor must be finite and strictly positive; the "
                       "delay constant must be finite and non-negative.",
            context={'parameter': self.parameter_name, 'user_input': repr(self.value)}
        )
