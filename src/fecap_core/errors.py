# src/fecap_core/errors.py
import logging
from abc import abstractmethod
from typing import Any, Dict, Protocol
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class FeCapError(Exception):
    """Base class for all custom, user-facing errors in fecap_core."""
    pass

class DeviceBuildError(FeCapError):
    """
    Raised when a ferroelectric capacitor device cannot be constructed, e.g. when its
    physical parameters or solver configuration are invalid. The message is a
    pre-formatted, user-friendly diagnostic report.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    Anything that can explain itself to a device-model user as a formatted report.
    """
    def get_diagnostic_report(self) -> str:
        """The full multi-line report, ready to print."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    Shared base of every fecap_core exception that carries its own report.

    Being an `Exception`, it can be caught as a whole family; `get_diagnostic_report`
    is abstract, so a subclass without a report cannot be instantiated.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        raise NotImplementedError


# --- Report Formatting ---

# Context keys shown in the report header, in display order.
_CONTEXT_LABELS = (
    ('parameter', "Parameter"),
    ('source_file', "Source File"),
    ('user_input', "User Input"),
    ('voltage', "Voltage"),
    ('charge', "Charge"),
)


def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    Renders the uniform report layout used by every diagnosable error.

    Args:
        error_type: Short category shown in the header, e.g. "Invalid Device Parameter".
        details: What went wrong; may span several lines.
        suggestion: What the user can change to fix it; may be empty.
        context: Optional header entries keyed by 'parameter', 'source_file',
                 'user_input', 'voltage' or 'charge'. Empty values are omitted.
    """
    lines = [
        "\n",
        "============== fecap_core: Actionable Diagnostic Report ==============",
        f"{'Error Type:':<16}{error_type}",
    ]
    for key, label in _CONTEXT_LABELS:
        value = context.get(key)
        if not value:
            continue
        shown = f"'{value}'" if key == 'user_input' else value
        lines.append(f"{label + ':':<16}{shown}")

    lines.append("\nDetails:")
    lines.extend(f"  {line}" for line in details.splitlines())
    if suggestion:
        lines.append("\nSuggestion:")
        lines.extend(f"  {line}" for line in suggestion.splitlines())

    lines.append("=" * 70)
    return "\n".join(lines)
