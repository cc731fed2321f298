# src/fecap_core/hysteresis/exceptions.py
"""
Defines the custom, diagnosable exceptions for the hysteresis engine.

`DegenerateSegmentError` describes a broken internal invariant of the turning-point
history and is never silently coerced. `HistoryStateError` and `CheckpointError` report
a history supplied from outside (a checkpoint) that cannot be restored.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class DegenerateSegmentError(DiagnosableError):
    """
    Raised when a minor-loop segment would be built between two turning points whose
    branch coordinates coincide exactly, which makes the segment's linear map undefined.
    The reversal filter of the HistoryManager never pushes such a pair, so this always
    indicates a bug or a corrupted history.
    """
    details: str
    start_voltage: Optional[float] = None
    target_voltage: Optional[float] = None

    def __str__(self):
        return f"Degenerate minor-loop segment: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Degenerate Hysteresis Segment (Internal Error)",
            details=(
                f"{self.details}\n"
                f"Segment start voltage:  {self.start_voltage!r} V\n"
                f"Segment target voltage: {self.target_voltage!r} V"
            ),
            suggestion="This is an internal invariant violation. If the history was restored from a "
                       "checkpoint, verify the checkpoint file; otherwise please report the voltage "
                       "sequence that produced it.",
            context={'voltage': f"{self.start_voltage!r} V" if self.start_voltage is not None else None}
        )


@dataclass()
class HistoryStateError(DiagnosableError, ValueError):
    """
    Raised when a turning-point history supplied from outside (e.g. a checkpoint) does not
    describe a valid, non-crossing Preisach nesting.
    """
    details: str
    index: Optional[int] = None

    def __str__(self):
        where = f" at turning point #{self.index}" if self.index is not None else ""
        return f"Invalid turning-point history{where}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Turning-Point History",
            details=str(self),
            suggestion="Turning points must alternate between maxima (UP) and minima (DOWN), and every "
                       "new extremum must lie strictly inside the minor loop that encloses it.",
            context={}
        )


@dataclass()
class CheckpointError(DiagnosableError, ValueError):
    """
    Raised when a history checkpoint file cannot be read, written, or does not match
    the checkpoint schema.
    """
    details: str
    file_path: Optional[Path] = None

    def __str__(self):
        where = f" '{self.file_path}'" if self.file_path else ""
        return f"Checkpoint error{where}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="History Checkpoint Error",
            details=self.details,
            suggestion="Checkpoints must be written by `save_checkpoint` for a device with the same "
                       "parameters. Verify the file exists, is readable and was not edited by hand.",
            context={'source_file': self.file_path}
        )
