# src/fecap_core/hysteresis/__init__.py
from .base_enums import Direction
from .exceptions import DegenerateSegmentError, HistoryStateError, CheckpointError
from .branch import BranchFunction
from .context import BranchContext
from .segment import SegmentCalculator, segment_scale_offset
from .response import PolarizationFunction, ChargeFunction
from .history import TurningPoint, HistoryManager

__all__ = [
    # Enums & Data
    "Direction",
    "BranchContext",
    "TurningPoint",
    # Exceptions
    "DegenerateSegmentError",
    "HistoryStateError",
    "CheckpointError",
    # Core Classes
    "BranchFunction",
    "SegmentCalculator",
    "segment_scale_offset",
    "PolarizationFunction",
    "ChargeFunction",
    "HistoryManager",
]
