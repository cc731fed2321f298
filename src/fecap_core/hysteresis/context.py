# src/fecap_core/hysteresis/context.py
"""
Defines the `BranchContext`, the per-evaluation description of the active Preisach branch.
"""
from dataclasses import dataclass

from .base_enums import Direction


@dataclass(frozen=True)
class BranchContext:
    """
    The active segment of the hysteresis loop: the canonical branch for `direction`,
    rescaled by `scale` and shifted by `offset`.

    It is derived on demand from the top of the turning-point history and never stored,
    so it can never go stale relative to that history.
    """
    direction: Direction
    scale: float = 1.0
    offset: float = 0.0

    @classmethod
    def major_loop(cls, direction: Direction) -> "BranchContext":
        """The outer saturation loop, traced when no turning point constrains the trajectory."""
        return cls(direction=direction, scale=1.0, offset=0.0)
