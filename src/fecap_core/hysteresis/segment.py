# src/fecap_core/hysteresis/segment.py
"""
Maps the canonical branch onto a minor-loop segment.

A segment joins two turning points. Each point contributes its stored polarization `P`
and the canonical branch value `F` at its voltage; the linear map `P = m * F + b` through
both points is

    m = (aP - bP) / (aF - bF)
    b = aP - m * aF

which is `b = (bP * aF - aP * bF) / (aF - bF)` rearranged so the segment passes exactly
through the start point `a` even when `aF - bF` is tiny.
"""
import logging
import math
from typing import Tuple

from ..constants import BRANCH_DEGENERACY_RTOL
from .base_enums import Direction
from .branch import BranchFunction
from .exceptions import DegenerateSegmentError

logger = logging.getLogger(__name__)


def segment_scale_offset(
    a_polarization: float,
    a_branch: float,
    b_polarization: float,
    b_branch: float,
) -> Tuple[float, float]:
    """
    Returns (scale, offset) of the segment through (aP, aF) and (bP, bF).

    Raises:
        DegenerateSegmentError: if aF == bF, which leaves the map undefined.
    """
    denominator = a_branch - b_branch
    if denominator == 0.0:
        raise DegenerateSegmentError(
            details=f"Both segment end points have the same branch value {a_branch!r}."
        )
    scale = (a_polarization - b_polarization) / denominator
    offset = a_polarization - scale * a_branch
    return scale, offset


class SegmentCalculator:
    """
    Computes the (scale, offset) of the segment that starts at the most recent turning
    point and runs towards the extremum that closes the current minor loop.
    """

    def __init__(self, branch: BranchFunction):
        self.branch = branch
        self._degeneracy_atol = BRANCH_DEGENERACY_RTOL * branch.saturation_charge

    def between(
        self,
        start_voltage: float,
        start_polarization: float,
        target_voltage: float,
        target_polarization: float,
        direction: Direction,
    ) -> Tuple[float, float]:
        """
        Scale and offset for travel in `direction` from the start point towards the target.
        The target may be the saturation limit (`target_voltage = +/-inf`).

        Raises:
            DegenerateSegmentError: if both points sit at the same voltage.
        """
        if start_voltage == target_voltage:
            raise DegenerateSegmentError(
                details="Two turning points at identical voltage cannot bound a minor-loop segment.",
                start_voltage=start_voltage,
                target_voltage=target_voltage,
            )

        a_branch = float(self.branch.value(start_voltage, direction))
        b_branch = float(self.branch.value(target_voltage, direction))

        if abs(a_branch - b_branch) <= self._degeneracy_atol:
            # The tanh has saturated between the two points; follow the branch shape
            # through the start point instead of dividing by a vanishing difference.
            logger.debug(
                f"Saturated segment between {start_voltage:.6g} V and {target_voltage:.6g} V; "
                f"using shifted branch."
            )
            return 1.0, start_polarization - a_branch

        scale, offset = segment_scale_offset(start_polarization, a_branch, target_polarization, b_branch)
        if not (math.isfinite(scale) and math.isfinite(offset)):
            raise DegenerateSegmentError(
                details=f"Segment map is not finite (scale={scale!r}, offset={offset!r}).",
                start_voltage=start_voltage,
                target_voltage=target_voltage,
            )
        return scale, offset
