# src/fecap_core/hysteresis/base_enums.py
from enum import Enum
from typing import Optional


class Direction(Enum):
    """
    Direction of travel along the voltage axis. The value is the sign multiplier used by
    the branch function to select the ascending (+1) or descending (-1) coercive voltage.
    """
    UP = 1
    DOWN = -1

    @property
    def sign(self) -> int:
        return self.value

    @property
    def opposite(self) -> "Direction":
        return Direction.DOWN if self is Direction.UP else Direction.UP

    @classmethod
    def of_step(cls, previous_voltage: float, voltage: float) -> Optional["Direction"]:
        """The direction implied by moving from `previous_voltage` to `voltage`; None for no move."""
        if voltage > previous_voltage:
            return cls.UP
        if voltage < previous_voltage:
            return cls.DOWN
        return None
