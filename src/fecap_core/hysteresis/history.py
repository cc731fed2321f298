# src/fecap_core/hysteresis/history.py
"""
Owns the Preisach turning-point history of one ferroelectric capacitor.

The history is an ordered stack of voltage extrema, most recent last. Consecutive entries
alternate between maxima (reached while travelling UP) and minima (reached while
travelling DOWN), and every entry lies strictly inside the minor loop formed by the two
entries beneath it. The active branch segment always runs from the top entry towards the
entry beneath it, which is the extremum that closes the current minor loop (return-point
memory). With a single entry the segment runs towards saturation; with none the device is
on its major loop.

Wipeout: an extremum that meets or exceeds, in its own direction, a stored extremum of the
same kind removes that entry together with everything stacked above it.
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .base_enums import Direction
from .branch import BranchFunction
from .context import BranchContext
from .exceptions import HistoryStateError
from .response import PolarizationFunction
from .segment import SegmentCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurningPoint:
    """
    A voltage extremum where the trajectory reversed.

    Attributes:
        voltage: The applied voltage at the extremum, in V.
        direction: The direction of travel that ended here (UP marks a maximum).
        polarization: Polarization reached at the extremum, in C/m^2. Derived from the
                      entries beneath this one; stored so segments need no re-evaluation.
    """
    voltage: float
    direction: Direction
    polarization: float

    def is_met_by(self, voltage: float) -> bool:
        """True if `voltage` reaches or passes this extremum in the extremum's own direction."""
        if self.direction is Direction.UP:
            return voltage >= self.voltage
        return voltage <= self.voltage


class HistoryManager:
    """
    Maintains the turning-point stack, the current direction of travel and the previous
    voltage sample, and derives the active BranchContext from them.

    Calls to `update` must arrive in simulation-time order; reversal detection compares
    each sample only with the one before it.
    """

    def __init__(
        self,
        branch: BranchFunction,
        initial_direction: Direction = Direction.DOWN,
        initial_voltage: float = 0.0,
    ):
        self.branch = branch
        self._segments = SegmentCalculator(branch)
        self._polarization = PolarizationFunction(branch)
        self.initial_direction = initial_direction
        self.initial_voltage = float(initial_voltage)

        self._stack: List[TurningPoint] = []
        self.direction: Direction = initial_direction
        self.previous_voltage: float = self.initial_voltage

    # --- Introspection ---

    @property
    def turning_points(self) -> Tuple[TurningPoint, ...]:
        return tuple(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    def __repr__(self) -> str:
        points = ", ".join(f"{tp.voltage:.4g}{'^' if tp.direction is Direction.UP else 'v'}" for tp in self._stack)
        return (f"HistoryManager(direction={self.direction.name}, "
                f"previous_voltage={self.previous_voltage:.4g}, stack=[{points}])")

    def closing_voltage(self) -> Optional[float]:
        """Voltage of the extremum that closes the current minor loop, or None if there is none."""
        if len(self._stack) >= 2:
            return self._stack[-2].voltage
        return None

    # --- Branch context ---

    def active_context(self) -> BranchContext:
        """The segment the trajectory currently follows."""
        return self._context_for(self._stack, self.direction)

    def polarization_at(self, voltage: float) -> float:
        """Polarization at `voltage` on the active segment, without touching the history."""
        return float(self._polarization.value(voltage, self.active_context()))

    def _context_for(self, stack: Sequence[TurningPoint], direction: Direction) -> BranchContext:
        if not stack:
            return BranchContext.major_loop(direction)

        start = stack[-1]
        if len(stack) >= 2:
            target_voltage, target_polarization = stack[-2].voltage, stack[-2].polarization
        else:
            target_voltage = direction.sign * math.inf
            target_polarization = direction.sign * self.branch.saturation_charge

        scale, offset = self._segments.between(
            start.voltage, start.polarization, target_voltage, target_polarization, direction
        )
        return BranchContext(direction=direction, scale=scale, offset=offset)

    # --- Mutation ---

    def update(self, voltage: float) -> bool:
        """
        Records a new voltage sample.

        A change of direction turns the previous sample into a turning point. The new
        sample is then checked against the extremum closing the current minor loop, so a
        trajectory that passes it rejoins the enclosing loop immediately.

        Returns:
            True if a reversal was recorded.
        """
        voltage = float(voltage)
        step = Direction.of_step(self.previous_voltage, voltage)
        reversed_here = False
        if step is not None and step is not self.direction:
            self.reverse(step)
            reversed_here = True
        self.wipe_out(voltage)
        self.previous_voltage = voltage
        return reversed_here

    def reverse(self, new_direction: Direction) -> None:
        """Pushes the previous sample as a turning point and starts travelling in `new_direction`."""
        if new_direction is self.direction:
            return
        candidate = TurningPoint(
            voltage=self.previous_voltage,
            direction=self.direction,
            polarization=self.polarization_at(self.previous_voltage),
        )
        self._pop_enclosed(candidate.voltage, candidate.direction)
        self._stack.append(candidate)
        self.direction = new_direction
        logger.debug(
            f"Reversal at {candidate.voltage:.6g} V ({candidate.direction.name} -> {new_direction.name}), "
            f"P={candidate.polarization:.4e} C/m^2, depth={len(self._stack)}"
        )

    def wipe_out(self, voltage: float) -> int:
        """
        Removes every minor loop that a trajectory travelling in the current direction closes
        by reaching `voltage`. Returns the number of turning points removed.
        """
        return self._pop_enclosed(voltage, self.direction)

    def _pop_enclosed(self, voltage: float, direction: Direction) -> int:
        removed = 0
        while len(self._stack) >= 2:
            closing = self._stack[-2]
            if closing.direction is not direction or not closing.is_met_by(voltage):
                break
            del self._stack[-2:]
            removed += 2
        if removed:
            logger.debug(f"Wipeout at {voltage:.6g} V removed {removed} turning point(s), depth={len(self._stack)}")
        return removed

    def reset(self) -> None:
        """Forgets all history; the device returns to its initial major-loop state."""
        self._stack.clear()
        self.direction = self.initial_direction
        self.previous_voltage = self.initial_voltage
        logger.debug("History reset to the initial major-loop state.")

    def copy(self) -> "HistoryManager":
        """An independent manager with the same state, for trial evaluations."""
        clone = HistoryManager(self.branch, self.initial_direction, self.initial_voltage)
        clone._stack = list(self._stack)
        clone.direction = self.direction
        clone.previous_voltage = self.previous_voltage
        return clone

    # --- Checkpointing ---

    def to_pairs(self) -> List[Tuple[float, Direction]]:
        """The stack as an ordered list of (voltage, direction) pairs, oldest first."""
        return [(tp.voltage, tp.direction) for tp in self._stack]

    @classmethod
    def from_pairs(
        cls,
        branch: BranchFunction,
        pairs: Iterable[Tuple[float, Union[Direction, str]]],
        direction: Union[Direction, str],
        previous_voltage: float,
        initial_direction: Direction = Direction.DOWN,
        initial_voltage: float = 0.0,
    ) -> "HistoryManager":
        """Builds a manager whose state is the given history; see `restore`."""
        manager = cls(branch, initial_direction, initial_voltage)
        manager.restore(pairs, direction, previous_voltage)
        return manager

    def restore(
        self,
        pairs: Iterable[Tuple[float, Union[Direction, str]]],
        direction: Union[Direction, str],
        previous_voltage: float,
    ) -> None:
        """
        Replaces the history with the given (voltage, direction) pairs. Each turning point's
        polarization is recomputed from the entries beneath it.

        Raises:
            HistoryStateError: if the pairs do not form a valid nested history.
        """
        stack: List[TurningPoint] = []
        for index, (raw_voltage, raw_direction) in enumerate(pairs):
            voltage = float(raw_voltage)
            point_direction = _as_direction(raw_direction, index)
            if not math.isfinite(voltage):
                raise HistoryStateError(details=f"Voltage {voltage!r} is not finite.", index=index)
            if stack:
                below = stack[-1]
                if point_direction is below.direction:
                    raise HistoryStateError(
                        details="Consecutive turning points must alternate between UP and DOWN.", index=index
                    )
                # Travel from the point below towards this one happens in `point_direction`.
                if Direction.of_step(below.voltage, voltage) is not point_direction:
                    raise HistoryStateError(
                        details=f"Extremum at {voltage!r} V does not lie beyond the turning point "
                                f"below it ({below.voltage!r} V) in its direction.", index=index
                    )
                if len(stack) >= 2 and stack[-2].is_met_by(voltage):
                    raise HistoryStateError(
                        details=f"Extremum at {voltage!r} V would have wiped out the turning point "
                                f"at {stack[-2].voltage!r} V.", index=index
                    )
            polarization = float(self._polarization.value(voltage, self._context_for(stack, point_direction)))
            stack.append(TurningPoint(voltage=voltage, direction=point_direction, polarization=polarization))

        current_direction = _as_direction(direction, None)
        if stack and current_direction is stack[-1].direction:
            raise HistoryStateError(
                details="The current direction must be opposite to the direction of the most recent turning point."
            )
        previous_voltage = float(previous_voltage)
        if not math.isfinite(previous_voltage):
            raise HistoryStateError(details=f"Previous voltage {previous_voltage!r} is not finite.")

        self._stack = stack
        self.direction = current_direction
        self.previous_voltage = previous_voltage
        # The previous sample may already sit beyond a closing extremum.
        self.wipe_out(previous_voltage)
        logger.debug(f"Restored {self!r}")


def _as_direction(raw: Union[Direction, str], index: Optional[int]) -> Direction:
    if isinstance(raw, Direction):
        return raw
    try:
        return Direction[str(raw).upper()]
    except KeyError:
        raise HistoryStateError(details=f"Unknown direction {raw!r}; expected 'UP' or 'DOWN'.", index=index) from None
