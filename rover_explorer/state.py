"""Progress snapshots handed from a router to its observer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from rover_explorer.terrain import Position


@dataclass(frozen=True)
class ExplorationState:
    """
    One instant of an exploration run.

    ``positions_being_explored`` is copied for every snapshot. ``trail`` is
    NOT: it is the rover's own list and keeps growing after the snapshot has
    been delivered. Use frozen_trail() to keep the trail as it was.
    """
    current_position: Position
    positions_being_explored: Tuple[Position, ...]
    moves: int
    percentage_explored: float
    trail: List[Position]

    def frozen_trail(self) -> Tuple[Position, ...]:
        return tuple(self.trail)

    def __repr__(self) -> str:
        return (f"ExplorationState(pos={self.current_position}, "
                f"moves={self.moves}, explored={self.percentage_explored:.1f}%)")
