"""
Iterative flood fill with an explicit stack of reverse moves.

This is the router to use by default: its memory use does not depend on the
Python recursion limit, so it handles maps of any size.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from rover_explorer.rover import Rover
from rover_explorer.routers.base import Router, StateCallback
from rover_explorer.terrain import Direction, Map


class IterativeFloodFillRouter(Router):
    """
    Flood fill executed by a single rover that backs out of every dead end.

    At each step the rover marks its tile as checked, then:
    - moves to the first neighbour (north, east, south, west) that it can
      step onto and has not checked yet, stacking the opposite direction
    - otherwise pops the stack and moves back the way it came
    - stops when there is nowhere new to go and nothing left to pop
    """

    name = "iterative"

    def _explore(self, rover: Rover, map_: Map,
                 on_state: Optional[StateCallback]) -> int:
        moves = 0
        checked = np.zeros((map_.height, map_.width), dtype=bool)
        reverse_moves: List[Direction] = []

        rover.explore_surrounding_area()
        self._publish(on_state, rover, map_, moves)

        while not self.has_been_canceled:
            x, y = rover.position
            checked[y, x] = True

            direction = self._next_unchecked_direction(rover, checked)
            if direction is not None:
                rover.move(direction)
                reverse_moves.append(direction.opposite())
            elif reverse_moves:
                rover.move(reverse_moves.pop())
            else:
                break
            moves += 1

            self._after_move(on_state, rover, map_, moves)

        return moves

    @staticmethod
    def _next_unchecked_direction(rover: Rover,
                                  checked: np.ndarray) -> Optional[Direction]:
        """First direction leading onto walkable land not yet checked."""
        for direction in Direction.all():
            if not rover.can_move(direction):
                continue
            x, y = rover.get_next_location(direction)
            if not checked[y, x]:
                return direction
        return None
