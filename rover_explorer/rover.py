"""
The rover: a single agent that walks a map and reveals it.

The rover can only step onto land that is already explored. Each time it
moves (and once when a router starts) it looks at its four neighbours and
reveals any unexplored land among them, which is what makes new territory
walkable.
"""

from __future__ import annotations

from typing import List

import numpy as np

from rover_explorer.exceptions import IllegalMoveError
from rover_explorer.terrain import Direction, Map, Position, TileType


class Rover:
    """
    A rover placed on a map's landing location.

    Attributes
    ----------
    position : (x, y)
        Current location.
    trail : list of (x, y)
        Every location occupied so far, landing location first. Revisits are
        recorded again, so backtracking shows up as repeated entries.
    locations_being_explored : list of (x, y)
        Tiles revealed by the most recent call to explore_surrounding_area().
    """

    def __init__(self, map_: Map):
        self.map = map_
        self.position: Position = map_.landing_location
        self.trail: List[Position] = [self.position]
        self.locations_being_explored: List[Position] = []

    def get_next_location(self, direction: Direction) -> Position:
        dx, dy = direction.delta()
        return self.position[0] + dx, self.position[1] + dy

    def can_move(self, direction: Direction) -> bool:
        """True if the next tile in ``direction`` is explored land."""
        x, y = self.get_next_location(direction)
        return (self.map.is_in_bounds(x, y)
                and self.map[x, y] == TileType.EXPLORED_LAND)

    def move(self, direction: Direction) -> None:
        if not self.can_move(direction):
            raise IllegalMoveError(direction, self.position)
        self.position = self.get_next_location(direction)
        self.trail.append(self.position)
        self.explore_surrounding_area()

    def explore_surrounding_area(self) -> None:
        """Reveal unexplored land on the four tiles around the rover."""
        self.locations_being_explored.clear()
        for direction in Direction.all():
            x, y = self.get_next_location(direction)
            if (not self.map.is_in_bounds(x, y)
                    or self.map[x, y] != TileType.UNEXPLORED_LAND):
                continue
            self.map.mark_tile_as_explored(x, y)
            self.locations_being_explored.append((x, y))

    # --- Trail statistics ---

    def clear_trail(self) -> None:
        """Forget the trail so far, keeping the current position as its start."""
        self.trail[:] = [self.position]

    def visit_histogram(self) -> np.ndarray:
        """Number of times each tile appears in the trail, shape (height, width)."""
        counts = np.zeros((self.map.height, self.map.width), dtype=int)
        if self.trail:
            xs, ys = zip(*self.trail)
            np.add.at(counts, (np.array(ys), np.array(xs)), 1)
        return counts

    @property
    def maximum_visits_to_any_tile(self) -> int:
        if not self.trail:
            return 0
        return int(self.visit_histogram().max())

    def __repr__(self) -> str:
        return f"Rover(position={self.position}, trail_length={len(self.trail)})"
