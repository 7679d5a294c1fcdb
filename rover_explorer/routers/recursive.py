"""
Recursive flood fill.

Produces the same coverage and move count as the iterative router, but the
recursion goes one level deeper for every tile on the current path, so it is
limited to maps of at most ``max_tiles`` tiles.
"""

from __future__ import annotations

import sys
import threading
from contextlib import contextmanager
from typing import List, Optional

import numpy as np

from rover_explorer.rover import Rover
from rover_explorer.routers.base import Router, RouterConfig, StateCallback
from rover_explorer.terrain import Direction, Map


DEFAULT_MAX_TILES = 250_000

# The recursion limit is process-wide; runs on other threads share it.
_limit_lock = threading.Lock()
_base_limit: Optional[int] = None
_active_depths: List[int] = []


@contextmanager
def _extra_recursion_depth(depth: int):
    """
    Raise the recursion limit by ``depth`` while the block runs.

    Concurrent runs each register their depth; the limit covers the deepest
    active run and returns to its original value when the last one ends.
    """
    global _base_limit
    with _limit_lock:
        if not _active_depths:
            _base_limit = sys.getrecursionlimit()
        _active_depths.append(depth)
        sys.setrecursionlimit(_base_limit + max(_active_depths))
    try:
        yield
    finally:
        with _limit_lock:
            _active_depths.remove(depth)
            if _active_depths:
                sys.setrecursionlimit(_base_limit + max(_active_depths))
            else:
                sys.setrecursionlimit(_base_limit)
                _base_limit = None


class RecursiveFloodFillRouter(Router):
    """
    Flood fill as depth-first recursion with an explicit move back.

    Parameters
    ----------
    config : RouterConfig, optional
    max_tiles : int
        Largest map (width * height) this router accepts.
    stop_when_fully_revealed : bool
        Stop descending once no unexplored land is left anywhere on the map.
        Saves moves on maps whose last tiles are revealed early, at the cost
        of leaving some revealed tiles unvisited, so the move count no longer
        matches the iterative router. Off by default.
    """

    name = "recursive"

    def __init__(self, config: Optional[RouterConfig] = None,
                 max_tiles: int = DEFAULT_MAX_TILES,
                 stop_when_fully_revealed: bool = False):
        super().__init__(config)
        self.max_tiles = max_tiles
        self.stop_when_fully_revealed = stop_when_fully_revealed

    def _explore(self, rover: Rover, map_: Map,
                 on_state: Optional[StateCallback]) -> int:
        if map_.width * map_.height > self.max_tiles:
            raise ValueError(
                f"Map {map_.name!r} has {map_.width * map_.height} tiles, more "
                f"than the recursive router's limit of {self.max_tiles}; use "
                f"the iterative router instead."
            )

        rover.explore_surrounding_area()
        self._publish(on_state, rover, map_, 0)

        checked = np.zeros((map_.height, map_.width), dtype=bool)
        with _extra_recursion_depth(map_.land_count):
            return self._recursive_explore(rover, map_, checked, 0, on_state)

    def _recursive_explore(self, rover: Rover, map_: Map, checked: np.ndarray,
                           moves: int, on_state: Optional[StateCallback]) -> int:
        if self.has_been_canceled:
            return moves
        if (self.stop_when_fully_revealed
                and not map_.has_remaining_unexplored_land):
            return moves
        x, y = rover.position
        if checked[y, x]:
            return moves
        checked[y, x] = True

        for direction in Direction.all():
            if self.has_been_canceled:
                break
            if not rover.can_move(direction):
                continue
            next_x, next_y = rover.get_next_location(direction)
            if checked[next_y, next_x]:
                continue

            rover.move(direction)
            moves += 1
            self._after_move(on_state, rover, map_, moves)

            moves = self._recursive_explore(rover, map_, checked, moves,
                                            on_state)

            rover.move(direction.opposite())
            moves += 1
            self._after_move(on_state, rover, map_, moves, revealed=False)

        return moves
