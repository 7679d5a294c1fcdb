"""
A headless exploration session: one map, one rover, one run at a time.

The session holds everything a front end needs to show an exploration in
progress (map metadata, rover position and trail, the tiles currently being
revealed) and offers the operations it would call: load a map, generate one,
explore it with a router, cancel, reset and save the result.

Explorations run on a background thread. The session updates its state from
the run's snapshots, so a front end only ever polls the session.
"""

from __future__ import annotations

import os
import random
import threading
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from rover_explorer.rover import Rover
from rover_explorer.routers.base import ExplorationTask, Router
from rover_explorer.state import ExplorationState
from rover_explorer.terrain import (
    EXPLORED_MAP_PREFIX, FILE_EXTENSION, Map, Position, TileType,
    explored_map_path,
)


@dataclass
class SessionConfig:
    """Configuration for an exploration session."""
    exploration_time_ms: int = 10      # Delay between moves for every run
    min_width: int = 20                # Random maps: width drawn from [min, max)
    max_width: int = 60
    height_ratio: float = 0.75         # Random maps: height = width * ratio
    min_continuity_bias: float = 0.97
    max_continuity_bias: float = 0.99
    seed: Optional[int] = None


class ExplorationSession:
    """
    Drives explorations of one map at a time on a background thread.

    Load and generation errors (MapFormatError, OSError, ValueError) are
    raised to the caller. Errors during a run end the run, are recorded as
    a message in ``last_error`` and leave the session idle and usable.
    """

    def __init__(self, config: Optional[SessionConfig] = None,
                 generate: bool = True):
        self.config = config or SessionConfig()
        self.rng = random.Random(self.config.seed)

        self.map: Optional[Map] = None
        self.rover: Optional[Rover] = None
        self.is_generated_map = False
        self.moves_used_to_explore_map = 0
        self.map_percentage_of_land_explored = 0.0
        self.last_error: Optional[str] = None
        self.latest_state: Optional[ExplorationState] = None

        self._lock = threading.Lock()
        self._display_tiles = np.zeros((0, 0), dtype=int)
        self._preview_points: tuple = ()
        self._pristine_map: Optional[Map] = None
        self._last_imported_path: Optional[str] = None
        self._task: Optional[ExplorationTask] = None
        self._exploring = False

        if generate:
            self.generate_random_map()

    # --- Map metadata ---

    @property
    def map_name(self) -> str:
        return self.map.name if self.map else ""

    @property
    def map_width(self) -> int:
        return self.map.width if self.map else 0

    @property
    def map_height(self) -> int:
        return self.map.height if self.map else 0

    @property
    def map_percentage_land(self) -> float:
        return self.map.percentage_land if self.map else 0.0

    @property
    def display_tiles(self) -> np.ndarray:
        """Map tiles with the tiles being revealed marked LAND_BEING_EXPLORED."""
        with self._lock:
            return self._display_tiles.copy()

    # --- Rover state ---

    @property
    def rover_position(self) -> Position:
        return self.rover.position if self.rover else (0, 0)

    @property
    def rover_trail(self) -> List[Position]:
        return self.rover.trail if self.rover else []

    @property
    def maximum_visits_to_any_tile(self) -> int:
        return self.rover.maximum_visits_to_any_tile if self.rover else 0

    @property
    def is_exploration_in_progress(self) -> bool:
        return self._exploring

    # --- Loading and generating ---

    def load_map(self, path: str) -> None:
        self._stop_active_run()
        self._set_map(Map.load(path))
        self.is_generated_map = False
        self._last_imported_path = path

    def generate_random_map(self, width: Optional[int] = None,
                            height: Optional[int] = None,
                            continuity_bias: Optional[float] = None) -> None:
        """Generate a new map; missing dimensions and bias are drawn at random."""
        c = self.config
        if width is None:
            width = self.rng.randrange(c.min_width, c.max_width)
        if height is None:
            height = int(width * c.height_ratio)
        if continuity_bias is None:
            continuity_bias = self.rng.uniform(c.min_continuity_bias,
                                               c.max_continuity_bias)

        self._stop_active_run()
        self._set_map(Map.generate("Generated", width, height, continuity_bias,
                                   rng=self.rng))
        self.is_generated_map = True
        self._last_imported_path = None

    def reset(self) -> None:
        """Put the current map back the way it was loaded or generated."""
        self._stop_active_run()
        if self._last_imported_path is not None:
            self._set_map(Map.load(self._last_imported_path))
        elif self._pristine_map is not None:
            self._set_map(self._pristine_map.copy())

    def _set_map(self, map_: Map) -> None:
        self.map = map_
        self.rover = Rover(map_)
        self._pristine_map = map_.copy()
        self.moves_used_to_explore_map = 0
        self.map_percentage_of_land_explored = map_.percentage_of_land_explored
        self.last_error = None
        self.latest_state = None
        with self._lock:
            self._display_tiles = map_.tiles.copy()
            self._preview_points = ()

    # --- Exploring ---

    def explore(self, router: Router) -> ExplorationTask:
        """Start exploring the current map; any active run is canceled first."""
        if self.map is None or self.rover is None:
            raise RuntimeError("No map has been loaded or generated.")
        self._stop_active_run()

        self.rover.clear_trail()
        self.moves_used_to_explore_map = 0
        self.last_error = None
        router.exploration_time_ms = self.config.exploration_time_ms

        self._exploring = True
        self._task = router.start(self.rover, self.map,
                                  on_state=self._on_state,
                                  on_done=self._on_done)
        return self._task

    def cancel(self) -> None:
        if self._exploring and self._task is not None:
            self._task.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the active run, if any; True once no run is active."""
        if self._task is None:
            return True
        return self._task.wait(timeout)

    def _stop_active_run(self) -> None:
        if self._task is not None and not self._task.done:
            self._task.cancel()
            self._task.wait()

    def _on_state(self, state: ExplorationState) -> None:
        with self._lock:
            self.latest_state = state
            self.moves_used_to_explore_map = state.moves
            self.map_percentage_of_land_explored = state.percentage_explored
            for x, y in self._preview_points:
                self._display_tiles[y, x] = self.map.tiles[y, x]
            for x, y in state.positions_being_explored:
                self._display_tiles[y, x] = TileType.LAND_BEING_EXPLORED
            self._preview_points = state.positions_being_explored

    def _on_done(self, task: ExplorationTask) -> None:
        with self._lock:
            if task.error is not None:
                self.last_error = f"Exploration failed: {task.error}"
            else:
                self.moves_used_to_explore_map = task.result
            self.map_percentage_of_land_explored = \
                self.map.percentage_of_land_explored
            self._display_tiles = self.map.tiles.copy()
            self._preview_points = ()
            self._exploring = False

    # --- Saving ---

    def save_explored_map(self, directory: Optional[str] = None) -> str:
        """
        Write the current map, explored tiles included, and return the path.

        Without ``directory`` an imported map is saved next to its source
        file. The saved file holds more than one explored tile, so it is a
        record of the exploration rather than a map that can be explored again.
        """
        if self.map is None:
            raise RuntimeError("No map has been loaded or generated.")
        if directory is None and self._last_imported_path is not None:
            path = explored_map_path(self._last_imported_path)
        else:
            file_name = f"{EXPLORED_MAP_PREFIX}{self.map.name}{FILE_EXTENSION}"
            path = os.path.join(directory or os.curdir, file_name)
        self.map.serialize(path)
        return path
