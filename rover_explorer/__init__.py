"""
Rover Explorer: autonomous flood-fill exploration of land/sea maps.

A rover lands on a known tile of an otherwise unexplored map. It can only
step onto land it has already revealed, and it reveals the land around it
every time it moves. A router drives the rover until every reachable land
tile has been visited, backing out of each dead end the way it came.
"""

from rover_explorer.exceptions import (
    RoverError, MapFormatError, IllegalMoveError, InvalidTileStateError,
)
from rover_explorer.terrain import Direction, Map, TileType, explored_map_path
from rover_explorer.rover import Rover
from rover_explorer.state import ExplorationState
from rover_explorer.routers import (
    ExplorationTask,
    IterativeFloodFillRouter,
    RecursiveFloodFillRouter,
    Router,
    RouterConfig,
)
from rover_explorer.session import ExplorationSession, SessionConfig

__version__ = "0.1.0"
__all__ = [
    "RoverError",
    "MapFormatError",
    "IllegalMoveError",
    "InvalidTileStateError",
    "Direction",
    "Map",
    "TileType",
    "explored_map_path",
    "Rover",
    "ExplorationState",
    "ExplorationTask",
    "IterativeFloodFillRouter",
    "RecursiveFloodFillRouter",
    "Router",
    "RouterConfig",
    "ExplorationSession",
    "SessionConfig",
]
