"""
Terrain maps explored by the rover.

A map is a rectangular grid of tiles, each either sea or land. Land starts
out unexplored and becomes explored once the rover has seen it; exactly one
land tile is explored before exploration starts - the landing location.

Maps are stored on disk as plain text, one character per tile and one line
per row:

    .   sea
    :   unexplored land
    @   explored land (exactly one in a valid file: the landing location)

Rows may have different lengths. Cells beyond the end of a short row are
UNKNOWN: they are off the map as far as the rover is concerned.
"""

from __future__ import annotations

import os
import random
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np

from rover_explorer.exceptions import InvalidTileStateError, MapFormatError


FILE_EXTENSION = ".map"
EXPLORED_MAP_PREFIX = "explored-"

Position = Tuple[int, int]


# ---------------------------------------------------------------------------
# Tiles and directions
# ---------------------------------------------------------------------------

class TileType(IntEnum):
    """What a single grid cell holds."""
    UNKNOWN = 0
    SEA = 1
    UNEXPLORED_LAND = 2
    EXPLORED_LAND = 3
    LAND_BEING_EXPLORED = 4   # Display marker only, never stored in a Map

    @property
    def is_land(self) -> bool:
        return self in (TileType.UNEXPLORED_LAND, TileType.EXPLORED_LAND)


class Direction(IntEnum):
    """The four cardinal directions, in exploration order."""
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    def delta(self) -> Tuple[int, int]:
        """Column, row displacement for one step in this direction."""
        return {
            Direction.NORTH: (0, -1),
            Direction.EAST: (1, 0),
            Direction.SOUTH: (0, 1),
            Direction.WEST: (-1, 0),
        }[self]

    def opposite(self) -> "Direction":
        return {
            Direction.NORTH: Direction.SOUTH,
            Direction.EAST: Direction.WEST,
            Direction.SOUTH: Direction.NORTH,
            Direction.WEST: Direction.EAST,
        }[self]

    @staticmethod
    def all() -> List["Direction"]:
        return [Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST]


TILE_SYMBOLS: Dict[TileType, str] = {
    TileType.SEA: ".",
    TileType.UNEXPLORED_LAND: ":",
    TileType.EXPLORED_LAND: "@",
}
SYMBOL_TILES: Dict[str, TileType] = {s: t for t, s in TILE_SYMBOLS.items()}

_LAND_VALUES = [int(TileType.UNEXPLORED_LAND), int(TileType.EXPLORED_LAND)]


def explored_map_path(path: str) -> str:
    """Path an explored copy of the map at ``path`` is saved under."""
    directory, file_name = os.path.split(path)
    return os.path.join(directory, f"{EXPLORED_MAP_PREFIX}{file_name}")


def _check_extension(path) -> None:
    if not str(path).endswith(FILE_EXTENSION):
        raise MapFormatError(f"The path must end with {FILE_EXTENSION}.")


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

class Map:
    """
    A terrain grid shared by the rover and the router during a run.

    Tiles are held in a numpy array of shape (height, width) and addressed
    as ``tiles[row, column]``. Indexing the map itself uses (x, y), i.e.
    ``map_[column, row]``.

    All percentages and flags are computed from the tiles on every access,
    so they are always consistent with the rover's latest reveal.
    """

    def __init__(self, name: str, tiles,
                 landing_location: Optional[Position] = None):
        self.name = name
        self.tiles = np.array(tiles, dtype=int)
        if self.tiles.ndim != 2 or self.tiles.size == 0:
            raise ValueError("Map tiles must be a non-empty 2D grid.")
        if landing_location is None:
            landing_location = self._find_landing_location()
        self.landing_location: Position = landing_location

    # --- Geometry ---

    @property
    def width(self) -> int:
        return int(self.tiles.shape[1])

    @property
    def height(self) -> int:
        return int(self.tiles.shape[0])

    def __getitem__(self, position: Position) -> TileType:
        column, row = position
        if not self._in_grid(column, row):
            raise IndexError(f"{column},{row} is outside the map.")
        return TileType(int(self.tiles[row, column]))

    def _in_grid(self, column: int, row: int) -> bool:
        return 0 <= column < self.width and 0 <= row < self.height

    def is_in_bounds(self, column: int, row: int) -> bool:
        """True if (column, row) is inside the grid and not UNKNOWN."""
        if not self._in_grid(column, row):
            return False
        return bool(self.tiles[row, column] != TileType.UNKNOWN)

    def mark_tile_as_explored(self, column: int, row: int) -> None:
        if not self._in_grid(column, row):
            raise InvalidTileStateError(
                f"The tile at {column},{row} is outside the map."
            )
        if not self[column, row].is_land:
            raise InvalidTileStateError(
                f"The tile at {column},{row} is not land."
            )
        self.tiles[row, column] = TileType.EXPLORED_LAND

    # --- Derived statistics ---

    @property
    def land_count(self) -> int:
        return int(np.count_nonzero(np.isin(self.tiles, _LAND_VALUES)))

    @property
    def explored_land_count(self) -> int:
        return int(np.count_nonzero(self.tiles == TileType.EXPLORED_LAND))

    @property
    def percentage_land(self) -> float:
        return 100.0 * self.land_count / (self.width * self.height)

    @property
    def percentage_of_land_explored(self) -> float:
        land = self.land_count
        if land == 0:
            return 0.0
        return 100.0 * self.explored_land_count / land

    @property
    def has_remaining_unexplored_land(self) -> bool:
        return bool(np.any(self.tiles == TileType.UNEXPLORED_LAND))

    def copy(self) -> Map:
        return Map(self.name, self.tiles.copy(), self.landing_location)

    # --- Text format ---

    def to_string(self) -> str:
        """Encode the map in the .map text format."""
        lines = []
        for row in self.tiles:
            known = np.flatnonzero(row != TileType.UNKNOWN)
            end = int(known[-1]) + 1 if known.size else 0
            symbols = []
            for value in row[:end]:
                tile = TileType(int(value))
                if tile not in TILE_SYMBOLS:
                    raise MapFormatError(
                        f"A {tile.name} tile cannot be written to a map file."
                    )
                symbols.append(TILE_SYMBOLS[tile])
            lines.append("".join(symbols))
        return "\n".join(lines) + "\n"

    @classmethod
    def from_string(cls, text: str, name: str = "Unnamed") -> Map:
        """Decode a map from the .map text format."""
        tiles, landing_location = cls._parse(text)
        return cls(name, tiles, landing_location)

    def serialize(self, path) -> None:
        _check_extension(path)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(self.to_string())

    def deserialize(self, path) -> None:
        """Replace this map's contents with the map stored at ``path``."""
        _check_extension(path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        tiles, landing_location = self._parse(text)
        self.name = os.path.basename(str(path))[:-len(FILE_EXTENSION)]
        self.tiles = tiles
        self.landing_location = landing_location

    @classmethod
    def load(cls, path) -> Map:
        """Read a map from a .map file."""
        _check_extension(path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        name = os.path.basename(str(path))[:-len(FILE_EXTENSION)]
        return cls.from_string(text, name)

    @staticmethod
    def _parse(text: str) -> Tuple[np.ndarray, Position]:
        rows = text.split("\n")
        if rows[-1] == "":
            rows.pop()
        rows = [r[:-1] if r.endswith("\r") else r for r in rows]
        width = max((len(r) for r in rows), default=0)
        if width == 0:
            raise MapFormatError("The map contains no tiles.")

        tiles = np.full((len(rows), width), TileType.UNKNOWN, dtype=int)
        for row, line in enumerate(rows):
            for column, symbol in enumerate(line):
                tile = SYMBOL_TILES.get(symbol)
                if tile is None:
                    raise MapFormatError(
                        f"Unrecognised character {symbol!r} at line {row + 1}, "
                        f"column {column + 1}."
                    )
                tiles[row, column] = tile

        return tiles, Map._landing_location_of(tiles)

    @staticmethod
    def _landing_location_of(tiles: np.ndarray) -> Position:
        """The single EXPLORED_LAND cell, found by a row-major scan."""
        landings = np.argwhere(tiles == TileType.EXPLORED_LAND)
        if len(landings) == 0:
            raise MapFormatError("There is no landing location.")
        if len(landings) > 1:
            raise MapFormatError(
                f"There are {len(landings)} possible landing locations."
            )
        row, column = landings[0]
        return int(column), int(row)

    def _find_landing_location(self) -> Position:
        return self._landing_location_of(self.tiles)

    # --- Generation ---

    @classmethod
    def generate(cls, name: str, width: int, height: int,
                 continuity_bias: float, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None) -> Map:
        """
        Procedurally generate a map with coherent coastlines.

        Tiles are generated in row-major order. Each tile looks at its
        already generated north and west neighbours:
        - no neighbours, or one sea and one land: pick sea or land at random
        - neighbours agree: keep their type when
          (random() + continuity_bias) / 2 > 0.5, otherwise flip it

        A higher continuity_bias therefore produces larger landmasses and
        seas. At least one land tile is guaranteed, and one land tile chosen
        at random becomes the landing location.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Map size must be positive, got {width}x{height}.")
        if not 0.0 <= continuity_bias <= 1.0:
            raise ValueError(
                f"continuity_bias must be within [0, 1], got {continuity_bias}."
            )
        rng = rng or random.Random(seed)
        tiles = np.full((height, width), TileType.UNKNOWN, dtype=int)

        for row in range(height):
            for column in range(width):
                north = tiles[row - 1, column] if row > 0 else TileType.UNKNOWN
                west = tiles[row, column - 1] if column > 0 else TileType.UNKNOWN
                influencing = {
                    TileType(int(t)) for t in (north, west)
                    if t in (TileType.SEA, TileType.UNEXPLORED_LAND)
                }

                if len(influencing) == 1:
                    neighbour = influencing.pop()
                    keep_same_type = (rng.random() + continuity_bias) / 2 > 0.5
                    if keep_same_type:
                        tiles[row, column] = neighbour
                    elif neighbour == TileType.SEA:
                        tiles[row, column] = TileType.UNEXPLORED_LAND
                    else:
                        tiles[row, column] = TileType.SEA
                else:
                    tiles[row, column] = rng.choice(
                        (TileType.SEA, TileType.UNEXPLORED_LAND)
                    )

        if not np.any(tiles == TileType.UNEXPLORED_LAND):
            tiles[rng.randrange(height), rng.randrange(width)] = \
                TileType.UNEXPLORED_LAND

        candidates = np.flatnonzero(tiles == TileType.UNEXPLORED_LAND)
        row, column = divmod(int(candidates[rng.randrange(len(candidates))]),
                             width)
        tiles[row, column] = TileType.EXPLORED_LAND

        return cls(name, tiles, landing_location=(column, row))

    # --- Debugging ---

    def render(self, rover_position: Optional[Position] = None) -> str:
        """ASCII rendering of the map for debugging."""
        symbols = dict(TILE_SYMBOLS)
        symbols[TileType.UNKNOWN] = " "
        symbols[TileType.LAND_BEING_EXPLORED] = "*"
        lines = []
        for row in range(self.height):
            row_str = ""
            for column in range(self.width):
                if (column, row) == rover_position:
                    row_str += "R"
                else:
                    row_str += symbols[self[column, row]]
            lines.append(row_str)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"Map(name={self.name!r}, size={self.width}x{self.height}, "
                f"land={self.percentage_land:.1f}%)")
