"""Tests for maps: tiles, bounds, the .map format and generation."""

import os
import tempfile
import unittest

import numpy as np

from rover_explorer.exceptions import InvalidTileStateError, MapFormatError
from rover_explorer.terrain import (
    Direction, Map, TileType, explored_map_path,
)


SMALL_MAP = (
    "..:\n"
    ":@:\n"
)

UNEVEN_MAP = (
    ".:@\n"
    ":\n"
)


def land_disagreements(map_: Map) -> int:
    """Number of adjacent tile pairs where one is land and the other is not."""
    land = np.isin(map_.tiles, [TileType.UNEXPLORED_LAND, TileType.EXPLORED_LAND])
    return int(np.sum(land[:, 1:] != land[:, :-1]) +
               np.sum(land[1:, :] != land[:-1, :]))


class TestTilesAndDirections(unittest.TestCase):

    def test_only_land_tiles_are_land(self):
        self.assertTrue(TileType.UNEXPLORED_LAND.is_land)
        self.assertTrue(TileType.EXPLORED_LAND.is_land)
        self.assertFalse(TileType.SEA.is_land)
        self.assertFalse(TileType.UNKNOWN.is_land)
        self.assertFalse(TileType.LAND_BEING_EXPLORED.is_land)

    def test_direction_order(self):
        self.assertEqual(Direction.all(), [
            Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST,
        ])

    def test_direction_deltas(self):
        self.assertEqual(Direction.NORTH.delta(), (0, -1))
        self.assertEqual(Direction.EAST.delta(), (1, 0))
        self.assertEqual(Direction.SOUTH.delta(), (0, 1))
        self.assertEqual(Direction.WEST.delta(), (-1, 0))

    def test_opposites(self):
        self.assertEqual(Direction.NORTH.opposite(), Direction.SOUTH)
        self.assertEqual(Direction.SOUTH.opposite(), Direction.NORTH)
        self.assertEqual(Direction.EAST.opposite(), Direction.WEST)
        self.assertEqual(Direction.WEST.opposite(), Direction.EAST)


class TestMapModel(unittest.TestCase):
    """Bounds, indexing and derived statistics."""

    def setUp(self):
        self.map = Map.from_string(SMALL_MAP, "small")

    def test_size_and_landing(self):
        self.assertEqual(self.map.width, 3)
        self.assertEqual(self.map.height, 2)
        self.assertEqual(self.map.landing_location, (1, 1))
        self.assertEqual(self.map[1, 1], TileType.EXPLORED_LAND)
        self.assertEqual(self.map[0, 0], TileType.SEA)
        self.assertEqual(self.map[2, 0], TileType.UNEXPLORED_LAND)

    def test_is_in_bounds(self):
        self.assertTrue(self.map.is_in_bounds(0, 0))
        self.assertTrue(self.map.is_in_bounds(2, 1))
        self.assertFalse(self.map.is_in_bounds(-1, 0))
        self.assertFalse(self.map.is_in_bounds(0, -1))
        self.assertFalse(self.map.is_in_bounds(3, 0))
        self.assertFalse(self.map.is_in_bounds(0, 2))

    def test_unknown_tiles_are_out_of_bounds(self):
        map_ = Map.from_string(UNEVEN_MAP)
        self.assertEqual(map_.width, 3)
        self.assertEqual(map_.height, 2)
        self.assertEqual(map_[1, 1], TileType.UNKNOWN)
        self.assertFalse(map_.is_in_bounds(1, 1))
        self.assertFalse(map_.is_in_bounds(2, 1))
        self.assertTrue(map_.is_in_bounds(0, 1))

    def test_percentages(self):
        # 4 land tiles out of 6, 1 of them explored
        self.assertAlmostEqual(self.map.percentage_land, 100.0 * 4 / 6)
        self.assertAlmostEqual(self.map.percentage_of_land_explored, 25.0)
        self.assertTrue(self.map.has_remaining_unexplored_land)

    def test_mark_tile_as_explored(self):
        self.map.mark_tile_as_explored(2, 0)
        self.assertEqual(self.map[2, 0], TileType.EXPLORED_LAND)
        self.assertAlmostEqual(self.map.percentage_of_land_explored, 50.0)

    def test_marking_explored_land_again_is_allowed(self):
        self.map.mark_tile_as_explored(1, 1)
        self.assertEqual(self.map[1, 1], TileType.EXPLORED_LAND)

    def test_sea_cannot_be_explored(self):
        with self.assertRaises(InvalidTileStateError):
            self.map.mark_tile_as_explored(0, 0)

    def test_unknown_cannot_be_explored(self):
        map_ = Map.from_string(UNEVEN_MAP)
        with self.assertRaises(InvalidTileStateError):
            map_.mark_tile_as_explored(2, 1)

    def test_coordinates_outside_the_grid(self):
        map_ = Map.from_string(".@.\n")
        for x, y in [(-2, 0), (-1, 0), (3, 0), (0, -1), (0, 1)]:
            with self.assertRaises(InvalidTileStateError):
                map_.mark_tile_as_explored(x, y)
            with self.assertRaises(IndexError):
                map_[x, y]
        self.assertEqual(map_.to_string(), ".@.\n")

    def test_fully_explored_map(self):
        for x, y in [(2, 0), (0, 1), (2, 1)]:
            self.map.mark_tile_as_explored(x, y)
        self.assertFalse(self.map.has_remaining_unexplored_land)
        self.assertAlmostEqual(self.map.percentage_of_land_explored, 100.0)

    def test_copy_is_independent(self):
        copy = self.map.copy()
        self.map.mark_tile_as_explored(2, 0)
        self.assertEqual(copy[2, 0], TileType.UNEXPLORED_LAND)
        self.assertEqual(copy.landing_location, self.map.landing_location)

    def test_render(self):
        rendered = self.map.render(rover_position=(1, 1))
        self.assertEqual(rendered, "..:\n:R:")
        self.assertIn("@", self.map.render())


class TestMapFormat(unittest.TestCase):
    """Reading and writing .map text."""

    def test_round_trip_text(self):
        map_ = Map.from_string(SMALL_MAP)
        self.assertEqual(map_.to_string(), SMALL_MAP)

    def test_round_trip_uneven_rows(self):
        map_ = Map.from_string(UNEVEN_MAP)
        self.assertEqual(map_.to_string(), UNEVEN_MAP)
        again = Map.from_string(map_.to_string())
        np.testing.assert_array_equal(again.tiles, map_.tiles)

    def test_windows_line_endings(self):
        map_ = Map.from_string("..:\r\n:@:\r\n")
        self.assertEqual(map_.height, 2)
        self.assertEqual(map_.landing_location, (1, 1))

    def test_only_newlines_separate_rows(self):
        for separator in ["\x0b", "\x0c", "\x1c", "\x85", "\u2028", "\r"]:
            with self.subTest(separator=repr(separator)):
                with self.assertRaises(MapFormatError):
                    Map.from_string(":@" + separator + ":\n")

    def test_blank_final_row_is_kept_once(self):
        map_ = Map.from_string("..:\n:@:\n\n")
        self.assertEqual(map_.height, 3)
        self.assertEqual(map_[0, 2], TileType.UNKNOWN)
        self.assertEqual(Map.from_string("..:\n:@:").height, 2)

    def test_no_landing_location(self):
        with self.assertRaises(MapFormatError):
            Map.from_string("..:\n:::\n")

    def test_two_landing_locations(self):
        with self.assertRaises(MapFormatError) as ctx:
            Map.from_string("..@\n:@:\n")
        self.assertIn("2", str(ctx.exception))

    def test_unrecognised_character(self):
        with self.assertRaises(MapFormatError) as ctx:
            Map.from_string("..:\n:@x\n")
        self.assertIn("line 2", str(ctx.exception))

    def test_empty_text(self):
        with self.assertRaises(MapFormatError):
            Map.from_string("")

    def test_format_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            Map.from_string("...\n")

    def test_display_marker_is_not_written(self):
        map_ = Map("marked", [[TileType.EXPLORED_LAND,
                               TileType.LAND_BEING_EXPLORED]])
        with self.assertRaises(MapFormatError):
            map_.to_string()

    def test_serialize_and_load(self):
        map_ = Map.from_string(SMALL_MAP, "ignored")
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "island.map")
            map_.serialize(path)
            loaded = Map.load(path)
        self.assertEqual(loaded.name, "island")
        self.assertEqual(loaded.landing_location, (1, 1))
        np.testing.assert_array_equal(loaded.tiles, map_.tiles)

    def test_deserialize_replaces_contents(self):
        map_ = Map.from_string("@\n")
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "small.map")
            with open(path, "w") as f:
                f.write(SMALL_MAP)
            map_.deserialize(path)
        self.assertEqual(map_.name, "small")
        self.assertEqual((map_.width, map_.height), (3, 2))
        self.assertEqual(map_.landing_location, (1, 1))

    def test_extension_is_enforced(self):
        map_ = Map.from_string(SMALL_MAP)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "island.txt")
            with self.assertRaises(MapFormatError):
                map_.serialize(path)
            with open(path, "w") as f:
                f.write(SMALL_MAP)
            with self.assertRaises(MapFormatError):
                Map.load(path)
            with self.assertRaises(MapFormatError):
                map_.deserialize(path)

    def test_load_rejects_two_landings(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bad.map")
            with open(path, "w") as f:
                f.write("@@\n")
            with self.assertRaises(MapFormatError):
                Map.load(path)

    def test_explored_map_path(self):
        self.assertEqual(explored_map_path(os.path.join("maps", "island.map")),
                         os.path.join("maps", "explored-island.map"))
        self.assertEqual(explored_map_path("island.map"), "explored-island.map")


class TestMapGeneration(unittest.TestCase):

    def test_size_and_single_landing(self):
        map_ = Map.generate("gen", 12, 7, 0.8, seed=1)
        self.assertEqual((map_.width, map_.height), (12, 7))
        self.assertEqual(map_.name, "gen")
        self.assertEqual(int(np.sum(map_.tiles == TileType.EXPLORED_LAND)), 1)
        x, y = map_.landing_location
        self.assertEqual(map_[x, y], TileType.EXPLORED_LAND)

    def test_only_sea_and_land(self):
        map_ = Map.generate("gen", 15, 15, 0.5, seed=2)
        self.assertTrue(np.all(np.isin(map_.tiles, [
            TileType.SEA, TileType.UNEXPLORED_LAND, TileType.EXPLORED_LAND,
        ])))

    def test_percentage_land_formula(self):
        for seed in range(10):
            map_ = Map.generate("gen", 10, 8, seed / 10, seed=seed)
            land = int(np.sum(np.isin(map_.tiles, [
                TileType.UNEXPLORED_LAND, TileType.EXPLORED_LAND,
            ])))
            self.assertGreaterEqual(map_.percentage_land, 0.0)
            self.assertLessEqual(map_.percentage_land, 100.0)
            self.assertAlmostEqual(map_.percentage_land, 100.0 * land / 80)

    def test_same_seed_same_map(self):
        a = Map.generate("a", 10, 10, 0.9, seed=7)
        b = Map.generate("b", 10, 10, 0.9, seed=7)
        np.testing.assert_array_equal(a.tiles, b.tiles)
        self.assertEqual(a.landing_location, b.landing_location)

    def test_different_seeds_differ(self):
        maps = [Map.generate("x", 10, 10, 1.0, seed=seed) for seed in range(5)]
        self.assertGreater(len({m.tiles.tobytes() for m in maps}), 1)
        for map_ in maps:
            self.assertGreaterEqual(map_.land_count, 1)

    def test_always_has_land(self):
        for seed in range(20):
            map_ = Map.generate("x", 4, 3, 1.0, seed=seed)
            self.assertGreaterEqual(map_.land_count, 1)

    def test_single_tile_map(self):
        map_ = Map.generate("one", 1, 1, 0.5, seed=3)
        self.assertEqual(map_.landing_location, (0, 0))
        self.assertEqual(map_[0, 0], TileType.EXPLORED_LAND)

    def test_continuity_bias_joins_regions(self):
        smooth = Map.generate("smooth", 10, 10, 1.0, seed=4)
        noisy = Map.generate("noisy", 10, 10, 0.0, seed=4)
        self.assertLess(land_disagreements(smooth), land_disagreements(noisy))

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            Map.generate("x", 0, 5, 0.5)
        with self.assertRaises(ValueError):
            Map.generate("x", 5, 5, 1.5)


if __name__ == "__main__":
    unittest.main()
