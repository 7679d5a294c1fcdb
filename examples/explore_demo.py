"""
Demo: a rover exploring a hand-drawn island and a generated map.

Both routers explore copies of the same map. They make the same number of
moves; the final map shows every land tile the rover could reach as '@'.

Pass a path to a .map file to explore that map instead of the built-in one.
"""

import sys

from rover_explorer import (
    IterativeFloodFillRouter, Map, RecursiveFloodFillRouter, Rover,
    RouterConfig,
)


ISLAND = (
    "....::......\n"
    "...::::::...\n"
    "..:::@:::::.\n"
    "...::..:::..\n"
    "..........:.\n"
    ".::.....::::\n"
)


def explore_with_both_routers(template: Map) -> None:
    print("Map:")
    print(template.render(rover_position=template.landing_location))
    print()
    print(f"  size={template.width}x{template.height}  "
          f"land={template.percentage_land:.1f}%  "
          f"landing={template.landing_location}")
    print()

    for router in (IterativeFloodFillRouter(RouterConfig(verbose=True)),
                   RecursiveFloodFillRouter(RouterConfig(verbose=True))):
        map_ = template.copy()
        rover = Rover(map_)
        router.explore_map(rover, map_)

    print()
    print("Explored:")
    print(map_.render())


def main():
    print("=" * 60)
    print("  Rover Explorer — Flood Fill Demo")
    print("=" * 60)

    if len(sys.argv) > 1:
        print(f"\n--- {sys.argv[1]} ---\n")
        explore_with_both_routers(Map.load(sys.argv[1]))
        return

    print("\n--- Island ---\n")
    explore_with_both_routers(Map.from_string(ISLAND, "island"))

    print("\n--- Generated (40x30, continuity 0.98) ---\n")
    explore_with_both_routers(Map.generate("generated", 40, 30, 0.98, seed=42))


if __name__ == "__main__":
    main()
