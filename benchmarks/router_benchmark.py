"""
Benchmark the flood-fill routers on generated maps.

For each map size both routers explore copies of the same maps. The table
reports moves, time per run and whether the routers agreed on the move
count (they always should).
"""

import time
from dataclasses import dataclass
from typing import List

import numpy as np

from rover_explorer import Map, Rover
from rover_explorer.routers import ROUTERS


@dataclass
class BenchmarkCase:
    """A batch of generated maps of one size."""
    name: str
    width: int
    height: int
    continuity_bias: float = 0.98
    n_maps: int = 5


CASES = [
    BenchmarkCase("small", 20, 15),
    BenchmarkCase("medium", 60, 45),
    BenchmarkCase("large", 150, 110),
    BenchmarkCase("noisy", 60, 45, continuity_bias=0.5),
]


def run_case(case: BenchmarkCase, seed: int = 42) -> dict:
    """Explore every map of a case with every router."""
    moves = {name: [] for name in ROUTERS}
    times = {name: [] for name in ROUTERS}

    for i in range(case.n_maps):
        template = Map.generate(case.name, case.width, case.height,
                                case.continuity_bias, seed=seed + i)
        for name, router_cls in ROUTERS.items():
            map_ = template.copy()
            rover = Rover(map_)
            t0 = time.time()
            moves[name].append(router_cls().explore_map(rover, map_))
            times[name].append(time.time() - t0)

    counts = list(moves.values())
    return {
        "name": case.name,
        "size": f"{case.width}x{case.height}",
        "moves": float(np.mean(counts[0])),
        "agree": all(c == counts[0] for c in counts),
        "times": {name: float(np.mean(t)) for name, t in times.items()},
    }


def run_all_benchmarks(seed: int = 42) -> List[dict]:
    print("=" * 70)
    print("  Rover Explorer — Router Benchmark")
    print("=" * 70)
    print()

    results = []
    for case in CASES:
        r = run_case(case, seed=seed)
        results.append(r)
        status = "✓" if r["agree"] else "✗"
        timings = "  ".join(f"{name}={t * 1000:8.1f}ms"
                            for name, t in r["times"].items())
        print(f"  [{r['name']:6s}] {r['size']:>8s}  {status} "
              f"moves={r['moves']:9.1f}  {timings}")

    print()
    print("=" * 70)
    agreed = sum(1 for r in results if r["agree"])
    print(f"  Routers agreed on {agreed}/{len(results)} cases")
    print("=" * 70)
    return results


if __name__ == "__main__":
    run_all_benchmarks()
