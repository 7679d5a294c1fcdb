"""
Routers: strategies that drive a rover until a map is fully explored.

Both routers implement the same flood fill and return the same move count;
the iterative one is the default choice, the recursive one is kept as the
reference formulation.
"""

from rover_explorer.routers.base import (
    DoneCallback, ExplorationTask, Router, RouterConfig, StateCallback,
)
from rover_explorer.routers.iterative import IterativeFloodFillRouter
from rover_explorer.routers.recursive import RecursiveFloodFillRouter

ROUTERS = {
    IterativeFloodFillRouter.name: IterativeFloodFillRouter,
    RecursiveFloodFillRouter.name: RecursiveFloodFillRouter,
}

__all__ = [
    "DoneCallback",
    "ExplorationTask",
    "Router",
    "RouterConfig",
    "StateCallback",
    "IterativeFloodFillRouter",
    "RecursiveFloodFillRouter",
    "ROUTERS",
]
