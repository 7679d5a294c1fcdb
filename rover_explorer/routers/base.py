"""
Shared machinery for routers: cancellation, pacing and progress snapshots.

A router drives a rover over a map until every reachable land tile has been
visited. Runs are synchronous: explore_map() blocks the calling thread until
the map is explored or the run is canceled. To keep a caller responsive,
start() runs the same exploration on a dedicated thread and hands back an
ExplorationTask to cancel or join.

Progress snapshots are only produced when the router is paced
(exploration_time_ms > 0); an unpaced run is a pure computation and goes
straight to its move count.
"""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from rover_explorer.rover import Rover
from rover_explorer.state import ExplorationState
from rover_explorer.terrain import Map


StateCallback = Callable[[ExplorationState], None]
DoneCallback = Callable[["ExplorationTask"], None]


@dataclass
class RouterConfig:
    """Configuration shared by all routers."""
    exploration_time_ms: int = 0   # Delay between moves; 0 = unpaced, no snapshots
    verbose: bool = False
    log_every: int = 100           # Moves between verbose progress lines


class Router:
    """
    Base class for flood-fill routers.

    Subclasses implement _explore(); everything else (cancellation, pacing,
    snapshots, verbose output, background runs) lives here.
    """

    name = "router"

    def __init__(self, config: Optional[RouterConfig] = None):
        self.config = config or RouterConfig()
        self.exploration_time_ms = self.config.exploration_time_ms
        self._canceled = threading.Event()

    @property
    def has_been_canceled(self) -> bool:
        return self._canceled.is_set()

    def cancel(self) -> None:
        """Ask the current run to stop at its next step boundary."""
        self._canceled.set()

    def explore_map(self, rover: Rover, map_: Map,
                    on_state: Optional[StateCallback] = None) -> int:
        """
        Explore ``map_`` with ``rover`` on the calling thread.

        Returns the number of moves made, forward and backtracking alike.
        A canceled run returns the moves made before it stopped.
        """
        self._canceled.clear()
        return self._run(rover, map_, on_state)

    def start(self, rover: Rover, map_: Map,
              on_state: Optional[StateCallback] = None,
              on_done: Optional[DoneCallback] = None) -> ExplorationTask:
        """Run explore_map() on a new thread."""
        self._canceled.clear()
        return ExplorationTask(self, rover, map_, on_state, on_done).start()

    def _run(self, rover: Rover, map_: Map,
             on_state: Optional[StateCallback]) -> int:
        moves = self._explore(rover, map_, on_state)
        if self.config.verbose:
            status = "canceled" if self.has_been_canceled else "complete"
            print(f"  [{self.name}] {status}: moves={moves}  "
                  f"explored={map_.percentage_of_land_explored:5.1f}%  "
                  f"max visits={rover.maximum_visits_to_any_tile}")
        return moves

    def _explore(self, rover: Rover, map_: Map,
                 on_state: Optional[StateCallback]) -> int:
        raise NotImplementedError

    # --- Per-step helpers ---

    def _should_publish(self) -> bool:
        return self.exploration_time_ms > 0 and not self.has_been_canceled

    def _should_delay(self) -> bool:
        # Never sleep on the main thread: a paced run belongs on a worker.
        return (self.exploration_time_ms > 0
                and not self.has_been_canceled
                and threading.current_thread() is not threading.main_thread())

    def _publish(self, on_state: Optional[StateCallback], rover: Rover,
                 map_: Map, moves: int, revealed: bool = True) -> None:
        if on_state is None or not self._should_publish():
            return
        on_state(ExplorationState(
            current_position=rover.position,
            positions_being_explored=(
                tuple(rover.locations_being_explored) if revealed else ()
            ),
            moves=moves,
            percentage_explored=map_.percentage_of_land_explored,
            trail=rover.trail,
        ))

    def _after_move(self, on_state: Optional[StateCallback], rover: Rover,
                    map_: Map, moves: int, revealed: bool = True) -> None:
        """Snapshot, verbose progress line and pacing delay for one move."""
        self._publish(on_state, rover, map_, moves, revealed)
        if self.config.verbose and moves % self.config.log_every == 0:
            print(f"  [move {moves:6d}] pos={rover.position}  "
                  f"explored={map_.percentage_of_land_explored:5.1f}%")
        if self._should_delay():
            time.sleep(self.exploration_time_ms / 1000.0)


class ExplorationTask:
    """
    One exploration run on its own thread.

    Snapshots are passed to ``on_state`` when given, otherwise they are
    queued on ``states`` for the caller to drain at its own pace.
    """

    def __init__(self, router: Router, rover: Rover, map_: Map,
                 on_state: Optional[StateCallback] = None,
                 on_done: Optional[DoneCallback] = None):
        self.router = router
        self.states: "queue.Queue[ExplorationState]" = queue.Queue()
        self.result: Optional[int] = None
        self.error: Optional[Exception] = None
        self._on_state = on_state or self.states.put
        self._on_done = on_done
        self._thread = threading.Thread(
            target=self._run, args=(rover, map_),
            name=f"{router.name}-exploration", daemon=True,
        )

    def start(self) -> ExplorationTask:
        self._thread.start()
        return self

    def _run(self, rover: Rover, map_: Map) -> None:
        try:
            self.result = self.router._run(rover, map_, self._on_state)
        except Exception as exc:
            self.error = exc
        finally:
            if self._on_done is not None:
                self._on_done(self)

    @property
    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()

    def cancel(self) -> None:
        self.router.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the run to finish; True if it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Wait for the run and return its move count.

        Returns None if the run is still going after ``timeout`` seconds.
        Re-raises any exception the run ended with.
        """
        if not self.wait(timeout):
            return None
        if self.error is not None:
            raise self.error
        return self.result

    def drain_states(self) -> List[ExplorationState]:
        """Remove and return every queued snapshot."""
        drained = []
        while True:
            try:
                drained.append(self.states.get_nowait())
            except queue.Empty:
                return drained
