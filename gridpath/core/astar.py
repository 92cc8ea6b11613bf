# gridpath/core/astar.py
#!/usr/bin/env python3
"""
A* on a 4-connected grid, one trace event per step for animation.

Public entry points:
- search(grid, source, target) -> Found | NotFound   (runs to completion)
- iter_search(grid, source, target)                  (lazy event generator)
- AStarSearch(...).step() -> StepResult              (viewer API)

Heuristic:
- Manhattan distance; admissible and consistent for unit-cost 4-way moves.

Tie-breaking in the open set:
- (f, cell): lower f first, then lowest cell id.

Events:
- Expanded(cell) when a cell is popped, Settled(cell) once its neighbors
  are relaxed. The source never produces events; the target is expanded
  but never settled.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Generator
import heapq
import logging
from numbers import Integral

from gridpath.core.types import (
    Cell, Grid, InvalidInput, Expanded, Settled, StepEvent,
    Found, NotFound, Outcome, StepResult,
)
from gridpath.core.path import reconstruct_path

logger = logging.getLogger(__name__)

EventStream = Generator[StepEvent, None, Outcome]


def manhattan(grid: Grid, a: Cell, b: Cell) -> int:
    ra, ca = grid.coords(a)
    rb, cb = grid.coords(b)
    return abs(ra - rb) + abs(ca - cb)


def validate(grid: Grid, source: Cell, target: Cell) -> Tuple[Cell, Cell]:
    """Raise InvalidInput unless both endpoints are free cells of `grid`; return them as ints."""
    if grid.width <= 0 or grid.height <= 0:
        raise InvalidInput(f"grid dimensions must be positive, got {grid.width}x{grid.height}")
    out = []
    for label, c in (("source", source), ("target", target)):
        if not isinstance(c, Integral) or isinstance(c, bool):
            raise InvalidInput(f"{label} must be an integer cell id, got {c!r}")
        c = int(c)
        if not grid.in_bounds(c):
            raise InvalidInput(f"{label} {c} outside grid of {grid.size} cells")
        if grid.is_blocked(c):
            raise InvalidInput(f"{label} {c} is an obstacle")
        out.append(c)
    return out[0], out[1]


@dataclass
class SearchState:
    g_score: Dict[Cell, int] = field(default_factory=dict)
    f_score: Dict[Cell, int] = field(default_factory=dict)
    came_from: Dict[Cell, Cell] = field(default_factory=dict)
    open: Set[Cell] = field(default_factory=set)
    open_pq: List[Tuple[int, Cell]] = field(default_factory=list)  # (f, cell)

    def push(self, c: Cell, g: int, f: int) -> None:
        self.g_score[c] = g
        self.f_score[c] = f
        self.open.add(c)
        heapq.heappush(self.open_pq, (f, c))

    def pop_best(self) -> Cell:
        """Remove and return the open cell with lowest f (lowest id on ties)."""
        while True:
            f, c = heapq.heappop(self.open_pq)
            # Ignore stale entries left behind by an improved f
            if c in self.open and f == self.f_score[c]:
                self.open.remove(c)
                return c


@dataclass
class AStarSearch:
    grid: Grid
    source: Cell
    target: Cell
    name: str = "A*"

    state: SearchState = field(default_factory=SearchState)
    outcome: Optional[Outcome] = None
    popped_count: int = 0
    settled_count: int = 0
    _stream: Optional[EventStream] = field(default=None, repr=False)
    _started: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        self.source, self.target = validate(self.grid, self.source, self.target)

    # -------------------- event stream --------------------

    def events(self) -> EventStream:
        """Lazy trace; the generator's return value is the terminal outcome."""
        if self._started:
            raise RuntimeError("search already started; create a new AStarSearch to rerun")
        self._started = True
        return self._run()

    def _h(self, c: Cell) -> int:
        return manhattan(self.grid, c, self.target)

    def _run(self) -> EventStream:
        st = self.state
        src, dst = self.source, self.target
        logger.debug("A* %dx%d from %d to %d (%d obstacles)",
                     self.grid.width, self.grid.height, src, dst, len(self.grid.obstacles))

        st.push(src, 0, self._h(src))
        while st.open:
            current = st.pop_best()
            self.popped_count += 1
            if current != src:
                yield Expanded(current)

            if current == dst:
                path = reconstruct_path(st.came_from, dst)
                logger.debug("A* reached %d, path of %d cells", dst, len(path))
                self.outcome = Found(tuple(path))
                return self.outcome

            g_cur = st.g_score[current]
            for n in self.grid.neighbors(current):
                tentative = g_cur + 1
                if n not in st.g_score or tentative < st.g_score[n]:
                    st.came_from[n] = current
                    st.push(n, tentative, tentative + self._h(n))

            if current != src:
                self.settled_count += 1
                yield Settled(current)

        logger.debug("A* exhausted the open set without reaching %d", dst)
        self.outcome = NotFound()
        return self.outcome

    # -------------------- stepping (viewer API) --------------------

    def step(self) -> StepResult:
        """Advance by one event. Once finished, keeps returning the terminal status."""
        if self._stream is None and self.outcome is None:
            self._stream = self.events()
        if self.outcome is None:
            try:
                ev = next(self._stream)
                return StepResult(status="running", event=ev, metrics=self.metrics())
            except StopIteration:
                self._stream = None
        if isinstance(self.outcome, Found):
            path = list(self.outcome.path)
            return StepResult(status="done", path=path, metrics=self.metrics(path_len=len(path)))
        return StepResult(status="no_path", metrics=self.metrics())

    # -------------------- metrics --------------------

    def metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.state.open),
            "settled": self.settled_count,
            "path_len": path_len,
        }


def iter_search(grid: Grid, source: Cell, target: Cell) -> EventStream:
    """
    Validate eagerly, then hand back the lazy event stream.

    Dropping the generator part-way abandons the search; no partial path
    is ever exposed. `outcome = yield from iter_search(...)` gives the result.
    """
    return AStarSearch(grid, source, target).events()


def search(grid: Grid, source: Cell, target: Cell) -> Outcome:
    """Run A* to completion and return Found(path, trace) or NotFound(trace)."""
    stream = iter_search(grid, source, target)
    trace: List[StepEvent] = []
    while True:
        try:
            trace.append(next(stream))
        except StopIteration as stop:
            outcome = stop.value
            break
    if isinstance(outcome, Found):
        return Found(outcome.path, tuple(trace))
    return NotFound(tuple(trace))
