# gridpath/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Any, FrozenSet, Iterable, Union

Cell = int  # row * width + col

# up, down, left, right (fixed order keeps tie-breaking reproducible)
DIRS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class InvalidInput(ValueError):
    """Precondition violated: bad dimensions, out-of-range id, endpoint on an obstacle."""


@dataclass(frozen=True)
class Grid:
    width: int
    height: int
    obstacles: FrozenSet[Cell] = frozenset()

    def __post_init__(self):
        # never hold a reference to the caller's collection
        object.__setattr__(self, "obstacles", frozenset(self.obstacles))

    @classmethod
    def build(cls, width: int, height: int, obstacles: Iterable[Cell] = (),
              source: Optional[Cell] = None, target: Optional[Cell] = None) -> "Grid":
        """Copy editor state into an immutable grid. Endpoints win over obstacles."""
        if width <= 0 or height <= 0:
            raise InvalidInput(f"grid dimensions must be positive, got {width}x{height}")
        blocked = set(obstacles)
        blocked.discard(source)
        blocked.discard(target)
        size = width * height
        for c in blocked:
            if not 0 <= c < size:
                raise InvalidInput(f"obstacle {c} outside grid of {size} cells")
        return cls(width, height, frozenset(blocked))

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, c: Cell) -> bool:
        return 0 <= c < self.size

    def is_blocked(self, c: Cell) -> bool:
        return c in self.obstacles

    def coords(self, c: Cell) -> Tuple[int, int]:
        return divmod(c, self.width)

    def cell_at(self, row: int, col: int) -> Cell:
        return row * self.width + col

    def neighbors(self, c: Cell) -> List[Cell]:
        """Cells one unit step away (up, down, left, right), in bounds and not blocked."""
        row, col = self.coords(c)
        out: List[Cell] = []
        for dr, dc in DIRS:
            r, k = row + dr, col + dc
            if 0 <= r < self.height and 0 <= k < self.width:
                n = r * self.width + k
                if n not in self.obstacles:
                    out.append(n)
        return out


# -------------------- trace events --------------------

@dataclass(frozen=True)
class Expanded:
    """Cell popped from the open set; it is the current cell."""
    cell: Cell


@dataclass(frozen=True)
class Settled:
    """All neighbors of the cell processed; it is now visited."""
    cell: Cell


StepEvent = Union[Expanded, Settled]


# -------------------- outcomes --------------------

@dataclass(frozen=True)
class Found:
    path: Tuple[Cell, ...]
    trace: Tuple[StepEvent, ...] = ()
    found = True


@dataclass(frozen=True)
class NotFound:
    trace: Tuple[StepEvent, ...] = ()
    found = False


Outcome = Union[Found, NotFound]


@dataclass
class StepResult:
    status: str                   # "running" | "done" | "no_path"
    event: Optional[StepEvent] = None
    path: Optional[List[Cell]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
