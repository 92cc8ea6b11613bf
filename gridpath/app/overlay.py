# gridpath/app/overlay.py
#!/usr/bin/env python3
from typing import Dict, Iterable, Optional

from gridpath.core.types import Cell, Expanded, Settled, StepEvent

CURRENT = "current"
VISITED = "visited"
PATH = "path"


class TraceOverlay:
    """Visual class per cell, rebuilt from the search trace and final path."""

    def __init__(self):
        self._cls: Dict[Cell, str] = {}
        self.last_event: Optional[StepEvent] = None

    def apply(self, event: StepEvent) -> None:
        if isinstance(event, Expanded):
            self._cls[event.cell] = CURRENT
        elif isinstance(event, Settled):
            self._cls[event.cell] = VISITED
        else:
            raise TypeError(f"unknown trace event {event!r}")
        self.last_event = event

    def show_path(self, path: Iterable[Cell]) -> None:
        # endpoints keep their own colour
        cells = list(path)
        for c in cells[1:-1]:
            self._cls[c] = PATH

    def clear(self) -> None:
        self._cls.clear()
        self.last_event = None

    def state_of(self, c: Cell) -> Optional[str]:
        return self._cls.get(c)

    def cells(self, cls: str):
        return [c for c, v in self._cls.items() if v == cls]

    def __len__(self) -> int:
        return len(self._cls)
