# gridpath/app/editor.py
#!/usr/bin/env python3
"""
Editor state behind the viewer: which cell is the source, which is the
target, which are obstacles, and which tool the mouse is currently using.

Pure Python, no pygame; the viewer forwards clicks here and asks for a
Grid snapshot when a simulation starts.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Set, Tuple

import numpy as np

from gridpath.core.types import Cell, Grid, InvalidInput
from gridpath.core.generator import random_obstacles


class Mode(Enum):
    SOURCE = "source"
    TARGET = "target"
    OBSTACLES = "obstacles"
    SIMULATING = "simulating"


PROMPTS = {
    Mode.SOURCE: "Select a source",
    Mode.TARGET: "Select a target",
    Mode.OBSTACLES: "Select obstacles",
    Mode.SIMULATING: "Simulating",
}


class EditorState:
    def __init__(self, width: int, height: int,
                 source: Optional[Cell] = None,
                 target: Optional[Cell] = None,
                 obstacles=()):
        if width <= 0 or height <= 0:
            raise InvalidInput(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.mode = Mode.SOURCE
        self.source: Optional[Cell] = None
        self.target: Optional[Cell] = None
        self.obstacles: Set[Cell] = set()
        for c in obstacles:
            self._check(c)
            self.obstacles.add(c)
        if source is not None:
            self._check(source)
            self.source = source
        if target is not None:
            self._check(target)
            self.target = target
        self.obstacles.discard(self.source)
        self.obstacles.discard(self.target)

    def _check(self, c: Cell) -> None:
        if not 0 <= c < self.width * self.height:
            raise InvalidInput(f"cell {c} outside {self.width}x{self.height} grid")

    @property
    def prompt(self) -> str:
        return PROMPTS[self.mode]

    @property
    def simulating(self) -> bool:
        return self.mode is Mode.SIMULATING

    @property
    def can_simulate(self) -> bool:
        return not self.simulating and self.source is not None and self.target is not None

    # -------------------- tool selection --------------------

    def set_mode(self, mode: Mode) -> bool:
        """Switch tool; ignored while a simulation runs."""
        if self.simulating or mode is Mode.SIMULATING:
            return False
        self.mode = mode
        return True

    # -------------------- clicks --------------------

    def click(self, c: Cell) -> None:
        if self.simulating:
            return
        self._check(c)
        if self.mode is Mode.SOURCE:
            self.obstacles.discard(c)
            if c == self.target:
                return
            self.source = None if c == self.source else c
        elif self.mode is Mode.TARGET:
            self.obstacles.discard(c)
            if c == self.source:
                return
            self.target = None if c == self.target else c
        elif self.mode is Mode.OBSTACLES:
            if c == self.source or c == self.target:
                return
            if c in self.obstacles:
                self.obstacles.remove(c)
            else:
                self.obstacles.add(c)

    def randomize(self, rng: Optional[np.random.Generator] = None) -> None:
        """Replace every obstacle with a fresh random layout."""
        if self.simulating:
            return
        self.mode = Mode.OBSTACLES
        self.obstacles = set(random_obstacles(self.width, self.height,
                                              self.source, self.target, rng))

    # -------------------- simulation --------------------

    def snapshot(self) -> Tuple[Grid, Cell, Cell]:
        """Copy the current layout into an immutable Grid plus endpoints."""
        if self.source is None or self.target is None:
            raise InvalidInput("both a source and a target must be selected")
        grid = Grid.build(self.width, self.height, self.obstacles, self.source, self.target)
        return grid, self.source, self.target

    def begin_simulation(self) -> Tuple[Grid, Cell, Cell]:
        if not self.can_simulate:
            raise InvalidInput("cannot simulate: " +
                               ("already simulating" if self.simulating else "missing source or target"))
        snap = self.snapshot()
        self.mode = Mode.SIMULATING
        return snap

    def end_simulation(self) -> None:
        if self.simulating:
            self.mode = Mode.SOURCE
