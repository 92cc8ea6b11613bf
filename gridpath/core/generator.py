# gridpath/core/generator.py
#!/usr/bin/env python3
"""
Random obstacle layouts for the editor's "Random Obstacles" button.

Draws an attempt count between 40% and 50% of the grid, then one uniform
cell id per attempt. Attempts landing on an endpoint are skipped and
repeats collapse, so the final density is usually a little lower.
"""

from __future__ import annotations
from typing import FrozenSet, Optional, Set
import numpy as np

from gridpath.core.types import Cell, InvalidInput

MIN_DENSITY = 0.4
MAX_DENSITY = 0.5


def random_obstacles(width: int, height: int,
                     source: Optional[Cell] = None,
                     target: Optional[Cell] = None,
                     rng: Optional[np.random.Generator] = None) -> FrozenSet[Cell]:
    if width <= 0 or height <= 0:
        raise InvalidInput(f"grid dimensions must be positive, got {width}x{height}")
    rng = rng or np.random.default_rng()
    size = width * height
    lo = int(MIN_DENSITY * size)
    hi = int(MAX_DENSITY * size)
    attempts = int(rng.integers(lo, hi)) if hi > lo else lo

    out: Set[Cell] = set()
    for c in rng.integers(0, size, size=attempts):
        c = int(c)
        if c == source or c == target:
            continue
        out.add(c)
    return frozenset(out)
