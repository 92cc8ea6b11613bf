# gridpath/core/path.py
#!/usr/bin/env python3
from typing import Dict, List

from gridpath.core.types import Cell


def reconstruct_path(came_from: Dict[Cell, Cell], target: Cell) -> List[Cell]:
    """
    Walk predecessors back from `target` until a cell without one (the source).

    Returns the path in source-to-target order. Never empty: when the source
    is the target the result is just `[target]`.
    """
    path: List[Cell] = [target]
    cur = target
    while cur in came_from:
        cur = came_from[cur]
        if len(path) > len(came_from):
            raise RuntimeError(f"predecessor cycle through cell {cur}")
        path.append(cur)
    path.reverse()
    return path
