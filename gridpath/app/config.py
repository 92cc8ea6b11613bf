# gridpath/app/config.py
#!/usr/bin/env python3
"""
Viewer settings and map loading.

Resolution order: defaults, then env vars (GRIDPATH_*), then argv flags
of the form --name=value. Map files are JSON:

    {"width": 10, "height": 8,
     "source": [0, 0], "target": 79,
     "obstacles": [[3, 1], [3, 2], 33]}

Cells may be given as flat row-major ids or as [row, col] pairs.
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from gridpath.core.types import Cell, InvalidInput
from gridpath.app.editor import EditorState

MAP_DIR = Path(__file__).resolve().parents[2] / "maps"

DEFAULT_WIDTH = 40
DEFAULT_HEIGHT = 30
DEFAULT_STEP_MS = 50
CELL_SIZE_DEFAULT = 20


@dataclass
class Settings:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    step_ms: int = DEFAULT_STEP_MS
    map_path: Optional[Path] = None
    seed: Optional[int] = None


_INT_KEYS = {"width": "width", "height": "height", "step-ms": "step_ms", "seed": "seed"}


def _as_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{key} must be an integer, got {raw!r}") from None


def resolve_settings(argv: Optional[Sequence[str]] = None,
                     environ: Optional[Mapping[str, str]] = None) -> Settings:
    argv = sys.argv[1:] if argv is None else argv
    environ = os.environ if environ is None else environ

    raw = {}
    for key in ("width", "height", "step-ms", "map", "seed"):
        env_key = "GRIDPATH_" + key.upper().replace("-", "_")
        if environ.get(env_key):
            raw[key] = environ[env_key]
    for arg in argv:
        if arg.startswith("--") and "=" in arg:
            key, value = arg[2:].split("=", 1)
            if key in _INT_KEYS or key == "map":
                raw[key] = value

    s = Settings()
    for key, attr in _INT_KEYS.items():
        if key in raw:
            setattr(s, attr, _as_int(key, raw[key]))
    if "map" in raw:
        p = Path(raw["map"])
        s.map_path = p if p.suffix else MAP_DIR / f"{p}.json"
    if s.width <= 0 or s.height <= 0:
        raise InvalidInput(f"grid dimensions must be positive, got {s.width}x{s.height}")
    if s.step_ms < 0:
        raise InvalidInput(f"step-ms must be >= 0, got {s.step_ms}")
    if s.seed is not None and s.seed < 0:
        raise InvalidInput(f"seed must be >= 0, got {s.seed}")
    return s


# ---------- Loader ----------
def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _cell(value: Any, width: int, height: int, what: str) -> Cell:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        row, col = value
        if not (_is_int(row) and _is_int(col)):
            raise InvalidInput(f"{what} {list(value)} must hold two integers")
        if not (0 <= row < height and 0 <= col < width):
            raise InvalidInput(f"{what} {list(value)} out of bounds")
        return row * width + col
    if _is_int(value):
        if not 0 <= value < width * height:
            raise InvalidInput(f"{what} {value} out of bounds")
        return value
    raise InvalidInput(f"{what} must be an id or [row, col], got {value!r}")


def load_map(path: Path) -> EditorState:
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as ex:
        raise InvalidInput(f"{path}: not valid JSON ({ex})") from ex
    try:
        width = int(data["width"])
        height = int(data["height"])
    except (KeyError, TypeError, ValueError) as ex:
        raise InvalidInput(f"{path}: width/height missing or invalid") from ex
    if width <= 0 or height <= 0:
        raise InvalidInput(f"{path}: grid dimensions must be positive")

    source = data.get("source")
    target = data.get("target")
    raw_obstacles = data.get("obstacles", [])
    if not isinstance(raw_obstacles, list):
        raise InvalidInput(f"{path}: obstacles must be a list, got {raw_obstacles!r}")
    obstacles: List[Cell] = [_cell(v, width, height, "obstacle") for v in raw_obstacles]
    return EditorState(
        width, height,
        source=None if source is None else _cell(source, width, height, "source"),
        target=None if target is None else _cell(target, width, height, "target"),
        obstacles=obstacles,
    )
