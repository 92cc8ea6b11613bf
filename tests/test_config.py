import json

import pytest

from gridpath.core.types import InvalidInput
from gridpath.core.astar import search
from gridpath.app.config import MAP_DIR, Settings, resolve_settings, load_map


def test_defaults():
    s = resolve_settings([], {})
    assert s == Settings(width=40, height=30, step_ms=50, map_path=None, seed=None)


def test_argv_overrides_env():
    env = {"GRIDPATH_WIDTH": "12", "GRIDPATH_STEP_MS": "10", "GRIDPATH_SEED": "5"}
    s = resolve_settings(["--width=20", "--height=9", "--ignored=1", "-x"], env)
    assert (s.width, s.height, s.step_ms, s.seed) == (20, 9, 10, 5)


def test_map_name_resolves_to_bundled_dir():
    s = resolve_settings(["--map=02_wall_gap"], {})
    assert s.map_path == MAP_DIR / "02_wall_gap.json"


@pytest.mark.parametrize("argv", [["--width=abc"], ["--height=0"], ["--step-ms=-5"], ["--seed=-1"]])
def test_bad_settings_rejected(argv):
    with pytest.raises(InvalidInput):
        resolve_settings(argv, {})


def test_load_map_mixed_cell_formats(tmp_path):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({
        "width": 4, "height": 3,
        "source": [0, 0], "target": 11,
        "obstacles": [[1, 1], 6, [0, 0]],
    }))
    ed = load_map(p)
    assert (ed.width, ed.height) == (4, 3)
    assert ed.source == 0 and ed.target == 11
    assert ed.obstacles == {5, 6}


@pytest.mark.parametrize("data", [
    {"height": 3},
    {"width": 3, "height": 3, "obstacles": [[5, 0]]},
    {"width": 3, "height": 3, "source": 9},
    {"width": 3, "height": 3, "target": "a"},
    {"width": 0, "height": 3},
    {"width": 3, "height": 3, "obstacles": [["a", 1]]},
    {"width": 3, "height": 3, "obstacles": 5},
    {"width": 3, "height": 3, "source": [None, 1]},
    {"width": 3, "height": 3, "target": [1.7, 2]},
    {"width": 3, "height": 3, "obstacles": [[True, 1]]},
])
def test_load_map_rejects_malformed(tmp_path, data):
    p = tmp_path / "bad.json"
    p.write_text(json.dumps(data))
    with pytest.raises(InvalidInput):
        load_map(p)


def test_load_map_rejects_non_json(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{width: 3")
    with pytest.raises(InvalidInput):
        load_map(p)


@pytest.mark.parametrize("name,found,length", [
    ("01_open_field", True, 15),
    ("02_wall_gap", True, 18),
    ("03_enclosed_target", False, None),
])
def test_bundled_maps(name, found, length):
    ed = load_map(MAP_DIR / f"{name}.json")
    grid, s, t = ed.snapshot()
    res = search(grid, s, t)
    assert res.found is found
    if found:
        assert len(res.path) == length
