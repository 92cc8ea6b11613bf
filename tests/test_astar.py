from collections import deque

import numpy as np
import pytest

from gridpath.core.types import Grid, InvalidInput, Expanded, Settled, Found, NotFound
from gridpath.core.astar import AStarSearch, iter_search, search, manhattan


def bfs_distances(grid, source):
    dist = {source: 0}
    dq = deque([source])
    while dq:
        c = dq.popleft()
        for n in grid.neighbors(c):
            if n not in dist:
                dist[n] = dist[c] + 1
                dq.append(n)
    return dist


def random_grid(rng, width, height, density=0.3):
    mask = rng.random(width * height) < density
    cells = [int(i) for i in np.flatnonzero(mask)]
    source = int(rng.integers(0, width * height))
    target = int(rng.integers(0, width * height))
    return Grid.build(width, height, cells, source, target), source, target


def assert_valid_path(grid, path, source, target):
    assert path[0] == source
    assert path[-1] == target
    for c in path:
        assert not grid.is_blocked(c)
    for a, b in zip(path[:-1], path[1:]):
        assert manhattan(grid, a, b) == 1


def test_source_equals_target():
    grid = Grid.build(5, 4, [1, 2, 3])
    res = search(grid, 7, 7)
    assert isinstance(res, Found)
    assert res.path == (7,)
    assert res.trace == ()


def test_open_3x3_lowest_id_tie_break():
    grid = Grid.build(3, 3)
    res = search(grid, 0, 8)
    assert res.found
    assert list(res.path) == [0, 1, 2, 5, 8]
    expected = []
    for c in (1, 2, 3, 4, 5, 6, 7):
        expected += [Expanded(c), Settled(c)]
    expected.append(Expanded(8))
    assert list(res.trace) == expected


def test_source_walled_in_3x3():
    grid = Grid.build(3, 3, {1, 3})
    res = search(grid, 0, 8)
    assert isinstance(res, NotFound)
    assert not res.found
    assert res.trace == ()


def test_target_expanded_but_never_settled():
    grid = Grid.build(4, 1)
    res = search(grid, 0, 3)
    assert list(res.path) == [0, 1, 2, 3]
    assert Expanded(3) in res.trace
    assert Settled(3) not in res.trace
    assert Expanded(0) not in res.trace
    assert Settled(0) not in res.trace


def test_detour_around_wall():
    # 5x5, wall on column 2 except the bottom row
    wall = [0 * 5 + 2, 1 * 5 + 2, 2 * 5 + 2, 3 * 5 + 2]
    grid = Grid.build(5, 5, wall)
    res = search(grid, 0, 4)
    assert res.found
    assert len(res.path) == 13
    assert_valid_path(grid, res.path, 0, 4)


def test_matches_bfs_oracle_on_random_grids():
    rng = np.random.default_rng(7)
    for _ in range(60):
        w, h = int(rng.integers(1, 12)), int(rng.integers(1, 12))
        grid, s, t = random_grid(rng, w, h)
        dist = bfs_distances(grid, s)
        res = search(grid, s, t)
        if t in dist:
            assert isinstance(res, Found)
            assert len(res.path) == dist[t] + 1
            assert_valid_path(grid, res.path, s, t)
        else:
            assert isinstance(res, NotFound)


def test_enclosed_target_settles_every_reachable_cell_once():
    # 6x5 grid, target at (2,4) boxed in
    grid = Grid.build(6, 5)
    target = grid.cell_at(2, 4)
    box = [grid.cell_at(1, 4), grid.cell_at(3, 4), grid.cell_at(2, 3), grid.cell_at(2, 5)]
    grid = Grid.build(6, 5, box, 0, target)
    res = search(grid, 0, target)
    assert isinstance(res, NotFound)

    settled = [e.cell for e in res.trace if isinstance(e, Settled)]
    expanded = [e.cell for e in res.trace if isinstance(e, Expanded)]
    reachable = set(bfs_distances(grid, 0)) - {0}
    assert len(settled) == len(set(settled))
    assert set(settled) == reachable
    assert set(expanded) == reachable
    assert target not in {e.cell for e in res.trace}


def test_search_is_deterministic():
    rng = np.random.default_rng(11)
    grid, s, t = random_grid(rng, 15, 10, density=0.25)
    a = search(grid, s, t)
    b = search(grid, s, t)
    assert a == b


def test_every_expanded_cell_is_settled_right_after():
    grid = Grid.build(8, 6, [10, 11, 12, 20, 28])
    res = search(grid, 0, 47)
    trace = list(res.trace)
    for i, ev in enumerate(trace[:-1]):
        if isinstance(ev, Expanded):
            assert trace[i + 1] == Settled(ev.cell)


@pytest.mark.parametrize("source,target", [(-1, 3), (0, 12), (12, 0), (3, 3.0)])
def test_out_of_range_endpoints_rejected(source, target):
    grid = Grid.build(4, 3)
    with pytest.raises(InvalidInput):
        search(grid, source, target)


def test_endpoint_on_obstacle_rejected():
    grid = Grid(4, 3, frozenset({5}))
    with pytest.raises(InvalidInput):
        search(grid, 5, 0)
    with pytest.raises(InvalidInput):
        search(grid, 0, 5)


def test_non_positive_dimensions_rejected():
    with pytest.raises(InvalidInput):
        search(Grid(0, 3), 0, 0)


def test_iter_search_validates_before_first_step():
    grid = Grid.build(3, 3)
    with pytest.raises(InvalidInput):
        iter_search(grid, 0, 99)


def test_iter_search_is_lazy_and_returns_outcome():
    grid = Grid.build(3, 3)
    stream = iter_search(grid, 0, 8)
    assert next(stream) == Expanded(1)

    def drive():
        return (yield from iter_search(grid, 0, 8))

    gen = drive()
    events = []
    while True:
        try:
            events.append(next(gen))
        except StopIteration as stop:
            outcome = stop.value
            break
    assert outcome.path == (0, 1, 2, 5, 8)
    assert len(events) == 15


def test_abandoned_search_exposes_no_path():
    grid = Grid.build(5, 5)
    algo = AStarSearch(grid, 0, 24)
    stream = algo.events()
    next(stream)
    next(stream)
    stream.close()
    assert algo.outcome is None


def test_events_cannot_restart():
    algo = AStarSearch(Grid.build(3, 3), 0, 8)
    list(algo.events())
    with pytest.raises(RuntimeError):
        algo.events()


def test_step_api_runs_to_done():
    algo = AStarSearch(Grid.build(3, 3), 0, 8)
    statuses = []
    for _ in range(30):
        res = algo.step()
        statuses.append(res.status)
        if res.status != "running":
            break
    assert statuses[-1] == "done"
    assert statuses.count("running") == 15
    assert res.path == [0, 1, 2, 5, 8]
    assert res.metrics["path_len"] == 5
    # terminal status is sticky
    assert algo.step().status == "done"


def test_step_api_no_path():
    algo = AStarSearch(Grid.build(3, 3, {1, 3}), 0, 8)
    res = algo.step()
    assert res.status == "no_path"
    assert res.event is None
    assert algo.step().status == "no_path"


def test_caller_set_edits_do_not_reach_running_search():
    blocked = set()
    grid = Grid(3, 3, blocked)
    stream = iter_search(grid, 0, 8)
    next(stream)
    blocked.update({5, 7})
    events = list(stream)
    assert Expanded(8) in events


def test_numpy_integer_endpoints_accepted():
    res = search(Grid.build(3, 3), np.int64(0), np.int64(8))
    assert res.path == (0, 1, 2, 5, 8)
    assert all(type(c) is int for c in res.path)


@pytest.mark.parametrize("source,target", [(True, 3), (0, False)])
def test_bool_endpoints_rejected(source, target):
    with pytest.raises(InvalidInput):
        search(Grid.build(4, 3), source, target)
