import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
pygame = pytest.importorskip("pygame")

from gridpath.app.config import Settings
from gridpath.app.editor import EditorState, Mode
from gridpath.app.overlay import PATH, VISITED
from gridpath.app.viewer import Viewer


@pytest.fixture
def viewer():
    ed = EditorState(5, 4, source=0, target=19)
    v = Viewer(ed, Settings(width=5, height=4, step_ms=0, seed=1))
    yield v
    pygame.quit()


def test_pixel_to_cell(viewer):
    ox, oy = viewer._grid_origin
    cs = viewer.cell_size
    assert viewer.cell_at_pixel((ox + 1, oy + 1)) == 0
    assert viewer.cell_at_pixel((ox + 2 * cs + 1, oy + cs + 1)) == 7
    assert viewer.cell_at_pixel((ox - 1, oy)) is None


def test_simulation_runs_to_path(viewer):
    viewer._toggle_simulation()
    assert viewer.editor.mode is Mode.SIMULATING
    for _ in range(200):
        if viewer.search is None:
            break
        viewer._do_step()
        viewer._draw()
    assert viewer.status == "Path found"
    assert viewer.editor.mode is Mode.SOURCE
    assert len(viewer.overlay.cells(PATH)) == 6
    assert viewer._last_metrics["path_len"] == 8


def test_stop_abandons_search(viewer):
    viewer._toggle_simulation()
    viewer._do_step()
    viewer._toggle_simulation()
    assert viewer.search is None
    assert viewer.status == "Stopped"
    assert viewer.overlay.cells(PATH) == []

    viewer._clear_path()
    assert viewer.overlay.cells(VISITED) == []


def test_disabled_button_swallows_click(viewer):
    viewer._toggle_simulation()
    btn = viewer.btn_random
    assert not btn.enabled
    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=btn.rect.center)
    assert btn.handle_mouse(click)
    assert viewer.editor.obstacles == set()
    viewer._draw()
