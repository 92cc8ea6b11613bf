# gridpath/app/viewer.py
#!/usr/bin/env python3
"""
Grid A* Visualizer: editor + paced search animation

- Mouse:
    left click on grid -> apply current tool (source / target / obstacle)
- Keyboard:
    [S]/[T]/[O]  -> tool: source / target / obstacles
    [G]          -> random obstacles
    [SPACE]      -> simulate / stop
    [C]          -> clear path
    [+]/[-]      -> step delay
    [Q]/[ESC]    -> quit

Config:
- ENV: GRIDPATH_WIDTH, GRIDPATH_HEIGHT, GRIDPATH_STEP_MS, GRIDPATH_MAP, GRIDPATH_SEED
- CLI: --width= --height= --step-ms= --map= --seed=
"""

# --- bootstrap import path so `from gridpath...` works when run as a script ---
import sys, time
from pathlib import Path
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
# -------------------------------------------------------------------------

import logging
from typing import Tuple, Optional, Dict
import numpy as np
import pygame

from gridpath.core.types import Cell, InvalidInput
from gridpath.core.astar import AStarSearch
from gridpath.app.editor import EditorState, Mode
from gridpath.app.overlay import TraceOverlay, CURRENT, VISITED, PATH
from gridpath.app.config import Settings, resolve_settings, load_map, CELL_SIZE_DEFAULT

logger = logging.getLogger(__name__)

# ---------- Layout ----------
PANEL_W = 320            # right band: metrics + buttons
GRID_MARGIN = 16
FONT_NAME = None  # default pygame font

# Colors
WHITE       = (255,255,255)
BLACK       = (  0,  0,  0)
BLUE        = ( 70,130,180)
RED         = (220, 50, 47)
FREE_GRAY   = (235,235,235)
NEON_CYAN   = (0,150,255)
NEON_MAG    = (255,0,120)
NEON_MINT   = (0,255,200)

CLASS_COLORS = {
    CURRENT: NEON_CYAN,
    VISITED: NEON_MAG,
    PATH:    NEON_MINT,
}

BACKDROP    = (28, 31, 38)
CARD_BG     = (20, 23, 30)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)


# ---------- Buttons ----------
BTN_IDLE     = (36, 40, 48)
BTN_HOVER    = (46, 50, 60)
BTN_ACTIVE   = (58, 86, 160)
BTN_TEXT     = (235, 238, 242)
BTN_DISABLED = (120, 124, 130)


class UIButton:
    """Flat panel button; `active` highlights the selected tool, `enabled` gates clicks."""

    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.togglable = togglable
        self.hover = False
        self.active = False
        self.enabled = True

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        if self.togglable and self.active:
            bg = BTN_ACTIVE
        elif self.hover and self.enabled:
            bg = BTN_HOVER
        else:
            bg = BTN_IDLE
        pygame.draw.rect(screen, bg, self.rect, border_radius=8)
        text = font.render(self.label, True, BTN_TEXT if self.enabled else BTN_DISABLED)
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event) -> bool:
        """True when the click landed on this button (consumed even if disabled)."""
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.rect.collidepoint(event.pos):
            if self.enabled:
                self.callback()
            return True
        return False


# ---------- Viewer ----------
class Viewer:
    def __init__(self, editor: EditorState, settings: Settings):
        pygame.init()

        self.editor = editor
        self.settings = settings
        self.rng = np.random.default_rng(settings.seed)
        self.cell_size = self._auto_cell_size()
        self.font_small = pygame.font.Font(FONT_NAME, 14)
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        grid_px_w = GRID_MARGIN*2 + editor.width * self.cell_size
        grid_px_h = GRID_MARGIN*2 + editor.height * self.cell_size
        win_w = grid_px_w + PANEL_W
        win_h = max(grid_px_h, 560)

        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption("Grid A* Visualizer")

        self._buttons: list[UIButton] = []
        self._layout(win_w, win_h)

        self.overlay = TraceOverlay()
        self.search: Optional[AStarSearch] = None
        self.step_ms = settings.step_ms
        self.status = "Idle"
        self.clock = pygame.time.Clock()
        self._last_step_t = 0.0
        self._last_metrics: Dict[str, object] = {}

    # ---------- layout ----------
    def _auto_cell_size(self) -> int:
        target_h = 720 - GRID_MARGIN*2
        return max(8, min(CELL_SIZE_DEFAULT, target_h // self.editor.height))

    def _layout(self, win_w: int, win_h: int):
        """Fit the grid to the window left of the panel; the panel takes the rest."""
        ed = self.editor
        fit = min((win_w - PANEL_W - 2 * GRID_MARGIN) // ed.width,
                  (win_h - 2 * GRID_MARGIN) // ed.height)
        self.cell_size = max(4, fit)
        grid_h = ed.height * self.cell_size
        self._grid_origin = (GRID_MARGIN, max(GRID_MARGIN, (win_h - grid_h) // 2))
        panel_x = 2 * GRID_MARGIN + ed.width * self.cell_size
        self._right_band = pygame.Rect(panel_x, 0, max(PANEL_W, win_w - panel_x), win_h)
        self._build_buttons()

    def cell_at_pixel(self, pos: Tuple[int, int]) -> Optional[Cell]:
        ox, oy = self._grid_origin
        col = (pos[0] - ox) // self.cell_size
        row = (pos[1] - oy) // self.cell_size
        if 0 <= row < self.editor.height and 0 <= col < self.editor.width:
            return row * self.editor.width + col
        return None

    # ---------- main loop ----------
    def run(self):
        while True:
            self._handle_events()
            if self.search is not None:
                self._tick_algorithm()
            self._draw()
            self.clock.tick(60)

    def _tick_algorithm(self):
        t0 = time.time()
        if (t0 - self._last_step_t) * 1000.0 >= self.step_ms:
            self._last_step_t = t0
            self._do_step()

    def _do_step(self):
        res = self.search.step()
        if res.event is not None:
            self.overlay.apply(res.event)
        if res.metrics:
            self._last_metrics = res.metrics
        if res.status == "done":
            self.overlay.show_path(res.path)
            self._finish("Path found")
        elif res.status == "no_path":
            self._finish("No path")

    def _finish(self, status: str):
        self.search = None
        self.status = status
        self.editor.end_simulation()
        self._refresh_active_states()

    # ---------- actions ----------
    def _toggle_simulation(self):
        if self.editor.simulating:
            # abandon: the search state is dropped, no partial path shown
            logger.info("Simulation stopped after %s steps", self._last_metrics.get("popped", 0))
            self._finish("Stopped")
            return
        if not self.editor.can_simulate:
            return
        self.overlay.clear()
        try:
            grid, source, target = self.editor.begin_simulation()
            self.search = AStarSearch(grid, source, target)
        except InvalidInput as ex:
            logger.error("Cannot start simulation: %s", ex)
            self.editor.end_simulation()
            return
        self.status = "Simulating"
        self._last_step_t = 0.0
        self._refresh_active_states()

    def _set_mode(self, mode: Mode):
        self.editor.set_mode(mode)
        self._refresh_active_states()

    def _randomize(self):
        self.editor.randomize(self.rng)
        self._refresh_active_states()

    def _clear_path(self):
        if not self.editor.simulating:
            self.overlay.clear()
            self.status = "Idle"

    def _bump_delay(self, dv: int):
        self.step_ms = int(max(0, min(1000, self.step_ms + dv)))

    # ---------- events ----------
    def _apply_resize(self, req_w: int, req_h: int):
        new_w = max(PANEL_W + 200, req_w)
        new_h = max(300, req_h)
        self.screen = pygame.display.set_mode((new_w, new_h), pygame.RESIZABLE)
        self._layout(new_w, new_h)

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_simulation()
                elif e.key == pygame.K_s:
                    self._set_mode(Mode.SOURCE)
                elif e.key == pygame.K_t:
                    self._set_mode(Mode.TARGET)
                elif e.key == pygame.K_o:
                    self._set_mode(Mode.OBSTACLES)
                elif e.key == pygame.K_g:
                    self._randomize()
                elif e.key == pygame.K_c:
                    self._clear_path()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._bump_delay(+10)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE):
                    self._bump_delay(-10)
            elif e.type == pygame.VIDEORESIZE:
                self._apply_resize(e.w, e.h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                hit = False
                for b in self._buttons:
                    hit = b.handle_mouse(e) or hit
                if not hit and e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    c = self.cell_at_pixel(e.pos)
                    if c is not None:
                        self.editor.click(c)

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        self.screen.fill(BACKDROP)

    def _draw_grid(self):
        cs = self.cell_size
        ox, oy = self._grid_origin
        ed = self.editor

        for row in range(ed.height):
            for col in range(ed.width):
                c = row * ed.width + col
                rect = pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)
                if c == ed.source:
                    color = BLUE
                elif c == ed.target:
                    color = RED
                elif c in ed.obstacles:
                    color = BLACK
                else:
                    color = CLASS_COLORS.get(self.overlay.state_of(c), FREE_GRAY)
                pygame.draw.rect(self.screen, color, rect)
                pygame.draw.rect(self.screen, BLACK, rect, 1)

        for cell, label in ((ed.source, "S"), (ed.target, "T")):
            if cell is None or cs < 12:
                continue
            row, col = divmod(cell, ed.width)
            txt = self.font_small.render(label, True, WHITE)
            self.screen.blit(txt, txt.get_rect(center=(ox + col*cs + cs//2, oy + row*cs + cs//2)))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 230  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 38
        gap = 10

        def add(label, cb, *, togglable=False, store_as: str | None = None):
            rect = pygame.Rect(x, y, w, h)
            btn = UIButton(label, rect, cb, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)

        add("Choose Source",    lambda: self._set_mode(Mode.SOURCE),    togglable=True, store_as="btn_source"); y += h + gap
        add("Choose Target",    lambda: self._set_mode(Mode.TARGET),    togglable=True, store_as="btn_target"); y += h + gap
        add("Choose Obstacles", lambda: self._set_mode(Mode.OBSTACLES), togglable=True, store_as="btn_obstacles"); y += h + gap
        add("Random Obstacles", self._randomize, store_as="btn_random"); y += h + gap
        add("Simulate",         self._toggle_simulation, togglable=True, store_as="btn_run"); y += h + gap
        add("Clear Path",       self._clear_path, store_as="btn_clear")

        self._refresh_active_states()

    def _refresh_active_states(self):
        if not hasattr(self, "btn_run"):
            return
        mode = self.editor.mode
        sim = self.editor.simulating
        self.btn_source.active = mode is Mode.SOURCE
        self.btn_target.active = mode is Mode.TARGET
        self.btn_obstacles.active = mode is Mode.OBSTACLES
        for b in (self.btn_source, self.btn_target, self.btn_obstacles, self.btn_random, self.btn_clear):
            b.enabled = not sim
        self.btn_run.label = "Stop" if sim else "Simulate"
        self.btn_run.active = sim
        self.btn_run.enabled = sim or self.editor.can_simulate

    def _draw_metrics_and_buttons(self):
        rb = self._right_band
        self._refresh_active_states()

        card = pygame.Rect(rb.x + 10, rb.y + 10, rb.width - 20, 210)
        pygame.draw.rect(self.screen, CARD_BG, card, border_radius=12)

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        line(self.editor.prompt, big=True, color=ACCENT_GOLD)
        m = self._last_metrics
        line(f"Status: {self.status}")
        line(f"Popped: {m.get('popped', 0)}")
        line(f"Open: {m.get('open_size', 0)}")
        line(f"Settled: {m.get('settled', 0)}")
        line(f"Path Len: {m.get('path_len', 0)}")
        line(f"Obstacles: {len(self.editor.obstacles)}")
        line(f"Delay: {self.step_ms} ms/step")

        for b in self._buttons:
            b.draw(self.screen, self.font)


# ---------- main ----------
def main():
    logging.basicConfig(level=logging.INFO)
    try:
        settings = resolve_settings()
    except InvalidInput as ex:
        logger.error("Bad configuration: %s", ex)
        sys.exit(2)

    editor = EditorState(settings.width, settings.height)
    if settings.map_path is not None:
        try:
            editor = load_map(settings.map_path)
            logger.info("Loaded map %s (%dx%d)", settings.map_path, editor.width, editor.height)
        except (OSError, InvalidInput) as ex:
            logger.error("Failed to load map %s: %s", settings.map_path, ex)
    Viewer(editor, settings).run()

if __name__ == "__main__":
    main()
