"""Pygame window that maps mouse/keyboard input onto editor commands."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

try:
    import pygame
except ImportError as exc:  # pragma: no cover - ensure pygame is available
    raise ImportError("pygame is required for the visualization renderer") from exc

from coverage_editor.drawing import Mode
from coverage_editor.editor import Editor
from coverage_editor.obstacles import ObstacleKind
from coverage_editor.visualization.render.base_scene import (
    BOUNDARY_COLOR,
    DYNAMIC_OBSTACLE_COLOR,
    HIGHLIGHT_COLOR,
    OBSTACLE_COLOR,
    PLANNED_PATH_COLOR,
    BaseScene,
)

_MODE_COLORS = {
    Mode.BOUNDARY: BOUNDARY_COLOR,
    Mode.OBSTACLE: OBSTACLE_COLOR,
    Mode.DYNAMIC_OBSTACLE: DYNAMIC_OBSTACLE_COLOR,
}

_ZOOM_IN_KEYS = {pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS}
_ZOOM_OUT_KEYS = {pygame.K_MINUS, pygame.K_KP_MINUS}
_CTRL_KEYS = {pygame.K_LCTRL, pygame.K_RCTRL}


class PygameRenderer:
    """Interactive front end for an :class:`Editor`."""

    def __init__(self, editor: Optional[Editor] = None, width: int = 1000, height: int = 700, fps: int = 60) -> None:
        self.width = width
        self.height = height
        self.fps = fps
        self.editor = editor or Editor(viewport=(width, height))
        self.editor.set_viewport(width, height)
        pygame.font.init()
        self.font = pygame.font.SysFont("consolas", 16)
        self.small_font = pygame.font.SysFont("consolas", 11)
        self.scene = BaseScene(width, height, self.editor.view)
        self.scene.label_font = self.small_font
        self.clock: Optional["pygame.time.Clock"] = None
        self.screen: Optional["pygame.Surface"] = None
        self.running = False
        self.mouse_pos: Tuple[int, int] = (width // 2, height // 2)
        self.dragging = False
        self.ctrl_down = False
        self.show_help = True

    # ------------------------------------------------------------------ public API
    def run(self) -> None:
        pygame.display.init()
        pygame.display.set_caption("Coverage Path Editor")
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.running = True

        while self.running:
            dt = self.clock.tick(self.fps) / 1000.0
            for py_event in pygame.event.get():
                self.handle_event(py_event)
                if not self.running:
                    break
            self.step(dt)
            self.draw_frame(self.screen)
            pygame.display.flip()

        pygame.display.quit()

    def process_commands(self, events: Iterable["pygame.event.Event"], dt: float = 0.0) -> int:
        """Apply input events and advance time without opening a window (testing helper)."""
        handled = 0
        for py_event in events:
            self.handle_event(py_event)
            handled += 1
        self.step(dt)
        return handled

    def step(self, dt: float) -> int:
        return self.editor.advance(dt)

    # ------------------------------------------------------------------ input
    def handle_event(self, py_event: "pygame.event.Event") -> None:
        if py_event.type == pygame.QUIT:
            self.running = False
        elif py_event.type == pygame.VIDEORESIZE:
            self._resize(py_event.w, py_event.h)
        elif py_event.type == pygame.MOUSEMOTION:
            self._on_motion(py_event)
        elif py_event.type == pygame.MOUSEBUTTONDOWN:
            self._on_button_down(py_event)
        elif py_event.type == pygame.MOUSEBUTTONUP:
            if py_event.button == 1:
                self.dragging = False
        elif py_event.type == pygame.MOUSEWHEEL:
            if py_event.y:
                step = self.editor.config.zoom_step
                self.editor.zoom_at(self.mouse_pos, step if py_event.y > 0 else 1.0 / step)
        elif py_event.type == pygame.KEYDOWN:
            if py_event.key in _CTRL_KEYS:
                self.ctrl_down = True
            self._on_key(py_event)
        elif py_event.type == pygame.KEYUP:
            if py_event.key in _CTRL_KEYS:
                self.ctrl_down = False

    def _on_motion(self, py_event: "pygame.event.Event") -> None:
        self.mouse_pos = tuple(py_event.pos)
        if self.dragging:
            dx, dy = py_event.rel
            self.editor.pan(dx, dy)
        elif self.editor.mode.is_drawing:
            self.editor.hover_at(self.mouse_pos)
        else:
            self.editor.highlight_at(self.mouse_pos)

    def _on_button_down(self, py_event: "pygame.event.Event") -> None:
        self.mouse_pos = tuple(py_event.pos)
        if py_event.button == 1:
            if self._ctrl_held():
                self.dragging = True
            else:
                self.editor.place_point(self.mouse_pos)
        elif py_event.button == 3:
            self.editor.finish_current()

    def _ctrl_held(self) -> bool:
        if self.ctrl_down:
            return True
        return pygame.display.get_init() and bool(pygame.key.get_mods() & pygame.KMOD_CTRL)

    def _on_key(self, py_event: "pygame.event.Event") -> None:
        key = py_event.key
        ctrl = self.ctrl_down or bool(getattr(py_event, "mod", 0) & pygame.KMOD_CTRL)
        editor = self.editor
        if ctrl and key == pygame.K_0:
            editor.reset_view()
        elif ctrl and key == pygame.K_r:
            editor.reset()
        elif key == pygame.K_q:
            self.running = False
        elif key == pygame.K_ESCAPE:
            editor.escape()
        elif key == pygame.K_b:
            editor.toggle_boundary()
        elif key == pygame.K_o:
            editor.toggle_obstacle()
        elif key == pygame.K_d:
            editor.toggle_dynamic_obstacle()
        elif key == pygame.K_p:
            editor.plan()
        elif key == pygame.K_SPACE:
            editor.toggle_playback()
        elif key == pygame.K_s:
            editor.stop()
        elif key == pygame.K_t:
            editor.load_test_data()
        elif key in _ZOOM_IN_KEYS:
            editor.zoom_in()
        elif key in _ZOOM_OUT_KEYS:
            editor.zoom_out()
        elif key == pygame.K_UP:
            editor.set_speed(editor.playback.speed + 1)
        elif key == pygame.K_DOWN:
            editor.set_speed(editor.playback.speed - 1)
        elif key in (pygame.K_DELETE, pygame.K_BACKSPACE):
            editor.remove_highlighted()
        elif key == pygame.K_h:
            self.show_help = not self.show_help

    def _resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        self.editor.set_viewport(width, height)
        self.scene.resize(width, height)
        if self.screen is not None:
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

    # ------------------------------------------------------------------ drawing
    def draw_frame(self, surface: "pygame.Surface") -> None:
        editor = self.editor
        scene = self.scene
        scene.draw_background(surface)
        scene.draw_grid(surface)

        if editor.boundary:
            scene.draw_polygon(surface, editor.boundary, BOUNDARY_COLOR, 3)

        highlighted = editor.registry.highlighted
        for obstacle in editor.obstacles:
            if obstacle.id == highlighted:
                color = HIGHLIGHT_COLOR
            elif obstacle.kind is ObstacleKind.DYNAMIC:
                color = DYNAMIC_OBSTACLE_COLOR
            else:
                color = OBSTACLE_COLOR
            scene.draw_polygon(surface, obstacle.points, color, 2)

        mode = editor.mode
        if mode.is_drawing and editor.in_progress:
            color = _MODE_COLORS[mode]
            scene.draw_polygon(surface, editor.in_progress, color, 2, closed=False)
            if editor.hover is not None:
                scene.draw_preview(surface, editor.in_progress[-1], editor.hover, color)

        scene.draw_path(surface, editor.path, PLANNED_PATH_COLOR, 2)
        scene.draw_robot(surface, editor.robot_position)
        scene.draw_text_lines(surface, self.font, self.hud_lines())

    def hud_lines(self) -> List[str]:
        editor = self.editor
        robot = editor.robot_status()
        lines = [
            f"Mode: {editor.mode.value}",
            editor.status_text,
            f"Zoom: {editor.view.scale * 100:.0f}%  Speed: {editor.playback.speed}",
            f"Robot: {robot.state.label} {robot.progress:.0f}% {robot.speed_mps:.1f} m/s",
        ]
        lines.extend(editor.stats.summary_lines())
        lines.extend(obstacle.label for obstacle in editor.obstacles)
        if self.show_help:
            lines.append("B/O/D draw  P plan  Space run/pause  S stop  Esc finish  Del remove  Ctrl+drag pan")
        return lines


__all__ = ["PygameRenderer"]
