"""Draw helpers mapping editor state onto a pygame surface through the view."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

try:
    import pygame
except ImportError as exc:  # pragma: no cover - pygame should be installed by demos
    raise ImportError("pygame is required for the visualization renderer") from exc

from coverage_editor.algs.geometry import PointLike, Waypoint
from coverage_editor.view import ViewTransform

Color = Tuple[int, int, int]

BACKGROUND_COLOR = (248, 249, 250)
GRID_COLOR = (226, 232, 236)
BOUNDARY_COLOR = (39, 174, 96)
OBSTACLE_COLOR = (231, 76, 60)
DYNAMIC_OBSTACLE_COLOR = (243, 156, 18)
HIGHLIGHT_COLOR = (142, 68, 173)
PLANNED_PATH_COLOR = (52, 152, 219)
ROBOT_COLOR = (44, 62, 80)
HUD_TEXT_COLOR = (44, 62, 80)
LABEL_TEXT_COLOR = (255, 255, 255)

GRID_SIZE = 50.0
VERTEX_RADIUS = 4
ROBOT_RADIUS = 8
ARROW_LENGTH = 10.0
ARROW_ANGLE = math.pi / 6
ARROW_EVERY = 10
FILL_ALPHA = 32


class BaseScene:
    """World-space drawing primitives; every coordinate passes through ``view``."""

    def __init__(self, width: int, height: int, view: ViewTransform) -> None:
        self.width = width
        self.height = height
        self.view = view
        self.label_font: Optional["pygame.font.Font"] = None

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def _screen(self, point: PointLike) -> Tuple[int, int]:
        sx, sy = self.view.world_to_screen(point)
        return int(round(sx)), int(round(sy))

    # ------------------------------------------------------------------ layers
    def draw_background(self, surface: "pygame.Surface") -> None:
        surface.fill(BACKGROUND_COLOR)

    def draw_grid(self, surface: "pygame.Surface", spacing: float = GRID_SIZE) -> None:
        top_left = self.view.screen_to_world((0, 0))
        bottom_right = self.view.screen_to_world((self.width, self.height))
        start_x = math.floor(top_left.x / spacing) * spacing
        start_y = math.floor(top_left.y / spacing) * spacing
        x = start_x
        while x <= bottom_right.x:
            sx, _ = self._screen((x, 0.0))
            pygame.draw.line(surface, GRID_COLOR, (sx, 0), (sx, self.height), 1)
            x += spacing
        y = start_y
        while y <= bottom_right.y:
            _, sy = self._screen((0.0, y))
            pygame.draw.line(surface, GRID_COLOR, (0, sy), (self.width, sy), 1)
            y += spacing

    def draw_polygon(
        self,
        surface: "pygame.Surface",
        points: Sequence[PointLike],
        color: Color,
        width: int,
        *,
        closed: bool = True,
        numbered: bool = True,
    ) -> None:
        if not points:
            return
        screen_pts = [self._screen(p) for p in points]
        if closed and len(screen_pts) >= 3:
            overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
            pygame.draw.polygon(overlay, (*color, FILL_ALPHA), screen_pts)
            surface.blit(overlay, (0, 0))
            pygame.draw.polygon(surface, color, screen_pts, width)
        elif len(screen_pts) >= 2:
            pygame.draw.lines(surface, color, False, screen_pts, width)

        for idx, (sx, sy) in enumerate(screen_pts):
            pygame.draw.circle(surface, color, (sx, sy), VERTEX_RADIUS)
            if numbered and self.label_font is not None:
                label = self.label_font.render(str(idx + 1), True, LABEL_TEXT_COLOR)
                surface.blit(label, label.get_rect(center=(sx, sy)))

    def draw_preview(
        self,
        surface: "pygame.Surface",
        last: PointLike,
        cursor: PointLike,
        color: Color,
        dash: int = 5,
    ) -> None:
        x1, y1 = self._screen(last)
        x2, y2 = self._screen(cursor)
        length = math.hypot(x2 - x1, y2 - y1)
        if length < 1.0:
            return
        steps = int(length // dash)
        for i in range(0, steps, 2):
            t0 = i * dash / length
            t1 = min(1.0, (i + 1) * dash / length)
            pygame.draw.line(
                surface,
                color,
                (x1 + (x2 - x1) * t0, y1 + (y2 - y1) * t0),
                (x1 + (x2 - x1) * t1, y1 + (y2 - y1) * t1),
                1,
            )

    def draw_path(self, surface: "pygame.Surface", path: Sequence[PointLike], color: Color, width: int) -> None:
        if len(path) < 2:
            return
        screen_pts = [self._screen(p) for p in path]
        pygame.draw.lines(surface, color, False, screen_pts, width)
        for i in range(0, len(path) - 1, ARROW_EVERY):
            self.draw_arrow(surface, path[i], path[i + 1], color)

    def draw_arrow(self, surface: "pygame.Surface", start: PointLike, end: PointLike, color: Color) -> None:
        x1, y1 = self._screen(start)
        x2, y2 = self._screen(end)
        angle = math.atan2(y2 - y1, x2 - x1)
        mid_x, mid_y = (x1 + x2) / 2.0, (y1 + y2) / 2.0
        for side in (-ARROW_ANGLE, ARROW_ANGLE):
            tip = (
                mid_x - ARROW_LENGTH * math.cos(angle + side),
                mid_y - ARROW_LENGTH * math.sin(angle + side),
            )
            pygame.draw.line(surface, color, (mid_x, mid_y), tip, 2)

    def draw_robot(self, surface: "pygame.Surface", position: Optional[Waypoint]) -> None:
        if position is None:
            return
        sx, sy = self._screen(position)
        pygame.draw.circle(surface, ROBOT_COLOR, (sx, sy), ROBOT_RADIUS)
        tip = (
            sx + (ROBOT_RADIUS - 2) * math.cos(position.heading),
            sy + (ROBOT_RADIUS - 2) * math.sin(position.heading),
        )
        pygame.draw.line(surface, (255, 255, 255), (sx, sy), tip, 2)
        pygame.draw.circle(surface, ROBOT_COLOR, (sx, sy), ROBOT_RADIUS + 3, 1)

    def draw_text_lines(
        self,
        surface: "pygame.Surface",
        font: "pygame.font.Font",
        lines: Iterable[str],
        origin: Tuple[int, int] = (10, 10),
    ) -> None:
        x, y = origin
        for line in lines:
            text_surface = font.render(line, True, HUD_TEXT_COLOR)
            surface.blit(text_surface, (x, y))
            y += text_surface.get_height() + 2


__all__ = [
    "BaseScene",
    "BACKGROUND_COLOR",
    "GRID_COLOR",
    "BOUNDARY_COLOR",
    "OBSTACLE_COLOR",
    "DYNAMIC_OBSTACLE_COLOR",
    "HIGHLIGHT_COLOR",
    "PLANNED_PATH_COLOR",
    "ROBOT_COLOR",
]
