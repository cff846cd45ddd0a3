"""Pan/zoom transform between pointer (screen) and world coordinates."""

from __future__ import annotations

from typing import NamedTuple, Tuple

from coverage_editor.algs.geometry import Point, PointLike
from coverage_editor.common.constants import MAX_SCALE, MIN_SCALE, ZOOM_STEP
from coverage_editor.utils import clamp


class ViewState(NamedTuple):
    scale: float
    pan_x: float
    pan_y: float


class ViewTransform:
    """
    ``screen = world * scale + pan``.

    Scale stays within ``[min_scale, max_scale]``. Zooming keeps the world point
    under the focal screen point fixed; panning moves by raw screen pixels.
    """

    def __init__(
        self,
        min_scale: float = MIN_SCALE,
        max_scale: float = MAX_SCALE,
        zoom_step: float = ZOOM_STEP,
    ) -> None:
        if min_scale <= 0.0 or min_scale > max_scale:
            raise ValueError("require 0 < min_scale <= max_scale")
        self.min_scale = float(min_scale)
        self.max_scale = float(max_scale)
        self.zoom_step = float(zoom_step)
        self._scale = clamp(1.0, self.min_scale, self.max_scale)
        self._pan_x = 0.0
        self._pan_y = 0.0

    # ------------------------------------------------------------------ accessors
    @property
    def scale(self) -> float:
        return self._scale

    @property
    def pan_offset(self) -> Tuple[float, float]:
        return self._pan_x, self._pan_y

    @property
    def state(self) -> ViewState:
        return ViewState(self._scale, self._pan_x, self._pan_y)

    # ------------------------------------------------------------------ transforms
    def screen_to_world(self, screen: PointLike) -> Point:
        return Point(
            (float(screen[0]) - self._pan_x) / self._scale,
            (float(screen[1]) - self._pan_y) / self._scale,
        )

    def world_to_screen(self, world: PointLike) -> Point:
        return Point(
            float(world[0]) * self._scale + self._pan_x,
            float(world[1]) * self._scale + self._pan_y,
        )

    # ------------------------------------------------------------------ mutations
    def zoom_at(self, focal: PointLike, factor: float) -> bool:
        """Rescale about ``focal``; returns False when the clamp left scale unchanged."""
        if factor <= 0.0:
            raise ValueError(f"zoom factor must be positive, got {factor}")
        anchor = self.screen_to_world(focal)
        new_scale = clamp(self._scale * factor, self.min_scale, self.max_scale)
        if new_scale == self._scale:
            return False
        self._scale = new_scale
        self._pan_x = float(focal[0]) - anchor.x * new_scale
        self._pan_y = float(focal[1]) - anchor.y * new_scale
        return True

    def zoom_in(self, focal: PointLike) -> bool:
        return self.zoom_at(focal, self.zoom_step)

    def zoom_out(self, focal: PointLike) -> bool:
        return self.zoom_at(focal, 1.0 / self.zoom_step)

    def pan(self, dx: float, dy: float) -> None:
        self._pan_x += float(dx)
        self._pan_y += float(dy)

    def reset(self) -> None:
        self._scale = clamp(1.0, self.min_scale, self.max_scale)
        self._pan_x = 0.0
        self._pan_y = 0.0

    def restore(self, state: ViewState) -> None:
        self._scale = clamp(float(state.scale), self.min_scale, self.max_scale)
        self._pan_x = float(state.pan_x)
        self._pan_y = float(state.pan_y)


__all__ = ["ViewState", "ViewTransform"]
