"""Committed boundary, planned path and the statistics derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from coverage_editor.algs.geometry import (
    Point,
    PointLike,
    Waypoint,
    as_polygon,
    polygon_area,
    polyline_length,
    union_area_approximate,
)
from coverage_editor.common.config import EditorConfig
from coverage_editor.obstacles import MIN_POLYGON_POINTS, Obstacle
from coverage_editor.planning.stripes import PathGenerator, make_stripe_generator
from coverage_editor.utils import log


def format_duration(total_seconds: float) -> str:
    """``m:ss`` with seconds rounded to the nearest whole second."""
    seconds = int(round(max(0.0, total_seconds)))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True, slots=True)
class PathStats:
    """
    Derived numbers in world units; ``*_m``/``*_m2`` properties convert for
    display using ``units_per_meter``.
    """

    path_length: float = 0.0
    coverage_area: float = 0.0
    obstacles_area: float = 0.0
    useful_area: float = 0.0
    efficiency: float = 0.0
    estimated_seconds: float = 0.0
    units_per_meter: float = 50.0

    @property
    def path_length_m(self) -> float:
        return self.path_length / self.units_per_meter

    @property
    def coverage_area_m2(self) -> float:
        return self.coverage_area / self.units_per_meter ** 2

    @property
    def obstacles_area_m2(self) -> float:
        return self.obstacles_area / self.units_per_meter ** 2

    @property
    def useful_area_m2(self) -> float:
        return self.useful_area / self.units_per_meter ** 2

    @property
    def estimated_time(self) -> str:
        return format_duration(self.estimated_seconds)

    def summary_lines(self) -> List[str]:
        return [
            f"Path: {self.path_length_m:.1f} m",
            f"Area: {self.coverage_area_m2:.1f} m2",
            f"Useful: {self.useful_area_m2:.1f} m2",
            f"Efficiency: {self.efficiency:.2f}",
            f"ETA: {self.estimated_time}",
        ]


def compute_stats(
    boundary: Sequence[PointLike],
    obstacle_polygons: Sequence[Sequence[PointLike]],
    path: Sequence[PointLike],
    config: EditorConfig,
) -> PathStats:
    upm = config.units_per_meter
    if len(boundary) < MIN_POLYGON_POINTS:
        return PathStats(units_per_meter=upm)

    coverage = polygon_area(boundary)
    obstacles = union_area_approximate(obstacle_polygons, cell_size=config.union_cell_size)
    useful = max(0.0, coverage - obstacles)

    length = polyline_length(path) if len(path) >= 2 else 0.0
    # Area a path of this length sweeps at one stripe width; the ratio is a
    # display figure, not a coverage guarantee.
    swept = length * config.stripe_spacing
    efficiency = coverage / swept if length > 0.0 else 0.0
    seconds = (length / upm) / config.average_speed_mps

    return PathStats(
        path_length=length,
        coverage_area=coverage,
        obstacles_area=obstacles,
        useful_area=useful,
        efficiency=efficiency,
        estimated_seconds=seconds,
        units_per_meter=upm,
    )


class PathModel:
    """
    Owns the committed boundary, the obstacle snapshot last handed to the
    generator, and the resulting path. Statistics are recomputed whenever any
    of boundary, obstacles or path change.
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        generator: Optional[PathGenerator] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.generator: PathGenerator = generator or make_stripe_generator(
            spacing=self.config.stripe_spacing,
            margin=self.config.stripe_margin,
        )
        self._boundary: Tuple[Point, ...] = ()
        self._obstacle_polygons: Tuple[Tuple[Point, ...], ...] = ()
        self._planning_snapshot: Tuple[Obstacle, ...] = ()
        self._path: Tuple[Waypoint, ...] = ()
        self._stats = PathStats(units_per_meter=self.config.units_per_meter)

    # ------------------------------------------------------------------ accessors
    @property
    def boundary(self) -> Tuple[Point, ...]:
        return self._boundary

    @property
    def has_boundary(self) -> bool:
        return len(self._boundary) >= MIN_POLYGON_POINTS

    @property
    def path(self) -> Tuple[Waypoint, ...]:
        return self._path

    @property
    def has_path(self) -> bool:
        return bool(self._path)

    @property
    def planning_snapshot(self) -> Tuple[Obstacle, ...]:
        return self._planning_snapshot

    @property
    def stats(self) -> PathStats:
        return self._stats

    # ------------------------------------------------------------------ mutations
    def set_boundary(self, points: Sequence[PointLike]) -> bool:
        polygon = as_polygon(points)
        if len(polygon) < MIN_POLYGON_POINTS:
            return False
        self._boundary = polygon
        self._recompute()
        return True

    def clear_boundary(self) -> None:
        self._boundary = ()
        self._recompute()

    def update_obstacles(self, polygons: Sequence[Sequence[PointLike]]) -> None:
        self._obstacle_polygons = tuple(as_polygon(p) for p in polygons)
        self._recompute()

    def set_path(self, path: Sequence[Waypoint]) -> None:
        self._path = tuple(
            Waypoint(float(w[0]), float(w[1]), float(w[2]) if len(w) > 2 else 0.0) for w in path
        )
        self._recompute()

    def clear_path(self) -> None:
        self._path = ()
        self._recompute()

    def plan(self, obstacles: Sequence[Obstacle]) -> Tuple[Waypoint, ...]:
        """Run the generator on the committed boundary; empty when there is none."""
        if not self.has_boundary:
            self._path = ()
            self._recompute()
            return self._path
        self._planning_snapshot = tuple(obstacles)
        path = self.generator(self._boundary, self._planning_snapshot)
        self.set_path(path or [])
        log(f"[PathModel] planned {len(self._path)} waypoints around {len(obstacles)} obstacles")
        return self._path

    def clear(self) -> None:
        self._boundary = ()
        self._obstacle_polygons = ()
        self._planning_snapshot = ()
        self._path = ()
        self._recompute()

    # ------------------------------------------------------------------ internals
    def _recompute(self) -> None:
        self._stats = compute_stats(self._boundary, self._obstacle_polygons, self._path, self.config)


__all__ = ["PathStats", "PathModel", "compute_stats", "format_duration"]
