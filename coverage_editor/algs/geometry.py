"""
Pure planar geometry shared by the editor, the statistics model and the
planner: polygon area, point containment and a grid-sampled union area.
"""

from __future__ import annotations

import math
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

EPS: float = 1e-9

# Grid cell edge (world units) for ``union_area_approximate``. Smaller cells
# are more accurate and quadratically slower; the estimate is never exact.
UNION_CELL_SIZE: float = 2.0


class Point(NamedTuple):
    x: float
    y: float


class Waypoint(NamedTuple):
    x: float
    y: float
    heading: float = 0.0


PointLike = Sequence[float]
Polygon = Sequence[PointLike]
BBox = Tuple[float, float, float, float]


def as_point(value: PointLike) -> Point:
    return Point(float(value[0]), float(value[1]))


def as_polygon(points: Iterable[PointLike]) -> Tuple[Point, ...]:
    return tuple(as_point(p) for p in points)


# --------------------------------------------------------------------------- #
#  Area                                                                       #
# --------------------------------------------------------------------------- #
def polygon_signed_area(points: Polygon) -> float:
    """Shoelace sum with wraparound; positive for counter-clockwise order."""
    n = len(points)
    if n < 3:
        return 0.0
    acc = 0.0
    for i in range(n):
        x1, y1 = points[i][0], points[i][1]
        x2, y2 = points[(i + 1) % n][0], points[(i + 1) % n][1]
        acc += x1 * y2 - x2 * y1
    return acc / 2.0


def polygon_area(points: Polygon) -> float:
    return abs(polygon_signed_area(points))


# --------------------------------------------------------------------------- #
#  Containment                                                                #
# --------------------------------------------------------------------------- #
def point_in_polygon(point: PointLike, polygon: Polygon) -> bool:
    """Even-odd ray casting towards +x. Degenerate polygons contain nothing."""
    n = len(polygon)
    if n < 3:
        return False
    px, py = point[0], point[1]
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def _contains_mask(xs: np.ndarray, ys: np.ndarray, polygon: Polygon) -> np.ndarray:
    """Vectorised ``point_in_polygon`` over arrays of sample coordinates."""
    inside = np.zeros(xs.shape, dtype=bool)
    n = len(polygon)
    if n < 3:
        return inside
    j = n - 1
    for i in range(n):
        xi, yi = float(polygon[i][0]), float(polygon[i][1])
        xj, yj = float(polygon[j][0]), float(polygon[j][1])
        if yi != yj:
            crosses = (yi > ys) != (yj > ys)
            x_cross = (xj - xi) * (ys - yi) / (yj - yi) + xi
            inside ^= crosses & (xs < x_cross)
        j = i
    return inside


# --------------------------------------------------------------------------- #
#  Union area                                                                 #
# --------------------------------------------------------------------------- #
def bounding_box(polygons: Iterable[Polygon]) -> Optional[BBox]:
    xs: List[float] = []
    ys: List[float] = []
    for poly in polygons:
        for pt in poly:
            xs.append(float(pt[0]))
            ys.append(float(pt[1]))
    if not xs:
        return None
    return min(xs), min(ys), max(xs), max(ys)


def union_area_approximate(
    polygons: Sequence[Polygon],
    cell_size: float = UNION_CELL_SIZE,
) -> float:
    """
    Approximate the area covered by at least one polygon.

    A single polygon returns its exact shoelace area. For two or more the joint
    bounding box is overlaid with square cells of edge ``cell_size`` and every
    cell whose centre lies inside any polygon counts fully. The error shrinks
    with the cell size and is bounded by the cells straddling polygon edges.
    """
    if cell_size <= 0.0:
        raise ValueError("cell_size must be positive")
    polys = [list(p) for p in polygons]
    if not polys:
        return 0.0
    if len(polys) == 1:
        return polygon_area(polys[0])

    bbox = bounding_box(polys)
    if bbox is None:
        return 0.0
    min_x, min_y, max_x, max_y = bbox
    nx = int(math.ceil((max_x - min_x) / cell_size))
    ny = int(math.ceil((max_y - min_y) / cell_size))
    if nx <= 0 or ny <= 0:
        return 0.0

    centres_x = min_x + (np.arange(nx) + 0.5) * cell_size
    centres_y = min_y + (np.arange(ny) + 0.5) * cell_size
    grid_x, grid_y = np.meshgrid(centres_x, centres_y)

    covered = np.zeros(grid_x.shape, dtype=bool)
    for poly in polys:
        covered |= _contains_mask(grid_x, grid_y, poly)
    return float(np.count_nonzero(covered)) * cell_size * cell_size


# --------------------------------------------------------------------------- #
#  Polylines                                                                  #
# --------------------------------------------------------------------------- #
def heading_between(a: PointLike, b: PointLike) -> float:
    return math.atan2(b[1] - a[1], b[0] - a[0])


def polyline_length(points: Sequence[PointLike]) -> float:
    total = 0.0
    for i in range(len(points) - 1):
        total += math.hypot(points[i + 1][0] - points[i][0], points[i + 1][1] - points[i][1])
    return total


def with_headings(points: Sequence[PointLike]) -> List[Waypoint]:
    """Attach to each point the heading towards its successor; the last repeats."""
    out: List[Waypoint] = []
    heading = 0.0
    for i, pt in enumerate(points):
        if i + 1 < len(points):
            heading = heading_between(pt, points[i + 1])
        out.append(Waypoint(float(pt[0]), float(pt[1]), heading))
    return out


__all__ = [
    "EPS",
    "UNION_CELL_SIZE",
    "Point",
    "Waypoint",
    "Polygon",
    "BBox",
    "as_point",
    "as_polygon",
    "polygon_signed_area",
    "polygon_area",
    "point_in_polygon",
    "bounding_box",
    "union_area_approximate",
    "heading_between",
    "polyline_length",
    "with_headings",
]
