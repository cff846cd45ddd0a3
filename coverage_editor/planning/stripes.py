"""
Back-and-forth stripe pattern over the boundary's bounding box.

This is a stand-in planner: it ignores obstacles and the exact boundary shape
and only guarantees the ``PathGenerator`` contract, i.e. an ordered list of
waypoints, empty when no pattern fits.
"""

from __future__ import annotations

from typing import Callable, List, Sequence

from coverage_editor.algs.geometry import PointLike, Waypoint, bounding_box, with_headings
from coverage_editor.common.constants import STRIPE_MARGIN, STRIPE_SPACING
from coverage_editor.obstacles import MIN_POLYGON_POINTS, Obstacle

PathGenerator = Callable[[Sequence[PointLike], Sequence[Obstacle]], List[Waypoint]]


def generate_stripe_path(
    boundary: Sequence[PointLike],
    obstacles: Sequence[Obstacle] = (),
    *,
    spacing: float = STRIPE_SPACING,
    margin: float = STRIPE_MARGIN,
) -> List[Waypoint]:
    if spacing <= 0.0:
        raise ValueError("spacing must be positive")
    if len(boundary) < MIN_POLYGON_POINTS:
        return []
    bbox = bounding_box([boundary])
    if bbox is None:
        return []
    min_x, min_y, max_x, max_y = bbox
    min_x += margin
    max_x -= margin
    min_y += margin
    max_y -= margin
    if min_x > max_x or min_y > max_y:
        return []

    points: List[tuple] = []
    y = min_y
    going_right = True
    while y <= max_y:
        if going_right:
            points.append((min_x, y))
            points.append((max_x, y))
        else:
            points.append((max_x, y))
            points.append((min_x, y))
        y += spacing
        going_right = not going_right
    return with_headings(points)


def make_stripe_generator(spacing: float = STRIPE_SPACING, margin: float = STRIPE_MARGIN) -> PathGenerator:
    def _generate(boundary: Sequence[PointLike], obstacles: Sequence[Obstacle]) -> List[Waypoint]:
        return generate_stripe_path(boundary, obstacles, spacing=spacing, margin=margin)

    return _generate


__all__ = ["PathGenerator", "generate_stripe_path", "make_stripe_generator"]
