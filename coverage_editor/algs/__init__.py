"""Geometry primitives used by the editor and planner."""

from .geometry import (
    EPS,
    UNION_CELL_SIZE,
    Point,
    Waypoint,
    as_point,
    as_polygon,
    bounding_box,
    heading_between,
    point_in_polygon,
    polygon_area,
    polygon_signed_area,
    polyline_length,
    union_area_approximate,
    with_headings,
)

__all__ = [
    "EPS",
    "UNION_CELL_SIZE",
    "Point",
    "Waypoint",
    "as_point",
    "as_polygon",
    "bounding_box",
    "heading_between",
    "point_in_polygon",
    "polygon_area",
    "polygon_signed_area",
    "polyline_length",
    "union_area_approximate",
    "with_headings",
]
