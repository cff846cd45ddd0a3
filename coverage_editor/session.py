"""
Session snapshot export/import.

The snapshot is a flat JSON object with ``boundary``, ``obstacles``,
``dynamicObstacles`` and ``plannedPath`` in world units, plus informational
``timestamp`` and ``metadata``. Import is lenient: a missing or malformed
field becomes an empty collection and the rest of the document still loads.
"""

from __future__ import annotations

import json
import math
import warnings
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from coverage_editor.algs.geometry import Point, Waypoint, with_headings
from coverage_editor.common.constants import SNAPSHOT_VERSION, UNITS_PER_METER
from coverage_editor.obstacles import MIN_POLYGON_POINTS, Obstacle, ObstacleKind
from coverage_editor.utils import log

FIELDS = ("boundary", "obstacles", "dynamicObstacles", "plannedPath")


class SnapshotError(ValueError):
    """The document is not a snapshot object at all."""


@dataclass(frozen=True, slots=True)
class Snapshot:
    boundary: Tuple[Point, ...] = ()
    obstacles: Tuple[Obstacle, ...] = ()
    dynamic_obstacles: Tuple[Obstacle, ...] = ()
    planned_path: Tuple[Waypoint, ...] = ()
    problems: Tuple[str, ...] = field(default=(), compare=False)


# --------------------------------------------------------------------------- #
#  Export                                                                     #
# --------------------------------------------------------------------------- #
def _point_dict(p: Point) -> Dict[str, float]:
    return {"x": float(p.x), "y": float(p.y)}


def _waypoint_dict(w: Waypoint) -> Dict[str, float]:
    return {"x": float(w.x), "y": float(w.y), "heading": float(w.heading)}


def snapshot_to_dict(
    snapshot: Snapshot,
    *,
    units_per_meter: float = UNITS_PER_METER,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    stamp = timestamp or datetime.now(timezone.utc)
    return {
        "timestamp": stamp.isoformat(),
        "boundary": [_point_dict(p) for p in snapshot.boundary],
        "obstacles": [obs.to_dict() for obs in snapshot.obstacles],
        "dynamicObstacles": [obs.to_dict() for obs in snapshot.dynamic_obstacles],
        "plannedPath": [_waypoint_dict(w) for w in snapshot.planned_path],
        "metadata": {
            "unitsPerMeter": float(units_per_meter),
            "version": SNAPSHOT_VERSION,
        },
    }


# --------------------------------------------------------------------------- #
#  Import                                                                     #
# --------------------------------------------------------------------------- #
def _parse_point(raw: Any) -> Optional[Point]:
    if isinstance(raw, Mapping):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = raw[0], raw[1]
    else:
        return None
    try:
        fx, fy = float(x), float(y)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(fx) and math.isfinite(fy)):
        return None
    return Point(fx, fy)


def _parse_points(raw: Any) -> Optional[List[Point]]:
    if not isinstance(raw, (list, tuple)):
        return None
    points: List[Point] = []
    for item in raw:
        pt = _parse_point(item)
        if pt is None:
            return None
        points.append(pt)
    return points


def _parse_obstacles(raw: Any, kind: ObstacleKind, problems: List[str], name: str) -> Tuple[Obstacle, ...]:
    if raw is None:
        problems.append(f"{name}: missing")
        return ()
    if not isinstance(raw, (list, tuple)):
        problems.append(f"{name}: not a list")
        return ()
    out: List[Obstacle] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, Mapping):
            problems.append(f"{name}[{idx}]: not an object")
            continue
        points = _parse_points(item.get("points"))
        if points is None or len(points) < MIN_POLYGON_POINTS:
            problems.append(f"{name}[{idx}]: needs at least {MIN_POLYGON_POINTS} valid points")
            continue
        out.append(Obstacle(id=str(item.get("id") or ""), points=tuple(points), kind=kind))
    return tuple(out)


def _parse_path(raw: Any, problems: List[str]) -> Tuple[Waypoint, ...]:
    if raw is None:
        problems.append("plannedPath: missing")
        return ()
    points = _parse_points(raw)
    if points is None:
        problems.append("plannedPath: invalid waypoint")
        return ()
    headings: List[Optional[float]] = []
    for item in raw:
        value = item.get("heading") if isinstance(item, Mapping) else None
        try:
            heading = float(value) if value is not None else None
        except (TypeError, ValueError):
            heading = None
        headings.append(heading if heading is not None and math.isfinite(heading) else None)
    if any(h is None for h in headings):
        return tuple(with_headings(points))
    return tuple(Waypoint(p.x, p.y, h) for p, h in zip(points, headings))


def snapshot_from_dict(data: Any) -> Snapshot:
    if not isinstance(data, Mapping):
        raise SnapshotError("snapshot must be a JSON object")
    problems: List[str] = []

    boundary: Tuple[Point, ...] = ()
    raw_boundary = data.get("boundary")
    if raw_boundary is None:
        problems.append("boundary: missing")
    else:
        points = _parse_points(raw_boundary)
        if points is None:
            problems.append("boundary: invalid point")
        elif 0 < len(points) < MIN_POLYGON_POINTS:
            problems.append(f"boundary: {len(points)} points is not a polygon")
        else:
            boundary = tuple(points)

    snapshot = Snapshot(
        boundary=boundary,
        obstacles=_parse_obstacles(data.get("obstacles"), ObstacleKind.STATIC, problems, "obstacles"),
        dynamic_obstacles=_parse_obstacles(
            data.get("dynamicObstacles"), ObstacleKind.DYNAMIC, problems, "dynamicObstacles"
        ),
        planned_path=_parse_path(data.get("plannedPath"), problems),
        problems=tuple(problems),
    )
    if problems:
        warnings.warn(
            "snapshot imported with defaults: " + "; ".join(problems),
            UserWarning,
            stacklevel=2,
        )
        log(f"[Session] import fell back on {len(problems)} field(s)")
    return snapshot


# --------------------------------------------------------------------------- #
#  Files                                                                      #
# --------------------------------------------------------------------------- #
def save_snapshot(path: str | Path, snapshot: Snapshot, *, units_per_meter: float = UNITS_PER_METER) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    # serialise first so a bad value never truncates an existing save
    text = json.dumps(snapshot_to_dict(snapshot, units_per_meter=units_per_meter), indent=2, allow_nan=False)
    partial = target.with_name(target.name + ".tmp")
    partial.write_text(text, encoding="utf-8")
    partial.replace(target)
    return target


def load_snapshot(path: str | Path) -> Snapshot:
    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"{source}: not valid JSON ({exc.msg})") from exc
    except UnicodeDecodeError as exc:
        raise SnapshotError(f"{source}: not UTF-8 text ({exc.reason})") from exc
    return snapshot_from_dict(data)


def merge_obstacles(static: Sequence[Obstacle], dynamic: Sequence[Obstacle]) -> List[Obstacle]:
    return list(static) + list(dynamic)


__all__ = [
    "FIELDS",
    "Snapshot",
    "SnapshotError",
    "snapshot_to_dict",
    "snapshot_from_dict",
    "save_snapshot",
    "load_snapshot",
    "merge_obstacles",
]
