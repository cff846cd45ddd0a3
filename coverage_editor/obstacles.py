"""Registry of committed static and dynamic obstacle polygons."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from coverage_editor.algs.geometry import Point, PointLike, as_polygon
from coverage_editor.utils import log

MIN_POLYGON_POINTS = 3

_ID_SUFFIX = re.compile(r"_(\d+)$")


class ObstacleKind(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


_ID_PREFIX = {ObstacleKind.STATIC: "obstacle", ObstacleKind.DYNAMIC: "dynamic"}
_LABEL_PREFIX = {ObstacleKind.STATIC: "Obstacle", ObstacleKind.DYNAMIC: "Dynamic"}


@dataclass(frozen=True, slots=True)
class Obstacle:
    id: str
    points: Tuple[Point, ...]
    kind: ObstacleKind

    @property
    def label(self) -> str:
        match = _ID_SUFFIX.search(self.id)
        suffix = match.group(1)[-3:] if match else self.id[-3:]
        return f"{_LABEL_PREFIX[self.kind]} {suffix}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "points": [{"x": p.x, "y": p.y} for p in self.points],
            "type": self.kind.value,
        }


class ObstacleRegistry:
    """
    Owns committed obstacles. Ids come from a monotonically increasing counter
    and are never handed out twice in a session, even after removal.
    """

    def __init__(self) -> None:
        self._static: List[Obstacle] = []
        self._dynamic: List[Obstacle] = []
        self._counter = 0
        self._highlighted: Optional[str] = None

    # ------------------------------------------------------------------ queries
    def __len__(self) -> int:
        return len(self._static) + len(self._dynamic)

    def __contains__(self, obstacle_id: object) -> bool:
        return self.get(str(obstacle_id)) is not None

    def get(self, obstacle_id: str) -> Optional[Obstacle]:
        for obs in self.list_all():
            if obs.id == obstacle_id:
                return obs
        return None

    def list_all(self) -> List[Obstacle]:
        """Static obstacles first, then dynamic, each in insertion order."""
        return list(self._static) + list(self._dynamic)

    def static(self) -> List[Obstacle]:
        return list(self._static)

    def dynamic(self) -> List[Obstacle]:
        return list(self._dynamic)

    def polygons(self) -> List[Tuple[Point, ...]]:
        return [obs.points for obs in self.list_all()]

    @property
    def highlighted(self) -> Optional[str]:
        return self._highlighted

    # ------------------------------------------------------------------ mutations
    def add(self, points: Iterable[PointLike], kind: ObstacleKind) -> Optional[str]:
        polygon = as_polygon(points)
        if len(polygon) < MIN_POLYGON_POINTS:
            log(f"[Registry] rejected obstacle with {len(polygon)} points")
            return None
        kind = ObstacleKind(kind)
        obstacle = Obstacle(id=self._next_id(kind), points=polygon, kind=kind)
        self._bucket(kind).append(obstacle)
        log(f"[Registry] added {obstacle.id} ({len(polygon)} points)")
        return obstacle.id

    def remove_by_id(self, obstacle_id: str) -> bool:
        for bucket in (self._static, self._dynamic):
            for idx, obs in enumerate(bucket):
                if obs.id == obstacle_id:
                    del bucket[idx]
                    if self._highlighted == obstacle_id:
                        self._highlighted = None
                    log(f"[Registry] removed {obstacle_id}")
                    return True
        return False

    def highlight(self, obstacle_id: str) -> bool:
        if obstacle_id not in self:
            return False
        self._highlighted = obstacle_id
        return True

    def clear_highlight(self) -> None:
        self._highlighted = None

    def clear(self) -> None:
        """Start a new session: drop every obstacle and restart numbering."""
        self._static.clear()
        self._dynamic.clear()
        self._counter = 0
        self._highlighted = None

    def restore(self, obstacles: Iterable[Obstacle]) -> int:
        """
        Replace the contents with previously exported obstacles, keeping their
        ids where they are unique. Returns the number of obstacles restored.
        """
        self.clear()
        seen = set()
        for obs in obstacles:
            if len(obs.points) < MIN_POLYGON_POINTS:
                continue
            match = _ID_SUFFIX.search(obs.id)
            if match:
                self._counter = max(self._counter, int(match.group(1)))
            obstacle_id = obs.id
            if not obstacle_id or obstacle_id in seen:
                obstacle_id = ""
            seen.add(obstacle_id)
            self._bucket(obs.kind).append(
                Obstacle(id=obstacle_id, points=as_polygon(obs.points), kind=ObstacleKind(obs.kind))
            )
        # Duplicates and blank ids get fresh numbers once the counter has
        # moved past every numeric id seen above.
        for bucket in (self._static, self._dynamic):
            for idx, obs in enumerate(bucket):
                if not obs.id:
                    bucket[idx] = Obstacle(id=self._next_id(obs.kind), points=obs.points, kind=obs.kind)
        return len(self)

    # ------------------------------------------------------------------ internals
    def _bucket(self, kind: ObstacleKind) -> List[Obstacle]:
        return self._static if kind is ObstacleKind.STATIC else self._dynamic

    def _next_id(self, kind: ObstacleKind) -> str:
        self._counter += 1
        return f"{_ID_PREFIX[kind]}_{self._counter:03d}"


__all__ = ["MIN_POLYGON_POINTS", "Obstacle", "ObstacleKind", "ObstacleRegistry"]
