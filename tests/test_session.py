from __future__ import annotations

import json
import math
from datetime import datetime, timezone

import pytest

from coverage_editor.algs.geometry import Point, Waypoint
from coverage_editor.obstacles import Obstacle, ObstacleKind
from coverage_editor.session import (
    Snapshot,
    SnapshotError,
    load_snapshot,
    save_snapshot,
    snapshot_from_dict,
    snapshot_to_dict,
)


def _pts(*coords):
    return tuple(Point(float(x), float(y)) for x, y in coords)


SNAPSHOT = Snapshot(
    boundary=_pts((0, 0), (100, 0), (100, 100), (0, 100)),
    obstacles=(Obstacle("obstacle_001", _pts((10, 10), (20, 10), (20, 20)), ObstacleKind.STATIC),),
    dynamic_obstacles=(Obstacle("dynamic_002", _pts((50, 50), (60, 50), (60, 60)), ObstacleKind.DYNAMIC),),
    planned_path=(Waypoint(20.0, 20.0, 0.0), Waypoint(80.0, 20.0, math.pi / 2), Waypoint(80.0, 60.0, math.pi / 2)),
)


def test_export_shape() -> None:
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    data = snapshot_to_dict(SNAPSHOT, units_per_meter=50.0, timestamp=stamp)
    assert data["timestamp"] == "2024-05-01T12:00:00+00:00"
    assert data["metadata"] == {"unitsPerMeter": 50.0, "version": "1.0"}
    assert data["boundary"][1] == {"x": 100.0, "y": 0.0}
    assert data["obstacles"][0]["id"] == "obstacle_001"
    assert data["dynamicObstacles"][0]["type"] == "dynamic"
    assert data["plannedPath"][1]["heading"] == pytest.approx(math.pi / 2)


def test_round_trip_through_json() -> None:
    text = json.dumps(snapshot_to_dict(SNAPSHOT))
    restored = snapshot_from_dict(json.loads(text))
    assert restored == SNAPSHOT
    assert restored.problems == ()


def test_missing_fields_default_to_empty() -> None:
    with pytest.warns(UserWarning, match="obstacles: missing"):
        restored = snapshot_from_dict({"boundary": [{"x": 0, "y": 0}, {"x": 5, "y": 0}, {"x": 0, "y": 5}]})
    assert len(restored.boundary) == 3
    assert restored.obstacles == ()
    assert restored.dynamic_obstacles == ()
    assert restored.planned_path == ()
    assert len(restored.problems) == 3


def test_invalid_fields_are_replaced_individually() -> None:
    data = snapshot_to_dict(SNAPSHOT)
    data["boundary"] = [{"x": 0, "y": 0}, {"x": 1, "y": 1}]
    data["obstacles"].append({"id": "obstacle_009", "points": [{"x": 0, "y": 0}]})
    data["dynamicObstacles"] = "nope"
    with pytest.warns(UserWarning):
        restored = snapshot_from_dict(data)
    assert restored.boundary == ()
    assert [obs.id for obs in restored.obstacles] == ["obstacle_001"]
    assert restored.dynamic_obstacles == ()
    assert restored.planned_path == SNAPSHOT.planned_path


def test_non_finite_coordinates_are_rejected() -> None:
    data = snapshot_to_dict(SNAPSHOT)
    data["boundary"][0] = {"x": float("nan"), "y": 0}
    with pytest.warns(UserWarning, match="boundary"):
        restored = snapshot_from_dict(data)
    assert restored.boundary == ()


def test_path_without_headings_gets_them_filled() -> None:
    data = snapshot_to_dict(SNAPSHOT)
    data["plannedPath"] = [{"x": 0, "y": 0}, {"x": 0, "y": 10}]
    restored = snapshot_from_dict(data)
    assert restored.planned_path[0].heading == pytest.approx(math.pi / 2)


@pytest.mark.parametrize("payload", [[], "text", 42, None])
def test_non_object_document_raises(payload) -> None:
    with pytest.raises(SnapshotError):
        snapshot_from_dict(payload)


def test_snapshot_error_is_a_value_error() -> None:
    assert issubclass(SnapshotError, ValueError)


def test_save_and_load(tmp_path) -> None:
    target = save_snapshot(tmp_path / "nested" / "session.json", SNAPSHOT)
    assert target.exists()
    assert load_snapshot(target) == SNAPSHOT


def test_load_invalid_json(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotError):
        load_snapshot(bad)


def test_load_non_utf8_file(tmp_path) -> None:
    bad = tmp_path / "binary.json"
    bad.write_bytes(b'{"boundary": "\xff\xfe"}')
    with pytest.raises(SnapshotError, match="UTF-8"):
        load_snapshot(bad)


@pytest.mark.parametrize("heading", [float("nan"), float("inf"), "-inf"])
def test_non_finite_heading_is_recomputed(heading) -> None:
    data = snapshot_to_dict(SNAPSHOT)
    data["plannedPath"][0]["heading"] = heading
    restored = snapshot_from_dict(data)
    assert all(math.isfinite(w.heading) for w in restored.planned_path)
    assert restored.planned_path[0].heading == pytest.approx(0.0)


def test_failed_save_keeps_previous_file(tmp_path) -> None:
    target = save_snapshot(tmp_path / "session.json", SNAPSHOT)
    before = target.read_text(encoding="utf-8")
    broken = Snapshot(planned_path=(Waypoint(0.0, 0.0, float("nan")),))
    with pytest.raises(ValueError):
        save_snapshot(target, broken)
    assert target.read_text(encoding="utf-8") == before
    assert load_snapshot(target) == SNAPSHOT
