from __future__ import annotations

import math
from typing import List

import pytest

from coverage_editor.algs.geometry import Waypoint
from coverage_editor.drawing import DrawingOutcome, Mode
from coverage_editor.editor import WELCOME_MESSAGE, Editor
from coverage_editor.obstacles import ObstacleKind
from coverage_editor.playback import PlaybackStatus

SQUARE_SCREEN = [(100, 100), (300, 100), (300, 300), (100, 300)]


def _draw_boundary(editor: Editor, points=SQUARE_SCREEN) -> None:
    editor.start_boundary()
    for pt in points:
        editor.place_point(pt)
    editor.finish_current()


def _errors(editor: Editor) -> List[str]:
    return [str(ev["text"]) for ev in editor.bus.of_type("error")]


# ---------------------------------------------------------------------------
#  Drawing through the editor
# ---------------------------------------------------------------------------
def test_initial_state(editor: Editor) -> None:
    assert editor.mode is Mode.READY
    assert editor.status_text == WELCOME_MESSAGE
    avail = editor.availability()
    assert avail.boundary and avail.obstacle and avail.dynamic_obstacle
    assert not avail.plan and not avail.run and not avail.stop


def test_points_go_through_view_transform(editor: Editor) -> None:
    editor.pan(100, 0)
    editor.start_boundary()
    editor.place_point((150, 50))
    assert editor.in_progress == ((50.0, 50.0),)
    assert editor.status_text == "Boundary: 1 points (right-click to finish)"


def test_boundary_commit_updates_stats(editor: Editor) -> None:
    _draw_boundary(editor)
    assert len(editor.boundary) == 4
    assert editor.stats.coverage_area == pytest.approx(40000.0)
    assert editor.status_text.startswith("Boundary complete")
    assert editor.availability().plan


def test_escape_finishes_polygon_or_cancels(editor: Editor) -> None:
    editor.start_obstacle()
    for pt in SQUARE_SCREEN[:3]:
        editor.place_point(pt)
    assert editor.escape() is DrawingOutcome.COMMITTED
    assert len(editor.obstacles) == 1

    editor.start_obstacle()
    editor.place_point((0, 0))
    assert editor.escape() is DrawingOutcome.DISCARDED
    assert "cancelled" in editor.status_text
    assert len(editor.obstacles) == 1
    assert editor.escape() is DrawingOutcome.IGNORED


def test_toggle_enters_then_finishes(editor: Editor) -> None:
    assert editor.toggle_boundary() is True
    assert editor.mode is Mode.BOUNDARY
    for pt in SQUARE_SCREEN:
        editor.place_point(pt)
    assert editor.toggle_boundary() is True
    assert editor.mode is Mode.READY
    assert len(editor.boundary) == 4


def test_add_obstacle_button_toggles(editor: Editor) -> None:
    editor.add_dynamic_obstacle()
    for pt in SQUARE_SCREEN[:3]:
        editor.place_point(pt)
    editor.add_dynamic_obstacle()
    assert [obs.kind for obs in editor.obstacles] == [ObstacleKind.DYNAMIC]


def test_availability_while_drawing(editor: Editor) -> None:
    editor.start_boundary()
    avail = editor.availability()
    assert avail.boundary
    assert not avail.obstacle and not avail.dynamic_obstacle and not avail.plan


def test_insert_and_remove_obstacle(editor: Editor) -> None:
    _draw_boundary(editor)
    obstacle_id = editor.insert_obstacle([(120, 120), (140, 120), (140, 140), (120, 140)])
    assert obstacle_id == "obstacle_001"
    assert editor.stats.obstacles_area == pytest.approx(400.0)
    assert editor.highlight_obstacle(obstacle_id)
    assert editor.remove_obstacle(obstacle_id)
    assert editor.stats.obstacles_area == 0.0
    assert editor.registry.highlighted is None
    assert editor.remove_obstacle(obstacle_id) is False


def test_insert_obstacle_needs_three_points(editor: Editor) -> None:
    assert editor.insert_obstacle([(0, 0), (1, 1)]) is None
    assert _errors(editor)


# ---------------------------------------------------------------------------
#  View
# ---------------------------------------------------------------------------
def test_zoom_in_keeps_viewport_centre(editor: Editor) -> None:
    before = editor.view.screen_to_world((400, 300))
    assert editor.zoom_in()
    after = editor.view.screen_to_world((400, 300))
    assert after.x == pytest.approx(before.x)
    assert after.y == pytest.approx(before.y)
    assert editor.bus.of_type("view_changed")


def test_reset_view(editor: Editor) -> None:
    editor.zoom_out()
    editor.pan(5, 5)
    editor.reset_view()
    assert editor.view.scale == 1.0
    assert editor.view.pan_offset == (0.0, 0.0)


# ---------------------------------------------------------------------------
#  Planning and playback
# ---------------------------------------------------------------------------
def test_plan_requires_boundary(editor: Editor) -> None:
    assert editor.plan() is False
    assert "Please define a boundary first" in _errors(editor)


def test_plan_refused_while_drawing(editor: Editor) -> None:
    _draw_boundary(editor)
    editor.start_obstacle()
    assert editor.plan() is False
    assert editor.path == ()


def test_plan_sees_only_static_obstacles() -> None:
    seen = []

    def generator(boundary, obstacles):
        seen.append(list(obstacles))
        return [Waypoint(150.0, 150.0, 0.0), Waypoint(250.0, 150.0, 0.0)]

    editor = Editor(generator=generator)
    editor.load_test_data()
    assert editor.plan() is True
    assert [obs.kind for obs in seen[0]] == [ObstacleKind.STATIC]
    assert len(editor.path) == 2


def test_empty_plan_reports_no_path() -> None:
    editor = Editor(generator=lambda boundary, obstacles: [], record_events=True)
    _draw_boundary(editor)
    assert editor.plan() is False
    assert any("no path available" in text for text in _errors(editor))
    assert editor.availability().run is False


def test_run_without_path(editor: Editor) -> None:
    assert editor.run() is False
    assert "no path available" in editor.status_text
    assert editor.playback.running is False


def test_full_simulation(editor: Editor) -> None:
    editor.load_test_data()
    assert editor.plan()
    assert editor.run()
    assert editor.advance(0.0) == 1
    assert editor.robot_position is not None

    avail = editor.availability()
    assert avail.pause and avail.stop
    assert not avail.plan and not avail.run and not avail.boundary

    assert editor.start_boundary() is False
    assert editor.mode is Mode.READY

    editor.scheduler.run_until_idle()
    assert editor.robot_status().state is PlaybackStatus.COMPLETE
    assert editor.status_text == "Coverage complete!"
    assert editor.robot_position == editor.path[-1]


def test_pause_resume_and_stop(editor: Editor) -> None:
    editor.load_test_data()
    editor.plan()
    editor.run()
    editor.advance(0.0)
    assert editor.toggle_playback() is True
    assert editor.availability().resume
    assert editor.toggle_playback() is True
    assert editor.playback.paused is False
    assert editor.stop() is True
    assert editor.playback.index == 0
    assert editor.robot_position is None


def test_replanning_stops_playback(editor: Editor) -> None:
    editor.load_test_data()
    editor.plan()
    editor.run()
    editor.advance(0.0)
    editor.pause()
    assert editor.plan() is True
    assert editor.playback.running is False
    assert editor.robot_status().state is PlaybackStatus.IDLE


# ---------------------------------------------------------------------------
#  Session
# ---------------------------------------------------------------------------
def test_export_import_round_trip(editor: Editor) -> None:
    editor.load_test_data()
    editor.plan()
    data = editor.export_data()

    other = Editor()
    assert other.import_data(data) is True
    assert other.boundary == editor.boundary
    assert [obs.id for obs in other.obstacles] == [obs.id for obs in editor.obstacles]
    assert other.path == editor.path
    assert other.stats == editor.stats
    assert other.status_text == "Data imported successfully"


def test_import_rejects_non_object(editor: Editor) -> None:
    _draw_boundary(editor)
    assert editor.import_data(["not", "a", "snapshot"]) is False
    assert len(editor.boundary) == 4
    assert _errors(editor)


def test_import_with_missing_fields(editor: Editor) -> None:
    with pytest.warns(UserWarning):
        assert editor.import_data({"boundary": [[0, 0], [10, 0], [10, 10]]}) is True
    assert len(editor.boundary) == 3
    assert editor.obstacles == []
    assert "defaulted" in editor.status_text


def test_save_and_load_session(editor: Editor, tmp_path) -> None:
    editor.load_test_data()
    editor.plan()
    target = tmp_path / "session.json"
    assert editor.save_session(target) is True

    other = Editor()
    assert other.load_session(target) is True
    assert other.path == editor.path
    assert other.load_session(tmp_path / "missing.json") is False
    assert other.path == editor.path


def test_reset_clears_session(editor: Editor) -> None:
    editor.load_test_data()
    editor.plan()
    editor.run()
    editor.zoom_in()
    editor.reset()
    assert editor.boundary == ()
    assert editor.obstacles == []
    assert editor.path == ()
    assert editor.playback.running is False
    assert editor.view.scale == 1.0
    assert editor.status_text == WELCOME_MESSAGE
    assert editor.insert_obstacle([(0, 0), (5, 0), (5, 5)]) == "obstacle_001"


def test_test_data_contents(editor: Editor) -> None:
    editor.load_test_data()
    assert editor.stats.coverage_area == pytest.approx(120000.0)
    assert editor.stats.obstacles_area == pytest.approx(12500.0)
    assert [obs.label for obs in editor.obstacles] == ["Obstacle 001", "Dynamic 002"]
    assert editor.insert_obstacle([(0, 0), (5, 0), (5, 5)]) == "obstacle_003"


def test_subscribers_see_events_in_order(editor: Editor) -> None:
    seen: List[str] = []
    unsubscribe = editor.subscribe(lambda ev: seen.append(str(ev["type"])))
    editor.start_boundary()
    editor.place_point((1, 1))
    unsubscribe()
    editor.cancel_current()
    assert seen[:2] == ["mode_changed", "status"]
    assert "point_placed" in seen
    assert "drawing_discarded" not in seen


def test_import_with_non_finite_heading_still_saves(editor: Editor, tmp_path) -> None:
    data = {
        "boundary": [{"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 100, "y": 100}],
        "obstacles": [],
        "dynamicObstacles": [],
        "plannedPath": [{"x": 10, "y": 10, "heading": float("nan")}, {"x": 10, "y": 50, "heading": 0.0}],
    }
    assert editor.import_data(data) is True
    assert all(math.isfinite(w.heading) for w in editor.path)

    target = tmp_path / "session.json"
    assert editor.save_session(target) is True
    assert Editor().load_session(target) is True


def test_unserialisable_save_reports_error_and_keeps_file(tmp_path) -> None:
    editor = Editor(
        generator=lambda boundary, obstacles: [Waypoint(150.0, 150.0, float("nan"))],
        record_events=True,
    )
    target = tmp_path / "session.json"
    editor.load_test_data()
    assert editor.save_session(target) is True
    before = target.read_text(encoding="utf-8")

    assert editor.plan() is True
    assert editor.save_session(target) is False
    assert any(text.startswith("Failed to save session") for text in _errors(editor))
    assert target.read_text(encoding="utf-8") == before


def test_load_non_utf8_session(editor: Editor, tmp_path) -> None:
    _draw_boundary(editor)
    bad = tmp_path / "binary.json"
    bad.write_bytes(b'{"boundary": "\xff\xfe"}')
    assert editor.load_session(bad) is False
    assert editor.status_text.startswith("Failed to load session")
    assert len(editor.boundary) == 4


# ---------------------------------------------------------------------------
#  Highlight by pointer
# ---------------------------------------------------------------------------
def test_highlight_follows_pointer(editor: Editor) -> None:
    editor.load_test_data()
    assert editor.highlight_at((250, 250)) == "obstacle_001"
    assert editor.registry.highlighted == "obstacle_001"
    assert editor.highlight_at((375, 175)) == "dynamic_002"
    assert editor.highlight_at((50, 50)) is None
    assert editor.registry.highlighted is None
    changes = [ev["id"] for ev in editor.bus.of_type("highlight_changed")]
    assert changes == ["obstacle_001", "dynamic_002", None]


def test_obstacle_at_prefers_latest(editor: Editor) -> None:
    first = editor.insert_obstacle([(0, 0), (100, 0), (100, 100), (0, 100)])
    second = editor.insert_obstacle([(50, 50), (150, 50), (150, 150), (50, 150)])
    assert editor.obstacle_at((75, 75)).id == second
    assert editor.obstacle_at((25, 25)).id == first


def test_remove_highlighted(editor: Editor) -> None:
    editor.load_test_data()
    assert editor.remove_highlighted() is False
    editor.highlight_at((250, 250))
    assert editor.remove_highlighted() is True
    assert [obs.id for obs in editor.obstacles] == ["dynamic_002"]
    assert editor.registry.highlighted is None
