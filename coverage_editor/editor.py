"""
Intent-level command surface over the editor components.

Front ends (the pygame window, scripts, tests) call these methods and never
touch component internals. Every command leaves the editor in a stable state
and reports failures through ``status``/``error`` events, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from coverage_editor.algs.geometry import Point, PointLike, Waypoint, point_in_polygon
from coverage_editor.common.config import EditorConfig
from coverage_editor.drawing import DrawingOutcome, DrawingStateMachine, Mode
from coverage_editor.events import (
    ErrorEvent,
    EventBus,
    EventDict,
    HighlightChangedEvent,
    Listener,
    ObstacleAddedEvent,
    ObstacleRemovedEvent,
    PathPlannedEvent,
    SessionLoadedEvent,
    SessionResetEvent,
    StatusEvent,
    ViewChangedEvent,
)
from coverage_editor.obstacles import Obstacle, ObstacleKind, ObstacleRegistry
from coverage_editor.planning.stripes import PathGenerator
from coverage_editor.playback import (
    NO_PATH_MESSAGE,
    ManualScheduler,
    PlaybackController,
    PlaybackStatus,
    RobotStatus,
    Scheduler,
)
from coverage_editor.session import (
    Snapshot,
    SnapshotError,
    load_snapshot,
    merge_obstacles,
    save_snapshot,
    snapshot_from_dict,
    snapshot_to_dict,
)
from coverage_editor.stats import PathModel, PathStats
from coverage_editor.utils import log
from coverage_editor.view import ViewTransform

WELCOME_MESSAGE = "Click BOUNDARY to start defining the mowing area"

_START_PROMPT: Dict[Mode, str] = {
    Mode.BOUNDARY: "Click to add boundary points, right-click to finish",
    Mode.OBSTACLE: "Click to add obstacle points, right-click to finish",
    Mode.DYNAMIC_OBSTACLE: "Click to add dynamic obstacle points, right-click to finish",
}

_POINT_PROMPT: Dict[Mode, str] = {
    Mode.BOUNDARY: "Boundary",
    Mode.OBSTACLE: "Obstacle",
    Mode.DYNAMIC_OBSTACLE: "Dynamic Obstacle",
}

_COMMIT_MESSAGE: Dict[Mode, str] = {
    Mode.BOUNDARY: "Boundary complete! Click PLAN to generate path.",
    Mode.OBSTACLE: "Obstacle added! Add more or click PLAN.",
    Mode.DYNAMIC_OBSTACLE: "Dynamic obstacle added! Add more or click PLAN.",
}

TEST_BOUNDARY: Tuple[Tuple[float, float], ...] = ((100, 100), (500, 100), (500, 400), (100, 400))
TEST_STATIC_OBSTACLE: Tuple[Tuple[float, float], ...] = ((200, 200), (300, 200), (300, 300), (200, 300))
TEST_DYNAMIC_OBSTACLE: Tuple[Tuple[float, float], ...] = ((350, 150), (400, 150), (400, 200), (350, 200))


@dataclass(frozen=True, slots=True)
class Availability:
    """Which commands a front end should offer right now."""

    boundary: bool
    obstacle: bool
    dynamic_obstacle: bool
    plan: bool
    run: bool
    pause: bool
    resume: bool
    stop: bool


class Editor:
    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        *,
        generator: Optional[PathGenerator] = None,
        scheduler: Optional[Scheduler] = None,
        viewport: Tuple[int, int] = (800, 600),
        record_events: bool = False,
    ) -> None:
        self.config = config or EditorConfig()
        self.bus = EventBus(record=record_events)
        self.view = ViewTransform(self.config.min_scale, self.config.max_scale, self.config.zoom_step)
        self.registry = ObstacleRegistry()
        self.model = PathModel(self.config, generator)
        self.drawing = DrawingStateMachine(self.model, self.registry, self._on_drawing_event)
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.playback = PlaybackController(self.scheduler, self.config, self._on_playback_event)
        self.viewport = viewport
        self.status_text = WELCOME_MESSAGE

    # ------------------------------------------------------------------ observers
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.bus.subscribe(listener)

    @property
    def events(self) -> List[EventDict]:
        return self.bus.history

    # ------------------------------------------------------------------ read-only views
    @property
    def mode(self) -> Mode:
        return self.drawing.mode

    @property
    def boundary(self) -> Tuple[Point, ...]:
        return self.model.boundary

    @property
    def in_progress(self) -> Tuple[Point, ...]:
        return self.drawing.buffer

    @property
    def hover(self) -> Optional[Point]:
        return self.drawing.hover

    @property
    def obstacles(self) -> List[Obstacle]:
        return self.registry.list_all()

    @property
    def path(self) -> Tuple[Waypoint, ...]:
        return self.model.path

    @property
    def stats(self) -> PathStats:
        return self.model.stats

    @property
    def robot_position(self) -> Optional[Waypoint]:
        return self.playback.position

    def robot_status(self) -> RobotStatus:
        return self.playback.robot_status()

    def availability(self) -> Availability:
        mode = self.drawing.mode
        drawing = mode.is_drawing
        running = self.playback.running
        paused = self.playback.paused
        return Availability(
            boundary=not running and (not drawing or mode is Mode.BOUNDARY),
            obstacle=not running and (not drawing or mode is Mode.OBSTACLE),
            dynamic_obstacle=not running and (not drawing or mode is Mode.DYNAMIC_OBSTACLE),
            plan=self.model.has_boundary and not drawing and not running,
            run=self.model.has_path and not running and not drawing,
            pause=running and not paused and not drawing,
            resume=running and paused and not drawing,
            stop=running and not drawing,
        )

    # ------------------------------------------------------------------ drawing commands
    def start_boundary(self) -> bool:
        return self._start(Mode.BOUNDARY)

    def start_obstacle(self) -> bool:
        return self._start(Mode.OBSTACLE)

    def start_dynamic_obstacle(self) -> bool:
        return self._start(Mode.DYNAMIC_OBSTACLE)

    def toggle_boundary(self) -> bool:
        return self._toggle(Mode.BOUNDARY)

    def toggle_obstacle(self) -> bool:
        return self._toggle(Mode.OBSTACLE)

    def toggle_dynamic_obstacle(self) -> bool:
        return self._toggle(Mode.DYNAMIC_OBSTACLE)

    def place_point(self, screen: PointLike) -> bool:
        """Add the world point under ``screen`` to the drawing in progress."""
        return self.drawing.place_point(self.view.screen_to_world(screen))

    def place_world_point(self, world: PointLike) -> bool:
        return self.drawing.place_point(world)

    def hover_at(self, screen: Optional[PointLike]) -> None:
        self.drawing.hover_at(self.view.screen_to_world(screen) if screen is not None else None)

    def finish_current(self) -> DrawingOutcome:
        mode = self.drawing.mode
        outcome = self.drawing.finish()
        if outcome is DrawingOutcome.COMMITTED:
            self._sync_obstacles()
            self._set_status(_COMMIT_MESSAGE[mode])
        elif outcome is DrawingOutcome.DISCARDED:
            self._set_status(f"Incomplete {self.drawing.noun(mode)} discarded. Ready for next action.")
        return outcome

    def cancel_current(self) -> DrawingOutcome:
        mode = self.drawing.mode
        outcome = self.drawing.cancel()
        if outcome is DrawingOutcome.DISCARDED:
            self._set_status(f"Incomplete {self.drawing.noun(mode)} cancelled. Ready for next action.")
        return outcome

    def escape(self) -> DrawingOutcome:
        """Finish a drawing that already forms a polygon, otherwise cancel it."""
        if not self.drawing.mode.is_drawing:
            self._set_status("Ready for next action.")
            return DrawingOutcome.IGNORED
        if len(self.drawing.buffer) >= 3:
            return self.finish_current()
        return self.cancel_current()

    # ------------------------------------------------------------------ obstacles
    def add_obstacle(self) -> bool:
        """Obstacle button: start drawing one, or finish the one in progress."""
        return self.toggle_obstacle()

    def add_dynamic_obstacle(self) -> bool:
        return self.toggle_dynamic_obstacle()

    def insert_obstacle(self, points: List[PointLike], kind: ObstacleKind = ObstacleKind.STATIC) -> Optional[str]:
        """Commit an obstacle directly, bypassing the drawing modes."""
        obstacle_id = self.registry.add(points, kind)
        if obstacle_id is None:
            self._error("An obstacle needs at least 3 points")
            return None
        self._sync_obstacles()
        self.bus.emit(
            ObstacleAddedEvent(
                type="obstacle_added",
                id=obstacle_id,
                kind=ObstacleKind(kind).value,
                count=len(points),
            )
        )
        return obstacle_id

    def remove_obstacle(self, obstacle_id: str) -> bool:
        if not self.registry.remove_by_id(obstacle_id):
            return False
        self._sync_obstacles()
        self.bus.emit(ObstacleRemovedEvent(type="obstacle_removed", id=obstacle_id))
        return True

    def highlight_obstacle(self, obstacle_id: str) -> bool:
        if not self.registry.highlight(obstacle_id):
            return False
        self.bus.emit(HighlightChangedEvent(type="highlight_changed", id=obstacle_id))
        return True

    def clear_highlight(self) -> None:
        if self.registry.highlighted is None:
            return
        self.registry.clear_highlight()
        self.bus.emit(HighlightChangedEvent(type="highlight_changed", id=None))

    def obstacle_at(self, screen: PointLike) -> Optional[Obstacle]:
        """Topmost obstacle under a screen position, later obstacles drawn on top."""
        world = self.view.screen_to_world(screen)
        for obstacle in reversed(self.registry.list_all()):
            if point_in_polygon(world, obstacle.points):
                return obstacle
        return None

    def highlight_at(self, screen: PointLike) -> Optional[str]:
        obstacle = self.obstacle_at(screen)
        if obstacle is None:
            self.clear_highlight()
            return None
        if obstacle.id != self.registry.highlighted:
            self.highlight_obstacle(obstacle.id)
        return obstacle.id

    def remove_highlighted(self) -> bool:
        obstacle_id = self.registry.highlighted
        if obstacle_id is None or self.playback.running:
            return False
        return self.remove_obstacle(obstacle_id)

    # ------------------------------------------------------------------ view
    def zoom_at(self, screen: PointLike, factor: float) -> bool:
        changed = self.view.zoom_at(screen, factor)
        if changed:
            self._emit_view()
        return changed

    def zoom_in(self) -> bool:
        return self.zoom_at(self._viewport_centre(), self.config.zoom_step)

    def zoom_out(self) -> bool:
        return self.zoom_at(self._viewport_centre(), 1.0 / self.config.zoom_step)

    def pan(self, dx: float, dy: float) -> None:
        self.view.pan(dx, dy)
        self._emit_view()

    def reset_view(self) -> None:
        self.view.reset()
        self._emit_view()

    def set_viewport(self, width: int, height: int) -> None:
        self.viewport = (int(width), int(height))

    # ------------------------------------------------------------------ planning
    def plan(self) -> bool:
        if self.drawing.mode.is_drawing:
            self._error("Finish the current drawing before planning")
            return False
        if not self.model.has_boundary:
            self._error("Please define a boundary first")
            return False
        self.playback.reset()
        path = self.model.plan(self.registry.static())
        self.playback.load(path)
        self.bus.emit(PathPlannedEvent(type="path_planned", waypoints=len(path)))
        if not path:
            self._error(f"Planning failed: {NO_PATH_MESSAGE}")
            return False
        self._set_status("Path generated! Click RUN to start simulation.")
        return True

    # ------------------------------------------------------------------ playback
    def run(self) -> bool:
        if self.drawing.mode.is_drawing:
            self._error("Finish the current drawing before running")
            return False
        if not self.playback.run():
            self._error(f"Please generate a path first ({self.playback.last_error})")
            return False
        self._set_status("Simulation running")
        return True

    def pause(self) -> bool:
        if not self.playback.pause():
            return False
        self._set_status("Simulation paused")
        return True

    def resume(self) -> bool:
        if not self.playback.resume():
            return False
        self._set_status("Simulation running")
        return True

    def stop(self) -> bool:
        if not self.playback.stop():
            return False
        self._set_status("Simulation stopped")
        return True

    def toggle_playback(self) -> bool:
        if self.playback.running and not self.playback.paused:
            return self.pause()
        if self.playback.paused:
            return self.resume()
        return self.run()

    def set_speed(self, value: int) -> int:
        return self.playback.set_speed(value)

    def advance(self, dt: float) -> int:
        """Feed elapsed seconds to the manual scheduler; returns ticks fired."""
        if not isinstance(self.scheduler, ManualScheduler):
            return 0
        return self.scheduler.advance(dt)

    # ------------------------------------------------------------------ session
    def reset(self) -> None:
        self.playback.reset()
        self.playback.load(())
        self.drawing.reset()
        self.registry.clear()
        self.model.clear()
        self.view.reset()
        log("[Editor] session reset")
        self.bus.emit(SessionResetEvent(type="session_reset"))
        self._set_status(WELCOME_MESSAGE)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            boundary=self.model.boundary,
            obstacles=tuple(self.registry.static()),
            dynamic_obstacles=tuple(self.registry.dynamic()),
            planned_path=self.model.path,
        )

    def export_data(self) -> Dict[str, object]:
        return snapshot_to_dict(self.snapshot(), units_per_meter=self.config.units_per_meter)

    def import_data(self, data: object) -> bool:
        try:
            snapshot = snapshot_from_dict(data)
        except SnapshotError as exc:
            self._error(f"Failed to import data: {exc}")
            return False
        self._apply_snapshot(snapshot)
        return True

    def save_session(self, path: str | Path) -> bool:
        try:
            save_snapshot(path, self.snapshot(), units_per_meter=self.config.units_per_meter)
        except (OSError, ValueError) as exc:
            self._error(f"Failed to save session: {exc}")
            return False
        self._set_status(f"Session saved to {path}")
        return True

    def load_session(self, path: str | Path) -> bool:
        try:
            snapshot = load_snapshot(path)
        except (OSError, SnapshotError) as exc:
            self._error(f"Failed to load session: {exc}")
            return False
        self._apply_snapshot(snapshot)
        return True

    def load_test_data(self) -> None:
        self._apply_snapshot(
            Snapshot(
                boundary=tuple(Point(float(x), float(y)) for x, y in TEST_BOUNDARY),
                obstacles=(
                    Obstacle(
                        id="obstacle_001",
                        points=tuple(Point(float(x), float(y)) for x, y in TEST_STATIC_OBSTACLE),
                        kind=ObstacleKind.STATIC,
                    ),
                ),
                dynamic_obstacles=(
                    Obstacle(
                        id="dynamic_002",
                        points=tuple(Point(float(x), float(y)) for x, y in TEST_DYNAMIC_OBSTACLE),
                        kind=ObstacleKind.DYNAMIC,
                    ),
                ),
            )
        )
        self._set_status("Test data generated. Click PLAN to generate a path.")

    # ------------------------------------------------------------------ internals
    def _start(self, mode: Mode) -> bool:
        if self.playback.running:
            self._error("Stop the simulation before editing")
            return False
        starts = {
            Mode.BOUNDARY: self.drawing.start_boundary,
            Mode.OBSTACLE: self.drawing.start_obstacle,
            Mode.DYNAMIC_OBSTACLE: self.drawing.start_dynamic_obstacle,
        }
        if not starts[mode]():
            return False
        self._set_status(_START_PROMPT[mode])
        return True

    def _toggle(self, mode: Mode) -> bool:
        if self.drawing.mode is mode:
            return self.finish_current() is DrawingOutcome.COMMITTED
        return self._start(mode)

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        self.playback.reset()
        self.drawing.reset()
        self.model.clear()
        if snapshot.boundary:
            self.model.set_boundary(snapshot.boundary)
        self.registry.restore(merge_obstacles(snapshot.obstacles, snapshot.dynamic_obstacles))
        self._sync_obstacles()
        self.model.set_path(snapshot.planned_path)
        self.playback.load(self.model.path)
        self.bus.emit(
            SessionLoadedEvent(
                type="session_loaded",
                obstacles=len(self.registry),
                waypoints=len(self.model.path),
            )
        )
        if snapshot.problems:
            self._set_status(f"Data imported with {len(snapshot.problems)} field(s) defaulted")
        else:
            self._set_status("Data imported successfully")

    def _sync_obstacles(self) -> None:
        self.model.update_obstacles(self.registry.polygons())

    def _on_drawing_event(self, event: EventDict) -> None:
        if event.get("type") == "point_placed":
            mode = Mode(str(event["mode"]))
            self.status_text = f"{_POINT_PROMPT[mode]}: {event['count']} points (right-click to finish)"
        self.bus.emit(event)

    def _on_playback_event(self, event: EventDict) -> None:
        self.bus.emit(event)
        if event.get("type") == "playback_state" and event.get("state") == PlaybackStatus.COMPLETE.value:
            self._set_status("Coverage complete!")

    def _viewport_centre(self) -> Tuple[float, float]:
        return self.viewport[0] / 2.0, self.viewport[1] / 2.0

    def _emit_view(self) -> None:
        state = self.view.state
        self.bus.emit(ViewChangedEvent(type="view_changed", scale=state.scale, pan_x=state.pan_x, pan_y=state.pan_y))

    def _set_status(self, text: str) -> None:
        self.status_text = text
        self.bus.emit(StatusEvent(type="status", text=text))

    def _error(self, text: str) -> None:
        log(f"[Editor] {text}")
        self.status_text = text
        self.bus.emit(ErrorEvent(type="error", text=text))


__all__ = [
    "Availability",
    "Editor",
    "WELCOME_MESSAGE",
    "TEST_BOUNDARY",
    "TEST_STATIC_OBSTACLE",
    "TEST_DYNAMIC_OBSTACLE",
]
