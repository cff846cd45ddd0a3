"""Change-notification schema emitted by the editor to its observers."""

from __future__ import annotations

from typing import Callable, Dict, List, Literal, Optional, TypedDict

ModeName = Literal["ready", "boundary", "obstacle", "obstacle-dynamic"]
PlaybackName = Literal["idle", "running", "paused", "stopped", "complete"]


class ModeChangedEvent(TypedDict):
    type: Literal["mode_changed"]
    mode: ModeName


class PointPlacedEvent(TypedDict):
    type: Literal["point_placed"]
    mode: ModeName
    x: float
    y: float
    count: int


class BoundaryCommittedEvent(TypedDict):
    type: Literal["boundary_committed"]
    count: int


class ObstacleAddedEvent(TypedDict):
    type: Literal["obstacle_added"]
    id: str
    kind: Literal["static", "dynamic"]
    count: int


class ObstacleRemovedEvent(TypedDict):
    type: Literal["obstacle_removed"]
    id: str


class DrawingDiscardedEvent(TypedDict):
    type: Literal["drawing_discarded"]
    mode: ModeName
    count: int
    reason: Literal["finish", "cancel"]


class HighlightChangedEvent(TypedDict):
    type: Literal["highlight_changed"]
    id: Optional[str]


class ViewChangedEvent(TypedDict):
    type: Literal["view_changed"]
    scale: float
    pan_x: float
    pan_y: float


class PathPlannedEvent(TypedDict):
    type: Literal["path_planned"]
    waypoints: int


class RobotMovedEvent(TypedDict):
    type: Literal["robot_moved"]
    x: float
    y: float
    heading: float
    index: int
    progress: float


class PlaybackStateEvent(TypedDict):
    type: Literal["playback_state"]
    state: PlaybackName
    index: int
    progress: float


class StatusEvent(TypedDict):
    type: Literal["status"]
    text: str


class ErrorEvent(TypedDict):
    type: Literal["error"]
    text: str


class SessionResetEvent(TypedDict):
    type: Literal["session_reset"]


class SessionLoadedEvent(TypedDict):
    type: Literal["session_loaded"]
    obstacles: int
    waypoints: int


EventDict = Dict[str, object]
Listener = Callable[[EventDict], None]


class EventBus:
    """Synchronous fan-out in subscription order, with optional recording."""

    def __init__(self, record: bool = False) -> None:
        self._listeners: List[Listener] = []
        self.record = record
        self.history: List[EventDict] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: EventDict) -> None:
        if self.record:
            self.history.append(event)
        for listener in list(self._listeners):
            listener(event)

    def of_type(self, event_type: str) -> List[EventDict]:
        return [ev for ev in self.history if ev.get("type") == event_type]


__all__ = [
    "EventDict",
    "Listener",
    "EventBus",
    "ModeName",
    "PlaybackName",
    "ModeChangedEvent",
    "PointPlacedEvent",
    "BoundaryCommittedEvent",
    "ObstacleAddedEvent",
    "ObstacleRemovedEvent",
    "DrawingDiscardedEvent",
    "HighlightChangedEvent",
    "ViewChangedEvent",
    "PathPlannedEvent",
    "RobotMovedEvent",
    "PlaybackStateEvent",
    "StatusEvent",
    "ErrorEvent",
    "SessionResetEvent",
    "SessionLoadedEvent",
]
