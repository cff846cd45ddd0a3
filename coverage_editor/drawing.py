"""
Mode-driven polygon drawing.

The machine owns the interaction mode and the in-progress vertex buffer.
Committed boundaries go to a boundary sink (the path model) and committed
obstacles to the registry; both through their public methods only.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from coverage_editor.algs.geometry import Point, PointLike, as_point
from coverage_editor.events import (
    BoundaryCommittedEvent,
    DrawingDiscardedEvent,
    EventDict,
    ModeChangedEvent,
    ObstacleAddedEvent,
    PointPlacedEvent,
)
from coverage_editor.obstacles import MIN_POLYGON_POINTS, ObstacleKind, ObstacleRegistry
from coverage_editor.utils import log


class Mode(str, Enum):
    READY = "ready"
    BOUNDARY = "boundary"
    OBSTACLE = "obstacle"
    DYNAMIC_OBSTACLE = "obstacle-dynamic"

    @property
    def is_drawing(self) -> bool:
        return self is not Mode.READY


class Command(str, Enum):
    START_BOUNDARY = "start_boundary"
    START_OBSTACLE = "start_obstacle"
    START_DYNAMIC_OBSTACLE = "start_dynamic_obstacle"
    PLACE_POINT = "place_point"
    FINISH = "finish"
    CANCEL = "cancel"


class DrawingOutcome(str, Enum):
    COMMITTED = "committed"
    DISCARDED = "discarded"
    IGNORED = "ignored"


_START_TARGET: Dict[Command, Mode] = {
    Command.START_BOUNDARY: Mode.BOUNDARY,
    Command.START_OBSTACLE: Mode.OBSTACLE,
    Command.START_DYNAMIC_OBSTACLE: Mode.DYNAMIC_OBSTACLE,
}

_OBSTACLE_KIND: Dict[Mode, ObstacleKind] = {
    Mode.OBSTACLE: ObstacleKind.STATIC,
    Mode.DYNAMIC_OBSTACLE: ObstacleKind.DYNAMIC,
}

_NOUN: Dict[Mode, str] = {
    Mode.BOUNDARY: "boundary",
    Mode.OBSTACLE: "obstacle",
    Mode.DYNAMIC_OBSTACLE: "dynamic obstacle",
}


def _build_transitions() -> Dict[Tuple[Mode, Command], Mode]:
    table: Dict[Tuple[Mode, Command], Mode] = {}
    for mode in Mode:
        for command in Command:
            if command in _START_TARGET:
                table[(mode, command)] = _START_TARGET[command]
            elif command is Command.PLACE_POINT:
                table[(mode, command)] = mode
            else:
                table[(mode, command)] = Mode.READY
    return table


TRANSITIONS: Dict[Tuple[Mode, Command], Mode] = _build_transitions()


def next_mode(mode: Mode, command: Command) -> Mode:
    return TRANSITIONS[(mode, command)]


class BoundarySink(Protocol):
    def set_boundary(self, points: Sequence[PointLike]) -> bool: ...


class DrawingStateMachine:
    def __init__(
        self,
        boundary_sink: BoundarySink,
        registry: ObstacleRegistry,
        notify: Optional[Callable[[EventDict], None]] = None,
    ) -> None:
        self._sink = boundary_sink
        self._registry = registry
        self._notify = notify or (lambda _event: None)
        self._mode = Mode.READY
        self._buffer: List[Point] = []
        self._hover: Optional[Point] = None
        self.last_obstacle_id: Optional[str] = None

    # ------------------------------------------------------------------ accessors
    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def buffer(self) -> Tuple[Point, ...]:
        return tuple(self._buffer)

    @property
    def hover(self) -> Optional[Point]:
        return self._hover

    @staticmethod
    def noun(mode: Mode) -> str:
        return _NOUN.get(mode, "drawing")

    # ------------------------------------------------------------------ commands
    def start(self, command: Command) -> bool:
        """Enter a drawing mode. A different in-progress drawing is cancelled first."""
        if command not in _START_TARGET:
            raise ValueError(f"{command} is not a start command")
        target = next_mode(self._mode, command)
        if target is self._mode:
            return False
        if self._mode.is_drawing:
            self.cancel()
        self._enter(target)
        return True

    def start_boundary(self) -> bool:
        return self.start(Command.START_BOUNDARY)

    def start_obstacle(self) -> bool:
        return self.start(Command.START_OBSTACLE)

    def start_dynamic_obstacle(self) -> bool:
        return self.start(Command.START_DYNAMIC_OBSTACLE)

    def place_point(self, world: PointLike) -> bool:
        if not self._mode.is_drawing:
            return False
        point = as_point(world)
        self._buffer.append(point)
        self._notify(
            PointPlacedEvent(
                type="point_placed",
                mode=self._mode.value,
                x=point.x,
                y=point.y,
                count=len(self._buffer),
            )
        )
        return True

    def hover_at(self, world: Optional[PointLike]) -> None:
        if not self._mode.is_drawing:
            return
        self._hover = as_point(world) if world is not None else None

    def finish(self) -> DrawingOutcome:
        if not self._mode.is_drawing:
            return DrawingOutcome.IGNORED
        mode = self._mode
        points = list(self._buffer)
        if len(points) < MIN_POLYGON_POINTS:
            self._discard(mode, len(points), "finish")
            return DrawingOutcome.DISCARDED

        if mode is Mode.BOUNDARY:
            self._sink.set_boundary(points)
            log(f"[Drawing] boundary committed ({len(points)} points)")
            self._enter(Mode.READY)
            self._notify(BoundaryCommittedEvent(type="boundary_committed", count=len(points)))
        else:
            kind = _OBSTACLE_KIND[mode]
            obstacle_id = self._registry.add(points, kind)
            self.last_obstacle_id = obstacle_id
            self._enter(Mode.READY)
            if obstacle_id is not None:
                self._notify(
                    ObstacleAddedEvent(
                        type="obstacle_added",
                        id=obstacle_id,
                        kind=kind.value,
                        count=len(points),
                    )
                )
        return DrawingOutcome.COMMITTED

    def cancel(self) -> DrawingOutcome:
        if not self._mode.is_drawing:
            return DrawingOutcome.IGNORED
        self._discard(self._mode, len(self._buffer), "cancel")
        return DrawingOutcome.DISCARDED

    def reset(self) -> None:
        """Return to Ready without notifying; used on session reset."""
        self._mode = Mode.READY
        self._buffer.clear()
        self._hover = None
        self.last_obstacle_id = None

    # ------------------------------------------------------------------ internals
    def _discard(self, mode: Mode, count: int, reason: str) -> None:
        log(f"[Drawing] discarded {_NOUN[mode]} with {count} points ({reason})")
        self._enter(Mode.READY)
        self._notify(
            DrawingDiscardedEvent(type="drawing_discarded", mode=mode.value, count=count, reason=reason)
        )

    def _enter(self, mode: Mode) -> None:
        self._mode = mode
        self._buffer.clear()
        self._hover = None
        self._notify(ModeChangedEvent(type="mode_changed", mode=mode.value))


__all__ = [
    "Mode",
    "Command",
    "DrawingOutcome",
    "TRANSITIONS",
    "next_mode",
    "BoundarySink",
    "DrawingStateMachine",
]
