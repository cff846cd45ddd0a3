"""
Simulated traversal of a planned path.

Playback is driven by a cooperative scheduler: each tick runs to completion
and schedules at most one successor, so pause/stop take effect before the
next tick and tests can advance time by hand.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from coverage_editor.algs.geometry import Waypoint, heading_between
from coverage_editor.common.config import EditorConfig
from coverage_editor.events import EventDict, PlaybackStateEvent, RobotMovedEvent
from coverage_editor.utils import clamp, log

NO_PATH_MESSAGE = "no path available"


# --------------------------------------------------------------------------- #
#  Scheduling                                                                 #
# --------------------------------------------------------------------------- #
class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> int: ...

    def cancel(self, handle: int) -> None: ...


class ManualScheduler:
    """Virtual clock; callbacks fire only inside ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._cancelled: set = set()
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> int:
        handle = next(self._seq)
        heapq.heappush(self._queue, (self.now + max(0.0, delay_s), handle, callback))
        return handle

    def cancel(self, handle: int) -> None:
        self._cancelled.add(handle)

    def pending(self) -> int:
        return sum(1 for _, handle, _ in self._queue if handle not in self._cancelled)

    def advance(self, dt: float) -> int:
        """Move the clock forward by ``dt`` seconds; returns callbacks fired."""
        target = self.now + max(0.0, dt)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, handle, callback = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            self.now = max(self.now, due)
            callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 1_000_000) -> int:
        fired = 0
        while self._queue and fired < max_callbacks:
            due = self._queue[0][0]
            fired += self.advance(max(0.0, due - self.now))
        return fired


# --------------------------------------------------------------------------- #
#  Controller                                                                 #
# --------------------------------------------------------------------------- #
class PlaybackStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETE = "complete"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, slots=True)
class SimState:
    running: bool = False
    paused: bool = False
    index: int = 0
    progress: float = 0.0


@dataclass(frozen=True, slots=True)
class RobotStatus:
    state: PlaybackStatus
    position: Optional[Waypoint]
    progress: float
    speed_mps: float


def tick_delay_ms(speed: int, config: EditorConfig) -> float:
    """Higher speed, shorter delay; never below the configured floor."""
    delay = config.base_tick_delay_ms - speed * config.tick_delay_per_speed_ms
    return max(config.min_tick_delay_ms, delay)


class PlaybackController:
    def __init__(
        self,
        scheduler: Scheduler,
        config: Optional[EditorConfig] = None,
        notify: Optional[Callable[[EventDict], None]] = None,
    ) -> None:
        self.scheduler = scheduler
        self.config = config or EditorConfig()
        self._notify = notify or (lambda _event: None)
        self._path: Tuple[Waypoint, ...] = ()
        self._running = False
        self._paused = False
        self._index = 0
        self._progress = 0.0
        self._speed = self.config.default_speed
        self._pending: Optional[int] = None
        self._status = PlaybackStatus.IDLE
        self._position: Optional[Waypoint] = None
        self._reported_progress = 0.0
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------ accessors
    @property
    def state(self) -> SimState:
        return SimState(self._running, self._paused, self._index, self._progress)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def index(self) -> int:
        return self._index

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def position(self) -> Optional[Waypoint]:
        return self._position

    @property
    def speed(self) -> int:
        return self._speed

    @property
    def path(self) -> Tuple[Waypoint, ...]:
        return self._path

    def robot_status(self) -> RobotStatus:
        moving = self._status is PlaybackStatus.RUNNING
        return RobotStatus(
            state=self._status,
            position=self._position,
            progress=self._reported_progress,
            speed_mps=self._speed * self.config.speed_to_mps if moving else 0.0,
        )

    def delay_seconds(self) -> float:
        return tick_delay_ms(self._speed, self.config) / 1000.0

    # ------------------------------------------------------------------ commands
    def load(self, path: Sequence[Waypoint]) -> None:
        """Replace the path; any playback in progress is stopped."""
        if self._running:
            self.stop()
        self._path = tuple(path)
        self._position = None
        self._status = PlaybackStatus.IDLE
        self._reported_progress = 0.0

    def set_speed(self, value: int) -> int:
        self._speed = int(clamp(int(value), self.config.min_speed, self.config.max_speed))
        return self._speed

    def run(self) -> bool:
        """Start, or continue a paused run. Reports and returns False without a path."""
        if not self._path:
            self.last_error = NO_PATH_MESSAGE
            log(f"[Playback] run refused: {NO_PATH_MESSAGE}")
            return False
        self.last_error = None
        if self._running and self._paused:
            return self.resume()
        if self._running:
            return False
        if self._index == 0:
            self._progress = 0.0
        self._running = True
        self._paused = False
        self._set_status(PlaybackStatus.RUNNING)
        self._schedule(0.0)
        return True

    def pause(self) -> bool:
        if not self._running or self._paused:
            return False
        self._paused = True
        self._cancel_pending()
        self._set_status(PlaybackStatus.PAUSED)
        return True

    def resume(self) -> bool:
        if not (self._running and self._paused):
            return False
        self._paused = False
        self._set_status(PlaybackStatus.RUNNING)
        self._schedule(0.0)
        return True

    def stop(self) -> bool:
        if not self._running:
            return False
        self._halt()
        self._position = None
        self._reported_progress = 0.0
        self._set_status(PlaybackStatus.STOPPED)
        return True

    def reset(self) -> None:
        """Back to Idle with no robot shown, whatever the current state."""
        self._halt()
        self._position = None
        self._reported_progress = 0.0
        self._set_status(PlaybackStatus.IDLE)

    def toggle(self) -> bool:
        """Space-bar behaviour: pause while running, otherwise run or resume."""
        if self._running and not self._paused:
            return self.pause()
        return self.run()

    # ------------------------------------------------------------------ ticking
    def tick(self) -> bool:
        """Advance one waypoint. Returns True while more ticks are expected."""
        self._pending = None
        if not self._running or self._paused:
            return False
        last = len(self._path) - 1
        if self._index >= last:
            self._complete()
            return False

        current = self._path[self._index]
        nxt = self._path[self._index + 1]
        heading = heading_between(current, nxt)
        self._position = Waypoint(current.x, current.y, heading)
        self._progress = 100.0 * (self._index + 1) / len(self._path)
        self._reported_progress = self._progress
        self._notify(
            RobotMovedEvent(
                type="robot_moved",
                x=current.x,
                y=current.y,
                heading=heading,
                index=self._index,
                progress=self._progress,
            )
        )
        self._index += 1
        self._schedule(self.delay_seconds())
        return True

    # ------------------------------------------------------------------ internals
    def _complete(self) -> None:
        final = self._path[-1] if self._path else None
        self._halt()
        self._position = final
        self._reported_progress = 100.0
        log("[Playback] coverage complete")
        self._set_status(PlaybackStatus.COMPLETE)

    def _halt(self) -> None:
        self._cancel_pending()
        self._running = False
        self._paused = False
        self._index = 0
        self._progress = 0.0

    def _schedule(self, delay_s: float) -> None:
        self._cancel_pending()
        self._pending = self.scheduler.call_later(delay_s, self.tick)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self.scheduler.cancel(self._pending)
            self._pending = None

    def _set_status(self, status: PlaybackStatus) -> None:
        self._status = status
        log(f"[Playback] {status.label} at index {self._index}")
        self._notify(
            PlaybackStateEvent(
                type="playback_state",
                state=status.value,
                index=self._index,
                progress=self._reported_progress,
            )
        )


__all__ = [
    "NO_PATH_MESSAGE",
    "Scheduler",
    "ManualScheduler",
    "PlaybackStatus",
    "SimState",
    "RobotStatus",
    "PlaybackController",
    "tick_delay_ms",
]
