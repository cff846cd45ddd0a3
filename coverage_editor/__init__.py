# Editor facade - default export
from .editor import Availability, Editor

# Components
from .drawing import DrawingOutcome, DrawingStateMachine, Mode
from .obstacles import Obstacle, ObstacleKind, ObstacleRegistry
from .playback import ManualScheduler, PlaybackController, PlaybackStatus
from .stats import PathModel, PathStats, compute_stats, format_duration
from .view import ViewTransform

# Geometry & constants
from .algs.geometry import (
    Point,
    Waypoint,
    point_in_polygon,
    polygon_area,
    polygon_signed_area,
    union_area_approximate,
)
from .common.config import EditorConfig
from .common.constants import (
    DEFAULT_SEED,
    EPS_GEOM,
    RNG_SEEDS,
    TOL_NUM,
    seed_everywhere,
)
from .utils import VERBOSE, set_verbose

__all__ = [
    # facade
    "Availability",
    "Editor",
    "EditorConfig",
    # components
    "DrawingOutcome",
    "DrawingStateMachine",
    "Mode",
    "Obstacle",
    "ObstacleKind",
    "ObstacleRegistry",
    "ManualScheduler",
    "PlaybackController",
    "PlaybackStatus",
    "PathModel",
    "PathStats",
    "compute_stats",
    "format_duration",
    "ViewTransform",
    # geometry
    "Point",
    "Waypoint",
    "point_in_polygon",
    "polygon_area",
    "polygon_signed_area",
    "union_area_approximate",
    # constants
    "DEFAULT_SEED",
    "EPS_GEOM",
    "RNG_SEEDS",
    "TOL_NUM",
    "seed_everywhere",
    "VERBOSE",
    "set_verbose",
]
