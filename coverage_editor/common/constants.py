from __future__ import annotations

import os
import random
from typing import Dict

import numpy as np

# Geometry tolerance: retain source of truth from the geometry module.
from coverage_editor.algs.geometry import EPS as _GEOM_EPS
from coverage_editor.algs.geometry import UNION_CELL_SIZE as _GEOM_CELL

EPS_GEOM: float = _GEOM_EPS
TOL_NUM: float = 1e-6
DEFAULT_SEED: int = 1337

RNG_SEEDS: Dict[str, int] = {
    "tests": DEFAULT_SEED,
    "demo": 4242,
}

# World units are screen pixels at scale 1.0.
UNITS_PER_METER: float = 50.0

# View transform
MIN_SCALE: float = 0.1
MAX_SCALE: float = 5.0
ZOOM_STEP: float = 1.2

UNION_CELL_SIZE: float = _GEOM_CELL

# Mock stripe planner
STRIPE_SPACING: float = 40.0
STRIPE_MARGIN: float = 20.0

# Statistics
AVERAGE_SPEED_MPS: float = 0.5

# Playback timing
DEFAULT_SPEED: int = 5
MIN_SPEED: int = 1
MAX_SPEED: int = 10
BASE_TICK_DELAY_MS: float = 500.0
TICK_DELAY_PER_SPEED_MS: float = 45.0
MIN_TICK_DELAY_MS: float = 50.0
SPEED_TO_MPS: float = 0.1

SNAPSHOT_VERSION: str = "1.0"


def seed_everywhere(seed: int) -> None:
    """Seed all supported RNG backends deterministically."""
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)

    np.random.seed(seed)


__all__ = [
    "EPS_GEOM",
    "TOL_NUM",
    "DEFAULT_SEED",
    "RNG_SEEDS",
    "UNITS_PER_METER",
    "MIN_SCALE",
    "MAX_SCALE",
    "ZOOM_STEP",
    "UNION_CELL_SIZE",
    "STRIPE_SPACING",
    "STRIPE_MARGIN",
    "AVERAGE_SPEED_MPS",
    "DEFAULT_SPEED",
    "MIN_SPEED",
    "MAX_SPEED",
    "BASE_TICK_DELAY_MS",
    "TICK_DELAY_PER_SPEED_MS",
    "MIN_TICK_DELAY_MS",
    "SPEED_TO_MPS",
    "SNAPSHOT_VERSION",
    "seed_everywhere",
]
