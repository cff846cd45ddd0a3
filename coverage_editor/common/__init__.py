"""Shared constants and configuration."""

from .config import EditorConfig
from .constants import (
    DEFAULT_SEED,
    EPS_GEOM,
    RNG_SEEDS,
    TOL_NUM,
    UNITS_PER_METER,
    seed_everywhere,
)

__all__ = [
    "EditorConfig",
    "DEFAULT_SEED",
    "EPS_GEOM",
    "RNG_SEEDS",
    "TOL_NUM",
    "UNITS_PER_METER",
    "seed_everywhere",
]
