"""Tunable editor settings bundled into one immutable record."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from coverage_editor.common import constants as C


@dataclass(frozen=True, slots=True)
class EditorConfig:
    units_per_meter: float = C.UNITS_PER_METER
    min_scale: float = C.MIN_SCALE
    max_scale: float = C.MAX_SCALE
    zoom_step: float = C.ZOOM_STEP
    union_cell_size: float = C.UNION_CELL_SIZE
    stripe_spacing: float = C.STRIPE_SPACING
    stripe_margin: float = C.STRIPE_MARGIN
    average_speed_mps: float = C.AVERAGE_SPEED_MPS
    default_speed: int = C.DEFAULT_SPEED
    min_speed: int = C.MIN_SPEED
    max_speed: int = C.MAX_SPEED
    base_tick_delay_ms: float = C.BASE_TICK_DELAY_MS
    tick_delay_per_speed_ms: float = C.TICK_DELAY_PER_SPEED_MS
    min_tick_delay_ms: float = C.MIN_TICK_DELAY_MS
    speed_to_mps: float = C.SPEED_TO_MPS

    def __post_init__(self) -> None:
        if self.units_per_meter <= 0.0:
            raise ValueError("units_per_meter must be positive")
        if self.min_scale <= 0.0:
            raise ValueError("min_scale must be positive")
        if self.min_scale > self.max_scale:
            raise ValueError("min_scale must not exceed max_scale")
        if self.zoom_step <= 1.0:
            raise ValueError("zoom_step must be greater than 1")
        if self.union_cell_size <= 0.0:
            raise ValueError("union_cell_size must be positive")
        if self.stripe_spacing <= 0.0:
            raise ValueError("stripe_spacing must be positive")
        if self.average_speed_mps <= 0.0:
            raise ValueError("average_speed_mps must be positive")
        if self.min_tick_delay_ms <= 0.0:
            raise ValueError("min_tick_delay_ms must be positive")
        if not self.min_speed <= self.default_speed <= self.max_speed:
            raise ValueError(
                f"default_speed {self.default_speed} outside [{self.min_speed}, {self.max_speed}]"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EditorConfig":
        """Build a config from a mapping, ignoring keys that are not settings."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            kwargs[key] = int(value) if key.endswith("_speed") else float(value)
        return cls(**kwargs)

    @classmethod
    def load(cls, path: str | Path) -> "EditorConfig":
        with Path(path).open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"config file {path} must contain a JSON object")
        return cls.from_mapping(data)

    def with_overrides(self, **changes: Any) -> "EditorConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["EditorConfig"]
