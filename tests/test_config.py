from __future__ import annotations

import json

import pytest

from coverage_editor.common.config import EditorConfig
from coverage_editor.common.constants import MAX_SCALE, MIN_SCALE, UNITS_PER_METER


def test_defaults_match_constants() -> None:
    config = EditorConfig()
    assert config.units_per_meter == UNITS_PER_METER
    assert (config.min_scale, config.max_scale) == (MIN_SCALE, MAX_SCALE)
    assert config.default_speed == 5


def test_from_mapping_ignores_unknown_keys() -> None:
    config = EditorConfig.from_mapping({"stripe_spacing": "25", "max_speed": 8.0, "colour": "red"})
    assert config.stripe_spacing == 25.0
    assert config.max_speed == 8
    assert isinstance(config.max_speed, int)


@pytest.mark.parametrize(
    "overrides",
    [
        {"min_scale": 0.0},
        {"min_scale": 6.0, "max_scale": 5.0},
        {"union_cell_size": -1.0},
        {"average_speed_mps": 0.0},
        {"min_tick_delay_ms": 0.0},
        {"default_speed": 11},
        {"zoom_step": 1.0},
    ],
)
def test_invalid_values_raise(overrides) -> None:
    with pytest.raises(ValueError):
        EditorConfig(**overrides)


def test_load_from_file(tmp_path) -> None:
    path = tmp_path / "editor.json"
    path.write_text(json.dumps({"union_cell_size": 1.0}), encoding="utf-8")
    assert EditorConfig.load(path).union_cell_size == 1.0

    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        EditorConfig.load(path)


def test_overrides_and_dict() -> None:
    config = EditorConfig().with_overrides(stripe_margin=5.0)
    assert config.to_dict()["stripe_margin"] == 5.0
    assert EditorConfig.from_mapping(config.to_dict()) == config
