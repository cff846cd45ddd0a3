from __future__ import annotations

from typing import List, Tuple

import pytest
from hypothesis import HealthCheck, settings

from coverage_editor.common.constants import (
    EPS_GEOM,
    RNG_SEEDS,
    TOL_NUM,
    seed_everywhere,
)
from coverage_editor.editor import Editor
from coverage_editor.playback import ManualScheduler


TEST_SEED = RNG_SEEDS.get("tests", 1337)
seed_everywhere(TEST_SEED)

settings.register_profile(
    "ci",
    max_examples=60,
    deadline=None,
    print_blob=True,
    suppress_health_check=(
        HealthCheck.filter_too_much,
        HealthCheck.too_slow,
    ),
)
settings.load_profile("ci")


def pytest_configure(config: pytest.Config) -> None:  # pragma: no cover
    config.addinivalue_line("markers", "slow: mark test as slow")


@pytest.fixture(scope="session")
def tol() -> float:
    return TOL_NUM


@pytest.fixture(scope="session")
def eps() -> float:
    return EPS_GEOM


@pytest.fixture
def square() -> List[Tuple[float, float]]:
    return [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def editor() -> Editor:
    return Editor(viewport=(800, 600), record_events=True)
