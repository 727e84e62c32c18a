from __future__ import annotations

import pytest

from towerpath.classes.path_objects import Point
from towerpath.procedural.config import GeneratorConfig
from towerpath.procedural.engine import PathGenerationEngine
from towerpath.procedural.randomizer import SampleCache, SeededSampler
from towerpath.procedural.themes import BUILTIN_THEMES, ThemeConfig

CANVAS = (800.0, 600.0)


@pytest.fixture
def engine() -> PathGenerationEngine:
    return PathGenerationEngine(*CANVAS)


@pytest.fixture
def make_engine():
    """Engine factory taking GeneratorConfig overrides."""
    def factory(**overrides) -> PathGenerationEngine:
        return PathGenerationEngine(*CANVAS, config=GeneratorConfig.diagnostic(**overrides))
    return factory


@pytest.fixture
def cyber() -> ThemeConfig:
    return BUILTIN_THEMES["cyber"]


@pytest.fixture
def sampler() -> SeededSampler:
    return SeededSampler(12345, SampleCache())


@pytest.fixture
def straight_points() -> list:
    return [Point(100.0 + 100.0 * i, 300.0) for i in range(7)]
