import itertools

import pytest

from towerpath.classes.path_objects import Point
from towerpath.misc.math_utils import calculate_2d_distance
from towerpath.procedural.path_builder import RawPathBuilder
from towerpath.procedural.randomizer import SampleCache, SeededSampler
from towerpath.procedural.themes import BUILTIN_THEMES, SegmentRange, ThemeConfig


def test_build_connects_entry_to_exit(cyber) -> None:
    builder = RawPathBuilder(800, 600)
    result = builder.build((50, 300), (750, 300), cyber, SeededSampler(12345))

    assert not result.stopped_early
    assert result.points[0] == Point(50, 300)
    assert result.points[-1] == Point(750, 300)
    for a, b in zip(result.points, result.points[1:]):
        assert calculate_2d_distance(a, b) >= 1.0
    for p in result.points[1:-1]:
        assert builder.margin <= p.x <= 800 - builder.margin
        assert builder.margin <= p.y <= 600 - builder.margin


def test_build_is_independent_of_cache_warmth(cyber) -> None:
    builder = RawPathBuilder(800, 600)
    shared = SampleCache()
    first = builder.build((50, 300), (750, 300), cyber, SeededSampler(77, shared))
    second = builder.build((50, 300), (750, 300), cyber, SeededSampler(77, shared))
    cold = builder.build((50, 300), (750, 300), cyber, SeededSampler(77, SampleCache()))
    assert first.points == second.points == cold.points


def test_iteration_cap_returns_partial_path(cyber) -> None:
    builder = RawPathBuilder(800, 600, max_iterations=3)
    result = builder.build((50, 300), (750, 300), cyber, SeededSampler(1))
    assert result.stopped_early
    assert result.stop_reason == "max_iterations"
    assert result.iterations == 3
    assert result.warnings


def test_time_budget_is_checked_every_fifty_iterations(cyber) -> None:
    ticks = itertools.count()
    builder = RawPathBuilder(10000, 5000, max_iterations=10000, time_budget_ms=50.0, clock=lambda: next(ticks))
    result = builder.build((50, 2500), (9950, 2500), cyber, SeededSampler(5))
    assert result.stopped_early
    assert result.stop_reason == "time_budget"
    assert result.iterations == 50


def test_enhance_keeps_anchors_and_adds_points(cyber) -> None:
    builder = RawPathBuilder(800, 600)
    result = builder.enhance([(50, 300), (750, 300)], cyber, SeededSampler(3), segment_length=60.0)
    assert len(result.points) == 12
    assert result.points[0] == Point(50, 300)
    assert result.points[-1] == Point(750, 300)
    assert any(abs(p.y - 300) > 1e-9 for p in result.points[1:-1])


def test_enhance_low_complexity_theme_stays_on_the_line() -> None:
    calm = ThemeConfig("calm", 0.8, 0.2, SegmentRange(50, 70))
    result = RawPathBuilder(800, 600).enhance([(50, 300), (750, 300)], calm, SeededSampler(3))
    assert all(p.y == pytest.approx(300) for p in result.points)
    xs = [p.x for p in result.points]
    assert xs == sorted(xs)


def test_enhance_leaves_short_legs_alone() -> None:
    waypoints = [(100, 100), (180, 100), (180, 180)]
    result = RawPathBuilder(800, 600).enhance(waypoints, BUILTIN_THEMES["forest"], SeededSampler(3))
    assert [tuple(p) for p in result.points] == [(100.0, 100.0), (180.0, 100.0), (180.0, 180.0)]
