import math

import pytest

from towerpath.classes.path_objects import Point
from towerpath.procedural.fallback import FallbackChain
from towerpath.procedural.randomizer import SeededSampler
from towerpath.procedural.validation import GenerationError, InputValidationError


def test_simple_path_is_jittered_line() -> None:
    points = FallbackChain(800, 600).simple_path((50, 300), (750, 300), SeededSampler(12345))
    assert len(points) == 7
    assert points[0] == Point(50, 300)
    assert points[-1] == Point(750, 300)
    assert all(abs(p.y - 300) <= 10 for p in points)


def test_simple_path_rejects_bad_endpoints() -> None:
    chain = FallbackChain(800, 600)
    with pytest.raises(InputValidationError):
        chain.simple_path((50, 300), (900, 300), SeededSampler(1))
    with pytest.raises(GenerationError):
        chain.simple_path((50, 300), (50, 300), SeededSampler(1))


@pytest.mark.parametrize("start,end", [
    ((50, 300), (750, 300)),
    ((math.nan, 300), (750, 300)),
    ("entry", None),
    ((-100, 5000), (-100, 5000)),
])
def test_minimal_path_always_returns_two_points(start, end) -> None:
    points = FallbackChain(800, 600).minimal_path(start, end)
    assert len(points) == 2
    for p in points:
        assert 0 <= p.x <= 800 and 0 <= p.y <= 600
    assert points[0].distance_to(points[1]) >= 1.0
