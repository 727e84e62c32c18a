import math

import pytest

from towerpath.procedural.structural_validation import (
    PROFILES,
    FailureMode,
    StructuralValidator,
    apply_overrides,
    path_complexity,
)


@pytest.fixture
def validator() -> StructuralValidator:
    return StructuralValidator(800, 600)


def test_straight_path_is_valid_but_lacks_variety(validator, straight_points) -> None:
    result = validator.validate(straight_points, "balanced")
    assert result.is_valid
    assert result.metrics["path_length"] == pytest.approx(600)
    assert any("Low path variety" in m for m in result.warning_messages)
    assert result.balance_score == pytest.approx(1 - 0.02 * len(result.warnings))


def test_strict_profile_rejects_sharp_turn(validator) -> None:
    points = [(100, 100), (300, 100), (120, 150)]
    result = validator.validate(points, "strict")
    assert not result.is_valid
    assert len(result.errors) == 1
    assert "Turn" in result.errors[0].message

    relaxed = validator.validate(points, "strict", overrides={"turn_angle": {"max_angle": 3.0}})
    assert relaxed.is_valid


def test_balanced_profile_downgrades_violations_to_warnings(validator) -> None:
    result = validator.validate([(100, 100), (400, 100), (150, 150)], "balanced")
    assert result.is_valid
    assert not result.errors
    assert any("Turn" in m for m in result.warning_messages)


@pytest.mark.parametrize("points", [
    [(100, 100)],
    [(100, 100), (100, 100), (300, 300)],
    [(100, 100), (900, 100)],
    [(100, 100), (math.inf, 100)],
])
def test_structural_defects_fail_every_profile(points) -> None:
    validator = StructuralValidator(800, 600)
    for name in PROFILES:
        result = validator.validate(points, name)
        assert not result.is_valid
        assert result.has_critical


def test_guided_profile_prefixes_guidance(validator) -> None:
    result = validator.validate([(100, 100), (400, 100), (150, 150)], "tutorial")
    assert result.is_valid
    assert any(m.startswith("Guidance:") for m in result.warning_messages)
    assert any(r.category == "learning" for r in result.recommendations)


def test_unknown_profile_uses_default(validator, straight_points) -> None:
    assert validator.validate(straight_points, "nope").profile == "balanced"


def test_override_operations() -> None:
    base = PROFILES["balanced"]
    changed = apply_overrides(base, {
        "turn_angle": {"sharp_turn_limit": {"operation": "add", "value": 2}},
        "segment": {"min_length": {"operation": "multiply", "value": 0.5}},
        "complexity": {"max_complexity": 0.6},
    })
    assert changed.turn_angle.sharp_turn_limit == 5
    assert changed.segment.min_length == pytest.approx(20)
    assert changed.complexity.max_complexity == pytest.approx(0.6)
    assert base.segment.min_length == 40

    with pytest.raises(KeyError):
        apply_overrides(base, {"colour": {"hue": 1}})
    with pytest.raises(ValueError):
        apply_overrides(base, {"segment": {"min_length": {"operation": "pow", "value": 2}}})


def test_theme_adjustment_is_relative(validator) -> None:
    profile = validator.get_profile("balanced", theme="cyber")
    assert profile.segment.min_length == pytest.approx(50)
    assert profile.turn_angle.sharp_turn_limit == 4
    assert profile.failure_mode == FailureMode.WARNING


def test_level_override_and_stats(validator, straight_points) -> None:
    validator.set_level_override(9, {"path_length": {"min": 650}})
    result = validator.validate(straight_points, "strict", level_id=9)
    assert any("below minimum 650" in m for m in result.error_messages)

    with pytest.raises(KeyError):
        validator.set_level_override(9, {"path_length": {"length": 1}})

    stats = validator.stats.to_dict()
    assert stats["total_validations"] == 1
    assert stats["hard_failures"] == 1
    assert stats["profile_usage"]["strict"] == 1


def test_complexity_of_straight_line_is_zero(straight_points) -> None:
    assert path_complexity(straight_points) == pytest.approx(0.0)
    assert path_complexity([(0, 0), (1, 1)]) == 0.0
