import dataclasses

import pytest

from towerpath.classes.reports import ErrorKind
from towerpath.procedural.themes import BUILTIN_THEMES, SegmentRange, ThemeConfig, ThemeResolver
from towerpath.procedural.validation import ThemeConfigurationError


def test_builtin_themes_resolve_by_name() -> None:
    resolver = ThemeResolver()
    assert resolver.available() == ["cyber", "forest", "mountain", "urban"]
    assert resolver.resolve(" Urban ") is BUILTIN_THEMES["urban"]
    assert resolver.resolve(None).name == "cyber"


def test_unknown_theme_is_configuration_error() -> None:
    with pytest.raises(ThemeConfigurationError) as excinfo:
        ThemeResolver().resolve("lava")
    assert excinfo.value.kind == ErrorKind.CONFIGURATION
    assert "Available" in str(excinfo.value)


def test_custom_record_is_validated_and_frozen() -> None:
    theme = ThemeResolver().resolve({
        "name": "canyon",
        "straight_bias": 0.5,
        "curve_complexity": 0.4,
        "segment_length": [40, 60],
    })
    assert theme.segment_length == SegmentRange(40.0, 60.0)
    assert theme.segment_length.nominal == pytest.approx(50.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        theme.straight_bias = 0.9


@pytest.mark.parametrize("record", [
    {"straight_bias": 1.5, "curve_complexity": 0.4, "segment_length": {"min": 40, "max": 60}},
    {"straight_bias": 0.5, "segment_length": {"min": 40, "max": 60}},
    {"straight_bias": 0.5, "curve_complexity": 0.4, "segment_length": {"min": 80, "max": 60}},
    {"straight_bias": 0.5, "curve_complexity": 0.4, "segment_length": {"min": 40, "max": 600}},
])
def test_invalid_custom_records(record) -> None:
    with pytest.raises(ThemeConfigurationError):
        ThemeResolver().resolve(record)


def test_register_and_reject_bad_config() -> None:
    resolver = ThemeResolver()
    resolver.register(ThemeConfig("desert", 0.7, 0.3, SegmentRange(60, 90)))
    assert resolver.resolve("desert").straight_bias == pytest.approx(0.7)

    with pytest.raises(ThemeConfigurationError):
        resolver.resolve(ThemeConfig("broken", 0.5, 0.5, SegmentRange(0, 10)))
    with pytest.raises(ThemeConfigurationError):
        resolver.resolve(42)
