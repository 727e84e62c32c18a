import math

import pytest

from towerpath.classes.path_objects import PathMode, Point
from towerpath.procedural.levels import LevelConfigTable, LevelPathConfig
from towerpath.procedural.validation import InputValidationError


def test_unlisted_level_uses_default() -> None:
    table = LevelConfigTable()
    config = table.get(99)
    assert config.level_id == 99
    assert config.path_mode == PathMode.HYBRID
    assert 99 not in table


def test_positions_scale_with_canvas() -> None:
    table = LevelConfigTable()
    assert table.get(1).entry_point(800, 600) == Point(50, 300)
    assert table.get(1).exit_point(1600, 1200) == Point(1500, 600)

    static = table.get(2).static_points(800, 600)
    assert len(static) == 8
    assert table.get(2).entry_point(800, 600) == static[0]


def test_constraints_become_validation_overrides() -> None:
    overrides = LevelConfigTable().get(1).validation_overrides()
    assert overrides == {
        "turn_angle": {"max_angle": math.pi * 0.6},
        "segment": {"min_length": 40},
        "complexity": {"max_complexity": 0.5},
    }


def test_disabling_generation_forces_static() -> None:
    table = LevelConfigTable()
    assert table.is_generation_disabled(2)
    assert not table.is_generation_disabled(5)
    config = table.set_generation_enabled(5, False)
    assert config.path_mode == PathMode.STATIC
    assert table.is_generation_disabled(5)


def test_export_import_level() -> None:
    source = LevelConfigTable()
    exported = source.export_level(10)
    target = LevelConfigTable(levels={})
    config = target.import_level(exported)
    assert config.level_id == 10
    assert config.path_mode == PathMode.STATIC
    assert config.static_path == source.get(10).static_path


@pytest.mark.parametrize("data", [
    {"path_mode": "sideways"},
    {"entry": [1.5, 0.5]},
    {"colour": "red"},
])
def test_bad_level_records_are_rejected(data) -> None:
    with pytest.raises(InputValidationError):
        LevelPathConfig.from_dict(data, level_id=4)


def test_import_requires_level_id() -> None:
    with pytest.raises(InputValidationError):
        LevelConfigTable().import_level({"configuration": {}})
    with pytest.raises(InputValidationError):
        LevelConfigTable().set(LevelPathConfig())


def test_table_from_hand_written_mapping() -> None:
    table = LevelConfigTable.from_dict({
        "level_3": {"path_mode": "dynamic", "theme": "forest"},
        "default": {"theme": "urban"},
    })
    assert table.level_ids() == [3]
    assert table.get(3).theme == "forest"
    assert table.get(8).theme == "urban"
