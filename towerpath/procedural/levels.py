"""
Per-level path configuration.

Positions in a level configuration are fractions of the canvas so the same
table works for any canvas size. ``LevelConfigTable.get`` never fails: levels
without an entry use the default configuration.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from towerpath.classes.path_objects import PathMode, Point
from towerpath.misc.validation_framework import create_level_config_validator
from .validation import InputValidationError

Fraction2D = Tuple[float, float]

DEFAULT_ENTRY: Fraction2D = (0.0625, 0.5)
DEFAULT_EXIT: Fraction2D = (0.9375, 0.5)


@dataclass
class LevelPathConfig:
    """How one level's route is produced and judged."""
    level_id: Optional[int] = None
    path_mode: PathMode = PathMode.HYBRID
    theme: str = "cyber"
    allow_generation: bool = True
    preserve_layout: bool = False
    static_path: Optional[List[Fraction2D]] = None
    entry: Fraction2D = DEFAULT_ENTRY
    exit: Fraction2D = DEFAULT_EXIT
    # max_turn_angle / min_segment_length / max_complexity
    constraints: Dict[str, float] = field(default_factory=dict)
    # target_difficulty / allow_variations / max_path_variations
    balance_settings: Dict[str, Any] = field(default_factory=dict)
    validation_profile: Optional[str] = None
    design_notes: str = ""

    @staticmethod
    def _scale(fraction: Fraction2D, width: float, height: float) -> Point:
        return Point(fraction[0] * width, fraction[1] * height)

    def entry_point(self, width: float, height: float) -> Point:
        if self.static_path:
            return self._scale(self.static_path[0], width, height)
        return self._scale(self.entry, width, height)

    def exit_point(self, width: float, height: float) -> Point:
        if self.static_path:
            return self._scale(self.static_path[-1], width, height)
        return self._scale(self.exit, width, height)

    def static_points(self, width: float, height: float) -> Optional[List[Point]]:
        if not self.static_path:
            return None
        return [self._scale(p, width, height) for p in self.static_path]

    @property
    def target_difficulty(self) -> Optional[float]:
        return self.balance_settings.get("target_difficulty")

    def validation_overrides(self) -> Dict[str, Dict[str, Any]]:
        """Translate the level's constraints into structural validator overrides."""
        overrides: Dict[str, Dict[str, Any]] = {}
        if "max_turn_angle" in self.constraints:
            overrides.setdefault("turn_angle", {})["max_angle"] = self.constraints["max_turn_angle"]
        if "min_segment_length" in self.constraints:
            overrides.setdefault("segment", {})["min_length"] = self.constraints["min_segment_length"]
        if "max_complexity" in self.constraints:
            overrides.setdefault("complexity", {})["max_complexity"] = self.constraints["max_complexity"]
        return overrides

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path_mode": self.path_mode.value,
            "theme": self.theme,
            "allow_generation": self.allow_generation,
            "preserve_layout": self.preserve_layout,
            "static_path": [list(p) for p in self.static_path] if self.static_path else None,
            "entry": list(self.entry),
            "exit": list(self.exit),
            "constraints": dict(self.constraints),
            "balance_settings": dict(self.balance_settings),
            "validation_profile": self.validation_profile,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], level_id: Optional[int] = None) -> "LevelPathConfig":
        """
        Build a level configuration from plain data.

        Raises:
            InputValidationError: unknown fields, bad anchors or an unknown path mode
        """
        values = {k: v for k, v in data.items() if k != "design_notes"}
        for key in ("entry", "exit"):
            if isinstance(values.get(key), list):
                values[key] = tuple(values[key])
        report = create_level_config_validator().validate(values)
        if not report.is_valid or report.has_warnings:
            raise InputValidationError(
                f"Invalid level configuration: {'; '.join(report.error_messages()) or report.get_summary()}",
                {"level_id": level_id}
            )
        try:
            mode = PathMode.from_value(values.get("path_mode", PathMode.HYBRID))
        except ValueError as exc:
            raise InputValidationError(str(exc), {"level_id": level_id}) from exc

        static_path = values.get("static_path")
        return cls(
            level_id=level_id,
            path_mode=mode,
            theme=values.get("theme", "cyber"),
            allow_generation=bool(values.get("allow_generation", True)),
            preserve_layout=bool(values.get("preserve_layout", False)),
            static_path=[tuple(map(float, p)) for p in static_path] if static_path else None,
            entry=tuple(map(float, values.get("entry", DEFAULT_ENTRY))),
            exit=tuple(map(float, values.get("exit", DEFAULT_EXIT))),
            constraints=dict(values.get("constraints") or {}),
            balance_settings=dict(values.get("balance_settings") or {}),
            validation_profile=values.get("validation_profile"),
            design_notes=data.get("design_notes", ""),
        )


def _default_levels() -> Dict[int, LevelPathConfig]:
    return {
        1: LevelPathConfig(
            1, PathMode.HYBRID, "cyber",
            constraints={"max_turn_angle": math.pi * 0.6, "min_segment_length": 40, "max_complexity": 0.5},
            balance_settings={"target_difficulty": 0.2, "allow_variations": True, "max_path_variations": 1},
            design_notes="Tutorial level - gentle route across the middle of the field",
        ),
        2: LevelPathConfig(
            2, PathMode.STATIC, "cyber", allow_generation=False, preserve_layout=True,
            static_path=[(0.0417, 0.6667), (0.1667, 0.6667), (0.1667, 0.3333), (0.3333, 0.3333),
                         (0.3333, 0.6667), (0.5, 0.6667), (0.6667, 0.6667), (0.9583, 0.6667)],
            constraints={"max_turn_angle": math.pi / 2, "min_segment_length": 100, "max_complexity": 0.3},
            balance_settings={"target_difficulty": 0.3, "allow_variations": False, "max_path_variations": 0},
            design_notes="Basic turns introduction",
        ),
        3: LevelPathConfig(
            3, PathMode.HYBRID, "cyber",
            constraints={"max_turn_angle": math.pi * 0.6, "min_segment_length": 50, "max_complexity": 0.4},
            balance_settings={"target_difficulty": 0.38, "allow_variations": True, "max_path_variations": 2},
        ),
        4: LevelPathConfig(
            4, PathMode.HYBRID, "cyber",
            constraints={"max_turn_angle": math.pi * 0.7, "min_segment_length": 45, "max_complexity": 0.5},
            balance_settings={"target_difficulty": 0.46, "allow_variations": True, "max_path_variations": 3},
        ),
        5: LevelPathConfig(
            5, PathMode.HYBRID, "urban",
            constraints={"max_turn_angle": math.pi * 0.75, "min_segment_length": 40, "max_complexity": 0.6},
            balance_settings={"target_difficulty": 0.54, "allow_variations": True, "max_path_variations": 3},
        ),
        6: LevelPathConfig(
            6, PathMode.DYNAMIC, "urban",
            constraints={"max_turn_angle": math.pi * 0.8, "min_segment_length": 40, "max_complexity": 0.65},
            balance_settings={"target_difficulty": 0.62, "allow_variations": True, "max_path_variations": 4},
        ),
        7: LevelPathConfig(
            7, PathMode.DYNAMIC, "forest",
            constraints={"max_turn_angle": math.pi * 0.85, "min_segment_length": 35, "max_complexity": 0.7},
            balance_settings={"target_difficulty": 0.7, "allow_variations": True, "max_path_variations": 4},
        ),
        10: LevelPathConfig(
            10, PathMode.STATIC, "cyber", allow_generation=False, preserve_layout=True,
            static_path=[(0.0417, 0.5), (0.15, 0.4167), (0.2667, 0.3333), (0.375, 0.5), (0.4833, 0.6667),
                         (0.6, 0.5833), (0.7167, 0.4167), (0.8333, 0.5), (0.9583, 0.5)],
            constraints={"max_turn_angle": math.pi * 0.6, "min_segment_length": 60, "max_complexity": 0.6},
            balance_settings={"target_difficulty": 0.78, "allow_variations": False, "max_path_variations": 0},
            design_notes="Boss level - carefully designed path for a specific challenge",
        ),
        15: LevelPathConfig(
            15, PathMode.DYNAMIC, "mountain",
            constraints={"max_turn_angle": math.pi * 0.9, "min_segment_length": 40, "max_complexity": 0.85},
            balance_settings={"target_difficulty": 0.86, "allow_variations": True, "max_path_variations": 5},
        ),
        20: LevelPathConfig(
            20, PathMode.DYNAMIC, "cyber",
            constraints={"max_turn_angle": math.pi * 0.95, "min_segment_length": 35, "max_complexity": 0.95},
            balance_settings={"target_difficulty": 0.95, "allow_variations": True, "max_path_variations": 5},
        ),
    }


class LevelConfigTable:
    """Lookup of level configurations with a default entry for unlisted levels."""

    def __init__(self, levels: Optional[Dict[int, LevelPathConfig]] = None,
                 default: Optional[LevelPathConfig] = None):
        self._levels: Dict[int, LevelPathConfig] = dict(_default_levels() if levels is None else levels)
        self.default = default or LevelPathConfig(
            constraints={"max_turn_angle": math.pi * 0.6, "min_segment_length": 50, "max_complexity": 0.7},
            balance_settings={"allow_variations": True, "max_path_variations": 3},
        )

    def __contains__(self, level_id: int) -> bool:
        return level_id in self._levels

    def level_ids(self) -> List[int]:
        return sorted(self._levels)

    def get(self, level_id: int) -> LevelPathConfig:
        config = self._levels.get(level_id)
        if config is None:
            return replace(self.default, level_id=level_id)
        return config

    def set(self, config: LevelPathConfig):
        if config.level_id is None:
            raise InputValidationError("Level configuration needs a level id")
        self._levels[config.level_id] = config

    def is_generation_disabled(self, level_id: int) -> bool:
        config = self.get(level_id)
        return not config.allow_generation or config.preserve_layout

    def set_generation_enabled(self, level_id: int, enabled: bool, preserve_layout: bool = False) -> LevelPathConfig:
        config = replace(self.get(level_id), allow_generation=enabled, preserve_layout=preserve_layout)
        if not enabled:
            config = replace(config, path_mode=PathMode.STATIC)
        self._levels[level_id] = config
        return config

    def export_level(self, level_id: int) -> Dict[str, Any]:
        return {"level_id": level_id, "configuration": self.get(level_id).to_dict()}

    def import_level(self, data: Dict[str, Any]) -> LevelPathConfig:
        if "level_id" not in data or "configuration" not in data:
            raise InputValidationError("Level export must contain 'level_id' and 'configuration'")
        config = LevelPathConfig.from_dict(data["configuration"], level_id=int(data["level_id"]))
        self.set(config)
        return config

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {str(level_id): cfg.to_dict() for level_id, cfg in sorted(self._levels.items())}
        data["default"] = self.default.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelConfigTable":
        """Build a table from ``to_dict`` output or a hand-written mapping keyed by level id."""
        levels = {}
        default = None
        for key, value in data.items():
            if key == "default":
                default = LevelPathConfig.from_dict(value)
                continue
            level_id = int(str(key).replace("level_", ""))
            levels[level_id] = LevelPathConfig.from_dict(value, level_id=level_id)
        return cls(levels, default)
