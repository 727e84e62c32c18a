"""
Visual themes and the parameters they impose on path generation.

A theme is either one of the built-in names or a custom record; both resolve
to an immutable ThemeConfig before any generation starts.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Mapping, Optional, Union

from towerpath.misc.validation_framework import create_theme_validator
from .validation import ThemeConfigurationError


@dataclass(frozen=True)
class SegmentRange:
    """Allowed step length of the raw path builder, in pixels."""
    min: float
    max: float

    @property
    def nominal(self) -> float:
        return (self.min + self.max) / 2.0


@dataclass(frozen=True)
class ThemeConfig:
    """Resolved theme parameters. Immutable once resolved."""
    name: str
    straight_bias: float      # 0 = wandering, 1 = straight line
    curve_complexity: float   # scales heading perturbation
    segment_length: SegmentRange
    obstacle_density: float = 0.5
    path_width: float = 40.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


BUILTIN_THEMES: Dict[str, ThemeConfig] = {
    "urban": ThemeConfig("urban", 0.3, 0.6, SegmentRange(45.0, 75.0), obstacle_density=0.6, path_width=40.0),
    "forest": ThemeConfig("forest", 0.1, 0.8, SegmentRange(40.0, 65.0), obstacle_density=0.7, path_width=35.0),
    "mountain": ThemeConfig("mountain", 0.4, 0.5, SegmentRange(55.0, 85.0), obstacle_density=0.5, path_width=45.0),
    "cyber": ThemeConfig("cyber", 0.6, 0.9, SegmentRange(50.0, 70.0), obstacle_density=0.4, path_width=50.0),
}

DEFAULT_THEME = "cyber"

ThemeInput = Union[str, ThemeConfig, Mapping[str, Any], None]


class ThemeResolver:
    """
    Resolves a theme name or custom record into a ThemeConfig.

    Custom records are mappings with ``straight_bias``, ``curve_complexity``
    and ``segment_length`` (a ``{"min", "max"}`` mapping or a two item
    sequence), plus optional ``name``, ``obstacle_density`` and ``path_width``.
    """

    def __init__(self, themes: Optional[Mapping[str, ThemeConfig]] = None, default: str = DEFAULT_THEME):
        self._themes: Dict[str, ThemeConfig] = dict(themes or BUILTIN_THEMES)
        if default not in self._themes:
            raise ThemeConfigurationError(f"Default theme '{default}' is not registered")
        self.default = default
        self._validator = create_theme_validator()

    def available(self) -> List[str]:
        return sorted(self._themes)

    def default_theme(self) -> ThemeConfig:
        return self._themes[self.default]

    def register(self, theme: Union[ThemeConfig, Mapping[str, Any]]) -> ThemeConfig:
        """Add (or replace) a named theme."""
        config = theme if isinstance(theme, ThemeConfig) else self.from_record(theme)
        self._check_config(config)
        self._themes[config.name] = config
        return config

    def resolve(self, theme: ThemeInput) -> ThemeConfig:
        """
        Resolve a theme reference.

        Raises:
            ThemeConfigurationError: unknown name or invalid custom record
        """
        if theme is None:
            return self.default_theme()
        if isinstance(theme, ThemeConfig):
            self._check_config(theme)
            return theme
        if isinstance(theme, str):
            key = theme.strip().lower()
            if key not in self._themes:
                raise ThemeConfigurationError(
                    f"Unknown theme '{theme}'. Available: {', '.join(self.available())}",
                    {"theme": theme}
                )
            return self._themes[key]
        if isinstance(theme, Mapping):
            return self.from_record(theme)
        raise ThemeConfigurationError(
            f"Theme must be a name, ThemeConfig or mapping, got {type(theme).__name__}",
            {"theme": repr(theme)}
        )

    def from_record(self, record: Mapping[str, Any]) -> ThemeConfig:
        data = dict(record)
        segment = data.get("segment_length")
        if isinstance(segment, (list, tuple)) and len(segment) == 2:
            data["segment_length"] = {"min": segment[0], "max": segment[1]}
        elif isinstance(segment, Mapping):
            data["segment_length"] = dict(segment)

        report = self._validator.validate(data)
        if not report.is_valid:
            raise ThemeConfigurationError(
                f"Invalid custom theme: {'; '.join(report.error_messages())}",
                {"theme": data.get("name", "custom")}
            )

        config = ThemeConfig(
            name=str(data.get("name", "custom")),
            straight_bias=float(data["straight_bias"]),
            curve_complexity=float(data["curve_complexity"]),
            segment_length=SegmentRange(float(data["segment_length"]["min"]), float(data["segment_length"]["max"])),
            obstacle_density=float(data.get("obstacle_density", 0.5)),
            path_width=float(data.get("path_width", 40.0)),
        )
        self._check_config(config)
        return config

    @staticmethod
    def _check_config(config: ThemeConfig):
        for name in ("straight_bias", "curve_complexity", "obstacle_density"):
            value = getattr(config, name)
            if not 0.0 <= value <= 1.0:
                raise ThemeConfigurationError(f"Theme '{config.name}' {name} {value} outside 0..1")
        seg = config.segment_length
        if not 0 < seg.min <= seg.max <= 500:
            raise ThemeConfigurationError(
                f"Theme '{config.name}' segment range {seg.min}..{seg.max} must satisfy 0 < min <= max <= 500"
            )
