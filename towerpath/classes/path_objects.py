# towerpath/classes/path_objects.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterable, NamedTuple, Optional, Sequence, Tuple

from towerpath.classes.reports import ValidationResult


class PathMode(Enum):
    """How a level's route is produced."""
    STATIC = "static"    # designer-authored waypoints, used as-is
    HYBRID = "hybrid"    # designer waypoints enhanced with themed variation
    DYNAMIC = "dynamic"  # fully procedural between random edge anchors

    @classmethod
    def from_value(cls, value: "PathMode | str") -> "PathMode":
        """Accept an enum member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid path mode {value!r}; expected one of: {valid}")


class FallbackTier(Enum):
    """Which stage of the recovery chain produced a path."""
    NONE = "none"        # normal generation succeeded
    SIMPLE = "simple"    # jittered straight-line fallback
    MINIMAL = "minimal"  # entry and exit only


class Point(NamedTuple):
    """A waypoint in canvas pixels."""
    x: float
    y: float

    def distance_to(self, other: Sequence[float]) -> float:
        return math.hypot(other[0] - self.x, other[1] - self.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def coerce(cls, value: Any) -> "Point":
        """Build a Point from a Point, an ``(x, y)`` pair or an ``{"x", "y"}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))


@dataclass(frozen=True)
class PathBounds:
    """Axis-aligned bounding box of a path."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> "PathBounds":
        xs, ys = [], []
        for x, y in points:
            xs.append(float(x))
            ys.append(float(y))
        if not xs:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(min(xs), min(ys), max(xs), max(ys))

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data.update(width=self.width, height=self.height)
        return data


@dataclass
class PathMetadata:
    """Provenance and summary figures attached to every generated path."""
    seed: int
    theme_name: str
    path_mode: PathMode
    fallback_tier: FallbackTier = FallbackTier.NONE
    retry_count: int = 0
    generation_time_ms: float = 0.0
    total_length: float = 0.0
    complexity: float = 0.0
    bounds: PathBounds = field(default_factory=lambda: PathBounds(0.0, 0.0, 0.0, 0.0))
    level_id: Optional[int] = None
    point_count: int = 0
    iterations: int = 0
    generated_at: float = 0.0
    used_static_path: bool = False
    trigger_reason: Optional[str] = None
    fallback_reason: Optional[str] = None
    generator_version: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["path_mode"] = self.path_mode.value
        data["fallback_tier"] = self.fallback_tier.value
        data["bounds"] = self.bounds.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathMetadata":
        values = dict(data)
        values["path_mode"] = PathMode.from_value(values["path_mode"])
        values["fallback_tier"] = FallbackTier(values.get("fallback_tier", FallbackTier.NONE.value))
        bounds = values.get("bounds")
        if isinstance(bounds, dict):
            values["bounds"] = PathBounds(bounds["min_x"], bounds["min_y"], bounds["max_x"], bounds["max_y"])
        return cls(**values)


@dataclass
class GeneratedPath:
    """An accepted enemy route: ordered waypoints from entry to exit."""
    points: Tuple[Point, ...]
    metadata: PathMetadata
    validation: ValidationResult = field(default_factory=ValidationResult)

    def __post_init__(self):
        self.points = tuple(Point.coerce(p) for p in self.points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def entry(self) -> Point:
        return self.points[0]

    @property
    def exit(self) -> Point:
        return self.points[-1]

    @property
    def fallback_tier(self) -> FallbackTier:
        return self.metadata.fallback_tier

    def as_tuples(self) -> list:
        return [(p.x, p.y) for p in self.points]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation used by path export."""
        return {
            "points": [p.to_dict() for p in self.points],
            "metadata": self.metadata.to_dict(),
            "validation": self.validation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedPath":
        """Rebuild a path from ``to_dict`` output. Validation details are not restored."""
        return cls(
            points=tuple(Point.coerce(p) for p in data["points"]),
            metadata=PathMetadata.from_dict(data["metadata"]),
        )
