"""
Structural validation of candidate paths.

Checks run in order: structure, total length, turn angles, segment lengths,
complexity. Structural defects (too few points, non-finite or off-canvas
coordinates, coincident consecutive points) always fail the path. Every other
violation is an error or a warning depending on the profile's failure mode.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from towerpath.classes.reports import ErrorKind, Recommendation, ValidationResult
from towerpath.misc.logger import create_logger
from towerpath.misc.math_utils import as_array, coefficient_of_variation, segment_lengths, turn_angles
from towerpath.misc.validation_framework import ValidationSeverity

SHARP_TURN_ANGLE = math.pi / 2

_INTEGER_LIMITS = {"sharp_turn_limit", "consecutive_sharp_turns"}


class FailureMode(Enum):
    HARD = "hard"              # violations are errors
    WARNING = "warning"        # violations are warnings
    ADVISORY = "advisory"      # violations are warnings, reported as advice
    PERMISSIVE = "permissive"  # only structural defects matter
    GUIDED = "guided"          # violations are warnings with designer guidance


@dataclass(frozen=True)
class PathLengthLimits:
    min: float
    max: float
    warning_threshold: float


@dataclass(frozen=True)
class TurnLimits:
    max_angle: float
    sharp_turn_limit: int
    consecutive_sharp_turns: int
    warning_angle: float


@dataclass(frozen=True)
class SegmentLimits:
    min_length: float
    max_length: float
    consistency_ratio: float


@dataclass(frozen=True)
class ComplexityLimits:
    max_complexity: float
    min_variety: float


@dataclass(frozen=True)
class ValidationProfile:
    """Named bundle of structural limits and how violations are treated."""
    name: str
    description: str
    failure_mode: FailureMode
    path_length: PathLengthLimits
    turn_angle: TurnLimits
    segment: SegmentLimits
    complexity: ComplexityLimits

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["failure_mode"] = self.failure_mode.value
        return data


PROFILES: Dict[str, ValidationProfile] = {
    "strict": ValidationProfile(
        "strict", "Rigorous constraints for competitive balance", FailureMode.HARD,
        PathLengthLimits(350, 1000, 50),
        TurnLimits(math.pi * 0.6, 2, 1, math.pi * 0.5),
        SegmentLimits(60, 250, 0.2),
        ComplexityLimits(0.7, 0.4),
    ),
    "balanced": ValidationProfile(
        "balanced", "Moderate constraints with flexibility", FailureMode.WARNING,
        PathLengthLimits(300, 1200, 100),
        TurnLimits(math.pi * 0.75, 3, 2, math.pi * 0.6),
        SegmentLimits(40, 300, 0.3),
        ComplexityLimits(0.8, 0.3),
    ),
    "creative": ValidationProfile(
        "creative", "Relaxed constraints for creative freedom", FailureMode.ADVISORY,
        PathLengthLimits(200, 1500, 150),
        TurnLimits(math.pi * 0.9, 5, 3, math.pi * 0.8),
        SegmentLimits(20, 400, 0.5),
        ComplexityLimits(0.95, 0.2),
    ),
    "experimental": ValidationProfile(
        "experimental", "Minimal constraints for testing new concepts", FailureMode.PERMISSIVE,
        PathLengthLimits(100, 2000, 200),
        TurnLimits(math.pi * 0.95, 10, 5, math.pi * 0.9),
        SegmentLimits(10, 500, 0.8),
        ComplexityLimits(1.0, 0.1),
    ),
    "tutorial": ValidationProfile(
        "tutorial", "Simple, predictable constraints for learning", FailureMode.GUIDED,
        PathLengthLimits(250, 800, 75),
        TurnLimits(math.pi * 0.5, 1, 0, math.pi * 0.4),
        SegmentLimits(80, 200, 0.15),
        ComplexityLimits(0.4, 0.2),
    ),
}

DEFAULT_PROFILE = "balanced"

# Relative adjustments applied on top of the profile for each theme
THEME_ADJUSTMENTS: Dict[str, Dict[str, Dict[str, float]]] = {
    "cyber": {
        "segment": {"consistency_ratio": -0.1, "min_length": 10},
        "turn_angle": {"max_angle": -0.1, "sharp_turn_limit": 1},
    },
    "urban": {
        "segment": {"consistency_ratio": 0.05},
        "turn_angle": {"sharp_turn_limit": 1, "consecutive_sharp_turns": 1},
    },
    "forest": {
        "segment": {"consistency_ratio": 0.1},
        "turn_angle": {"max_angle": 0.1, "warning_angle": 0.15},
    },
    "mountain": {
        "path_length": {"min": 50, "warning_threshold": 25},
        "turn_angle": {"sharp_turn_limit": 2, "consecutive_sharp_turns": 1},
    },
}


def path_complexity(points: Sequence[Sequence[float]]) -> float:
    """
    Complexity in ``[0, 1]`` from turn-angle spread and segment-length spread.

    ``min(1, 0.6 * std(turns) / (π/4) + 0.4 * std(segments) / mean(segments))``
    """
    if len(points) < 3:
        return 0.0
    turns = turn_angles(points)
    segments = segment_lengths(points)
    turn_variation = float(np.std(turns)) / (math.pi / 4)
    return min(1.0, 0.6 * turn_variation + 0.4 * coefficient_of_variation(segments))


def _apply_section(section: Any, changes: Mapping[str, Any], relative: bool) -> Any:
    updates = {}
    for param, change in changes.items():
        if not hasattr(section, param):
            raise KeyError(f"Unknown constraint '{param}' for {type(section).__name__}")
        current = getattr(section, param)
        if isinstance(change, Mapping):
            operation = change.get("operation", "set")
            value = change["value"]
            if operation == "multiply":
                new = current * value
            elif operation == "add":
                new = current + value
            elif operation == "set":
                new = value
            else:
                raise ValueError(f"Unknown override operation '{operation}'")
        elif relative:
            new = current + change
        else:
            new = change
        updates[param] = int(round(new)) if param in _INTEGER_LIMITS else float(new)
    return replace(section, **updates)


def apply_overrides(profile: ValidationProfile, overrides: Mapping[str, Mapping[str, Any]],
                    relative: bool = False) -> ValidationProfile:
    """
    Return a copy of ``profile`` with section overrides applied.

    Values are either plain (set, or add when ``relative``) or operation
    records: ``{"operation": "multiply" | "add" | "set", "value": x}``.
    """
    sections = {}
    for section_name, changes in overrides.items():
        if section_name not in ("path_length", "turn_angle", "segment", "complexity"):
            raise KeyError(f"Unknown constraint section '{section_name}'")
        sections[section_name] = _apply_section(getattr(profile, section_name), changes, relative)
    return replace(profile, **sections)


@dataclass
class ValidationStats:
    total_validations: int = 0
    hard_failures: int = 0
    warnings_generated: int = 0
    profile_usage: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        total = self.total_validations
        return {
            "total_validations": total,
            "hard_failures": self.hard_failures,
            "warnings_generated": self.warnings_generated,
            "profile_usage": dict(self.profile_usage),
            "success_rate": 1 - self.hard_failures / total if total else 0.0,
        }


class StructuralValidator:
    """Validates candidate paths against a validation profile."""

    def __init__(self, canvas_width: float, canvas_height: float, default_profile: str = DEFAULT_PROFILE,
                 warning_penalty: float = 0.02, verbose: bool = False):
        if default_profile not in PROFILES:
            raise KeyError(f"Unknown validation profile '{default_profile}'")
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.default_profile = default_profile
        self.warning_penalty = warning_penalty
        self.level_overrides: Dict[int, Dict[str, Dict[str, Any]]] = {}
        self.stats = ValidationStats(profile_usage={name: 0 for name in PROFILES})
        self.logger = create_logger(verbose=verbose, name="StructuralValidator")

    def set_level_override(self, level_id: int, overrides: Mapping[str, Mapping[str, Any]]):
        # validate eagerly so a bad override fails at configuration time
        apply_overrides(PROFILES[self.default_profile], overrides)
        self.level_overrides[level_id] = {k: dict(v) for k, v in overrides.items()}

    def remove_level_override(self, level_id: int):
        self.level_overrides.pop(level_id, None)

    def get_profile(self, name: Optional[str] = None, level_id: Optional[int] = None,
                    theme: Optional[str] = None) -> ValidationProfile:
        name = name or self.default_profile
        profile = PROFILES.get(name)
        if profile is None:
            self.logger.warning(f"Unknown validation profile '{name}', using {self.default_profile}")
            profile = PROFILES[self.default_profile]
        if level_id is not None and level_id in self.level_overrides:
            profile = apply_overrides(profile, self.level_overrides[level_id])
        if theme in THEME_ADJUSTMENTS:
            profile = apply_overrides(profile, THEME_ADJUSTMENTS[theme], relative=True)
        return profile

    def validate(self, points: Sequence[Sequence[float]], profile: Optional[str] = None,
                 level_id: Optional[int] = None, theme: Optional[str] = None,
                 overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> ValidationResult:
        """
        Validate a candidate path.

        ``overrides`` are absolute limit changes applied last, on top of the
        profile, the registered level override and the theme adjustment.
        """
        active = self.get_profile(profile, level_id, theme)
        if overrides:
            active = apply_overrides(active, overrides)
        result = ValidationResult(profile=active.name)
        self.stats.total_validations += 1
        self.stats.profile_usage[active.name] = self.stats.profile_usage.get(active.name, 0) + 1

        if not self._check_structure(points, result):
            self.stats.hard_failures += 1
            return result

        self._check_length(points, active, result)
        self._check_turns(points, active, result)
        self._check_segments(points, active, result)
        self._check_complexity(points, active, result)
        self._recommend(active, result)

        result.balance_score = max(0.0, 1.0 - self.warning_penalty * len(result.warnings))
        if not result.is_valid:
            self.stats.hard_failures += 1
        if result.warnings:
            self.stats.warnings_generated += 1
        return result

    def _violation(self, profile: ValidationProfile, result: ValidationResult, message: str, **context):
        if profile.failure_mode == FailureMode.HARD:
            result.add_error(message, **context)
        elif profile.failure_mode == FailureMode.GUIDED:
            result.add_warning(f"Guidance: {message}", **context)
        else:
            result.add_warning(message, **context)

    def _check_structure(self, points: Sequence[Sequence[float]], result: ValidationResult) -> bool:
        critical = ValidationSeverity.CRITICAL
        if points is None or len(points) < 2:
            result.add_error("Path must contain at least 2 points", ErrorKind.GENERATION, critical)
            return False

        arr = as_array(points)
        if not np.all(np.isfinite(arr)):
            result.add_error("Path contains non-finite coordinates", ErrorKind.GENERATION, critical)
            return False

        outside = np.where((arr[:, 0] < 0) | (arr[:, 0] > self.canvas_width)
                           | (arr[:, 1] < 0) | (arr[:, 1] > self.canvas_height))[0]
        for index in outside:
            result.add_error(f"Point {int(index)} outside canvas", ErrorKind.GENERATION, critical,
                             index=int(index))

        lengths = segment_lengths(points)
        for index in np.where(lengths < 1e-6)[0]:
            result.add_error(f"Points {int(index)} and {int(index) + 1} coincide", ErrorKind.GENERATION,
                             critical, index=int(index))

        return result.is_valid

    def _check_length(self, points, profile: ValidationProfile, result: ValidationResult):
        limits = profile.path_length
        total = float(segment_lengths(points).sum())
        result.metrics["path_length"] = total

        if total < limits.min:
            self._violation(profile, result, f"Path length {total:.1f} below minimum {limits.min}")
        elif total > limits.max:
            self._violation(profile, result, f"Path length {total:.1f} exceeds maximum {limits.max}")
        elif (abs(total - limits.min) < limits.warning_threshold
              or abs(total - limits.max) < limits.warning_threshold):
            result.add_warning(f"Path length {total:.1f} near constraint boundary")

    def _check_turns(self, points, profile: ValidationProfile, result: ValidationResult):
        limits = profile.turn_angle
        turns = turn_angles(points)
        sharp = 0
        run = 0
        longest_run = 0

        for i, angle in enumerate(turns, start=1):
            if angle > limits.max_angle:
                self._violation(profile, result,
                                f"Turn of {angle:.2f} rad at point {i} exceeds limit {limits.max_angle:.2f}",
                                index=i)
            elif angle > limits.warning_angle:
                result.add_warning(f"Approaching sharp turn {angle:.2f} rad at point {i}", index=i)

            if angle > SHARP_TURN_ANGLE:
                sharp += 1
                run += 1
                longest_run = max(longest_run, run)
            else:
                run = 0

        if sharp > limits.sharp_turn_limit:
            self._violation(profile, result, f"Too many sharp turns: {sharp} (limit: {limits.sharp_turn_limit})")
        if longest_run > limits.consecutive_sharp_turns:
            self._violation(profile, result,
                            f"Too many consecutive sharp turns: {longest_run} "
                            f"(limit: {limits.consecutive_sharp_turns})")

        result.metrics["sharp_turn_count"] = float(sharp)
        result.metrics["max_turn_angle"] = float(turns.max()) if len(turns) else 0.0
        result.metrics["avg_turn_angle"] = float(turns.mean()) if len(turns) else 0.0

    def _check_segments(self, points, profile: ValidationProfile, result: ValidationResult):
        limits = profile.segment
        lengths = segment_lengths(points)
        # the final connecting segment is exempt from the minimum
        for i, length in enumerate(lengths[:-1]):
            if length < limits.min_length:
                self._violation(profile, result, f"Segment {i} too short: {length:.1f} (min: {limits.min_length})",
                                index=i)
        for i, length in enumerate(lengths):
            if length > limits.max_length:
                self._violation(profile, result, f"Segment {i} too long: {length:.1f} (max: {limits.max_length})",
                                index=i)

        variation = coefficient_of_variation(lengths)
        if len(lengths) > 1 and variation > limits.consistency_ratio:
            self._violation(profile, result,
                            f"High segment variation: {variation:.2f} (limit: {limits.consistency_ratio:.2f})")

        result.metrics["min_segment_length"] = float(lengths.min())
        result.metrics["max_segment_length"] = float(lengths.max())
        result.metrics["avg_segment_length"] = float(lengths.mean())
        result.metrics["segment_variation"] = variation

    def _check_complexity(self, points, profile: ValidationProfile, result: ValidationResult):
        limits = profile.complexity
        complexity = path_complexity(points)
        result.metrics["complexity"] = complexity

        if complexity > limits.max_complexity:
            self._violation(profile, result,
                            f"Path complexity {complexity:.2f} exceeds limit {limits.max_complexity:.2f}")
        elif complexity < limits.min_variety and len(points) > 2:
            result.add_warning(f"Low path variety: {complexity:.2f} "
                               f"(suggested minimum: {limits.min_variety:.2f})")

    def _recommend(self, profile: ValidationProfile, result: ValidationResult):
        metrics = result.metrics
        if metrics["path_length"] < profile.path_length.min * 1.2:
            result.recommendations.append(Recommendation(
                "structure", "medium", "Consider adding more waypoints to increase path length"))
        if metrics["sharp_turn_count"] > 0:
            result.recommendations.append(Recommendation(
                "geometry", "low",
                f"Path has {int(metrics['sharp_turn_count'])} sharp turns - consider smoothing for better flow"))
        if metrics["complexity"] > 0.8:
            result.recommendations.append(Recommendation(
                "balance", "medium", "High complexity path - ensure it matches intended difficulty"))
        if profile.failure_mode == FailureMode.GUIDED and result.warnings:
            result.recommendations.append(Recommendation(
                "learning", "high", "Tutorial paths should be simple and predictable"))
