"""Validation and error handling for procedural path generation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, TYPE_CHECKING

from towerpath.classes.reports import ErrorKind
from towerpath.misc.math_utils import calculate_2d_distance
from towerpath.misc.validation_framework import PositionValidator, NumericValidator

if TYPE_CHECKING:
    from towerpath.classes.path_objects import GeneratedPath


class PathGenerationError(Exception):
    """Base exception for path generation failures."""
    kind: ErrorKind = ErrorKind.GENERATION

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InputValidationError(PathGenerationError):
    """Raised when a request, point or canvas is malformed."""
    kind = ErrorKind.INPUT_VALIDATION


class ReachabilityError(PathGenerationError):
    """Raised when the exit cannot be reached from the entry under the current limits."""
    kind = ErrorKind.REACHABILITY


class ThemeConfigurationError(PathGenerationError):
    """Raised when a theme name is unknown or a custom theme record is invalid."""
    kind = ErrorKind.CONFIGURATION


class GenerationError(PathGenerationError):
    """Raised when a build attempt produces no acceptable path."""
    kind = ErrorKind.GENERATION


class CriticalGenerationError(PathGenerationError):
    """
    Raised in strict mode for unexpected failures.

    ``fallback_path`` carries the minimal entry/exit path that was built
    before raising so callers can still start the level.
    """
    kind = ErrorKind.CRITICAL

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 fallback_path: Optional["GeneratedPath"] = None):
        super().__init__(message, context)
        self.fallback_path = fallback_path


@dataclass
class CheckResult:
    """Result of a single validation check."""
    valid: bool
    message: str = ""

    def raise_if_invalid(self, error_class: type = PathGenerationError):
        """Raise an error if validation failed."""
        if not self.valid:
            raise error_class(self.message)


@dataclass
class ReachabilityResult:
    """Outcome of a reachability check. Never raised, always returned."""
    is_reachable: bool
    distance: float
    reason: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def raise_if_unreachable(self):
        if not self.is_reachable:
            raise ReachabilityError(self.reason, self.context)


def validate_canvas(width: Any, height: Any, min_size: float = 200, max_size: float = 10000,
                    min_aspect: float = 0.5, max_aspect: float = 3.0) -> CheckResult:
    """
    Validate canvas dimensions and aspect ratio.

    Returns:
        CheckResult indicating if the canvas can host a path
    """
    for name, value in (("width", width), ("height", height)):
        report = NumericValidator(allow_negative=False, allow_zero=False).validate(value)
        if not report.is_valid:
            return CheckResult(False, f"Canvas {name} is invalid: {'; '.join(report.error_messages())}")
        if value < min_size or value > max_size:
            return CheckResult(False, f"Canvas {name} {value} outside range {min_size}..{max_size}")

    aspect = width / height
    if aspect < min_aspect or aspect > max_aspect:
        return CheckResult(False, f"Canvas aspect ratio {aspect:.2f} outside range {min_aspect}..{max_aspect}")

    return CheckResult(True)


def validate_level_id(level_id: Any) -> CheckResult:
    """Level ids are non-negative integers."""
    if isinstance(level_id, bool) or not isinstance(level_id, int):
        return CheckResult(False, f"Level id must be an integer, got {type(level_id).__name__}")
    if level_id < 0:
        return CheckResult(False, f"Level id must be non-negative, got {level_id}")
    return CheckResult(True)


class PointValidator:
    """Checks that waypoints are finite numbers inside the canvas."""

    def __init__(self, canvas_width: float, canvas_height: float):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self._validator = PositionValidator(bounds=(0.0, canvas_width, 0.0, canvas_height))

    def check(self, point: Any) -> CheckResult:
        """Validate a point without raising."""
        if isinstance(point, dict):
            point = (point.get("x"), point.get("y"))
        report = self._validator.validate(tuple(point) if isinstance(point, (tuple, list)) else point)
        if report.is_valid:
            return CheckResult(True)
        return CheckResult(False, "; ".join(report.error_messages()))

    def validate(self, point: Any, context: str = "point"):
        """
        Validate a point.

        Raises:
            InputValidationError: when a coordinate is non-numeric, non-finite or off-canvas
        """
        result = self.check(point)
        if not result.valid:
            raise InputValidationError(f"Invalid {context}: {result.message}", {"context": context, "point": point})


class ReachabilityChecker:
    """
    Decides whether an exit is reachable from an entry.

    The full check rejects endpoints closer than half the minimum segment
    length or further apart than the maximum distance (canvas diagonal x 1.5
    by default). The lightweight check used in production only rejects
    endpoints closer than a fixed distance.
    """

    LIGHTWEIGHT_MIN_DISTANCE = 50.0

    def __init__(self, canvas_width: float, canvas_height: float, min_segment_length: float = 40.0,
                 max_distance: Optional[float] = None, lightweight: bool = False):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.min_segment_length = min_segment_length
        self.max_distance = max_distance if max_distance is not None else math.hypot(canvas_width, canvas_height) * 1.5
        self.lightweight = lightweight

    def check(self, start: Sequence[float], end: Sequence[float], min_distance: Optional[float] = None,
              max_distance: Optional[float] = None) -> ReachabilityResult:
        distance = calculate_2d_distance(tuple(start), tuple(end))
        context = {"start": tuple(start), "end": tuple(end), "distance": distance}

        if self.lightweight and min_distance is None:
            minimum = self.LIGHTWEIGHT_MIN_DISTANCE
            maximum = math.inf
        else:
            minimum = min_distance if min_distance is not None else self.min_segment_length * 0.5
            maximum = max_distance if max_distance is not None else self.max_distance

        if distance < minimum:
            return ReachabilityResult(
                False, distance,
                f"Entry and exit too close: {distance:.1f} (minimum {minimum:.1f})",
                context
            )
        if distance > maximum:
            return ReachabilityResult(
                False, distance,
                f"Entry and exit too far apart: {distance:.1f} (maximum {maximum:.1f})",
                context
            )
        return ReachabilityResult(True, distance, context=context)
