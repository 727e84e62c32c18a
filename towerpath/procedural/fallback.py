"""
Recovery paths used when normal generation cannot produce an acceptable route.

Tier 1 (simple) is a jittered straight line between the endpoints. Tier 2
(minimal) is the two endpoints alone and always succeeds, sanitizing the
endpoints onto the canvas if it has to.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

from towerpath.classes.path_objects import Point
from towerpath.misc.logger import create_logger
from towerpath.misc.math_utils import calculate_2d_distance, clamp_position, interpolate_positions
from .randomizer import SeededSampler
from .validation import GenerationError, PointValidator


class FallbackChain:
    """Builds tier 1 and tier 2 fallback paths."""

    def __init__(self, canvas_width: float, canvas_height: float, segment_length: float = 60.0,
                 jitter: float = 10.0, margin: Optional[float] = None, verbose: bool = False):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.segment_length = segment_length
        self.jitter = jitter
        self.margin = margin if margin is not None else min(50.0, 0.1 * min(canvas_width, canvas_height))
        self.point_validator = PointValidator(canvas_width, canvas_height)
        self.logger = create_logger(verbose=verbose, name="Fallback")

    def simple_path(self, start: Sequence[float], end: Sequence[float], sampler: SeededSampler) -> List[Point]:
        """
        Straight line from start to end with lateral jitter on intermediate points.

        Raises:
            InputValidationError: an endpoint is invalid
            GenerationError: the endpoints coincide
        """
        self.point_validator.validate(start, "fallback entry")
        self.point_validator.validate(end, "fallback exit")
        start, end = Point.coerce(start), Point.coerce(end)

        distance = calculate_2d_distance(start, end)
        if distance < 1.0:
            raise GenerationError("Fallback endpoints coincide", {"start": start, "end": end})

        segments = max(3, math.ceil(distance / (self.segment_length * 2)))
        points = [start]
        for x, y in interpolate_positions(start, end, segments + 1)[1:-1]:
            jittered = (x + sampler.uniform(-self.jitter, self.jitter),
                        y + sampler.uniform(-self.jitter, self.jitter))
            candidate = Point(*clamp_position(jittered, self.canvas_width, self.canvas_height, self.margin))
            if calculate_2d_distance(candidate, points[-1]) >= 1.0:
                points.append(candidate)
        if calculate_2d_distance(points[-1], end) < 1.0:
            points.pop()
        points.append(end)

        self.logger.info(f"Simple fallback path built with {len(points)} points")
        return points

    def minimal_path(self, start: Sequence[float], end: Sequence[float]) -> List[Point]:
        """Entry and exit only. Never raises for any start/end input."""
        entry = self._sanitize(start, (self.margin, self.canvas_height / 2))
        exit_ = self._sanitize(end, (self.canvas_width - self.margin, self.canvas_height / 2))
        if calculate_2d_distance(entry, exit_) < 1.0:
            nudge = 1.0 if exit_.x + 1.0 <= self.canvas_width else -1.0
            exit_ = Point(exit_.x + nudge, exit_.y)
        self.logger.info("Minimal fallback path built (entry and exit only)")
        return [entry, exit_]

    def _sanitize(self, value, default: Sequence[float]) -> Point:
        try:
            point = Point.coerce(value)
        except (TypeError, ValueError, KeyError):
            return Point(*default)
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            return Point(*default)
        return Point(*clamp_position(point, self.canvas_width, self.canvas_height))
