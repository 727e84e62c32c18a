"""
Constrained random-walk builder for raw enemy routes.

The walk starts at the entry, perturbs its heading every step and is pulled
back toward the exit whenever it drifts too far, so every step makes forward
progress. When the exit is within two nominal segments it is appended as the
final connecting segment.
"""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from towerpath.classes.path_objects import Point
from towerpath.misc.logger import create_logger
from towerpath.misc.math_utils import (
    angle_difference,
    calculate_2d_distance,
    calculate_heading,
    clamp_position,
    interpolate_positions,
    move_along_heading,
    normalize_angle,
    perpendicular_unit,
)
from .randomizer import SeededSampler
from .themes import ThemeConfig

MAX_HEADING_DRIFT = math.pi / 3
TIME_CHECK_INTERVAL = 50
CACHE_KEY_PERIOD = 100
MIN_POINT_SEPARATION = 1.0


@dataclass
class RawBuildResult:
    """Points produced by one builder run, plus why it stopped."""
    points: List[Point]
    iterations: int
    elapsed_ms: float
    stopped_early: bool = False
    stop_reason: Optional[str] = None
    skipped_steps: int = 0
    warnings: List[str] = field(default_factory=list)


class RawPathBuilder:
    """
    Builds a raw path between two points for a theme and seeded sampler.

    Hard stops: ``max_iterations`` steps, and a wall-clock ``time_budget_ms``
    checked every 50 iterations. Either stop returns the partial path flagged
    ``stopped_early``.
    """

    def __init__(self, canvas_width: float, canvas_height: float, max_iterations: int = 500,
                 time_budget_ms: float = 50.0, margin: Optional[float] = None,
                 clock: Callable[[], float] = time.perf_counter, verbose: bool = False):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.max_iterations = max_iterations
        self.time_budget_ms = time_budget_ms
        self.margin = margin if margin is not None else min(50.0, 0.1 * min(canvas_width, canvas_height))
        self.clock = clock
        self.logger = create_logger(verbose=verbose, name="PathBuilder")

    def build(self, start: Point, end: Point, theme: ThemeConfig, sampler: SeededSampler) -> RawBuildResult:
        start = Point.coerce(start)
        end = Point.coerce(end)
        segment = theme.segment_length.nominal
        wander = math.pi * 0.6 * (1.0 - theme.straight_bias) * theme.curve_complexity

        points: List[Point] = [start]
        current = start
        heading = calculate_heading(start, end)
        iterations = 0
        skipped = 0
        started = self.clock()
        stop_reason: Optional[str] = None

        while calculate_2d_distance(current, end) > segment * 2:
            if iterations >= self.max_iterations:
                stop_reason = "max_iterations"
                break
            if iterations and iterations % TIME_CHECK_INTERVAL == 0:
                if (self.clock() - started) * 1000.0 > self.time_budget_ms:
                    stop_reason = "time_budget"
                    break

            iterations += 1
            slot = iterations % CACHE_KEY_PERIOD

            heading = normalize_angle(heading + sampler.cached("angle", slot, -0.5, 0.5) * wander)
            direct = calculate_heading(current, end)
            if abs(angle_difference(heading, direct)) > MAX_HEADING_DRIFT:
                correction = sampler.cached("correction", slot, -0.5, 0.5) * math.pi * 0.2
                heading = normalize_angle(direct + correction)

            step = sampler.cached("distance", slot, theme.segment_length.min, theme.segment_length.max)
            candidate = Point(*clamp_position(move_along_heading(current, heading, step),
                                              self.canvas_width, self.canvas_height, self.margin))

            if calculate_2d_distance(candidate, current) < MIN_POINT_SEPARATION:
                # clamped onto the previous point; aim straight at the exit next time
                skipped += 1
                heading = direct
                continue

            points.append(candidate)
            current = candidate

        elapsed_ms = (self.clock() - started) * 1000.0

        if stop_reason is not None:
            message = (f"Raw build stopped early ({stop_reason}) after {iterations} iterations, "
                       f"{len(points)} points, {calculate_2d_distance(current, end):.1f} from exit")
            self.logger.warning(message)
            return RawBuildResult(points, iterations, elapsed_ms, True, stop_reason, skipped, [message])

        if len(points) > 1 and calculate_2d_distance(points[-1], end) < MIN_POINT_SEPARATION:
            points[-1] = end
        else:
            points.append(end)

        self.logger.debug(f"Raw build finished: {len(points)} points in {iterations} iterations ({elapsed_ms:.2f}ms)")
        return RawBuildResult(points, iterations, elapsed_ms, skipped_steps=skipped)

    def enhance(self, waypoints: Sequence[Sequence[float]], theme: ThemeConfig, sampler: SeededSampler,
                segment_length: float = 60.0) -> RawBuildResult:
        """
        Keep designer waypoints and add themed intermediate points between them.

        Legs longer than two segments get ``floor(distance / segment) - 1``
        interpolated points. Themes with ``curve_complexity > 0.3`` push each
        one sideways by up to ``min(50, 0.2 * distance) * curve_complexity``.
        """
        started = self.clock()
        anchors = [Point.coerce(p) for p in waypoints]
        points: List[Point] = []
        skipped = 0

        for current, nxt in zip(anchors, anchors[1:]):
            points.append(current)
            distance = calculate_2d_distance(current, nxt)
            if distance <= segment_length * 2:
                continue

            count = int(distance // segment_length) - 1
            normal = perpendicular_unit(current, nxt)
            max_offset = min(50.0, distance * 0.2) * theme.curve_complexity
            for x, y in interpolate_positions(current, nxt, count + 2)[1:-1]:
                if theme.curve_complexity > 0.3:
                    offset = sampler.uniform(-max_offset, max_offset)
                    x, y = clamp_position((x + normal[0] * offset, y + normal[1] * offset),
                                          self.canvas_width, self.canvas_height, self.margin)
                candidate = Point(x, y)
                if calculate_2d_distance(candidate, points[-1]) < MIN_POINT_SEPARATION:
                    skipped += 1
                    continue
                points.append(candidate)

        last = anchors[-1]
        if calculate_2d_distance(points[-1], last) < MIN_POINT_SEPARATION:
            points[-1] = last
        else:
            points.append(last)

        elapsed_ms = (self.clock() - started) * 1000.0
        self.logger.debug(f"Enhanced {len(anchors)} waypoints into {len(points)} points")
        return RawBuildResult(points, 0, elapsed_ms, skipped_steps=skipped)
