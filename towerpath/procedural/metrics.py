"""Gameplay-facing summary figures for a path."""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Sequence

import numpy as np

from towerpath.misc.math_utils import path_length, turn_angles

SHARP_CURVE_ANGLE = math.pi / 3
DEFAULT_ENEMY_SPEED = 30.0  # canvas units per second


@dataclass
class PathSummary:
    total_length: float
    average_curvature: float
    sharp_turns: int
    difficulty: float
    point_count: int
    estimated_travel_time: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def describe_path(points: Sequence[Sequence[float]], enemy_speed: float = DEFAULT_ENEMY_SPEED) -> PathSummary:
    """
    Summarize a path the way a level designer reads it.

    Difficulty rating is ``1 + length / 500 + 2 * average_curvature
    + 0.5 * sharp_turns``, where a sharp turn is any heading change above
    π/3. Travel time assumes enemies move at ``enemy_speed`` units per second.

    Args:
        points: Ordered waypoints
        enemy_speed: Enemy speed used for the travel time estimate

    Returns:
        PathSummary with values rounded for display
    """
    if enemy_speed <= 0:
        raise ValueError("enemy_speed must be positive")

    total = path_length(points)
    turns = turn_angles(points)
    average = float(turns.mean()) if len(turns) else 0.0
    sharp = int(np.count_nonzero(turns > SHARP_CURVE_ANGLE))
    difficulty = 1.0 + total / 500.0 + average * 2.0 + sharp * 0.5

    return PathSummary(
        total_length=round(total),
        average_curvature=round(average, 2),
        sharp_turns=sharp,
        difficulty=round(difficulty, 2),
        point_count=len(points),
        estimated_travel_time=round(total / enemy_speed),
    )
