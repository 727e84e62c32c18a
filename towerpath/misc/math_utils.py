"""
Geometry helpers shared by the path builder, validators and metrics.

Coordinates are canvas pixels: +X to the right, +Y downwards. Headings use
the screen convention ``atan2(dy, dx)``.
"""
import math
from typing import List, Sequence, Tuple

import numpy as np

Position2D = Tuple[float, float]


def calculate_2d_distance(pos1: Position2D, pos2: Position2D) -> float:
    """
    Calculate 2D Euclidean distance between two points.

    Examples:
        >>> calculate_2d_distance((0, 0), (3, 4))
        5.0
    """
    x1, y1 = pos1
    x2, y2 = pos2
    return math.hypot(x2 - x1, y2 - y1)


def calculate_heading(from_pos: Position2D, to_pos: Position2D) -> float:
    """
    Heading in radians from one position to another, in ``[-π, π]``.

    Examples:
        >>> calculate_heading((0, 0), (10, 0))
        0.0
        >>> round(calculate_heading((0, 0), (0, 10)), 4)
        1.5708
    """
    return math.atan2(to_pos[1] - from_pos[1], to_pos[0] - from_pos[0])


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into ``[-π, π)``.

    Examples:
        >>> round(normalize_angle(2.5 * math.pi), 6)
        1.570796
        >>> round(normalize_angle(-1.5 * math.pi), 6)
        1.570796
    """
    wrapped = math.fmod(angle + math.pi, 2 * math.pi)
    if wrapped < 0:
        wrapped += 2 * math.pi
    return wrapped - math.pi


def angle_difference(angle1: float, angle2: float) -> float:
    """
    Shortest signed angular difference from ``angle1`` to ``angle2``.

    Examples:
        >>> round(angle_difference(0.1, -0.1), 6)
        -0.2
        >>> round(angle_difference(3.0, -3.0), 6)
        0.283185
    """
    diff = (angle2 - angle1) % (2 * math.pi)
    if diff > math.pi:
        diff -= 2 * math.pi
    return diff


def move_along_heading(pos: Position2D, heading: float, distance: float) -> Position2D:
    """Project a point ``distance`` units along ``heading``."""
    return (pos[0] + math.cos(heading) * distance, pos[1] + math.sin(heading) * distance)


def clamp_position(pos: Position2D, width: float, height: float, margin: float = 0.0) -> Position2D:
    """
    Clamp a position to the canvas, keeping ``margin`` units from every edge.

    Examples:
        >>> clamp_position((-20, 700), 800, 600, margin=50)
        (50.0, 550.0)
    """
    x = min(max(float(pos[0]), margin), width - margin)
    y = min(max(float(pos[1]), margin), height - margin)
    return (x, y)


def interpolate_positions(start: Position2D, end: Position2D, steps: int) -> List[Position2D]:
    """
    Evenly spaced positions from start to end, both included.

    Examples:
        >>> interpolate_positions((0, 0), (10, 0), 3)
        [(0.0, 0.0), (5.0, 0.0), (10.0, 0.0)]
    """
    if steps < 2:
        return [(float(start[0]), float(start[1]))]
    xs = np.linspace(start[0], end[0], steps)
    ys = np.linspace(start[1], end[1], steps)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def perpendicular_unit(start: Position2D, end: Position2D) -> Position2D:
    """Unit vector perpendicular to the segment start->end (zero for a degenerate segment)."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return (0.0, 0.0)
    return (-dy / length, dx / length)


def as_array(points: Sequence[Position2D]) -> np.ndarray:
    """Convert a point sequence into an ``(n, 2)`` float array."""
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return arr.reshape(0, 2)
    return arr.reshape(-1, 2)


def segment_lengths(points: Sequence[Position2D]) -> np.ndarray:
    """Length of every segment of a polyline."""
    arr = as_array(points)
    if len(arr) < 2:
        return np.zeros(0)
    return np.hypot(*np.diff(arr, axis=0).T)


def path_length(points: Sequence[Position2D]) -> float:
    """
    Total polyline length.

    Examples:
        >>> path_length([(0, 0), (3, 4), (3, 10)])
        11.0
    """
    return float(segment_lengths(points).sum())


def turn_angles(points: Sequence[Position2D]) -> np.ndarray:
    """
    Absolute heading change at every interior vertex, folded into ``[0, π]``.

    Examples:
        >>> [round(a, 4) for a in turn_angles([(0, 0), (10, 0), (10, 10)])]
        [1.5708]
    """
    arr = as_array(points)
    if len(arr) < 3:
        return np.zeros(0)
    deltas = np.diff(arr, axis=0)
    headings = np.arctan2(deltas[:, 1], deltas[:, 0])
    turns = np.abs(np.diff(headings))
    return np.where(turns > np.pi, 2 * np.pi - turns, turns)


def coefficient_of_variation(values: np.ndarray) -> float:
    """Population standard deviation divided by the mean (0 for empty or zero-mean input)."""
    if len(values) == 0:
        return 0.0
    mean = float(np.mean(values))
    if mean == 0:
        return 0.0
    return float(np.std(values)) / mean
