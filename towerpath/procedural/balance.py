"""
Gameplay balance scoring for candidate paths.

Balance never blocks acceptance; it only scores a path and explains the
score with warnings and recommendations for level designers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from towerpath.classes.reports import Recommendation, ValidationResult
from towerpath.misc.math_utils import as_array, path_length, segment_lengths, turn_angles


@dataclass
class BalanceSettings:
    """Weights and thresholds used by the balance checker."""
    coverage_weight: float = 0.3
    variety_weight: float = 0.2
    difficulty_weight: float = 0.3
    strategic_weight: float = 0.2

    # coverage: short segments and segments hugging an edge are easier to defend
    defendable_segment_length: float = 200.0
    edge_reach: float = 100.0

    # strategic options: points near an edge are choke points, far from it open areas
    choke_distance: float = 80.0
    open_distance: float = 150.0
    target_choke_ratio: float = 0.3
    target_open_ratio: float = 0.4

    # difficulty progression
    base_difficulty: float = 0.3
    progression_rate: float = 0.08
    max_difficulty: float = 0.95

    min_coverage: float = 0.5
    min_variety: float = 0.3
    difficulty_range: Tuple[float, float] = (0.4, 0.9)
    min_strategic: float = 0.4
    recommendation_threshold: float = 0.7

    def target_difficulty(self, level_id: int) -> float:
        return min(self.base_difficulty + (level_id - 1) * self.progression_rate, self.max_difficulty)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["difficulty_range"] = list(self.difficulty_range)
        return data


class BalanceChecker:
    """Scores coverage, variety, progression fit and strategic options of a path."""

    def __init__(self, canvas_width: float, canvas_height: float, settings: Optional[BalanceSettings] = None):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.settings = settings or BalanceSettings()

    def _edge_distances(self, arr: np.ndarray) -> np.ndarray:
        return np.minimum.reduce([
            arr[:, 0], arr[:, 1],
            self.canvas_width - arr[:, 0], self.canvas_height - arr[:, 1],
        ])

    def defensive_coverage(self, points: Sequence[Sequence[float]]) -> float:
        if len(points) < 2:
            return 0.0
        s = self.settings
        arr = as_array(points)
        lengths = segment_lengths(points)
        length_factor = np.clip(1 - lengths / s.defendable_segment_length, 0, None)
        edge_factor = np.clip(1 - self._edge_distances(arr[:-1]) / s.edge_reach, 0, None)
        return float(min(1.0, np.mean((length_factor + edge_factor) / 2)))

    def path_variety(self, points: Sequence[Sequence[float]]) -> float:
        if len(points) < 3:
            return 0.0
        return float(min(1.0, np.std(turn_angles(points)) / (math.pi / 4)))

    def difficulty_complexity(self, points: Sequence[Sequence[float]]) -> float:
        """Length relative to the canvas diagonal blended with average turn sharpness."""
        if len(points) < 3:
            return 0.0
        diagonal = math.hypot(self.canvas_width, self.canvas_height)
        length_part = path_length(points) / diagonal
        turn_part = float(np.mean(turn_angles(points))) / math.pi
        return min(1.0, 0.4 * length_part + 0.6 * turn_part)

    def difficulty_score(self, points: Sequence[Sequence[float]], target: float) -> float:
        return max(0.0, 1 - abs(self.difficulty_complexity(points) - target) * 2)

    def strategic_options(self, points: Sequence[Sequence[float]]) -> float:
        if len(points) < 2:
            return 0.0
        s = self.settings
        distances = self._edge_distances(as_array(points))
        choke_ratio = float(np.mean(distances < s.choke_distance))
        open_ratio = float(np.mean(distances > s.open_distance))
        choke_score = 1 - abs(choke_ratio - s.target_choke_ratio) * 2
        open_score = 1 - abs(open_ratio - s.target_open_ratio) * 2
        return max(0.0, (choke_score + open_score) / 2)

    def check(self, points: Sequence[Sequence[float]], level_id: int = 1,
              target_difficulty: Optional[float] = None) -> ValidationResult:
        """Score a path. The returned result is always valid."""
        s = self.settings
        target = s.target_difficulty(level_id) if target_difficulty is None else target_difficulty

        coverage = self.defensive_coverage(points)
        variety = self.path_variety(points)
        difficulty = self.difficulty_score(points, target)
        strategic = self.strategic_options(points)

        score = (coverage * s.coverage_weight + variety * s.variety_weight
                 + difficulty * s.difficulty_weight + strategic * s.strategic_weight)
        total_weight = s.coverage_weight + s.variety_weight + s.difficulty_weight + s.strategic_weight
        if total_weight > 0:
            score /= total_weight

        result = ValidationResult(balance_score=max(0.0, min(1.0, score)))
        result.metrics.update(
            defensive_coverage=coverage,
            path_variety=variety,
            difficulty_score=difficulty,
            strategic_options=strategic,
            target_difficulty=target,
        )

        if coverage < s.min_coverage:
            result.add_warning("Low defensive coverage - players may struggle to defend path")
        if variety < s.min_variety:
            result.add_warning("Low path variety - may become repetitive")
        low, high = s.difficulty_range
        if difficulty < low or difficulty > high:
            result.add_warning("Difficulty may not match level progression")
        if strategic < s.min_strategic:
            result.add_warning("Limited strategic options for defense placement")

        if result.balance_score < s.recommendation_threshold:
            result.recommendations.append(Recommendation(
                "balance", "high", "Path may be too difficult or easy for this level",
                "Adjust path complexity or add/remove challenging sections"))
        return result
