"""
Designer previews: several candidate routes for one level, and a pass/fail
summary across modes and themes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from towerpath.classes.path_objects import FallbackTier, GeneratedPath, PathMode
from towerpath.classes.reports import Recommendation, ValidationResult
from .metrics import PathSummary, describe_path

DEFAULT_VARIATION_COUNT = 5
DEFAULT_TEST_MODES = ("static", "dynamic", "hybrid")
DEFAULT_TEST_THEMES = ("cyber", "urban", "forest")
MAX_LEVEL_TESTS = 15


def preview_seed(level_id: int, variation: int) -> int:
    """Seed used for a preview variation, stable across runs."""
    return level_id * 1000 + variation * 100


@dataclass
class PathPreview:
    """One candidate route with its validation verdict."""
    level_id: int
    theme: str
    path_mode: PathMode
    variation: int
    path: GeneratedPath
    summary: PathSummary = field(init=False)

    def __post_init__(self):
        self.summary = describe_path(self.path.points)

    @property
    def preview_id(self) -> str:
        return f"preview_{self.level_id}_{self.theme}_{self.path_mode.value}_{self.variation}"

    @property
    def validation(self) -> ValidationResult:
        return self.path.validation

    @property
    def passed(self) -> bool:
        return self.validation.is_valid and self.path.fallback_tier == FallbackTier.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.preview_id,
            "level_id": self.level_id,
            "theme": self.theme,
            "path_mode": self.path_mode.value,
            "variation": self.variation,
            "passed": self.passed,
            "summary": self.summary.to_dict(),
            "path": self.path.to_dict(),
        }


@dataclass
class PreviewSummary:
    """Aggregate of a batch of previews for one level."""
    level_id: int
    previews: List[PathPreview] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    @property
    def total_tests(self) -> int:
        return len(self.previews)

    @property
    def passed_tests(self) -> int:
        return sum(1 for p in self.previews if p.passed)

    @property
    def warnings(self) -> int:
        return sum(len(p.validation.warnings) for p in self.previews)

    @property
    def errors(self) -> int:
        return sum(len(p.validation.errors) for p in self.previews)

    @property
    def fallbacks(self) -> int:
        return sum(1 for p in self.previews if p.path.fallback_tier != FallbackTier.NONE)

    @property
    def success_rate(self) -> float:
        return self.passed_tests / self.total_tests if self.previews else 0.0

    @classmethod
    def from_previews(cls, level_id: int, previews: List[PathPreview]) -> "PreviewSummary":
        summary = cls(level_id, list(previews))
        summary.recommendations = summary._recommend()
        return summary

    def _recommend(self) -> List[Recommendation]:
        if not self.previews:
            return []
        recommendations = []
        avg_warnings = self.warnings / self.total_tests
        avg_errors = self.errors / self.total_tests

        if self.success_rate < 0.8:
            recommendations.append(Recommendation(
                "critical", "high", f"Low success rate ({self.success_rate * 100:.1f}%)",
                "Review level constraints and path generation settings"))
        if avg_errors > 1:
            recommendations.append(Recommendation(
                "error", "high", f"High error rate ({avg_errors:.1f} per test)",
                "Check validation rules and level configuration"))
        if avg_warnings > 2:
            recommendations.append(Recommendation(
                "warning", "medium", f"Many warnings ({avg_warnings:.1f} per test)",
                "Consider adjusting warning thresholds or constraints"))
        return recommendations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level_id": self.level_id,
            "total_tests": self.total_tests,
            "passed_tests": self.passed_tests,
            "warnings": self.warnings,
            "errors": self.errors,
            "fallbacks": self.fallbacks,
            "success_rate": self.success_rate,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "previews": [p.to_dict() for p in self.previews],
        }
