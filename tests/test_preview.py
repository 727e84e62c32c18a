import pytest

from towerpath.classes.path_objects import FallbackTier, GeneratedPath, PathMetadata, PathMode
from towerpath.classes.reports import ValidationResult
from towerpath.procedural.preview import PathPreview, PreviewSummary, preview_seed


def make_preview(variation: int, valid: bool = True, tier: FallbackTier = FallbackTier.NONE,
                 warnings: int = 0) -> PathPreview:
    validation = ValidationResult()
    for i in range(warnings):
        validation.add_warning(f"warning {i}")
    if not valid:
        validation.add_error("bad")
    meta = PathMetadata(seed=variation, theme_name="cyber", path_mode=PathMode.DYNAMIC, fallback_tier=tier)
    path = GeneratedPath(((0, 0), (100, 0), (100, 100)), meta, validation)
    return PathPreview(7, "cyber", PathMode.DYNAMIC, variation, path)


def test_preview_seed() -> None:
    assert preview_seed(3, 2) == 3200


def test_preview_identity_and_summary() -> None:
    preview = make_preview(1)
    assert preview.preview_id == "preview_7_cyber_dynamic_1"
    assert preview.passed
    assert preview.summary.total_length == 200
    assert preview.to_dict()["summary"]["sharp_turns"] == 1


def test_summary_counts_and_recommendations() -> None:
    previews = [
        make_preview(0),
        make_preview(1, tier=FallbackTier.SIMPLE),
        make_preview(2, valid=False, warnings=3),
        make_preview(3, warnings=6),
    ]
    summary = PreviewSummary.from_previews(7, previews)
    assert summary.total_tests == 4
    assert summary.passed_tests == 2
    assert summary.fallbacks == 1
    assert summary.errors == 1
    assert summary.warnings == 9
    assert summary.success_rate == pytest.approx(0.5)
    categories = [r.category for r in summary.recommendations]
    assert categories == ["critical", "warning"]


def test_empty_summary() -> None:
    summary = PreviewSummary.from_previews(1, [])
    assert summary.success_rate == 0.0
    assert summary.recommendations == []


def test_engine_previews_do_not_replace_current_path(engine) -> None:
    previews = engine.generate_previews(1, variation_count=2)
    assert len(previews) == 4
    assert [p.theme for p in previews] == ["cyber", "urban", "cyber", "urban"]
    assert previews[0].path.metadata.seed == 1000
    assert previews[2].path.metadata.seed == 1100
    assert engine.current_path(1) is None

    again = engine.generate_previews(1, variation_count=2)
    assert [p.path.points for p in again] == [p.path.points for p in previews]


def test_engine_previews_across_modes(engine) -> None:
    previews = engine.generate_previews(1, themes=["forest"], modes=["dynamic", "hybrid"], variation_count=3)
    assert len(previews) == 3
    assert {p.path_mode for p in previews} <= {PathMode.DYNAMIC, PathMode.HYBRID}


def test_level_generation_test(engine) -> None:
    summary = engine.test_level_generation(1, themes=["cyber"], modes=["dynamic", "hybrid"])
    assert summary.total_tests == 2
    assert summary.passed_tests == 2
    assert summary.success_rate == pytest.approx(1.0)
    assert engine.current_path(1) is None

    capped = engine.test_level_generation(1, max_tests=4)
    assert capped.total_tests == 4
    assert capped.to_dict()["total_tests"] == 4
