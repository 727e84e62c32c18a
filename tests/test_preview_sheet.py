from unittest.mock import patch

import pytest
from PIL import Image

from towerpath.classes.path_objects import FallbackTier, GeneratedPath, PathMetadata, PathMode
from towerpath.visualization import PreviewSheetRenderer, render_path, save_preview_sheet
from towerpath.visualization.preview_sheet import TIER_COLORS


def make_path(tier: FallbackTier = FallbackTier.NONE) -> GeneratedPath:
    meta = PathMetadata(seed=1, theme_name="cyber", path_mode=PathMode.DYNAMIC, fallback_tier=tier)
    return GeneratedPath(((50, 300), (400, 100), (750, 300)), meta)


def test_render_path_draws_route_in_tier_colour() -> None:
    img = render_path(make_path(FallbackTier.SIMPLE), (800, 600), (400, 300))
    assert img.size == (400, 300)
    colours = {colour for _, colour in img.getcolors(maxcolors=100000)}
    assert TIER_COLORS[FallbackTier.SIMPLE] in colours


def test_sheet_grid_size() -> None:
    sheet = PreviewSheetRenderer((800, 600)).render([make_path() for _ in range(4)])
    assert sheet.size == (992, 504)


def test_sheet_from_engine_previews(engine) -> None:
    previews = engine.generate_previews(1, variation_count=1)
    sheet = PreviewSheetRenderer((800, 600), tile_size=(160, 120), columns=2, padding=4).render(previews)
    assert sheet.size == (2 * 160 + 3 * 4, 120 + 2 * 4)


def test_sheet_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        PreviewSheetRenderer((800, 600)).render([])
    with pytest.raises(ValueError):
        PreviewSheetRenderer((800, 600), columns=0)


def test_save_preview_sheet(tmp_path) -> None:
    target = tmp_path / "previews.png"
    sheet = save_preview_sheet([make_path()], str(target), save=True)
    assert target.exists()
    assert Image.open(target).size == sheet.size

    with patch.object(Image.Image, "save") as save:
        save_preview_sheet([make_path()])
    save.assert_not_called()

    with pytest.raises(ValueError):
        save_preview_sheet([make_path()], save=True)
