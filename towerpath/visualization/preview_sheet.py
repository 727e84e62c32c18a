"""
Pillow renderer for path previews.

Draws each preview into a tile of a grid image so a designer can compare
variations side by side:

 - render_path(path, canvas_size, tile_size) -> Image for one path
 - PreviewSheetRenderer(...).render(previews) -> Image grid
 - save_preview_sheet(previews, filename, ...) convenience helper
"""
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..classes.path_objects import FallbackTier, GeneratedPath
from ..misc.logger import create_logger

TIER_COLORS = {
    FallbackTier.NONE: (30, 120, 220),
    FallbackTier.SIMPLE: (230, 150, 30),
    FallbackTier.MINIMAL: (200, 40, 40),
}
BACKGROUND = (245, 245, 240)
ENTRY_COLOR = (0, 160, 60)
EXIT_COLOR = (204, 0, 0)


def render_path(path: GeneratedPath, canvas_size: Tuple[float, float], tile_size: Tuple[int, int] = (320, 240),
                label: Optional[str] = None, font=None) -> Image.Image:
    """Draw one path scaled from canvas coordinates into a tile."""
    width, height = tile_size
    sx = width / float(canvas_size[0])
    sy = height / float(canvas_size[1])

    img = Image.new('RGB', tile_size, BACKGROUND)
    draw = ImageDraw.Draw(img)
    draw.rectangle((0, 0, width - 1, height - 1), outline=(120, 120, 120))

    pixels = [(p.x * sx, p.y * sy) for p in path.points]
    line_width = max(2, int(min(width, height) / 80))
    draw.line(pixels, fill=TIER_COLORS[path.fallback_tier], width=line_width, joint="curve")

    r = line_width + 2
    for (px, py), color in ((pixels[0], ENTRY_COLOR), (pixels[-1], EXIT_COLOR)):
        draw.ellipse((px - r, py - r, px + r, py + r), fill=color, outline=(0, 0, 0))

    if label and font is not None:
        draw.text((6, 4), label, fill=(0, 0, 0), font=font)
    return img


class PreviewSheetRenderer:
    """Lays out path previews in a grid.

    Args:
        canvas_size: (width, height) of the game canvas the paths were built for
        tile_size: (width, height) in pixels of one preview tile
        columns: tiles per row
        verbose: whether to log progress
    """
    def __init__(self, canvas_size: Tuple[float, float], tile_size: Tuple[int, int] = (320, 240),
                 columns: int = 3, padding: int = 8, verbose: bool = False):
        if columns < 1:
            raise ValueError("columns must be at least 1")
        self.canvas_size = canvas_size
        self.tile_size = tile_size
        self.columns = columns
        self.padding = padding
        self.logger = create_logger(verbose=verbose, name="PreviewSheet")
        self._font = ImageFont.load_default()

    def render(self, previews: Sequence) -> Image.Image:
        """Render ``PathPreview`` objects (or bare paths) into one image."""
        if not previews:
            raise ValueError("No previews to render")

        rows = (len(previews) + self.columns - 1) // self.columns
        tw, th = self.tile_size
        sheet_w = self.columns * tw + (self.columns + 1) * self.padding
        sheet_h = rows * th + (rows + 1) * self.padding
        sheet = Image.new('RGB', (sheet_w, sheet_h), (255, 255, 255))

        for index, preview in enumerate(previews):
            path = getattr(preview, 'path', preview)
            tile = render_path(path, self.canvas_size, self.tile_size, self._label(preview), self._font)
            col, row = index % self.columns, index // self.columns
            sheet.paste(tile, (self.padding + col * (tw + self.padding), self.padding + row * (th + self.padding)))

        self.logger.info(f"Rendered {len(previews)} previews in a {self.columns}x{rows} grid")
        return sheet

    @staticmethod
    def _label(preview) -> str:
        path = getattr(preview, 'path', preview)
        meta = path.metadata
        if hasattr(preview, 'variation'):
            head = f"{preview.theme}/{preview.path_mode.value} #{preview.variation}"
        else:
            head = f"{meta.theme_name}/{meta.path_mode.value}"
        status = "ok" if path.validation.is_valid else "invalid"
        return f"{head} {status} tier={meta.fallback_tier.value} score={path.validation.balance_score:.2f}"


def save_preview_sheet(previews: Sequence, filename: Optional[str] = None,
                       canvas_size: Tuple[float, float] = (800, 600), tile_size: Tuple[int, int] = (320, 240),
                       columns: int = 3, save: bool = False) -> Image.Image:
    """Convenience helper: render a preview sheet and optionally write it to disk.

    The image is not saved by default. Pass `save=True` and a `filename`.
    """
    sheet = PreviewSheetRenderer(canvas_size, tile_size, columns).render(previews)
    if save:
        if not filename:
            raise ValueError("filename must be provided when save=True")
        sheet.save(filename)
    return sheet
