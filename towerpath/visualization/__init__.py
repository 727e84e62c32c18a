"""
Visualization module for towerpath.

Renders path previews to images with Pillow for offline review:
- PreviewSheetRenderer: grid of preview tiles
- render_path / save_preview_sheet: helpers
"""

from .preview_sheet import PreviewSheetRenderer, render_path, save_preview_sheet

__all__ = ['PreviewSheetRenderer', 'render_path', 'save_preview_sheet']
