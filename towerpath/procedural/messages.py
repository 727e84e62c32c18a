from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from towerpath.classes.path_objects import PathMode
from .themes import ThemeInput


@dataclass
class GenerationRequest:
    """
    Contract for the engine input. This is the surface API the game calls when
    a level starts or an in-game event asks for a new route.

    ``theme`` and ``path_mode`` left as None mean "use the level
    configuration's value". ``seed`` left as None derives a fresh seed from the
    clock, so the result is intentionally not reproducible.
    """
    level_id: int
    seed: Optional[int] = None
    theme: ThemeInput = None
    path_mode: Optional[Union[PathMode, str]] = None
    canvas_width: Optional[float] = None   # None = engine canvas
    canvas_height: Optional[float] = None  # None = engine canvas
    trigger_reason: Optional[str] = None
    validation_profile: Optional[str] = None

    def with_overrides(self, **changes) -> "GenerationRequest":
        """Copy of this request with some fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class ProgressUpdate:
    """Progress report passed to the async progress callback."""
    stage: str
    percent: float
    message: str = ""
