"""
Procedural enemy path generation for tower-defense levels.

This package turns a generation request (level, seed, theme, mode, canvas)
into a validated route. ``PathGenerationEngine`` is the facade; the other
modules are the components it wires together and can be used on their own.
"""

from .messages import GenerationRequest, ProgressUpdate
from .config import GeneratorConfig
from .engine import PathGenerationEngine, PerformanceStats
from .levels import LevelConfigTable, LevelPathConfig
from .themes import ThemeConfig, ThemeResolver, SegmentRange
from .balance import BalanceSettings
from .metrics import describe_path
from .preview import PathPreview, PreviewSummary
from .validation import (
    PathGenerationError,
    InputValidationError,
    ReachabilityError,
    ThemeConfigurationError,
    GenerationError,
    CriticalGenerationError,
)

__all__ = [
    "GenerationRequest",
    "ProgressUpdate",
    "GeneratorConfig",
    "PathGenerationEngine",
    "PerformanceStats",
    "LevelConfigTable",
    "LevelPathConfig",
    "ThemeConfig",
    "ThemeResolver",
    "SegmentRange",
    "BalanceSettings",
    "describe_path",
    "PathPreview",
    "PreviewSummary",
    "PathGenerationError",
    "InputValidationError",
    "ReachabilityError",
    "ThemeConfigurationError",
    "GenerationError",
    "CriticalGenerationError",
]
