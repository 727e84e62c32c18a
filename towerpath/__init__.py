__version__ = "0.1.0"

# --- Path data ---
from .classes.path_objects import (
    Point,
    PathMode,
    FallbackTier,
    PathBounds,
    PathMetadata,
    GeneratedPath,
)
from .classes.reports import ErrorKind, ErrorRecord, Recommendation, ValidationResult

# --- Procedural Engine ---
from .procedural import (
    PathGenerationEngine,
    GenerationRequest,
    ProgressUpdate,
    GeneratorConfig,
    LevelConfigTable,
    LevelPathConfig,
    ThemeConfig,
    ThemeResolver,
    describe_path,
    PathGenerationError,
    InputValidationError,
    ReachabilityError,
    ThemeConfigurationError,
    GenerationError,
    CriticalGenerationError,
)

# --- Logging ---
from .misc.logging_config import setup_logger, get_logger
