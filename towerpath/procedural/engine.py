from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence, Tuple

from towerpath.classes.path_objects import (
    FallbackTier,
    GeneratedPath,
    PathBounds,
    PathMetadata,
    PathMode,
    Point,
)
from towerpath.classes.reports import ErrorKind, ValidationResult
from towerpath.misc.logger import create_logger
from towerpath.misc.math_utils import (
    calculate_2d_distance,
    calculate_heading,
    clamp_position,
    move_along_heading,
    path_length,
)
from towerpath.misc.validation_framework import ValidationSeverity
from .async_coordinator import AsyncCoordinator
from .balance import BalanceChecker
from .config import GeneratorConfig
from .error_tracker import ErrorStats, ErrorTracker
from .fallback import FallbackChain
from .levels import LevelConfigTable, LevelPathConfig
from .path_builder import RawBuildResult, RawPathBuilder
from .preview import (
    DEFAULT_TEST_MODES,
    DEFAULT_TEST_THEMES,
    DEFAULT_VARIATION_COUNT,
    MAX_LEVEL_TESTS,
    PathPreview,
    PreviewSummary,
    preview_seed,
)
from .randomizer import SampleCache, SeededSampler, derive_seed
from .retry import RetryOrchestrator, drain
from .messages import GenerationRequest, ProgressUpdate
from .structural_validation import StructuralValidator, ValidationStats, path_complexity
from .themes import ThemeConfig, ThemeInput, ThemeResolver
from .validation import (
    CriticalGenerationError,
    GenerationError,
    InputValidationError,
    PathGenerationError,
    PointValidator,
    ReachabilityChecker,
    ThemeConfigurationError,
    validate_canvas,
    validate_level_id,
)

GENERATOR_VERSION = "1.0"

# Only structural defects can reject a fallback path
FALLBACK_PROFILE = "experimental"

# GeneratorConfig fields that follow the production / diagnostic preset
_MODE_FIELDS = (
    "production_mode",
    "max_path_generation_retries",
    "log_errors",
    "max_iterations",
    "time_budget_ms",
    "error_batch_size",
    "error_batch_interval_s",
)


@dataclass
class PerformanceStats:
    """Running timing figures for completed generations."""
    total_generations: int = 0
    total_time_ms: float = 0.0
    min_time_ms: float = math.inf
    max_time_ms: float = 0.0
    slow_generations: int = 0
    fallback_count: int = 0

    @property
    def average_time_ms(self) -> float:
        return self.total_time_ms / self.total_generations if self.total_generations else 0.0

    def record(self, elapsed_ms: float, slow_threshold_ms: float, tier: FallbackTier):
        self.total_generations += 1
        self.total_time_ms += elapsed_ms
        self.min_time_ms = min(self.min_time_ms, elapsed_ms)
        self.max_time_ms = max(self.max_time_ms, elapsed_ms)
        if elapsed_ms > slow_threshold_ms:
            self.slow_generations += 1
        if tier != FallbackTier.NONE:
            self.fallback_count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_generations": self.total_generations,
            "average_time_ms": self.average_time_ms,
            "min_time_ms": self.min_time_ms if self.total_generations else None,
            "max_time_ms": self.max_time_ms,
            "slow_generations": self.slow_generations,
            "fallback_count": self.fallback_count,
        }


@dataclass
class _CanvasWorkspace:
    """Canvas-bound collaborators, built once per canvas size."""
    width: float
    height: float
    point_validator: PointValidator
    reachability: ReachabilityChecker
    builder: RawPathBuilder
    structural: StructuralValidator
    balance: BalanceChecker
    fallback: FallbackChain


@dataclass
class _Plan:
    """A request with every input resolved."""
    level_id: Any
    level: LevelPathConfig
    workspace: _CanvasWorkspace
    theme: ThemeConfig
    mode: PathMode
    seed: int
    entry: Point
    exit: Point
    profile: str
    trigger_reason: Optional[str] = None
    static_points: Optional[List[Point]] = None
    use_static: bool = False


@dataclass
class PathGenerationEngine:
    """
    Facade that wires the path generation components together.

    ``generate()`` never raises in the default configuration: every failure
    is logged through the error tracker and recovered with a fallback path.
    Disable ``enable_fallback_generation`` to get a ``GenerationError``
    instead, or set ``throw_on_critical_errors`` to have unexpected failures
    raise ``CriticalGenerationError`` (carrying the minimal path).
    """
    canvas_width: float = 800.0
    canvas_height: float = 600.0
    config: GeneratorConfig = field(default_factory=GeneratorConfig)
    levels: LevelConfigTable = field(default_factory=LevelConfigTable)
    themes: ThemeResolver = field(default_factory=ThemeResolver)
    verbose: bool = False
    clock: Callable[[], float] = time.perf_counter
    logger: Any = field(init=False, repr=False)

    def __post_init__(self):
        self.logger = create_logger(verbose=self.verbose, name="PathEngine")
        self._check_canvas(self.canvas_width, self.canvas_height)

        self.error_tracker = ErrorTracker(
            production_mode=self.config.production_mode,
            history_size=self.config.diagnostic_history_size,
            buffer_size=self.config.circular_buffer_size,
            batch_size=self.config.error_batch_size,
            batch_interval_s=self.config.error_batch_interval_s,
            log_errors=self.config.log_errors,
            verbose=self.verbose,
        )
        self.sample_cache = SampleCache(self.config.rng_cache_size)
        self.retry = RetryOrchestrator(self.config.max_path_generation_retries, self.error_tracker, self.verbose)
        self.performance = PerformanceStats()

        self._workspaces: Dict[Tuple[float, float], _CanvasWorkspace] = {}
        self._static_validation: Dict[Tuple[Any, ...], ValidationResult] = {}
        self._current_paths: Dict[int, GeneratedPath] = {}

        self.async_coordinator = AsyncCoordinator(self)

        mode = "production" if self.config.production_mode else "diagnostic"
        self.logger.info(f"Path engine ready ({self.canvas_width}x{self.canvas_height}, {mode} mode)")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, request: GenerationRequest) -> GeneratedPath:
        """
        Produce a path for a generation request.

        Returns:
            GeneratedPath with at least two points inside the canvas. The
            result also becomes the level's current path.
        """
        return drain(self.generation_steps(request))

    async def generate_async(self, request: GenerationRequest,
                             progress_callback: Optional[Callable[[ProgressUpdate], Any]] = None) -> GeneratedPath:
        """Async ``generate`` with progress reports. Only one call may run at a time."""
        return await self.async_coordinator.run(request, progress_callback)

    def regenerate(self, level_id: int, trigger_reason: str, **overrides) -> GeneratedPath:
        """Generate a fresh path for a level in response to an in-game event."""
        request = GenerationRequest(level_id=level_id, trigger_reason=trigger_reason).with_overrides(**overrides)
        self.logger.info(f"Regenerating path for level {level_id} ({trigger_reason})")
        return self.generate(request)

    def current_path(self, level_id: int) -> Optional[GeneratedPath]:
        return self._current_paths.get(level_id)

    def generation_steps(self, request: GenerationRequest,
                         record: bool = True) -> Generator[ProgressUpdate, None, GeneratedPath]:
        """
        The generation pipeline as a generator of progress updates.

        The generator's return value is the path. ``record=False`` leaves
        the level's current path untouched (used for previews).
        """
        started = self.clock()
        yield ProgressUpdate("initialization", 0.0, f"Preparing path for level {request.level_id}")

        plan: Optional[_Plan] = None
        try:
            plan = self._prepare(request)
            path = yield from self._generate_planned(plan, started)
        except PathGenerationError as exc:
            self.error_tracker.log(exc.kind, exc.message, {"level_id": request.level_id, **exc.context})
            if not self.config.enable_fallback_generation:
                raise GenerationError(
                    f"Path generation failed for level {request.level_id}: {exc.message}",
                    {"level_id": request.level_id, "kind": exc.kind.value}
                ) from exc
            yield ProgressUpdate("fallback", 80.0, f"Recovering with a fallback path: {exc.message}")
            path = self._fallback(plan or self._fallback_plan(request), exc.message, started)
        except Exception as exc:
            message = f"Unexpected failure generating level {request.level_id}: {exc!r}"
            self.error_tracker.log(ErrorKind.CRITICAL, message, {"level_id": request.level_id},
                                   ValidationSeverity.CRITICAL)
            path = self._minimal(plan or self._fallback_plan(request), message, started)
            if self.config.throw_on_critical_errors:
                raise CriticalGenerationError(message, {"level_id": request.level_id}, fallback_path=path) from exc

        self.performance.record(path.metadata.generation_time_ms, self.config.time_budget_ms, path.fallback_tier)
        if record and validate_level_id(request.level_id).valid:
            self._current_paths[request.level_id] = path

        yield ProgressUpdate("complete", 100.0,
                             f"Path ready: {len(path)} points, tier {path.fallback_tier.value}")
        return path

    def generate_previews(self, level_id: int, themes: Optional[Sequence[str]] = None,
                          modes: Optional[Sequence[Any]] = None,
                          variation_count: int = DEFAULT_VARIATION_COUNT) -> List[PathPreview]:
        """
        Candidate paths for a level across themes and modes.

        Defaults to the level's theme plus ``cyber`` and ``urban``, and the
        level's own path mode. Previews do not replace the current path.
        """
        level = self.levels.get(level_id)
        theme_names = list(dict.fromkeys(themes or [level.theme, "cyber", "urban"]))
        path_modes = [PathMode.from_value(m) for m in (modes or [level.path_mode])]

        previews = []
        for variation in range(variation_count):
            for theme in theme_names:
                for mode in path_modes:
                    request = GenerationRequest(level_id, seed=preview_seed(level_id, variation), theme=theme,
                                                path_mode=mode, trigger_reason="preview")
                    path = drain(self.generation_steps(request, record=False))
                    previews.append(PathPreview(level_id, theme, mode, variation, path))
        return previews[:variation_count * len(theme_names)]

    def test_level_generation(self, level_id: int, themes: Optional[Sequence[str]] = None,
                              modes: Optional[Sequence[Any]] = None,
                              max_tests: int = MAX_LEVEL_TESTS) -> PreviewSummary:
        """Generate one path per mode/theme pair and summarize how many pass."""
        pairs = [(PathMode.from_value(m), t)
                 for m in (modes or DEFAULT_TEST_MODES)
                 for t in (themes or DEFAULT_TEST_THEMES)][:max_tests]

        previews = []
        for index, (mode, theme) in enumerate(pairs):
            request = GenerationRequest(level_id, seed=preview_seed(level_id, index), theme=theme,
                                        path_mode=mode, trigger_reason="level_test")
            path = drain(self.generation_steps(request, record=False))
            previews.append(PathPreview(level_id, theme, mode, index, path))

        summary = PreviewSummary.from_previews(level_id, previews)
        self.logger.info(f"Level {level_id}: {summary.passed_tests}/{summary.total_tests} generation tests passed")
        return summary

    def set_production_mode(self, enabled: bool):
        """Switch between production and diagnostic limits at runtime."""
        preset = GeneratorConfig.production() if enabled else GeneratorConfig.diagnostic()
        self.config = self.config.replace(**{name: getattr(preset, name) for name in _MODE_FIELDS})

        self.error_tracker.set_production_mode(enabled)
        self.error_tracker.log_errors = self.config.log_errors
        self.error_tracker.batch_size = self.config.error_batch_size
        self.error_tracker.batch_interval_s = self.config.error_batch_interval_s
        self.retry.max_retries = self.config.max_path_generation_retries
        self._workspaces.clear()
        self.logger.info(f"Switched to {'production' if enabled else 'diagnostic'} mode")

    def update_level(self, config: LevelPathConfig):
        """Replace a level's configuration, dropping anything cached for it."""
        self.levels.set(config)
        self._forget_level(config.level_id)

    def set_generation_enabled(self, level_id: int, enabled: bool, preserve_layout: bool = False) -> LevelPathConfig:
        config = self.levels.set_generation_enabled(level_id, enabled, preserve_layout)
        self._forget_level(level_id)
        return config

    def import_path(self, data: Dict[str, Any]) -> GeneratedPath:
        """
        Rebuild an exported path and validate it again for this engine's canvas.

        Raises:
            InputValidationError: malformed data or a structurally invalid path
        """
        try:
            path = GeneratedPath.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise InputValidationError(f"Malformed path export: {exc}") from exc

        workspace = self._workspace(self.canvas_width, self.canvas_height)
        validation = workspace.structural.validate(path.points, FALLBACK_PROFILE)
        if validation.has_critical:
            raise InputValidationError(
                f"Imported path is invalid: {'; '.join(validation.error_messages)}",
                {"level_id": path.metadata.level_id}
            )
        path.validation = validation
        return path

    def export_path(self, level_id: int) -> Optional[Dict[str, Any]]:
        path = self.current_path(level_id)
        return path.to_dict() if path else None

    def error_stats(self) -> ErrorStats:
        return self.error_tracker.stats()

    def validation_stats(self) -> ValidationStats:
        """Structural validation counters summed over every canvas used so far."""
        total = ValidationStats()
        for workspace in self._workspaces.values():
            stats = workspace.structural.stats
            total.total_validations += stats.total_validations
            total.hard_failures += stats.hard_failures
            total.warnings_generated += stats.warnings_generated
            for name, count in stats.profile_usage.items():
                total.profile_usage[name] = total.profile_usage.get(name, 0) + count
        return total

    def reset_statistics(self) -> ErrorStats:
        """Clear error counters, sampler cache and timing figures. Returns the previous error stats."""
        previous = self.error_tracker.reset()
        self.sample_cache.clear()
        self.performance = PerformanceStats()
        return previous

    def export_diagnostics(self) -> Dict[str, Any]:
        """JSON-serializable snapshot of the engine's state."""
        return {
            "generator_version": GENERATOR_VERSION,
            "canvas": {"width": self.canvas_width, "height": self.canvas_height},
            "error_stats": self.error_tracker.stats().to_dict(),
            "sampler": self.sample_cache.stats(),
            "performance": self.performance.to_dict(),
            "validation": self.validation_stats().to_dict(),
            "config": self.config.to_dict(),
            "levels": self.levels.to_dict(),
            "current_paths": {str(level_id): path.metadata.to_dict()
                              for level_id, path in sorted(self._current_paths.items())},
        }

    def close(self):
        self.error_tracker.close()

    # ------------------------------------------------------------------
    # Request resolution
    # ------------------------------------------------------------------

    def _check_canvas(self, width: Any, height: Any):
        validate_canvas(
            width, height,
            self.config.min_canvas_size, self.config.max_canvas_size,
            self.config.min_aspect_ratio, self.config.max_aspect_ratio,
        ).raise_if_invalid(InputValidationError)

    def _workspace(self, width: float, height: float) -> _CanvasWorkspace:
        key = (float(width), float(height))
        workspace = self._workspaces.get(key)
        if workspace is None:
            self._check_canvas(width, height)
            cfg = self.config
            workspace = _CanvasWorkspace(
                width=width,
                height=height,
                point_validator=PointValidator(width, height),
                reachability=ReachabilityChecker(width, height, lightweight=cfg.production_mode),
                builder=RawPathBuilder(width, height, cfg.max_iterations, cfg.time_budget_ms, verbose=self.verbose),
                structural=StructuralValidator(width, height, cfg.validation_profile, cfg.warning_penalty,
                                               verbose=self.verbose),
                balance=BalanceChecker(width, height, cfg.balance),
                fallback=FallbackChain(width, height, cfg.segment_length, cfg.fallback_jitter, verbose=self.verbose),
            )
            self._workspaces[key] = workspace
        return workspace

    def _canvas_for(self, request: GenerationRequest) -> Tuple[float, float]:
        width = self.canvas_width if request.canvas_width is None else request.canvas_width
        height = self.canvas_height if request.canvas_height is None else request.canvas_height
        return width, height

    def _resolve_theme(self, theme: ThemeInput, quiet: bool = False) -> ThemeConfig:
        try:
            return self.themes.resolve(theme)
        except ThemeConfigurationError as exc:
            if not quiet:
                self.error_tracker.log(exc.kind, f"{exc.message}; using default theme '{self.themes.default}'",
                                       exc.context, ValidationSeverity.WARNING)
            return self.themes.default_theme()

    def _resolve_seed(self, seed: Any, level_id: int) -> int:
        if seed is None:
            return derive_seed(level_id)
        sampler = SeededSampler(seed, self.sample_cache)
        if sampler.seed_error:
            self.error_tracker.log(ErrorKind.CONFIGURATION, sampler.seed_error, {"seed": repr(seed)},
                                   ValidationSeverity.WARNING)
        return sampler.seed

    def _prepare(self, request: GenerationRequest) -> _Plan:
        validate_level_id(request.level_id).raise_if_invalid(InputValidationError)
        level_id = request.level_id
        width, height = self._canvas_for(request)
        workspace = self._workspace(width, height)

        level = self.levels.get(level_id)
        theme = self._resolve_theme(request.theme if request.theme is not None else level.theme)
        try:
            mode = PathMode.from_value(request.path_mode if request.path_mode is not None else level.path_mode)
        except ValueError as exc:
            raise InputValidationError(str(exc), {"level_id": level_id, "path_mode": request.path_mode}) from exc
        seed = self._resolve_seed(request.seed, level_id)

        static_points = level.static_points(width, height)
        use_static = False
        if not level.allow_generation:
            if static_points:
                mode, use_static = PathMode.STATIC, True
            else:
                self.error_tracker.log(ErrorKind.CONFIGURATION,
                                       f"Generation disabled for level {level_id} but no static path is defined",
                                       {"level_id": level_id}, ValidationSeverity.WARNING)
        elif mode == PathMode.STATIC:
            if static_points:
                use_static = True
            else:
                self.error_tracker.log(ErrorKind.CONFIGURATION,
                                       f"Static mode requested for level {level_id} without a static path; "
                                       f"generating dynamically",
                                       {"level_id": level_id}, ValidationSeverity.WARNING)
                mode = PathMode.DYNAMIC

        if mode == PathMode.DYNAMIC:
            entry, exit_ = self._dynamic_endpoints(workspace, SeededSampler(seed, self.sample_cache))
            static_points = None
        else:
            entry, exit_ = level.entry_point(width, height), level.exit_point(width, height)
        workspace.point_validator.validate(entry, "entry point")
        workspace.point_validator.validate(exit_, "exit point")

        return _Plan(
            level_id=level_id,
            level=level,
            workspace=workspace,
            theme=theme,
            mode=mode,
            seed=seed,
            entry=entry,
            exit=exit_,
            profile=request.validation_profile or level.validation_profile or self.config.validation_profile,
            trigger_reason=request.trigger_reason,
            static_points=static_points,
            use_static=use_static,
        )

    def _fallback_plan(self, request: GenerationRequest) -> _Plan:
        """Best-effort plan for recovery when the request could not be resolved."""
        width, height = self._canvas_for(request)
        if not validate_canvas(width, height, self.config.min_canvas_size, self.config.max_canvas_size,
                               self.config.min_aspect_ratio, self.config.max_aspect_ratio).valid:
            width, height = self.canvas_width, self.canvas_height
        workspace = self._workspace(width, height)

        valid_level = validate_level_id(request.level_id).valid
        level = self.levels.get(request.level_id) if valid_level else self.levels.default
        seed = request.seed if isinstance(request.seed, int) and not isinstance(request.seed, bool) else derive_seed()
        return _Plan(
            level_id=request.level_id,
            level=level,
            workspace=workspace,
            theme=self._resolve_theme(request.theme if request.theme is not None else level.theme, quiet=True),
            mode=level.path_mode,
            seed=seed,
            entry=level.entry_point(width, height),
            exit=level.exit_point(width, height),
            profile=FALLBACK_PROFILE,
            trigger_reason=request.trigger_reason,
        )

    def _dynamic_endpoints(self, workspace: _CanvasWorkspace, sampler: SeededSampler) -> Tuple[Point, Point]:
        """Entry on a random canvas edge, exit on the far half of the canvas."""
        w, h, m = workspace.width, workspace.height, workspace.builder.margin
        side = int(sampler.random() * 4)
        along_x = sampler.random() * w * 0.8 + w * 0.1
        along_y = sampler.random() * h * 0.8 + h * 0.1
        entry = (Point(along_x, m), Point(w - m, along_y), Point(along_x, h - m), Point(m, along_y))[side]

        exit_ = Point(w - m if entry.x < w / 2 else m, sampler.random() * h * 0.6 + h * 0.2)
        min_distance = min(w, h) * 0.7
        if calculate_2d_distance(entry, exit_) < min_distance:
            pushed = move_along_heading(entry, calculate_heading(entry, exit_), min_distance)
            exit_ = Point(*clamp_position(pushed, w, h, m))
        return entry, exit_

    def _forget_level(self, level_id: Optional[int]):
        for key in [k for k in self._static_validation if k[0] == level_id]:
            del self._static_validation[key]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _generate_planned(self, plan: _Plan, started: float) -> Generator[ProgressUpdate, None, GeneratedPath]:
        if plan.use_static:
            yield ProgressUpdate("raw_build", 20.0, f"Using static path for level {plan.level_id}")
            validation = self._static_validation_for(plan)
            yield ProgressUpdate("validation", 60.0, "Static path validated")
            return self._finish(plan, plan.static_points, validation, FallbackTier.NONE, started, used_static=True)

        plan.workspace.reachability.check(plan.entry, plan.exit).raise_if_unreachable()

        def attempt(seed: int, index: int):
            return self._attempt(plan, seed, index)

        outcome = yield from self.retry.run_steps(attempt, plan.seed)
        build, validation = outcome.value
        return self._finish(plan, build.points, validation, FallbackTier.NONE, started,
                            seed=outcome.seed, retry_count=outcome.retry_count, iterations=build.iterations)

    def _attempt(self, plan: _Plan, seed: int,
                 index: int) -> Generator[ProgressUpdate, None, Tuple[RawBuildResult, ValidationResult]]:
        sampler = SeededSampler(seed, self.sample_cache)
        builder = plan.workspace.builder

        yield ProgressUpdate("raw_build", 20.0, f"Building path (attempt {index + 1}/{self.retry.total_attempts})")
        if plan.static_points:
            build = builder.enhance(plan.static_points, plan.theme, sampler, self.config.segment_length)
        else:
            build = builder.build(plan.entry, plan.exit, plan.theme, sampler)
        if build.stopped_early:
            raise GenerationError(build.warnings[0] if build.warnings else "Raw build stopped early",
                                  {"stop_reason": build.stop_reason, "iterations": build.iterations})

        yield ProgressUpdate("validation", 60.0, f"Validating {len(build.points)} points")
        validation = self._validate(plan, build.points)
        if not validation.is_valid:
            raise GenerationError(f"Path failed validation: {'; '.join(validation.error_messages[:3])}",
                                  {"errors": len(validation.errors), "profile": validation.profile})
        return build, validation

    def _validate(self, plan: _Plan, points: Sequence[Point]) -> ValidationResult:
        workspace = plan.workspace
        structural = workspace.structural.validate(points, plan.profile, plan.level_id, plan.theme.name,
                                                   overrides=plan.level.validation_overrides())
        if not structural.is_valid:
            return structural
        balance = workspace.balance.check(points, plan.level_id, plan.level.target_difficulty)
        penalty = self.config.warning_penalty * len(structural.warnings)
        structural.merge(balance)
        structural.balance_score = max(0.0, min(1.0, balance.balance_score - penalty))
        if structural.warnings:
            shown = "; ".join(structural.warning_messages[:3])
            self.logger.warning(f"Level {plan.level_id} path has {len(structural.warnings)} "
                                f"warnings (balance {structural.balance_score:.2f}): {shown}")
        return structural

    def _static_validation_for(self, plan: _Plan) -> ValidationResult:
        """Static paths are validated once per level, canvas, theme and profile."""
        workspace = plan.workspace
        key = (plan.level_id, workspace.width, workspace.height, plan.theme.name, plan.profile)
        validation = self._static_validation.get(key)
        if validation is None:
            validation = self._validate(plan, plan.static_points)
            self._static_validation[key] = validation
        if validation.has_critical:
            raise GenerationError(f"Static path for level {plan.level_id} is invalid: "
                                  f"{'; '.join(validation.error_messages[:3])}", {"level_id": plan.level_id})
        return validation

    def _fallback(self, plan: _Plan, reason: str, started: float) -> GeneratedPath:
        workspace = plan.workspace
        if self.config.fallback_to_simple_path:
            try:
                points = workspace.fallback.simple_path(plan.entry, plan.exit,
                                                        SeededSampler(plan.seed, self.sample_cache))
                validation = workspace.structural.validate(points, FALLBACK_PROFILE)
                validation.raise_if_invalid(GenerationError)
            except (InputValidationError, GenerationError) as exc:
                self.error_tracker.log(exc.kind, f"Simple fallback failed: {exc.message}", exc.context,
                                       ValidationSeverity.WARNING)
            else:
                self.error_tracker.record_fallback(FallbackTier.SIMPLE)
                self.logger.warning(f"Level {plan.level_id}: using simple fallback path ({reason})")
                return self._finish(plan, points, validation, FallbackTier.SIMPLE, started, fallback_reason=reason)
        return self._minimal(plan, reason, started)

    def _minimal(self, plan: _Plan, reason: str, started: float) -> GeneratedPath:
        workspace = plan.workspace
        points = workspace.fallback.minimal_path(plan.entry, plan.exit)
        validation = workspace.structural.validate(points, FALLBACK_PROFILE)
        self.error_tracker.record_fallback(FallbackTier.MINIMAL)
        self.logger.warning(f"Level {plan.level_id}: using minimal fallback path ({reason})")
        return self._finish(plan, points, validation, FallbackTier.MINIMAL, started, fallback_reason=reason)

    def _finish(self, plan: _Plan, points: Sequence[Point], validation: ValidationResult, tier: FallbackTier,
                started: float, seed: Optional[int] = None, retry_count: int = 0, iterations: int = 0,
                used_static: bool = False, fallback_reason: Optional[str] = None) -> GeneratedPath:
        metadata = PathMetadata(
            seed=plan.seed if seed is None else seed,
            theme_name=plan.theme.name,
            path_mode=plan.mode,
            fallback_tier=tier,
            retry_count=retry_count,
            generation_time_ms=(self.clock() - started) * 1000.0,
            total_length=path_length(points),
            complexity=path_complexity(points),
            bounds=PathBounds.from_points(points),
            level_id=plan.level_id if validate_level_id(plan.level_id).valid else None,
            point_count=len(points),
            iterations=iterations,
            generated_at=time.time(),
            used_static_path=used_static,
            trigger_reason=plan.trigger_reason,
            fallback_reason=fallback_reason,
            generator_version=GENERATOR_VERSION,
        )
        self.logger.debug(f"Level {plan.level_id}: {len(points)} points, tier {tier.value}, "
                          f"{metadata.generation_time_ms:.2f}ms")
        return GeneratedPath(tuple(points), metadata, validation)
