from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict

from .balance import BalanceSettings


@dataclass
class GeneratorConfig:
    """
    Error-handling and performance knobs of the path generation engine.

    Use ``GeneratorConfig.diagnostic()`` while designing levels (verbose
    history, generous limits) and ``GeneratorConfig.production()`` in a
    shipped build (tight limits, batched error reporting).
    """
    production_mode: bool = False

    # Retry / fallback
    max_path_generation_retries: int = 3
    enable_fallback_generation: bool = True
    fallback_to_simple_path: bool = True
    throw_on_critical_errors: bool = False
    log_errors: bool = True

    # Raw builder limits
    max_iterations: int = 500
    time_budget_ms: float = 50.0
    segment_length: float = 60.0
    fallback_jitter: float = 10.0

    # Error tracking
    error_batch_size: int = 10
    error_batch_interval_s: float = 5.0
    circular_buffer_size: int = 25
    diagnostic_history_size: int = 50
    rng_cache_size: int = 1000

    # Validation
    validation_profile: str = "balanced"
    warning_penalty: float = 0.02
    balance: BalanceSettings = field(default_factory=BalanceSettings)

    # Canvas limits
    min_canvas_size: float = 200.0
    max_canvas_size: float = 10000.0
    min_aspect_ratio: float = 0.5
    max_aspect_ratio: float = 3.0

    @classmethod
    def diagnostic(cls, **overrides) -> "GeneratorConfig":
        return cls(**overrides)

    @classmethod
    def production(cls, **overrides) -> "GeneratorConfig":
        values: Dict[str, Any] = dict(
            production_mode=True,
            max_path_generation_retries=1,
            log_errors=False,
            max_iterations=250,
            time_budget_ms=25.0,
            error_batch_size=10,
            error_batch_interval_s=5.0,
            circular_buffer_size=25,
        )
        values.update(overrides)
        return cls(**values)

    def replace(self, **changes) -> "GeneratorConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["balance"] = self.balance.to_dict()
        return data
