"""
Retry loop around a single generation attempt.

Only ``GenerationError`` is retried. Reachability, input and configuration
failures propagate on the first attempt so the caller can fall back at once.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generator, Optional

from towerpath.classes.reports import ErrorKind
from towerpath.misc.logger import create_logger
from towerpath.misc.validation_framework import ValidationSeverity
from .error_tracker import ErrorTracker
from .messages import ProgressUpdate
from .validation import GenerationError

AttemptSteps = Callable[[int, int], Generator[ProgressUpdate, None, Any]]


def drain(steps: Generator[ProgressUpdate, None, Any]) -> Any:
    """Run a step generator to completion, discarding progress updates."""
    while True:
        try:
            next(steps)
        except StopIteration as done:
            return done.value


@dataclass
class AttemptOutcome:
    """Value returned by the successful attempt and how it was reached."""
    value: Any
    seed: int
    retry_count: int


class RetryOrchestrator:
    """
    Runs an attempt up to ``1 + max_retries`` times with seeds
    ``base_seed``, ``base_seed + 1``, ...

    Each failed attempt is logged to the error tracker as a GENERATION warning.
    When every attempt fails a ``GenerationError`` is raised, chained to the
    last attempt's error.
    """

    def __init__(self, max_retries: int = 3, error_tracker: Optional[ErrorTracker] = None,
                 verbose: bool = False):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.error_tracker = error_tracker
        self.logger = create_logger(verbose=verbose, name="Retry")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def run_steps(self, attempt: AttemptSteps, base_seed: int) -> Generator[ProgressUpdate, None, AttemptOutcome]:
        """
        Generator form used by the engine pipeline.

        ``attempt(seed, index)`` is itself a generator; its progress updates
        are passed through and its return value becomes ``AttemptOutcome.value``.
        """
        last_error: Optional[GenerationError] = None
        for index in range(self.total_attempts):
            seed = base_seed + index
            try:
                value = yield from attempt(seed, index)
            except GenerationError as exc:
                last_error = exc
                self._record_failure(exc, seed, index)
                continue
            if index:
                self.logger.info(f"Attempt {index + 1} succeeded with seed {seed}")
            return AttemptOutcome(value, seed, index)

        raise GenerationError(
            f"Path generation failed after {self.total_attempts} attempts",
            {"base_seed": base_seed, "attempts": self.total_attempts,
             "last_error": last_error.message if last_error else None}
        ) from last_error

    def run(self, attempt: Callable[[int, int], Any], base_seed: int) -> AttemptOutcome:
        """Plain-function form: ``attempt(seed, index)`` returns the value or raises."""
        def steps(seed: int, index: int):
            return attempt(seed, index)
            yield  # pragma: no cover

        return drain(self.run_steps(steps, base_seed))

    def _record_failure(self, exc: GenerationError, seed: int, index: int):
        message = f"Attempt {index + 1}/{self.total_attempts} failed (seed {seed}): {exc.message}"
        if self.error_tracker is not None:
            self.error_tracker.log(ErrorKind.GENERATION, message, {"seed": seed, "attempt": index + 1, **exc.context},
                                   ValidationSeverity.WARNING)
        else:
            self.logger.warning(message)
