"""
Cooperative async driver for the generation pipeline.

The pipeline runs on the event loop thread. Control returns to the loop with
``asyncio.sleep(0)`` after every progress update, so a long build never
blocks other tasks for more than one stage.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional

from towerpath.classes.path_objects import GeneratedPath
from towerpath.misc.logger import create_logger
from towerpath.misc.validation_framework import ValidationSeverity
from .messages import GenerationRequest, ProgressUpdate
from .validation import GenerationError

if TYPE_CHECKING:
    from .engine import PathGenerationEngine

ProgressCallback = Callable[[ProgressUpdate], Any]


class AsyncCoordinator:
    """Runs one async generation at a time for its engine."""

    def __init__(self, engine: "PathGenerationEngine"):
        self.engine = engine
        self._in_progress = False
        self.logger = create_logger(verbose=engine.verbose, name="AsyncCoordinator")

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    async def run(self, request: GenerationRequest,
                  progress_callback: Optional[ProgressCallback] = None) -> GeneratedPath:
        """
        Generate a path, reporting each stage to ``progress_callback``.

        The callback may be a plain function or a coroutine function.

        Raises:
            GenerationError: another generation is already running on this engine
        """
        if self._in_progress:
            error = GenerationError("Path generation already in progress", {"level_id": request.level_id})
            self.engine.error_tracker.log(error.kind, error.message, error.context, ValidationSeverity.WARNING)
            raise error

        self._in_progress = True
        try:
            steps = self.engine.generation_steps(request)
            while True:
                try:
                    update = next(steps)
                except StopIteration as done:
                    return done.value
                self.logger.debug(f"{update.stage}: {update.percent:.0f}% {update.message}")
                if progress_callback is not None:
                    result = progress_callback(update)
                    if inspect.isawaitable(result):
                        await result
                await asyncio.sleep(0)
        finally:
            self._in_progress = False
