"""
Per-engine error bookkeeping.

Diagnostic mode keeps a rolling history and logs every record as it happens.
Production mode keeps a fixed-size circular buffer and reports errors in
batches, flushed when the batch is full or the batch interval has elapsed.
"""
from __future__ import annotations

import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from towerpath.classes.path_objects import FallbackTier
from towerpath.classes.reports import ErrorKind, ErrorRecord
from towerpath.misc.logger import LogLevel, create_logger
from towerpath.misc.validation_framework import ValidationSeverity

_LOG_LEVELS = {
    ValidationSeverity.INFO: LogLevel.INFO,
    ValidationSeverity.WARNING: LogLevel.WARNING,
    ValidationSeverity.ERROR: LogLevel.ERROR,
    ValidationSeverity.CRITICAL: LogLevel.CRITICAL,
}


@dataclass
class ErrorStats:
    """Snapshot of the tracker counters."""
    counts: Dict[str, int]
    total_errors: int
    fallbacks_used: int
    critical_errors: int
    history: List[ErrorRecord]
    uptime_seconds: float
    error_rate: float
    production_mode: bool
    last_error: Optional[ErrorRecord] = None
    fallback_tiers: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "counts": dict(self.counts),
            "total_errors": self.total_errors,
            "fallbacks_used": self.fallbacks_used,
            "fallback_tiers": dict(self.fallback_tiers),
            "critical_errors": self.critical_errors,
            "uptime_seconds": self.uptime_seconds,
            "error_rate": self.error_rate,
            "production_mode": self.production_mode,
            "last_error": self.last_error.to_dict() if self.last_error else None,
            "history": [r.to_dict() for r in self.history],
        }


class CircularBuffer:
    """Fixed-capacity record store that overwrites the oldest slot when full."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("Circular buffer capacity must be at least 1")
        self.capacity = capacity
        self._slots: List[Optional[ErrorRecord]] = [None] * capacity
        self._index = 0
        self._full = False

    def __len__(self) -> int:
        return self.capacity if self._full else self._index

    def append(self, record: ErrorRecord):
        self._slots[self._index] = record
        self._index = (self._index + 1) % self.capacity
        if self._index == 0:
            self._full = True

    def items(self) -> List[ErrorRecord]:
        """Records oldest first."""
        if not self._full:
            return list(self._slots[:self._index])
        return list(self._slots[self._index:] + self._slots[:self._index])

    def clear(self):
        self._slots = [None] * self.capacity
        self._index = 0
        self._full = False


class ErrorTracker:
    """Single entry point for failures logged by the engine."""

    def __init__(self, production_mode: bool = False, history_size: int = 50, buffer_size: int = 25,
                 batch_size: int = 10, batch_interval_s: float = 5.0, log_errors: bool = True,
                 clock: Callable[[], float] = time.time, verbose: bool = False):
        self.history_size = history_size
        self.buffer_size = buffer_size
        self.batch_size = batch_size
        self.batch_interval_s = batch_interval_s
        self.log_errors = log_errors
        self.clock = clock
        self.logger = create_logger(verbose=verbose, name="ErrorTracker")

        self.production_mode = production_mode
        self._history: Deque[ErrorRecord] = deque(maxlen=history_size)
        self._buffer = CircularBuffer(buffer_size)
        self._batch: List[ErrorRecord] = []
        self._reset_counters()

    def _reset_counters(self):
        self._counts: Counter = Counter({kind.value: 0 for kind in ErrorKind})
        self._fallback_tiers: Counter = Counter()
        self.total_errors = 0
        self.fallbacks_used = 0
        self.critical_errors = 0
        self.last_error: Optional[ErrorRecord] = None
        self.started_at = self.clock()
        self._last_flush = self.started_at

    def log(self, kind: ErrorKind, message: str, context: Optional[Dict[str, Any]] = None,
            severity: ValidationSeverity = ValidationSeverity.ERROR) -> ErrorRecord:
        """Record a failure, bump its counters and forward it to the logger."""
        record = ErrorRecord(kind, message, severity, dict(context or {}), self.clock())
        self._counts[kind.value] += 1
        self.total_errors += 1
        if severity == ValidationSeverity.CRITICAL or kind == ErrorKind.CRITICAL:
            self.critical_errors += 1
        self.last_error = record

        if self.production_mode:
            self._buffer.append(record)
            self._batch.append(record)
            if severity == ValidationSeverity.CRITICAL:
                self._emit(record)
            if len(self._batch) >= self.batch_size or self._batch_interval_elapsed():
                self.flush()
        else:
            self._history.append(record)
            if self.log_errors:
                self._emit(record)
        return record

    def record_fallback(self, tier: FallbackTier):
        self.fallbacks_used += 1
        self._fallback_tiers[tier.value] += 1

    def _emit(self, record: ErrorRecord):
        context = f" {record.context}" if record.context else ""
        self.logger.log(f"[{record.kind.value}] {record.message}{context}", _LOG_LEVELS[record.severity])

    def _batch_interval_elapsed(self) -> bool:
        return self.clock() - self._last_flush >= self.batch_interval_s

    def flush(self) -> Optional[Dict[str, Any]]:
        """Emit one summary line for the pending batch and clear it."""
        self._last_flush = self.clock()
        if not self._batch:
            return None
        batch, self._batch = self._batch, []
        summary = {
            "count": len(batch),
            "timespan_s": batch[-1].timestamp - batch[0].timestamp,
            "kinds": dict(Counter(r.kind.value for r in batch)),
            "critical_count": sum(1 for r in batch if r.severity == ValidationSeverity.CRITICAL),
            "most_recent": batch[-1].message,
        }
        self.logger.warning(
            f"Error batch: {summary['count']} errors over {summary['timespan_s']:.1f}s "
            f"{summary['kinds']} (critical: {summary['critical_count']}), "
            f"most recent: {summary['most_recent']}"
        )
        return summary

    @property
    def pending_batch(self) -> int:
        return len(self._batch)

    def history(self) -> List[ErrorRecord]:
        """All retained records, oldest first."""
        return self._buffer.items() if self.production_mode else list(self._history)

    def recent(self, count: int = 10) -> List[ErrorRecord]:
        """The newest ``count`` records, oldest first."""
        if count <= 0:
            return []
        return self.history()[-count:]

    def stats(self) -> ErrorStats:
        uptime = max(0.0, self.clock() - self.started_at)
        return ErrorStats(
            counts=dict(self._counts),
            total_errors=self.total_errors,
            fallbacks_used=self.fallbacks_used,
            critical_errors=self.critical_errors,
            history=self.history(),
            uptime_seconds=uptime,
            error_rate=self.total_errors / uptime if uptime > 0 else 0.0,
            production_mode=self.production_mode,
            last_error=self.last_error,
            fallback_tiers=dict(self._fallback_tiers),
        )

    def reset(self) -> ErrorStats:
        """Clear counters and history, returning the snapshot taken just before."""
        previous = self.stats()
        self._history.clear()
        self._buffer.clear()
        self._batch.clear()
        self._reset_counters()
        self.logger.info("Error statistics reset")
        return previous

    def set_production_mode(self, enabled: bool):
        """Switch modes, carrying retained history over to the other store."""
        if enabled == self.production_mode:
            return
        retained = self.history()
        if enabled:
            self._buffer.clear()
            for record in retained[-self.buffer_size:]:
                self._buffer.append(record)
            self._last_flush = self.clock()
        else:
            self.flush()
            self._history.clear()
            self._history.extend(retained)
        self.production_mode = enabled
        self.logger.info(f"Error tracking switched to {'production' if enabled else 'diagnostic'} mode")

    def close(self):
        """Flush any pending batch."""
        self.flush()
