from unittest.mock import patch

import pytest

from towerpath.classes.path_objects import FallbackTier
from towerpath.classes.reports import ErrorKind
from towerpath.misc.validation_framework import ValidationSeverity
from towerpath.procedural.error_tracker import CircularBuffer, ErrorTracker


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_diagnostic_history_is_bounded() -> None:
    tracker = ErrorTracker(history_size=3, log_errors=False)
    for i in range(5):
        tracker.log(ErrorKind.GENERATION, f"failure {i}")
    assert [r.message for r in tracker.history()] == ["failure 2", "failure 3", "failure 4"]
    assert tracker.total_errors == 5
    assert [r.message for r in tracker.recent(2)] == ["failure 3", "failure 4"]
    assert tracker.recent(0) == []


def test_production_buffer_keeps_last_records() -> None:
    tracker = ErrorTracker(production_mode=True, buffer_size=25)
    for i in range(1000):
        tracker.log(ErrorKind.REACHABILITY, f"unreachable {i}")
    history = tracker.history()
    assert len(history) == 25
    assert history[-1].message == "unreachable 999"
    assert tracker.stats().total_errors == 1000
    assert tracker.stats().counts["reachability"] == 1000


def test_batch_flushes_when_full() -> None:
    clock = FakeClock()
    tracker = ErrorTracker(production_mode=True, batch_size=3, batch_interval_s=60.0, clock=clock)
    with patch.object(tracker.logger, "warning") as warning:
        tracker.log(ErrorKind.GENERATION, "a")
        tracker.log(ErrorKind.CONFIGURATION, "b")
        assert tracker.pending_batch == 2
        warning.assert_not_called()
        tracker.log(ErrorKind.GENERATION, "c")
    assert tracker.pending_batch == 0
    warning.assert_called_once()
    assert "3 errors" in warning.call_args[0][0]


def test_batch_flushes_after_interval() -> None:
    clock = FakeClock()
    tracker = ErrorTracker(production_mode=True, batch_size=100, batch_interval_s=5.0, clock=clock)
    tracker.log(ErrorKind.GENERATION, "first")
    assert tracker.pending_batch == 1
    clock.now += 6.0
    tracker.log(ErrorKind.GENERATION, "second")
    assert tracker.pending_batch == 0


def test_flush_summary_counts_kinds() -> None:
    clock = FakeClock()
    tracker = ErrorTracker(production_mode=True, batch_size=100, batch_interval_s=60.0, clock=clock)
    tracker.log(ErrorKind.GENERATION, "x")
    clock.now += 2.0
    tracker.log(ErrorKind.CRITICAL, "y", severity=ValidationSeverity.CRITICAL)
    summary = tracker.flush()
    assert summary["count"] == 2
    assert summary["timespan_s"] == pytest.approx(2.0)
    assert summary["kinds"] == {"generation": 1, "critical": 1}
    assert summary["critical_count"] == 1
    assert tracker.flush() is None


def test_stats_and_reset() -> None:
    clock = FakeClock()
    tracker = ErrorTracker(log_errors=False, clock=clock)
    tracker.log(ErrorKind.INPUT_VALIDATION, "bad point")
    tracker.record_fallback(FallbackTier.SIMPLE)
    clock.now += 10.0

    stats = tracker.stats()
    assert stats.fallbacks_used == 1
    assert stats.fallback_tiers == {"simple": 1}
    assert stats.error_rate == pytest.approx(0.1)
    assert stats.last_error.message == "bad point"
    assert stats.to_dict()["last_error"]["kind"] == "input_validation"

    previous = tracker.reset()
    assert previous.total_errors == 1
    assert tracker.stats().total_errors == 0
    assert tracker.history() == []


def test_mode_switch_carries_history() -> None:
    tracker = ErrorTracker(buffer_size=2, log_errors=False)
    for i in range(3):
        tracker.log(ErrorKind.GENERATION, str(i))
    tracker.set_production_mode(True)
    assert [r.message for r in tracker.history()] == ["1", "2"]
    tracker.set_production_mode(False)
    assert [r.message for r in tracker.history()] == ["1", "2"]


def test_circular_buffer_order() -> None:
    with pytest.raises(ValueError):
        CircularBuffer(0)
    buffer = CircularBuffer(3)
    tracker = ErrorTracker(log_errors=False)
    records = [tracker.log(ErrorKind.GENERATION, str(i)) for i in range(4)]
    for record in records:
        buffer.append(record)
    assert len(buffer) == 3
    assert [r.message for r in buffer.items()] == ["1", "2", "3"]
