import pytest

from towerpath.classes.reports import ErrorKind
from towerpath.procedural.error_tracker import ErrorTracker
from towerpath.procedural.retry import RetryOrchestrator, drain
from towerpath.procedural.messages import ProgressUpdate
from towerpath.procedural.validation import GenerationError, ReachabilityError


def flaky(failures: int):
    calls = []

    def attempt(seed: int, index: int):
        calls.append(seed)
        if index < failures:
            raise GenerationError(f"bad seed {seed}")
        return f"path-{seed}"
    return attempt, calls


def test_retries_with_incremented_seed() -> None:
    tracker = ErrorTracker(log_errors=False)
    attempt, calls = flaky(2)
    outcome = RetryOrchestrator(3, tracker).run(attempt, 100)
    assert outcome.value == "path-102"
    assert outcome.seed == 102
    assert outcome.retry_count == 2
    assert calls == [100, 101, 102]
    assert tracker.stats().counts[ErrorKind.GENERATION.value] == 2


def test_exhaustion_chains_last_error() -> None:
    attempt, calls = flaky(10)
    with pytest.raises(GenerationError) as excinfo:
        RetryOrchestrator(2).run(attempt, 7)
    assert calls == [7, 8, 9]
    assert "3 attempts" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, GenerationError)


def test_zero_retries_means_one_attempt() -> None:
    attempt, calls = flaky(1)
    with pytest.raises(GenerationError):
        RetryOrchestrator(0).run(attempt, 1)
    assert calls == [1]


def test_other_errors_are_not_retried() -> None:
    calls = []

    def attempt(seed: int, index: int):
        calls.append(seed)
        raise ReachabilityError("too close")

    with pytest.raises(ReachabilityError):
        RetryOrchestrator(3).run(attempt, 1)
    assert calls == [1]


def test_negative_retries_rejected() -> None:
    with pytest.raises(ValueError):
        RetryOrchestrator(-1)


def test_step_form_passes_progress_through() -> None:
    def attempt(seed: int, index: int):
        yield ProgressUpdate("raw_build", 40.0, f"seed {seed}")
        if index == 0:
            raise GenerationError("first fails")
        yield ProgressUpdate("validation", 70.0)
        return seed

    steps = RetryOrchestrator(1).run_steps(attempt, 10)
    stages = []
    while True:
        try:
            stages.append(next(steps).message)
        except StopIteration as done:
            outcome = done.value
            break
    assert stages == ["seed 10", "seed 11", ""]
    assert outcome.seed == 11


def test_drain_returns_generator_value() -> None:
    def steps():
        yield ProgressUpdate("a", 1.0)
        yield ProgressUpdate("b", 2.0)
        return "done"

    assert drain(steps()) == "done"
