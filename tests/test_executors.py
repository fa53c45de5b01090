from __future__ import annotations

import threading
import time

import pytest

from montecarlo.config import DEFAULT_ITERATIONS
from montecarlo.executors import (
    SerialExecutor,
    WorkerPoolExecutor,
    default_executor_for_workers,
)
from montecarlo.metrics import summarize


def _constant(_input_values: object) -> float:
    return 1.0


def _montecarlo_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name.startswith("montecarlo-")]


def test_trialexecutor_protocol_method_is_not_implemented() -> None:
    from montecarlo.executors import TrialExecutor

    with pytest.raises(NotImplementedError):
        TrialExecutor.execute(  # type: ignore[misc]
            object(),  # type: ignore[arg-type]
            input_values={},
            iterations=1,
            workers=1,
            runner=_constant,
        )


@pytest.mark.parametrize(
    "iterations,workers",
    [(1, 1), (7, 3), (10, 50), (1000, 8), (250, 250), (64, 1)],
)
def test_worker_pool_returns_exactly_iterations_outcomes(
    iterations: int, workers: int
) -> None:
    out = WorkerPoolExecutor().execute(
        input_values={}, iterations=iterations, workers=workers, runner=_constant
    )
    assert len(out) == iterations
    assert out == [1.0] * iterations


def test_worker_pool_zero_config_uses_defaults() -> None:
    out = WorkerPoolExecutor().execute(
        input_values={}, iterations=0, workers=0, runner=_constant
    )
    assert len(out) == DEFAULT_ITERATIONS


def test_worker_pool_collects_every_outcome_regardless_of_order() -> None:
    counter = iter(range(10_000))
    lock = threading.Lock()

    def numbered(_input_values: object) -> float:
        with lock:
            return float(next(counter))

    out = WorkerPoolExecutor().execute(
        input_values={}, iterations=500, workers=16, runner=numbered
    )
    assert sorted(out) == [float(i) for i in range(500)]


def test_worker_pool_runs_trials_concurrently_up_to_worker_count() -> None:
    workers = 4
    active = 0
    peak = 0
    lock = threading.Lock()

    def slow(_input_values: object) -> float:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return 0.0

    WorkerPoolExecutor().execute(
        input_values={}, iterations=40, workers=workers, runner=slow
    )
    assert 1 < peak <= workers


def test_worker_pool_shares_input_read_only() -> None:
    seen: list[object] = []
    lock = threading.Lock()
    input_values = {"x": 2.5}

    def reads(iv: dict[str, float]) -> float:
        with lock:
            seen.append(iv)
        return iv["x"]

    out = WorkerPoolExecutor().execute(
        input_values=input_values, iterations=20, workers=5, runner=reads
    )
    assert out == [2.5] * 20
    assert all(iv is input_values for iv in seen)


def test_worker_pool_small_token_queue_does_not_deadlock() -> None:
    out = WorkerPoolExecutor(queue_size=1).execute(
        input_values={}, iterations=300, workers=3, runner=_constant
    )
    assert len(out) == 300


def test_worker_pool_joins_all_threads_before_returning() -> None:
    WorkerPoolExecutor().execute(
        input_values={}, iterations=100, workers=20, runner=_constant
    )
    assert _montecarlo_threads() == []


def test_worker_pool_trial_failure_aborts_run_and_propagates() -> None:
    calls = 0
    lock = threading.Lock()

    def flaky(_input_values: object) -> float:
        nonlocal calls
        with lock:
            calls += 1
            n = calls
        if n == 5:
            raise RuntimeError("trial exploded")
        return 1.0

    with pytest.raises(RuntimeError, match="trial exploded"):
        WorkerPoolExecutor().execute(
            input_values={}, iterations=10_000, workers=4, runner=flaky
        )
    assert calls < 10_000
    assert _montecarlo_threads() == []


def test_worker_pool_non_numeric_outcome_is_a_failure() -> None:
    with pytest.raises((TypeError, ValueError)):
        WorkerPoolExecutor().execute(
            input_values={},
            iterations=5,
            workers=2,
            runner=lambda _iv: "nope",  # type: ignore[arg-type,return-value]
        )


def test_serial_executor_matches_worker_pool_statistics() -> None:
    serial = SerialExecutor().execute(
        input_values={}, iterations=200, workers=1, runner=_constant
    )
    pooled = WorkerPoolExecutor().execute(
        input_values={}, iterations=200, workers=200, runner=_constant
    )
    assert summarize(serial) == summarize(pooled)


def test_serial_executor_propagates_failure() -> None:
    def boom(_input_values: object) -> float:
        raise ValueError("bad trial")

    with pytest.raises(ValueError, match="bad trial"):
        SerialExecutor().execute(input_values={}, iterations=3, workers=1, runner=boom)


def test_default_executor_selects_by_worker_count() -> None:
    assert isinstance(default_executor_for_workers(1), SerialExecutor)
    assert isinstance(default_executor_for_workers(2), WorkerPoolExecutor)
    assert isinstance(default_executor_for_workers(0), WorkerPoolExecutor)
    with pytest.raises(ValueError, match="Unsupported worker count"):
        default_executor_for_workers(-1)


@pytest.mark.parametrize("executor", [WorkerPoolExecutor(), SerialExecutor()])
@pytest.mark.parametrize(
    "iterations,workers,match",
    [
        (10, -1, "workers must be >= 0"),
        (-3, 2, "iterations must be >= 0"),
        (10, 2.5, "workers must be an integer"),
    ],
)
def test_execute_rejects_invalid_counts_without_starting_threads(
    executor: object, iterations: object, workers: object, match: str
) -> None:
    from montecarlo.validate import ConfigValidationError

    with pytest.raises(ConfigValidationError, match=match):
        executor.execute(  # type: ignore[attr-defined]
            input_values={}, iterations=iterations, workers=workers, runner=_constant
        )
    assert _montecarlo_threads() == []
