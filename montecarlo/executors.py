from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Protocol

from montecarlo.config import normalize_iterations, normalize_workers
from montecarlo.types import TrialFunction, TrialInput, TrialToken
from montecarlo.validate import validate_counts

logger = logging.getLogger(__name__)


class TrialExecutor(Protocol):
    def execute(
        self,
        *,
        input_values: TrialInput,
        iterations: int,
        workers: int,
        runner: TrialFunction,
    ) -> list[float]:
        raise NotImplementedError


@dataclass(frozen=True)
class _TrialFailure:
    token: TrialToken
    error: BaseException


# One per worker, queued after the last real token.
_STOP = None


@dataclass(frozen=True)
class WorkerPoolExecutor:
    """Fan trials out across a fixed pool of threads and gather every outcome.

    A producer thread feeds `iterations` tokens into a bounded queue while the
    workers are already consuming it. Outcomes land in an unbounded sink, so a
    worker that finished a trial never waits on the collecting side.

    The returned list is in completion order. It has nothing to do with the
    order tokens were produced in.

    If a trial raises, no further tokens are handed out, in-flight trials are
    allowed to finish, every thread is joined and the first error is re-raised
    on the calling thread.
    """

    # Bound on queued-but-unclaimed tokens; 0 means two per worker.
    queue_size: int = 0

    def execute(
        self,
        *,
        input_values: TrialInput,
        iterations: int,
        workers: int,
        runner: TrialFunction,
    ) -> list[float]:
        validate_counts(iterations=iterations or 0, workers=workers or 0)
        iterations = normalize_iterations(iterations)
        workers = normalize_workers(workers)

        tokens: queue.Queue[TrialToken | None] = queue.Queue(
            maxsize=self.queue_size or 2 * workers
        )
        sink: queue.SimpleQueue[float | _TrialFailure] = queue.SimpleQueue()
        aborted = threading.Event()

        def produce() -> None:
            try:
                for i in range(iterations):
                    if aborted.is_set():
                        break
                    tokens.put(TrialToken(index=i))
            finally:
                for _ in range(workers):
                    tokens.put(_STOP)

        def work() -> None:
            while True:
                token = tokens.get()
                if token is _STOP:
                    return
                # Keep draining after an abort so the producer never blocks.
                if aborted.is_set():
                    continue
                try:
                    sink.put(float(runner(input_values)))
                except BaseException as exc:  # noqa: BLE001
                    aborted.set()
                    sink.put(_TrialFailure(token=token, error=exc))

        logger.debug("starting %d workers for %d trials", workers, iterations)
        pool = [
            threading.Thread(target=work, name=f"montecarlo-worker-{i}")
            for i in range(workers)
        ]
        for t in pool:
            t.start()
        producer = threading.Thread(target=produce, name="montecarlo-producer")
        producer.start()

        outcomes: list[float] = []
        failure: _TrialFailure | None = None
        while len(outcomes) < iterations:
            item = sink.get()
            if isinstance(item, _TrialFailure):
                failure = item
                break
            outcomes.append(item)

        producer.join()
        for t in pool:
            t.join()

        if failure is not None:
            logger.debug(
                "run aborted by trial %d after %d outcomes",
                failure.token.index,
                len(outcomes),
            )
            raise failure.error

        return outcomes


@dataclass(frozen=True)
class SerialExecutor:
    """Run every trial on the calling thread, in submission order."""

    def execute(
        self,
        *,
        input_values: TrialInput,
        iterations: int,
        workers: int,
        runner: TrialFunction,
    ) -> list[float]:
        validate_counts(iterations=iterations or 0, workers=workers or 0)
        iterations = normalize_iterations(iterations)
        return [float(runner(input_values)) for _ in range(iterations)]


def default_executor_for_workers(workers: int) -> TrialExecutor:
    workers = normalize_workers(workers)
    if workers < 1:
        raise ValueError(f"Unsupported worker count: {workers}")
    if workers == 1:
        return SerialExecutor()
    return WorkerPoolExecutor()
