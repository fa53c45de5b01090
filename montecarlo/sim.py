from __future__ import annotations

# Public simulation entrypoint.
#
# `Simulation` validates its configuration once, then hands each run to a
# TrialExecutor and reduces the outcomes with `metrics.summarize`.

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType

from montecarlo.config import SimulationConfig
from montecarlo.executors import TrialExecutor, default_executor_for_workers
from montecarlo.metrics import summarize
from montecarlo.types import Summary, TrialFunction, TrialInput
from montecarlo.validate import validate_config, validate_input_values

logger = logging.getLogger(__name__)


class BatchRunError(RuntimeError):
    """One or more runs of a `run_multiple` batch raised.

    Sibling runs are never cancelled. `summaries` is index-aligned with the
    batch inputs and holds `None` where a run failed; `errors` maps those
    indices to the exception each one raised.
    """

    def __init__(
        self,
        summaries: list[Summary | None],
        errors: dict[int, BaseException],
    ) -> None:
        failed = ", ".join(str(i) for i in sorted(errors))
        super().__init__(
            f"{len(errors)} of {len(summaries)} runs failed (indices: {failed})"
        )
        self.summaries = summaries
        self.errors = errors


def _freeze_input(input_values: Mapping[str, float] | None) -> TrialInput:
    validate_input_values(input_values)
    return MappingProxyType(
        {str(k): float(v) for k, v in (input_values or {}).items()}
    )


class Simulation:
    def __init__(
        self,
        runner: TrialFunction,
        *,
        iterations: int = 0,
        workers: int = 0,
        executor: TrialExecutor | None = None,
    ) -> None:
        config = SimulationConfig(iterations=iterations, workers=workers)
        validate_config(config)
        self.config = config.normalized()
        self.runner = runner
        self.executor = executor or default_executor_for_workers(self.config.workers)

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        runner: TrialFunction,
        *,
        executor: TrialExecutor | None = None,
    ) -> "Simulation":
        return cls(
            runner,
            iterations=config.iterations,
            workers=config.workers,
            executor=executor,
        )

    @property
    def iterations(self) -> int:
        return self.config.iterations

    @property
    def workers(self) -> int:
        return self.config.workers

    def run(self, input_values: Mapping[str, float] | None = None) -> Summary:
        frozen = _freeze_input(input_values)
        outcomes = self.executor.execute(
            input_values=frozen,
            iterations=self.config.iterations,
            workers=self.config.workers,
            runner=self.runner,
        )
        return Summary(
            outcomes=tuple(outcomes),
            statistics=summarize(outcomes),
            input_values=frozen,
        )

    def run_multiple(
        self, inputs: Iterable[Mapping[str, float] | None]
    ) -> list[Summary]:
        """Run once per input set, concurrently; results follow input order.

        Each run gets its own worker pool. A failing run does not stop the
        others; once all have finished, `BatchRunError` is raised if any
        failed.
        """

        inputs = list(inputs)
        if not inputs:
            return []

        logger.debug("starting batch of %d runs", len(inputs))
        with ThreadPoolExecutor(
            max_workers=len(inputs), thread_name_prefix="montecarlo-run"
        ) as pool:
            futures = [pool.submit(self.run, input_values) for input_values in inputs]

        summaries: list[Summary | None] = []
        errors: dict[int, BaseException] = {}
        for i, fut in enumerate(futures):
            exc = fut.exception()
            if exc is not None:
                logger.debug("batch run %d failed: %r", i, exc)
                errors[i] = exc
                summaries.append(None)
            else:
                summaries.append(fut.result())

        if errors:
            raise BatchRunError(summaries, errors) from errors[min(errors)]
        return summaries  # type: ignore[return-value]


def run_simulation(
    *,
    runner: TrialFunction,
    input_values: Mapping[str, float] | None = None,
    iterations: int = 0,
    workers: int = 0,
) -> Summary:
    return Simulation(runner, iterations=iterations, workers=workers).run(input_values)
