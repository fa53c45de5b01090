"""Parallel-trial Monte Carlo engine.

The core is a headless library:

- `montecarlo.executors` fans trials out across a fixed worker pool.
- `montecarlo.metrics` reduces collected outcomes to summary statistics.
- `montecarlo.sim.Simulation` composes the two.

Run the bundled example scenarios from source:

    python -m montecarlo simulate --scenario pi --iterations 100000
"""

from __future__ import annotations

from montecarlo.config import DEFAULT_ITERATIONS, DEFAULT_WORKERS, SimulationConfig
from montecarlo.metrics import summarize
from montecarlo.sim import BatchRunError, Simulation
from montecarlo.types import Statistics, Summary

__all__ = [
    "BatchRunError",
    "DEFAULT_ITERATIONS",
    "DEFAULT_WORKERS",
    "Simulation",
    "SimulationConfig",
    "Statistics",
    "Summary",
    "__version__",
    "summarize",
]

__version__ = "0.1.0"
