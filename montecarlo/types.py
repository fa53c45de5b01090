from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

# Named numeric inputs shared read-only by every trial of one run.
TrialInput = Mapping[str, float]

TrialFunction = Callable[[TrialInput], float]


@dataclass(frozen=True)
class TrialToken:
    """One unit of work handed to a worker."""

    index: int


@dataclass(frozen=True)
class Statistics:
    mean: float = 0.0
    standard_deviation: float = 0.0  # population (divisor = count)
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class Summary:
    outcomes: tuple[float, ...]  # completion order, not submission order
    statistics: Statistics
    input_values: TrialInput
