from __future__ import annotations

# Example trial functions used by the CLI and the statistical tests.

from collections.abc import Callable

from montecarlo.randomness import RandomSource
from montecarlo.types import TrialFunction, TrialInput


def pi_trial(rng: RandomSource) -> TrialFunction:
    """1.0 when a uniform point in the unit square lands in the quarter circle.

    The run mean approaches pi/4.
    """

    def trial(_input_values: TrialInput) -> float:
        x = rng.uniform(0.0, 1.0)
        y = rng.uniform(0.0, 1.0)
        return 1.0 if x * x + y * y <= 1.0 else 0.0

    return trial


def portfolio_trial(rng: RandomSource) -> TrialFunction:
    """Final value of a portfolio compounded by normal daily returns."""

    def trial(input_values: TrialInput) -> float:
        value = float(input_values["initial_value"])
        mean_return = float(input_values["mean_return"])
        stddev_return = float(input_values["stddev_return"])
        for _ in range(int(input_values["days"])):
            value *= 1.0 + rng.normal(mean_return, stddev_return)
        return value

    return trial


def normal_trial(rng: RandomSource) -> TrialFunction:
    def trial(input_values: TrialInput) -> float:
        return rng.normal(
            float(input_values.get("mean", 0.0)),
            float(input_values.get("stddev", 1.0)),
        )

    return trial


SCENARIOS: dict[str, Callable[[RandomSource], TrialFunction]] = {
    "pi": pi_trial,
    "portfolio": portfolio_trial,
    "normal": normal_trial,
}

DEFAULT_INPUTS: dict[str, dict[str, float]] = {
    "pi": {},
    "portfolio": {
        "initial_value": 10000.0,
        "mean_return": 0.0005,
        "stddev_return": 0.01,
        "days": 365.0,
    },
    "normal": {"mean": 0.0, "stddev": 1.0},
}


def build_trial(name: str, rng: RandomSource) -> TrialFunction:
    try:
        factory = SCENARIOS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scenario: {name!r} (expected one of {sorted(SCENARIOS)})"
        ) from None
    return factory(rng)
