from __future__ import annotations

from numbers import Integral, Real

from montecarlo.config import ConfigValidationError, SimulationConfig

__all__ = [
    "ConfigValidationError",
    "validate_config",
    "validate_counts",
    "validate_input_values",
]


def _validate_count(name: str, value: object) -> None:
    # bool is an Integral; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ConfigValidationError(f"{name} must be an integer (got {value!r})")
    if value < 0:
        raise ConfigValidationError(f"{name} must be >= 0 (got {value})")


def validate_counts(*, iterations: object, workers: object) -> None:
    _validate_count("iterations", iterations)
    _validate_count("workers", workers)


def validate_config(config: SimulationConfig) -> None:
    validate_counts(iterations=config.iterations, workers=config.workers)


def validate_input_values(input_values: object) -> None:
    if input_values is None:
        return
    if not hasattr(input_values, "items"):
        raise ConfigValidationError(
            (
                "input values must be a mapping of names to numbers "
                f"(got {type(input_values).__name__})"
            )
        )
    for key, value in input_values.items():  # type: ignore[attr-defined]
        if not isinstance(key, str):
            raise ConfigValidationError(f"input name must be a string (got {key!r})")
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ConfigValidationError(
                f"input '{key}' must be a number (got {value!r})"
            )
