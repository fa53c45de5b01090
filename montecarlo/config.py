from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

# Applied when a caller leaves iterations/workers unset (or zero). These make
# the API usable without configuration; they are not tuned for throughput.
DEFAULT_ITERATIONS = 100
DEFAULT_WORKERS = 50


class ConfigValidationError(ValueError):
    pass


def normalize_iterations(iterations: int | None) -> int:
    return int(iterations) if iterations else DEFAULT_ITERATIONS


def normalize_workers(workers: int | None) -> int:
    return int(workers) if workers else DEFAULT_WORKERS


@dataclass(frozen=True)
class SimulationConfig:
    iterations: int = 0
    workers: int = 0

    def normalized(self) -> "SimulationConfig":
        return replace(
            self,
            iterations=normalize_iterations(self.iterations),
            workers=normalize_workers(self.workers),
        )

    @staticmethod
    def from_json(obj: dict[str, Any] | None) -> "SimulationConfig":
        if not obj:
            return SimulationConfig()
        if not isinstance(obj, dict):
            raise ConfigValidationError("simulation config must be an object")

        def _int_or_raw(key: str) -> Any:
            raw = obj.get(key)
            if raw is None:
                return 0
            # Keep non-integral values as-is so validation can report them.
            if isinstance(raw, float) and raw.is_integer():
                return int(raw)
            return raw

        return SimulationConfig(
            iterations=_int_or_raw("iterations"),
            workers=_int_or_raw("workers"),
        )
