from __future__ import annotations

import logging
import math
import sys
from collections.abc import Iterable, Sequence
from dataclasses import asdict
from typing import Any

from montecarlo.types import Statistics, Summary

logger = logging.getLogger(__name__)

# Relative tolerance for a negative variance caused by cancellation in
# E[x^2] - E[x]^2.
VARIANCE_EPSILON = 1e-9


def summarize(outcomes: Iterable[float]) -> Statistics:
    """Mean, population standard deviation, min and max in one pass.

    An empty sample returns the all-zero `Statistics()` instead of dividing by
    zero. Min/max start at +/- `sys.float_info.max`, so they are only replaced
    by observed values.
    """

    count = 0
    total = 0.0
    total_sq = 0.0
    lo = sys.float_info.max
    hi = -sys.float_info.max

    for x in outcomes:
        x = float(x)
        count += 1
        total += x
        total_sq += x * x
        if x < lo:
            lo = x
        if x > hi:
            hi = x

    if count == 0:
        return Statistics()

    if lo == hi:
        # Constant sample: report it exactly rather than through round-off.
        return Statistics(mean=lo, standard_deviation=0.0, min=lo, max=hi)

    mean = total / count
    mean = min(max(mean, lo), hi)
    mean_sq = total_sq / count
    variance = mean_sq - mean * mean
    if variance < 0.0:
        if -variance > VARIANCE_EPSILON * max(mean_sq, 1.0):
            logger.warning(
                "variance %r is negative beyond round-off tolerance; clamping to 0",
                variance,
            )
        variance = 0.0

    return Statistics(
        mean=mean,
        standard_deviation=math.sqrt(variance),
        min=lo,
        max=hi,
    )


def _percentile_sorted(values_sorted: Sequence[float], p: float) -> float:
    if not values_sorted:
        return math.nan
    if p <= 0:
        return float(values_sorted[0])
    if p >= 100:
        return float(values_sorted[-1])

    # Linear interpolation between closest ranks.
    n = len(values_sorted)
    pos = (p / 100.0) * (n - 1)
    lo = int(math.floor(pos))
    hi = int(math.ceil(pos))
    if lo == hi:
        return float(values_sorted[lo])
    frac = pos - lo
    return float(values_sorted[lo] * (1.0 - frac) + values_sorted[hi] * frac)


def percentiles(values: Iterable[float], ps: Iterable[float]) -> dict[str, float]:
    values_sorted = sorted(float(x) for x in values)
    return {f"p{p:g}": _percentile_sorted(values_sorted, p) for p in ps}


def summary_to_json(
    summary: Summary, *, ps: Sequence[float] = (5, 50, 95)
) -> dict[str, Any]:
    return {
        "iterations": len(summary.outcomes),
        "input_values": dict(summary.input_values),
        "statistics": asdict(summary.statistics),
        "percentiles": percentiles(summary.outcomes, ps),
    }
