from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from montecarlo.types import Summary


def write_summary_json(path: Path, summary: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")


def write_outcomes_csv(path: Path, outcomes: Sequence[float]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["outcome"])
        for x in outcomes:
            w.writerow([x])


def write_batch_csv(path: Path, summaries: Sequence[Summary]) -> None:
    # Input columns are the union of every run's input names.
    input_names = sorted({k for s in summaries for k in s.input_values})
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(
            [
                "run_index",
                *input_names,
                "iterations",
                "mean",
                "standard_deviation",
                "min",
                "max",
            ]
        )
        for i, s in enumerate(summaries):
            w.writerow(
                [
                    i,
                    *(s.input_values.get(k, "") for k in input_names),
                    len(s.outcomes),
                    s.statistics.mean,
                    s.statistics.standard_deviation,
                    s.statistics.min,
                    s.statistics.max,
                ]
            )
