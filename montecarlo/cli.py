from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from montecarlo.config import SimulationConfig
from montecarlo.io import write_batch_csv, write_outcomes_csv, write_summary_json
from montecarlo.metrics import summary_to_json
from montecarlo.randomness import RandomSource
from montecarlo.scenarios import DEFAULT_INPUTS, SCENARIOS, build_trial
from montecarlo.sim import Simulation
from montecarlo.validate import ConfigValidationError, validate_input_values

logger = logging.getLogger(__name__)


def _parse_input(text: str) -> tuple[str, float]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE (got {text!r})")
    try:
        return name, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"value for '{name}' must be a number (got {value!r})"
        ) from None


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--scenario", required=True, choices=sorted(SCENARIOS))
    p.add_argument("--config", required=False, type=Path)
    p.add_argument("--iterations", required=False, type=int)
    p.add_argument("--workers", required=False, type=int)
    p.add_argument("--seed", required=False, type=int)
    p.add_argument("--out-summary", required=True, type=Path)
    p.add_argument(
        "--log-level",
        required=False,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="montecarlo", description="Parallel Monte Carlo trial runner"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sim = sub.add_parser("simulate", help="Run one simulation")
    _add_common(sim)
    sim.add_argument(
        "--input",
        dest="inputs",
        action="append",
        default=[],
        type=_parse_input,
        metavar="NAME=VALUE",
        help="Trial input; overrides the scenario default of the same name",
    )
    sim.add_argument("--out-outcomes", required=False, type=Path)

    batch = sub.add_parser("batch", help="Run one simulation per input set")
    _add_common(batch)
    batch.add_argument(
        "--inputs",
        required=True,
        type=Path,
        help="JSON list of input objects, one per run",
    )
    batch.add_argument("--out-runs", required=False, type=Path)
    return p


def _read_json(path: Path, flag: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"{flag} {path} is not valid JSON: {e}") from e


def _load_config(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig()
    if args.config:
        config = SimulationConfig.from_json(_read_json(args.config, "--config"))
    if args.iterations is not None:
        config = replace(config, iterations=args.iterations)
    if args.workers is not None:
        config = replace(config, workers=args.workers)
    return config


def _build_simulation(args: argparse.Namespace) -> Simulation:
    trial = build_trial(args.scenario, RandomSource(args.seed))
    return Simulation.from_config(_load_config(args), trial)


def main(argv: list[str] | None = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, getattr(args, "log_level", "WARNING")),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.cmd == "simulate":
            simulation = _build_simulation(args)
            input_values = dict(DEFAULT_INPUTS[args.scenario])
            input_values.update(dict(args.inputs))

            summary = simulation.run(input_values)
            logger.info(
                "%s: %d trials, mean=%g",
                args.scenario,
                len(summary.outcomes),
                summary.statistics.mean,
            )
            write_summary_json(args.out_summary, summary_to_json(summary))
            if args.out_outcomes:
                write_outcomes_csv(args.out_outcomes, summary.outcomes)
            return 0

        if args.cmd == "batch":
            simulation = _build_simulation(args)
            raw = _read_json(args.inputs, "--inputs")
            if not isinstance(raw, list):
                raise ConfigValidationError("--inputs must contain a JSON list")
            for i, item in enumerate(raw):
                if item is not None and not isinstance(item, dict):
                    raise ConfigValidationError(f"--inputs entry {i} must be an object")
            defaults = DEFAULT_INPUTS[args.scenario]
            inputs = [{**defaults, **(item or {})} for item in raw]
            for i, input_values in enumerate(inputs):
                try:
                    validate_input_values(input_values)
                except ConfigValidationError as e:
                    raise ConfigValidationError(f"--inputs entry {i}: {e}") from e

            summaries = simulation.run_multiple(inputs)
            write_summary_json(
                args.out_summary, [summary_to_json(s) for s in summaries]
            )
            if args.out_runs:
                write_batch_csv(args.out_runs, summaries)
            return 0
    except ConfigValidationError as e:
        sys.stderr.write(f"error: {e}\n")
        return 2

    raise AssertionError(f"Unhandled command: {args.cmd}")
