"""
Command-line entry point.

  compound-sim settings.json --trials 2000 --seed 42 -o report.json

The settings file is one JSON object with SimulationInput fields, in camelCase
(as exported by the web simulator) or snake_case. Omitted fields use the
SIMULATOR_* environment defaults.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from core.config import SimulationConfig
from core.schema import SimulationInput
from data_prep.presets import (
    PRODUCT_PRESETS,
    apply_preset,
    default_input_from_env,
    with_default_sensitivity,
)
from data_prep.validators import validate_input
from engine import project, simulate
from analytics.report import build_report

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2

_WITHDRAWAL_KEYS = {"annual_withdrawal_rate", "monthly_withdrawal"}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="compound-sim",
        description="Project a savings and drawdown plan and assess it with Monte Carlo.",
    )
    p.add_argument("settings", nargs="?", help="JSON settings file ('-' for stdin). Defaults only if omitted.")
    p.add_argument("--trials", type=int, default=None, help="Monte Carlo trials (default 5000)")
    p.add_argument("--seed", type=int, default=None, help="Random seed (default 7)")
    p.add_argument(
        "--distribution", choices=("normal", "lognormal"), default=None,
        help="Annual return distribution",
    )
    p.add_argument("--nominal", action="store_true", help="Report Monte Carlo values in nominal terms")
    p.add_argument(
        "--preset", choices=sorted(PRODUCT_PRESETS) + ["custom"], default=None,
        help="Apply a product preset (return / expense ratio / volatility)",
    )
    p.add_argument("--sensitivity", action="store_true", help="Attach the standard sensitivity deltas")
    p.add_argument("-o", "--output", default=None, help="Write the report JSON here instead of stdout")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def load_settings(source: Optional[str]) -> Dict[str, Any]:
    if source is None:
        return {}
    if source == "-":
        data = json.load(sys.stdin)
    else:
        with open(source, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError("Settings file must contain a JSON object.")
    return data


def build_input(settings: Dict[str, Any]) -> SimulationInput:
    """Merge user settings (camelCase or snake_case keys) over the environment defaults."""
    settings = {to_snake(k): v for k, v in settings.items()}
    merged = default_input_from_env().model_dump(exclude_none=True)
    if _WITHDRAWAL_KEYS & settings.keys():
        # the user picked a withdrawal mode; drop the default one
        merged.pop("annual_withdrawal_rate", None)
        merged.pop("monthly_withdrawal", None)
    merged.update(settings)
    return SimulationInput.model_validate(merged)


def _build_config(args: argparse.Namespace) -> SimulationConfig:
    defaults = SimulationConfig()
    return SimulationConfig(
        n_trials=args.trials if args.trials is not None else defaults.n_trials,
        seed=args.seed if args.seed is not None else defaults.seed,
        return_distribution=args.distribution or defaults.return_distribution,
        real_terms=not args.nominal,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        inp = build_input(load_settings(args.settings))
        if args.preset:
            inp = apply_preset(inp, args.preset)
        if args.sensitivity:
            inp = with_default_sensitivity(inp)
        config = _build_config(args)
    except (ValidationError, ValueError) as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    check = validate_input(inp)
    if not check.is_valid:
        print(check.summary(), file=sys.stderr)
        return EXIT_INVALID_INPUT
    for w in check.warnings:
        logger.warning(w)

    projections = project(inp, config)
    result = simulate(inp, config)
    report = build_report(inp, projections, result)

    text = json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("Report written to %s", args.output)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
