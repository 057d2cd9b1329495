"""
Monte Carlo runner — replays the projection timeline over thousands of random return paths.

Flow:
  1. Sample an (n_trials × total_years) return matrix (distributions/sampler.py)
  2. Run every trial through the same yearly step as the deterministic calculator
     (engine/cashflow.py) — trials are independent rows of one vectorised run
  3. Reduce: per-year percentiles, depletion rate, outcome probabilities, histogram
     (engine/aggregator.py)
  4. Optionally sweep contribution / withdrawal-rate deltas (engine/sensitivity.py)

With volatility = 0 every trial equals the deterministic path, so all percentiles
collapse to the deterministic total (in nominal terms).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from core.config import SimulationConfig
from core.schema import MonteCarloResult, SimulationInput
from distributions.sampler import ReturnDistributionParams, ReturnSampler

from .aggregator import run_trials
from .sensitivity import run_sensitivity_sweep

logger = logging.getLogger(__name__)


def sample_returns(
    inp: SimulationInput,
    config: SimulationConfig,
    rng: np.random.Generator,
) -> np.ndarray:
    """Random annual returns for every trial, shape (n_trials, total_years)."""
    params = ReturnDistributionParams.from_percent(
        inp.effective_return_rate,
        inp.volatility,
        shape=config.return_distribution,
    )
    sampler = ReturnSampler(params, n_trials=config.n_trials, rng=rng)
    return sampler.sample(inp.total_years).returns


def simulate(
    inp: SimulationInput,
    config: Optional[SimulationConfig] = None,
    *,
    rng: Optional[np.random.Generator] = None,
) -> MonteCarloResult:
    """
    Run the Monte Carlo risk assessment.

    Parameters
    ----------
    inp : SimulationInput
        Validated assumptions; contribution_deltas / rate_deltas trigger a sensitivity sweep
    config : SimulationConfig, optional
        Trial count, seed, reporting options
    rng : np.random.Generator, optional
        Explicit generator; defaults to np.random.default_rng(config.seed)

    Returns
    -------
    MonteCarloResult with yearly_data for years 0..total_years
    """
    cfg = config or SimulationConfig()
    rng = rng if rng is not None else np.random.default_rng(cfg.seed)

    logger.debug(
        "Monte Carlo: %d trials x %d years (mean %.2f%%, vol %.2f%%)",
        cfg.n_trials, inp.total_years, inp.effective_return_rate, inp.volatility,
    )
    returns = sample_returns(inp, cfg, rng)
    result = run_trials(inp, returns, cfg)

    rows = run_sensitivity_sweep(inp, returns, cfg)
    if rows is not None:
        result = replace(result, sensitivity_rows=rows)

    logger.debug(
        "Monte Carlo done: depletion=%.4f failure=%.4f",
        result.depletion_probability, result.failure_probability,
    )
    return result
