"""
Aggregate per-trial path histories into MonteCarloResult summaries.

Per year:   p10/p25/p50/p75/p90 of portfolio value (0 once depleted), median cost
            basis, share of trials already depleted
Overall:    depletion probability, failure ("lost money overall") probability,
            histogram of final values with a separate depleted bin

Values and cost basis are deflated to today's purchasing power unless config.real_terms is False.
"""

from __future__ import annotations

from typing import List

import numpy as np

from core.config import SimulationConfig
from core.schema import MonteCarloResult, MonteCarloYearData, SimulationInput
from distributions.stats import histogram_bins, percentiles_by_column

from .cashflow import PathHistory, run_paths


def deflators(inp: SimulationInput, config: SimulationConfig) -> np.ndarray:
    """Per-row divisor that converts nominal values to today's purchasing power."""
    years = np.arange(inp.total_years + 1, dtype=float)
    if not config.real_terms:
        return np.ones_like(years)
    return (1.0 + inp.inflation_rate / 100.0) ** years


def aggregate_paths(
    inp: SimulationInput,
    history: PathHistory,
    config: SimulationConfig,
) -> MonteCarloResult:
    """
    Reduce per-trial histories into the yearly percentile band and outcome statistics.
    """
    n_trials = history.n_paths
    deflator = deflators(inp, config)
    values = history.total / deflator[np.newaxis, :]

    bands = percentiles_by_column(values, config.percentiles)
    principal_mid = percentiles_by_column(history.principal / deflator[np.newaxis, :], (50,))[0]
    depletion_rate = (
        history.depleted.mean(axis=0) if n_trials else np.zeros(values.shape[1])
    )

    yearly: List[MonteCarloYearData] = []
    for y, flags in enumerate(history.flags):
        yearly.append(
            MonteCarloYearData(
                year=y,
                p10=float(bands[0, y]),
                p25=float(bands[1, y]),
                p50=float(bands[2, y]),
                p75=float(bands[3, y]),
                p90=float(bands[4, y]),
                principal=float(principal_mid[y]),
                is_contributing=flags.is_contributing,
                is_withdrawing=flags.is_withdrawing,
                depletion_rate=float(depletion_rate[y]),
            )
        )

    depleted_final = history.depleted[:, -1]
    depletion_probability = float(depleted_final.mean()) if n_trials else 0.0

    # "Lost money overall": what's left + what was taken < what was actually put in
    ending_nominal = history.total[:, -1]
    shortfall = (ending_nominal + history.withdrawn) < history.contributed
    failure_probability = float(shortfall.mean()) if n_trials else 0.0

    final_values = values[:, -1].copy()
    distribution = histogram_bins(
        final_values[~depleted_final],
        n_bins=config.histogram_bins,
        depleted_count=int(depleted_final.sum()),
    )

    return MonteCarloResult(
        yearly_data=yearly,
        failure_probability=failure_probability,
        depletion_probability=depletion_probability,
        distribution=distribution,
        n_trials=n_trials,
        final_values=final_values,
        final_deflator=float(deflator[-1]),
    )


def run_trials(
    inp: SimulationInput,
    returns: np.ndarray,
    config: SimulationConfig,
) -> MonteCarloResult:
    """Simulate `inp` against a pre-drawn return matrix (no sensitivity sweep)."""
    history = run_paths(inp, returns, tax_rate=config.tax_rate)
    return aggregate_paths(inp, history, config)
