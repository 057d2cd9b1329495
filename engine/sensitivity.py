"""
Sensitivity sweep — re-run the simulation with the monthly contribution or the
withdrawal rate shifted by each caller-supplied delta.

Every row reuses the SAME return matrix as the base run (common random numbers),
so differences between rows reflect the input change rather than sampling noise.
Rows come back in the caller's delta order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import numpy as np

from analytics.score import compute_security_score
from core.config import SimulationConfig
from core.schema import SensitivityRow, SimulationInput

from .aggregator import run_trials

logger = logging.getLogger(__name__)


def perturbed_input(inp: SimulationInput, delta: float) -> SimulationInput:
    """Copy of `inp` with the swept field shifted by `delta` (clamped to >= 0)."""
    update = {"contribution_deltas": None, "rate_deltas": None}
    if inp.rate_deltas is not None:
        update["annual_withdrawal_rate"] = round(max(float(inp.annual_withdrawal_rate) + delta, 0.0), 6)
    else:
        update["monthly_contribution"] = max(inp.monthly_contribution + delta, 0.0)
    return inp.model_copy(update=update)


def _row(
    inp: SimulationInput,
    delta: float,
    returns: np.ndarray,
    config: SimulationConfig,
) -> SensitivityRow:
    modified = perturbed_input(inp, delta)
    result = run_trials(modified, returns, config)
    median_final = result.yearly_data[-1].p50 if result.yearly_data else 0.0
    score = compute_security_score(
        result.depletion_probability,
        result.failure_probability,
        median_final <= 0,
    )
    logger.debug("Sensitivity delta=%s depletion=%.4f score=%d", delta, result.depletion_probability, score)
    return SensitivityRow(
        delta=float(delta),
        monthly_contribution=float(modified.monthly_contribution),
        withdrawal_rate=(
            float(modified.annual_withdrawal_rate) if inp.rate_deltas is not None else None
        ),
        depletion_probability=result.depletion_probability,
        security_score=score,
        median_final_balance=float(median_final),
    )


def run_sensitivity_sweep(
    inp: SimulationInput,
    returns: np.ndarray,
    config: SimulationConfig,
) -> Optional[List[SensitivityRow]]:
    """
    One SensitivityRow per delta, or None when no deltas were supplied or the
    plan has no withdrawal phase (depletion is meaningless without one).
    """
    deltas = inp.contribution_deltas if inp.contribution_deltas is not None else inp.rate_deltas
    if deltas is None:
        return None
    if inp.withdrawal_years <= 0:
        logger.debug("Sensitivity sweep skipped: no withdrawal phase.")
        return None

    if config.max_workers > 1 and len(deltas) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            return list(pool.map(lambda d: _row(inp, d, returns, config), deltas))
    return [_row(inp, d, returns, config) for d in deltas]
