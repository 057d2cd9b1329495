"""
Deterministic account projection + the yearly step shared with the Monte Carlo runner.

Key design principles:
  1. One yearly step (advance_year) vectorised over paths — the deterministic
     calculator is simply a single path with the expected return every year
  2. Step order within a year: growth → contribution → withdrawal
  3. Annual compounding at (annual_return_rate − expense_ratio)
  4. Sales are proportional: cost basis leaves `principal`, realized gain leaves
     `interest`, tax on the gain accrues in `tax` (so total = principal + interest − tax)
  5. A path that cannot fund its withdrawal is liquidated and pinned at 0

Row convention: row 0 is the opening state; row y (y ≥ 1) is the state after y years
and carries the phase flags of the year that just ended.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from core.config import SimulationConfig
from core.schema import SimulationInput, YearlyProjection

from .withdrawals import (
    PhaseFlags,
    gain_share,
    gross_up,
    gross_withdrawal_need,
    net_withdrawal_need,
    phase_flags,
    supplemental_income,
)

logger = logging.getLogger(__name__)


@dataclass
class PortfolioState:
    """Running state of n paths. Mutated by advance_year; never leaves the engine."""
    total: np.ndarray
    principal: np.ndarray
    interest: np.ndarray
    tax: np.ndarray
    withdrawn: np.ndarray                 # cumulative net cash taken out
    contributed: np.ndarray               # cumulative capital actually paid in
    depleted: np.ndarray                  # bool, sticky
    initial_rate_withdrawal: np.ndarray   # rate mode: first-year withdrawal per path

    @classmethod
    def opening(cls, inp: SimulationInput, n_paths: int) -> "PortfolioState":
        return cls(
            total=np.full(n_paths, float(inp.initial_amount)),
            principal=np.full(n_paths, float(inp.initial_amount)),
            interest=np.zeros(n_paths),
            tax=np.zeros(n_paths),
            withdrawn=np.zeros(n_paths),
            contributed=np.full(n_paths, float(inp.initial_amount)),
            depleted=np.zeros(n_paths, dtype=bool),
            initial_rate_withdrawal=np.zeros(n_paths),
        )


def advance_year(
    state: PortfolioState,
    inp: SimulationInput,
    year_index: int,
    annual_return: np.ndarray,
    *,
    tax_rate: float,
) -> Tuple[PhaseFlags, np.ndarray]:
    """
    Apply one year of growth, contribution and withdrawal to every path.

    Parameters
    ----------
    state : PortfolioState
        Updated in place
    inp : SimulationInput
    year_index : int
        0-based simulated year
    annual_return : np.ndarray
        Return for this year per path, as a decimal (floored at -1 by the caller)
    tax_rate : float
        Capital-gains rate; ignored when inp.tax_free

    Returns
    -------
    (flags, cash)
    flags: phase of this year
    cash: net cash withdrawn per path this year (0 outside the withdrawal window)
    """
    flags = phase_flags(
        year_index,
        inp.contribution_years,
        inp.withdrawal_start_year,
        inp.withdrawal_years,
    )
    alive = ~state.depleted
    opening_total = state.total.copy()

    # --- growth ---
    growth = np.where(alive, state.total * annual_return, 0.0)
    state.total = state.total + growth
    state.interest = state.interest + growth

    # --- contribution ---
    if flags.is_contributing and inp.monthly_contribution > 0:
        contribution = np.where(alive, 12.0 * inp.monthly_contribution, 0.0)
        state.principal = state.principal + contribution
        state.total = state.total + contribution
        state.contributed = state.contributed + contribution

    cash = np.zeros_like(state.total)
    if not flags.is_withdrawing:
        return flags, cash

    # --- withdrawal ---
    if inp.withdrawal_mode == "rate" and year_index == inp.withdrawal_start_year:
        state.initial_rate_withdrawal = opening_total * float(inp.annual_withdrawal_rate) / 100.0

    need = gross_withdrawal_need(inp, year_index, state.initial_rate_withdrawal)
    net = net_withdrawal_need(need, supplemental_income(inp, year_index))
    net = np.where(alive, net, 0.0)

    share = gain_share(state.total, state.principal)
    gross = gross_up(net, share, tax_rate=tax_rate, tax_free=inp.tax_free)

    short = alive & (net > 0) & (gross >= state.total)
    sell = np.minimum(gross, state.total)

    frac = np.divide(sell, state.total, out=np.zeros_like(sell), where=state.total > 0)
    basis_out = state.principal * frac
    gain_out = sell - basis_out
    if inp.tax_free:
        tax_paid = np.zeros_like(sell)
    else:
        tax_paid = np.maximum(gain_out, 0.0) * tax_rate
    cash = sell - tax_paid

    state.principal = state.principal - basis_out
    state.interest = state.interest - (gain_out - tax_paid)
    state.tax = state.tax + tax_paid
    state.total = state.total - sell
    state.withdrawn = state.withdrawn + cash

    # Fully liquidated paths: pin at exactly zero (keeps principal + interest - tax == 0)
    if short.any():
        state.total = np.where(short, 0.0, state.total)
        state.principal = np.where(short, 0.0, state.principal)
        state.interest = np.where(short, state.tax, state.interest)
        state.depleted = state.depleted | short

    return flags, cash


@dataclass
class PathHistory:
    """Year-end snapshots of every path, shape (n_paths, total_years + 1)."""
    total: np.ndarray
    principal: np.ndarray
    interest: np.ndarray
    tax: np.ndarray
    yearly_withdrawal: np.ndarray
    depleted: np.ndarray
    withdrawn: np.ndarray            # (n_paths,) cumulative net cash at the end
    contributed: np.ndarray          # (n_paths,) initial capital + contributions made
    flags: List[PhaseFlags]          # one per row

    @property
    def n_paths(self) -> int:
        return self.total.shape[0]


def run_paths(
    inp: SimulationInput,
    returns: np.ndarray,
    *,
    tax_rate: float,
) -> PathHistory:
    """
    Replay the full timeline for every row of `returns` (n_paths × total_years).
    """
    n_paths, n_years = returns.shape
    if n_years != inp.total_years:
        raise ValueError(
            f"returns has {n_years} years, timeline needs {inp.total_years}."
        )

    shape = (n_paths, n_years + 1)
    total = np.zeros(shape)
    principal = np.zeros(shape)
    interest = np.zeros(shape)
    tax = np.zeros(shape)
    withdrawals = np.zeros(shape)
    depleted = np.zeros(shape, dtype=bool)

    state = PortfolioState.opening(inp, n_paths)
    total[:, 0] = state.total
    principal[:, 0] = state.principal
    flags: List[PhaseFlags] = [
        phase_flags(0, inp.contribution_years, inp.withdrawal_start_year, inp.withdrawal_years)
    ]

    for k in range(n_years):
        year_flags, cash = advance_year(state, inp, k, returns[:, k], tax_rate=tax_rate)
        flags.append(year_flags)
        total[:, k + 1] = state.total
        principal[:, k + 1] = state.principal
        interest[:, k + 1] = state.interest
        tax[:, k + 1] = state.tax
        withdrawals[:, k + 1] = cash
        depleted[:, k + 1] = state.depleted

    return PathHistory(
        total=total,
        principal=principal,
        interest=interest,
        tax=tax,
        yearly_withdrawal=withdrawals,
        depleted=depleted,
        withdrawn=state.withdrawn.copy(),
        contributed=state.contributed.copy(),
        flags=flags,
    )


def expected_returns(inp: SimulationInput, n_paths: int = 1) -> np.ndarray:
    """Constant (n_paths × total_years) matrix of the effective nominal return."""
    rate = max(inp.effective_return_rate / 100.0, -1.0)
    return np.full((n_paths, inp.total_years), rate, dtype=float)


def project(
    inp: SimulationInput,
    config: Optional[SimulationConfig] = None,
) -> List[YearlyProjection]:
    """
    Deterministic year-by-year projection for years 0..total_years.

    Parameters
    ----------
    inp : SimulationInput
        Validated assumptions
    config : SimulationConfig, optional
        Only tax_rate is used here

    Returns
    -------
    List of YearlyProjection, one per year, year 0 first.
    """
    cfg = config or SimulationConfig()
    history = run_paths(inp, expected_returns(inp), tax_rate=cfg.tax_rate)

    rows: List[YearlyProjection] = []
    for y, flags in enumerate(history.flags):
        rows.append(
            YearlyProjection(
                year=y,
                principal=float(history.principal[0, y]),
                interest=float(history.interest[0, y]),
                tax=float(history.tax[0, y]),
                total=float(history.total[0, y]),
                yearly_withdrawal=float(history.yearly_withdrawal[0, y]),
                is_contributing=flags.is_contributing,
                is_withdrawing=flags.is_withdrawing,
            )
        )

    if history.depleted[0, -1]:
        logger.debug("Deterministic path depleted within %d years.", inp.total_years)
    return rows
