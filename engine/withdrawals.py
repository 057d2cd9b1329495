"""
Withdrawal-phase helpers — phase flags, gross cash need, income offset, tax gross-up.

These are the per-year building blocks shared by the deterministic calculator and the
Monte Carlo runner. Everything here is scalar or vectorised over trials; nothing draws
random numbers.

Order of a withdrawal year:
  1. Gross need:   rate mode → opening balance × rate, escalated by inflation
                   amount mode → 12 × monthly, optionally escalated by inflation
  2. Net need:     gross need − pension/other income (never below 0)
  3. Gross-up:     when taxed, sell enough that net cash survives the tax on the
                   gain share of the sale
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from core.schema import SimulationInput


@dataclass(frozen=True)
class PhaseFlags:
    is_contributing: bool
    is_withdrawing: bool


def phase_flags(
    year_index: int,
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> PhaseFlags:
    """Phase of simulated year `year_index` (0-based)."""
    is_contributing = year_index < contribution_years
    is_withdrawing = (
        withdrawal_years > 0
        and withdrawal_start_year <= year_index < withdrawal_start_year + withdrawal_years
    )
    return PhaseFlags(is_contributing=is_contributing, is_withdrawing=is_withdrawing)


def inflation_factor(inflation_rate_pct: float, years_since_start: int) -> float:
    return (1.0 + inflation_rate_pct / 100.0) ** years_since_start


def gross_withdrawal_need(
    inp: SimulationInput,
    year_index: int,
    initial_rate_withdrawal: np.ndarray,
) -> np.ndarray:
    """
    Cash the investor wants this year, before income offset and tax.

    Parameters
    ----------
    inp : SimulationInput
    year_index : int
        0-based simulated year; must be inside the withdrawal window
    initial_rate_withdrawal : np.ndarray
        Rate mode only — first-year withdrawal per trial (opening balance × rate)
    """
    n = year_index - inp.withdrawal_start_year
    if inp.withdrawal_mode == "rate":
        return initial_rate_withdrawal * inflation_factor(inp.inflation_rate, n)

    base = 12.0 * float(inp.monthly_withdrawal or 0.0)
    if inp.inflation_adjusted_withdrawal:
        base *= inflation_factor(inp.inflation_rate, n)
    return np.full_like(initial_rate_withdrawal, base, dtype=float)


def supplemental_income(inp: SimulationInput, year_index: int) -> float:
    """Annual pension (once started) plus other income."""
    income = 12.0 * inp.monthly_other_income
    if year_index >= inp.pension_start_year:
        income += 12.0 * inp.monthly_pension_income
    return income


def net_withdrawal_need(gross_need: np.ndarray, income: float) -> np.ndarray:
    return np.maximum(gross_need - income, 0.0)


def gain_share(total: np.ndarray, principal: np.ndarray) -> np.ndarray:
    """Fraction of the portfolio value that is unrealized gain (0 when at a loss or empty)."""
    gain = np.maximum(total - principal, 0.0)
    return np.divide(gain, total, out=np.zeros_like(total, dtype=float), where=total > 0)


def gross_up(
    net_need: np.ndarray,
    share: np.ndarray,
    *,
    tax_rate: float,
    tax_free: bool,
) -> np.ndarray:
    """Amount to sell so that `net_need` remains after tax on the gain share of the sale."""
    if tax_free or tax_rate == 0:
        return np.asarray(net_need, dtype=float).copy()
    return net_need / (1.0 - share * tax_rate)
