"""
Headline figures picked out of the projection and the Monte Carlo band.

Every helper here tolerates sparse or empty inputs and answers with a fallback
(0 or None) — "no withdrawal phase configured" is a normal state, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional

import numpy as np

from core.schema import MonteCarloYearData, WithdrawalMode, YearlyProjection
from core.utils import safe_divide
from distributions.stats import percentile_rank, z_score

Percentile = Literal["p10", "p25", "p50", "p75", "p90"]


def compute_summary_year(
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> int:
    """The headline year: withdrawal start when there is a withdrawal phase, else contribution end."""
    return withdrawal_start_year if withdrawal_years > 0 else contribution_years


def find_projection(projections: List[YearlyProjection], year: int) -> Optional[YearlyProjection]:
    for p in projections:
        if p.year == year:
            return p
    return None


def summary_projection(
    projections: List[YearlyProjection],
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> Optional[YearlyProjection]:
    """Row at the summary year, falling back to year 0."""
    year = compute_summary_year(contribution_years, withdrawal_start_year, withdrawal_years)
    return find_projection(projections, year) or find_projection(projections, 0)


def compute_monthly_withdrawal_for_summary(
    mode: WithdrawalMode,
    projections: List[YearlyProjection],
    withdrawal_start_year: int,
    fixed_monthly_withdrawal: float,
) -> float:
    """Rate mode: first withdrawal year's amount / 12. Amount mode: the fixed amount."""
    if mode == "amount":
        return fixed_monthly_withdrawal
    row = find_projection(projections, withdrawal_start_year + 1)
    return row.yearly_withdrawal / 12 if row is not None else 0.0


def compute_mc_drawdown_end_value(
    withdrawal_years: int,
    yearly_data: List[MonteCarloYearData],
    percentile: Percentile = "p50",
) -> Optional[float]:
    """Value at the chosen percentile in the last withdrawing year, or None."""
    if withdrawal_years <= 0:
        return None
    withdrawing = [d for d in yearly_data if d.is_withdrawing]
    if not withdrawing:
        return None
    return float(getattr(withdrawing[-1], percentile))


def compute_total_withdrawal_amount(
    withdrawal_years: int,
    projections: List[YearlyProjection],
) -> float:
    if withdrawal_years <= 0:
        return 0.0
    return float(sum(p.yearly_withdrawal for p in projections if p.is_withdrawing))


def compute_income_coverage(
    monthly_pension_income: float,
    monthly_other_income: float,
    monthly_expense: float,
) -> float:
    """Share of the monthly spending need covered by pension + other income (0 when no expense)."""
    return safe_divide(monthly_pension_income + monthly_other_income, monthly_expense)


@dataclass(frozen=True)
class DistributionLocation:
    z_score: float
    percentile_rank: float


def locate_in_distribution(value: float, values: Optional[np.ndarray]) -> DistributionLocation:
    """Where a single value (e.g. the deterministic ending balance) sits among trial outcomes."""
    if values is None or len(values) == 0:
        return DistributionLocation(z_score=0.0, percentile_rank=0.0)
    return DistributionLocation(
        z_score=z_score(value, values),
        percentile_rank=percentile_rank(value, values),
    )
