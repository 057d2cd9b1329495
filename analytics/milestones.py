"""
Milestones — reference lines for the balance chart and withdrawal checkpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.schema import YearlyProjection

MILESTONE_CANDIDATES = (10_000_000, 20_000_000, 50_000_000, 100_000_000, 200_000_000)

# a reference line is only useful between these fractions of the chart ceiling
MILESTONE_MIN_FRACTION = 0.05
MILESTONE_MAX_FRACTION = 0.95
MAX_MILESTONES = 2


@dataclass(frozen=True)
class WithdrawalMilestone:
    year: int      # years since withdrawal start
    annual: float  # withdrawal in that year


def select_milestones(
    max_value: float,
    candidates: Sequence[int] = MILESTONE_CANDIDATES,
) -> List[int]:
    lo = max_value * MILESTONE_MIN_FRACTION
    hi = max_value * MILESTONE_MAX_FRACTION
    return [m for m in candidates if lo <= m <= hi][:MAX_MILESTONES]


def compute_withdrawal_milestones(
    withdrawal_years: int,
    withdrawal_start_year: int,
    projections: List[YearlyProjection],
) -> Optional[List[WithdrawalMilestone]]:
    """
    Withdrawal amounts 10 and 20 years in (long plans) or at the midpoint (10–19 years).
    None for plans shorter than 10 years; offsets whose row is missing are skipped.
    """
    if withdrawal_years < 10:
        return None

    if withdrawal_years >= 20:
        offsets = [10, 20]
    else:
        offsets = [withdrawal_years // 2]

    by_year: Dict[int, YearlyProjection] = {p.year: p for p in projections}
    out: List[WithdrawalMilestone] = []
    for offset in offsets:
        row = by_year.get(withdrawal_start_year + offset)
        if row is not None:
            out.append(WithdrawalMilestone(year=offset, annual=row.yearly_withdrawal))
    return out
