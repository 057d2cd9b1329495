"""
Security score — a 0–100 "how safe is this plan" indicator — and the decision
helpers built on it.

Score:
  base  = (1 − depletion probability) × 100
  minus = failure probability × 20  (at most −20)
  cap   = 10 when the median final balance is zero (more than half the trials ran dry)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional

from core.schema import SensitivityRow, WithdrawalMode
from core.utils import clamp, round_half_away

SecurityLevel = Literal["safe", "caution", "warning", "danger"]

SAFE_THRESHOLD = 80
MEDIAN_ZERO_CAP = 10
FAILURE_PENALTY = 20

# table view: rate mode hides large rate cuts, amount mode hides large contribution jumps
RATE_TABLE_MIN_DELTA = -0.5
CONTRIBUTION_TABLE_MAX_ABS_DELTA = 30_000


@dataclass(frozen=True)
class SecurityLabel:
    label: str
    level: SecurityLevel


def compute_security_score(
    depletion_probability: float,
    failure_probability: float = 0.0,
    median_is_zero: bool = False,
) -> int:
    base = clamp(100.0 - depletion_probability * 100.0, 0.0, 100.0)
    score = base - failure_probability * FAILURE_PENALTY
    if median_is_zero:
        score = min(score, MEDIAN_ZERO_CAP)
    return round_half_away(clamp(score, 0.0, 100.0))


def get_security_label(score: float) -> SecurityLabel:
    if score >= 95:
        return SecurityLabel("非常に安心", "safe")
    if score >= 80:
        return SecurityLabel("安心", "safe")
    if score >= 60:
        return SecurityLabel("やや注意", "caution")
    if score >= 40:
        return SecurityLabel("注意", "warning")
    return SecurityLabel("要見直し", "danger")


def find_safe_suggestion(
    score: int,
    rows: List[SensitivityRow],
    *,
    current_monthly: float,
    current_rate: Optional[float] = None,
) -> Optional[SensitivityRow]:
    """
    First sensitivity row that lifts the plan to SAFE_THRESHOLD.

    Rate mode looks for a LOWER withdrawal rate, amount mode for a HIGHER monthly
    contribution. None when the plan is already safe or no row gets there.
    """
    if score >= SAFE_THRESHOLD or not rows:
        return None

    is_rate_mode = rows[0].withdrawal_rate is not None
    for r in rows:
        if r.security_score < SAFE_THRESHOLD:
            continue
        if is_rate_mode:
            if r.withdrawal_rate is not None and r.withdrawal_rate < (current_rate or 0.0):
                return r
        elif r.monthly_contribution > current_monthly:
            return r
    return None


def filter_sensitivity_rows(
    rows: List[SensitivityRow],
    mode: WithdrawalMode,
) -> List[SensitivityRow]:
    """Subset of rows shown in the compact sensitivity table."""
    if mode == "rate":
        return [r for r in rows if r.delta >= RATE_TABLE_MIN_DELTA]
    return [r for r in rows if abs(r.delta) <= CONTRIBUTION_TABLE_MAX_ABS_DELTA]
