"""
Public pension helpers (老齢年金).

The standard claim age is 65. Claiming early reduces the benefit by 0.4% per month
(from age 60); deferring increases it by 0.7% per month (up to age 75). The engine
works with the monthly amount actually received, so a flat net rate is applied for
tax and social insurance deductions.
"""

from __future__ import annotations

from typing import Optional

STANDARD_CLAIM_AGE = 65
EARLIEST_CLAIM_AGE = 60
LATEST_CLAIM_AGE = 75

EARLY_REDUCTION_PER_MONTH = 0.004
DEFERRAL_INCREASE_PER_MONTH = 0.007

# take-home share after income tax and social insurance
PENSION_NET_RATE = 0.85


def claim_adjustment_factor(start_age: int) -> float:
    """Multiplier on the age-65 benefit for claiming at `start_age` (clamped to 60..75)."""
    age = min(max(int(start_age), EARLIEST_CLAIM_AGE), LATEST_CLAIM_AGE)
    months = (age - STANDARD_CLAIM_AGE) * 12
    if months < 0:
        return 1.0 + months * EARLY_REDUCTION_PER_MONTH
    return 1.0 + months * DEFERRAL_INCREASE_PER_MONTH


def adjusted_pension(base_monthly: float, start_age: int) -> float:
    """Gross monthly pension when claiming at `start_age`, given the age-65 amount."""
    return base_monthly * claim_adjustment_factor(start_age)


def net_monthly_pension(base_monthly: float, start_age: int) -> int:
    """Monthly pension after claim-age adjustment and deductions, rounded to the yen."""
    return int(round(adjusted_pension(base_monthly, start_age) * PENSION_NET_RATE))


def pension_start_year(current_age: Optional[int], start_age: int) -> Optional[int]:
    """Years from now until the pension starts; None when the current age is unknown."""
    if current_age is None:
        return None
    return max(0, start_age - current_age)
