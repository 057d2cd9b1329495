from __future__ import annotations

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or `default` when the denominator is zero or non-finite."""
    if denominator == 0 or not np.isfinite(denominator):
        return default
    return numerator / denominator


def round_half_away(x: float) -> int:
    """Round half away from zero."""
    return int(np.sign(x) * np.floor(abs(x) + 0.5))


def compute_total_years(
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> int:
    """Length of the projection horizon: the later of contribution end and withdrawal end."""
    return max(contribution_years, withdrawal_start_year + withdrawal_years)
