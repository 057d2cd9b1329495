"""
Simulation configuration.
Engine-level knobs only — the financial assumptions live in core/schema.py (SimulationInput).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple


# Flat capital-gains rate applied to realized gains (所得税15.315% + 住民税5%).
CAPITAL_GAINS_TAX_RATE = 0.20315


@dataclass(frozen=True)
class SimulationConfig:
    n_trials: int = 5000
    seed: int = 7

    tax_rate: float = CAPITAL_GAINS_TAX_RATE

    # annual return draws
    return_distribution: Literal["normal", "lognormal"] = "normal"

    # reporting
    percentiles: Tuple[int, int, int, int, int] = (10, 25, 50, 75, 90)
    histogram_bins: int = 20
    real_terms: bool = True  # deflate Monte Carlo values to today's purchasing power

    # sensitivity sweep fan-out (1 = run rows sequentially)
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.n_trials <= 0:
            raise ValueError(f"n_trials must be positive, got {self.n_trials}.")
        if self.return_distribution not in ("normal", "lognormal"):
            raise ValueError(f"Unknown return_distribution: {self.return_distribution!r}")
        if self.histogram_bins <= 0:
            raise ValueError(f"histogram_bins must be positive, got {self.histogram_bins}.")
        if not 0.0 <= self.tax_rate < 1.0:
            raise ValueError(f"tax_rate must be in [0, 1), got {self.tax_rate}.")
        if len(self.percentiles) != 5 or list(self.percentiles) != sorted(self.percentiles):
            raise ValueError("percentiles must be five ascending levels.")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}.")
