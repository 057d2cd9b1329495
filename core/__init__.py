"""
Core package — input/output contracts, configuration, and shared utilities.
No business logic lives here.
"""

from .schema import (
    SimulationInput,
    WithdrawalMode,
    YearlyProjection,
    MonteCarloYearData,
    DistributionBin,
    SensitivityRow,
    MonteCarloResult,
    projections_to_dataframe,
)
from .config import CAPITAL_GAINS_TAX_RATE, SimulationConfig
from .utils import clamp, safe_divide, compute_total_years

__all__ = [
    "SimulationInput",
    "WithdrawalMode",
    "YearlyProjection",
    "MonteCarloYearData",
    "DistributionBin",
    "SensitivityRow",
    "MonteCarloResult",
    "projections_to_dataframe",
    "CAPITAL_GAINS_TAX_RATE",
    "SimulationConfig",
    "clamp",
    "safe_divide",
    "compute_total_years",
]
