"""
Data contracts consumed and produced by the projection engine.

SimulationInput is validated at construction (pydantic) so that invalid assumptions
fail fast instead of producing misleading financial output. Output records are plain
frozen dataclasses, created fresh on every run.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Literal, Optional, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

WithdrawalMode = Literal["rate", "amount"]


class SimulationInput(BaseModel):
    """
    Financial assumptions for one projection / simulation run.

    Percent fields are in percent units (5.0 == 5%). Either field spelling is
    accepted: ``annual_return_rate`` or ``annualReturnRate``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    initial_amount: float = Field(default=0.0, ge=0)
    monthly_contribution: float = Field(default=0.0, ge=0)

    annual_return_rate: float = Field(default=5.0, ge=0)
    expense_ratio: float = Field(default=0.0, ge=0)
    volatility: float = Field(default=0.0, ge=0)
    inflation_rate: float = Field(default=0.0, ge=0)

    contribution_years: int = Field(default=0, ge=0)
    withdrawal_start_year: int = Field(default=0, ge=0)
    withdrawal_years: int = Field(default=0, ge=0)

    tax_free: bool = False

    # withdrawal mode — at most one of these
    annual_withdrawal_rate: Optional[float] = Field(default=None, ge=0)
    monthly_withdrawal: Optional[float] = Field(default=None, ge=0)
    inflation_adjusted_withdrawal: bool = False

    # supplemental income offsetting the amount drawn from the portfolio
    monthly_pension_income: float = Field(default=0.0, ge=0)
    pension_start_year: int = Field(default=0, ge=0)
    monthly_other_income: float = Field(default=0.0, ge=0)

    # sensitivity perturbations (mutually exclusive)
    contribution_deltas: Optional[Tuple[float, ...]] = None
    rate_deltas: Optional[Tuple[float, ...]] = None

    @model_validator(mode="after")
    def _check_modes(self) -> "SimulationInput":
        if self.annual_withdrawal_rate is not None and self.monthly_withdrawal is not None:
            raise ValueError(
                "Set either annual_withdrawal_rate (rate mode) or monthly_withdrawal "
                "(amount mode), not both."
            )
        if self.withdrawal_years > 0 and self.withdrawal_mode is None:
            raise ValueError(
                "withdrawal_years > 0 requires annual_withdrawal_rate or monthly_withdrawal."
            )
        if self.contribution_deltas is not None and self.rate_deltas is not None:
            raise ValueError("Provide contribution_deltas OR rate_deltas, not both.")
        if self.contribution_deltas is not None and self.withdrawal_mode == "rate":
            raise ValueError("contribution_deltas requires amount mode (monthly_withdrawal).")
        if self.rate_deltas is not None and self.withdrawal_mode != "rate":
            raise ValueError("rate_deltas requires rate mode (annual_withdrawal_rate).")
        return self

    @property
    def withdrawal_mode(self) -> Optional[WithdrawalMode]:
        if self.annual_withdrawal_rate is not None:
            return "rate"
        if self.monthly_withdrawal is not None:
            return "amount"
        return None

    @property
    def effective_return_rate(self) -> float:
        """Nominal annual return net of fees, in percent."""
        return self.annual_return_rate - self.expense_ratio

    @property
    def total_years(self) -> int:
        return max(self.contribution_years, self.withdrawal_start_year + self.withdrawal_years)

    @property
    def total_contributed(self) -> float:
        """Initial capital plus every scheduled contribution."""
        return self.initial_amount + 12.0 * self.monthly_contribution * self.contribution_years


@dataclass(frozen=True)
class YearlyProjection:
    """One row of the deterministic projection. total == principal + interest - tax."""
    year: int
    principal: float
    interest: float
    tax: float
    total: float
    yearly_withdrawal: float
    is_contributing: bool
    is_withdrawing: bool


@dataclass(frozen=True)
class MonteCarloYearData:
    """Per-year percentile band across all trials."""
    year: int
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    principal: float
    is_contributing: bool
    is_withdrawing: bool
    depletion_rate: Optional[float] = None


@dataclass(frozen=True)
class DistributionBin:
    """Histogram bin over final-year values. The depleted bin has range_end == 0."""
    range_end: float
    count: int
    is_depleted: bool = False


@dataclass(frozen=True)
class SensitivityRow:
    delta: float
    monthly_contribution: float
    withdrawal_rate: Optional[float]
    depletion_probability: float
    security_score: int
    median_final_balance: float


@dataclass(frozen=True)
class MonteCarloResult:
    yearly_data: List[MonteCarloYearData]
    failure_probability: float
    depletion_probability: float
    distribution: List[DistributionBin]
    sensitivity_rows: Optional[List[SensitivityRow]] = None
    n_trials: int = 0
    # divisor taking nominal final-year money to the units of final_values
    final_deflator: float = 1.0
    # real-terms final value of every trial (0 where depleted)
    final_values: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    def to_dataframe(self) -> pd.DataFrame:
        """Yearly percentile table, one row per year."""
        return pd.DataFrame([asdict(d) for d in self.yearly_data])

    def distribution_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(b) for b in self.distribution])

    def sensitivity_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(r) for r in (self.sensitivity_rows or [])])


def projections_to_dataframe(projections: List[YearlyProjection]) -> pd.DataFrame:
    return pd.DataFrame([asdict(p) for p in projections])
