"""
Fan-chart band construction.

A stacked area chart needs increments, not levels: the base is p10 and each band
is the gap to the next percentile. Gaps are non-negative because percentiles are
ascending within a year.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import List, Optional

import pandas as pd

from core.schema import MonteCarloYearData


@dataclass(frozen=True)
class FanChartPoint:
    year: int
    base: float
    band_outer_lower: float
    band_inner_lower: float
    band_inner_upper: float
    band_outer_upper: float
    principal: float
    is_contributing: bool
    is_withdrawing: bool
    depletion_rate: Optional[float] = None


def build_fan_chart_data(yearly_data: List[MonteCarloYearData]) -> List[FanChartPoint]:
    return [
        FanChartPoint(
            year=d.year,
            base=d.p10,
            band_outer_lower=d.p25 - d.p10,
            band_inner_lower=d.p50 - d.p25,
            band_inner_upper=d.p75 - d.p50,
            band_outer_upper=d.p90 - d.p75,
            principal=d.principal,
            is_contributing=d.is_contributing,
            is_withdrawing=d.is_withdrawing,
            depletion_rate=d.depletion_rate,
        )
        for d in yearly_data
    ]


def fan_chart_frame(yearly_data: List[MonteCarloYearData]) -> pd.DataFrame:
    return pd.DataFrame([asdict(p) for p in build_fan_chart_data(yearly_data)])
