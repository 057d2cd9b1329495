"""
Distributions package — statistics helpers and random return sampling.

  1. stats.py    — percentiles, histogram binning, z-scores, summaries
  2. sampler.py  — draw (n_trials × n_years) annual return paths
"""

from .stats import (
    percentiles,
    percentiles_by_column,
    histogram_bins,
    std_dev,
    z_score,
    z_scores,
    percentile_rank,
    summarize,
)
from .sampler import ReturnDistributionParams, ReturnSampler, ReturnPaths

__all__ = [
    "percentiles",
    "percentiles_by_column",
    "histogram_bins",
    "std_dev",
    "z_score",
    "z_scores",
    "percentile_rank",
    "summarize",
    "ReturnDistributionParams",
    "ReturnSampler",
    "ReturnPaths",
]
