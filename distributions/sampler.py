"""
Return Sampler — generates an (n_trials × n_years) matrix of random annual returns.

Input:  Effective nominal return (mean) and volatility (std), both as decimals
Output: ReturnPaths — one row per trial, one column per simulated year

Each row represents one plausible market history:
  Trial 1: +12.1%, -3.4%, +8.8%, ...
  Trial 2: -18.0%, +25.2%, +4.1%, ...

Method:
  - "normal":    r ~ N(mean, std)
  - "lognormal": 1 + r ~ LogNormal, moment-matched so E[r] = mean and Std[r] = std
                 (skewed right — a year can't lose more than everything)

Draws are floored at -100%. With std == 0 every draw equals the mean exactly,
so zero-volatility trials reproduce the deterministic projection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
import pandas as pd

from .stats import summarize


@dataclass(frozen=True)
class ReturnDistributionParams:
    """Annual return distribution, as decimals (0.05 == 5%)."""
    mean: float
    std: float
    shape: Literal["normal", "lognormal"] = "normal"

    @classmethod
    def from_percent(
        cls,
        mean_pct: float,
        std_pct: float,
        shape: Literal["normal", "lognormal"] = "normal",
    ) -> "ReturnDistributionParams":
        return cls(mean=mean_pct / 100.0, std=std_pct / 100.0, shape=shape)

    def summary(self) -> pd.DataFrame:
        return pd.DataFrame([{"Shape": self.shape, "Mean": self.mean, "StdDev": self.std}])


@dataclass
class ReturnPaths:
    """
    Output of sampling: annual returns, shape (n_trials, n_years).
    Column k is the return applied during year k (row k+1 of a projection).
    """
    returns: np.ndarray

    @property
    def n_trials(self) -> int:
        return self.returns.shape[0]

    @property
    def n_years(self) -> int:
        return self.returns.shape[1]

    def get_trial(self, trial_idx: int) -> np.ndarray:
        return self.returns[trial_idx].copy()

    def to_dataframe(self) -> pd.DataFrame:
        """Long format: trial_id, year, annual_return."""
        return pd.DataFrame({
            "trial_id": np.repeat(np.arange(self.n_trials), self.n_years),
            "year": np.tile(np.arange(self.n_years), self.n_trials),
            "annual_return": self.returns.reshape(-1),
        })

    def summary(self) -> pd.DataFrame:
        """Percentile summary of pooled annual returns and of per-trial geometric means."""
        if self.returns.size == 0:
            return pd.DataFrame([])
        if self.n_years:
            geo = np.prod(1.0 + self.returns, axis=1) ** (1.0 / self.n_years) - 1.0
        else:
            geo = np.zeros(self.n_trials)
        rows = []
        for name, arr in [("Annual return", self.returns.reshape(-1)),
                          ("Geometric mean", geo)]:
            row = {"Variable": name}
            row.update(summarize(arr))
            rows.append(row)
        return pd.DataFrame(rows)


class ReturnSampler:
    """
    Draws random annual returns for every trial and year.

    Usage:
        params = ReturnDistributionParams.from_percent(4.9, 15.0)
        sampler = ReturnSampler(params, n_trials=5000, rng=np.random.default_rng(7))
        paths = sampler.sample(n_years=60)
        # paths.returns → (5000, 60) array
    """

    def __init__(
        self,
        params: ReturnDistributionParams,
        n_trials: int = 5000,
        seed: int = 42,
        rng: Optional[np.random.Generator] = None,
    ):
        if n_trials <= 0:
            raise ValueError(f"n_trials must be positive, got {n_trials}.")
        self.params = params
        self.n_trials = n_trials
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, n_years: int) -> ReturnPaths:
        p = self.params
        size = (self.n_trials, max(int(n_years), 0))

        if p.std <= 0:
            returns = np.full(size, p.mean, dtype=float)
        elif p.shape == "lognormal":
            # Moment-match the gross return G = 1 + r: E[G] = 1 + mean, Std[G] = std
            g_mean = 1.0 + p.mean
            if g_mean <= 0:
                raise ValueError("lognormal returns need mean > -100%.")
            sigma_ln = np.sqrt(np.log(1.0 + p.std ** 2 / g_mean ** 2))
            mu_ln = np.log(g_mean) - 0.5 * sigma_ln ** 2
            returns = np.exp(self.rng.normal(mu_ln, sigma_ln, size=size)) - 1.0
        else:
            returns = self.rng.normal(p.mean, p.std, size=size)

        returns = np.maximum(returns, -1.0)
        return ReturnPaths(returns=returns)
