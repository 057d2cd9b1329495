"""
Statistics helpers shared by the Monte Carlo runner and the analytics layer.

All functions are total over their input domain: an empty sample yields zeros
(or an empty collection) rather than an error, because "no trials" and
"no withdrawal phase" are expected boundary states.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from core.schema import DistributionBin


def percentiles(values: np.ndarray, levels: Sequence[float]) -> np.ndarray:
    """
    Percentiles of a 1-D sample (linear interpolation), ascending by construction.
    Returns zeros for an empty sample.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return np.zeros(len(levels), dtype=float)
    return np.percentile(values, list(levels))


def percentiles_by_column(matrix: np.ndarray, levels: Sequence[float]) -> np.ndarray:
    """
    Column-wise percentiles of a (n_trials, n_years) matrix.

    Returns shape (len(levels), n_years). Zero rows → all zeros.
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {matrix.shape}.")
    if matrix.shape[0] == 0:
        return np.zeros((len(levels), matrix.shape[1]), dtype=float)
    return np.percentile(matrix, list(levels), axis=0)


def histogram_bins(
    values: np.ndarray,
    *,
    n_bins: int = 20,
    depleted_count: int = 0,
    cap_percentile: float = 99.0,
) -> List[DistributionBin]:
    """
    Fixed-width histogram of final portfolio values.

    A leading ``is_depleted`` bin is emitted when ``depleted_count > 0``. Value bins span
    [0, P99]; anything above the cap is counted in the last bin so a long right tail
    does not flatten the rest of the chart.
    """
    out: List[DistributionBin] = []
    if depleted_count > 0:
        out.append(DistributionBin(range_end=0.0, count=int(depleted_count), is_depleted=True))

    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return out

    upper = float(np.percentile(values, cap_percentile))
    if upper <= 0:
        out.append(DistributionBin(range_end=0.0, count=int(values.size)))
        return out

    clipped = np.clip(values, 0.0, upper)
    counts, edges = np.histogram(clipped, bins=n_bins, range=(0.0, upper))
    for count, right in zip(counts, edges[1:]):
        out.append(DistributionBin(range_end=float(right), count=int(count)))
    return out


def std_dev(values: np.ndarray, ddof: int = 0) -> float:
    values = np.asarray(values, dtype=float)
    if values.size <= ddof:
        return 0.0
    return float(np.std(values, ddof=ddof))


def z_score(value: float, values: np.ndarray) -> float:
    """Standard score of `value` within a sample; 0 when the sample has no spread."""
    values = np.asarray(values, dtype=float)
    if values.size == 0 or np.ptp(values) == 0:
        return 0.0
    sd = std_dev(values)
    return float((value - np.mean(values)) / sd)


def z_scores(values: np.ndarray) -> np.ndarray:
    """Standard scores of every element; zeros for a constant or empty sample."""
    values = np.asarray(values, dtype=float)
    if values.size == 0 or np.ptp(values) == 0:
        return np.zeros_like(values)
    return stats.zscore(values)


def percentile_rank(value: float, values: np.ndarray) -> float:
    """Share of the sample (0-100) at or below `value`."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return 0.0
    return float(stats.percentileofscore(values, value, kind="weak"))


def summarize(
    values: np.ndarray,
    *,
    levels: Tuple[float, ...] = (5, 10, 25, 50, 75, 90, 95),
) -> Dict[str, float]:
    """Mean / std / min / percentiles / max summary of one sample."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        row = {"Mean": 0.0, "Std": 0.0, "Min": 0.0, "Max": 0.0}
        row.update({f"P{int(p):02d}": 0.0 for p in levels})
        return row

    row = {
        "Mean": float(np.mean(values)),
        "Std": std_dev(values),
        "Min": float(np.min(values)),
    }
    for p, v in zip(levels, percentiles(values, levels)):
        row[f"P{int(p):02d}"] = float(v)
    row["Max"] = float(np.max(values))
    return row
