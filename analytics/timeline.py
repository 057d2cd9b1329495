"""
Timeline phase segmentation.

Each year 0..total_years−1 is classified as contribution / idle / withdrawal / overlap,
and runs of equal phases are merged into half-open [start, end) segments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

from core.utils import compute_total_years

PhaseType = Literal["contribution", "idle", "withdrawal", "overlap"]

PHASE_LABELS = {
    "contribution": "積立",
    "idle": "据え置き",
    "withdrawal": "切り崩し",
    "overlap": "積立+切り崩し",
}


@dataclass
class TimelineSegment:
    type: PhaseType
    start: int
    end: int

    @property
    def years(self) -> int:
        return self.end - self.start


def classify_year(
    year: int,
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> PhaseType:
    is_contrib = year < contribution_years
    is_withdraw = (
        withdrawal_years > 0
        and withdrawal_start_year <= year < withdrawal_start_year + withdrawal_years
    )
    if is_contrib and is_withdraw:
        return "overlap"
    if is_contrib:
        return "contribution"
    if is_withdraw:
        return "withdrawal"
    return "idle"


def build_timeline_segments(
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> List[TimelineSegment]:
    total_years = compute_total_years(contribution_years, withdrawal_start_year, withdrawal_years)
    segments: List[TimelineSegment] = []

    for y in range(total_years):
        phase = classify_year(y, contribution_years, withdrawal_start_year, withdrawal_years)
        if segments and segments[-1].type == phase:
            segments[-1].end = y + 1
        else:
            segments.append(TimelineSegment(type=phase, start=y, end=y + 1))

    return segments


def describe_timeline(
    contribution_years: int,
    withdrawal_start_year: int,
    withdrawal_years: int,
) -> str:
    """
    One-line plan description, e.g.
    "積立 → 据え置き → 切り崩し（積立20年・据え置き10年・切り崩し25年）".
    """
    c, s, w = contribution_years, withdrawal_start_year, withdrawal_years

    if w <= 0:
        return f"積立のみ（積立{c}年）" if c > 0 else "積立のみ"

    if c <= 0:
        if s > 0:
            return f"据え置き → 切り崩し（据え置き{s}年・切り崩し{w}年）"
        return f"切り崩しのみ（切り崩し{w}年）"

    if s < c:
        return f"積立+切り崩し（積立{c}年・切り崩し{w}年）"
    if s == c:
        return f"積立 → 切り崩し（積立{c}年・切り崩し{w}年）"
    return f"積立 → 据え置き → 切り崩し（積立{c}年・据え置き{s - c}年・切り崩し{w}年）"
