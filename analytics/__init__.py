"""
Derived analytics — timeline, milestones, fan-chart bands, security score, summaries, report.
Consumes engine outputs; never mutates them.
"""

from core.utils import compute_total_years

from .timeline import TimelineSegment, build_timeline_segments, describe_timeline
from .milestones import (
    MILESTONE_CANDIDATES,
    WithdrawalMilestone,
    select_milestones,
    compute_withdrawal_milestones,
)
from .bands import FanChartPoint, build_fan_chart_data
from .score import (
    SecurityLabel,
    compute_security_score,
    get_security_label,
    find_safe_suggestion,
    filter_sensitivity_rows,
)
from .summary import (
    compute_summary_year,
    compute_monthly_withdrawal_for_summary,
    compute_mc_drawdown_end_value,
    compute_total_withdrawal_amount,
    compute_income_coverage,
    locate_in_distribution,
)
from .report import PlanReport, build_report

__all__ = [
    "compute_total_years",
    "TimelineSegment",
    "build_timeline_segments",
    "describe_timeline",
    "MILESTONE_CANDIDATES",
    "WithdrawalMilestone",
    "select_milestones",
    "compute_withdrawal_milestones",
    "FanChartPoint",
    "build_fan_chart_data",
    "SecurityLabel",
    "compute_security_score",
    "get_security_label",
    "find_safe_suggestion",
    "filter_sensitivity_rows",
    "compute_summary_year",
    "compute_monthly_withdrawal_for_summary",
    "compute_mc_drawdown_end_value",
    "compute_total_withdrawal_amount",
    "compute_income_coverage",
    "locate_in_distribution",
    "PlanReport",
    "build_report",
]
