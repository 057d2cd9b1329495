"""
Plan report — one structured snapshot of settings, deterministic results and
Monte Carlo risk figures, ready to be serialised (JSON) or shown as a table.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from core.schema import MonteCarloResult, SimulationInput, YearlyProjection

from .milestones import compute_withdrawal_milestones, select_milestones
from .score import compute_security_score, get_security_label
from .summary import (
    Percentile,
    compute_mc_drawdown_end_value,
    compute_monthly_withdrawal_for_summary,
    compute_total_withdrawal_amount,
    locate_in_distribution,
    summary_projection,
)
from .timeline import describe_timeline


@dataclass
class PlanReport:
    """Structured plan output."""
    settings: Dict[str, Any]
    results: Dict[str, Any]
    monte_carlo: Dict[str, Any]
    sensitivity: Optional[List[Dict[str, Any]]] = None
    flags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "settings": self.settings,
            "results": self.results,
            "monte_carlo": self.monte_carlo,
        }
        if self.sensitivity is not None:
            out["sensitivity"] = self.sensitivity
        if self.flags:
            out["flags"] = list(self.flags)
        return out

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the headline figures to a display-friendly table."""
        r, mc = self.results, self.monte_carlo
        rows = [
            {"Metric": "Timeline", "Value": self.settings["timeline"], "Unit": ""},
            {"Metric": "Principal", "Value": f"{r['principal']:,.0f}", "Unit": "JPY"},
            {"Metric": "Interest", "Value": f"{r['interest']:,.0f}", "Unit": "JPY"},
            {"Metric": "Tax", "Value": f"{r['tax']:,.0f}", "Unit": "JPY"},
            {"Metric": "Total", "Value": f"{r['total']:,.0f}", "Unit": "JPY"},
            {"Metric": "Monthly Withdrawal", "Value": f"{r['monthly_withdrawal']:,.0f}", "Unit": "JPY"},
            {"Metric": "Total Withdrawn", "Value": f"{r['total_withdrawal_amount']:,.0f}", "Unit": "JPY"},
            {"Metric": "Depletion Probability", "Value": f"{mc['depletion_probability']:.1%}", "Unit": ""},
            {"Metric": "Failure Probability", "Value": f"{mc['failure_probability']:.1%}", "Unit": ""},
            {"Metric": "Security Score", "Value": f"{mc['security_score']} ({mc['security_label']})", "Unit": ""},
        ]
        if mc.get("drawdown_end_value") is not None:
            rows.append({
                "Metric": f"Drawdown End Value ({mc['drawdown_percentile']})",
                "Value": f"{mc['drawdown_end_value']:,.0f}",
                "Unit": "JPY (real)",
            })
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags), "Unit": ""})
        return pd.DataFrame(rows)


def build_report(
    inp: SimulationInput,
    projections: List[YearlyProjection],
    result: MonteCarloResult,
    *,
    drawdown_percentile: Percentile = "p50",
) -> PlanReport:
    """
    Assemble a PlanReport from one projection and one simulation of the same input.

    Parameters
    ----------
    inp : SimulationInput
    projections : list of YearlyProjection
        Output of engine.project(inp)
    result : MonteCarloResult
        Output of engine.simulate(inp)
    drawdown_percentile : str
        Which Monte Carlo percentile to quote at the end of the withdrawal phase
    """
    effective = inp.effective_return_rate
    settings = inp.model_dump(exclude={"contribution_deltas", "rate_deltas"})
    settings.update({
        "effective_return": round(effective, 2),
        "real_return": round(effective - inp.inflation_rate, 2),
        "withdrawal_mode": inp.withdrawal_mode,
        "total_years": inp.total_years,
        "timeline": describe_timeline(
            inp.contribution_years, inp.withdrawal_start_year, inp.withdrawal_years
        ),
    })

    headline = summary_projection(
        projections, inp.contribution_years, inp.withdrawal_start_year, inp.withdrawal_years
    )
    mode = inp.withdrawal_mode or "amount"
    monthly_withdrawal = compute_monthly_withdrawal_for_summary(
        mode, projections, inp.withdrawal_start_year, float(inp.monthly_withdrawal or 0.0)
    )
    milestones = (
        compute_withdrawal_milestones(inp.withdrawal_years, inp.withdrawal_start_year, projections)
        if mode == "rate" else None
    )
    results = {
        "principal": headline.principal if headline else 0.0,
        "interest": headline.interest if headline else 0.0,
        "tax": headline.tax if headline else 0.0,
        "total": headline.total if headline else 0.0,
        "monthly_withdrawal": monthly_withdrawal,
        "total_withdrawal_amount": compute_total_withdrawal_amount(inp.withdrawal_years, projections),
        "milestones": select_milestones(headline.total if headline else 0.0),
        "withdrawal_milestones": [asdict(m) for m in milestones] if milestones is not None else None,
    }

    last = result.yearly_data[-1] if result.yearly_data else None
    median_is_zero = last is not None and last.p50 <= 0
    score = compute_security_score(
        result.depletion_probability, result.failure_probability, median_is_zero
    )
    label = get_security_label(score)
    final_percentiles = (
        {k: getattr(last, k) for k in ("p10", "p25", "p50", "p75", "p90")}
        if inp.withdrawal_years > 0 and last is not None else None
    )
    deterministic_final = (projections[-1].total if projections else 0.0) / result.final_deflator
    location = locate_in_distribution(deterministic_final, result.final_values)
    monte_carlo = {
        "n_trials": result.n_trials,
        "drawdown_percentile": drawdown_percentile,
        "drawdown_end_value": compute_mc_drawdown_end_value(
            inp.withdrawal_years, result.yearly_data, drawdown_percentile
        ),
        "depletion_probability": result.depletion_probability,
        "failure_probability": result.failure_probability,
        "security_score": score,
        "security_label": label.label,
        "security_level": label.level,
        "final_percentiles": final_percentiles,
        "deterministic_final_z": location.z_score,
        "deterministic_final_rank": location.percentile_rank,
        "distribution": [asdict(b) for b in result.distribution],
    }

    sensitivity = (
        [asdict(r) for r in result.sensitivity_rows]
        if result.sensitivity_rows is not None else None
    )

    flags: List[str] = []
    if label.level == "danger":
        flags.append(f"LOW_SECURITY: score {score} — plan needs review")
    if result.depletion_probability > 0.5:
        flags.append("MEDIAN_DEPLETED: more than half the trials run out of money")
    if inp.withdrawal_years > 0 and result.failure_probability > 0.25:
        flags.append(f"PRINCIPAL_AT_RISK: {result.failure_probability:.0%} chance of ending below principal")

    return PlanReport(
        settings=settings,
        results=results,
        monte_carlo=monte_carlo,
        sensitivity=sensitivity,
        flags=flags,
    )
