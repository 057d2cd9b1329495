"""
Plausibility checks for simulation inputs before they enter the engine.

Hard errors (negative amounts, both withdrawal modes, mismatched deltas) are rejected
by SimulationInput itself. This module catches inputs that are VALID but probably
not what the user meant:
- Return or volatility assumptions outside any historical range
- Withdrawal rates far above sustainable levels
- Settings that are silently ignored (inflation flag in rate mode, pension with no drawdown)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.schema import SimulationInput


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for one input."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_input(inp: SimulationInput) -> ValidationResult:
    """
    Run all plausibility checks on a SimulationInput.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Horizon ---
    if inp.total_years == 0:
        result.errors.append("Timeline is empty: no contribution or withdrawal years.")
    elif inp.total_years > 100:
        result.warnings.append(f"Timeline spans {inp.total_years} years — check the year inputs.")

    # --- Returns ---
    if inp.effective_return_rate < 0:
        result.warnings.append(
            f"Expense ratio ({inp.expense_ratio}%) exceeds the expected return "
            f"({inp.annual_return_rate}%)."
        )
    if inp.annual_return_rate > 20:
        result.warnings.append(
            f"Expected return of {inp.annual_return_rate}% is far above long-run equity returns."
        )
    if inp.volatility > 60:
        result.warnings.append(
            f"Volatility of {inp.volatility}% — check if it is in percent vs decimal form."
        )
    if 0 < inp.volatility < 1 and inp.annual_return_rate >= 1:
        result.warnings.append(
            f"Volatility of {inp.volatility}% looks like a decimal (did you mean {inp.volatility * 100:g}%?)."
        )
    if inp.inflation_rate > 10:
        result.warnings.append(f"Inflation of {inp.inflation_rate}% is unusually high.")

    # --- Withdrawals ---
    if inp.withdrawal_mode == "rate" and inp.annual_withdrawal_rate is not None:
        if inp.annual_withdrawal_rate > 10:
            result.warnings.append(
                f"Withdrawal rate of {inp.annual_withdrawal_rate}% is well above sustainable levels."
            )
        if inp.inflation_adjusted_withdrawal:
            result.warnings.append(
                "inflation_adjusted_withdrawal is ignored in rate mode "
                "(rate-mode withdrawals always follow inflation)."
            )

    if inp.withdrawal_years == 0:
        if inp.monthly_pension_income > 0 or inp.monthly_other_income > 0:
            result.warnings.append("Pension/other income has no effect without a withdrawal phase.")
        if inp.contribution_deltas is not None or inp.rate_deltas is not None:
            result.warnings.append("Sensitivity deltas are ignored without a withdrawal phase.")
    elif inp.monthly_pension_income > 0 and inp.pension_start_year >= inp.total_years:
        result.warnings.append(
            f"Pension starts in year {inp.pension_start_year}, after the plan ends."
        )

    # --- Contributions ---
    if inp.monthly_contribution > 0 and inp.contribution_years == 0:
        result.warnings.append("monthly_contribution is set but contribution_years is 0.")
    if inp.total_contributed == 0 and inp.withdrawal_years > 0:
        result.warnings.append("Nothing is invested: every withdrawal plan will deplete immediately.")

    return result
