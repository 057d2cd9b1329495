"""
Input presets — product assumptions, default plan, sensitivity deltas.

Default plan values can be overridden per deployment with SIMULATOR_* environment
variables (e.g. SIMULATOR_ANNUAL_RETURN_RATE=6). Unparseable values are ignored.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from core.schema import SimulationInput

# ---------------------------------------------------------------------------
# Product presets: expected return, expense ratio, volatility (all percent)
# ---------------------------------------------------------------------------
PRODUCT_PRESETS: Dict[str, Dict[str, Any]] = {
    "all-country": {
        "label": "オルカン",
        "annual_return_rate": 7.5, "expense_ratio": 0.05775, "volatility": 15,
    },
    "sp500": {
        "label": "S&P 500",
        "annual_return_rate": 10, "expense_ratio": 0.0814, "volatility": 18,
    },
    "qqq": {
        "label": "QQQ",
        "annual_return_rate": 12, "expense_ratio": 0.2, "volatility": 22,
    },
    "nikkei225": {
        "label": "日経平均",
        "annual_return_rate": 7.5, "expense_ratio": 0.143, "volatility": 20,
    },
    "topix": {
        "label": "TOPIX",
        "annual_return_rate": 6, "expense_ratio": 0.143, "volatility": 18,
    },
}

SENSITIVITY_CONTRIBUTION_DELTAS = (
    -20_000, -10_000, 0, 10_000, 20_000, 30_000, 50_000, 100_000, 200_000, 300_000,
)
SENSITIVITY_RATE_DELTAS = (-3, -2, -1.5, -1, -0.5, 0, 0.5, 1, 1.5, 2)

# field -> (env var, default)
_DEFAULTS: Dict[str, tuple] = {
    "initial_amount": ("SIMULATOR_INITIAL_AMOUNT", 0.0),
    "monthly_contribution": ("SIMULATOR_MONTHLY_CONTRIBUTION", 0.0),
    "annual_return_rate": ("SIMULATOR_ANNUAL_RETURN_RATE", 5.0),
    "inflation_rate": ("SIMULATOR_INFLATION_RATE", 2.0),
    "expense_ratio": ("SIMULATOR_EXPENSE_RATIO", 0.1),
    "volatility": ("SIMULATOR_VOLATILITY", 15.0),
    "contribution_years": ("SIMULATOR_CONTRIBUTION_YEARS", 30),
    "withdrawal_start_year": ("SIMULATOR_WITHDRAWAL_START_YEAR", 30),
    "withdrawal_years": ("SIMULATOR_WITHDRAWAL_YEARS", 30),
}
_DEFAULT_WITHDRAWAL_RATE = ("SIMULATOR_WITHDRAWAL_RATE", 4.0)
_DEFAULT_MONTHLY_WITHDRAWAL = ("SIMULATOR_MONTHLY_WITHDRAWAL", 250_000.0)
_WITHDRAWAL_MODE_VAR = "SIMULATOR_WITHDRAWAL_MODE"


def _env_number(environ: Mapping[str, str], name: str) -> Optional[float]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def default_input_from_env(environ: Optional[Mapping[str, str]] = None) -> SimulationInput:
    """Default plan, with any SIMULATOR_* overrides applied."""
    env = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    for name, (var, default) in _DEFAULTS.items():
        v = _env_number(env, var)
        if v is None:
            v = default
        values[name] = int(v) if isinstance(default, int) else float(v)

    if env.get(_WITHDRAWAL_MODE_VAR) == "rate":
        var, default = _DEFAULT_WITHDRAWAL_RATE
        rate = _env_number(env, var)
        values["annual_withdrawal_rate"] = default if rate is None else rate
    else:
        var, default = _DEFAULT_MONTHLY_WITHDRAWAL
        amount = _env_number(env, var)
        values["monthly_withdrawal"] = default if amount is None else amount

    return SimulationInput(**values)


def apply_preset(inp: SimulationInput, preset: str) -> SimulationInput:
    """Copy of `inp` with the product's return / expense / volatility assumptions."""
    if preset == "custom":
        return inp
    try:
        p = PRODUCT_PRESETS[preset]
    except KeyError:
        raise ValueError(
            f"Unknown preset {preset!r}; choose from {sorted(PRODUCT_PRESETS)} or 'custom'."
        ) from None
    return inp.model_copy(update={
        "annual_return_rate": float(p["annual_return_rate"]),
        "expense_ratio": float(p["expense_ratio"]),
        "volatility": float(p["volatility"]),
    })


def with_default_sensitivity(inp: SimulationInput) -> SimulationInput:
    """
    Attach the standard sensitivity deltas:
      amount mode with contributions → contribution deltas
      rate mode                      → withdrawal-rate deltas
    Plans without a withdrawal phase are returned unchanged.
    """
    if inp.withdrawal_years <= 0:
        return inp
    if inp.withdrawal_mode == "rate":
        return inp.model_copy(update={
            "rate_deltas": tuple(float(d) for d in SENSITIVITY_RATE_DELTAS),
            "contribution_deltas": None,
        })
    if inp.withdrawal_mode == "amount" and inp.contribution_years > 0:
        return inp.model_copy(update={
            "contribution_deltas": tuple(float(d) for d in SENSITIVITY_CONTRIBUTION_DELTAS),
            "rate_deltas": None,
        })
    return inp
