"""
Data preparation — building SimulationInput from presets, env defaults and pension
settings, plus plausibility checks.
"""

from .presets import (
    PRODUCT_PRESETS,
    SENSITIVITY_CONTRIBUTION_DELTAS,
    SENSITIVITY_RATE_DELTAS,
    apply_preset,
    default_input_from_env,
    with_default_sensitivity,
)
from .pension import (
    PENSION_NET_RATE,
    adjusted_pension,
    net_monthly_pension,
    pension_start_year,
)
from .validators import ValidationResult, validate_input

__all__ = [
    "PRODUCT_PRESETS",
    "SENSITIVITY_CONTRIBUTION_DELTAS",
    "SENSITIVITY_RATE_DELTAS",
    "apply_preset",
    "default_input_from_env",
    "with_default_sensitivity",
    "PENSION_NET_RATE",
    "adjusted_pension",
    "net_monthly_pension",
    "pension_start_year",
    "ValidationResult",
    "validate_input",
]
