"""
Projection engine — deterministic yearly account math + Monte Carlo runner + sensitivity sweep.
"""

from .cashflow import project
from .runner import simulate
from .sensitivity import run_sensitivity_sweep

__all__ = ["project", "simulate", "run_sensitivity_sweep"]
