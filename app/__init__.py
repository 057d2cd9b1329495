"""
Boundary helpers — debounced recompute scheduler and the JSON command line.
"""

from .recompute import DebouncedRecompute

__all__ = ["DebouncedRecompute"]
