"""
Visualization components for ukf tracking.

This module provides trajectory plots with confidence ellipses and NIS
consistency plots.
"""

from .plotter import plot_tracking, plot_nis, confidence_ellipse

__all__ = [
    "plot_tracking",
    "plot_nis",
    "confidence_ellipse"
]
