"""
Plots for search analysis.
"""

from .plotter import Plotter, plot_convergence

__all__ = ['Plotter', 'plot_convergence']
