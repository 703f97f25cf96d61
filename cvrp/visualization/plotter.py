"""
Plotting utilities for CVRP search analysis.
Creates convergence and route load charts.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from cvrp.config import VIZ_CONFIG
from cvrp.evaluation.reporter import RouteSummary


class Plotter:
    """Creates plots for CVRP search analysis."""

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize plotter.

        Args:
            config: Visualization configuration
        """
        self.config = config or VIZ_CONFIG.copy()

        plt.style.use('default')

        self.fig_size = self.config['figure_size']
        self.dpi = self.config['dpi']
        self.font_size = self.config['font_size']

    def plot_convergence(self, history: Sequence[Tuple[float, float]],
                         title: str = "Search Convergence",
                         save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot best objective over elapsed search time.

        Args:
            history: (elapsed_seconds, objective) pairs
            title: Plot title
            save_path: Optional path to save plot

        Returns:
            Matplotlib figure
        """
        times = [t for t, _ in history]
        objectives = [c for _, c in history]

        fig, ax = plt.subplots(figsize=self.fig_size)

        if history:
            ax.step(times, objectives, 'b-', where='post', linewidth=2, label='Best Objective')
            ax.plot(times, objectives, 'bo', markersize=4)
            ax.annotate(f"{objectives[-1]:.0f}", (times[-1], objectives[-1]),
                        textcoords="offset points", xytext=(5, 5), fontsize=self.font_size - 1)

        ax.set_xlabel('Elapsed time (s)', fontsize=self.font_size)
        ax.set_ylabel('Objective', fontsize=self.font_size)
        ax.set_title(title, fontsize=self.font_size + 2, fontweight='bold')
        ax.grid(True, alpha=0.3)
        if history:
            ax.legend()
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=self.dpi, bbox_inches='tight')

        return fig

    def plot_route_loads(self, routes: List[RouteSummary],
                         title: str = "Vehicle Loads",
                         save_path: Optional[str] = None) -> plt.Figure:
        """
        Bar chart of load against capacity per vehicle.

        Args:
            routes: Route summaries
            title: Plot title
            save_path: Optional path to save plot

        Returns:
            Matplotlib figure
        """
        vehicles = [f"V{r.vehicle_id}" for r in routes]
        loads = [r.load for r in routes]
        capacities = [r.capacity for r in routes]

        fig, ax = plt.subplots(figsize=self.fig_size)
        ax.bar(vehicles, capacities, color='lightgray', label='Capacity')
        ax.bar(vehicles, loads, color='steelblue', label='Load')

        ax.set_xlabel('Vehicle', fontsize=self.font_size)
        ax.set_ylabel('Demand', fontsize=self.font_size)
        ax.set_title(title, fontsize=self.font_size + 2, fontweight='bold')
        ax.grid(True, axis='y', alpha=0.3)
        ax.legend()
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=self.dpi, bbox_inches='tight')

        return fig


def plot_convergence(history: Sequence[Tuple[float, float]], title: str = "Search Convergence",
                     save_path: Optional[str] = None) -> plt.Figure:
    """
    Convenience function to plot convergence.

    Args:
        history: (elapsed_seconds, objective) pairs
        title: Plot title
        save_path: Optional path to save plot

    Returns:
        Matplotlib figure
    """
    plotter = Plotter()
    return plotter.plot_convergence(history, title, save_path)
