"""
Result export module for the CVRP solver.
Exports routes, search history and a run summary for analysis.
"""

import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from cvrp.evaluation.reporter import RouteSummary
from cvrp.models.problem import CVRPProblem

logger = logging.getLogger(__name__)


class ResultExporter:
    """Exports CVRP results in CSV and JSON."""

    def __init__(self, output_dir: str = "results"):
        """
        Initialize result exporter.

        Args:
            output_dir: Output directory for results
        """
        self.output_dir = output_dir
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def _path(self, filename: Optional[str], default_stem: str, extension: str) -> str:
        if filename is None:
            filename = f"{default_stem}_{self.timestamp}.{extension}"
        os.makedirs(self.output_dir, exist_ok=True)
        return os.path.join(self.output_dir, filename)

    @staticmethod
    def routes_dataframe(routes: Sequence[RouteSummary]) -> pd.DataFrame:
        """One row per vehicle with its route and totals."""
        rows = []
        for summary in routes:
            rows.append({
                'vehicle_id': summary.vehicle_id,
                'route': ' -> '.join(str(n) for n in summary.nodes),
                'num_visits': summary.num_visits,
                'distance': summary.distance,
                'load': summary.load,
                'capacity': summary.capacity,
                'utilization': round(summary.utilization, 2),
            })
        columns = ['vehicle_id', 'route', 'num_visits', 'distance', 'load', 'capacity', 'utilization']
        return pd.DataFrame(rows, columns=columns)

    def export_routes(self, routes: Sequence[RouteSummary],
                      filename: Optional[str] = None) -> str:
        """
        Export route summaries to CSV.

        Args:
            routes: Route summaries (all vehicles)
            filename: Output filename (auto-generated if None)

        Returns:
            Path to exported file
        """
        filepath = self._path(filename, "routes", "csv")
        self.routes_dataframe(routes).to_csv(filepath, index=False)
        logger.info(f"Routes exported to: {filepath}")
        return filepath

    def export_history(self, history: Sequence[Tuple[float, float]],
                       filename: Optional[str] = None) -> str:
        """
        Export the search convergence history to CSV.

        Args:
            history: (elapsed_seconds, objective) pairs
            filename: Output filename (auto-generated if None)

        Returns:
            Path to exported file
        """
        filepath = self._path(filename, "search_history", "csv")
        df = pd.DataFrame(list(history), columns=['elapsed_seconds', 'objective'])
        df.insert(0, 'improvement', range(len(df)))
        df.to_csv(filepath, index=False)
        logger.info(f"Search history exported to: {filepath}")
        return filepath

    def export_summary(self, problem: CVRPProblem, result,
                       filename: Optional[str] = None) -> str:
        """
        Export problem info, statistics and routes of a solve to JSON.

        Args:
            problem: Solved problem
            result: SolveResult of the run
            filename: Output filename (auto-generated if None)

        Returns:
            Path to exported file
        """
        filepath = self._path(filename, "summary", "json")
        summary = {
            'timestamp': self.timestamp,
            'problem': problem.get_problem_info(),
            'result': result.to_dict(),
        }
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Summary exported to: {filepath}")
        return filepath

    def export_all(self, problem: CVRPProblem, result,
                   filenames: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Export routes, history and summary.

        Args:
            problem: Solved problem
            result: SolveResult of the run
            filenames: Optional 'routes', 'history' and 'summary' file names

        Returns:
            Dictionary with exported file paths
        """
        filenames = filenames or {}
        return {
            'routes': self.export_routes(result.routes, filenames.get('routes')),
            'history': self.export_history(result.history, filenames.get('history')),
            'summary': self.export_summary(problem, result, filenames.get('summary')),
        }


def export_all_results(problem: CVRPProblem, result,
                       output_dir: str = "results") -> Dict[str, str]:
    """
    Export all result files.

    Args:
        problem: Solved problem
        result: SolveResult of the run
        output_dir: Output directory

    Returns:
        Dictionary with exported file paths
    """
    return ResultExporter(output_dir).export_all(problem, result)
