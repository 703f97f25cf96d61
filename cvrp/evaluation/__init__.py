"""
Solution reporting, validation and export.
"""

from .reporter import RouteSummary, SolutionReporter
from .validator import SolutionValidator
from .result_exporter import ResultExporter, export_all_results

__all__ = ['RouteSummary', 'SolutionReporter', 'SolutionValidator', 'ResultExporter',
           'export_all_results']
