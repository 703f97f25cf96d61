"""
Search algorithms for CVRP.

This package contains:
- Construction heuristics (path cheapest arc, savings, parallel cheapest insertion)
- Local search operators and descent
- Guided local search
- The time-limited search engine and the solver facade
"""

from .construction import PathCheapestArc, Savings, ParallelCheapestInsertion, build_first_solution
from .local_search import LocalSearch
from .guided_local_search import GuidedLocalSearch
from .search_engine import SearchEngine
from .solver import CVRPSolver, SolveResult, solve_problem

__all__ = ['PathCheapestArc', 'Savings', 'ParallelCheapestInsertion', 'build_first_solution',
           'LocalSearch', 'GuidedLocalSearch', 'SearchEngine', 'CVRPSolver', 'SolveResult',
           'solve_problem']
