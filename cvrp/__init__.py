"""
CVRP solver.

Capacitated vehicle routing with a routing index manager, a routing model with
transit callbacks and dimensions, construction heuristics and guided local search.
"""

__version__ = "1.0.0"

from .models.problem import CVRPProblem, create_demo_problem, create_problem_from_dict
from .algorithms.solver import CVRPSolver, SolveResult, solve_problem

__all__ = ['CVRPProblem', 'create_demo_problem', 'create_problem_from_dict',
           'CVRPSolver', 'SolveResult', 'solve_problem', '__version__']
