"""
Routing model components.

This package contains the problem instance and the model the search works on:
- Problem instance and demo factory
- Routing index manager
- Transit evaluators and dimensions
- Routing model, search parameters and assignments
"""

from .problem import CVRPProblem, create_problem_from_dict, create_demo_problem
from .index_manager import RoutingIndexManager
from .evaluators import TransitEvaluator
from .dimension import Dimension
from .assignment import Assignment, RoutingStatus
from .parameters import (
    FirstSolutionStrategy,
    LocalSearchMetaheuristic,
    SearchParameters,
    default_search_parameters,
    search_parameters_from_config,
)
from .routing_model import RoutingModel

__all__ = ['CVRPProblem', 'create_problem_from_dict', 'create_demo_problem',
           'RoutingIndexManager', 'TransitEvaluator', 'Dimension', 'Assignment',
           'RoutingStatus', 'FirstSolutionStrategy', 'LocalSearchMetaheuristic',
           'SearchParameters', 'default_search_parameters', 'search_parameters_from_config',
           'RoutingModel']
