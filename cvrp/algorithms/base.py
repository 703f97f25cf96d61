"""
Abstract base classes for CVRP search components.
Defines interfaces for construction heuristics and local search operators.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from cvrp.algorithms.route_evaluator import RouteEvaluator


# A move: (cost delta, {vehicle: new interior route})
Move = Tuple[float, Dict[int, List[int]]]


class BaseConstructor(ABC):
    """Base class for first solution heuristics."""

    name = "constructor"

    def __init__(self, evaluator: RouteEvaluator):
        """
        Initialize constructor.

        Args:
            evaluator: Route evaluator over a closed routing model
        """
        self.evaluator = evaluator

    @abstractmethod
    def build(self, indices: Sequence[int]) -> Optional[List[List[int]]]:
        """
        Build one route per vehicle covering the given indices.

        Args:
            indices: Routing indices that must be visited

        Returns:
            Routes (interior indices per vehicle), or None if some index could not be placed
        """
        pass

    def _insert_leftovers(self, routes: List[List[int]], leftovers: Sequence[int]) -> bool:
        """Cheapest feasible insertion of remaining indices; False if one does not fit."""
        for index in leftovers:
            best = self.evaluator.best_insertion(routes, index)
            if best is None:
                return False
            _, vehicle, position = best
            routes[vehicle].insert(position, index)
        return True


class BaseOperator(ABC):
    """Base class for local search operators."""

    name = "operator"

    def __init__(self, evaluator: RouteEvaluator):
        """
        Initialize operator.

        Args:
            evaluator: Route evaluator defining the cost being minimised
        """
        self.evaluator = evaluator

    @abstractmethod
    def find_move(self, routes: Sequence[Sequence[int]],
                  route_costs: Sequence[float]) -> Optional[Move]:
        """
        Find the best improving feasible move.

        Args:
            routes: Current interior routes per vehicle
            route_costs: Cost of each route under self.evaluator

        Returns:
            (delta, changed routes) with delta < 0, or None at a local optimum
        """
        pass
