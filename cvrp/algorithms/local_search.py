"""
Local search descent over the operator neighbourhoods.
"""

import logging
import time
from typing import List, Optional, Sequence

from cvrp.algorithms.operators import create_operators
from cvrp.algorithms.route_evaluator import RouteEvaluator
from cvrp.models.parameters import LOCAL_SEARCH_OPERATORS

logger = logging.getLogger(__name__)


class LocalSearch:
    """
    Variable neighbourhood descent.

    Operators are tried in order; after any improving move the scan restarts
    from the first operator. Stops at a local optimum or at the deadline.
    """

    def __init__(self,
                 evaluator: RouteEvaluator,
                 operator_names: Sequence[str] = LOCAL_SEARCH_OPERATORS,
                 or_opt_max_segment: int = 3,
                 deadline: Optional[float] = None):
        """
        Initialize local search.

        Args:
            evaluator: Cost/feasibility evaluator (plain or penalty-augmented)
            operator_names: Operators to use, in application order
            or_opt_max_segment: Longest segment moved by or_opt
            deadline: time.monotonic() value after which the descent stops
        """
        self.evaluator = evaluator
        self.operators = create_operators(operator_names, evaluator, or_opt_max_segment)
        self.deadline = deadline
        self.moves_applied = 0
        self.move_counts = {op.name: 0 for op in self.operators}

    def _time_left(self) -> bool:
        return self.deadline is None or time.monotonic() < self.deadline

    def run(self, routes: Sequence[Sequence[int]]) -> List[List[int]]:
        """
        Descend from the given routes to a local optimum.

        Args:
            routes: Interior routes per vehicle (not modified)

        Returns:
            Improved routes
        """
        current = [list(route) for route in routes]
        costs = [self.evaluator.route_cost(v, route) for v, route in enumerate(current)]

        improved = True
        while improved and self._time_left():
            improved = False
            for operator in self.operators:
                move = operator.find_move(current, costs)
                if move is None:
                    continue
                delta, changed = move
                for vehicle, route in changed.items():
                    current[vehicle] = route
                    costs[vehicle] = self.evaluator.route_cost(vehicle, route)
                self.moves_applied += 1
                self.move_counts[operator.name] += 1
                logger.debug(f"{operator.name}: delta {delta:.3f}, cost {sum(costs):.3f}")
                improved = True
                break

        return current
