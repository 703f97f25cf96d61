"""
Guided Local Search (GLS) for CVRP.

Features are node-level arcs (a, b). After each descent the arcs of the
current solution with maximum utility cost(a, b) / (1 + penalty(a, b)) are
penalised, and the next descent minimises

    cost(a, b) + lambda * penalty(a, b)

with lambda = coefficient * cost(first local optimum) / number of its arcs.
The best solution under the true cost is kept.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from cvrp.algorithms.local_search import LocalSearch
from cvrp.algorithms.route_evaluator import AugmentedRouteEvaluator, RouteEvaluator

logger = logging.getLogger(__name__)


class GuidedLocalSearch:
    """Guided local search metaheuristic."""

    def __init__(self,
                 evaluator: RouteEvaluator,
                 index_node_map: Sequence[int],
                 num_nodes: int,
                 operator_names: Sequence[str],
                 or_opt_max_segment: int = 3,
                 lambda_coefficient: float = 0.1,
                 max_iterations: Optional[int] = None,
                 deadline: Optional[float] = None,
                 on_improvement: Optional[Callable[[int, float], None]] = None):
        """
        Initialize GLS.

        Args:
            evaluator: True cost evaluator
            index_node_map: Node of every routing index
            num_nodes: Number of nodes (penalty matrix is num_nodes x num_nodes)
            operator_names: Local search operators
            or_opt_max_segment: Longest segment moved by or_opt
            lambda_coefficient: Scale of the penalty term
            max_iterations: Penalisation rounds (None = until deadline)
            deadline: time.monotonic() value at which the search stops
            on_improvement: Called with (iteration, cost) for every new best
        """
        self.evaluator = evaluator
        self.index_node_map = list(index_node_map)
        self.num_nodes = num_nodes
        self.operator_names = list(operator_names)
        self.or_opt_max_segment = or_opt_max_segment
        self.lambda_coefficient = lambda_coefficient
        self.max_iterations = max_iterations
        self.deadline = deadline
        self.on_improvement = on_improvement

        self.penalties = np.zeros((num_nodes, num_nodes), dtype=np.float64)
        self.penalty_factor = 0.0
        self.iterations = 0
        self.improvements = 0
        self.moves_applied = 0

    def _time_left(self) -> bool:
        return self.deadline is None or time.monotonic() < self.deadline

    def _descend(self, evaluator: RouteEvaluator, routes: List[List[int]]) -> List[List[int]]:
        search = LocalSearch(evaluator, self.operator_names,
                             self.or_opt_max_segment, self.deadline)
        result = search.run(routes)
        self.moves_applied += search.moves_applied
        return result

    def _arcs(self, routes: Sequence[Sequence[int]]) -> List[Tuple[int, int, int]]:
        """(vehicle, from_index, to_index) arcs of all non-empty routes."""
        arcs = []
        for vehicle, route in enumerate(routes):
            if not route:
                continue
            path = self.evaluator.path(vehicle, route)
            for a, b in zip(path[:-1], path[1:]):
                arcs.append((vehicle, a, b))
        return arcs

    def _penalize(self, routes: Sequence[Sequence[int]]) -> bool:
        """Penalise the max-utility arcs of a solution; False if nothing can be penalised."""
        best_utility = 0.0
        selected = []
        for vehicle, a, b in self._arcs(routes):
            cost = float(self.evaluator.arc_cost(vehicle, a, b))
            if cost <= 0:
                continue
            node_a, node_b = self.index_node_map[a], self.index_node_map[b]
            utility = cost / (1.0 + self.penalties[node_a, node_b])
            if utility > best_utility + 1e-12:
                best_utility = utility
                selected = [(node_a, node_b)]
            elif abs(utility - best_utility) <= 1e-12:
                selected.append((node_a, node_b))

        if not selected:
            return False
        for node_a, node_b in set(selected):
            self.penalties[node_a, node_b] += 1.0
        return True

    def run(self, routes: Sequence[Sequence[int]]) -> Tuple[List[List[int]], float]:
        """
        Run GLS from a feasible solution.

        Args:
            routes: Feasible interior routes per vehicle

        Returns:
            (best routes, best cost)
        """
        current = self._descend(self.evaluator, [list(r) for r in routes])
        best = [list(r) for r in current]
        best_cost = self.evaluator.total_cost(best)
        if self.on_improvement:
            self.on_improvement(0, best_cost)

        num_arcs = len(self._arcs(current))
        if num_arcs == 0 or best_cost <= 0:
            logger.debug("GLS: nothing to improve (no arcs with positive cost)")
            return best, best_cost

        self.penalty_factor = self.lambda_coefficient * best_cost / num_arcs
        logger.debug(f"GLS: lambda = {self.penalty_factor:.4f} ({num_arcs} arcs, cost {best_cost})")

        while self._time_left():
            if self.max_iterations is not None and self.iterations >= self.max_iterations:
                break
            self.iterations += 1

            if not self._penalize(current):
                break

            augmented = AugmentedRouteEvaluator(self.evaluator, self.penalties,
                                                self.penalty_factor, self.index_node_map)
            current = self._descend(augmented, current)

            current_cost = self.evaluator.total_cost(current)
            if current_cost < best_cost:
                best = [list(r) for r in current]
                best_cost = current_cost
                self.improvements += 1
                if self.on_improvement:
                    self.on_improvement(self.iterations, best_cost)
                if best_cost <= 0:
                    break

        logger.debug(f"GLS finished: {self.iterations} iterations, "
                     f"{self.improvements} improvements, best cost {best_cost}")
        return best, best_cost
