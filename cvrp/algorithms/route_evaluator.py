"""
Route cost and feasibility evaluation shared by construction and local search.

Routes are lists of interior routing indices (no start/end); the evaluator
adds the vehicle's start and end before looking anything up.
"""

from typing import List, Optional, Sequence

import numpy as np

from cvrp.models.routing_model import RoutingModel


class RouteEvaluator:
    """Evaluates routes against a closed routing model."""

    def __init__(self, model: RoutingModel):
        """
        Initialize route evaluator.

        Args:
            model: Routing model (closed on first use)
        """
        model.close_model()
        self.model = model
        self.num_vehicles = model.vehicles()
        self.starts = [model.start(v) for v in range(self.num_vehicles)]
        self.ends = [model.end(v) for v in range(self.num_vehicles)]
        self.cost_matrices = [model.cost_matrix(v) for v in range(self.num_vehicles)]
        self.dimensions = model.dimensions

    def path(self, vehicle: int, route: Sequence[int]) -> List[int]:
        return [self.starts[vehicle]] + list(route) + [self.ends[vehicle]]

    def arc_cost(self, vehicle: int, from_index: int, to_index: int) -> float:
        return self.cost_matrices[vehicle][from_index, to_index]

    def route_cost(self, vehicle: int, route: Sequence[int]) -> float:
        """Cost of a vehicle's route; empty routes cost 0."""
        if not route:
            return 0
        path = np.asarray(self.path(vehicle, route), dtype=np.int64)
        return self.cost_matrices[vehicle][path[:-1], path[1:]].sum().item()

    def total_cost(self, routes: Sequence[Sequence[int]]) -> float:
        return sum(self.route_cost(v, route) for v, route in enumerate(routes))

    def is_feasible(self, vehicle: int, route: Sequence[int]) -> bool:
        """Check every dimension on the vehicle's full path."""
        if not self.dimensions:
            return True
        path = self.path(vehicle, route)
        return all(d.is_feasible(vehicle, path) for d in self.dimensions)

    def insertion_cost(self, vehicle: int, route: Sequence[int], index: int,
                       position: int) -> float:
        """Cost increase of inserting index before route[position]."""
        prev_index = self.starts[vehicle] if position == 0 else route[position - 1]
        next_index = self.ends[vehicle] if position == len(route) else route[position]
        matrix = self.cost_matrices[vehicle]
        # start -> end is 0 in every cost matrix
        return (matrix[prev_index, index] + matrix[index, next_index]
                - matrix[prev_index, next_index]).item()

    def best_insertion(self, routes: Sequence[Sequence[int]], index: int,
                       vehicles: Optional[Sequence[int]] = None):
        """
        Cheapest feasible insertion of an index over the given vehicles.

        Returns:
            (cost, vehicle, position) or None if no feasible position exists
        """
        best = None
        for vehicle in (vehicles if vehicles is not None else range(self.num_vehicles)):
            route = routes[vehicle]
            for position in range(len(route) + 1):
                cost = self.insertion_cost(vehicle, route, index, position)
                if best is not None and cost >= best[0]:
                    continue
                candidate = list(route[:position]) + [index] + list(route[position:])
                if self.is_feasible(vehicle, candidate):
                    best = (cost, vehicle, position)
        return best


class AugmentedRouteEvaluator(RouteEvaluator):
    """
    Route evaluator whose arc costs carry guided local search penalties.

    augmented(a, b) = cost(a, b) + penalty_factor * penalty(node(a), node(b))
    """

    def __init__(self, base: RouteEvaluator, node_penalties: np.ndarray,
                 penalty_factor: float, index_node_map: Sequence[int]):
        self.model = base.model
        self.num_vehicles = base.num_vehicles
        self.starts = base.starts
        self.ends = base.ends
        self.dimensions = base.dimensions
        self.base = base

        nodes = np.asarray(index_node_map, dtype=np.int64)
        index_penalties = node_penalties[np.ix_(nodes, nodes)] * penalty_factor
        self.cost_matrices = []
        for vehicle, matrix in enumerate(base.cost_matrices):
            augmented = matrix.astype(np.float64) + index_penalties
            augmented[self.starts[vehicle], self.ends[vehicle]] = 0.0
            self.cost_matrices.append(augmented)
