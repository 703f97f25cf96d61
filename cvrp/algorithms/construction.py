"""
First solution heuristics.

- PathCheapestArc: extend each vehicle's path with the cheapest feasible arc
- Savings: Clarke-Wright parallel savings, routes matched to vehicles by load
- ParallelCheapestInsertion: insert the globally cheapest (index, vehicle, position)
"""

import logging
from typing import Dict, List, Optional, Sequence, Type

from cvrp.algorithms.base import BaseConstructor
from cvrp.algorithms.route_evaluator import RouteEvaluator
from cvrp.models.parameters import FirstSolutionStrategy

logger = logging.getLogger(__name__)


class PathCheapestArc(BaseConstructor):
    """Nearest-neighbour style construction, one vehicle at a time."""

    name = "path_cheapest_arc"

    def build(self, indices: Sequence[int]) -> Optional[List[List[int]]]:
        evaluator = self.evaluator
        routes: List[List[int]] = [[] for _ in range(evaluator.num_vehicles)]
        unvisited = sorted(indices)

        for vehicle in range(evaluator.num_vehicles):
            if not unvisited:
                break
            route = routes[vehicle]
            current = evaluator.starts[vehicle]

            while unvisited:
                # Find cheapest arc from the path end to an index that still fits
                best_index = None
                best_cost = None
                for index in unvisited:
                    cost = evaluator.arc_cost(vehicle, current, index)
                    if best_cost is not None and cost >= best_cost:
                        continue
                    if evaluator.is_feasible(vehicle, route + [index]):
                        best_index = index
                        best_cost = cost

                if best_index is None:
                    break  # Nothing else fits this vehicle

                route.append(best_index)
                unvisited.remove(best_index)
                current = best_index

        if unvisited:
            logger.debug(f"PathCheapestArc: {len(unvisited)} indices left, trying insertion")
            if not self._insert_leftovers(routes, unvisited):
                return None
        return routes


class Savings(BaseConstructor):
    """Clarke-Wright savings, merged routes assigned to vehicles afterwards."""

    name = "savings"

    def build(self, indices: Sequence[int]) -> Optional[List[List[int]]]:
        evaluator = self.evaluator
        num_vehicles = evaluator.num_vehicles
        if not indices:
            return [[] for _ in range(num_vehicles)]

        # Depot arcs of vehicle 0 are the reference for savings
        reference = 0
        start = evaluator.starts[reference]
        end = evaluator.ends[reference]

        savings = []
        for i in indices:
            for j in indices:
                if i == j:
                    continue
                saving = (evaluator.arc_cost(reference, i, end)
                          + evaluator.arc_cost(reference, start, j)
                          - evaluator.arc_cost(reference, i, j))
                savings.append((saving, i, j))
        # Largest saving first, ties by index
        savings.sort(key=lambda s: (-s[0], s[1], s[2]))

        routes: Dict[int, List[int]] = {index: [index] for index in indices}
        route_of = {index: index for index in indices}

        for saving, i, j in savings:
            if saving <= 0:
                break
            ri, rj = route_of[i], route_of[j]
            if ri == rj:
                continue
            # i must close its route, j must open its route
            if routes[ri][-1] != i or routes[rj][0] != j:
                continue
            merged = routes[ri] + routes[rj]
            if not any(evaluator.is_feasible(v, merged) for v in range(num_vehicles)):
                continue
            routes[ri] = merged
            for index in routes.pop(rj):
                route_of[index] = ri

        return self._assign_to_vehicles(list(routes.values()))

    def _assign_to_vehicles(self, merged_routes: List[List[int]]) -> Optional[List[List[int]]]:
        evaluator = self.evaluator
        vehicle_routes: List[List[int]] = [[] for _ in range(evaluator.num_vehicles)]
        free = list(range(evaluator.num_vehicles))
        leftovers: List[int] = []

        # Heaviest routes first, cheapest feasible vehicle for each
        ordered = sorted(merged_routes, key=lambda r: (self._route_load(r), len(r)), reverse=True)
        for route in ordered:
            best_vehicle = None
            best_cost = None
            for vehicle in free:
                if not evaluator.is_feasible(vehicle, route):
                    continue
                cost = evaluator.route_cost(vehicle, route)
                if best_cost is None or cost < best_cost:
                    best_vehicle, best_cost = vehicle, cost
            if best_vehicle is None:
                leftovers.extend(route)
                continue
            vehicle_routes[best_vehicle] = list(route)
            free.remove(best_vehicle)

        if leftovers:
            logger.debug(f"Savings: {len(leftovers)} indices without a vehicle, trying insertion")
            if not self._insert_leftovers(vehicle_routes, leftovers):
                return None
        return vehicle_routes

    def _route_load(self, route: Sequence[int]) -> int:
        """Transit of the first dimension along the route, on the reference vehicle."""
        evaluator = self.evaluator
        if not evaluator.dimensions:
            return 0
        dimension = evaluator.dimensions[0]
        path = evaluator.path(0, route)
        return sum(dimension.transit(a, b) for a, b in zip(path[:-1], path[1:]))


class ParallelCheapestInsertion(BaseConstructor):
    """Repeatedly insert the index with the globally cheapest insertion."""

    name = "parallel_cheapest_insertion"

    def build(self, indices: Sequence[int]) -> Optional[List[List[int]]]:
        evaluator = self.evaluator
        routes: List[List[int]] = [[] for _ in range(evaluator.num_vehicles)]
        pending = sorted(indices)

        while pending:
            best = None
            for index in pending:
                insertion = evaluator.best_insertion(routes, index)
                if insertion is None:
                    logger.debug(f"ParallelCheapestInsertion: index {index} cannot be inserted")
                    return None
                if best is None or insertion[0] < best[0][0]:
                    best = (insertion, index)

            (_, vehicle, position), index = best
            routes[vehicle].insert(position, index)
            pending.remove(index)

        return routes


CONSTRUCTORS: Dict[FirstSolutionStrategy, Type[BaseConstructor]] = {
    FirstSolutionStrategy.PATH_CHEAPEST_ARC: PathCheapestArc,
    FirstSolutionStrategy.SAVINGS: Savings,
    FirstSolutionStrategy.PARALLEL_CHEAPEST_INSERTION: ParallelCheapestInsertion,
}


def build_first_solution(strategy: FirstSolutionStrategy,
                         evaluator: RouteEvaluator,
                         indices: Sequence[int]) -> Optional[List[List[int]]]:
    """
    Build a first solution with the given strategy.

    Args:
        strategy: First solution strategy
        evaluator: Route evaluator over a closed model
        indices: Routing indices to visit

    Returns:
        Routes per vehicle, or None if the strategy could not place every index
    """
    constructor = CONSTRUCTORS[strategy](evaluator)
    routes = constructor.build(indices)
    if routes is None:
        logger.info(f"First solution strategy '{strategy.value}' found no feasible solution")
    else:
        logger.debug(f"First solution ({strategy.value}): cost {evaluator.total_cost(routes)}")
    return routes
