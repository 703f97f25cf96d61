"""
Local search operators for CVRP.

Every operator scans its whole neighbourhood and returns the best improving
move that keeps all dimensions feasible. Candidate routes are re-costed in full,
so asymmetric costs are handled without special delta formulas.
"""

from typing import Dict, List, Optional, Sequence, Type

from cvrp.algorithms.base import BaseOperator, Move
from cvrp.algorithms.route_evaluator import RouteEvaluator

# Improvements smaller than this are treated as ties
EPSILON = 1e-9


class _MoveTracker:
    """Keeps the best (most negative) delta seen so far."""

    def __init__(self):
        self.delta = -EPSILON
        self.routes: Optional[Dict[int, List[int]]] = None

    def offer(self, delta: float, routes: Dict[int, List[int]]) -> None:
        if delta < self.delta:
            self.delta = delta
            self.routes = routes

    def result(self) -> Optional[Move]:
        if self.routes is None:
            return None
        return self.delta, self.routes


class TwoOptOperator(BaseOperator):
    """Reverse a segment inside one route."""

    name = "two_opt"

    def find_move(self, routes, route_costs) -> Optional[Move]:
        evaluator = self.evaluator
        tracker = _MoveTracker()

        for vehicle, route in enumerate(routes):
            n = len(route)
            if n < 2:
                continue
            for i in range(n - 1):
                for j in range(i + 1, n):
                    candidate = list(route[:i]) + list(reversed(route[i:j + 1])) + list(route[j + 1:])
                    delta = evaluator.route_cost(vehicle, candidate) - route_costs[vehicle]
                    if delta < tracker.delta and evaluator.is_feasible(vehicle, candidate):
                        tracker.offer(delta, {vehicle: candidate})

        return tracker.result()


class OrOptOperator(BaseOperator):
    """Move a segment of consecutive indices to another position in the same route."""

    name = "or_opt"

    def __init__(self, evaluator: RouteEvaluator, max_segment: int = 3):
        super().__init__(evaluator)
        self.max_segment = max_segment

    def find_move(self, routes, route_costs) -> Optional[Move]:
        evaluator = self.evaluator
        tracker = _MoveTracker()

        for vehicle, route in enumerate(routes):
            n = len(route)
            for length in range(1, min(self.max_segment, n - 1) + 1):
                for i in range(n - length + 1):
                    segment = list(route[i:i + length])
                    rest = list(route[:i]) + list(route[i + length:])
                    for position in range(len(rest) + 1):
                        if position == i:
                            continue  # Same route as before
                        candidate = rest[:position] + segment + rest[position:]
                        delta = evaluator.route_cost(vehicle, candidate) - route_costs[vehicle]
                        if delta < tracker.delta and evaluator.is_feasible(vehicle, candidate):
                            tracker.offer(delta, {vehicle: candidate})

        return tracker.result()


class RelocateOperator(BaseOperator):
    """Move one index into another route."""

    name = "relocate"

    def find_move(self, routes, route_costs) -> Optional[Move]:
        evaluator = self.evaluator
        tracker = _MoveTracker()
        num_routes = len(routes)

        for source in range(num_routes):
            source_route = routes[source]
            for i, index in enumerate(source_route):
                reduced = list(source_route[:i]) + list(source_route[i + 1:])
                source_delta = evaluator.route_cost(source, reduced) - route_costs[source]

                for target in range(num_routes):
                    if target == source:
                        continue
                    target_route = routes[target]
                    for position in range(len(target_route) + 1):
                        insertion = evaluator.insertion_cost(target, target_route, index, position)
                        delta = source_delta + insertion
                        if delta >= tracker.delta:
                            continue
                        candidate = list(target_route[:position]) + [index] + list(target_route[position:])
                        if evaluator.is_feasible(target, candidate) and evaluator.is_feasible(source, reduced):
                            tracker.offer(delta, {source: reduced, target: candidate})

        return tracker.result()


class ExchangeOperator(BaseOperator):
    """Swap two indices belonging to different routes."""

    name = "exchange"

    def find_move(self, routes, route_costs) -> Optional[Move]:
        evaluator = self.evaluator
        tracker = _MoveTracker()
        num_routes = len(routes)

        for first in range(num_routes):
            for second in range(first + 1, num_routes):
                route_a, route_b = routes[first], routes[second]
                for i in range(len(route_a)):
                    for j in range(len(route_b)):
                        new_a = list(route_a)
                        new_b = list(route_b)
                        new_a[i], new_b[j] = route_b[j], route_a[i]
                        delta = (evaluator.route_cost(first, new_a) - route_costs[first]
                                 + evaluator.route_cost(second, new_b) - route_costs[second])
                        if delta < tracker.delta \
                                and evaluator.is_feasible(first, new_a) \
                                and evaluator.is_feasible(second, new_b):
                            tracker.offer(delta, {first: new_a, second: new_b})

        return tracker.result()


class CrossOperator(BaseOperator):
    """Exchange the tails of two routes (2-opt*)."""

    name = "cross"

    def find_move(self, routes, route_costs) -> Optional[Move]:
        evaluator = self.evaluator
        tracker = _MoveTracker()
        num_routes = len(routes)

        for first in range(num_routes):
            for second in range(first + 1, num_routes):
                route_a, route_b = routes[first], routes[second]
                if not route_a and not route_b:
                    continue
                for i in range(len(route_a) + 1):
                    for j in range(len(route_b) + 1):
                        # Cutting both routes at their ends or both at their starts changes nothing
                        if (i == len(route_a) and j == len(route_b)) or (i == 0 and j == 0):
                            continue
                        new_a = list(route_a[:i]) + list(route_b[j:])
                        new_b = list(route_b[:j]) + list(route_a[i:])
                        delta = (evaluator.route_cost(first, new_a) - route_costs[first]
                                 + evaluator.route_cost(second, new_b) - route_costs[second])
                        if delta < tracker.delta \
                                and evaluator.is_feasible(first, new_a) \
                                and evaluator.is_feasible(second, new_b):
                            tracker.offer(delta, {first: new_a, second: new_b})

        return tracker.result()


OPERATORS: Dict[str, Type[BaseOperator]] = {
    TwoOptOperator.name: TwoOptOperator,
    OrOptOperator.name: OrOptOperator,
    RelocateOperator.name: RelocateOperator,
    ExchangeOperator.name: ExchangeOperator,
    CrossOperator.name: CrossOperator,
}


def create_operators(names: Sequence[str], evaluator: RouteEvaluator,
                     or_opt_max_segment: int = 3) -> List[BaseOperator]:
    """Instantiate operators by name, keeping the given order."""
    operators = []
    for name in names:
        if name == OrOptOperator.name:
            operators.append(OrOptOperator(evaluator, max_segment=or_opt_max_segment))
        else:
            operators.append(OPERATORS[name](evaluator))
    return operators
