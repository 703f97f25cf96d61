"""
Search engine: first solution + improvement under a wall-clock time limit.
"""

import logging
import time
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cvrp.algorithms.construction import build_first_solution
from cvrp.algorithms.guided_local_search import GuidedLocalSearch
from cvrp.algorithms.local_search import LocalSearch
from cvrp.algorithms.route_evaluator import RouteEvaluator
from cvrp.core.exceptions import InvalidSolutionError
from cvrp.models.assignment import Assignment
from cvrp.models.parameters import LocalSearchMetaheuristic, SearchParameters

logger = logging.getLogger(__name__)


class SearchEngine:
    """Runs one search on a routing model."""

    def __init__(self, model, parameters: SearchParameters):
        """
        Initialize search engine.

        Args:
            model: RoutingModel to solve
            parameters: Search parameters
        """
        self.model = model
        self.parameters = parameters
        self.history: List[Tuple[float, float]] = []
        self.statistics: Dict[str, Any] = {}
        self._start_time = 0.0

    def _elapsed(self) -> float:
        return time.monotonic() - self._start_time

    def _log_improvement(self, message: str):
        if self.parameters.log_search:
            logger.info(message)
        else:
            logger.debug(message)

    def _record(self, cost: float, label: str):
        elapsed = self._elapsed()
        self.history.append((elapsed, float(cost)))
        self._log_improvement(f"[{elapsed:7.3f}s] {label}: objective {cost}")

    def _check_initial_routes(self, evaluator: RouteEvaluator,
                              routes: Sequence[Sequence[int]]) -> List[List[int]]:
        num_vehicles = evaluator.num_vehicles
        if len(routes) > num_vehicles:
            raise InvalidSolutionError(
                f"Got {len(routes)} routes for {num_vehicles} vehicles"
            )
        routes = [list(r) for r in routes] + [[] for _ in range(num_vehicles - len(routes))]

        expected = set(self.model.customer_indices())
        visited = [index for route in routes for index in route]
        duplicates = sorted(i for i, count in Counter(visited).items() if count > 1)
        if duplicates:
            raise InvalidSolutionError("Indices visited more than once", {'indices': duplicates})
        unknown = sorted(set(visited) - expected)
        if unknown:
            raise InvalidSolutionError("Routes contain depot or unknown indices", {'indices': unknown})
        missing = sorted(expected - set(visited))
        if missing:
            raise InvalidSolutionError("Routes do not visit every index", {'indices': missing})
        return routes

    def search(self, initial_routes: Optional[Sequence[Sequence[int]]] = None) -> Optional[Assignment]:
        """
        Build and improve a solution.

        Args:
            initial_routes: Optional interior index routes to start from

        Returns:
            Best assignment found, or None if no feasible first solution exists
        """
        params = self.parameters
        self._start_time = time.monotonic()
        deadline = self._start_time + params.time_limit

        evaluator = RouteEvaluator(self.model)
        customers = self.model.customer_indices()

        logger.info(f"Search started: {len(customers)} visits, {evaluator.num_vehicles} vehicles, "
                    f"strategy={params.first_solution_strategy.value}, "
                    f"metaheuristic={params.local_search_metaheuristic.value}, "
                    f"time_limit={params.time_limit}s")

        if initial_routes is not None:
            routes = self._check_initial_routes(evaluator, initial_routes)
            infeasible = [v for v, r in enumerate(routes) if not evaluator.is_feasible(v, r)]
            if infeasible:
                logger.warning(f"Initial routes violate dimensions on vehicles {infeasible}")
                routes = None
            first_label = "initial routes"
        else:
            routes = build_first_solution(params.first_solution_strategy, evaluator, customers)
            first_label = "first solution"

        if routes is None:
            self.statistics = {
                'status': 'fail',
                'elapsed_seconds': self._elapsed(),
            }
            logger.warning("Search failed: no feasible first solution")
            return None

        initial_cost = evaluator.total_cost(routes)
        self._record(initial_cost, first_label)

        iterations = 0
        moves = 0
        if params.local_search_metaheuristic == LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH:
            gls = GuidedLocalSearch(
                evaluator,
                index_node_map=self.model.manager.index_node_map(),
                num_nodes=self.model.manager.num_nodes(),
                operator_names=params.local_search_operators,
                or_opt_max_segment=params.or_opt_max_segment,
                lambda_coefficient=params.guided_local_search_lambda_coefficient,
                max_iterations=params.max_iterations,
                deadline=deadline,
                on_improvement=lambda it, cost: self._on_gls_improvement(it, cost, initial_cost),
            )
            routes, best_cost = gls.run(routes)
            iterations = gls.iterations
            moves = gls.moves_applied
        else:
            descent = LocalSearch(evaluator, params.local_search_operators,
                                  params.or_opt_max_segment, deadline)
            routes = descent.run(routes)
            best_cost = evaluator.total_cost(routes)
            moves = descent.moves_applied
            if best_cost < initial_cost:
                self._record(best_cost, "local optimum")

        assignment = self.model.build_assignment(routes)
        elapsed = self._elapsed()
        self.statistics = {
            'status': 'success',
            'initial_objective': int(initial_cost),
            'objective': int(assignment.objective_value),
            'improvement': int(initial_cost - assignment.objective_value),
            'iterations': iterations,
            'moves_applied': moves,
            'elapsed_seconds': elapsed,
            'vehicles_used': sum(1 for r in routes if r),
        }
        logger.info(f"Search finished in {elapsed:.3f}s: objective {assignment.objective_value} "
                    f"(first solution {initial_cost})")
        return assignment

    def _on_gls_improvement(self, iteration: int, cost: float, initial_cost: float):
        if iteration == 0:
            if cost < initial_cost:
                self._record(cost, "local optimum")
            return
        self._record(cost, f"GLS iteration {iteration}")

    def get_statistics(self) -> Dict[str, Any]:
        """Return search statistics of the last run."""
        stats = dict(self.statistics)
        stats['history_points'] = len(self.history)
        return stats
