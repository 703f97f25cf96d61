"""
CVRP solver facade.
Builds the index manager, routing model, callbacks and the capacity dimension
for a CVRPProblem and runs the search.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from cvrp.core.exceptions import NoSolutionFoundError
from cvrp.evaluation.reporter import RouteSummary, SolutionReporter
from cvrp.models.assignment import Assignment
from cvrp.models.index_manager import RoutingIndexManager
from cvrp.models.parameters import SearchParameters, default_search_parameters
from cvrp.models.problem import CVRPProblem
from cvrp.models.routing_model import RoutingModel

logger = logging.getLogger(__name__)

CAPACITY_DIMENSION = "Capacity"


@dataclass
class SolveResult:
    """Outcome of a successful solve."""
    assignment: Assignment
    routes: List[RouteSummary]
    statistics: Dict[str, Any] = field(default_factory=dict)
    history: List[Tuple[float, float]] = field(default_factory=list)
    parameters: Optional[SearchParameters] = None

    @property
    def objective(self) -> int:
        return self.assignment.objective_value

    @property
    def total_distance(self) -> int:
        return sum(r.distance for r in self.routes)

    @property
    def total_load(self) -> int:
        return sum(r.load for r in self.routes)

    @property
    def used_routes(self) -> List[RouteSummary]:
        return [r for r in self.routes if r.is_used]

    def node_routes(self) -> List[List[int]]:
        """Node route per vehicle, depots included."""
        return [list(r.nodes) for r in self.routes]

    def to_dict(self) -> Dict:
        return {
            'objective': int(self.objective),
            'total_distance': int(self.total_distance),
            'total_load': int(self.total_load),
            'vehicles_used': len(self.used_routes),
            'routes': [r.to_dict() for r in self.routes],
            'statistics': dict(self.statistics),
            'history': [[float(t), float(c)] for t, c in self.history],
            'parameters': self.parameters.to_dict() if self.parameters else None,
        }


class CVRPSolver:
    """Solves a CVRPProblem with the routing model."""

    def __init__(self, problem: CVRPProblem, parameters: Optional[SearchParameters] = None):
        """
        Initialize solver.

        Args:
            problem: CVRP problem instance
            parameters: Search parameters (defaults from SEARCH_CONFIG)
        """
        self.problem = problem
        self.parameters = parameters or default_search_parameters()
        self.manager: Optional[RoutingIndexManager] = None
        self.model: Optional[RoutingModel] = None

    def build_model(self) -> RoutingModel:
        """
        Create the index manager and routing model with distance costs and
        the capacity dimension.

        Returns:
            Routing model ready to solve
        """
        problem = self.problem
        manager = RoutingIndexManager(problem.num_nodes, problem.num_vehicles, problem.depot)
        model = RoutingModel(manager)

        distance_matrix = problem.distance_matrix
        demands = problem.demands

        def distance_callback(from_index: int, to_index: int) -> int:
            from_node = manager.index_to_node(from_index)
            to_node = manager.index_to_node(to_index)
            return int(distance_matrix[from_node, to_node])

        def demand_callback(from_index: int) -> int:
            return int(demands[manager.index_to_node(from_index)])

        transit_callback_index = model.register_transit_callback(distance_callback)
        model.set_arc_cost_evaluator_of_all_vehicles(transit_callback_index)

        demand_callback_index = model.register_unary_transit_callback(demand_callback)
        model.add_dimension_with_vehicle_capacity(
            demand_callback_index,
            0,  # null capacity slack
            problem.vehicle_capacities.tolist(),
            True,  # start cumul to zero
            CAPACITY_DIMENSION,
        )

        self.manager = manager
        self.model = model
        logger.debug(f"Model built for {problem}: {manager.num_indices()} routing indices")
        return model

    def solve(self, initial_routes: Optional[List[List[int]]] = None) -> SolveResult:
        """
        Solve the problem.

        Args:
            initial_routes: Optional node routes per vehicle (without depots) to start from

        Returns:
            SolveResult with the best assignment found

        Raises:
            NoSolutionFoundError: If no feasible assignment was found
        """
        model = self.build_model()
        logger.info(f"Solving {self.problem.name}: {len(self.problem.customers)} customers, "
                    f"{self.problem.num_vehicles} vehicles, time limit {self.parameters.time_limit}s")

        if initial_routes is not None:
            assignment = model.solve_from_routes(initial_routes, self.parameters)
        else:
            assignment = model.solve_with_parameters(self.parameters)

        if assignment is None:
            raise NoSolutionFoundError(
                status=model.status.value,
                reason="no feasible assignment within the vehicle capacities"
            )

        reporter = SolutionReporter(self.problem, model)
        result = SolveResult(
            assignment=assignment,
            routes=reporter.extract_routes(assignment),
            statistics=dict(model.last_search_statistics),
            history=list(model.last_search_history),
            parameters=self.parameters,
        )
        logger.info(f"Objective: {result.objective} with {len(result.used_routes)} vehicles")
        return result

    def format_solution(self, result: SolveResult) -> str:
        """Console report of a result produced by this solver."""
        return SolutionReporter(self.problem, self.model).format_solution(result.assignment)


def solve_problem(problem: CVRPProblem,
                  parameters: Optional[SearchParameters] = None) -> SolveResult:
    """
    Convenience function to solve a problem.

    Args:
        problem: CVRP problem instance
        parameters: Search parameters

    Returns:
        SolveResult
    """
    return CVRPSolver(problem, parameters).solve()
