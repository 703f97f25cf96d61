"""
Routing model.

Holds the index manager, the registered transit evaluators, the arc cost
evaluator of every vehicle and the dimensions. Closing the model caches all
evaluators; the search engine then works only on cached matrices.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from cvrp.core.exceptions import InvalidIndexError, InvalidModelError
from cvrp.models.assignment import Assignment, RoutingStatus
from cvrp.models.dimension import Dimension
from cvrp.models.evaluators import TransitEvaluator, matrix_callback, vector_callback
from cvrp.models.index_manager import RoutingIndexManager
from cvrp.models.parameters import SearchParameters, default_search_parameters

logger = logging.getLogger(__name__)


class RoutingModel:
    """Vehicle routing model over a RoutingIndexManager."""

    def __init__(self, manager: RoutingIndexManager):
        """
        Initialize routing model.

        Args:
            manager: Index manager defining nodes, vehicles, starts and ends
        """
        self.manager = manager
        self._evaluators: List[TransitEvaluator] = []
        self._vehicle_cost_evaluator: List[Optional[int]] = [None] * manager.num_vehicles()
        self._dimensions: Dict[str, Dimension] = {}
        self._closed = False
        self._cost_matrices: List[np.ndarray] = []
        self.status = RoutingStatus.NOT_SOLVED
        self.last_search_statistics: Dict = {}
        self.last_search_history: List = []

    # ------------------------------------------------------------------
    # Evaluator registration
    # ------------------------------------------------------------------

    def _check_open(self):
        if self._closed:
            raise InvalidModelError("Model is closed; it cannot be modified after solving")

    def _register(self, evaluator: TransitEvaluator) -> int:
        self._check_open()
        self._evaluators.append(evaluator)
        return len(self._evaluators) - 1

    def register_transit_callback(self, callback: Callable[[int, int], int]) -> int:
        """Register f(from_index, to_index) -> int and return its evaluator index."""
        return self._register(TransitEvaluator(callback, unary=False,
                                               name=f"transit_{len(self._evaluators)}"))

    def register_unary_transit_callback(self, callback: Callable[[int], int]) -> int:
        """Register f(from_index) -> int and return its evaluator index."""
        return self._register(TransitEvaluator(callback, unary=True,
                                               name=f"unary_{len(self._evaluators)}"))

    def register_transit_matrix(self, matrix) -> int:
        """Register a node-indexed NxN matrix as a transit evaluator."""
        matrix = np.asarray(matrix)
        n = self.manager.num_nodes()
        if matrix.shape != (n, n):
            raise InvalidModelError("Transit matrix must be N x N",
                                    {'shape': tuple(matrix.shape), 'num_nodes': n})
        callback = matrix_callback(matrix, self.manager.index_node_map())
        return self._register(TransitEvaluator(callback, unary=False,
                                               name=f"matrix_{len(self._evaluators)}"))

    def register_unary_transit_vector(self, values) -> int:
        """Register node-indexed values as a unary transit evaluator."""
        values = np.asarray(values)
        n = self.manager.num_nodes()
        if values.shape != (n,):
            raise InvalidModelError("Transit vector must have one value per node",
                                    {'shape': tuple(values.shape), 'num_nodes': n})
        callback = vector_callback(values, self.manager.index_node_map())
        return self._register(TransitEvaluator(callback, unary=True,
                                               name=f"vector_{len(self._evaluators)}"))

    def _get_evaluator(self, evaluator_index: int) -> TransitEvaluator:
        if not 0 <= evaluator_index < len(self._evaluators):
            raise InvalidModelError(f"Unknown evaluator index {evaluator_index}",
                                    {'registered': len(self._evaluators)})
        return self._evaluators[evaluator_index]

    def set_arc_cost_evaluator_of_all_vehicles(self, evaluator_index: int):
        self._check_open()
        self._get_evaluator(evaluator_index)
        self._vehicle_cost_evaluator = [evaluator_index] * self.manager.num_vehicles()

    def set_arc_cost_evaluator_of_vehicle(self, evaluator_index: int, vehicle: int):
        self._check_open()
        self._get_evaluator(evaluator_index)
        self._check_vehicle(vehicle)
        self._vehicle_cost_evaluator[vehicle] = evaluator_index

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------

    def add_dimension(self, evaluator_index: int, slack_max: int, capacity: int,
                      fix_start_cumul_to_zero: bool, name: str) -> Dimension:
        """Add a dimension with the same capacity for every vehicle."""
        return self.add_dimension_with_vehicle_capacity(
            evaluator_index, slack_max, [capacity] * self.manager.num_vehicles(),
            fix_start_cumul_to_zero, name
        )

    def add_dimension_with_vehicle_capacity(self, evaluator_index: int, slack_max: int,
                                            capacities: Sequence[int],
                                            fix_start_cumul_to_zero: bool,
                                            name: str) -> Dimension:
        """
        Add a dimension with one capacity per vehicle.

        Args:
            evaluator_index: Registered transit evaluator driving the dimension
            slack_max: Maximum slack per arc
            capacities: Upper bound of the cumul per vehicle
            fix_start_cumul_to_zero: Force cumul at route starts to 0
            name: Unique dimension name

        Returns:
            The new Dimension
        """
        self._check_open()
        evaluator = self._get_evaluator(evaluator_index)

        if name in self._dimensions:
            raise InvalidModelError(f"Dimension '{name}' already exists")
        if slack_max < 0:
            raise InvalidModelError("slack_max must be non-negative", {'slack_max': slack_max})
        if len(capacities) != self.manager.num_vehicles():
            raise InvalidModelError(
                "One capacity per vehicle is required",
                {'capacities': len(capacities), 'num_vehicles': self.manager.num_vehicles()}
            )
        if any(c < 0 for c in capacities):
            raise InvalidModelError("Dimension capacities must be non-negative",
                                    {'capacities': list(capacities)})

        dimension = Dimension(name, evaluator, evaluator_index, slack_max,
                              capacities, fix_start_cumul_to_zero)
        self._dimensions[name] = dimension
        logger.debug(f"Added dimension {dimension}")
        return dimension

    def has_dimension(self, name: str) -> bool:
        return name in self._dimensions

    def get_dimension(self, name: str) -> Dimension:
        if name not in self._dimensions:
            raise InvalidModelError(f"Unknown dimension '{name}'")
        return self._dimensions[name]

    @property
    def dimensions(self) -> List[Dimension]:
        return list(self._dimensions.values())

    # ------------------------------------------------------------------
    # Structure queries
    # ------------------------------------------------------------------

    def _check_vehicle(self, vehicle: int):
        if not 0 <= vehicle < self.manager.num_vehicles():
            raise InvalidIndexError('vehicle', vehicle, self.manager.num_vehicles())

    def vehicles(self) -> int:
        return self.manager.num_vehicles()

    def size(self) -> int:
        """Number of non-end indices (the indices that own a successor)."""
        return self.manager.num_indices() - self.manager.num_vehicles()

    def start(self, vehicle: int) -> int:
        return self.manager.get_start_index(vehicle)

    def end(self, vehicle: int) -> int:
        return self.manager.get_end_index(vehicle)

    def is_start(self, index: int) -> bool:
        return self.manager.is_start(index)

    def is_end(self, index: int) -> bool:
        return self.manager.is_end(index)

    def customer_indices(self) -> List[int]:
        return self.manager.customer_indices()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close_model(self):
        """Freeze the model and cache every evaluator over all index pairs."""
        if self._closed:
            return
        missing = [v for v, e in enumerate(self._vehicle_cost_evaluator) if e is None]
        if missing:
            raise InvalidModelError("No arc cost evaluator set for some vehicles",
                                    {'vehicles': missing})

        num_indices = self.manager.num_indices()
        for evaluator in self._evaluators:
            if not evaluator.is_cached:
                evaluator.build_cache(num_indices)

        self._cost_matrices = []
        for vehicle, evaluator_index in enumerate(self._vehicle_cost_evaluator):
            matrix = np.array(self._evaluators[evaluator_index].matrix, dtype=np.int64)
            # An unused vehicle (start -> end) costs nothing
            matrix[self.start(vehicle), self.end(vehicle)] = 0
            matrix.setflags(write=False)
            self._cost_matrices.append(matrix)

        self._closed = True
        logger.debug(f"Model closed: {num_indices} indices, {self.vehicles()} vehicles, "
                     f"{len(self._dimensions)} dimensions")

    def cost_matrix(self, vehicle: int) -> np.ndarray:
        """Cached arc cost matrix of a vehicle (closes the model if needed)."""
        self.close_model()
        return self._cost_matrices[vehicle]

    def get_arc_cost_for_vehicle(self, from_index: int, to_index: int, vehicle: int) -> int:
        """Cost of arc from_index -> to_index when driven by vehicle."""
        self._check_vehicle(vehicle)
        if self.is_start(from_index) and self.is_end(to_index) \
                and self.manager.vehicle_of_start(from_index) == vehicle \
                and self.manager.vehicle_of_end(to_index) == vehicle:
            return 0
        evaluator = self._get_evaluator(self._vehicle_cost_evaluator[vehicle])
        return evaluator(from_index, to_index)

    def get_cumul_values(self, dimension_name: str, assignment: Assignment,
                         vehicle: int) -> Optional[List[int]]:
        """Cumul values of a dimension along a vehicle's route in an assignment."""
        dimension = self.get_dimension(dimension_name)
        return dimension.route_cumuls(vehicle, assignment.route_path(self.start(vehicle)))

    # ------------------------------------------------------------------
    # Assignment building and solving
    # ------------------------------------------------------------------

    def build_assignment(self, routes: Sequence[Sequence[int]]) -> Assignment:
        """
        Build an Assignment from one interior index route per vehicle.

        Args:
            routes: routes[v] = indices visited by vehicle v, without start/end

        Returns:
            Assignment with objective value computed from the arc costs
        """
        self.close_model()
        num_indices = self.manager.num_indices()
        next_indices = [-1] * num_indices
        vehicle_of = [-1] * num_indices
        objective = 0

        for vehicle, route in enumerate(routes):
            path = [self.start(vehicle)] + list(route) + [self.end(vehicle)]
            cost_matrix = self._cost_matrices[vehicle]
            for a, b in zip(path[:-1], path[1:]):
                next_indices[a] = b
                objective += int(cost_matrix[a, b])
            for index in path:
                vehicle_of[index] = vehicle

        return Assignment(tuple(next_indices), tuple(vehicle_of), objective)

    def routes_from_assignment(self, assignment: Assignment) -> List[List[int]]:
        """Interior index route per vehicle of an assignment."""
        return [assignment.route_path(self.start(v))[1:-1] for v in range(self.vehicles())]

    def solve(self) -> Optional[Assignment]:
        """Solve with default search parameters."""
        return self.solve_with_parameters(default_search_parameters())

    def solve_with_parameters(self, parameters: SearchParameters) -> Optional[Assignment]:
        """
        Run construction and improvement search.

        Args:
            parameters: Search parameters

        Returns:
            Best assignment found, or None if no feasible assignment was built
        """
        from cvrp.algorithms.search_engine import SearchEngine

        engine = SearchEngine(self, parameters)
        assignment = engine.search()
        self._record(engine, assignment)
        return assignment

    def solve_from_routes(self, routes: Sequence[Sequence[int]],
                          parameters: Optional[SearchParameters] = None) -> Optional[Assignment]:
        """
        Improve a caller-supplied solution.

        Args:
            routes: routes[v] = node ids visited by vehicle v, without depots
            parameters: Search parameters (defaults from config)

        Returns:
            Best assignment found, or None if the given routes are infeasible
        """
        from cvrp.algorithms.search_engine import SearchEngine

        parameters = parameters or default_search_parameters()
        index_routes = [self.manager.nodes_to_indices(route) for route in routes]
        engine = SearchEngine(self, parameters)
        assignment = engine.search(initial_routes=index_routes)
        self._record(engine, assignment)
        return assignment

    def _record(self, engine, assignment: Optional[Assignment]):
        self.status = RoutingStatus.SUCCESS if assignment is not None else RoutingStatus.FAIL
        self.last_search_statistics = engine.get_statistics()
        self.last_search_history = list(engine.history)
