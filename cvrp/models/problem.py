"""
CVRP problem model.
Defines the immutable problem instance handed to the routing model.
"""

from typing import Dict, List, Optional, Sequence
import numpy as np

from cvrp.core.exceptions import InvalidProblemError


class CVRPProblem:
    """Represents a complete CVRP instance."""

    def __init__(self,
                 distance_matrix,
                 demands: Sequence[int],
                 vehicle_capacities: Sequence[int],
                 num_vehicles: Optional[int] = None,
                 depot: int = 0,
                 name: str = "cvrp"):
        """
        Initialize CVRP problem.

        Args:
            distance_matrix: NxN non-negative integer matrix (may be asymmetric)
            demands: Demand per node, depot demand must be 0
            vehicle_capacities: Capacity per vehicle
            num_vehicles: Number of vehicles (defaults to len(vehicle_capacities))
            depot: Depot node index
            name: Instance name used in reports and exports
        """
        self.name = name
        self._distance_matrix = self._as_int_array(distance_matrix, 'distance_matrix', ndim=2)
        self._demands = self._as_int_array(demands, 'demands', ndim=1)
        self._vehicle_capacities = self._as_int_array(vehicle_capacities, 'vehicle_capacities', ndim=1)
        self._num_vehicles = (int(num_vehicles) if num_vehicles is not None
                              else len(self._vehicle_capacities))
        self._depot = int(depot)

        self._validate_problem()

        # Instance is immutable once validated
        for array in (self._distance_matrix, self._demands, self._vehicle_capacities):
            array.setflags(write=False)

    @staticmethod
    def _as_int_array(values, field_name: str, ndim: int) -> np.ndarray:
        try:
            array = np.array(values)
            if array.dtype.kind not in 'iu':
                as_float = array.astype(np.float64)
                if not (np.isfinite(as_float).all() and np.array_equal(as_float, np.floor(as_float))):
                    raise InvalidProblemError(f"{field_name} must contain integers",
                                              {'dtype': str(array.dtype)})
            array = array.astype(np.int64)
        except (TypeError, ValueError) as e:
            raise InvalidProblemError(f"{field_name} must contain integers", {'reason': str(e)})
        if array.ndim != ndim:
            raise InvalidProblemError(
                f"{field_name} must be {ndim}-dimensional",
                {'shape': tuple(array.shape)}
            )
        return array

    def _validate_problem(self):
        """Validate CVRP problem constraints."""
        n = len(self._demands)
        if n < 1:
            raise InvalidProblemError("Problem needs at least one node")

        if self._num_vehicles < 1:
            raise InvalidProblemError("Number of vehicles must be positive",
                                      {'num_vehicles': self._num_vehicles})

        if self._distance_matrix.shape != (n, n):
            raise InvalidProblemError(
                "Distance matrix must be N x N with N = number of demands",
                {'shape': tuple(self._distance_matrix.shape), 'num_nodes': n}
            )

        if (self._distance_matrix < 0).any():
            raise InvalidProblemError("Distance matrix has negative entries")

        if (self._demands < 0).any():
            raise InvalidProblemError("Demands must be non-negative")

        if len(self._vehicle_capacities) != self._num_vehicles:
            raise InvalidProblemError(
                "One capacity per vehicle is required",
                {'capacities': len(self._vehicle_capacities), 'num_vehicles': self._num_vehicles}
            )

        if (self._vehicle_capacities < 0).any():
            raise InvalidProblemError("Vehicle capacities must be non-negative")

        if not 0 <= self._depot < n:
            raise InvalidProblemError(f"Depot {self._depot} out of range", {'num_nodes': n})

        if self._demands[self._depot] != 0:
            raise InvalidProblemError(
                f"Depot demand must be 0, got {int(self._demands[self._depot])}",
                {'depot': self._depot}
            )

        max_demand = int(self._demands.max())
        max_capacity = int(self._vehicle_capacities.max())
        if max_demand > max_capacity:
            raise InvalidProblemError(
                f"Node demand {max_demand} exceeds largest vehicle capacity {max_capacity}"
            )

        total_demand = self.total_demand
        total_capacity = self.total_capacity
        if total_demand > total_capacity:
            raise InvalidProblemError(
                f"Total demand {total_demand} exceeds total capacity {total_capacity}"
            )

    @property
    def distance_matrix(self) -> np.ndarray:
        return self._distance_matrix

    @property
    def demands(self) -> np.ndarray:
        return self._demands

    @property
    def vehicle_capacities(self) -> np.ndarray:
        return self._vehicle_capacities

    @property
    def num_vehicles(self) -> int:
        return self._num_vehicles

    @property
    def depot(self) -> int:
        return self._depot

    @property
    def num_nodes(self) -> int:
        return len(self._demands)

    @property
    def customers(self) -> List[int]:
        """Non-depot node ids."""
        return [node for node in range(self.num_nodes) if node != self._depot]

    @property
    def total_demand(self) -> int:
        return int(self._demands.sum())

    @property
    def total_capacity(self) -> int:
        return int(self._vehicle_capacities.sum())

    def get_distance(self, from_node: int, to_node: int) -> int:
        """Get distance between two nodes."""
        return int(self._distance_matrix[from_node, to_node])

    def get_demand(self, node: int) -> int:
        return int(self._demands[node])

    def is_symmetric(self) -> bool:
        return bool((self._distance_matrix == self._distance_matrix.T).all())

    def estimate_minimum_vehicles(self) -> int:
        """Lower bound on vehicles needed, filling the largest vehicles first."""
        remaining = self.total_demand
        used = 0
        for capacity in sorted(self._vehicle_capacities.tolist(), reverse=True):
            if remaining <= 0:
                break
            remaining -= capacity
            used += 1
        return max(1, used)

    def get_problem_info(self) -> Dict:
        """Get problem information summary."""
        return {
            'name': self.name,
            'num_nodes': int(self.num_nodes),
            'num_customers': int(len(self.customers)),
            'num_vehicles': int(self._num_vehicles),
            'depot': int(self._depot),
            'vehicle_capacities': [int(c) for c in self._vehicle_capacities],
            'total_demand': self.total_demand,
            'total_capacity': self.total_capacity,
            'min_vehicles_needed': int(self.estimate_minimum_vehicles()),
            'is_symmetric': self.is_symmetric(),
        }

    def to_dict(self) -> Dict:
        """Convert problem to a plain dictionary."""
        return {
            'name': self.name,
            'distance_matrix': self._distance_matrix.tolist(),
            'demands': self._demands.tolist(),
            'vehicle_capacities': self._vehicle_capacities.tolist(),
            'num_vehicles': self._num_vehicles,
            'depot': self._depot,
        }

    def __repr__(self):
        return (f"CVRPProblem(name={self.name!r}, nodes={self.num_nodes}, "
                f"vehicles={self._num_vehicles}, depot={self._depot})")


def create_problem_from_dict(data: Dict, name: Optional[str] = None) -> CVRPProblem:
    """
    Create CVRP problem from dictionary data.

    Args:
        data: Dictionary with 'distance_matrix', 'demands', 'vehicle_capacities',
              and optionally 'num_vehicles', 'depot', 'name'
        name: Overrides the instance name

    Returns:
        CVRPProblem instance
    """
    missing = [key for key in ('distance_matrix', 'demands', 'vehicle_capacities')
               if key not in data]
    if missing:
        raise InvalidProblemError("Missing problem fields", {'missing': missing})

    return CVRPProblem(
        distance_matrix=data['distance_matrix'],
        demands=data['demands'],
        vehicle_capacities=data['vehicle_capacities'],
        num_vehicles=data.get('num_vehicles'),
        depot=data.get('depot', 0),
        name=name or data.get('name', 'cvrp'),
    )


def create_demo_problem() -> CVRPProblem:
    """Build the built-in 10-node instance from config."""
    from cvrp.config import DEMO_INSTANCE
    return create_problem_from_dict(DEMO_INSTANCE, name='demo')
