"""
Routing index manager.

Maps between node ids of the problem and the routing variable indices used by
the search. Each vehicle owns a start and an end index; depots shared by
several vehicles are duplicated so that every start/end is a distinct index.
"""

from typing import List, Optional, Sequence

from cvrp.core.exceptions import InvalidIndexError, InvalidModelError


class RoutingIndexManager:
    """
    Node <-> index mapping.

    Layout for N nodes and M vehicles:
        - indices 0..N-1 are the nodes themselves (index == node)
        - the first use of a depot node as a start/end claims its own index
        - every further start gets a new index after the nodes, then every
          further end gets a new index after those

    With a single depot this gives start(0) == depot, starts of vehicles
    1..M-1 at N..N+M-2 and ends at N+M-1..N+2M-2.
    """

    def __init__(self,
                 num_nodes: int,
                 num_vehicles: int,
                 depot: int = 0,
                 starts: Optional[Sequence[int]] = None,
                 ends: Optional[Sequence[int]] = None):
        """
        Initialize index manager.

        Args:
            num_nodes: Number of nodes in the problem
            num_vehicles: Number of vehicles
            depot: Depot used as start and end by every vehicle
            starts: Optional start node per vehicle (requires ends)
            ends: Optional end node per vehicle (requires starts)
        """
        if num_nodes < 1:
            raise InvalidModelError("Index manager needs at least one node",
                                    {'num_nodes': num_nodes})
        if num_vehicles < 1:
            raise InvalidModelError("Index manager needs at least one vehicle",
                                    {'num_vehicles': num_vehicles})
        if (starts is None) != (ends is None):
            raise InvalidModelError("starts and ends must be given together")

        self._num_nodes = int(num_nodes)
        self._num_vehicles = int(num_vehicles)

        if starts is None:
            self._check_node(depot)
            starts = [depot] * self._num_vehicles
            ends = [depot] * self._num_vehicles
        else:
            if len(starts) != self._num_vehicles or len(ends) != self._num_vehicles:
                raise InvalidModelError(
                    "One start and one end node per vehicle are required",
                    {'starts': len(starts), 'ends': len(ends), 'num_vehicles': self._num_vehicles}
                )
            for node in list(starts) + list(ends):
                self._check_node(node)

        self._index_to_node: List[int] = list(range(self._num_nodes))
        claimed = set()

        def claim(node: int) -> int:
            if node not in claimed:
                claimed.add(node)
                return node
            self._index_to_node.append(node)
            return len(self._index_to_node) - 1

        # Starts are laid out before ends
        self._starts = [claim(int(node)) for node in starts]
        self._ends = [claim(int(node)) for node in ends]

        self._start_vehicle = {index: v for v, index in enumerate(self._starts)}
        self._end_vehicle = {index: v for v, index in enumerate(self._ends)}

    def _check_node(self, node: int):
        if not 0 <= node < self._num_nodes:
            raise InvalidIndexError('node', node, self._num_nodes)

    def _check_index(self, index: int):
        if not 0 <= index < len(self._index_to_node):
            raise InvalidIndexError('index', index, len(self._index_to_node))

    def _check_vehicle(self, vehicle: int):
        if not 0 <= vehicle < self._num_vehicles:
            raise InvalidIndexError('vehicle', vehicle, self._num_vehicles)

    def num_nodes(self) -> int:
        return self._num_nodes

    def num_vehicles(self) -> int:
        return self._num_vehicles

    def num_indices(self) -> int:
        return len(self._index_to_node)

    def index_to_node(self, index: int) -> int:
        """Convert a routing variable index to its node id."""
        self._check_index(index)
        return self._index_to_node[index]

    def node_to_index(self, node: int) -> int:
        """Convert a node id to its (first) routing variable index."""
        self._check_node(node)
        return node

    def indices_to_nodes(self, indices: Sequence[int]) -> List[int]:
        return [self.index_to_node(index) for index in indices]

    def nodes_to_indices(self, nodes: Sequence[int]) -> List[int]:
        return [self.node_to_index(node) for node in nodes]

    def get_start_index(self, vehicle: int) -> int:
        self._check_vehicle(vehicle)
        return self._starts[vehicle]

    def get_end_index(self, vehicle: int) -> int:
        self._check_vehicle(vehicle)
        return self._ends[vehicle]

    def is_start(self, index: int) -> bool:
        return index in self._start_vehicle

    def is_end(self, index: int) -> bool:
        return index in self._end_vehicle

    def vehicle_of_start(self, index: int) -> Optional[int]:
        return self._start_vehicle.get(index)

    def vehicle_of_end(self, index: int) -> Optional[int]:
        return self._end_vehicle.get(index)

    def customer_indices(self) -> List[int]:
        """Indices that must be visited by some route (every non start/end index)."""
        return [index for index in range(self.num_indices())
                if index not in self._start_vehicle and index not in self._end_vehicle]

    def index_node_map(self) -> List[int]:
        """Copy of the full index -> node table."""
        return list(self._index_to_node)
