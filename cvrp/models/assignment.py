"""
Assignment: the successor of every routing index in a solution.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from cvrp.core.exceptions import InvalidIndexError


class RoutingStatus(Enum):
    """Outcome of the last solve on a routing model."""
    NOT_SOLVED = 'not_solved'
    SUCCESS = 'success'
    FAIL = 'fail'


@dataclass(frozen=True)
class Assignment:
    """
    Immutable solution.

    next_indices[i] is the successor of index i (-1 for end indices),
    vehicle_of[i] the vehicle whose route contains i.
    """
    next_indices: Tuple[int, ...]
    vehicle_of: Tuple[int, ...]
    objective_value: int

    def next(self, index: int) -> int:
        """Successor of a non-end index."""
        if not 0 <= index < len(self.next_indices):
            raise InvalidIndexError('index', index, len(self.next_indices))
        successor = self.next_indices[index]
        if successor < 0:
            raise InvalidIndexError('index', index)
        return successor

    def vehicle(self, index: int) -> int:
        if not 0 <= index < len(self.vehicle_of):
            raise InvalidIndexError('index', index, len(self.vehicle_of))
        return self.vehicle_of[index]

    def route_path(self, start: int) -> List[int]:
        """Indices visited from a start index up to and including its end."""
        path = [start]
        index = start
        while self.next_indices[index] >= 0:
            index = self.next_indices[index]
            path.append(index)
            if len(path) > len(self.next_indices):
                raise InvalidIndexError('index', start)
        return path

    def to_dict(self) -> Dict:
        return {
            'objective_value': int(self.objective_value),
            'next_indices': list(self.next_indices),
            'vehicle_of': list(self.vehicle_of),
        }
