"""
Transit evaluators.

Arc costs and dimension transits are given as callbacks over routing indices.
Callbacks are evaluated once for every index pair when the model is closed and
kept as numpy matrices, so the search never calls back into Python per arc.
"""

import logging
from typing import Callable, Optional

import numpy as np

from cvrp.core.exceptions import InvalidModelError

logger = logging.getLogger(__name__)


class TransitEvaluator:
    """A registered transit callback: binary (from, to) or unary (from)."""

    def __init__(self, callback: Callable, unary: bool = False, name: str = ""):
        """
        Initialize evaluator.

        Args:
            callback: f(from_index, to_index) -> int, or f(from_index) -> int if unary
            unary: Whether the callback only depends on the origin index
            name: Label used in logs
        """
        self.callback = callback
        self.unary = unary
        self.name = name
        self._matrix: Optional[np.ndarray] = None

    @property
    def is_cached(self) -> bool:
        return self._matrix is not None

    @property
    def matrix(self) -> np.ndarray:
        """Cached SxS transit matrix over routing indices."""
        if self._matrix is None:
            raise InvalidModelError(f"Evaluator '{self.name}' has not been cached; close the model first")
        return self._matrix

    def build_cache(self, num_indices: int):
        """Evaluate the callback over all index pairs."""
        if self.unary:
            values = np.array([int(self.callback(i)) for i in range(num_indices)], dtype=np.int64)
            matrix = np.repeat(values[:, None], num_indices, axis=1)
        else:
            matrix = np.empty((num_indices, num_indices), dtype=np.int64)
            for i in range(num_indices):
                for j in range(num_indices):
                    matrix[i, j] = int(self.callback(i, j))
        matrix.setflags(write=False)
        self._matrix = matrix
        logger.debug(f"Cached evaluator '{self.name}' ({num_indices}x{num_indices}, unary={self.unary})")

    def __call__(self, from_index: int, to_index: int) -> int:
        if self._matrix is not None:
            return int(self._matrix[from_index, to_index])
        if self.unary:
            return int(self.callback(from_index))
        return int(self.callback(from_index, to_index))


def matrix_callback(matrix, index_node_map) -> Callable[[int, int], int]:
    """Wrap a node-indexed matrix as an index-based transit callback."""
    node_matrix = np.asarray(matrix, dtype=np.int64)
    nodes = list(index_node_map)

    def callback(from_index: int, to_index: int) -> int:
        return int(node_matrix[nodes[from_index], nodes[to_index]])

    return callback


def vector_callback(values, index_node_map) -> Callable[[int], int]:
    """Wrap a node-indexed vector as an index-based unary transit callback."""
    node_values = np.asarray(values, dtype=np.int64)
    nodes = list(index_node_map)

    def callback(from_index: int) -> int:
        return int(node_values[nodes[from_index]])

    return callback
