"""
Small CVRP instances shared by the unit tests.
"""

import numpy as np

from cvrp.models.problem import CVRPProblem

# 4 nodes, asymmetric
ASYMMETRIC_MATRIX = [
    [0, 2, 9, 10],
    [1, 0, 6, 4],
    [15, 7, 0, 8],
    [6, 3, 12, 0],
]


def asymmetric_problem(capacities=(2, 3), demands=(0, 1, 1, 2)) -> CVRPProblem:
    return CVRPProblem(ASYMMETRIC_MATRIX, list(demands), list(capacities), name='asymmetric')


def line_problem(num_customers: int = 4, capacities=(10, 10)) -> CVRPProblem:
    """Depot at x=0, customer i at x=i, distance 10 per unit."""
    positions = np.arange(num_customers + 1)
    matrix = 10 * np.abs(positions[:, None] - positions[None, :])
    demands = [0] + [1] * num_customers
    return CVRPProblem(matrix, demands, list(capacities), name='line')


def random_problem(seed: int, num_customers: int = 8, num_vehicles: int = 4,
                   capacity: int = 25) -> CVRPProblem:
    """Euclidean instance on a 100x100 grid with demands in [1, 9]."""
    rs = np.random.RandomState(seed)
    coords = rs.randint(0, 100, size=(num_customers + 1, 2))
    diff = coords[:, None, :] - coords[None, :, :]
    matrix = np.rint(np.sqrt((diff ** 2).sum(axis=2))).astype(int)
    demands = [0] + rs.randint(1, 10, size=num_customers).tolist()
    return CVRPProblem(matrix, demands, [capacity] * num_vehicles, name=f'random_{seed}')
