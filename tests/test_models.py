"""
Unit tests for the problem instance, index manager and routing model.
"""

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cvrp.core.exceptions import InvalidIndexError, InvalidModelError, InvalidProblemError
from cvrp.models.assignment import RoutingStatus
from cvrp.models.index_manager import RoutingIndexManager
from cvrp.models.problem import CVRPProblem, create_demo_problem, create_problem_from_dict
from cvrp.models.routing_model import RoutingModel

from instances import ASYMMETRIC_MATRIX


class TestCVRPProblem(unittest.TestCase):
    """Test problem construction and validation."""

    def setUp(self):
        self.matrix = [[0, 5, 7], [5, 0, 3], [7, 3, 0]]
        self.demands = [0, 4, 6]
        self.capacities = [10, 10]

    def test_valid_problem(self):
        problem = CVRPProblem(self.matrix, self.demands, self.capacities)
        self.assertEqual(problem.num_nodes, 3)
        self.assertEqual(problem.num_vehicles, 2)
        self.assertEqual(problem.depot, 0)
        self.assertEqual(problem.customers, [1, 2])
        self.assertEqual(problem.total_demand, 10)
        self.assertEqual(problem.total_capacity, 20)
        self.assertEqual(problem.get_distance(1, 2), 3)
        self.assertTrue(problem.is_symmetric())
        self.assertEqual(problem.estimate_minimum_vehicles(), 1)

    def test_arrays_are_read_only(self):
        problem = CVRPProblem(self.matrix, self.demands, self.capacities)
        with self.assertRaises(ValueError):
            problem.distance_matrix[0, 1] = 99
        with self.assertRaises(ValueError):
            problem.demands[1] = 0

    def test_num_vehicles_defaults_to_capacities(self):
        problem = CVRPProblem(self.matrix, self.demands, [10, 10, 10])
        self.assertEqual(problem.num_vehicles, 3)

    def test_rejects_malformed_inputs(self):
        cases = [
            dict(distance_matrix=[[0, 1], [1, 0]]),                       # not N x N
            dict(distance_matrix=[[0, -5, 7], [5, 0, 3], [7, 3, 0]]),     # negative distance
            dict(demands=[0, -4, 6]),                                      # negative demand
            dict(demands=[0, 4]),                                          # wrong length
            dict(vehicle_capacities=[10, -1]),                             # negative capacity
            dict(vehicle_capacities=[10], num_vehicles=2),                 # capacities != M
            dict(num_vehicles=0, vehicle_capacities=[]),                   # no vehicles
            dict(depot=3),                                                 # depot out of range
            dict(demands=[2, 4, 6]),                                       # depot demand
            dict(demands=[0, 4, 11]),                                      # demand > capacity
            dict(vehicle_capacities=[5, 5]),                               # total demand > total capacity
        ]
        for overrides in cases:
            kwargs = dict(distance_matrix=self.matrix, demands=self.demands,
                          vehicle_capacities=self.capacities)
            kwargs.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(InvalidProblemError):
                    CVRPProblem(**kwargs)

    def test_rejects_non_integer_values(self):
        with self.assertRaises(InvalidProblemError):
            CVRPProblem([["a", 1, 2], [1, 0, 3], [2, 3, 0]], self.demands, self.capacities)
        fractional = [
            dict(distance_matrix=[[0, 2.9, 7], [5, 0, 3], [7, 3, 0]]),
            dict(demands=[0, 0.7, 6]),
            dict(vehicle_capacities=[10, 10.5]),
            dict(demands=[0, float('nan'), 6]),
        ]
        for overrides in fractional:
            kwargs = dict(distance_matrix=self.matrix, demands=self.demands,
                          vehicle_capacities=self.capacities)
            kwargs.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(InvalidProblemError):
                    CVRPProblem(**kwargs)

    def test_accepts_integral_floats(self):
        problem = CVRPProblem(np.array(self.matrix, dtype=float), [0.0, 4.0, 6.0], self.capacities)
        self.assertEqual(problem.demands.dtype, np.int64)
        self.assertEqual(problem.demands.tolist(), self.demands)

    def test_create_problem_from_dict(self):
        problem = create_problem_from_dict({
            'distance_matrix': self.matrix,
            'demands': self.demands,
            'vehicle_capacities': self.capacities,
        }, name='small')
        self.assertEqual(problem.name, 'small')
        self.assertEqual(problem.to_dict()['demands'], self.demands)

        with self.assertRaises(InvalidProblemError):
            create_problem_from_dict({'demands': self.demands})

    def test_demo_problem(self):
        problem = create_demo_problem()
        self.assertEqual(problem.num_nodes, 10)
        self.assertEqual(problem.num_vehicles, 4)
        self.assertEqual(problem.vehicle_capacities.tolist(), [5000] * 4)
        self.assertEqual(problem.get_distance(0, 1), 10)
        self.assertEqual(problem.get_distance(1, 0), 23)
        self.assertFalse(problem.is_symmetric())
        info = problem.get_problem_info()
        self.assertEqual(info['num_customers'], 9)
        self.assertEqual(info['total_demand'], 5400)
        self.assertEqual(info['min_vehicles_needed'], 2)


class TestRoutingIndexManager(unittest.TestCase):
    """Test node/index mapping."""

    def test_single_depot_layout(self):
        manager = RoutingIndexManager(10, 4, 0)
        self.assertEqual(manager.num_indices(), 10 + 2 * 4 - 1)
        self.assertEqual([manager.get_start_index(v) for v in range(4)], [0, 10, 11, 12])
        self.assertEqual([manager.get_end_index(v) for v in range(4)], [13, 14, 15, 16])
        for index in range(10, 17):
            self.assertEqual(manager.index_to_node(index), 0)
        self.assertEqual(manager.customer_indices(), list(range(1, 10)))

    def test_round_trip(self):
        manager = RoutingIndexManager(6, 3, 2)
        for node in range(6):
            self.assertEqual(manager.index_to_node(manager.node_to_index(node)), node)
        self.assertEqual(manager.get_start_index(0), 2)
        self.assertEqual(manager.nodes_to_indices([1, 3]), [1, 3])
        self.assertEqual(manager.indices_to_nodes([manager.get_end_index(2)]), [2])
        self.assertNotIn(2, manager.customer_indices())

    def test_start_and_end_queries(self):
        manager = RoutingIndexManager(4, 2, 0)
        start, end = manager.get_start_index(1), manager.get_end_index(1)
        self.assertTrue(manager.is_start(start))
        self.assertTrue(manager.is_end(end))
        self.assertFalse(manager.is_end(start))
        self.assertEqual(manager.vehicle_of_start(start), 1)
        self.assertEqual(manager.vehicle_of_end(end), 1)
        self.assertIsNone(manager.vehicle_of_end(1))

    def test_multiple_depots(self):
        manager = RoutingIndexManager(3, 2, starts=[0, 1], ends=[0, 1])
        self.assertEqual(manager.get_start_index(0), 0)
        self.assertEqual(manager.get_start_index(1), 1)
        self.assertEqual(manager.get_end_index(0), 3)
        self.assertEqual(manager.get_end_index(1), 4)
        self.assertEqual(manager.customer_indices(), [2])

    def test_out_of_range(self):
        manager = RoutingIndexManager(10, 4, 0)
        with self.assertRaises(InvalidIndexError):
            manager.index_to_node(17)
        with self.assertRaises(InvalidIndexError):
            manager.node_to_index(10)
        with self.assertRaises(InvalidIndexError):
            manager.get_start_index(4)
        with self.assertRaises(InvalidIndexError):
            RoutingIndexManager(3, 1, depot=5)

    def test_invalid_construction(self):
        with self.assertRaises(InvalidModelError):
            RoutingIndexManager(0, 1)
        with self.assertRaises(InvalidModelError):
            RoutingIndexManager(3, 0)
        with self.assertRaises(InvalidModelError):
            RoutingIndexManager(3, 2, starts=[0, 0])


class TestRoutingModel(unittest.TestCase):
    """Test evaluators, dimensions and assignments on a 4-node asymmetric instance."""

    def setUp(self):
        # Indices: 0..3 nodes, 4 = start of vehicle 1, 5/6 = ends of vehicles 0/1
        self.manager = RoutingIndexManager(4, 2, 0)
        self.model = RoutingModel(self.manager)
        self.transit = self.model.register_transit_matrix(ASYMMETRIC_MATRIX)
        self.model.set_arc_cost_evaluator_of_all_vehicles(self.transit)
        self.demand = self.model.register_unary_transit_vector([0, 1, 1, 2])

    def test_callback_evaluator(self):
        manager = self.manager

        def distance_callback(from_index, to_index):
            return ASYMMETRIC_MATRIX[manager.index_to_node(from_index)][manager.index_to_node(to_index)]

        model = RoutingModel(manager)
        transit = model.register_transit_callback(distance_callback)
        model.set_arc_cost_evaluator_of_all_vehicles(transit)
        model.close_model()
        self.assertEqual(model.cost_matrix(0).shape, (7, 7))
        self.assertEqual(int(model.cost_matrix(1)[4, 2]), 9)

    def test_arc_costs(self):
        self.assertEqual(self.model.get_arc_cost_for_vehicle(4, 1, 1), 2)
        self.assertEqual(self.model.get_arc_cost_for_vehicle(1, 5, 0), 1)
        self.assertEqual(self.model.get_arc_cost_for_vehicle(2, 3, 0), 8)
        # Unused vehicle: start -> end costs nothing
        self.assertEqual(self.model.get_arc_cost_for_vehicle(0, 5, 0), 0)
        self.assertEqual(self.model.get_arc_cost_for_vehicle(4, 6, 1), 0)

    def test_structure_queries(self):
        self.assertEqual(self.model.vehicles(), 2)
        self.assertEqual(self.model.size(), 5)
        self.assertEqual(self.model.start(1), 4)
        self.assertEqual(self.model.end(0), 5)
        self.assertEqual(self.model.customer_indices(), [1, 2, 3])

    def test_close_model_caches_costs(self):
        self.model.close_model()
        self.assertTrue(self.model.is_closed)
        matrix = self.model.cost_matrix(0)
        self.assertEqual(int(matrix[0, 5]), 0)
        self.assertEqual(int(matrix[3, 5]), 6)
        self.assertFalse(matrix.flags.writeable)

    def test_closed_model_cannot_change(self):
        self.model.close_model()
        with self.assertRaises(InvalidModelError):
            self.model.register_transit_callback(lambda i, j: 0)
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension(self.demand, 0, 3, True, "Capacity")

    def test_unknown_evaluator(self):
        with self.assertRaises(InvalidModelError):
            self.model.set_arc_cost_evaluator_of_all_vehicles(99)
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension(42, 0, 3, True, "Capacity")

    def test_dimension_validation(self):
        self.model.add_dimension(self.demand, 0, 3, True, "Capacity")
        self.assertTrue(self.model.has_dimension("Capacity"))
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension(self.demand, 0, 3, True, "Capacity")
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension(self.demand, -1, 3, True, "Other")
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension(self.demand, 0, -3, True, "Other")
        with self.assertRaises(InvalidModelError):
            self.model.add_dimension_with_vehicle_capacity(self.demand, 0, [3], True, "Other")
        with self.assertRaises(InvalidModelError):
            self.model.get_dimension("Missing")

    def test_capacity_cumuls(self):
        dimension = self.model.add_dimension(self.demand, 0, 3, True, "Capacity")
        self.model.close_model()
        # Unary transits count the demand of the node being left
        self.assertEqual(dimension.route_cumuls(0, [0, 1, 3, 5]), [0, 0, 1, 3])
        self.assertIsNone(dimension.route_cumuls(0, [0, 1, 2, 3, 5]))
        self.assertTrue(dimension.is_feasible(1, [4, 3, 6]))
        self.assertEqual(dimension.transit(3, 5), 2)

    def test_slack_and_free_start(self):
        negative = self.model.register_transit_callback(lambda i, j: -1)
        fixed = self.model.add_dimension(negative, 0, 5, True, "Fixed")
        slack = self.model.add_dimension(negative, 1, 5, True, "Slack")
        free = self.model.add_dimension(negative, 0, 5, False, "Free")
        self.model.close_model()

        path = [0, 1, 5]
        self.assertIsNone(fixed.route_cumuls(0, path))
        self.assertEqual(slack.route_cumuls(0, path), [0, 0, 0])
        self.assertEqual(free.route_cumuls(0, path), [2, 1, 0])

    def test_per_vehicle_cost_evaluator(self):
        doubled = self.model.register_transit_matrix((2 * np.array(ASYMMETRIC_MATRIX)).tolist())
        self.model.set_arc_cost_evaluator_of_vehicle(doubled, 1)
        self.assertEqual(self.model.get_arc_cost_for_vehicle(4, 1, 1), 4)
        self.assertEqual(self.model.get_arc_cost_for_vehicle(0, 1, 0), 2)
        with self.assertRaises(InvalidIndexError):
            self.model.set_arc_cost_evaluator_of_vehicle(doubled, 2)

    def test_register_matrix_shape(self):
        with self.assertRaises(InvalidModelError):
            self.model.register_transit_matrix([[0, 1], [1, 0]])
        with self.assertRaises(InvalidModelError):
            self.model.register_unary_transit_vector([0, 1])

    def test_build_assignment(self):
        self.model.add_dimension_with_vehicle_capacity(self.demand, 0, [2, 3], True, "Capacity")
        assignment = self.model.build_assignment([[1, 3], [2]])

        # 0->1 (2) + 1->3 (4) + 3->0 (6), then 0->2 (9) + 2->0 (15)
        self.assertEqual(assignment.objective_value, 36)
        self.assertEqual(assignment.next(0), 1)
        self.assertEqual(assignment.next(3), 5)
        self.assertEqual(assignment.next(4), 2)
        self.assertEqual(assignment.next(2), 6)
        self.assertEqual(assignment.vehicle(2), 1)
        with self.assertRaises(InvalidIndexError):
            assignment.next(5)

        self.assertEqual(self.model.routes_from_assignment(assignment), [[1, 3], [2]])
        self.assertEqual(self.model.get_cumul_values("Capacity", assignment, 0), [0, 0, 1, 3])
        self.assertEqual(self.model.get_cumul_values("Capacity", assignment, 1), [0, 0, 1])

    def test_status_before_solve(self):
        self.assertEqual(self.model.status, RoutingStatus.NOT_SOLVED)


if __name__ == '__main__':
    unittest.main()
