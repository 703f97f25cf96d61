"""
Unit tests for the search engine, solver facade and solution reporting.
"""

import io
import os
import sys
import unittest
from contextlib import redirect_stdout

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cvrp.algorithms.search_engine import SearchEngine
from cvrp.algorithms.solver import CVRPSolver, solve_problem
from cvrp.core.exceptions import InvalidSolutionError, NoSolutionFoundError
from cvrp.evaluation.reporter import SolutionReporter
from cvrp.models.assignment import RoutingStatus
from cvrp.models.index_manager import RoutingIndexManager
from cvrp.models.parameters import (
    FirstSolutionStrategy, LocalSearchMetaheuristic, SearchParameters
)
from cvrp.models.problem import create_demo_problem
from cvrp.models.routing_model import RoutingModel

from instances import asymmetric_problem, line_problem, random_problem


def fast_parameters(**overrides) -> SearchParameters:
    params = SearchParameters(time_limit=2.0, max_iterations=15)
    for key, value in overrides.items():
        setattr(params, key, value)
    return params


class TestSearchEngine(unittest.TestCase):
    """Test the time-limited search through the routing model."""

    def _model(self, problem):
        return CVRPSolver(problem, fast_parameters()).build_model()

    def test_solve_success(self):
        model = self._model(random_problem(12, num_customers=10))
        assignment = model.solve_with_parameters(fast_parameters())

        self.assertIsNotNone(assignment)
        self.assertEqual(model.status, RoutingStatus.SUCCESS)
        stats = model.last_search_statistics
        for key in ('status', 'initial_objective', 'objective', 'improvement', 'iterations',
                    'moves_applied', 'elapsed_seconds', 'vehicles_used', 'history_points'):
            self.assertIn(key, stats)
        self.assertEqual(stats['objective'], assignment.objective_value)
        self.assertLessEqual(stats['objective'], stats['initial_objective'])
        self.assertLessEqual(stats['iterations'], 15)

    def test_history_is_non_increasing(self):
        model = self._model(random_problem(8, num_customers=10))
        assignment = model.solve_with_parameters(fast_parameters())
        history = model.last_search_history
        self.assertGreaterEqual(len(history), 1)
        objectives = [cost for _, cost in history]
        self.assertEqual(objectives, sorted(objectives, reverse=True))
        self.assertEqual(objectives[-1], assignment.objective_value)
        times = [t for t, _ in history]
        self.assertEqual(times, sorted(times))

    def test_time_limit(self):
        model = self._model(random_problem(21, num_customers=12))
        params = fast_parameters(time_limit=0.3, max_iterations=None)
        model.solve_with_parameters(params)
        self.assertLess(model.last_search_statistics['elapsed_seconds'], 0.3 + 2.0)

    def test_greedy_descent(self):
        model = self._model(random_problem(5))
        params = fast_parameters(local_search_metaheuristic=LocalSearchMetaheuristic.GREEDY_DESCENT)
        assignment = model.solve_with_parameters(params)
        self.assertIsNotNone(assignment)
        self.assertEqual(model.last_search_statistics['iterations'], 0)

    def test_every_first_solution_strategy(self):
        for strategy in FirstSolutionStrategy:
            with self.subTest(strategy=strategy.value):
                model = self._model(random_problem(14))
                assignment = model.solve_with_parameters(fast_parameters(first_solution_strategy=strategy))
                self.assertIsNotNone(assignment)

    def test_infeasible_model_fails(self):
        manager = RoutingIndexManager(3, 1, 0)
        model = RoutingModel(manager)
        transit = model.register_transit_matrix([[0, 1, 1], [1, 0, 1], [1, 1, 0]])
        model.set_arc_cost_evaluator_of_all_vehicles(transit)
        demand = model.register_unary_transit_vector([0, 3, 3])
        model.add_dimension(demand, 0, 5, True, "Capacity")

        self.assertIsNone(model.solve_with_parameters(fast_parameters()))
        self.assertEqual(model.status, RoutingStatus.FAIL)
        self.assertEqual(model.last_search_statistics['status'], 'fail')

    def test_solve_with_defaults(self):
        model = self._model(asymmetric_problem())
        assignment = model.solve()
        self.assertIsNotNone(assignment)
        self.assertEqual(model.status, RoutingStatus.SUCCESS)

    def test_solve_from_routes(self):
        problem = line_problem(4, capacities=(10, 10))
        model = self._model(problem)
        assignment = model.solve_from_routes([[4, 1], [3, 2]], fast_parameters())
        self.assertIsNotNone(assignment)
        # Single trip out and back along the line
        self.assertEqual(assignment.objective_value, 80)

    def test_solve_from_invalid_routes(self):
        model = self._model(line_problem(4, capacities=(10, 10)))
        with self.assertRaises(InvalidSolutionError):
            model.solve_from_routes([[1, 2], [2, 3, 4]], fast_parameters())
        with self.assertRaises(InvalidSolutionError):
            model.solve_from_routes([[1, 2], [3]], fast_parameters())
        with self.assertRaises(InvalidSolutionError):
            model.solve_from_routes([[1], [2], [3, 4]], fast_parameters())

    def test_solve_from_routes_over_capacity(self):
        model = self._model(line_problem(4, capacities=(2, 2)))
        self.assertIsNone(model.solve_from_routes([[1, 2, 3], [4]], fast_parameters()))
        self.assertEqual(model.status, RoutingStatus.FAIL)

    def test_engine_statistics_before_search(self):
        model = self._model(asymmetric_problem())
        engine = SearchEngine(model, fast_parameters())
        self.assertEqual(engine.get_statistics(), {'history_points': 0})


class TestCVRPSolver(unittest.TestCase):
    """Test the solver facade."""

    def test_capacity_dimension(self):
        solver = CVRPSolver(asymmetric_problem(), fast_parameters())
        model = solver.build_model()
        dimension = model.get_dimension("Capacity")
        self.assertEqual(dimension.capacities, [2, 3])
        self.assertEqual(dimension.slack_max, 0)
        self.assertTrue(dimension.fix_start_cumul_to_zero)

    def test_demo_instance(self):
        problem = create_demo_problem()
        result = CVRPSolver(problem, fast_parameters(time_limit=1.0, max_iterations=None)).solve()

        self.assertEqual(len(result.routes), 4)
        self.assertEqual(result.objective, result.total_distance)
        self.assertEqual(result.total_load, 5400)
        visited = sorted(n for route in result.routes for n in route.nodes[1:-1])
        self.assertEqual(visited, list(range(1, 10)))
        for route in result.routes:
            self.assertEqual(route.nodes[0], 0)
            self.assertEqual(route.nodes[-1], 0)
            self.assertLessEqual(route.load, 5000)
        self.assertGreaterEqual(len(result.used_routes), 2)

    def test_single_vehicle_split_by_capacity(self):
        # Demands force the four customers onto two vehicles
        problem = line_problem(4, capacities=(2, 2))
        result = solve_problem(problem, fast_parameters())
        self.assertEqual(len(result.used_routes), 2)
        self.assertTrue(all(r.load == 2 for r in result.routes))
        # Best split: {1, 2} and {3, 4}
        self.assertEqual(result.objective, 40 + 80)

    def test_no_solution(self):
        problem = line_problem(2, capacities=(1, 1))
        solver = CVRPSolver(problem, fast_parameters())
        with self.assertRaises(NoSolutionFoundError):
            solver.solve(initial_routes=[[1, 2], []])

    def test_result_to_dict(self):
        result = solve_problem(asymmetric_problem(), fast_parameters())
        data = result.to_dict()
        self.assertEqual(data['objective'], result.objective)
        self.assertEqual(len(data['routes']), 2)
        self.assertEqual(data['parameters']['first_solution_strategy'], 'path_cheapest_arc')


class TestSolutionReporter(unittest.TestCase):
    """Test route extraction and the console format."""

    def setUp(self):
        self.problem = asymmetric_problem()
        self.model = CVRPSolver(self.problem, fast_parameters()).build_model()
        self.reporter = SolutionReporter(self.problem, self.model)

    def test_extract_routes(self):
        assignment = self.model.build_assignment([[1, 2], [3]])
        routes = self.reporter.extract_routes(assignment)
        self.assertEqual(routes[0].nodes, [0, 1, 2, 0])
        self.assertEqual(routes[0].cumulative_loads, [0, 1, 2, 2])
        self.assertEqual(routes[0].distance, 23)
        self.assertEqual(routes[1].nodes, [0, 3, 0])
        self.assertEqual(routes[1].distance, 16)
        self.assertEqual(routes[1].load, 2)
        self.assertAlmostEqual(routes[0].utilization, 100.0)

    def test_format_solution(self):
        assignment = self.model.build_assignment([[1, 2], [3]])
        expected = "\n".join([
            "Objective: 39",
            "Route for vehicle 0:",
            " 0 Load(0) ->  1 Load(1) ->  2 Load(2) ->  0 Load(2)",
            "Distance of the route: 23m",
            "Load of the route: 2",
            "",
            "Route for vehicle 1:",
            " 0 Load(0) ->  3 Load(2) ->  0 Load(2)",
            "Distance of the route: 16m",
            "Load of the route: 2",
            "",
            "Total distance of all routes: 39m",
            "Total load of all routes: 4",
        ])
        self.assertEqual(self.reporter.format_solution(assignment), expected)

    def test_unused_vehicle(self):
        assignment = self.model.build_assignment([[], [1, 3]])
        text = self.reporter.format_solution(assignment)
        self.assertIn("Route for vehicle 0:\n 0 Load(0) ->  0 Load(0)\nDistance of the route: 0m", text)
        routes = self.reporter.extract_routes(assignment)
        self.assertFalse(routes[0].is_used)
        self.assertEqual(routes[1].num_visits, 2)

    def test_print_solution(self):
        assignment = self.model.build_assignment([[1, 2], [3]])
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.reporter.print_solution(assignment)
        self.assertTrue(buffer.getvalue().startswith("Objective: 39\n"))


if __name__ == '__main__':
    unittest.main()
