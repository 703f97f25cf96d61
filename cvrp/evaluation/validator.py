"""
Solution validator for CVRP.
Re-checks a solution against the problem, independently of the search.
"""

from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from cvrp.core.exceptions import CapacityViolationError, InfeasibleSolutionError
from cvrp.models.assignment import Assignment
from cvrp.models.problem import CVRPProblem
from cvrp.models.routing_model import RoutingModel


class SolutionValidator:
    """Validates CVRP solutions for correctness and feasibility."""

    def __init__(self, problem: CVRPProblem):
        """
        Initialize solution validator.

        Args:
            problem: CVRP problem instance
        """
        self.problem = problem

    def validate_routes(self, routes: Sequence[Sequence[int]],
                        objective: Optional[int] = None) -> Dict:
        """
        Validate node routes, one per vehicle, each starting and ending at the depot.

        Args:
            routes: Node routes including both depot visits
            objective: Reported objective to compare with the route distances

        Returns:
            Validation results dictionary
        """
        errors, warnings = self._validate_structure(routes)
        violations = self._validate_capacity(routes)

        total_distance = sum(self._route_distance(route) for route in routes)
        if objective is not None and objective != total_distance:
            errors.append(f"Objective {objective} differs from route distances {total_distance}")

        return {
            'is_valid': len(errors) == 0,
            'is_feasible': len(errors) == 0 and len(violations) == 0,
            'errors': errors,
            'warnings': warnings,
            'capacity_violations': violations,
            'total_distance': total_distance,
        }

    def validate_assignment(self, model: RoutingModel, assignment: Assignment) -> Dict:
        """Validate an assignment produced by a routing model."""
        manager = model.manager
        routes = [manager.indices_to_nodes(assignment.route_path(model.start(v)))
                  for v in range(model.vehicles())]
        return self.validate_routes(routes, objective=assignment.objective_value)

    def _validate_structure(self, routes: Sequence[Sequence[int]]) -> Tuple[List[str], List[str]]:
        """Validate depot placement and customer coverage."""
        errors = []
        warnings = []
        depot = self.problem.depot

        if len(routes) > self.problem.num_vehicles:
            errors.append(f"Too many routes: {len(routes)} > {self.problem.num_vehicles}")

        visited = []
        for i, route in enumerate(routes):
            if len(route) < 2:
                errors.append(f"Route {i} must start and end at the depot")
                continue
            if route[0] != depot:
                errors.append(f"Route {i} doesn't start at depot")
            if route[-1] != depot:
                errors.append(f"Route {i} doesn't end at depot")

            customers = list(route[1:-1])
            if depot in customers:
                errors.append(f"Route {i} visits the depot in the middle")
            if not customers:
                warnings.append(f"Vehicle {i} is unused")
            visited.extend(c for c in customers if c != depot)

        duplicates = sorted(c for c, count in Counter(visited).items() if count > 1)
        if duplicates:
            errors.append(f"Customers visited multiple times: {duplicates}")

        expected = set(self.problem.customers)
        unknown = sorted(set(visited) - expected)
        if unknown:
            errors.append(f"Invalid customer IDs: {unknown}")
        missing = sorted(expected - set(visited))
        if missing:
            errors.append(f"Missing customers: {missing}")

        return errors, warnings

    def _validate_capacity(self, routes: Sequence[Sequence[int]]) -> List[Dict]:
        """Routes whose load exceeds the capacity of their vehicle."""
        violations = []
        for vehicle, route in enumerate(routes):
            if vehicle >= self.problem.num_vehicles:
                break
            capacity = int(self.problem.vehicle_capacities[vehicle])
            load = 0
            for node in route:
                load += self.problem.get_demand(node)
                if load > capacity:
                    violations.append({
                        'route_id': vehicle,
                        'load': load,
                        'capacity': capacity,
                        'node_id': node,
                    })
                    break
        return violations

    def _route_distance(self, route: Sequence[int]) -> int:
        return sum(self.problem.get_distance(a, b) for a, b in zip(route[:-1], route[1:]))

    @staticmethod
    def raise_if_infeasible(results: Dict):
        """
        Turn a validation result into an exception.

        Raises:
            CapacityViolationError: On the first capacity violation
            InfeasibleSolutionError: On structural errors
        """
        if results['errors']:
            raise InfeasibleSolutionError("Solution is invalid", {'errors': results['errors']})
        if results['capacity_violations']:
            violation = results['capacity_violations'][0]
            raise CapacityViolationError(
                route_id=violation['route_id'],
                current_load=violation['load'],
                capacity=violation['capacity'],
                node_id=violation['node_id'],
            )
