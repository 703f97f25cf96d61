"""
Solution reporter.
Extracts per-vehicle routes, loads and distances from an assignment and
renders the console report.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from cvrp.models.assignment import Assignment
from cvrp.models.problem import CVRPProblem
from cvrp.models.routing_model import RoutingModel


@dataclass
class RouteSummary:
    """One vehicle's route in a solution."""
    vehicle_id: int
    nodes: List[int] = field(default_factory=list)
    cumulative_loads: List[int] = field(default_factory=list)
    distance: int = 0
    load: int = 0
    capacity: int = 0

    @property
    def is_used(self) -> bool:
        return len(self.nodes) > 2

    @property
    def num_visits(self) -> int:
        return max(0, len(self.nodes) - 2)

    @property
    def utilization(self) -> float:
        """Load as a percentage of capacity."""
        if self.capacity <= 0:
            return 0.0
        return 100.0 * self.load / self.capacity

    def to_dict(self) -> Dict:
        return {
            'vehicle_id': int(self.vehicle_id),
            'nodes': [int(n) for n in self.nodes],
            'cumulative_loads': [int(l) for l in self.cumulative_loads],
            'distance': int(self.distance),
            'load': int(self.load),
            'capacity': int(self.capacity),
            'utilization': float(self.utilization),
            'num_visits': int(self.num_visits),
        }


class SolutionReporter:
    """Builds route summaries and the text report of an assignment."""

    def __init__(self, problem: CVRPProblem, model: RoutingModel):
        """
        Initialize reporter.

        Args:
            problem: Problem instance (demands and capacities)
            model: Routing model the assignment belongs to
        """
        self.problem = problem
        self.model = model
        self.manager = model.manager

    def extract_routes(self, assignment: Assignment) -> List[RouteSummary]:
        """
        Walk every vehicle's route from start to end.

        Args:
            assignment: Solved assignment

        Returns:
            One RouteSummary per vehicle, unused vehicles included
        """
        summaries = []
        for vehicle in range(self.model.vehicles()):
            summary = RouteSummary(
                vehicle_id=vehicle,
                capacity=int(self.problem.vehicle_capacities[vehicle]),
            )
            index = self.model.start(vehicle)
            route_load = 0
            route_distance = 0
            while not self.model.is_end(index):
                node = self.manager.index_to_node(index)
                route_load += self.problem.get_demand(node)
                summary.nodes.append(node)
                summary.cumulative_loads.append(route_load)
                previous_index = index
                index = assignment.next(index)
                route_distance += self.model.get_arc_cost_for_vehicle(previous_index, index, vehicle)

            summary.nodes.append(self.manager.index_to_node(index))
            summary.cumulative_loads.append(route_load)
            summary.distance = route_distance
            summary.load = route_load
            summaries.append(summary)
        return summaries

    @staticmethod
    def total_distance(summaries: List[RouteSummary]) -> int:
        return sum(s.distance for s in summaries)

    @staticmethod
    def total_load(summaries: List[RouteSummary]) -> int:
        return sum(s.load for s in summaries)

    def format_solution(self, assignment: Assignment) -> str:
        """
        Render the console report of an assignment.

        The header is "Objective: <value>" and every visit, the closing depot
        included, is printed as "<node> Load(<load after the visit>)". Unused
        vehicles are listed too, as "0 Load(0) ->  0 Load(0)" for depot 0.

        Args:
            assignment: Solved assignment

        Returns:
            Report text, one vehicle block per vehicle followed by the totals
        """
        summaries = self.extract_routes(assignment)
        lines = [f"Objective: {assignment.objective_value}"]

        for summary in summaries:
            visits = [f" {node} Load({load})"
                      for node, load in zip(summary.nodes, summary.cumulative_loads)]
            lines.append(f"Route for vehicle {summary.vehicle_id}:")
            lines.append(" -> ".join(visits))
            lines.append(f"Distance of the route: {summary.distance}m")
            lines.append(f"Load of the route: {summary.load}")
            lines.append("")

        lines.append(f"Total distance of all routes: {self.total_distance(summaries)}m")
        lines.append(f"Total load of all routes: {self.total_load(summaries)}")
        return "\n".join(lines)

    def print_solution(self, assignment: Assignment):
        """Print the report on console."""
        print(self.format_solution(assignment))
