"""
Dimensions: quantities accumulated along routes.

For a path p0..pk driven by vehicle v:
    cumul(p_{j+1}) = cumul(p_j) + transit(p_j, p_{j+1}) + slack_j
    0 <= slack_j <= slack_max
    0 <= cumul(p_j) <= capacity(v)
"""

from typing import List, Optional, Sequence

import numpy as np

from cvrp.models.evaluators import TransitEvaluator


class Dimension:
    """A named dimension with per-vehicle capacity."""

    def __init__(self,
                 name: str,
                 evaluator: TransitEvaluator,
                 evaluator_index: int,
                 slack_max: int,
                 capacities: Sequence[int],
                 fix_start_cumul_to_zero: bool):
        self.name = name
        self.evaluator = evaluator
        self.evaluator_index = evaluator_index
        self.slack_max = int(slack_max)
        self.capacities = [int(c) for c in capacities]
        self.fix_start_cumul_to_zero = fix_start_cumul_to_zero

    def transit(self, from_index: int, to_index: int) -> int:
        return self.evaluator(from_index, to_index)

    def route_cumuls(self, vehicle: int, path: Sequence[int]) -> Optional[List[int]]:
        """
        Propagate cumul values along a full path (start .. end).

        The start cumul is 0 when fixed, otherwise the smallest value keeping
        the transit prefix sums non-negative. Slack is only spent lifting a
        negative cumul back to 0.

        Args:
            vehicle: Vehicle driving the path
            path: Routing indices including start and end

        Returns:
            Cumul value per path position, or None if the path is infeasible
        """
        capacity = self.capacities[vehicle]
        if len(path) < 2:
            return [0] if capacity >= 0 else None

        path_array = np.asarray(path, dtype=np.int64)
        transits = self.evaluator.matrix[path_array[:-1], path_array[1:]]

        start = 0
        if not self.fix_start_cumul_to_zero:
            lowest = int(np.cumsum(transits).min())
            start = max(0, -lowest)
        if start > capacity:
            return None

        cumuls = [start]
        current = start
        for transit in transits.tolist():
            current += transit
            if current < 0:
                if -current > self.slack_max:
                    return None
                current = 0
            if current > capacity:
                return None
            cumuls.append(current)
        return cumuls

    def is_feasible(self, vehicle: int, path: Sequence[int]) -> bool:
        return self.route_cumuls(vehicle, path) is not None

    def __repr__(self):
        return (f"Dimension(name={self.name!r}, slack_max={self.slack_max}, "
                f"capacities={self.capacities}, fix_start={self.fix_start_cumul_to_zero})")
