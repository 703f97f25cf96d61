"""
Search parameters for the routing model.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Optional, Tuple


# Canonical local search operator names, in default application order
LOCAL_SEARCH_OPERATORS = ('two_opt', 'or_opt', 'relocate', 'exchange', 'cross')


class FirstSolutionStrategy(Enum):
    """Construction heuristic used to build the first assignment."""
    PATH_CHEAPEST_ARC = 'path_cheapest_arc'
    SAVINGS = 'savings'
    PARALLEL_CHEAPEST_INSERTION = 'parallel_cheapest_insertion'


class LocalSearchMetaheuristic(Enum):
    """Improvement strategy applied after construction."""
    GREEDY_DESCENT = 'greedy_descent'
    GUIDED_LOCAL_SEARCH = 'guided_local_search'


@dataclass
class SearchParameters:
    """Parameters of a single search run."""
    first_solution_strategy: FirstSolutionStrategy = FirstSolutionStrategy.PATH_CHEAPEST_ARC
    local_search_metaheuristic: LocalSearchMetaheuristic = LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH
    time_limit: float = 1.0
    max_iterations: Optional[int] = None
    guided_local_search_lambda_coefficient: float = 0.1
    local_search_operators: Tuple[str, ...] = field(default_factory=lambda: LOCAL_SEARCH_OPERATORS)
    or_opt_max_segment: int = 3
    log_search: bool = False

    def to_dict(self) -> Dict:
        """Convert parameters to the config dictionary format."""
        data = asdict(self)
        data['first_solution_strategy'] = self.first_solution_strategy.value
        data['local_search_metaheuristic'] = self.local_search_metaheuristic.value
        data['local_search_operators'] = list(self.local_search_operators)
        return data


def default_search_parameters() -> SearchParameters:
    """Parameters built from SEARCH_CONFIG."""
    from cvrp.config import SEARCH_CONFIG
    return search_parameters_from_config(SEARCH_CONFIG)


def search_parameters_from_config(config: Dict) -> SearchParameters:
    """
    Validate a search config dictionary and convert it to SearchParameters.

    Args:
        config: Dictionary in SEARCH_CONFIG format (missing keys use SEARCH_CONFIG)

    Returns:
        SearchParameters instance

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    from cvrp.config import SEARCH_CONFIG
    from cvrp.core.validators import ConfigValidator

    merged = dict(SEARCH_CONFIG)
    merged.update(config)
    ConfigValidator.validate_search_config(merged)

    return SearchParameters(
        first_solution_strategy=FirstSolutionStrategy(merged['first_solution_strategy']),
        local_search_metaheuristic=LocalSearchMetaheuristic(merged['local_search_metaheuristic']),
        time_limit=float(merged['time_limit']),
        max_iterations=merged['max_iterations'],
        guided_local_search_lambda_coefficient=float(merged['guided_local_search_lambda_coefficient']),
        local_search_operators=tuple(merged['local_search_operators']),
        or_opt_max_segment=int(merged['or_opt_max_segment']),
        log_search=bool(merged['log_search']),
    )
