"""
Validation layer for the CVRP solver.
Provides validators for configuration values.
"""

from typing import Dict

from cvrp.core.exceptions import InvalidConfigurationError
from cvrp.models.parameters import (
    FirstSolutionStrategy, LocalSearchMetaheuristic, LOCAL_SEARCH_OPERATORS
)


class ConfigValidator:
    """Validate configuration parameters."""

    @staticmethod
    def validate_search_config(config: Dict) -> bool:
        """
        Validate search configuration.

        Args:
            config: Search configuration dictionary

        Returns:
            True if valid, raises InvalidConfigurationError otherwise

        Raises:
            InvalidConfigurationError: If configuration is invalid
        """
        required_keys = [
            'first_solution_strategy',
            'local_search_metaheuristic',
            'time_limit',
            'max_iterations',
            'guided_local_search_lambda_coefficient',
            'local_search_operators',
            'or_opt_max_segment',
            'log_search',
        ]

        for key in required_keys:
            if key not in config:
                raise InvalidConfigurationError(
                    parameter=key,
                    value=None,
                    expected="Required parameter"
                )

        strategies = [s.value for s in FirstSolutionStrategy]
        if config['first_solution_strategy'] not in strategies:
            raise InvalidConfigurationError(
                parameter='first_solution_strategy',
                value=config['first_solution_strategy'],
                expected=f"one of {strategies}"
            )

        metaheuristics = [m.value for m in LocalSearchMetaheuristic]
        if config['local_search_metaheuristic'] not in metaheuristics:
            raise InvalidConfigurationError(
                parameter='local_search_metaheuristic',
                value=config['local_search_metaheuristic'],
                expected=f"one of {metaheuristics}"
            )

        time_limit = config['time_limit']
        if isinstance(time_limit, bool) or not isinstance(time_limit, (int, float)) or time_limit <= 0:
            raise InvalidConfigurationError(
                parameter='time_limit',
                value=time_limit,
                expected="> 0 seconds"
            )

        max_iterations = config['max_iterations']
        if max_iterations is not None:
            if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 1:
                raise InvalidConfigurationError(
                    parameter='max_iterations',
                    value=max_iterations,
                    expected="None or integer >= 1"
                )

        coefficient = config['guided_local_search_lambda_coefficient']
        if not isinstance(coefficient, (int, float)) or coefficient < 0:
            raise InvalidConfigurationError(
                parameter='guided_local_search_lambda_coefficient',
                value=coefficient,
                expected=">= 0"
            )

        operators = config['local_search_operators']
        if not operators:
            raise InvalidConfigurationError(
                parameter='local_search_operators',
                value=operators,
                expected="at least one operator"
            )
        unknown = [name for name in operators if name not in LOCAL_SEARCH_OPERATORS]
        if unknown:
            raise InvalidConfigurationError(
                parameter='local_search_operators',
                value=unknown,
                expected=f"subset of {list(LOCAL_SEARCH_OPERATORS)}"
            )

        segment = config['or_opt_max_segment']
        if isinstance(segment, bool) or not isinstance(segment, int) or not 1 <= segment <= 10:
            raise InvalidConfigurationError(
                parameter='or_opt_max_segment',
                value=segment,
                expected="[1, 10]"
            )

        return True

    @staticmethod
    def validate_logging_config(config: Dict) -> bool:
        """Validate logging configuration."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        level = config.get('level', 'INFO')
        if str(level).upper() not in valid_levels:
            raise InvalidConfigurationError(
                parameter='level',
                value=level,
                expected=f"one of {valid_levels}"
            )
        return True
