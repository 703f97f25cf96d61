"""
Main application entry point for the CVRP solver.
Solves the built-in 10-node instance and prints the routes.
"""

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional, Tuple

from cvrp.algorithms.solver import CVRPSolver, SolveResult
from cvrp.config import EXPORT_CONFIG, LOGGING_CONFIG, SEARCH_CONFIG, SEARCH_PRESETS, VIZ_CONFIG
from cvrp.core.exceptions import CVRPException
from cvrp.core.logger import setup_logger
from cvrp.core.validators import ConfigValidator
from cvrp.evaluation.result_exporter import ResultExporter
from cvrp.evaluation.validator import SolutionValidator
from cvrp.models.parameters import (
    FirstSolutionStrategy, LocalSearchMetaheuristic, search_parameters_from_config
)
from cvrp.models.problem import CVRPProblem, create_demo_problem


def main(argv: Optional[List[str]] = None):
    """Main application entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logger = setup_logger(
        'cvrp',
        log_file=args.log_file,
        level=getattr(logging, args.log_level),
        log_dir=LOGGING_CONFIG['log_dir'],
        log_to_file=args.log_file is not None or LOGGING_CONFIG['log_to_file'],
    )

    try:
        ConfigValidator.validate_logging_config(LOGGING_CONFIG)
        problem = create_demo_problem()
        logger.info(f"Problem loaded: {len(problem.customers)} customers, "
                    f"{problem.num_vehicles} vehicles, capacities {problem.vehicle_capacities.tolist()}")

        solver, result = run_solver(problem, args, logger)
        print(solver.format_solution(result))

        if args.export:
            export_results(problem, result, args.output, logger)
        if args.plot:
            plot_results(result, args.output, logger)

    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except CVRPException as e:
        logger.error(f"CVRP Error: {e}", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="CVRP solver: capacitated vehicle routing with guided local search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve the built-in instance with default settings (1s guided local search)
  cvrp-solve

  # Longer search with savings construction
  cvrp-solve --preset thorough

  # Plain descent, log every improvement
  cvrp-solve --metaheuristic greedy_descent --log-search

  # Export CSV/JSON results and a convergence plot
  cvrp-solve --export --plot --output results
        """
    )

    # Search options
    parser.add_argument('--preset', type=str, choices=sorted(SEARCH_PRESETS.keys()),
                        help='Search preset (overridden by explicit options)')
    parser.add_argument('--time-limit', type=float,
                        help=f"Search time limit in seconds (default: {SEARCH_CONFIG['time_limit']})")
    parser.add_argument('--strategy', type=str,
                        choices=[s.value for s in FirstSolutionStrategy],
                        help=f"First solution strategy (default: {SEARCH_CONFIG['first_solution_strategy']})")
    parser.add_argument('--metaheuristic', type=str,
                        choices=[m.value for m in LocalSearchMetaheuristic],
                        help=f"Improvement metaheuristic (default: {SEARCH_CONFIG['local_search_metaheuristic']})")
    parser.add_argument('--max-iterations', type=int,
                        help='Maximum guided local search iterations (default: until time limit)')
    parser.add_argument('--lambda-coefficient', type=float,
                        help='Guided local search penalty coefficient '
                             f"(default: {SEARCH_CONFIG['guided_local_search_lambda_coefficient']})")
    parser.add_argument('--log-search', action='store_true',
                        help='Log every improvement found during the search')

    # Output options
    parser.add_argument('--output', type=str, default=EXPORT_CONFIG['output_dir'],
                        help=f"Output directory (default: {EXPORT_CONFIG['output_dir']})")
    parser.add_argument('--export', action='store_true',
                        help='Export routes, search history and summary')
    parser.add_argument('--plot', action='store_true',
                        help='Save the search convergence plot')

    # Logging options
    parser.add_argument('--log-level', type=str, default=LOGGING_CONFIG['level'],
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help=f"Logging level (default: {LOGGING_CONFIG['level']})")
    parser.add_argument('--log-file', type=str,
                        help='Also write logs to this file')

    return parser


def build_search_config(args) -> Dict:
    """Merge SEARCH_CONFIG, the chosen preset and explicit options."""
    config = dict(SEARCH_CONFIG)
    if args.preset:
        config.update(SEARCH_PRESETS[args.preset])

    overrides = {
        'time_limit': args.time_limit,
        'first_solution_strategy': args.strategy,
        'local_search_metaheuristic': args.metaheuristic,
        'max_iterations': args.max_iterations,
        'guided_local_search_lambda_coefficient': args.lambda_coefficient,
    }
    config.update({key: value for key, value in overrides.items() if value is not None})
    if args.log_search:
        config['log_search'] = True
    return config


def run_solver(problem: CVRPProblem, args, logger: logging.Logger) -> Tuple[CVRPSolver, SolveResult]:
    """Solve the problem and validate the result."""
    parameters = search_parameters_from_config(build_search_config(args))
    logger.info(f"Search parameters: {parameters.to_dict()}")

    solver = CVRPSolver(problem, parameters)
    result = solver.solve()

    validation = SolutionValidator(problem).validate_routes(result.node_routes(), result.objective)
    for warning in validation['warnings']:
        logger.debug(f"Validation: {warning}")
    SolutionValidator.raise_if_infeasible(validation)

    stats = result.statistics
    logger.info(f"First solution {stats.get('initial_objective')}, best {stats.get('objective')} "
                f"after {stats.get('iterations', 0)} GLS iterations "
                f"in {stats.get('elapsed_seconds', 0.0):.3f}s")
    return solver, result


def export_results(problem: CVRPProblem, result: SolveResult, output_dir: str,
                   logger: logging.Logger) -> Dict[str, str]:
    """Export routes, history and summary files."""
    exporter = ResultExporter(output_dir)
    paths = exporter.export_all(problem, result, filenames={
        'routes': EXPORT_CONFIG['routes_filename'],
        'history': EXPORT_CONFIG['history_filename'],
        'summary': EXPORT_CONFIG['summary_filename'],
    })
    for kind, path in paths.items():
        logger.info(f"Exported {kind}: {path}")
    return paths


def plot_results(result: SolveResult, output_dir: str, logger: logging.Logger) -> List[str]:
    """Save the convergence plot and the vehicle load chart."""
    from cvrp.visualization.plotter import Plotter

    os.makedirs(output_dir, exist_ok=True)
    plotter = Plotter(VIZ_CONFIG)

    convergence_path = os.path.join(output_dir, VIZ_CONFIG['convergence_filename'])
    plotter.plot_convergence(result.history, save_path=convergence_path)
    logger.info(f"Convergence plot saved to: {convergence_path}")

    loads_path = os.path.join(output_dir, VIZ_CONFIG['route_loads_filename'])
    plotter.plot_route_loads(result.routes, save_path=loads_path)
    logger.info(f"Route load chart saved to: {loads_path}")
    return [convergence_path, loads_path]


if __name__ == "__main__":
    main()
