# Configuration parameters for the CVRP solver

# Search configuration
# Names are the lowercase member names of FirstSolutionStrategy / LocalSearchMetaheuristic
SEARCH_CONFIG = {
    'first_solution_strategy': 'path_cheapest_arc',
    'local_search_metaheuristic': 'guided_local_search',
    'time_limit': 1.0,               # seconds, wall clock
    'max_iterations': None,          # GLS iterations; None = run until time limit
    'guided_local_search_lambda_coefficient': 0.1,
    'local_search_operators': ['two_opt', 'or_opt', 'relocate', 'exchange', 'cross'],
    'or_opt_max_segment': 3,
    'log_search': False,             # log every improvement at INFO instead of DEBUG
}

# Search presets
SEARCH_PRESETS = {
    'fast': {
        'first_solution_strategy': 'path_cheapest_arc',
        'local_search_metaheuristic': 'greedy_descent',
        'time_limit': 0.2,
        'max_iterations': None,
        'local_search_operators': ['two_opt', 'relocate', 'exchange'],
        'or_opt_max_segment': 1,
    },
    'standard': {
        'first_solution_strategy': 'path_cheapest_arc',
        'local_search_metaheuristic': 'guided_local_search',
        'time_limit': 1.0,
        'max_iterations': None,
        'local_search_operators': ['two_opt', 'or_opt', 'relocate', 'exchange', 'cross'],
        'or_opt_max_segment': 3,
    },
    'thorough': {
        'first_solution_strategy': 'savings',
        'local_search_metaheuristic': 'guided_local_search',
        'time_limit': 10.0,
        'max_iterations': None,
        'guided_local_search_lambda_coefficient': 0.2,
        'local_search_operators': ['two_opt', 'or_opt', 'relocate', 'exchange', 'cross'],
        'or_opt_max_segment': 3,
    },
}

# Built-in instance: 10 nodes, depot 0, 4 identical vehicles
DEMO_INSTANCE = {
    'distance_matrix': [
        [0, 10, 20, 30, 45, 6, 7, 21, 23, 25],
        [23, 0, 12, 32, 3, 54, 5, 6, 7, 8],
        [24, 15, 0, 16, 37, 65, 2, 16, 21, 22],
        [25, 30, 17, 0, 16, 23, 34, 26, 23, 25],
        [43, 2, 32, 20, 0, 54, 14, 19, 23, 25],
        [6, 56, 63, 21, 52, 0, 9, 8, 21, 32],
        [6, 5, 3, 32, 12, 9, 0, 12, 7, 27],
        [22, 7, 14, 27, 18, 9, 14, 0, 44, 45],
        [24, 9, 21, 23, 21, 25, 6, 43, 0, 14],
        [25, 8, 22, 24, 24, 30, 22, 46, 13, 0],
    ],
    # Depot carries no demand
    'demands': [0, 200, 300, 400, 500, 600, 700, 800, 900, 1000],
    'vehicle_capacities': [5000, 5000, 5000, 5000],
    'num_vehicles': 4,
    'depot': 0,
}

# Logging configuration
LOGGING_CONFIG = {
    'level': 'INFO',
    'log_dir': 'logs',
    'log_to_file': False,
}

# Export configuration
EXPORT_CONFIG = {
    'output_dir': 'results',
    'routes_filename': 'routes.csv',
    'history_filename': 'search_history.csv',
    'summary_filename': 'summary.json',
}

# Visualization configuration
VIZ_CONFIG = {
    'figure_size': (10, 6),
    'dpi': 100,
    'font_size': 11,
    'convergence_filename': 'convergence.png',
    'route_loads_filename': 'route_loads.png',
}
