"""
Logging system for the CVRP solver.
Provides centralized logging with file and console handlers.
"""

import logging
import os
from datetime import datetime
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: Optional[str] = None,
                 level: int = logging.INFO, log_dir: str = "logs",
                 log_to_file: bool = True) -> logging.Logger:
    """
    Setup logger with console and (optionally) file handlers.

    Args:
        name: Logger name (usually 'cvrp' or __name__)
        log_file: Optional log file path. If None, uses default naming.
        level: Logging level (default: INFO)
        log_dir: Directory for log files (default: "logs")
        log_to_file: Attach a file handler (default: True)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger('cvrp', 'logs/cvrp.log')
        >>> logger.info("Starting guided local search...")
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        logger.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if not log_to_file:
        return logger

    # File handler
    if log_file is None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f'cvrp_{timestamp}.log')
    else:
        log_dir = os.path.dirname(log_file) if os.path.dirname(log_file) else log_dir
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, os.path.basename(log_file))

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.info(f"Logger initialized. Log file: {log_file}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get existing logger or create new one with default settings.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logger(name, log_to_file=False)

    return logger
