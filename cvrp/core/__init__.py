"""
Core utilities: exceptions and logging.
"""

from .exceptions import (
    CVRPException,
    InvalidProblemError,
    InvalidIndexError,
    InvalidModelError,
    InfeasibleSolutionError,
    CapacityViolationError,
    InvalidSolutionError,
    NoSolutionFoundError,
    InvalidConfigurationError,
)
from .logger import setup_logger, get_logger

__all__ = ['CVRPException', 'InvalidProblemError', 'InvalidIndexError', 'InvalidModelError',
           'InfeasibleSolutionError', 'CapacityViolationError', 'InvalidSolutionError',
           'NoSolutionFoundError', 'InvalidConfigurationError', 'setup_logger', 'get_logger']
