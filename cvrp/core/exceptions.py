"""
Custom exceptions for the CVRP solver.
Provides specific exception classes for different error types.
"""


class CVRPException(Exception):
    """Base exception for the CVRP solver."""

    def __init__(self, message: str = "", details: dict = None):
        """
        Initialize CVRP exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidProblemError(CVRPException):
    """Raised when a problem instance is malformed or trivially infeasible."""
    pass


class InvalidIndexError(CVRPException):
    """Raised when a node, vehicle or routing index is out of range."""

    def __init__(self, kind: str = "index", value: int = None, upper: int = None):
        """
        Initialize invalid index error.

        Args:
            kind: What was indexed ('node', 'vehicle', 'index')
            value: Offending value
            upper: Exclusive upper bound of the valid range
        """
        message = f"Invalid {kind}"
        details = {}

        if value is not None:
            details[kind] = value
            message += f": {value}"
        if upper is not None:
            details['valid_range'] = f"[0, {upper})"
            message += f" (expected 0 <= {kind} < {upper})"

        super().__init__(message, details)


class InvalidModelError(CVRPException):
    """Raised when the routing model is used or built inconsistently."""
    pass


class InfeasibleSolutionError(CVRPException):
    """Raised when solution violates constraints."""
    pass


class CapacityViolationError(InfeasibleSolutionError):
    """Raised when vehicle capacity is exceeded."""

    def __init__(self, route_id: int = None, current_load: float = None,
                 capacity: float = None, node_id: int = None):
        """
        Initialize capacity violation error.

        Args:
            route_id: Route (vehicle) ID with violation
            current_load: Current load in route
            capacity: Vehicle capacity limit
            node_id: Node causing violation
        """
        message = "Vehicle capacity constraint violated"
        details = {}

        if route_id is not None:
            details['route_id'] = route_id
        if current_load is not None:
            details['current_load'] = current_load
        if capacity is not None:
            details['capacity'] = capacity
        if node_id is not None:
            details['node_id'] = node_id

        if details:
            message += f": Route {route_id} has load {current_load} > capacity {capacity}"

        super().__init__(message, details)


class InvalidSolutionError(CVRPException):
    """Raised when routes handed to the solver are structurally wrong."""
    pass


class NoSolutionFoundError(CVRPException):
    """Raised when the search ends without a feasible assignment."""

    def __init__(self, status: str = None, reason: str = None):
        """
        Initialize no-solution error.

        Args:
            status: Final routing status name
            reason: Reason for failure
        """
        message = "No solution found"
        details = {}

        if status:
            details['status'] = status
        if reason:
            details['reason'] = reason
            message += f": {reason}"

        super().__init__(message, details)


class InvalidConfigurationError(CVRPException):
    """Raised when configuration parameters are invalid."""

    def __init__(self, parameter: str = None, value: any = None,
                 expected: str = None):
        """
        Initialize invalid configuration error.

        Args:
            parameter: Parameter name
            value: Invalid value
            expected: Expected value or range
        """
        message = "Invalid configuration parameter"
        details = {}

        if parameter:
            details['parameter'] = parameter
        if value is not None:
            details['value'] = value
        if expected:
            details['expected'] = expected

        if parameter:
            message += f": {parameter} = {value}"
            if expected:
                message += f" (expected: {expected})"

        super().__init__(message, details)
