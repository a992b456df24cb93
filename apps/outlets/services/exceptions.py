"""
Domain-specific exceptions for outlets app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class OutletsServiceError(Exception):
    """Base exception for all outlets service errors."""
    pass


class OutletNotFoundError(OutletsServiceError):
    """Raised when an outlet does not exist."""
    pass


class DuplicateOutletCodeError(OutletsServiceError):
    """Raised when another outlet already uses the code."""
    pass
