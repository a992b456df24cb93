"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidPeriodError
    ├── OutletNotFoundError
    └── NoOutletAssignedError

Usage:
    from apps.analytics.exceptions import AnalyticsServiceError

    try:
        data = AnalyticsQueries.dashboard(user=request.user, month=13)
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=400)
"""


class AnalyticsServiceError(Exception):
    """Base exception for all analytics service errors."""

    pass


class InvalidPeriodError(AnalyticsServiceError):
    """
    Raised when the requested month is invalid.

    Example:
        raise InvalidPeriodError("Invalid month: 13")
    """

    pass


class OutletNotFoundError(AnalyticsServiceError):
    """Raised when an admin filters by an outlet that does not exist."""

    pass


class NoOutletAssignedError(AnalyticsServiceError):
    """Raised when an outlet user without an outlet asks for stats."""

    pass
