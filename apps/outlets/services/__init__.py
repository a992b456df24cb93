"""
Outlets app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    OutletsServiceError,
    OutletNotFoundError,
    DuplicateOutletCodeError,
)

from .outlet_management import (
    create_outlet,
    update_outlet,
    delete_outlet,
    get_outlet_by_id,
)


__all__ = [
    # Exceptions
    'OutletsServiceError',
    'OutletNotFoundError',
    'DuplicateOutletCodeError',

    # Outlet Management
    'create_outlet',
    'update_outlet',
    'delete_outlet',
    'get_outlet_by_id',
]
