"""
Domain exceptions for packages app.

Exception Hierarchy:
    PackagesServiceError (base)
    ├── TemplateNotFoundError
    ├── CustomerPackageNotFoundError
    ├── TransactionNotFoundError
    ├── InvalidPackageDataError
    ├── InsufficientBalanceError
    ├── PackageOperationNotAllowedError
    └── LedgerImmutableError
"""


class PackagesServiceError(Exception):
    """Base exception for package service errors."""
    pass


class TemplateNotFoundError(PackagesServiceError):
    """Raised when a package template does not exist."""
    pass


class CustomerPackageNotFoundError(PackagesServiceError):
    """Raised when a customer package does not exist."""
    pass


class TransactionNotFoundError(PackagesServiceError):
    """Raised when a package has no service records for a transaction id."""
    pass


class InvalidPackageDataError(PackagesServiceError):
    """Raised for non-positive values, empty service lists and similar input."""
    pass


class InsufficientBalanceError(PackagesServiceError):
    """Raised when services would exceed the package's remaining balance."""
    pass


class PackageOperationNotAllowedError(PackagesServiceError):
    """Raised when the caller may not assign or redeem packages."""
    pass


class LedgerImmutableError(PackagesServiceError):
    """Raised when a service record is modified or deleted."""
    pass
