"""
Domain exceptions for vouchers app.

Exception Hierarchy:
    VouchersServiceError (base)
    ├── VoucherNotFoundError
    ├── VoucherNotRedeemableError
    ├── VoucherExpiredError
    ├── IssuerNotAllowedError
    └── InvalidVoucherDataError
"""


class VouchersServiceError(Exception):
    """Base exception for voucher service errors."""
    pass


class VoucherNotFoundError(VouchersServiceError):
    """Raised when no voucher matches the given id."""
    pass


class VoucherNotRedeemableError(VouchersServiceError):
    """Raised when redeeming a voucher that is not in Issued state."""
    pass


class VoucherExpiredError(VouchersServiceError):
    """Raised when redeeming an Issued voucher past its expiry date."""
    pass


class IssuerNotAllowedError(VouchersServiceError):
    """Raised when the caller may not issue vouchers (admin or no outlet)."""
    pass


class InvalidVoucherDataError(VouchersServiceError):
    """Raised for blank bill numbers, past expiry dates and similar input."""
    pass
