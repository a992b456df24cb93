"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class DuplicateUsernameError(AccountsServiceError):
    """Raised when a username is already taken."""
    pass


class OutletRequiredError(AccountsServiceError):
    """Raised when an outlet user is saved without an outlet."""
    pass


class CannotDeleteSelfError(AccountsServiceError):
    """Raised when an admin tries to delete their own account."""
    pass


class PasswordConfirmationError(AccountsServiceError):
    """Raised when the current password does not match."""
    pass
