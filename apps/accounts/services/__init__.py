"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    DuplicateUsernameError,
    OutletRequiredError,
    CannotDeleteSelfError,
    PasswordConfirmationError,
)
from .user_authentication import authenticate_user
from .staff_management import (
    create_staff_user,
    update_staff_user,
    delete_staff_user,
    change_password,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'DuplicateUsernameError',
    'OutletRequiredError',
    'CannotDeleteSelfError',
    'PasswordConfirmationError',
    # Services
    'authenticate_user',
    'create_staff_user',
    'update_staff_user',
    'delete_staff_user',
    'change_password',
]
