"""
Staff account management service.

Admins create, update and delete staff accounts. Outlet users must
always be bound to an outlet; admins may have none.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.accounts.models import UserRole
from apps.outlets.models import Outlet

from .exceptions import (
    UserNotFoundError,
    DuplicateUsernameError,
    OutletRequiredError,
    CannotDeleteSelfError,
    PasswordConfirmationError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

_UNSET = object()


def check_outlet_binding(role, outlet):
    if role == UserRole.USER and outlet is None:
        raise OutletRequiredError("Outlet users must be assigned to an outlet")


@transaction.atomic
def create_staff_user(
    *,
    username: str,
    password: str,
    role: str = UserRole.USER,
    outlet: Optional[Outlet] = None
) -> User:
    """
    Create a staff account.

    Raises:
        DuplicateUsernameError: If the username is taken
        OutletRequiredError: If an outlet user has no outlet
    """
    check_outlet_binding(role, outlet)

    if User.objects.filter(username=username).exists():
        raise DuplicateUsernameError(f"Username {username} is already taken")

    user = User.objects.create_user(
        username=username,
        password=password,
        role=role,
        outlet=outlet,
    )
    logger.info("Created %s account %s", role, username)
    return user


@transaction.atomic
def update_staff_user(
    *,
    user_id: UUID,
    username: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[str] = None,
    outlet=_UNSET,
    is_active: Optional[bool] = None
) -> User:
    """
    Update a staff account. Only supplied fields change.

    Passing outlet=None explicitly unassigns the outlet; omitting it
    leaves the current outlet untouched. A new password is re-hashed.

    Raises:
        UserNotFoundError: If user doesn't exist
        DuplicateUsernameError: If the new username belongs to someone else
        OutletRequiredError: If the result would be an outlet user without outlet
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    if username is not None and username != user.username:
        if User.objects.filter(username=username).exclude(id=user.id).exists():
            raise DuplicateUsernameError(f"Username {username} is already taken")
        user.username = username

    if role is not None:
        user.role = role
    if outlet is not _UNSET:
        user.outlet = outlet
    if is_active is not None:
        user.is_active = is_active

    check_outlet_binding(user.role, user.outlet)

    if password:
        user.set_password(password)

    user.save()
    logger.info("Updated account %s", user.username)
    return user


@transaction.atomic
def delete_staff_user(*, user_id: UUID, deleted_by: User) -> None:
    """
    Delete a staff account.

    Raises:
        CannotDeleteSelfError: If the admin targets their own account
        UserNotFoundError: If user doesn't exist
    """
    if str(user_id) == str(deleted_by.id):
        raise CannotDeleteSelfError("You cannot delete your own account")

    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    username = user.username
    user.delete()
    logger.info("Account %s deleted by %s", username, deleted_by.username)


@transaction.atomic
def change_password(*, user_id: UUID, current_password: str, new_password: str) -> None:
    """
    Change a user's own password after verifying the current one.

    Raises:
        PasswordConfirmationError: If the current password is wrong
    """
    user = (
        User.objects
        .select_for_update()
        .get(id=user_id)
    )

    if not user.check_password(current_password):
        raise PasswordConfirmationError("Current password is incorrect")

    user.set_password(new_password)
    user.save(update_fields=['password'])
    logger.info("Password changed for %s", user.username)
