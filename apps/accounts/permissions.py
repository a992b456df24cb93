from rest_framework import permissions

from .models import UserRole


class IsAdminRole(permissions.BasePermission):
    """
    Permission: User must have the admin role.
    """

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.ADMIN)


class IsOutletUser(permissions.BasePermission):
    """
    Permission: User must be an outlet user bound to an outlet.

    Issuing vouchers and assigning packages happen on behalf of an outlet,
    so admins without one are turned away.
    """

    message = 'Only outlet users assigned to an outlet can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_issue())
