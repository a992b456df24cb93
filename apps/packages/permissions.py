from rest_framework.permissions import BasePermission

from apps.accounts.models import UserRole


class CanViewCustomerPackage(BasePermission):
    """Admins see every package; outlet users see packages sold at their outlet."""

    message = 'This package belongs to another outlet.'

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == UserRole.ADMIN:
            return True
        return user.outlet_id is not None and obj.outlet_id == user.outlet_id
