"""
Permission classes for vouchers app.

Listing is outlet-scoped, but redemption and lookup are deliberately
cross-outlet: a customer may bring a voucher to any branch.
"""

from rest_framework.permissions import BasePermission

from apps.accounts.models import UserRole


class CanViewVoucher(BasePermission):
    """
    Object permission for a single voucher.

    Admins see every voucher; outlet users see their own outlet's.
    """

    message = 'This voucher belongs to another outlet.'

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == UserRole.ADMIN:
            return True
        return user.outlet_id is not None and obj.outlet_id == user.outlet_id
