"""
Analytics Module
=================

Read-only monthly statistics for the Home screen: how many vouchers an
outlet issued, redeemed and lost to expiry, and how much prepaid service
value its packages still hold.

Classes:
    AnalyticsQueries: Static methods for voucher, package and dashboard stats.

Example:
    Stats for the caller's scope in October 2026::

        from apps.analytics.analytics import AnalyticsQueries

        outlet_id = AnalyticsQueries.resolve_outlet(user=request.user)
        stats = AnalyticsQueries.voucher_stats(year=2026, month=10, outlet_id=outlet_id)
        print(stats['issued'], stats['redeemed'], stats['expired'])

Note:
    Voucher stats run the expiry sweep first, so an overdue voucher is
    already counted as Expired. That sweep is the only write here.
"""

from datetime import datetime
from decimal import Decimal

from django.db.models import Sum, Count, Q, DecimalField
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import UserRole
from apps.outlets.models import Outlet
from apps.packages.models import CustomerPackage, ServiceRecord
from apps.vouchers.models import Voucher, VoucherStatus
from apps.vouchers.services import expire_overdue_vouchers

from .exceptions import InvalidPeriodError, OutletNotFoundError, NoOutletAssignedError


ZERO = Decimal('0.00')


class AnalyticsQueries:
    """
    Aggregate queries behind the analytics endpoints.

    Every method takes an already resolved outlet_id (None means every
    outlet) and returns plain dictionaries ready for the response
    serializers.
    """

    @staticmethod
    def resolve_outlet(user, outlet_id=None):
        """
        Outlet a user's stats are computed for.

        Admins may pick any outlet or none (all outlets). Outlet users are
        always pinned to their own outlet, whatever they ask for.

        Raises:
            OutletNotFoundError: If an admin asks for an unknown outlet.
            NoOutletAssignedError: If an outlet user has no outlet.
        """
        if user.role == UserRole.ADMIN:
            if outlet_id and not Outlet.objects.filter(id=outlet_id).exists():
                raise OutletNotFoundError(f"Outlet {outlet_id} not found")
            return outlet_id or None

        if user.outlet_id is None:
            raise NoOutletAssignedError("Your account is not assigned to an outlet")
        return user.outlet_id

    @staticmethod
    def month_bounds(year=None, month=None):
        """
        [start, end) of a calendar month as aware datetimes in local time.

        Defaults to the current month.

        Raises:
            InvalidPeriodError: If month is outside 1..12.
        """
        today = timezone.localdate()
        year = year or today.year
        month = month or today.month
        if not 1 <= month <= 12:
            raise InvalidPeriodError(f"Invalid month: {month}")

        tz = timezone.get_current_timezone()
        start = timezone.make_aware(datetime(year, month, 1), tz)
        if month == 12:
            end = timezone.make_aware(datetime(year + 1, 1, 1), tz)
        else:
            end = timezone.make_aware(datetime(year, month + 1, 1), tz)
        return start, end

    @staticmethod
    def voucher_stats(year=None, month=None, outlet_id=None):
        """
        Voucher activity for a month.

        Returns:
            dict: {
                'year', 'month', 'outlet_id',
                'issued': issued in the month,
                'redeemed': redeemed in the month (by redeemed_date),
                'expired': Expired vouchers whose expiry fell in the month,
                'totals': current count per status, all time
            }
        """
        expire_overdue_vouchers()
        start, end = AnalyticsQueries.month_bounds(year, month)

        vouchers = Voucher.objects.all()
        if outlet_id:
            vouchers = vouchers.filter(outlet_id=outlet_id)

        counts = vouchers.aggregate(
            issued=Count('id', filter=Q(issue_date__gte=start, issue_date__lt=end)),
            redeemed=Count('id', filter=Q(
                status=VoucherStatus.REDEEMED,
                redeemed_date__gte=start,
                redeemed_date__lt=end,
            )),
            expired=Count('id', filter=Q(
                status=VoucherStatus.EXPIRED,
                expiry_date__gte=start,
                expiry_date__lt=end,
            )),
        )

        totals = {choice: 0 for choice in VoucherStatus.values}
        for row in vouchers.values('status').annotate(count=Count('id')):
            totals[row['status']] = row['count']

        return {
            'year': start.year,
            'month': start.month,
            'outlet_id': outlet_id,
            'issued': counts['issued'],
            'redeemed': counts['redeemed'],
            'expired': counts['expired'],
            'totals': totals,
        }

    @staticmethod
    def package_stats(year=None, month=None, outlet_id=None):
        """
        Package ledger figures for a month.

        Service value redeemed in the month is attributed to the outlet
        that sold the package, not the one that recorded the visit.
        """
        start, end = AnalyticsQueries.month_bounds(year, month)

        packages = CustomerPackage.objects.all()
        records = ServiceRecord.objects.filter(redeemed_date__gte=start, redeemed_date__lt=end)
        if outlet_id:
            packages = packages.filter(outlet_id=outlet_id)
            records = records.filter(customer_package__outlet_id=outlet_id)

        money = DecimalField(max_digits=12, decimal_places=2)
        package_figures = packages.aggregate(
            active_packages=Count('id', filter=Q(remaining_service_value__gt=0)),
            total_remaining=Coalesce(Sum('remaining_service_value'), ZERO, output_field=money),
            assigned_this_month=Count(
                'id', filter=Q(assigned_date__gte=start, assigned_date__lt=end)
            ),
        )
        redeemed = records.aggregate(
            value=Coalesce(Sum('service_value'), ZERO, output_field=money),
            transactions=Count('transaction_id', distinct=True),
        )

        return {
            'year': start.year,
            'month': start.month,
            'outlet_id': outlet_id,
            'active_packages': package_figures['active_packages'],
            'total_remaining_value': package_figures['total_remaining'],
            'redeemed_value': redeemed['value'],
            'redemption_count': redeemed['transactions'],
            'assigned_count': package_figures['assigned_this_month'],
        }

    @staticmethod
    def visible_outlets(user):
        """Outlets a user can pick on the Home screen."""
        if user.role == UserRole.ADMIN:
            return Outlet.objects.all()
        return Outlet.objects.filter(id=user.outlet_id)

    @staticmethod
    def dashboard(user, year=None, month=None, outlet_id=None):
        """Voucher and package stats plus the caller's outlets in one payload."""
        outlet_id = AnalyticsQueries.resolve_outlet(user=user, outlet_id=outlet_id)
        return {
            'vouchers': AnalyticsQueries.voucher_stats(year=year, month=month, outlet_id=outlet_id),
            'packages': AnalyticsQueries.package_stats(year=year, month=month, outlet_id=outlet_id),
            'outlets': AnalyticsQueries.visible_outlets(user),
        }
