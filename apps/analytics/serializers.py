"""
Serializers for analytics app.

Input Serializers:
    StatsQuerySerializer - Validates year, month and outlet parameters

Response Serializers:
    VoucherStatsSerializer - Monthly voucher activity
    PackageStatsSerializer - Monthly package ledger figures
    DashboardResponseSerializer - Both plus the caller's outlets
"""

from django.utils import timezone
from rest_framework import serializers

from apps.outlets.serializers import OutletMinimalSerializer


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class StatsQuerySerializer(serializers.Serializer):
    """
    Validate the stats period and outlet filter.

    Query Parameters:
        year (int): Defaults to the current year
        month (int): 1-12, defaults to the current month
        outlet (uuid): Admins only; ignored for outlet users
    """

    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    outlet = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if 'year' in attrs and 'month' not in attrs:
            raise serializers.ValidationError("month is required when year is given")
        if 'month' in attrs and 'year' not in attrs:
            attrs['year'] = timezone.localdate().year
        return attrs


# =============================================================================
# Response Serializers (Documentation & Output)
# =============================================================================

class VoucherTotalsSerializer(serializers.Serializer):
    Issued = serializers.IntegerField()
    Redeemed = serializers.IntegerField()
    Expired = serializers.IntegerField()


class VoucherStatsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    outlet_id = serializers.UUIDField(allow_null=True)
    issued = serializers.IntegerField()
    redeemed = serializers.IntegerField()
    expired = serializers.IntegerField()
    totals = VoucherTotalsSerializer()


class PackageStatsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    outlet_id = serializers.UUIDField(allow_null=True)
    active_packages = serializers.IntegerField()
    total_remaining_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    redeemed_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    redemption_count = serializers.IntegerField()
    assigned_count = serializers.IntegerField()


class DashboardResponseSerializer(serializers.Serializer):
    vouchers = VoucherStatsSerializer()
    packages = PackageStatsSerializer()
    outlets = OutletMinimalSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    """Error response format."""

    error = serializers.CharField()
