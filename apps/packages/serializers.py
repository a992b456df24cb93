from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.outlets.serializers import OutletMinimalSerializer

from .models import PackageTemplate, CustomerPackage, ServiceRecord


class PackageTemplateSerializer(serializers.ModelSerializer):
    """Template representation; also the create input (name may be blank)."""

    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    package_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0.01')
    )
    service_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0.01')
    )

    class Meta:
        model = PackageTemplate
        fields = ['id', 'name', 'package_value', 'service_value', 'created_at']
        read_only_fields = ['id', 'created_at']


class ServiceRecordSerializer(serializers.ModelSerializer):
    bill_no = serializers.CharField(read_only=True)

    class Meta:
        model = ServiceRecord
        fields = [
            'id',
            'service_name',
            'service_value',
            'redeemed_date',
            'transaction_id',
            'bill_no',
        ]
        read_only_fields = fields


class CustomerPackageSerializer(serializers.ModelSerializer):
    """Full customer package representation."""

    outlet = OutletMinimalSerializer(read_only=True)
    assigned_by = UserMinimalSerializer(read_only=True)
    invoice_number = serializers.CharField(read_only=True)
    redeemed_value = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = CustomerPackage
        fields = [
            'id',
            'customer_name',
            'customer_mobile',
            'template',
            'template_name',
            'package_value',
            'service_value',
            'remaining_service_value',
            'redeemed_value',
            'is_active',
            'outlet',
            'assigned_date',
            'assigned_by',
            'invoice_number',
        ]
        read_only_fields = fields


class CustomerPackageListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    outlet_name = serializers.CharField(source='outlet.name', read_only=True, default=None)

    class Meta:
        model = CustomerPackage
        fields = [
            'id',
            'customer_name',
            'customer_mobile',
            'template_name',
            'service_value',
            'remaining_service_value',
            'outlet_name',
            'assigned_date',
        ]
        read_only_fields = fields


class ServiceLineSerializer(serializers.Serializer):
    """One service drawn from a package."""

    service_name = serializers.CharField(max_length=200)
    service_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0.01')
    )


class AssignPackageSerializer(serializers.Serializer):
    """Input for selling a package to a customer."""

    template_id = serializers.UUIDField()
    customer_name = serializers.CharField(max_length=200)
    customer_mobile = serializers.CharField(max_length=20)
    initial_services = ServiceLineSerializer(many=True, required=False, default=list)
    assigned_date = serializers.DateTimeField(required=False)


class RedeemServicesSerializer(serializers.Serializer):
    """Input for drawing services from a package."""

    services = ServiceLineSerializer(many=True)
    redeemed_date = serializers.DateTimeField(required=False)

    def validate_services(self, value):
        if not value:
            raise serializers.ValidationError("At least one service is required.")
        return value


class PackageHistorySerializer(serializers.Serializer):
    """One redemption transaction with its services."""

    transaction_id = serializers.UUIDField()
    bill_no = serializers.CharField()
    redeemed_date = serializers.DateTimeField()
    total = serializers.DecimalField(max_digits=10, decimal_places=2)
    services = ServiceRecordSerializer(many=True)


class PackageFilterSerializer(serializers.Serializer):
    outlet = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    active = serializers.BooleanField(required=False, default=False)


class PackageLookupSerializer(serializers.Serializer):
    mobile = serializers.CharField(help_text="Customer mobile number")
