from django.conf import settings
from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.outlets.serializers import OutletMinimalSerializer

from .models import Voucher, VoucherStatus, VoucherType


class VoucherSerializer(serializers.ModelSerializer):
    """Full voucher representation."""

    outlet = OutletMinimalSerializer(read_only=True)
    issued_by = UserMinimalSerializer(read_only=True)
    redeemed_by = UserMinimalSerializer(read_only=True)
    is_redeemable = serializers.BooleanField(read_only=True)

    class Meta:
        model = Voucher
        fields = [
            'id',
            'recipient_name',
            'recipient_mobile',
            'outlet',
            'voucher_type',
            'discount_percentage',
            'bill_no',
            'issue_date',
            'expiry_date',
            'status',
            'is_redeemable',
            'redeemed_date',
            'redemption_bill_no',
            'issued_by',
            'redeemed_by',
        ]
        read_only_fields = fields


class VoucherListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    outlet_name = serializers.CharField(source='outlet.name', read_only=True, default=None)

    class Meta:
        model = Voucher
        fields = [
            'id',
            'recipient_name',
            'recipient_mobile',
            'outlet_name',
            'voucher_type',
            'discount_percentage',
            'issue_date',
            'expiry_date',
            'status',
            'redeemed_date',
        ]
        read_only_fields = fields


class VoucherIssueSerializer(serializers.Serializer):
    """Input for issuing a voucher."""

    recipient_name = serializers.CharField(max_length=200)
    recipient_mobile = serializers.CharField(max_length=20)
    bill_no = serializers.CharField(max_length=50)
    voucher_type = serializers.ChoiceField(
        choices=VoucherType.choices,
        default=VoucherType.PARTNER
    )
    discount_percentage = serializers.IntegerField(
        min_value=1,
        max_value=100,
        required=False,
        help_text=f"Defaults to {settings.VOUCHER_DEFAULT_DISCOUNT_PERCENTAGE}"
    )
    validity_days = serializers.IntegerField(
        min_value=1,
        required=False,
        help_text=f"Defaults to {settings.VOUCHER_DEFAULT_VALIDITY_DAYS}"
    )
    expiry_date = serializers.DateTimeField(required=False)

    def validate_recipient_mobile(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Mobile number cannot be blank.")
        return value

    def validate(self, attrs):
        if 'validity_days' in attrs and 'expiry_date' in attrs:
            raise serializers.ValidationError(
                "Provide either validity_days or expiry_date, not both."
            )
        return attrs


class VoucherRedeemSerializer(serializers.Serializer):
    """Input for redeeming a voucher."""

    redemption_bill_no = serializers.CharField(max_length=50)


class VoucherFilterSerializer(serializers.Serializer):
    """Query parameters for the voucher list and CSV export."""

    status = serializers.ChoiceField(choices=VoucherStatus.choices, required=False)
    voucher_type = serializers.ChoiceField(choices=VoucherType.choices, required=False)
    outlet = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    issued_from = serializers.DateField(required=False)
    issued_to = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get('issued_from')
        end = attrs.get('issued_to')
        if start and end and start > end:
            raise serializers.ValidationError("issued_from must be before issued_to")
        return attrs


class VoucherLookupSerializer(serializers.Serializer):
    """Query parameters for the redeem screen lookup."""

    q = serializers.CharField(help_text="Voucher id or recipient mobile")
