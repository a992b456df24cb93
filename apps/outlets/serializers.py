from rest_framework import serializers
from .models import Outlet


class OutletSerializer(serializers.ModelSerializer):
    """Main serializer for outlets."""

    staff_count = serializers.SerializerMethodField()

    class Meta:
        model = Outlet
        fields = [
            'id',
            'name',
            'location',
            'address',
            'code',
            'gstin',
            'phone',
            'staff_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_staff_count(self, obj):
        return obj.staff.count()


class OutletMinimalSerializer(serializers.ModelSerializer):
    """Minimal outlet info for nested serialization."""

    class Meta:
        model = Outlet
        fields = ['id', 'name', 'code', 'location']
        read_only_fields = fields


class OutletCreateSerializer(serializers.Serializer):
    """Serializer for creating outlets."""

    name = serializers.CharField(max_length=200)
    code = serializers.CharField(max_length=20)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    gstin = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Outlet name cannot be blank.")
        return value

    def validate_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Outlet code cannot be blank.")
        return value


class OutletUpdateSerializer(OutletCreateSerializer):
    """Serializer for partial outlet updates; every field optional."""

    name = serializers.CharField(max_length=200, required=False)
    code = serializers.CharField(max_length=20, required=False)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    gstin = serializers.CharField(max_length=20, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
