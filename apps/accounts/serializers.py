from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.outlets.models import Outlet
from apps.outlets.serializers import OutletMinimalSerializer

from .models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    """User serializer for profile display."""

    outlet = OutletMinimalSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'role',
            'outlet',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    class Meta:
        model = User
        fields = ['id', 'username']
        read_only_fields = fields


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    username = serializers.CharField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class StaffUserCreateSerializer(serializers.Serializer):
    """Serializer for creating staff accounts (admin)."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.USER)
    outlet = serializers.PrimaryKeyRelatedField(
        queryset=Outlet.objects.all(),
        required=False,
        allow_null=True,
        default=None,
    )

    def validate_username(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Username cannot be blank.")
        return value

    def validate(self, attrs):
        if attrs.get('role', UserRole.USER) == UserRole.USER and attrs.get('outlet') is None:
            raise serializers.ValidationError({
                'outlet': 'Outlet users must be assigned to an outlet.'
            })
        return attrs


class StaffUserUpdateSerializer(serializers.Serializer):
    """Serializer for updating staff accounts; every field optional."""

    username = serializers.CharField(max_length=150, required=False)
    password = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    outlet = serializers.PrimaryKeyRelatedField(
        queryset=Outlet.objects.all(),
        required=False,
        allow_null=True,
    )
    is_active = serializers.BooleanField(required=False)


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for changing the caller's password."""

    current_password = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs
