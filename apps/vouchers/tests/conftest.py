import pytest
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet
from apps.vouchers.models import Voucher, VoucherStatus, VoucherType


def authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def voucher_outlet(db):
    return Outlet.objects.create(name='Anna Nagar', code='ANN', location='Chennai')


@pytest.fixture
def voucher_other_outlet(db):
    return Outlet.objects.create(name='Velachery', code='VEL', location='Chennai')


@pytest.fixture
def voucher_admin(db):
    return User.objects.create_user(
        username='voucher-admin',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def voucher_staff(db, voucher_outlet):
    """Outlet user at Anna Nagar."""
    return User.objects.create_user(
        username='ann-desk',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=voucher_outlet,
    )


@pytest.fixture
def voucher_other_staff(db, voucher_other_outlet):
    """Outlet user at Velachery."""
    return User.objects.create_user(
        username='vel-desk',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=voucher_other_outlet,
    )


@pytest.fixture
def staff_client(api_client, voucher_staff):
    return authenticate(api_client, voucher_staff)


@pytest.fixture
def other_staff_client(voucher_other_staff):
    return authenticate(APIClient(), voucher_other_staff)


@pytest.fixture
def admin_client(voucher_admin):
    return authenticate(APIClient(), voucher_admin)


@pytest.fixture
def issued_voucher(db, voucher_outlet, voucher_staff):
    now = timezone.now()
    return Voucher.objects.create(
        id='VC-ISSUED01',
        recipient_name='Priya',
        recipient_mobile='9876543210',
        outlet=voucher_outlet,
        voucher_type=VoucherType.PARTNER,
        discount_percentage=15,
        bill_no='B-1001',
        issue_date=now,
        expiry_date=now + timedelta(days=30),
        issued_by=voucher_staff,
    )


@pytest.fixture
def overdue_voucher(db, voucher_outlet, voucher_staff):
    """Still Issued in the table, but its expiry date has passed."""
    now = timezone.now()
    return Voucher.objects.create(
        id='VC-OVERDUE1',
        recipient_name='Karthik',
        recipient_mobile='9000000001',
        outlet=voucher_outlet,
        discount_percentage=10,
        bill_no='B-0900',
        issue_date=now - timedelta(days=40),
        expiry_date=now - timedelta(days=10),
        issued_by=voucher_staff,
    )


@pytest.fixture
def other_outlet_voucher(db, voucher_other_outlet, voucher_other_staff):
    now = timezone.now()
    return Voucher.objects.create(
        id='VC-VELACH01',
        recipient_name='Meena',
        recipient_mobile='9111111111',
        outlet=voucher_other_outlet,
        voucher_type=VoucherType.FAMILY_AND_FRIENDS,
        discount_percentage=20,
        bill_no='V-2001',
        issue_date=now,
        expiry_date=now + timedelta(days=5),
        issued_by=voucher_other_staff,
    )
