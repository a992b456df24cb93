import pytest
import uuid
from datetime import datetime
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet
from apps.packages.models import CustomerPackage, ServiceRecord
from apps.vouchers.models import Voucher, VoucherStatus


def authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def local(year, month, day, hour=12):
    return timezone.make_aware(datetime(year, month, day, hour))


@pytest.fixture
def stats_outlet(db):
    return Outlet.objects.create(name='Anna Nagar', code='ANN')


@pytest.fixture
def stats_other_outlet(db):
    return Outlet.objects.create(name='Velachery', code='VEL')


@pytest.fixture
def stats_admin(db):
    return User.objects.create_user(username='stats-admin', password='TestPass123!', role=UserRole.ADMIN)


@pytest.fixture
def stats_staff(db, stats_outlet):
    return User.objects.create_user(
        username='stats-desk',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=stats_outlet,
    )


@pytest.fixture
def admin_client(stats_admin):
    return authenticate(APIClient(), stats_admin)


@pytest.fixture
def staff_client(stats_staff):
    return authenticate(APIClient(), stats_staff)


def make_voucher(voucher_id, outlet, issue_date, expiry_date, status=VoucherStatus.ISSUED,
                 redeemed_date=None):
    return Voucher.objects.create(
        id=voucher_id,
        recipient_name='Guest',
        recipient_mobile='9000000000',
        outlet=outlet,
        discount_percentage=10,
        bill_no='B-1',
        issue_date=issue_date,
        expiry_date=expiry_date,
        status=status,
        redeemed_date=redeemed_date,
    )


@pytest.fixture
def march_vouchers(db, stats_outlet, stats_other_outlet):
    """
    March 2026 at Anna Nagar: three issued, one redeemed in March, one
    expired in March, one issued in February and redeemed in March.
    Velachery: one issued in March.
    """
    return [
        make_voucher('VC-MAR00001', stats_outlet, local(2026, 3, 2), local(2099, 4, 1)),
        make_voucher('VC-MAR00002', stats_outlet, local(2026, 3, 3), local(2026, 4, 2),
                     status=VoucherStatus.REDEEMED, redeemed_date=local(2026, 3, 10)),
        make_voucher('VC-MAR00003', stats_outlet, local(2026, 3, 1), local(2026, 3, 20),
                     status=VoucherStatus.EXPIRED),
        make_voucher('VC-FEB00001', stats_outlet, local(2026, 2, 20), local(2026, 3, 22),
                     status=VoucherStatus.REDEEMED, redeemed_date=local(2026, 3, 5)),
        make_voucher('VC-VEL00001', stats_other_outlet, local(2026, 3, 4), local(2099, 4, 3)),
    ]


@pytest.fixture
def march_packages(db, stats_outlet, stats_other_outlet):
    """
    Anna Nagar: one active package (3000 left, drawn in February) and one
    sold and used up in March (1500). Velachery: one untouched package.
    """
    active = CustomerPackage.objects.create(
        customer_name='Priya',
        customer_mobile='9876543210',
        template_name='Pay 5000 Get 7000',
        package_value=Decimal('5000.00'),
        service_value=Decimal('7000.00'),
        outlet=stats_outlet,
        assigned_date=local(2026, 2, 15),
        remaining_service_value=Decimal('3000.00'),
    )
    used_up = CustomerPackage.objects.create(
        customer_name='Kavya',
        customer_mobile='9876500000',
        template_name='Pay 1000 Get 1500',
        package_value=Decimal('1000.00'),
        service_value=Decimal('1500.00'),
        outlet=stats_outlet,
        assigned_date=local(2026, 3, 8),
        remaining_service_value=Decimal('0.00'),
    )
    CustomerPackage.objects.create(
        customer_name='Meena',
        customer_mobile='9111111111',
        template_name='Pay 1000 Get 1500',
        package_value=Decimal('1000.00'),
        service_value=Decimal('1500.00'),
        outlet=stats_other_outlet,
        assigned_date=local(2026, 3, 9),
        remaining_service_value=Decimal('1500.00'),
    )

    rows = [
        (active, 'Haircut', '1000.00', local(2026, 2, 15)),
        (active, 'Hair Spa', '3000.00', local(2026, 2, 28)),
        (used_up, 'Facial', '1500.00', local(2026, 3, 8)),
    ]
    for package, name, value, when in rows:
        ServiceRecord.objects.create(
            customer_package=package,
            service_name=name,
            service_value=Decimal(value),
            redeemed_date=when,
            transaction_id=uuid.uuid4(),
        )
    return active, used_up
