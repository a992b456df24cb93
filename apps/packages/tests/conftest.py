import pytest
import uuid
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet
from apps.packages.models import PackageTemplate, CustomerPackage, ServiceRecord


def authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def package_outlet(db):
    return Outlet.objects.create(
        name='Anna Nagar',
        code='ANN',
        location='Chennai',
        address='12, 2nd Avenue\nAnna Nagar, Chennai',
        gstin='33ABCDE1234F1Z5',
        phone='044-26161234',
    )


@pytest.fixture
def package_other_outlet(db):
    return Outlet.objects.create(name='Velachery', code='VEL', location='Chennai')


@pytest.fixture
def package_admin(db):
    return User.objects.create_user(
        username='package-admin',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def package_staff(db, package_outlet):
    return User.objects.create_user(
        username='ann-cashier',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=package_outlet,
    )


@pytest.fixture
def package_other_staff(db, package_other_outlet):
    return User.objects.create_user(
        username='vel-cashier',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=package_other_outlet,
    )


@pytest.fixture
def staff_client(package_staff):
    return authenticate(APIClient(), package_staff)


@pytest.fixture
def other_staff_client(package_other_staff):
    return authenticate(APIClient(), package_other_staff)


@pytest.fixture
def admin_client(package_admin):
    return authenticate(APIClient(), package_admin)


@pytest.fixture
def template(db):
    """Pay 5000 Get 7000."""
    return PackageTemplate.objects.create(
        name='Pay 5000 Get 7000',
        package_value=Decimal('5000.00'),
        service_value=Decimal('7000.00'),
    )


@pytest.fixture
def customer_package(db, template, package_outlet, package_staff):
    """A package with 2000 already drawn, leaving 5000."""
    package = CustomerPackage.objects.create(
        customer_name='Priya',
        customer_mobile='9876543210',
        template=template,
        template_name=template.name,
        package_value=template.package_value,
        service_value=template.service_value,
        outlet=package_outlet,
        assigned_date=timezone.now(),
        remaining_service_value=Decimal('5000.00'),
        assigned_by=package_staff,
    )
    transaction_id = uuid.uuid4()
    for name, value in [('Haircut', '800.00'), ('Hair Spa', '1200.00')]:
        ServiceRecord.objects.create(
            customer_package=package,
            service_name=name,
            service_value=Decimal(value),
            redeemed_date=package.assigned_date,
            transaction_id=transaction_id,
            recorded_by=package_staff,
        )
    return package


@pytest.fixture
def other_outlet_package(db, template, package_other_outlet, package_other_staff):
    return CustomerPackage.objects.create(
        customer_name='Meena',
        customer_mobile='9111111111',
        template=template,
        template_name=template.name,
        package_value=template.package_value,
        service_value=template.service_value,
        outlet=package_other_outlet,
        remaining_service_value=template.service_value,
        assigned_by=package_other_staff,
    )
