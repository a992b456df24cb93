import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def outlet(db):
    """Create and return a test outlet."""
    return Outlet.objects.create(
        name='T. Nagar',
        code='TNG',
        location='Chennai',
        address='12 Usman Road\nT. Nagar, Chennai',
        gstin='33AAAAA0000A1Z5',
        phone='044-12345678',
    )


@pytest.fixture
def second_outlet(db):
    """Create and return a second outlet."""
    return Outlet.objects.create(name='Adyar', code='ADY', location='Chennai')


@pytest.fixture
def outlet_admin(db):
    """Create and return an admin account."""
    return User.objects.create_user(
        username='outlet-admin',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def outlet_staff(db, outlet):
    """Create and return an outlet user bound to the test outlet."""
    return User.objects.create_user(
        username='outlet-staff',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=outlet,
    )


@pytest.fixture
def admin_client(api_client, outlet_admin):
    """Return API client authenticated as admin."""
    refresh = RefreshToken.for_user(outlet_admin)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def staff_client(api_client, outlet_staff):
    """Return API client authenticated as outlet user."""
    refresh = RefreshToken.for_user(outlet_staff)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
